"""
Meal Plan Model

Contains the MealPlan model for the weekly meal-plan calendar.
"""

from .base import db, utcnow


class MealPlan(db.Model):
    """
    One filled meal slot: a (user, date, meal type) holding either a
    recipe or a free-text custom meal, never both.
    """
    __tablename__ = 'meal_plans'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'planned_date', 'meal_type', name='uq_meal_plan_slot'),
        db.CheckConstraint(
            '(recipe_id IS NULL) <> (custom_meal_name IS NULL)',
            name='ck_meal_plan_recipe_or_custom',
        ),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'), nullable=True, index=True)
    custom_meal_name = db.Column(db.String(200), nullable=True)
    planned_date = db.Column(db.Date, nullable=False, index=True)
    meal_type = db.Column(db.String(20), nullable=False)  # breakfast / lunch / dinner / snack
    is_completed = db.Column(db.Boolean, nullable=False, default=False)
    notes = db.Column(db.Text, nullable=True)
    created_at = db.Column(db.DateTime, default=utcnow)
    recipe = db.relationship('Recipe')

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'recipe_id': self.recipe_id,
            'custom_meal_name': self.custom_meal_name,
            'planned_date': self.planned_date.isoformat(),
            'meal_type': self.meal_type,
            'is_completed': self.is_completed,
            'notes': self.notes,
            'recipes': self.recipe.summary_dict() if self.recipe else None,
        }
