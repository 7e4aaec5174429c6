"""
Recipe Models

Contains the Recipe and RecipeIngredient models for managing
recipes and their ingredient associations.
"""

from .base import db, utcnow


class Recipe(db.Model):
    """Recipe owned by one user, generated by the AI action or entered by hand."""
    __tablename__ = 'recipes'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True)
    name = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=True)
    cuisine_type = db.Column(db.String(50), nullable=True, index=True)
    difficulty = db.Column(db.String(10), nullable=True)  # easy / medium / hard
    prep_time = db.Column(db.Integer, nullable=True)  # minutes
    cooking_time = db.Column(db.Integer, nullable=True)  # minutes
    servings = db.Column(db.Integer, nullable=False, default=4)
    # [{"step": 1, "instruction": "...", "duration": "5 minutes"}, ...]
    instructions = db.Column(db.JSON, nullable=False, default=list)
    nutritional_info = db.Column(db.JSON, nullable=True)
    tips = db.Column(db.JSON, nullable=False, default=list)
    image_url = db.Column(db.String(255), nullable=True)
    is_favorite = db.Column(db.Boolean, nullable=False, default=False)
    ai_generated = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, default=utcnow, index=True)
    updated_at = db.Column(db.DateTime, default=utcnow, onupdate=utcnow)
    ingredients = db.relationship('RecipeIngredient', backref='recipe', lazy=True, cascade='all, delete-orphan')

    @property
    def total_time(self):
        return (self.prep_time or 0) + (self.cooking_time or 0)

    def summary_dict(self):
        """Fields shown in a meal-plan slot."""
        return {
            'id': self.id,
            'name': self.name,
            'cuisine_type': self.cuisine_type,
            'difficulty': self.difficulty,
            'prep_time': self.prep_time,
            'cooking_time': self.cooking_time,
            'servings': self.servings,
        }

    def to_dict(self, include_ingredients=False):
        data = {
            'id': self.id,
            'user_id': self.user_id,
            'name': self.name,
            'description': self.description,
            'cuisine_type': self.cuisine_type,
            'difficulty': self.difficulty,
            'prep_time': self.prep_time,
            'cooking_time': self.cooking_time,
            'servings': self.servings,
            'instructions': self.instructions or [],
            'nutritional_info': self.nutritional_info,
            'tips': self.tips or [],
            'image_url': self.image_url,
            'is_favorite': self.is_favorite,
            'ai_generated': self.ai_generated,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }
        if include_ingredients:
            data['ingredients'] = [ri.to_dict() for ri in self.ingredients if ri.ingredient]
        return data


class RecipeIngredient(db.Model):
    """Join table linking recipes to ingredients with a free-text quantity."""
    __tablename__ = 'recipe_ingredients'

    id = db.Column(db.Integer, primary_key=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipes.id', ondelete='CASCADE'), nullable=False, index=True)
    ingredient_id = db.Column(db.Integer, db.ForeignKey('ingredients.id', ondelete='CASCADE'), nullable=False, index=True)
    quantity = db.Column(db.String(100), nullable=False, default='')  # e.g. "2 cups"
    is_optional = db.Column(db.Boolean, nullable=False, default=False)
    notes = db.Column(db.String(500), nullable=True)
    ingredient = db.relationship('Ingredient')

    def to_dict(self):
        return {
            'id': self.id,
            'ingredient_id': self.ingredient_id,
            'name': self.ingredient.name if self.ingredient else None,
            'quantity': self.quantity,
            'is_optional': self.is_optional,
            'notes': self.notes,
        }
