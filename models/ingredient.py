"""
Ingredient Models

Contains the Ingredient model and the per-user PantryItem that
points at it.
"""

from .base import db, utcnow


class Ingredient(db.Model):
    """
    Shared ingredient catalogue.

    Names are stored lower-cased and trimmed, so the unique index on name
    also makes lookups case-insensitive. Rows are created lazily the first
    time a generated recipe mentions a name that is not present yet.
    """
    __tablename__ = 'ingredients'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(200), unique=True, nullable=False, index=True)
    category = db.Column(db.String(50), nullable=True, index=True)
    created_at = db.Column(db.DateTime, default=utcnow)

    @staticmethod
    def normalize_name(name):
        return ' '.join((name or '').split()).lower()

    @classmethod
    def get_or_create(cls, name, category=None):
        """Case-insensitive lookup; adds (and flushes) a new row when missing."""
        normalized = cls.normalize_name(name)
        ingredient = cls.query.filter(db.func.lower(cls.name) == normalized).first()
        if ingredient is None:
            ingredient = cls(name=normalized, category=category)
            db.session.add(ingredient)
            db.session.flush()
        return ingredient

    def to_dict(self):
        return {'id': self.id, 'name': self.name, 'category': self.category}


class PantryItem(db.Model):
    """Ingredient a user has on hand, with optional quantity and expiry."""
    __tablename__ = 'user_pantry'
    __table_args__ = (
        db.UniqueConstraint('user_id', 'ingredient_id', name='uq_pantry_user_ingredient'),
    )

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('profiles.id', ondelete='CASCADE'), nullable=False, index=True)
    ingredient_id = db.Column(db.Integer, db.ForeignKey('ingredients.id', ondelete='CASCADE'), nullable=False)
    quantity = db.Column(db.String(100), nullable=True)
    expiry_date = db.Column(db.Date, nullable=True)
    added_at = db.Column(db.DateTime, default=utcnow)
    ingredient = db.relationship('Ingredient')

    def to_dict(self):
        return {
            'id': self.id,
            'ingredient_id': self.ingredient_id,
            'name': self.ingredient.name if self.ingredient else None,
            'quantity': self.quantity,
            'expiry_date': self.expiry_date.isoformat() if self.expiry_date else None,
            'added_at': self.added_at.isoformat() if self.added_at else None,
        }
