"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db

from .profile import Profile
from .ingredient import Ingredient, PantryItem
from .recipe import Recipe, RecipeIngredient
from .mealplan import MealPlan

__all__ = [
    'db',
    'Profile',
    'Ingredient',
    'PantryItem',
    'Recipe',
    'RecipeIngredient',
    'MealPlan',
]
