"""
Dashboard Service

Counts shown on the landing page after login.
"""

from datetime import date

from models import MealPlan, Recipe
from .results import ok, storage_action


@storage_action('Failed to load dashboard')
def dashboard_stats(user_id, today=None):
    today = today or date.today()
    recipes = Recipe.query.filter_by(user_id=user_id)
    return ok(
        recipe_count=recipes.count(),
        favorite_count=recipes.filter_by(is_favorite=True).count(),
        upcoming_meal_count=MealPlan.query.filter(
            MealPlan.user_id == user_id,
            MealPlan.planned_date >= today,
        ).count(),
    )
