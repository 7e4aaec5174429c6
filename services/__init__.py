"""
Services Package

Actions invoked by the routes. Each takes the current user's id first and
returns a result dict (see ``services.results``).
"""

from .results import ok, fail, NOT_AUTHENTICATED

from .weeks import (
    parse_date,
    week_start,
    week_range,
    week_days,
    shift_week,
    current_week_start,
    step_day,
)

from .cache import QueryCache

from .meal_plans import (
    get_meal_plans,
    get_week,
    get_day,
    find_slot,
    add_meal_plan,
    add_custom_meal,
    remove_meal_plan,
    toggle_meal_complete,
)

from .copy_week import copy_week

from .filtering import filter_recipes, list_cuisines

from .recipes import (
    list_recipes,
    get_recipe,
    toggle_favorite,
    delete_recipe,
    upload_recipe_image,
)

from .generation import (
    build_recipe_prompt,
    parse_generated_recipe,
    save_generated_recipe,
    generate_recipe,
)

from .pantry import list_pantry, add_pantry_item, remove_pantry_item

from .dashboard import dashboard_stats

__all__ = [
    # Results
    'ok',
    'fail',
    'NOT_AUTHENTICATED',
    # Weeks
    'parse_date',
    'week_start',
    'week_range',
    'week_days',
    'shift_week',
    'current_week_start',
    'step_day',
    # Cache
    'QueryCache',
    # Meal plans
    'get_meal_plans',
    'get_week',
    'get_day',
    'find_slot',
    'add_meal_plan',
    'add_custom_meal',
    'remove_meal_plan',
    'toggle_meal_complete',
    'copy_week',
    # Recipes
    'filter_recipes',
    'list_cuisines',
    'list_recipes',
    'get_recipe',
    'toggle_favorite',
    'delete_recipe',
    'upload_recipe_image',
    # Generation
    'build_recipe_prompt',
    'parse_generated_recipe',
    'save_generated_recipe',
    'generate_recipe',
    # Pantry
    'list_pantry',
    'add_pantry_item',
    'remove_pantry_item',
    # Dashboard
    'dashboard_stats',
]
