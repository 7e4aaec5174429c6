"""
Validation Constants

Contains whitelist values for validating user input to prevent
injection attacks and ensure data integrity.
"""

# Valid meal types for meal planning (order is the calendar row order)
MEAL_TYPES = ('breakfast', 'lunch', 'dinner', 'snack')
VALID_MEAL_TYPES = set(MEAL_TYPES)

# Valid difficulty levels
VALID_DIFFICULTIES = {'easy', 'medium', 'hard'}

# Recipe list sort orders
SORT_ORDERS = ('newest', 'oldest', 'name-asc', 'name-desc', 'time-asc', 'time-desc')

# Cuisine filter value meaning "no cuisine filter"
ALL_CUISINES = 'all'

# Default servings when the request does not give one
DEFAULT_SERVINGS = 4

# Maximum field lengths for security
MAX_LENGTHS = {
    'ingredient_name': 200,
    'recipe_name': 200,
    'custom_meal_name': 200,
    'cuisine': 50,
    'notes': 1000,
    'quantity': 100,
    'description': 5000,
    'instruction': 5000,
    'prompt_item': 100,
}

# Upper bound on ingredients accepted in one generation request
MAX_PROMPT_INGREDIENTS = 50

# Allowed image extensions
ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}
