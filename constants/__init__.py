"""
Constants Package

Whitelists and limits shared by the models, services and routes.
"""

from .validation import (
    MEAL_TYPES,
    VALID_MEAL_TYPES,
    VALID_DIFFICULTIES,
    SORT_ORDERS,
    ALL_CUISINES,
    DEFAULT_SERVINGS,
    MAX_LENGTHS,
    MAX_PROMPT_INGREDIENTS,
    ALLOWED_EXTENSIONS,
)

__all__ = [
    'MEAL_TYPES',
    'VALID_MEAL_TYPES',
    'VALID_DIFFICULTIES',
    'SORT_ORDERS',
    'ALL_CUISINES',
    'DEFAULT_SERVINGS',
    'MAX_LENGTHS',
    'MAX_PROMPT_INGREDIENTS',
    'ALLOWED_EXTENSIONS',
]
