"""
Recipe List Filtering

Search, cuisine and favourite filters plus the six sort orders of the
recipe list. Works on Recipe rows or their ``to_dict()`` form.
"""

import unicodedata
from datetime import datetime

from constants import SORT_ORDERS, ALL_CUISINES


def _get(recipe, field):
    if isinstance(recipe, dict):
        return recipe.get(field)
    return getattr(recipe, field, None)


def _created_at(recipe):
    value = _get(recipe, 'created_at')
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    if value is None:
        return datetime.min
    # Compare everything as naive UTC
    return value.replace(tzinfo=None)


def _name_key(recipe):
    """Case- and accent-insensitive sort key, so accented names sort beside their base letter."""
    name = (_get(recipe, 'name') or '').casefold()
    base = ''.join(c for c in unicodedata.normalize('NFKD', name) if not unicodedata.combining(c))
    return base, name


def total_time(recipe):
    """prep + cook minutes, missing values counted as zero."""
    return (_get(recipe, 'prep_time') or 0) + (_get(recipe, 'cooking_time') or 0)


def matches_search(recipe, search):
    needle = search.casefold()
    name = (_get(recipe, 'name') or '').casefold()
    description = (_get(recipe, 'description') or '').casefold()
    return needle in name or needle in description


SORT_KEYS = {
    'newest': (_created_at, True),
    'oldest': (_created_at, False),
    'name-asc': (_name_key, False),
    'name-desc': (_name_key, True),
    'time-asc': (total_time, False),
    'time-desc': (total_time, True),
}


def filter_recipes(recipes, search='', cuisine=ALL_CUISINES, favorites_only=False, sort_by='newest'):
    """
    Apply, in order: text search on name/description, exact cuisine,
    favourites only, then sort.

    Raises:
        ValueError: unknown ``sort_by``.
    """
    if sort_by not in SORT_KEYS:
        raise ValueError(f"Unknown sort order '{sort_by}'. Use one of: {', '.join(SORT_ORDERS)}")

    filtered = list(recipes)

    search = (search or '').strip()
    if search:
        filtered = [r for r in filtered if matches_search(r, search)]

    if cuisine and cuisine != ALL_CUISINES:
        filtered = [r for r in filtered if _get(r, 'cuisine_type') == cuisine]

    if favorites_only:
        filtered = [r for r in filtered if _get(r, 'is_favorite')]

    key, reverse = SORT_KEYS[sort_by]
    filtered.sort(key=key, reverse=reverse)
    return filtered


def list_cuisines(recipes):
    """Distinct non-empty cuisines, sorted."""
    return sorted({_get(r, 'cuisine_type') for r in recipes if _get(r, 'cuisine_type')})
