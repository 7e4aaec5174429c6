"""
Meal Plan Service

Loading the weekly calendar and mutating single meal slots.

A slot is (user, date, meal type) and holds at most one row. Adding to an
occupied slot overwrites it. Every query and mutation is filtered by the
owning user.
"""

import logging

from sqlalchemy.exc import IntegrityError

from constants import MEAL_TYPES, VALID_MEAL_TYPES, MAX_LENGTHS
from models import db, MealPlan, Recipe
from utils.sanitizer import sanitize_name, sanitize_optional
from .cache import get_query_cache, invalidate
from .results import ok, fail, storage_action
from .weeks import parse_date, week_start, week_range, week_days, shift_week, step_day

logger = logging.getLogger(__name__)

CACHE_ENTITY = 'meal_plans'


def validate_meal_type(meal_type):
    meal_type = '' if meal_type is None else str(meal_type).strip().lower()
    if meal_type not in VALID_MEAL_TYPES:
        raise ValueError(f"Invalid meal type '{meal_type}'. Use one of: {', '.join(MEAL_TYPES)}")
    return meal_type


def _load_meal_plans(user_id, start, end):
    meals = (
        MealPlan.query
        .filter(
            MealPlan.user_id == user_id,
            MealPlan.planned_date >= start,
            MealPlan.planned_date <= end,
        )
        .order_by(MealPlan.planned_date, MealPlan.id)
        .all()
    )
    return [meal.to_dict() for meal in meals]


def _cached_meal_plans(user_id, start, end):
    cache = get_query_cache()
    if cache is None:
        return _load_meal_plans(user_id, start, end)
    key = cache.make_key(user_id, CACHE_ENTITY, (start.isoformat(), end.isoformat()))
    return cache.get_or_load(key, lambda: _load_meal_plans(user_id, start, end))


@storage_action('Failed to fetch meal plans')
def get_meal_plans(user_id, start_date, end_date):
    """Meal plans with planned_date in [start_date, end_date], each with its recipe summary."""
    try:
        start = parse_date(start_date)
        end = parse_date(end_date)
    except ValueError as e:
        return fail(str(e))
    if end < start:
        return fail('End date must not be before start date')

    return ok(meal_plans=_cached_meal_plans(user_id, start, end))


def find_slot(meal_plans, day, meal_type):
    """
    The meal filling (day, meal_type), or None.

    Accepts serialised dicts or MealPlan rows.
    """
    target = parse_date(day).isoformat()
    for meal in meal_plans:
        if isinstance(meal, dict):
            planned, kind = meal['planned_date'], meal['meal_type']
        else:
            planned, kind = meal.planned_date.isoformat(), meal.meal_type
        if planned == target and kind == meal_type:
            return meal
    return None


@storage_action('Failed to fetch meal plans')
def get_week(user_id, start):
    """The 7 x 4 calendar grid for the week containing ``start``."""
    try:
        first = week_start(start)
    except ValueError as e:
        return fail(str(e))
    first, last = week_range(first)

    meal_plans = _cached_meal_plans(user_id, first, last)
    grid = {}
    for day in week_days(first):
        grid[day.isoformat()] = {
            meal_type: find_slot(meal_plans, day, meal_type) for meal_type in MEAL_TYPES
        }

    return ok(
        week_start=first.isoformat(),
        week_end=last.isoformat(),
        previous_week=shift_week(first, -1).isoformat(),
        next_week=shift_week(first, 1).isoformat(),
        days=list(grid),
        meal_types=list(MEAL_TYPES),
        meal_plans=meal_plans,
        grid=grid,
    )


@storage_action('Failed to fetch meal plans')
def get_day(user_id, day, step=0):
    """Single-day view: the four slots of ``day`` moved by ``step`` days."""
    try:
        day, first = step_day(day, step)
    except ValueError as e:
        return fail(str(e))

    week_meals = _cached_meal_plans(user_id, *week_range(first))
    return ok(
        date=day.isoformat(),
        week_start=first.isoformat(),
        previous_day=step_day(day, -1)[0].isoformat(),
        next_day=step_day(day, 1)[0].isoformat(),
        slots={meal_type: find_slot(week_meals, day, meal_type) for meal_type in MEAL_TYPES},
    )


def _upsert_slot(user_id, day, meal_type, recipe_id=None, custom_name=None, notes=None):
    """
    Write a slot: update the existing row or insert a new one.

    If another request inserts the same slot between our read and our
    insert, the unique constraint rejects the insert and we fall back to
    updating the row that won, so the last write still wins.
    """
    for attempt in range(2):
        meal = MealPlan.query.filter_by(user_id=user_id, planned_date=day, meal_type=meal_type).first()
        if meal is None:
            meal = MealPlan(user_id=user_id, planned_date=day, meal_type=meal_type)
            db.session.add(meal)
        meal.recipe_id = recipe_id
        meal.custom_meal_name = custom_name
        if notes is not None:
            meal.notes = notes
        try:
            db.session.commit()
            return meal
        except IntegrityError:
            db.session.rollback()
            if attempt:
                raise
            logger.info("Slot %s/%s for user %s was filled concurrently, updating instead", day, meal_type, user_id)


def _slot_args(date, meal_type):
    return parse_date(date), validate_meal_type(meal_type)


@storage_action('Failed to add meal plan')
def add_meal_plan(user_id, recipe_id, date, meal_type, notes=None):
    """Put a recipe in a slot, replacing whatever was there."""
    try:
        day, meal_type = _slot_args(date, meal_type)
    except ValueError as e:
        return fail(str(e))
    try:
        recipe_id = int(recipe_id)
    except (TypeError, ValueError):
        return fail('Recipe is required')

    recipe = Recipe.query.filter_by(id=recipe_id, user_id=user_id).first()
    if recipe is None:
        return fail('Recipe not found', 404)

    meal = _upsert_slot(
        user_id, day, meal_type,
        recipe_id=recipe.id,
        notes=sanitize_optional(notes, MAX_LENGTHS['notes']) if notes is not None else None,
    )
    invalidate(user_id, CACHE_ENTITY)
    logger.info("User %s planned recipe %s for %s %s", user_id, recipe.id, day, meal_type)
    return ok(meal_plan=meal.to_dict())


@storage_action('Failed to add meal')
def add_custom_meal(user_id, custom_name, date, meal_type, notes=None):
    """Put a free-text meal in a slot, replacing whatever was there."""
    try:
        day, meal_type = _slot_args(date, meal_type)
    except ValueError as e:
        return fail(str(e))

    name = sanitize_name(custom_name, max_length=MAX_LENGTHS['custom_meal_name'])
    if not name:
        return fail('Meal name is required')

    meal = _upsert_slot(
        user_id, day, meal_type,
        custom_name=name,
        notes=sanitize_optional(notes, MAX_LENGTHS['notes']) if notes is not None else None,
    )
    invalidate(user_id, CACHE_ENTITY)
    logger.info("User %s planned custom meal for %s %s", user_id, day, meal_type)
    return ok(meal_plan=meal.to_dict())


def _owned_meal(user_id, meal_plan_id):
    try:
        meal_plan_id = int(meal_plan_id)
    except (TypeError, ValueError):
        return None
    return MealPlan.query.filter_by(id=meal_plan_id, user_id=user_id).first()


@storage_action('Failed to remove meal plan')
def remove_meal_plan(user_id, meal_plan_id):
    meal = _owned_meal(user_id, meal_plan_id)
    if meal is None:
        return fail('Meal plan not found', 404)

    db.session.delete(meal)
    db.session.commit()
    invalidate(user_id, CACHE_ENTITY)
    return ok()


@storage_action('Failed to toggle completion')
def toggle_meal_complete(user_id, meal_plan_id):
    meal = _owned_meal(user_id, meal_plan_id)
    if meal is None:
        return fail('Meal plan not found', 404)

    meal.is_completed = not meal.is_completed
    db.session.commit()
    invalidate(user_id, CACHE_ENTITY)
    return ok(is_completed=meal.is_completed)
