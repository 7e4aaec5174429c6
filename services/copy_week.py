"""
Copy Week Service

Duplicates one week's meal plan onto another week. The target week is
replaced, not merged.
"""

import logging
from datetime import timedelta

from models import db, MealPlan
from .cache import invalidate
from .meal_plans import CACHE_ENTITY
from .results import ok, fail, storage_action
from .weeks import week_start, week_range

logger = logging.getLogger(__name__)


def _in_week(user_id, start):
    first, last = week_range(start)
    return MealPlan.query.filter(
        MealPlan.user_id == user_id,
        MealPlan.planned_date >= first,
        MealPlan.planned_date <= last,
    )


@storage_action('Failed to copy week')
def copy_week(user_id, source_start, target_start):
    """
    Copy every meal in the source week to the same weekday and meal type
    in the target week.

    Copies keep the recipe (or custom meal name) and notes and start out
    not completed. Clearing the target week and inserting the copies
    happen in one transaction, so a failure leaves the target untouched.

    Returns ``{'success': True, 'count': n}``.
    """
    try:
        source = week_start(source_start)
        target = week_start(target_start)
    except ValueError as e:
        return fail(str(e))

    if source == target:
        return fail('Cannot copy to the same week')

    source_meals = _in_week(user_id, source).order_by(MealPlan.planned_date, MealPlan.id).all()
    if not source_meals:
        return fail('No meals found in source week')

    offset = timedelta(days=(target - source).days)
    copies = [
        MealPlan(
            user_id=user_id,
            recipe_id=meal.recipe_id,
            custom_meal_name=meal.custom_meal_name,
            planned_date=meal.planned_date + offset,
            meal_type=meal.meal_type,
            notes=meal.notes,
            is_completed=False,
        )
        for meal in source_meals
    ]

    # Bulk delete runs immediately, so the target slots are free before the
    # inserts flush; both are committed together below.
    replaced = _in_week(user_id, target).delete(synchronize_session='fetch')
    db.session.add_all(copies)
    db.session.commit()

    invalidate(user_id, CACHE_ENTITY)
    logger.info(
        "User %s copied %d meals from week %s to week %s (replaced %d)",
        user_id, len(copies), source, target, replaced,
    )
    return ok(count=len(copies), source_week=source.isoformat(), target_week=target.isoformat())
