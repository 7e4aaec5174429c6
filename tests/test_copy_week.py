"""Tests for copying one week's meal plan onto another."""

from datetime import date

from sqlalchemy.exc import SQLAlchemyError

from models import db, MealPlan
from services import copy_week


def _week_meals(user_id, first, last):
    return (
        MealPlan.query
        .filter(MealPlan.user_id == user_id, MealPlan.planned_date >= first, MealPlan.planned_date <= last)
        .order_by(MealPlan.planned_date, MealPlan.meal_type)
        .all()
    )


def test_copies_dinner_to_same_weekday_and_replaces_target(ctx, user_id, make_recipe, make_meal):
    recipe_id = make_recipe(user_id, 'Lasagne')
    make_meal(user_id, '2024-06-05', 'dinner', recipe_id=recipe_id, notes='double batch')
    make_meal(user_id, '2024-06-18', 'lunch', custom_meal_name='Old lunch')
    make_meal(user_id, '2024-06-23', 'snack', custom_meal_name='Old snack')

    result = copy_week(user_id, '2024-06-03', '2024-06-17')

    assert result == {'success': True, 'count': 1, 'source_week': '2024-06-03', 'target_week': '2024-06-17'}
    target = _week_meals(user_id, date(2024, 6, 17), date(2024, 6, 23))
    assert len(target) == 1
    copied = target[0]
    assert copied.planned_date == date(2024, 6, 19)
    assert copied.meal_type == 'dinner'
    assert copied.recipe_id == recipe_id
    assert copied.notes == 'double batch'


def test_copies_reset_completion_and_keep_custom_names(ctx, user_id, make_meal):
    make_meal(user_id, '2024-06-03', 'breakfast', custom_meal_name='Porridge', is_completed=True)
    make_meal(user_id, '2024-06-09', 'dinner', custom_meal_name='Roast', is_completed=True)

    result = copy_week(user_id, '2024-06-03', '2024-06-10')

    assert result['count'] == 2
    target = _week_meals(user_id, date(2024, 6, 10), date(2024, 6, 16))
    assert [(m.planned_date, m.custom_meal_name) for m in target] == [
        (date(2024, 6, 10), 'Porridge'),
        (date(2024, 6, 16), 'Roast'),
    ]
    assert not any(m.is_completed for m in target)


def test_source_week_is_left_unchanged(ctx, user_id, make_meal):
    make_meal(user_id, '2024-06-04', 'lunch', custom_meal_name='Soup', is_completed=True)

    copy_week(user_id, '2024-06-03', '2024-06-10')

    source = _week_meals(user_id, date(2024, 6, 3), date(2024, 6, 9))
    assert len(source) == 1
    assert source[0].is_completed is True


def test_copy_to_earlier_week(ctx, user_id, make_meal):
    make_meal(user_id, '2024-06-12', 'dinner', custom_meal_name='Curry')

    result = copy_week(user_id, '2024-06-10', '2024-05-27')

    assert result['count'] == 1
    assert _week_meals(user_id, date(2024, 5, 27), date(2024, 6, 2))[0].planned_date == date(2024, 5, 29)


def test_dates_inside_weeks_are_normalised_to_monday(ctx, user_id, make_meal):
    make_meal(user_id, '2024-06-05', 'dinner', custom_meal_name='Stew')

    result = copy_week(user_id, '2024-06-07', '2024-06-12')

    assert result['source_week'] == '2024-06-03'
    assert result['target_week'] == '2024-06-10'
    assert _week_meals(user_id, date(2024, 6, 10), date(2024, 6, 16))[0].planned_date == date(2024, 6, 12)


def test_same_week_is_rejected(ctx, user_id, make_meal):
    make_meal(user_id, '2024-06-05', 'dinner')

    result = copy_week(user_id, '2024-06-03', '2024-06-06')

    assert result == {'error': 'Cannot copy to the same week', 'status': 400}
    assert MealPlan.query.count() == 1


def test_empty_source_week_does_not_touch_target(ctx, user_id, make_meal):
    make_meal(user_id, '2024-06-12', 'dinner', custom_meal_name='Keep me')

    result = copy_week(user_id, '2024-06-03', '2024-06-10')

    assert result == {'error': 'No meals found in source week', 'status': 400}
    assert [m.custom_meal_name for m in MealPlan.query.all()] == ['Keep me']


def test_only_the_users_own_meals_are_copied_or_replaced(ctx, user_id, other_user_id, make_meal):
    make_meal(user_id, '2024-06-05', 'dinner', custom_meal_name='Mine')
    make_meal(other_user_id, '2024-06-04', 'lunch', custom_meal_name='Theirs')
    make_meal(other_user_id, '2024-06-12', 'dinner', custom_meal_name='Their target')

    result = copy_week(user_id, '2024-06-03', '2024-06-10')

    assert result['count'] == 1
    theirs = _week_meals(other_user_id, date(2024, 6, 10), date(2024, 6, 16))
    assert [m.custom_meal_name for m in theirs] == ['Their target']


def test_failed_commit_leaves_target_week_intact(ctx, user_id, make_meal, monkeypatch):
    make_meal(user_id, '2024-06-05', 'dinner', custom_meal_name='New')
    make_meal(user_id, '2024-06-12', 'lunch', custom_meal_name='Existing')

    def broken_commit():
        raise SQLAlchemyError('disk full')

    monkeypatch.setattr(db.session, 'commit', broken_commit)
    result = copy_week(user_id, '2024-06-03', '2024-06-10')
    monkeypatch.undo()

    assert result == {'error': 'Failed to copy week', 'status': 500}
    target = _week_meals(user_id, date(2024, 6, 10), date(2024, 6, 16))
    assert [(m.planned_date, m.custom_meal_name) for m in target] == [(date(2024, 6, 12), 'Existing')]


def test_requires_a_user(ctx):
    assert copy_week(None, '2024-06-03', '2024-06-10')['status'] == 401


def test_invalid_dates_are_rejected(ctx, user_id):
    assert 'Invalid date' in copy_week(user_id, 'last week', '2024-06-10')['error']
