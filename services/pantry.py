"""
Pantry Service

Tracks which ingredients a user has on hand.
"""

import logging

from constants import MAX_LENGTHS
from models import db, Ingredient, PantryItem
from utils.sanitizer import sanitize_name, sanitize_optional
from .results import ok, fail, storage_action
from .weeks import parse_date

logger = logging.getLogger(__name__)


@storage_action('Failed to fetch pantry')
def list_pantry(user_id):
    items = (
        PantryItem.query
        .join(Ingredient)
        .filter(PantryItem.user_id == user_id)
        .order_by(Ingredient.name)
        .all()
    )
    return ok(items=[item.to_dict() for item in items])


@storage_action('Failed to add pantry item')
def add_pantry_item(user_id, name, quantity=None, expiry_date=None):
    """Add an ingredient to the pantry, or update it if already there."""
    name = sanitize_name(name, max_length=MAX_LENGTHS['ingredient_name'])
    if not name:
        return fail('Ingredient name is required')

    expiry = None
    if expiry_date:
        try:
            expiry = parse_date(expiry_date)
        except ValueError as e:
            return fail(str(e))

    ingredient = Ingredient.get_or_create(name)
    item = PantryItem.query.filter_by(user_id=user_id, ingredient_id=ingredient.id).first()
    if item is None:
        item = PantryItem(user_id=user_id, ingredient_id=ingredient.id)
        db.session.add(item)
    item.quantity = sanitize_optional(quantity, MAX_LENGTHS['quantity'])
    item.expiry_date = expiry
    db.session.commit()
    return ok(item=item.to_dict())


@storage_action('Failed to remove pantry item')
def remove_pantry_item(user_id, item_id):
    try:
        item_id = int(item_id)
    except (TypeError, ValueError):
        return fail('Pantry item not found', 404)

    item = PantryItem.query.filter_by(id=item_id, user_id=user_id).first()
    if item is None:
        return fail('Pantry item not found', 404)

    db.session.delete(item)
    db.session.commit()
    return ok()
