"""
Recipe Service

Listing, viewing, favouriting, deleting and adding images to a user's recipes.
"""

import logging

from sqlalchemy.orm import joinedload

from constants import ALL_CUISINES, ALLOWED_EXTENSIONS
from models import db, MealPlan, Recipe, RecipeIngredient
from utils.image_handler import allowed_file, save_recipe_image, remove_recipe_image, ImageValidationError
from .cache import invalidate
from .filtering import filter_recipes, list_cuisines
from .meal_plans import CACHE_ENTITY as MEAL_PLANS
from .results import ok, fail, storage_action

logger = logging.getLogger(__name__)


def _owned_recipe(user_id, recipe_id, with_ingredients=False):
    try:
        recipe_id = int(recipe_id)
    except (TypeError, ValueError):
        return None
    query = Recipe.query
    if with_ingredients:
        query = query.options(joinedload(Recipe.ingredients).joinedload(RecipeIngredient.ingredient))
    return query.filter_by(id=recipe_id, user_id=user_id).first()


@storage_action('Failed to fetch recipes')
def list_recipes(user_id, search='', cuisine=ALL_CUISINES, favorites_only=False, sort_by='newest'):
    """
    All of the user's recipes, filtered and sorted in memory.

    ``cuisines`` lists every cuisine in the unfiltered collection so the
    filter menu does not shrink as filters are applied.
    """
    recipes = Recipe.query.filter_by(user_id=user_id).all()
    try:
        filtered = filter_recipes(
            recipes, search=search, cuisine=cuisine,
            favorites_only=favorites_only, sort_by=sort_by,
        )
    except ValueError as e:
        return fail(str(e))

    return ok(
        recipes=[r.to_dict() for r in filtered],
        cuisines=list_cuisines(recipes),
        total_count=len(recipes),
        filtered_count=len(filtered),
    )


@storage_action('Failed to fetch recipe')
def get_recipe(user_id, recipe_id):
    recipe = _owned_recipe(user_id, recipe_id, with_ingredients=True)
    if recipe is None:
        return fail('Recipe not found', 404)
    return ok(recipe=recipe.to_dict(include_ingredients=True))


@storage_action('Failed to update favorite status')
def toggle_favorite(user_id, recipe_id):
    recipe = _owned_recipe(user_id, recipe_id)
    if recipe is None:
        return fail('Recipe not found', 404)

    recipe.is_favorite = not recipe.is_favorite
    db.session.commit()
    return ok(is_favorite=recipe.is_favorite)


@storage_action('Failed to delete recipe')
def delete_recipe(user_id, recipe_id, upload_folder=None):
    """Delete a recipe, its ingredient links, the meals that use it and its image."""
    recipe = _owned_recipe(user_id, recipe_id)
    if recipe is None:
        return fail('Recipe not found', 404)

    name = recipe.name
    image = recipe.image_url

    # Meal slots pointing at this recipe would be left with neither a recipe
    # nor a custom name
    removed_meals = MealPlan.query.filter_by(user_id=user_id, recipe_id=recipe.id).delete(synchronize_session=False)
    db.session.delete(recipe)
    db.session.commit()

    if image and upload_folder:
        try:
            remove_recipe_image(upload_folder, image)
        except OSError:
            logger.warning("Could not remove image %s for deleted recipe %s", image, recipe_id)

    if removed_meals:
        invalidate(user_id, MEAL_PLANS)
    logger.info("User %s deleted recipe '%s' (%d planned meals removed)", user_id, name, removed_meals)
    return ok()


@storage_action('Failed to save image')
def upload_recipe_image(user_id, recipe_id, file_storage, upload_folder):
    """Validate, re-encode and attach an uploaded image to a recipe."""
    recipe = _owned_recipe(user_id, recipe_id)
    if recipe is None:
        return fail('Recipe not found', 404)

    if file_storage is None or not file_storage.filename:
        return fail('No image selected')
    if not allowed_file(file_storage.filename, ALLOWED_EXTENSIONS):
        return fail('Invalid file type. Use PNG, JPG, GIF, or WEBP.')

    try:
        recipe.image_url = save_recipe_image(file_storage, upload_folder, recipe.id)
    except ImageValidationError as e:
        return fail(f'Invalid image: {e}')

    db.session.commit()
    return ok(image_url=recipe.image_url)
