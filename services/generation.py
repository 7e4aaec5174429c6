"""
Recipe Generation Service

Turns an ingredient list and preferences into a prompt, asks the model for
a recipe as JSON, and stores the result with its ingredients.
"""

import json
import logging
import re

from flask import current_app
from sqlalchemy.exc import SQLAlchemyError

from constants import VALID_DIFFICULTIES, DEFAULT_SERVINGS, MAX_LENGTHS, MAX_PROMPT_INGREDIENTS
from models import db, Ingredient, Recipe, RecipeIngredient
from utils.gemini import InferenceError, from_config
from utils.sanitizer import sanitize_name, sanitize_text, sanitize_optional, sanitize_int
from .results import ok, fail, unauthenticated

logger = logging.getLogger(__name__)

RECIPE_SCHEMA = """{
  "name": "Recipe Name",
  "description": "Brief description of the dish",
  "cuisine_type": "Italian/Indian/Chinese/etc",
  "difficulty": "easy/medium/hard",
  "prep_time": number (in minutes),
  "cooking_time": number (in minutes),
  "servings": number,
  "ingredients": [
    {
      "name": "ingredient name",
      "quantity": "2 cups",
      "isOptional": false
    }
  ],
  "instructions": [
    {
      "step": 1,
      "instruction": "Detailed step instruction",
      "duration": "5 minutes"
    }
  ],
  "nutritional_info": {
    "calories": 450,
    "protein": "25g",
    "carbs": "40g",
    "fat": "15g",
    "fiber": "5g"
  },
  "tips": ["Cooking tip 1", "Cooking tip 2"]
}"""

_CODE_FENCE = re.compile(r'^```(?:json)?\s*(.*?)\s*```$', re.DOTALL)


def _clean_list(values, field):
    if values is None:
        return []
    if isinstance(values, str):
        values = values.split(',')
    elif not isinstance(values, (list, tuple)):
        raise ValueError(f'{field} must be a list or comma-separated text')
    cleaned = (sanitize_name(v, max_length=MAX_LENGTHS['prompt_item']) for v in values)
    return [v for v in cleaned if v]


def normalize_generation_params(params):
    """
    Validate a generation request.

    Raises:
        ValueError: missing, malformed or too many ingredients, or a bad difficulty.
    """
    params = params if isinstance(params, dict) else {}
    ingredients = _clean_list(params.get('ingredients'), 'Ingredients')
    if not ingredients:
        raise ValueError('Please add at least one ingredient')
    if len(ingredients) > MAX_PROMPT_INGREDIENTS:
        raise ValueError(f'Too many ingredients (max {MAX_PROMPT_INGREDIENTS})')

    difficulty = str(params.get('difficulty') or '').strip().lower() or None
    if difficulty and difficulty not in VALID_DIFFICULTIES:
        raise ValueError(f"Invalid difficulty '{difficulty}'")

    return {
        'ingredients': ingredients,
        'cuisine': sanitize_name(params.get('cuisine'), max_length=MAX_LENGTHS['cuisine']) or None,
        'dietary_restrictions': _clean_list(params.get('dietary_restrictions'), 'Dietary restrictions'),
        'cooking_time': sanitize_int(params.get('cooking_time'), min_val=1, max_val=24 * 60),
        'difficulty': difficulty,
        'servings': sanitize_int(params.get('servings'), default=DEFAULT_SERVINGS, min_val=1, max_val=100),
    }


def build_recipe_prompt(params):
    """The full prompt, ending with the JSON-only output instruction."""
    prompt = (
        "You are a professional chef. Generate a recipe using these ingredients: "
        f"{', '.join(params['ingredients'])}."
    )
    if params.get('cuisine'):
        prompt += f" The cuisine should be {params['cuisine']}."
    if params.get('dietary_restrictions'):
        prompt += f" Dietary restrictions: {', '.join(params['dietary_restrictions'])}."
    if params.get('cooking_time'):
        prompt += f" Total cooking time should be around {params['cooking_time']} minutes."
    if params.get('difficulty'):
        prompt += f" Difficulty level: {params['difficulty']}."
    prompt += f" Servings: {params.get('servings') or DEFAULT_SERVINGS}."

    prompt += (
        "\n\nIMPORTANT: Return ONLY valid JSON (no markdown, no code blocks, no explanations) "
        f"with this exact structure:\n{RECIPE_SCHEMA}\n\n"
        "Make the recipe practical, detailed, and delicious!"
    )
    return prompt


def _normalize_instructions(raw):
    steps = []
    for index, item in enumerate(raw or [], start=1):
        if isinstance(item, str):
            item = {'instruction': item}
        if not isinstance(item, dict):
            continue
        text = sanitize_text(item.get('instruction'), max_length=MAX_LENGTHS['instruction'])
        if not text:
            continue
        step = {'step': sanitize_int(item.get('step'), default=index, min_val=1), 'instruction': text}
        duration = sanitize_name(item.get('duration'), max_length=50)
        if duration:
            step['duration'] = duration
        steps.append(step)
    return steps


def _normalize_ingredients(raw):
    ingredients = []
    for item in raw or []:
        if not isinstance(item, dict):
            continue
        name = sanitize_name(item.get('name'), max_length=MAX_LENGTHS['ingredient_name'])
        if not name:
            continue
        optional = item.get('isOptional', item.get('is_optional', False))
        ingredients.append({
            'name': name,
            'quantity': sanitize_name(item.get('quantity'), max_length=MAX_LENGTHS['quantity']),
            'is_optional': bool(optional),
        })
    return ingredients


def parse_generated_recipe(text, default_servings=DEFAULT_SERVINGS):
    """
    Parse and normalise the model's JSON.

    Raises:
        ValueError: the text is not a JSON object with a name and ingredients.
            The message always mentions JSON.
    """
    text = (text or '').strip()
    fenced = _CODE_FENCE.match(text)
    if fenced:
        text = fenced.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f'Invalid JSON in AI response: {e}') from e

    if not isinstance(data, dict):
        raise ValueError('AI response JSON is not an object')

    name = sanitize_name(data.get('name'), max_length=MAX_LENGTHS['recipe_name'])
    ingredients = _normalize_ingredients(data.get('ingredients'))
    if not name or not ingredients:
        raise ValueError('AI response JSON is missing the recipe name or ingredients')

    difficulty = str(data.get('difficulty') or '').strip().lower()
    nutrition = data.get('nutritional_info')
    tips = data.get('tips') if isinstance(data.get('tips'), list) else []

    return {
        'name': name,
        'description': sanitize_optional(data.get('description'), MAX_LENGTHS['description']),
        'cuisine_type': sanitize_name(data.get('cuisine_type'), max_length=MAX_LENGTHS['cuisine']) or None,
        'difficulty': difficulty if difficulty in VALID_DIFFICULTIES else None,
        'prep_time': sanitize_int(data.get('prep_time'), min_val=0),
        'cooking_time': sanitize_int(data.get('cooking_time'), min_val=0),
        'servings': sanitize_int(data.get('servings'), default=default_servings, min_val=1, max_val=100),
        'ingredients': ingredients,
        'instructions': _normalize_instructions(data.get('instructions')),
        'nutritional_info': nutrition if isinstance(nutrition, dict) else None,
        'tips': [t for t in (sanitize_text(tip, max_length=500) for tip in tips) if t],
    }


def save_generated_recipe(user_id, recipe):
    """
    Store a parsed recipe and link its ingredients.

    Ingredients are looked up case-insensitively and created when missing.
    Everything is committed at once: a failure leaves no recipe, no links
    and no new ingredients behind.
    """
    try:
        ingredient_ids = {}
        for item in recipe['ingredients']:
            if item['name'] not in ingredient_ids:
                ingredient_ids[item['name']] = Ingredient.get_or_create(item['name']).id

        saved = Recipe(
            user_id=user_id,
            name=recipe['name'],
            description=recipe['description'],
            cuisine_type=recipe['cuisine_type'],
            difficulty=recipe['difficulty'],
            prep_time=recipe['prep_time'],
            cooking_time=recipe['cooking_time'],
            servings=recipe['servings'],
            instructions=recipe['instructions'],
            nutritional_info=recipe['nutritional_info'],
            tips=recipe['tips'],
            ai_generated=True,
        )
        db.session.add(saved)
        db.session.flush()

        db.session.add_all([
            RecipeIngredient(
                recipe_id=saved.id,
                ingredient_id=ingredient_ids[item['name']],
                quantity=item['quantity'],
                is_optional=item['is_optional'],
            )
            for item in recipe['ingredients']
        ])
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info("Saved generated recipe %s '%s' with %d ingredients",
                saved.id, saved.name, len(recipe['ingredients']))
    return saved


def inference_error_message(message):
    """User-facing text for a failed generation, picked from the error text."""
    if 'API key' in message:
        return 'Gemini API key is invalid or missing'
    if 'quota' in message.lower():
        return 'API quota exceeded. Please try again later.'
    if 'JSON' in message:
        return 'Failed to parse AI response. Please try again.'
    return f'Failed to generate recipe: {message}'


def generate_recipe(user_id, params, client=None):
    """
    Generate, parse and store a recipe.

    The model is called once; a failure is reported, never retried.
    ``client`` is anything with ``generate_json(prompt) -> str``; by default
    the app's registered client or one built from config.
    """
    if not user_id:
        return unauthenticated()

    try:
        params = normalize_generation_params(params)
    except ValueError as e:
        return fail(str(e))

    prompt = build_recipe_prompt(params)
    logger.info("Generating recipe for user %s from %d ingredients", user_id, len(params['ingredients']))

    try:
        if client is None:
            client = current_app.extensions.get('inference_client') or from_config(current_app.config)
        text = client.generate_json(prompt)
        if not text or not text.strip():
            logger.error("Model returned an empty response for user %s", user_id)
            return fail('AI returned empty response', 502)
        recipe = parse_generated_recipe(text, default_servings=params['servings'])
    except (InferenceError, ValueError) as e:
        logger.error("Recipe generation failed for user %s: %s", user_id, e)
        return fail(inference_error_message(str(e)), 502)

    try:
        saved = save_generated_recipe(user_id, recipe)
    except SQLAlchemyError:
        logger.exception("Failed to save generated recipe for user %s", user_id)
        return fail('Failed to save recipe', 500)

    return ok(recipe=saved.to_dict(include_ingredients=True))
