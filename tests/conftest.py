"""
Pytest configuration and shared fixtures.

The app module builds its Flask app at import time from FLASK_ENV, so the
environment is switched to testing before anything imports it. The testing
config uses an in-memory SQLite database that lives for the whole session;
tables are created and dropped around every test.
"""

import os

os.environ['FLASK_ENV'] = 'testing'

from datetime import datetime

import pytest

from app import app as flask_app
from models import db, Profile, Recipe, MealPlan


# A well-formed model response for the generation tests
GENERATED_RECIPE = {
    'name': 'Chicken Fried Rice',
    'description': 'Quick weeknight fried rice.',
    'cuisine_type': 'Chinese',
    'difficulty': 'Easy',
    'prep_time': 10,
    'cooking_time': 15,
    'servings': 2,
    'ingredients': [
        {'name': 'Chicken', 'quantity': '200 g', 'isOptional': False},
        {'name': 'rice', 'quantity': '2 cups', 'isOptional': False},
        {'name': 'Spring Onion', 'quantity': '2 stalks', 'isOptional': True},
    ],
    'instructions': [
        {'step': 1, 'instruction': 'Dice the chicken.', 'duration': '5 minutes'},
        {'step': 2, 'instruction': 'Fry everything together.'},
    ],
    'nutritional_info': {'calories': 520, 'protein': '35g'},
    'tips': ['Use day-old rice.'],
}


class FakeInferenceClient:
    """Stands in for GeminiClient: returns a canned response and records prompts."""

    def __init__(self, response='', error=None):
        self.response = response
        self.error = error
        self.prompts = []

    def generate_json(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


@pytest.fixture
def app(tmp_path):
    flask_app.config.update(UPLOAD_FOLDER=str(tmp_path / 'uploads'))
    with flask_app.app_context():
        db.create_all()

    yield flask_app

    with flask_app.app_context():
        db.session.remove()
        db.drop_all()
    flask_app.extensions['query_cache'].clear()
    flask_app.extensions['inference_client'] = None


@pytest.fixture
def ctx(app):
    """App context for tests that call services directly."""
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(email, password='secret123', full_name=None):
    profile = Profile(email=email, full_name=full_name)
    profile.set_password(password)
    db.session.add(profile)
    db.session.commit()
    return profile.id


@pytest.fixture
def make_user(app):
    def factory(email='cook@example.com', password='secret123', full_name=None):
        with app.app_context():
            return _make_user(email, password, full_name)
    return factory


@pytest.fixture
def user_id(make_user):
    return make_user('cook@example.com', full_name='Test Cook')


@pytest.fixture
def other_user_id(make_user):
    return make_user('other@example.com')


@pytest.fixture
def make_recipe(app):
    def factory(user_id, name='Pasta', **fields):
        fields.setdefault('instructions', [{'step': 1, 'instruction': 'Cook it.'}])
        with app.app_context():
            recipe = Recipe(user_id=user_id, name=name, **fields)
            db.session.add(recipe)
            db.session.commit()
            return recipe.id
    return factory


@pytest.fixture
def make_meal(app):
    def factory(user_id, planned_date, meal_type='dinner', recipe_id=None, custom_meal_name=None, **fields):
        if recipe_id is None and custom_meal_name is None:
            custom_meal_name = 'Leftovers'
        if isinstance(planned_date, str):
            planned_date = datetime.strptime(planned_date, '%Y-%m-%d').date()
        with app.app_context():
            meal = MealPlan(
                user_id=user_id, planned_date=planned_date, meal_type=meal_type,
                recipe_id=recipe_id, custom_meal_name=custom_meal_name, **fields
            )
            db.session.add(meal)
            db.session.commit()
            return meal.id
    return factory


def login(client, email='cook@example.com', password='secret123'):
    return client.post('/api/auth/login', json={'email': email, 'password': password})


@pytest.fixture
def auth_client(client, user_id):
    """Test client logged in as the default user."""
    response = login(client)
    assert response.status_code == 200
    return client


@pytest.fixture
def fake_inference(app):
    fake = FakeInferenceClient()
    app.extensions['inference_client'] = fake
    return fake
