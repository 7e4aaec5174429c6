"""End-to-end tests through the Flask test client."""

import json

import pytest

from models import db, MealPlan, Recipe

from conftest import login, GENERATED_RECIPE


@pytest.mark.parametrize('method, path', [
    ('get', '/api/auth/me'),
    ('get', '/api/dashboard'),
    ('get', '/api/recipes'),
    ('post', '/api/recipes/generate'),
    ('get', '/api/meal-plans/week'),
    ('post', '/api/meal-plans'),
    ('post', '/api/meal-plans/copy-week'),
    ('get', '/api/pantry'),
])
def test_protected_routes_require_login(client, method, path):
    response = getattr(client, method)(path)
    assert response.status_code == 401
    assert response.get_json() == {'error': 'Not authenticated'}


def test_signup_logs_in_and_rejects_duplicates(client):
    response = client.post('/api/auth/signup', json={
        'email': 'New@Example.com', 'password': 'hunter22', 'fullName': 'New Cook',
    })
    assert response.status_code == 200
    assert response.get_json()['user']['email'] == 'new@example.com'
    assert response.get_json()['user']['full_name'] == 'New Cook'

    assert client.get('/api/auth/me').get_json()['user']['email'] == 'new@example.com'

    again = client.post('/api/auth/signup', json={'email': 'new@example.com', 'password': 'hunter22'})
    assert again.status_code == 400
    assert 'already exists' in again.get_json()['error']


def test_signup_validates_input(client):
    assert client.post('/api/auth/signup', json={'email': 'nobody', 'password': 'hunter22'}).status_code == 400
    short = client.post('/api/auth/signup', json={'email': 'a@b.co', 'password': '123'})
    assert short.get_json()['error'] == 'Password must be at least 6 characters'


def test_login_and_logout(client, user_id):
    assert login(client, password='wrong-password').status_code == 401

    response = login(client)
    assert response.status_code == 200
    assert response.get_json()['user']['id'] == user_id

    assert client.post('/api/auth/logout').status_code == 200
    assert client.get('/api/auth/me').status_code == 401


def test_auth_routes_reject_non_string_credentials(client, user_id):
    numeric_password = client.post('/api/auth/signup', json={'email': 'new@example.com', 'password': 123456})
    assert numeric_password.status_code == 400
    assert numeric_password.get_json()['error'] == 'Password must be at least 6 characters'

    numeric_email = client.post('/api/auth/signup', json={'email': 42, 'password': 'hunter22'})
    assert numeric_email.status_code == 400
    assert numeric_email.get_json()['error'] == 'A valid email is required'

    assert client.post('/api/auth/login', json={'email': 'cook@example.com', 'password': 123456}).status_code == 401
    assert client.post('/api/auth/login', json={'email': ['cook@example.com'], 'password': 'secret123'}).status_code == 401


def test_generate_route_saves_recipe(auth_client, fake_inference, app):
    fake_inference.response = json.dumps(GENERATED_RECIPE)

    response = auth_client.post('/api/recipes/generate', json={
        'ingredients': ['chicken', 'rice'], 'cuisine': 'Chinese', 'servings': 2,
    })

    assert response.status_code == 200
    body = response.get_json()
    assert body['success'] is True
    assert body['recipe']['name'] == 'Chicken Fried Rice'
    assert 'The cuisine should be Chinese.' in fake_inference.prompts[0]
    with app.app_context():
        assert Recipe.query.count() == 1


def test_generate_route_reports_model_failure(auth_client, fake_inference):
    fake_inference.response = 'Sorry, I cannot help with that.'

    response = auth_client.post('/api/recipes/generate', json={'ingredients': ['egg']})

    assert response.status_code == 502
    assert response.get_json() == {'error': 'Failed to parse AI response. Please try again.'}


def test_generate_route_accepts_form_posts(auth_client, fake_inference):
    fake_inference.response = json.dumps(GENERATED_RECIPE)

    response = auth_client.post('/api/recipes/generate', data={'ingredients': ['chicken', 'rice']})

    assert response.status_code == 200
    assert 'chicken, rice' in fake_inference.prompts[0]


def test_recipe_list_route_filters(auth_client, user_id, make_recipe):
    make_recipe(user_id, 'Curry', cuisine_type='Indian', is_favorite=True)
    make_recipe(user_id, 'Tacos', cuisine_type='Mexican')

    body = auth_client.get('/api/recipes?favorites=true&sort=name-asc').get_json()
    assert [r['name'] for r in body['recipes']] == ['Curry']
    assert body['cuisines'] == ['Indian', 'Mexican']

    assert auth_client.get('/api/recipes?sort=bogus').status_code == 400


def test_recipe_routes_hide_other_users(auth_client, other_user_id, make_recipe):
    foreign = make_recipe(other_user_id, 'Secret')

    assert auth_client.get(f'/api/recipes/{foreign}').status_code == 404
    assert auth_client.post(f'/api/recipes/{foreign}/favorite').status_code == 404
    assert auth_client.post(f'/api/recipes/{foreign}/delete').status_code == 404


def test_favorite_and_delete_routes(auth_client, user_id, make_recipe, app):
    recipe_id = make_recipe(user_id)

    assert auth_client.post(f'/api/recipes/{recipe_id}/favorite').get_json()['is_favorite'] is True
    assert auth_client.post(f'/api/recipes/{recipe_id}/delete').get_json() == {'success': True}
    with app.app_context():
        assert db.session.get(Recipe, recipe_id) is None


def test_meal_plan_week_flow(auth_client, user_id, make_recipe, app):
    recipe_id = make_recipe(user_id, 'Curry')

    added = auth_client.post('/api/meal-plans', json={
        'recipe_id': recipe_id, 'date': '2024-06-05', 'meal_type': 'dinner',
    })
    assert added.status_code == 200
    custom = auth_client.post('/api/meal-plans/custom', json={
        'name': 'Cereal', 'date': '2024-06-05', 'meal_type': 'breakfast',
    })
    assert custom.status_code == 200

    week = auth_client.get('/api/meal-plans/week?date=2024-06-06').get_json()
    assert week['week_start'] == '2024-06-03'
    assert week['grid']['2024-06-05']['dinner']['recipes']['name'] == 'Curry'
    assert week['grid']['2024-06-05']['breakfast']['custom_meal_name'] == 'Cereal'

    meal_id = week['grid']['2024-06-05']['dinner']['id']
    toggled = auth_client.post(f'/api/meal-plans/{meal_id}/toggle').get_json()
    assert toggled == {'success': True, 'is_completed': True}

    assert auth_client.post(f'/api/meal-plans/{meal_id}/delete').status_code == 200
    with app.app_context():
        assert MealPlan.query.count() == 1


def test_week_route_offset_moves_weeks(auth_client):
    body = auth_client.get('/api/meal-plans/week?start=2024-06-03&offset=-1').get_json()
    assert body['week_start'] == '2024-05-27'
    assert auth_client.get('/api/meal-plans/week?start=junk').status_code == 400


def test_day_route_steps(auth_client, user_id, make_meal):
    make_meal(user_id, '2024-06-10', 'lunch', custom_meal_name='Soup')

    body = auth_client.get('/api/meal-plans/day?date=2024-06-09&step=1').get_json()

    assert body['date'] == '2024-06-10'
    assert body['slots']['lunch']['custom_meal_name'] == 'Soup'


def test_meal_plan_range_route(auth_client, user_id, make_meal):
    make_meal(user_id, '2024-06-05')

    body = auth_client.get('/api/meal-plans?start=2024-06-03&end=2024-06-09').get_json()
    assert len(body['meal_plans']) == 1
    assert auth_client.get('/api/meal-plans?start=2024-06-03').status_code == 400


def test_add_meal_plan_route_rejects_bad_slot(auth_client, user_id, make_recipe):
    recipe_id = make_recipe(user_id)
    response = auth_client.post('/api/meal-plans', json={
        'recipe_id': recipe_id, 'date': '2024-06-05', 'meal_type': 'supper',
    })
    assert response.status_code == 400
    assert 'Invalid meal type' in response.get_json()['error']


def test_custom_meal_route_rejects_non_string_meal_type(auth_client):
    response = auth_client.post('/api/meal-plans/custom', json={
        'name': 'Soup', 'date': '2024-06-05', 'meal_type': 5,
    })
    assert response.status_code == 400
    assert 'Invalid meal type' in response.get_json()['error']


@pytest.mark.parametrize('payload, error', [
    ({'ingredients': ['egg'], 'difficulty': 3}, "Invalid difficulty '3'"),
    ({'ingredients': 5}, 'Ingredients must be a list or comma-separated text'),
    ({'ingredients': ['egg'], 'dietary_restrictions': {'vegan': True}},
     'Dietary restrictions must be a list or comma-separated text'),
])
def test_generate_route_rejects_wrongly_typed_fields(auth_client, fake_inference, payload, error):
    response = auth_client.post('/api/recipes/generate', json=payload)

    assert response.status_code == 400
    assert error in response.get_json()['error']
    assert fake_inference.prompts == []


def test_copy_week_route(auth_client, user_id, make_meal, app):
    make_meal(user_id, '2024-06-05', 'dinner', custom_meal_name='Stew')

    response = auth_client.post('/api/meal-plans/copy-week', json={
        'source_week': '2024-06-03', 'target_week': '2024-06-17',
    })

    assert response.status_code == 200
    assert response.get_json()['count'] == 1
    with app.app_context():
        dates = sorted(m.planned_date.isoformat() for m in MealPlan.query.all())
    assert dates == ['2024-06-05', '2024-06-19']

    same = auth_client.post('/api/meal-plans/copy-week', json={
        'source_week': '2024-06-03', 'target_week': '2024-06-03',
    })
    assert same.status_code == 400
    assert same.get_json() == {'error': 'Cannot copy to the same week'}


def test_pantry_routes(auth_client):
    added = auth_client.post('/api/pantry', json={'name': 'Basil', 'quantity': '1 bunch', 'expiry_date': '2024-06-20'})
    assert added.status_code == 200
    item = added.get_json()['item']
    assert item['name'] == 'basil'

    items = auth_client.get('/api/pantry').get_json()['items']
    assert [i['name'] for i in items] == ['basil']

    assert auth_client.post(f"/api/pantry/{item['id']}/delete").status_code == 200
    assert auth_client.get('/api/pantry').get_json()['items'] == []


def test_dashboard_route(auth_client, user_id, make_recipe):
    make_recipe(user_id, 'Curry', is_favorite=True)
    make_recipe(user_id, 'Tacos')

    body = auth_client.get('/api/dashboard').get_json()

    assert body['recipe_count'] == 2
    assert body['favorite_count'] == 1
