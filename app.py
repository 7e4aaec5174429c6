import logging
import os
import sqlite3
from datetime import date

from flask import Flask, request, jsonify
from flask_login import LoginManager, login_user, logout_user, login_required, current_user
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import HTTPException

from config import get_config
from constants import ALL_CUISINES
from models import db, Profile
from services import (
    NOT_AUTHENTICATED, ok, fail,
    parse_date, current_week_start, shift_week,
    get_meal_plans, get_week, get_day,
    add_meal_plan, add_custom_meal, remove_meal_plan, toggle_meal_complete,
    copy_week,
    list_recipes, get_recipe, toggle_favorite, delete_recipe, upload_recipe_image,
    generate_recipe,
    list_pantry, add_pantry_item, remove_pantry_item,
    dashboard_stats,
)
from services.cache import QueryCache
from utils.sanitizer import sanitize_name, sanitize_int

app = Flask(__name__)
app.config.from_object(get_config())

logging.basicConfig(
    level=getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
)
logger = logging.getLogger(__name__)

db.init_app(app)
migrate = Migrate(app, db)

login_manager = LoginManager(app)

# Read-query cache shared by the meal-plan actions
app.extensions['query_cache'] = QueryCache(ttl=app.config['QUERY_CACHE_TTL'])
# Built lazily from config on first generation; tests put a fake here
app.extensions['inference_client'] = None

TRUE_VALUES = {'1', 'true', 'on', 'yes'}


# Enable SQLite foreign key enforcement on every connection, including test engines
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


@login_manager.user_loader
def load_user(user_id):
    try:
        return db.session.get(Profile, int(user_id))
    except (TypeError, ValueError):
        return None


@login_manager.unauthorized_handler
def unauthorized():
    return jsonify({'error': NOT_AUTHENTICATED}), 401


def respond(result):
    """Send an action result as JSON with the status it asked for."""
    result = dict(result)
    status = result.pop('status', 200 if result.get('success') else 400)
    return jsonify(result), status


def request_data():
    """JSON body, or form fields for plain form posts."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    data = request.form.to_dict()
    for field in ('ingredients', 'dietary_restrictions'):
        values = request.form.getlist(field)
        if len(values) > 1:
            data[field] = values
    return data


def text_field(data, name):
    """A string field from the request; anything else counts as missing."""
    value = data.get(name)
    return value if isinstance(value, str) else ''


def parse_bool(value):
    if isinstance(value, bool):
        return value
    return str(value or '').strip().lower() in TRUE_VALUES


@app.errorhandler(Exception)
def handle_unexpected_error(error):
    if isinstance(error, HTTPException):
        return jsonify({'error': error.description}), error.code
    db.session.rollback()
    logger.exception("Unhandled error on %s %s", request.method, request.path)
    return jsonify({'error': 'Something went wrong', 'retry': True}), 500


# ============================================
# ROUTES - HEALTH
# ============================================

@app.route('/api/health')
def health():
    return jsonify({'status': 'ok'})

# ============================================
# ROUTES - AUTH
# ============================================

@app.route('/api/auth/signup', methods=['POST'])
def signup():
    data = request_data()
    email = text_field(data, 'email').strip().lower()
    password = text_field(data, 'password')

    if not email or '@' not in email:
        return respond(fail('A valid email is required'))
    if len(password) < 6:
        return respond(fail('Password must be at least 6 characters'))

    try:
        if Profile.query.filter_by(email=email).first():
            return respond(fail('An account with this email already exists'))
        profile = Profile(
            email=email,
            full_name=sanitize_name(data.get('full_name') or data.get('fullName'), max_length=200) or None,
        )
        profile.set_password(password)
        db.session.add(profile)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        logger.exception("Sign up failed for %s", email)
        return respond(fail('Failed to create account', 500))

    login_user(profile)
    logger.info("New account %s", profile.id)
    return respond(ok(user=profile.to_dict()))


@app.route('/api/auth/login', methods=['POST'])
def login():
    data = request_data()
    email = text_field(data, 'email').strip().lower()
    profile = Profile.query.filter_by(email=email).first() if email else None
    if profile is None or not profile.check_password(text_field(data, 'password')):
        return respond(fail('Invalid email or password', 401))

    login_user(profile, remember=parse_bool(data.get('remember')))
    return respond(ok(user=profile.to_dict()))


@app.route('/api/auth/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return respond(ok())


@app.route('/api/auth/me')
@login_required
def me():
    return respond(ok(user=current_user.to_dict()))

# ============================================
# ROUTES - DASHBOARD
# ============================================

@app.route('/api/dashboard')
@login_required
def dashboard():
    return respond(dashboard_stats(current_user.id))

# ============================================
# ROUTES - RECIPES
# ============================================

@app.route('/api/recipes')
@login_required
def recipes_list():
    return respond(list_recipes(
        current_user.id,
        search=request.args.get('search', ''),
        cuisine=request.args.get('cuisine', ALL_CUISINES),
        favorites_only=parse_bool(request.args.get('favorites')),
        sort_by=request.args.get('sort', 'newest'),
    ))


@app.route('/api/recipes/generate', methods=['POST'])
@login_required
def recipe_generate():
    return respond(generate_recipe(current_user.id, request_data()))


@app.route('/api/recipes/<int:id>')
@login_required
def recipe_view(id):
    return respond(get_recipe(current_user.id, id))


@app.route('/api/recipes/<int:id>/favorite', methods=['POST'])
@login_required
def recipe_favorite(id):
    return respond(toggle_favorite(current_user.id, id))


@app.route('/api/recipes/<int:id>/delete', methods=['POST'])
@login_required
def recipe_delete(id):
    return respond(delete_recipe(current_user.id, id, upload_folder=app.config['UPLOAD_FOLDER']))


@app.route('/api/recipes/<int:id>/image', methods=['POST'])
@login_required
def recipe_upload_image(id):
    return respond(upload_recipe_image(
        current_user.id, id, request.files.get('image'), app.config['UPLOAD_FOLDER']
    ))

# ============================================
# ROUTES - MEAL PLAN
# ============================================

@app.route('/api/meal-plans')
@login_required
def meal_plans_range():
    return respond(get_meal_plans(current_user.id, request.args.get('start'), request.args.get('end')))


@app.route('/api/meal-plans/week')
@login_required
def meal_plan_week():
    """Week grid. ``start`` (or any ``date`` in the week) plus an optional week ``offset``."""
    anchor = request.args.get('start') or request.args.get('date')
    try:
        start = parse_date(anchor) if anchor else current_week_start()
    except ValueError as e:
        return respond(fail(str(e)))
    offset = sanitize_int(request.args.get('offset'), default=0)
    if offset:
        start = shift_week(start, offset)
    return respond(get_week(current_user.id, start))


@app.route('/api/meal-plans/day')
@login_required
def meal_plan_day():
    day = request.args.get('date') or date.today().isoformat()
    step = sanitize_int(request.args.get('step'), default=0)
    return respond(get_day(current_user.id, day, step))


@app.route('/api/meal-plans', methods=['POST'])
@login_required
def meal_plan_add():
    data = request_data()
    return respond(add_meal_plan(
        current_user.id, data.get('recipe_id'), data.get('date'), data.get('meal_type'),
        notes=data.get('notes'),
    ))


@app.route('/api/meal-plans/custom', methods=['POST'])
@login_required
def meal_plan_add_custom():
    data = request_data()
    return respond(add_custom_meal(
        current_user.id, data.get('custom_meal_name') or data.get('name'),
        data.get('date'), data.get('meal_type'),
        notes=data.get('notes'),
    ))


@app.route('/api/meal-plans/<int:id>/delete', methods=['POST'])
@login_required
def meal_plan_delete(id):
    return respond(remove_meal_plan(current_user.id, id))


@app.route('/api/meal-plans/<int:id>/toggle', methods=['POST'])
@login_required
def meal_plan_toggle(id):
    return respond(toggle_meal_complete(current_user.id, id))


@app.route('/api/meal-plans/copy-week', methods=['POST'])
@login_required
def meal_plan_copy_week():
    data = request_data()
    return respond(copy_week(current_user.id, data.get('source_week'), data.get('target_week')))

# ============================================
# ROUTES - PANTRY
# ============================================

@app.route('/api/pantry')
@login_required
def pantry_list():
    return respond(list_pantry(current_user.id))


@app.route('/api/pantry', methods=['POST'])
@login_required
def pantry_add():
    data = request_data()
    return respond(add_pantry_item(
        current_user.id, data.get('name'),
        quantity=data.get('quantity'), expiry_date=data.get('expiry_date'),
    ))


@app.route('/api/pantry/<int:id>/delete', methods=['POST'])
@login_required
def pantry_delete(id):
    return respond(remove_pantry_item(current_user.id, id))

# ============================================
# INITIALIZE DATABASE
# ============================================

def init_db():
    with app.app_context():
        db.create_all()
        os.makedirs(app.config['UPLOAD_FOLDER'], exist_ok=True)
        logger.info("Database ready at %s", app.config['SQLALCHEMY_DATABASE_URI'])


if __name__ == '__main__':
    init_db()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000, use_reloader=False)
