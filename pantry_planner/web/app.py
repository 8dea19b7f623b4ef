#!/usr/bin/env python3
"""
Flask web application for the Pantry Planner.

JSON API for generating recipes from pantry ingredients, saving favorites,
planning the week, building grocery lists and rating recipes.
"""

import os
import logging
from logging.handlers import RotatingFileHandler
from datetime import date, datetime
from functools import wraps
from typing import Any, Dict, List, Optional

from flask import Flask, Response, current_app, jsonify, request, session
from flask_cors import CORS
from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash, check_password_hash

from ..data.models import Recipe
from ..export import format_grocery_list_text, render_grocery_list_html
from ..main import PantryPlannerAssistant
from ..subscription import PRICING_LIMITS

# Load environment variables from .env file
load_dotenv()

# Setup logging with both console and file output
logs_dir = os.environ.get("PANTRY_LOG_DIR", "logs")
os.makedirs(logs_dir, exist_ok=True)

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[
        logging.StreamHandler(),  # Console output
        RotatingFileHandler(
            os.path.join(logs_dir, 'app.log'),
            maxBytes=10*1024*1024,  # 10MB
            backupCount=5
        )
    ]
)
logger = logging.getLogger(__name__)

# Initialize Flask app
app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key-change-in-production")
app.config["DB_DIR"] = os.environ.get("PANTRY_DB_DIR", "data")
CORS(app)


# ==================== Request Models ====================

class AuthRequest(BaseModel):
    """Login or registration form."""
    username: str
    password: str
    confirm_password: Optional[str] = None


class GenerateRequest(BaseModel):
    """Either free-text pantry or an ingredient list."""
    pantry: Optional[str] = None
    ingredients: Optional[List[str]] = None
    cuisines: List[str] = Field(default_factory=list)
    count: int = Field(default=5, ge=0, le=20)


class RecipeRequest(BaseModel):
    recipe: Dict[str, Any]


class ToggleItemRequest(BaseModel):
    name: str


class PreferencesRequest(BaseModel):
    dietary_filters: List[str]


class RatingRequest(BaseModel):
    recipe_id: str
    rating: int = Field(ge=1, le=5)
    review: Optional[str] = None


# ==================== Helpers ====================

def get_assistant() -> PantryPlannerAssistant:
    """Assistant bound to the configured database directory (created once per app)."""
    assistant = current_app.extensions.get("pantry_planner")
    if assistant is None:
        assistant = PantryPlannerAssistant(db_dir=current_app.config["DB_DIR"])
        current_app.extensions["pantry_planner"] = assistant
    return assistant


def login_required(f):
    """Decorator to require login for routes."""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if 'user_id' not in session:
            return jsonify({"success": False, "error": "Login required"}), 401
        return f(*args, **kwargs)
    return decorated_function


def parse_body(model):
    """Validate the JSON (or form) body against a pydantic model."""
    data = request.get_json(silent=True)
    if data is None:
        data = request.form.to_dict()
    return model(**data)


def recipe_from_payload(data: Dict[str, Any]) -> Recipe:
    try:
        return Recipe.from_dict(data)
    except KeyError as e:
        raise ValueError(f"Recipe is missing field {e}")


def refusal_response(result: Dict[str, Any]):
    """Map an orchestrator failure to a response (402 for plan limits)."""
    if result.get("upgrade_required"):
        return jsonify(result), 402
    return jsonify(result), 500


@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return jsonify({"success": False, "error": e.errors(include_url=False)}), 400


@app.errorhandler(ValueError)
@app.errorhandler(TypeError)
def handle_bad_input(e):
    logger.warning(f"Rejected request to {request.path}: {e}")
    return jsonify({"success": False, "error": str(e)}), 400


@app.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return jsonify({"success": False, "error": e.description}), e.code
    logger.error(f"Error handling {request.path}: {e}", exc_info=True)
    return jsonify({"success": False, "error": str(e)}), 500


# ==================== Auth ====================

@app.route('/health')
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy", "timestamp": datetime.now().isoformat()}), 200


@app.route('/register', methods=['POST'])
def register():
    """Create an account and log it in."""
    form = parse_body(AuthRequest)
    username = form.username.strip()

    # Validation
    if len(username) < 3:
        return jsonify({"success": False, "error": "Username must be at least 3 characters"}), 400
    if len(form.password) < 4:
        return jsonify({"success": False, "error": "Password must be at least 4 characters"}), 400
    if form.confirm_password is not None and form.password != form.confirm_password:
        return jsonify({"success": False, "error": "Passwords do not match"}), 400

    db = get_assistant().db
    if db.get_user_by_username(username):
        return jsonify({"success": False, "error": "Username already taken"}), 409

    user_id = db.create_user(username, generate_password_hash(form.password))
    if not user_id:
        return jsonify({"success": False, "error": "Failed to create account"}), 409

    logger.info(f"New user registered: {username} (ID: {user_id})")
    # Auto-login after registration
    session['username'] = username
    session['user_id'] = user_id
    return jsonify({"success": True, "user_id": user_id, "username": username}), 201


@app.route('/login', methods=['POST'])
def login():
    """Log in with username and password."""
    form = parse_body(AuthRequest)
    user = get_assistant().db.get_user_by_username(form.username.strip())
    if not user or not check_password_hash(user['password_hash'], form.password):
        return jsonify({"success": False, "error": "Invalid username or password"}), 401

    session['username'] = user['username']
    session['user_id'] = user['id']
    logger.info(f"User {user['username']} (ID: {user['id']}) logged in")
    return jsonify({"success": True, "user_id": user['id'], "username": user['username']})


@app.route('/logout', methods=['POST'])
def logout():
    """Logout and clear session."""
    username = session.get('username', 'unknown')
    session.clear()
    logger.info(f"User {username} logged out")
    return jsonify({"success": True})


# ==================== Recipes ====================

@app.route('/api/recipes/generate', methods=['POST'])
@login_required
def api_generate_recipes():
    """Generate recipes from the pantry, filtered by saved preferences."""
    form = parse_body(GenerateRequest)
    if form.pantry is None and form.ingredients is None:
        return jsonify({"success": False, "error": "Provide 'pantry' text or an 'ingredients' list"}), 400

    pantry = form.ingredients if form.ingredients is not None else form.pantry
    result = get_assistant().generate(session['user_id'], pantry, form.cuisines, form.count)
    result["recipes"] = [r.to_dict() for r in result["recipes"]]
    return jsonify(result)


@app.route('/api/suggestions')
@login_required
def api_suggestions():
    """Personalized suggestions."""
    cuisines = request.args.getlist('cuisine')
    recipes = get_assistant().suggestions(session['user_id'], cuisines or None)
    return jsonify({"success": True, "recipes": [r.to_dict() for r in recipes]})


@app.route('/api/trending')
def api_trending():
    """Trending recipes (no login needed)."""
    recipes = get_assistant().trending()
    return jsonify({"success": True, "recipes": [r.to_dict() for r in recipes]})


# ==================== Favorites ====================

@app.route('/api/favorites', methods=['GET'])
@login_required
def api_get_favorites():
    favorites = get_assistant().get_favorites(session['user_id'])
    return jsonify({"success": True, "favorites": [r.to_dict() for r in favorites]})


@app.route('/api/favorites', methods=['POST'])
@login_required
def api_toggle_favorite():
    """Toggle a recipe in the user's favorites."""
    form = parse_body(RecipeRequest)
    result = get_assistant().toggle_favorite(session['user_id'], recipe_from_payload(form.recipe))
    if not result["success"]:
        return refusal_response(result)

    result["favorites"] = [r.to_dict() for r in result["favorites"]]
    return jsonify(result)


@app.route('/api/favorites/<recipe_id>', methods=['DELETE'])
@login_required
def api_remove_favorite(recipe_id):
    if not get_assistant().remove_favorite(session['user_id'], recipe_id):
        return jsonify({"success": False, "error": "Favorite not found"}), 404
    return jsonify({"success": True})


# ==================== Meal Plan ====================

def _meal_plan_response(result: Dict[str, Any]):
    if not result["success"]:
        return refusal_response(result)
    return jsonify({"success": True, "meal_plan": result["meal_plan"].to_dict()})


@app.route('/api/meal-plan', methods=['GET'])
@login_required
def api_get_meal_plan():
    meal_plan = get_assistant().get_meal_plan(session['user_id'])
    return jsonify({"success": True, "meal_plan": meal_plan.to_dict()})


@app.route('/api/meal-plan', methods=['DELETE'])
@login_required
def api_clear_meal_plan():
    return _meal_plan_response(get_assistant().clear_meal_plan(session['user_id']))


@app.route('/api/meal-plan/<day>/<int:slot>', methods=['PUT'])
@login_required
def api_assign_meal(day, slot):
    """Put a recipe into a day's meal slot."""
    form = parse_body(RecipeRequest)
    result = get_assistant().assign_meal(
        session['user_id'], day.capitalize(), slot, recipe_from_payload(form.recipe)
    )
    return _meal_plan_response(result)


@app.route('/api/meal-plan/<day>/<int:slot>', methods=['DELETE'])
@login_required
def api_remove_meal(day, slot):
    result = get_assistant().remove_meal(session['user_id'], day.capitalize(), slot)
    return _meal_plan_response(result)


# ==================== Grocery List ====================

@app.route('/api/grocery-list', methods=['POST'])
@login_required
def api_create_grocery_list():
    """Build a grocery list from the current meal plan."""
    result = get_assistant().create_grocery_list(session['user_id'])
    if not result["success"]:
        if result.get("upgrade_required"):
            return jsonify(result), 402
        return jsonify(result), 400

    return jsonify({
        "success": True,
        "grocery_list": result["grocery_list"].to_dict(),
        "usage_count": result["usage_count"],
    })


def _current_grocery_list():
    return get_assistant().get_grocery_list(session['user_id'])


def _no_grocery_list():
    return jsonify({"success": False, "error": "No grocery list yet"}), 404


@app.route('/api/grocery-list', methods=['GET'])
@login_required
def api_get_grocery_list():
    grocery_list = _current_grocery_list()
    if grocery_list is None:
        return _no_grocery_list()
    return jsonify({"success": True, "grocery_list": grocery_list.to_dict()})


@app.route('/api/grocery-list/toggle', methods=['POST'])
@login_required
def api_toggle_grocery_item():
    form = parse_body(ToggleItemRequest)
    item = get_assistant().toggle_grocery_item(session['user_id'], form.name)
    if item is None:
        return jsonify({"success": False, "error": f"No grocery item named '{form.name}'"}), 404
    return jsonify({"success": True, "item": item.to_dict()})


@app.route('/api/grocery-list/export.txt')
@login_required
def api_export_grocery_list():
    """Download the grocery list as a text file."""
    grocery_list = _current_grocery_list()
    if grocery_list is None:
        return _no_grocery_list()

    filename = f"grocery-list-{date.today().isoformat()}.txt"
    return Response(
        format_grocery_list_text(grocery_list),
        mimetype='text/plain',
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


@app.route('/api/grocery-list/print')
@login_required
def api_print_grocery_list():
    """Printable HTML page of the grocery list."""
    grocery_list = _current_grocery_list()
    if grocery_list is None:
        return _no_grocery_list()
    return Response(render_grocery_list_html(grocery_list), mimetype='text/html')


# ==================== Preferences ====================

@app.route('/api/preferences', methods=['GET'])
@login_required
def api_get_preferences():
    filters = get_assistant().get_dietary_filters(session['user_id'])
    return jsonify({"success": True, "dietary_filters": filters})


@app.route('/api/preferences', methods=['PUT'])
@login_required
def api_set_preferences():
    form = parse_body(PreferencesRequest)
    result = get_assistant().set_dietary_filters(session['user_id'], form.dietary_filters)
    if not result["success"]:
        return refusal_response(result)
    return jsonify(result)


# ==================== Ratings ====================

@app.route('/api/ratings', methods=['POST'])
@login_required
def api_submit_rating():
    form = parse_body(RatingRequest)
    rating = get_assistant().submit_rating(
        session['user_id'], form.recipe_id, form.rating, form.review
    )
    return jsonify({"success": True, "rating": rating.to_dict()})


@app.route('/api/ratings/<recipe_id>')
@login_required
def api_get_ratings(recipe_id):
    ratings = get_assistant().get_ratings(recipe_id)
    average = sum(r.rating for r in ratings) / len(ratings) if ratings else None
    return jsonify({
        "success": True,
        "ratings": [r.to_dict() for r in ratings],
        "average_rating": average,
        "total_ratings": len(ratings),
    })


# ==================== Subscription ====================

@app.route('/api/subscription')
@login_required
def api_get_subscription():
    assistant = get_assistant()
    subscription = assistant.get_subscription(session['user_id'])
    return jsonify({
        "success": True,
        "subscription": subscription.to_dict(),
        "limits": PRICING_LIMITS[subscription.plan],
        "usage": assistant.get_usage_summary(session['user_id']),
    })


@app.route('/api/subscription/upgrade', methods=['POST'])
@login_required
def api_upgrade_subscription():
    subscription = get_assistant().upgrade_to_pro(session['user_id'])
    return jsonify({"success": True, "subscription": subscription.to_dict()})


if __name__ == '__main__':
    # Run development server
    app.run(
        host='0.0.0.0',
        port=int(os.environ.get("PORT", 5000)),
        debug=True,
    )
