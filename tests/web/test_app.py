"""
Tests for the Flask JSON API.

Each test gets its own database directory; the cached assistant is dropped
so it is rebuilt against that directory.
"""

import pytest

from pantry_planner.web.app import app


@pytest.fixture
def client(temp_db_dir):
    """Flask test client with session support."""
    app.config['TESTING'] = True
    app.config['SECRET_KEY'] = 'test_secret_key'
    app.config['DB_DIR'] = temp_db_dir
    app.extensions.pop('pantry_planner', None)
    with app.test_client() as client:
        yield client
    app.extensions.pop('pantry_planner', None)


@pytest.fixture
def logged_in(client):
    """Client whose session belongs to user 1."""
    with client.session_transaction() as sess:
        sess['user_id'] = 1  # Required for @login_required
        sess['username'] = 'test_user'
    return client


def _plan_two_meals(client, sample_meal_plan):
    for day, slot, recipe in sample_meal_plan.iter_slots():
        response = client.put(f'/api/meal-plan/{day.lower()}/{slot}', json={'recipe': recipe.to_dict()})
        assert response.status_code == 200


class TestAuth:

    def test_health(self, client):
        response = client.get('/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'healthy'

    def test_register_login_logout(self, client):
        response = client.post('/register', json={
            'username': 'cook', 'password': 'secret', 'confirm_password': 'secret'
        })
        assert response.status_code == 201
        user_id = response.get_json()['user_id']

        client.post('/logout')
        assert client.get('/api/favorites').status_code == 401

        response = client.post('/login', json={'username': 'cook', 'password': 'secret'})
        assert response.status_code == 200
        assert response.get_json()['user_id'] == user_id
        assert client.get('/api/favorites').status_code == 200

    def test_register_with_form_data(self, client):
        response = client.post('/register', data={'username': 'formcook', 'password': 'secret'})
        assert response.status_code == 201

    def test_register_validation(self, client):
        assert client.post('/register', json={'username': 'ab', 'password': 'secret'}).status_code == 400
        assert client.post('/register', json={'username': 'cook', 'password': '123'}).status_code == 400
        response = client.post('/register', json={
            'username': 'cook', 'password': 'secret', 'confirm_password': 'other'
        })
        assert response.status_code == 400
        assert client.post('/register', json={'username': 'cook'}).status_code == 400

    def test_duplicate_username(self, client):
        client.post('/register', json={'username': 'cook', 'password': 'secret'})
        response = client.post('/register', json={'username': 'cook', 'password': 'secret'})
        assert response.status_code == 409

    def test_bad_password(self, client):
        client.post('/register', json={'username': 'cook', 'password': 'secret'})
        response = client.post('/login', json={'username': 'cook', 'password': 'wrong'})
        assert response.status_code == 401

    def test_login_required(self, client):
        response = client.post('/api/recipes/generate', json={'pantry': 'chicken'})
        assert response.status_code == 401
        assert response.get_json()['error'] == 'Login required'


class TestRecipes:

    def test_generate_from_text(self, logged_in):
        response = logged_in.post('/api/recipes/generate', json={'pantry': 'chicken, rice, broccoli'})
        assert response.status_code == 200

        data = response.get_json()
        assert data['pantry'] == ['chicken', 'rice', 'broccoli']
        assert 1 <= len(data['recipes']) <= 5
        recipe = data['recipes'][0]
        assert recipe['schema_version'] == 1
        assert set(recipe['used_ingredients']) <= {'chicken', 'rice', 'broccoli'}

    def test_generate_from_list_with_cuisine(self, logged_in):
        response = logged_in.post('/api/recipes/generate', json={
            'ingredients': ['salmon', 'rice'], 'cuisines': ['Japanese'], 'count': 3
        })
        assert response.status_code == 200
        recipes = response.get_json()['recipes']
        assert len(recipes) <= 3
        assert all(r['cuisine'] == 'Japanese' for r in recipes)

    def test_generate_needs_pantry(self, logged_in):
        assert logged_in.post('/api/recipes/generate', json={}).status_code == 400

    def test_generate_rejects_bad_input(self, logged_in):
        response = logged_in.post('/api/recipes/generate', json={'pantry': 'chicken', 'count': 50})
        assert response.status_code == 400
        response = logged_in.post('/api/recipes/generate', json={'pantry': 'chicken', 'cuisines': ['Martian']})
        assert response.status_code == 400

    def test_suggestions(self, logged_in):
        logged_in.post('/api/recipes/generate', json={'pantry': 'chicken, rice'})
        response = logged_in.get('/api/suggestions')
        assert response.status_code == 200
        assert 1 <= len(response.get_json()['recipes']) <= 4

    def test_trending_is_public(self, client):
        response = client.get('/api/trending')
        assert response.status_code == 200
        assert len(response.get_json()['recipes']) == 6


class TestFavorites:

    def test_toggle_and_list(self, logged_in, sample_recipe):
        response = logged_in.post('/api/favorites', json={'recipe': sample_recipe.to_dict()})
        assert response.status_code == 200
        assert response.get_json()['favorited'] is True

        favorites = logged_in.get('/api/favorites').get_json()['favorites']
        assert [f['id'] for f in favorites] == ['recipe_1']

        response = logged_in.post('/api/favorites', json={'recipe': sample_recipe.to_dict()})
        assert response.get_json()['favorited'] is False

    def test_limit_returns_402(self, logged_in, recipe_factory):
        for i in range(10):
            recipe = recipe_factory(recipe_id=f'r{i}').to_dict()
            assert logged_in.post('/api/favorites', json={'recipe': recipe}).status_code == 200

        recipe = recipe_factory(recipe_id='r10').to_dict()
        response = logged_in.post('/api/favorites', json={'recipe': recipe})
        assert response.status_code == 402
        assert response.get_json()['upgrade_required'] is True

    def test_delete(self, logged_in, sample_recipe):
        logged_in.post('/api/favorites', json={'recipe': sample_recipe.to_dict()})
        assert logged_in.delete('/api/favorites/recipe_1').status_code == 200
        assert logged_in.delete('/api/favorites/recipe_1').status_code == 404

    def test_incomplete_recipe(self, logged_in):
        response = logged_in.post('/api/favorites', json={'recipe': {'title': 'No id'}})
        assert response.status_code == 400


class TestMealPlan:

    def test_assign_and_remove(self, logged_in, sample_recipe):
        response = logged_in.put('/api/meal-plan/monday/1', json={'recipe': sample_recipe.to_dict()})
        assert response.status_code == 200
        assert response.get_json()['meal_plan']['Monday']['meal1']['id'] == 'recipe_1'

        response = logged_in.delete('/api/meal-plan/monday/1')
        assert response.status_code == 200

        assert logged_in.get('/api/meal-plan').get_json()['meal_plan'] == {}

    def test_bad_day_or_slot(self, logged_in, sample_recipe):
        payload = {'recipe': sample_recipe.to_dict()}
        assert logged_in.put('/api/meal-plan/someday/1', json=payload).status_code == 400
        assert logged_in.put('/api/meal-plan/monday/3', json=payload).status_code == 400

    def test_clear(self, logged_in, sample_meal_plan):
        _plan_two_meals(logged_in, sample_meal_plan)
        assert logged_in.delete('/api/meal-plan').status_code == 200
        assert logged_in.post('/api/grocery-list').status_code == 400


class TestGroceryList:

    def test_create_toggle_and_get(self, logged_in, sample_meal_plan):
        assert logged_in.get('/api/grocery-list').status_code == 404

        _plan_two_meals(logged_in, sample_meal_plan)
        response = logged_in.post('/api/grocery-list')
        assert response.status_code == 200
        data = response.get_json()
        assert data['usage_count'] == 1
        assert [i['name'] for i in data['grocery_list']['items']] == ['Garlic', 'Ginger', 'Soy sauce']

        response = logged_in.post('/api/grocery-list/toggle', json={'name': 'Ginger'})
        assert response.get_json()['item']['checked'] is True
        assert logged_in.post('/api/grocery-list/toggle', json={'name': 'Saffron'}).status_code == 404

        items = logged_in.get('/api/grocery-list').get_json()['grocery_list']['items']
        assert [i['checked'] for i in items] == [False, True, False]

    def test_empty_plan(self, logged_in):
        response = logged_in.post('/api/grocery-list')
        assert response.status_code == 400
        assert response.get_json()['error'] == 'No meals planned'

    def test_weekly_limit_returns_402(self, logged_in, sample_meal_plan):
        _plan_two_meals(logged_in, sample_meal_plan)
        for _ in range(3):
            assert logged_in.post('/api/grocery-list').status_code == 200

        response = logged_in.post('/api/grocery-list')
        assert response.status_code == 402
        assert response.get_json()['upgrade_required'] is True

    def test_text_export(self, logged_in, sample_meal_plan):
        _plan_two_meals(logged_in, sample_meal_plan)
        logged_in.post('/api/grocery-list')

        response = logged_in.get('/api/grocery-list/export.txt')
        assert response.status_code == 200
        assert response.mimetype == 'text/plain'
        assert response.headers['Content-Disposition'].startswith('attachment; filename=grocery-list-')
        text = response.get_data(as_text=True)
        assert text.startswith('GROCERY LIST')
        assert '[ ] Garlic (2 units)' in text

    def test_print_page(self, logged_in, sample_meal_plan):
        assert logged_in.get('/api/grocery-list/print').status_code == 404

        _plan_two_meals(logged_in, sample_meal_plan)
        logged_in.post('/api/grocery-list')

        response = logged_in.get('/api/grocery-list/print')
        assert response.status_code == 200
        assert response.mimetype == 'text/html'
        assert '<span class="item-name">Soy sauce</span>' in response.get_data(as_text=True)


class TestPreferences:

    def test_set_and_get(self, logged_in):
        response = logged_in.put('/api/preferences', json={'dietary_filters': ['Vegan']})
        assert response.status_code == 200
        assert logged_in.get('/api/preferences').get_json()['dietary_filters'] == ['Vegan']

    def test_second_filter_needs_pro(self, logged_in):
        response = logged_in.put('/api/preferences', json={'dietary_filters': ['Vegan', 'Keto']})
        assert response.status_code == 400

        response = logged_in.put('/api/preferences', json={'dietary_filters': ['Vegan', 'Gluten-Free']})
        assert response.status_code == 402

        logged_in.post('/api/subscription/upgrade')
        response = logged_in.put('/api/preferences', json={'dietary_filters': ['Vegan', 'Gluten-Free']})
        assert response.status_code == 200


class TestRatings:

    def test_submit_and_list(self, logged_in):
        response = logged_in.post('/api/ratings', json={'recipe_id': 'r1', 'rating': 4, 'review': 'Tasty'})
        assert response.status_code == 200
        assert response.get_json()['rating']['id'] == 'rating_1_r1'

        with logged_in.session_transaction() as sess:
            sess['user_id'] = 2
        logged_in.post('/api/ratings', json={'recipe_id': 'r1', 'rating': 5})

        data = logged_in.get('/api/ratings/r1').get_json()
        assert data['total_ratings'] == 2
        assert data['average_rating'] == 4.5

    def test_out_of_range(self, logged_in):
        response = logged_in.post('/api/ratings', json={'recipe_id': 'r1', 'rating': 0})
        assert response.status_code == 400

    def test_unrated_recipe(self, logged_in):
        data = logged_in.get('/api/ratings/nothing').get_json()
        assert data['ratings'] == []
        assert data['average_rating'] is None


class TestSubscription:

    def test_free_by_default(self, logged_in):
        data = logged_in.get('/api/subscription').get_json()
        assert data['subscription']['plan'] == 'free'
        assert data['limits']['grocery_lists_per_week'] == 3
        assert data['usage'] == {'grocery_list': 0, 'favorite_recipe': 0, 'dietary_filter': 0}

    def test_upgrade(self, logged_in):
        response = logged_in.post('/api/subscription/upgrade')
        assert response.get_json()['subscription']['plan'] == 'pro'

        data = logged_in.get('/api/subscription').get_json()
        assert data['limits']['max_favorite_recipes'] == -1
