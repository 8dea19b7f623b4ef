"""
Database interface for the Pantry Planner.

Everything lives in one SQLite file (pantry_planner.db):
- records: JSON documents grouped into named collections (favorites, meal
  plans, preferences, ratings, subscriptions, weekly usage)
- users: login accounts for the web app

Record fields use camelCase names (userId, recipeId, createdAt, ...), the
format earlier clients wrote.
"""

import json
import logging
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from .models import MEAL_SLOTS, MealPlan, Rating, Recipe, Subscription, Usage

logger = logging.getLogger(__name__)

DB_FILENAME = "pantry_planner.db"

FAVORITES = "favorites"
MEAL_PLANS = "mealPlans"
PREFERENCES = "preferences"
RATINGS = "ratings"
SUBSCRIPTIONS = "subscriptions"
USAGE = "usage"

COLLECTIONS = (FAVORITES, MEAL_PLANS, PREFERENCES, RATINGS, SUBSCRIPTIONS, USAGE)


class DatabaseInterface:
    """Interface for interacting with the SQLite database."""

    def __init__(self, db_dir: str = "data"):
        """
        Initialize database interface.

        Args:
            db_dir: Directory holding the database file (created if missing)
        """
        self.db_dir = Path(db_dir)
        self.db_dir.mkdir(parents=True, exist_ok=True)

        self.db_path = self.db_dir / DB_FILENAME

        self._init_database()

    def _init_database(self):
        """Initialize database schema."""
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS records (
                    collection TEXT NOT NULL,
                    id TEXT NOT NULL,
                    user_id INTEGER,
                    record_json TEXT NOT NULL,
                    created_at TEXT NOT NULL,
                    updated_at TEXT NOT NULL,
                    PRIMARY KEY (collection, id)
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_records_owner
                ON records(collection, user_id)
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS users (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    username TEXT UNIQUE NOT NULL,
                    password_hash TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            conn.commit()
            logger.info(f"Database initialized at {self.db_path}")

    @staticmethod
    def _check_collection(collection: str):
        if collection not in COLLECTIONS:
            raise ValueError(f"Unknown collection '{collection}', expected one of {COLLECTIONS}")

    # ==================== Generic Record Operations ====================

    def create_record(self, collection: str, record: Dict[str, Any]) -> str:
        """
        Insert a record, replacing any record with the same id.

        Args:
            collection: Collection name
            record: JSON-serializable dict; "id" is generated when missing,
                "createdAt"/"updatedAt" are filled in when missing

        Returns:
            Record ID
        """
        self._check_collection(collection)

        with sqlite3.connect(self.db_path) as conn:
            record_id = self._insert_record(conn.cursor(), collection, record)
            conn.commit()

        logger.debug(f"Saved {collection} record {record_id}")
        return record_id

    def _insert_record(self, cursor: sqlite3.Cursor, collection: str, record: Dict[str, Any]) -> str:
        """Write one record on an open cursor; the caller commits."""
        record = dict(record)
        now = datetime.now().isoformat()
        if not record.get("id"):
            record["id"] = f"{collection}_{uuid.uuid4().hex}"
        record.setdefault("createdAt", now)
        record.setdefault("updatedAt", record["createdAt"])

        cursor.execute(
            """
            INSERT OR REPLACE INTO records
            (collection, id, user_id, record_json, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (
                collection,
                record["id"],
                record.get("userId"),
                json.dumps(record),
                record["createdAt"],
                record["updatedAt"],
            )
        )
        return record["id"]

    def _replace_user_records(self, collection: str, user_id: int, records: List[Dict[str, Any]]):
        """
        Swap all of a user's records in a collection for new ones.

        Runs in a single transaction: if any insert fails, the previous
        records are left in place.
        """
        self._check_collection(collection)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM records WHERE collection = ? AND user_id = ?",
                (collection, user_id)
            )
            for record in records:
                self._insert_record(cursor, collection, record)
            conn.commit()

    def list_records(
        self,
        collection: str,
        where: Optional[Dict[str, Any]] = None,
        order_by: Optional[str] = None,
        descending: bool = True,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        List records of a collection.

        Args:
            collection: Collection name
            where: Field -> value equality predicates (all must hold)
            order_by: Field to sort on, typically "createdAt"
            descending: Sort newest first when order_by is given
            limit: Maximum number of records to return

        Returns:
            Record dicts; insertion order when order_by is None
        """
        self._check_collection(collection)
        where = dict(where or {})

        query = "SELECT record_json FROM records WHERE collection = ?"
        params: List[Any] = [collection]
        if "userId" in where:
            query += " AND user_id = ?"
            params.append(where.pop("userId"))
        query += " ORDER BY rowid"

        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            cursor.execute(query, params)
            rows = cursor.fetchall()

        records = [json.loads(row["record_json"]) for row in rows]
        records = [
            r for r in records
            if all(r.get(field) == value for field, value in where.items())
        ]

        if order_by:
            # Records missing the field sort as oldest
            records.sort(key=lambda r: (r.get(order_by) is not None, r.get(order_by)),
                         reverse=descending)
        if limit is not None:
            records = records[:limit]
        return records

    def get_record(self, collection: str, record_id: str) -> Optional[Dict[str, Any]]:
        """Get a record by ID, or None if not found."""
        self._check_collection(collection)
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            cursor.execute(
                "SELECT record_json FROM records WHERE collection = ? AND id = ?",
                (collection, record_id)
            )
            row = cursor.fetchone()

            if row:
                return json.loads(row["record_json"])

        return None

    def update_record(self, collection: str, record_id: str, changes: Dict[str, Any]) -> bool:
        """
        Merge changes into an existing record.

        Returns:
            True if the record existed and was updated
        """
        record = self.get_record(collection, record_id)
        if record is None:
            return False

        record.update(changes)
        record["id"] = record_id
        record["updatedAt"] = datetime.now().isoformat()

        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE records SET user_id = ?, record_json = ?, updated_at = ?
                WHERE collection = ? AND id = ?
                """,
                (
                    record.get("userId"),
                    json.dumps(record),
                    record["updatedAt"],
                    collection,
                    record_id,
                )
            )
            conn.commit()
        return True

    def delete_record(self, collection: str, record_id: str) -> bool:
        """Delete a record. Returns True if something was deleted."""
        self._check_collection(collection)
        with sqlite3.connect(self.db_path) as conn:
            cursor = conn.cursor()
            cursor.execute(
                "DELETE FROM records WHERE collection = ? AND id = ?",
                (collection, record_id)
            )
            conn.commit()
            return cursor.rowcount > 0

    # ==================== Favorites Operations ====================

    @staticmethod
    def _recipe_from_record(record: Dict[str, Any]) -> Recipe:
        data = record["recipeData"]
        # Older clients stored the recipe as a JSON string
        if isinstance(data, str):
            data = json.loads(data)
        return Recipe.from_dict(data)

    def save_favorites(self, user_id: int, recipes: List[Recipe]):
        """Replace a user's favorites with recipes, keeping their order."""
        self._replace_user_records(FAVORITES, user_id, [
            {
                "id": f"fav_{user_id}_{recipe.id}",
                "userId": user_id,
                "recipeId": recipe.id,
                "position": position,
                "recipeData": recipe.to_dict(),
            }
            for position, recipe in enumerate(recipes)
        ])
        logger.info(f"Saved {len(recipes)} favorites for user {user_id}")

    def get_favorites(self, user_id: int) -> List[Recipe]:
        """Load a user's favorites in saved order."""
        records = self.list_records(
            FAVORITES, where={"userId": user_id}, order_by="position", descending=False
        )
        return [self._recipe_from_record(r) for r in records]

    def remove_favorite(self, user_id: int, recipe_id: str) -> bool:
        return self.delete_record(FAVORITES, f"fav_{user_id}_{recipe_id}")

    # ==================== Meal Plan Operations ====================

    def save_meal_plan(self, user_id: int, meal_plan: MealPlan):
        """
        Replace a user's stored meal plan.

        One record per filled slot, with id plan_{user}_{day}_{slot}.
        """
        self._replace_user_records(MEAL_PLANS, user_id, [
            {
                "id": f"plan_{user_id}_{day}_meal{slot}",
                "userId": user_id,
                "day": day,
                "mealSlot": f"meal{slot}",
                "recipeData": recipe.to_dict(),
            }
            for day, slot, recipe in meal_plan.iter_slots()
        ])
        logger.info(f"Saved meal plan for user {user_id}: {len(meal_plan)} meals")

    def get_meal_plan(self, user_id: int) -> MealPlan:
        """Load a user's meal plan (empty if nothing is stored)."""
        meal_plan = MealPlan()
        for record in self.list_records(MEAL_PLANS, where={"userId": user_id}):
            slot = int(str(record["mealSlot"]).replace("meal", ""))
            if slot not in MEAL_SLOTS:
                logger.warning(f"Skipping meal plan record {record['id']} with slot {slot}")
                continue
            meal_plan.assign(record["day"], slot, self._recipe_from_record(record))
        return meal_plan

    # ==================== Preferences Operations ====================

    def get_preferences(self, user_id: int) -> Dict[str, Any]:
        """Get the preferences record for a user ({} if none)."""
        return self.get_record(PREFERENCES, f"pref_{user_id}") or {}

    def _save_preferences(self, user_id: int, **fields):
        record_id = f"pref_{user_id}"
        if not self.update_record(PREFERENCES, record_id, fields):
            self.create_record(PREFERENCES, {"id": record_id, "userId": user_id, **fields})

    def get_dietary_filters(self, user_id: int) -> List[str]:
        return list(self.get_preferences(user_id).get("dietaryFilters", []))

    def set_dietary_filters(self, user_id: int, filters: List[str]):
        self._save_preferences(user_id, dietaryFilters=list(filters))
        logger.info(f"Saved dietary filters for user {user_id}: {filters}")

    def get_recent_ingredients(self, user_id: int) -> List[str]:
        return list(self.get_preferences(user_id).get("recentIngredients", []))

    def set_recent_ingredients(self, user_id: int, ingredients: List[str]):
        self._save_preferences(user_id, recentIngredients=list(ingredients))

    # ==================== Rating Operations ====================

    def save_rating(self, rating: Rating) -> str:
        """Insert or replace a user's rating of a recipe."""
        existing = self.get_record(RATINGS, rating.id)
        record = rating.to_dict()
        if existing:
            record["createdAt"] = existing["createdAt"]
        record["updatedAt"] = datetime.now().isoformat()
        rating_id = self.create_record(RATINGS, record)
        logger.info(f"Saved rating {rating_id}: {rating.rating} stars")
        return rating_id

    def get_ratings_for_recipe(self, recipe_id: str) -> List[Rating]:
        """All ratings of a recipe, newest first."""
        records = self.list_records(RATINGS, where={"recipeId": recipe_id}, order_by="createdAt")
        return [Rating.from_dict(r) for r in records]

    def get_ratings_for_recipes(self, recipe_ids: List[str]) -> Dict[str, List[Rating]]:
        return {recipe_id: self.get_ratings_for_recipe(recipe_id) for recipe_id in recipe_ids}

    # ==================== Subscription Operations ====================

    def get_subscription(self, user_id: int) -> Optional[Subscription]:
        """Latest subscription record of a user."""
        records = self.list_records(
            SUBSCRIPTIONS, where={"userId": user_id}, order_by="createdAt", limit=1
        )
        return Subscription.from_dict(records[0]) if records else None

    def save_subscription(self, subscription: Subscription) -> str:
        subscription.updated_at = datetime.now()
        return self.create_record(SUBSCRIPTIONS, subscription.to_dict())

    # ==================== Usage Operations ====================

    def get_usage(self, user_id: int, usage_type: str, week_start: str) -> int:
        """How often a metered action was used in the given week."""
        record = self.get_record(USAGE, f"usage_{user_id}_{usage_type}_{week_start}")
        return record.get("usageCount", 0) if record else 0

    def increment_usage(self, user_id: int, usage_type: str, week_start: str, amount: int = 1) -> int:
        """
        Add to a weekly usage counter, creating it on first use.

        Returns:
            The new count
        """
        usage = Usage(user_id=user_id, usage_type=usage_type, week_start=week_start)
        record = self.get_record(USAGE, usage.id)
        if record:
            new_count = record.get("usageCount", 0) + amount
            self.update_record(USAGE, usage.id, {"usageCount": new_count})
        else:
            usage.usage_count = amount
            new_count = amount
            self.create_record(USAGE, usage.to_dict())
        logger.debug(f"Usage {usage.id} is now {new_count}")
        return new_count

    # ==================== User Authentication Operations ====================

    def create_user(self, username: str, password_hash: str) -> Optional[int]:
        """
        Create a new user.

        Args:
            username: Unique username
            password_hash: Hashed password (use werkzeug.security.generate_password_hash)

        Returns:
            User ID if created, None if username already exists
        """
        try:
            with sqlite3.connect(self.db_path) as conn:
                cursor = conn.cursor()
                cursor.execute(
                    """
                    INSERT INTO users (username, password_hash, created_at)
                    VALUES (?, ?, ?)
                    """,
                    (username, password_hash, datetime.now().isoformat())
                )
                conn.commit()
                user_id = cursor.lastrowid
                logger.info(f"Created user: {username} (ID: {user_id})")
                return user_id
        except sqlite3.IntegrityError:
            logger.warning(f"Username already exists: {username}")
            return None

    def _get_user(self, column: str, value: Any) -> Optional[Dict[str, Any]]:
        with sqlite3.connect(self.db_path) as conn:
            conn.row_factory = sqlite3.Row
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT id, username, password_hash, created_at FROM users WHERE {column} = ?",
                (value,)
            )
            row = cursor.fetchone()
            if row:
                return dict(row)
            return None

    def get_user_by_username(self, username: str) -> Optional[Dict[str, Any]]:
        """Get user by username (dict with id, username, password_hash, created_at)."""
        return self._get_user("username", username)

    def get_user_by_id(self, user_id: int) -> Optional[Dict[str, Any]]:
        """Get user by ID."""
        return self._get_user("id", user_id)
