"""
repositories/user_repo.py
--------------------------
Data access layer for user records.
"""

from typing import Optional

from db.connection import Database
from models.user import User
from utils.logger import get_logger

logger = get_logger(__name__)


class UserRepository:
    """Repository for lookups and inserts on the users table."""

    def __init__(self, db: Database):
        self.db = db

    def get_by_email(self, email: str) -> Optional[User]:
        """
        Fetch a user by email. Matching follows the column collation;
        no case folding is done here.

        Returns:
            User or None.
        """
        sql = "SELECT * FROM users WHERE email = %s;"
        row = self.db.query_one(sql, (email,))
        return self._row_to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        """
        Fetch a user by primary key.

        Returns:
            User or None.
        """
        sql = "SELECT * FROM users WHERE id = %s;"
        row = self.db.query_one(sql, (user_id,))
        return self._row_to_user(row) if row else None

    def add(self, user: User) -> User:
        """
        Insert a new user.

        Args:
            user: The User to persist; its `id` is ignored.

        Returns:
            The stored User with its generated `id`.

        Raises:
            psycopg2.errors.UniqueViolation: If the email is already taken.
        """
        sql = """
            INSERT INTO users (name, email, password)
            VALUES (%s, %s, %s)
            RETURNING *;
        """
        row = self.db.query_one(sql, (user.name, user.email, user.password))
        stored = self._row_to_user(row)
        logger.info(f"Added user #{stored.id}")
        return stored

    @staticmethod
    def _row_to_user(row: dict) -> User:
        """Convert a database row to a User domain object."""
        return User(
            id=row["id"],
            name=row["name"],
            email=row["email"],
            password=row["password"],
        )
