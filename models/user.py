"""
models/user.py
--------------
Domain model for application users (guests and property owners).
"""

from dataclasses import dataclass
from typing import Optional


@dataclass
class User:
    """
    Represents a registered user.

    Attributes:
        id: Database primary key (None for new records).
        name: Display name.
        email: Login email, unique across users.
        password: Credential as supplied by the caller; stored as-is.
    """
    name: str
    email: str
    password: str
    id: Optional[int] = None

    def __repr__(self) -> str:
        return f"User(id={self.id!r}, name={self.name!r}, email={self.email!r})"
