"""
db/ - Database Layer
====================
Owns the PostgreSQL connection pool and schema initialization.
This layer is the lowest in the architecture and has no dependencies on other layers.
"""

from psycopg2 import Error as QueryError

from db.connection import Database

__all__ = ["Database", "QueryError"]
