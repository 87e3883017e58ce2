"""
repositories/property_repo.py
------------------------------
Data access layer for property listings.
All SQL queries related to the `properties` table live here, including
the dynamic search query built from optional filters.
"""

from decimal import Decimal
from typing import Any, Mapping, Optional, Union

from config import DEFAULT_PAGE_SIZE
from db.connection import Database
from models.property import Property, PropertyFilters
from utils.logger import get_logger

logger = get_logger(__name__)

_SEARCH_SELECT = """
SELECT properties.*, AVG(property_reviews.rating) AS average_rating
FROM properties
LEFT JOIN property_reviews ON properties.id = property_reviews.property_id"""


def _is_set(value: Any) -> bool:
    # None, "" and numeric zero all leave a filter off
    return bool(value)


def _to_cents(value: Any) -> Decimal:
    """Convert a whole-currency amount to cents. Raises decimal.InvalidOperation on junk."""
    return Decimal(str(value)) * 100


def build_search_query(filters: PropertyFilters, limit: int) -> tuple[str, list]:
    """
    Build the listing search statement and its positional parameters.

    Row filters are collected in a fixed order (city, owner, min price,
    max price), each adding one parameter, then joined with AND under a
    single WHERE. The rating filter runs after grouping as a HAVING clause.
    The limit is always the last parameter.

    Returns:
        (sql, params) ready for `Database.query`.
    """
    predicates: list[tuple[str, Any]] = []

    if _is_set(filters.city):
        predicates.append(("properties.city ILIKE %s", f"%{filters.city}%"))
    if _is_set(filters.owner_id):
        predicates.append(("properties.owner_id = %s", filters.owner_id))
    if _is_set(filters.minimum_price_per_night):
        predicates.append(("properties.cost_per_night > %s", _to_cents(filters.minimum_price_per_night)))
    if _is_set(filters.maximum_price_per_night):
        predicates.append(("properties.cost_per_night < %s", _to_cents(filters.maximum_price_per_night)))

    parts = [_SEARCH_SELECT]
    params: list = [value for _, value in predicates]
    if predicates:
        parts.append("WHERE " + "\n  AND ".join(fragment for fragment, _ in predicates))

    parts.append("GROUP BY properties.id")

    if _is_set(filters.minimum_rating):
        parts.append("HAVING AVG(property_reviews.rating) >= %s")
        params.append(Decimal(str(filters.minimum_rating)))

    parts.append("ORDER BY properties.cost_per_night")
    parts.append("LIMIT %s;")
    params.append(limit)

    return "\n".join(parts), params


class PropertyRepository:
    """Repository for searching and creating property listings."""

    def __init__(self, db: Database):
        self.db = db

    # ── CREATE ────────────────────────────────────────────

    def add(self, prop: Property) -> Property:
        """
        Insert a new property listing.

        Columns are bound from named attributes, never from field order.

        Args:
            prop: The Property to persist; `id` and `active` are ignored.

        Returns:
            The stored Property with its `id` populated.
        """
        sql = """
            INSERT INTO properties (owner_id, title, description,
                thumbnail_photo_url, cover_photo_url, cost_per_night,
                street, city, province, post_code, country,
                parking_spaces, number_of_bathrooms, number_of_bedrooms)
            VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s)
            RETURNING *;
        """
        row = self.db.query_one(sql, (
            prop.owner_id, prop.title, prop.description,
            prop.thumbnail_photo_url, prop.cover_photo_url, prop.cost_per_night,
            prop.street, prop.city, prop.province, prop.post_code, prop.country,
            prop.parking_spaces, prop.number_of_bathrooms, prop.number_of_bedrooms,
        ))
        stored = self._row_to_property(row)
        logger.info(f"Added property #{stored.id} for owner {stored.owner_id}")
        return stored

    # ── READ ──────────────────────────────────────────────

    def get_all(
        self,
        filters: Optional[Union[PropertyFilters, Mapping[str, Any]]] = None,
        limit: int = DEFAULT_PAGE_SIZE,
    ) -> list[dict]:
        """
        Search listings, cheapest first.

        Args:
            filters: PropertyFilters, or a mapping with the same keys
                (unknown keys are ignored). None means no filtering.
            limit: Maximum number of rows to return.

        Returns:
            List of property row dicts, each with an `average_rating`
            (None when the property has no reviews).

        Raises:
            decimal.InvalidOperation: If a price or rating is not numeric.
        """
        if not isinstance(filters, PropertyFilters):
            filters = PropertyFilters.from_dict(filters)

        sql, params = build_search_query(filters, limit)
        rows = self.db.query(sql, params)
        for row in rows:
            if row["average_rating"] is not None:
                row["average_rating"] = float(row["average_rating"])
        return rows

    # ── HELPERS ───────────────────────────────────────────

    @staticmethod
    def _row_to_property(row: dict) -> Property:
        """Convert a database row to a Property domain object."""
        return Property(
            id=row["id"],
            owner_id=row["owner_id"],
            title=row["title"],
            description=row["description"],
            thumbnail_photo_url=row["thumbnail_photo_url"],
            cover_photo_url=row["cover_photo_url"],
            cost_per_night=row["cost_per_night"],
            street=row["street"],
            city=row["city"],
            province=row["province"],
            post_code=row["post_code"],
            country=row["country"],
            parking_spaces=row["parking_spaces"],
            number_of_bathrooms=row["number_of_bathrooms"],
            number_of_bedrooms=row["number_of_bedrooms"],
            active=row.get("active", True),
        )
