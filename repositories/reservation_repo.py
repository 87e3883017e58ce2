"""
repositories/reservation_repo.py
---------------------------------
Data access layer for a guest's past reservations.
"""

from config import DEFAULT_PAGE_SIZE
from db.connection import Database
from utils.logger import get_logger

logger = get_logger(__name__)


class ReservationRepository:
    """Read-only queries over reservations joined with their properties."""

    def __init__(self, db: Database):
        self.db = db

    def get_all_for_guest(self, guest_id: int, limit: int = DEFAULT_PAGE_SIZE) -> list[dict]:
        """
        Fetch a guest's completed stays (end date strictly before today).

        Each row carries the property's columns (`id` is the property id),
        the reservation's `reservation_id`, `guest_id`, `start_date` and
        `end_date`, plus the property's `average_rating` across all reviews.
        Rows are grouped per reservation, so several reviews on one property
        never duplicate a stay.

        Args:
            guest_id: ID of the guest user.
            limit: Maximum number of rows to return.

        Returns:
            List of row dicts ordered by start date ascending.
        """
        sql = """
            SELECT properties.*,
                   reservations.id AS reservation_id,
                   reservations.guest_id,
                   reservations.start_date,
                   reservations.end_date,
                   AVG(property_reviews.rating) AS average_rating
            FROM reservations
            JOIN properties ON reservations.property_id = properties.id
            LEFT JOIN property_reviews ON properties.id = property_reviews.property_id
            WHERE reservations.guest_id = %s
              AND reservations.end_date < CURRENT_DATE
            GROUP BY reservations.id, properties.id
            ORDER BY reservations.start_date
            LIMIT %s;
        """
        rows = self.db.query(sql, (guest_id, limit))
        for row in rows:
            if row["average_rating"] is not None:
                row["average_rating"] = float(row["average_rating"])
        return rows
