"""
models/property.py
------------------
Domain models for rental listings and the filters used to search them.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional


@dataclass
class Property:
    """
    Represents a rental property listing.

    Attributes:
        owner_id: ID of the owning user.
        title: Listing headline.
        description: Free-form listing text.
        thumbnail_photo_url: Small preview image.
        cover_photo_url: Large header image.
        cost_per_night: Nightly price in cents.
        street, city, province, post_code, country: Address fields.
        parking_spaces, number_of_bathrooms, number_of_bedrooms: Capacity.
        active: Whether the listing is visible (database default TRUE).
        id: Database primary key (None for new records).
    """
    owner_id: int
    title: str
    description: Optional[str]
    thumbnail_photo_url: str
    cover_photo_url: str
    cost_per_night: int
    street: str
    city: str
    province: str
    post_code: str
    country: str
    parking_spaces: int = 0
    number_of_bathrooms: int = 0
    number_of_bedrooms: int = 0
    active: bool = True
    id: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Property":
        """
        Build a Property from a submitted form or JSON body.

        Every field is looked up by name, so key order is irrelevant.

        Raises:
            KeyError: If one of the fourteen listing fields is missing.
        """
        return cls(
            owner_id=data["owner_id"],
            title=data["title"],
            description=data["description"],
            thumbnail_photo_url=data["thumbnail_photo_url"],
            cover_photo_url=data["cover_photo_url"],
            cost_per_night=data["cost_per_night"],
            street=data["street"],
            city=data["city"],
            province=data["province"],
            post_code=data["post_code"],
            country=data["country"],
            parking_spaces=data["parking_spaces"],
            number_of_bathrooms=data["number_of_bathrooms"],
            number_of_bedrooms=data["number_of_bedrooms"],
        )

    def __str__(self) -> str:
        return f"{self.title} | {self.city}, {self.country} | {self.cost_per_night / 100:.2f}/night"


@dataclass
class PropertyFilters:
    """
    Optional search criteria for property listings. Unset fields apply no filter.

    Attributes:
        city: Case-insensitive substring of the city name.
        owner_id: Only listings owned by this user.
        minimum_price_per_night: Lower price bound in whole currency units (exclusive).
        maximum_price_per_night: Upper price bound in whole currency units (exclusive).
        minimum_rating: Lowest acceptable average review rating (inclusive).
    """
    city: Optional[str] = None
    owner_id: Optional[int] = None
    minimum_price_per_night: Optional[Any] = None
    maximum_price_per_night: Optional[Any] = None
    minimum_rating: Optional[Any] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "PropertyFilters":
        """Build filters from a query-string style mapping, ignoring unknown keys."""
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})
