import pytest


class FakeDatabase:
    """Stands in for db.Database: records statements and replays canned rows."""

    def __init__(self):
        self.calls = []
        self.results = []

    def returns(self, *row_sets):
        self.results.extend(row_sets)
        return self

    def query(self, sql, params=()):
        self.calls.append((sql, list(params)))
        return [dict(r) for r in self.results.pop(0)] if self.results else []

    def query_one(self, sql, params=()):
        rows = self.query(sql, params)
        return rows[0] if rows else None

    @property
    def last_sql(self):
        return " ".join(self.calls[-1][0].split())

    @property
    def last_params(self):
        return self.calls[-1][1]


@pytest.fixture
def fake_db():
    return FakeDatabase()


def make_property_row(**overrides):
    row = {
        "id": 1,
        "owner_id": 7,
        "title": "Speed lamp",
        "description": "description",
        "thumbnail_photo_url": "https://example.com/thumb.jpg",
        "cover_photo_url": "https://example.com/cover.jpg",
        "cost_per_night": 93061,
        "street": "536 Namsub Highway",
        "city": "Sotboske",
        "province": "Quebec",
        "post_code": "28142",
        "country": "Canada",
        "parking_spaces": 6,
        "number_of_bathrooms": 4,
        "number_of_bedrooms": 8,
        "active": True,
    }
    row.update(overrides)
    return row
