"""
Typed records for the rows Datasette returns.

Rows arrive as plain dicts keyed by column name. Each from_row() is the one
place that knows the column names, and it normalizes the quirks of the
SQLite data once:
  - tags is a JSON array stored as TEXT, e.g. '["lunch", "wifi"]'
  - verified is an INTEGER 0/1
  - optional text columns can be NULL or "" and both mean "not set"

Everything downstream works with these records, never with raw rows.
"""

import json
import logging
from dataclasses import dataclass, field

log = logging.getLogger(__name__)


class RowError(ValueError):
    """A row is missing a column the record cannot do without."""


def _text(row, key):
    value = row.get(key)
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _required(row, key):
    value = row.get(key)
    if value is None or value == "":
        raise RowError(f"row has no {key!r}: {row!r}")
    return value


def _number(row, key):
    value = row.get(key)
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        log.warning("Ignoring non-numeric %s %r", key, value)
        return None


def _flag(row, key):
    value = row.get(key)
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def parse_tags(raw):
    """
    Decode the tags column. Accepts an already-decoded list (some Datasette
    versions expand JSON columns) or the JSON text. Anything that is not an
    array gives [] rather than an error, matching how the site has
    always treated malformed tag cells.
    """
    if raw is None or raw == "":
        return []
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except ValueError:
            return []
    if not isinstance(raw, list):
        return []
    # Only string elements are tags; the tag queries filter on json_each.type = 'text' too.
    return [tag for tag in raw if isinstance(tag, str) and tag.strip()]


@dataclass(frozen=True)
class Category:
    id: int
    slug: str
    name: str

    @classmethod
    def from_row(cls, row):
        return cls(
            id=_required(row, "id"),
            slug=str(_required(row, "slug")),
            name=str(_required(row, "name")),
        )


@dataclass(frozen=True)
class CategorySummary:
    category: Category
    listing_count: int = 0

    @classmethod
    def from_row(cls, row):
        return cls(category=Category.from_row(row), listing_count=int(row.get("listing_count") or 0))


@dataclass(frozen=True)
class Listing:
    id: int
    name: str
    description: str | None = None
    phone: str | None = None
    address: str | None = None
    tags: tuple = field(default_factory=tuple)
    verified: bool = False
    created_at: str = ""
    latitude: float | None = None
    longitude: float | None = None
    category_id: int | None = None
    category_slug: str | None = None
    category_name: str | None = None

    @classmethod
    def from_row(cls, row):
        return cls(
            id=_required(row, "id"),
            name=str(_required(row, "name")),
            description=_text(row, "description"),
            phone=_text(row, "phone"),
            address=_text(row, "address"),
            tags=tuple(parse_tags(row.get("tags"))),
            verified=_flag(row, "verified"),
            created_at=_text(row, "created_at") or "",
            latitude=_number(row, "latitude"),
            longitude=_number(row, "longitude"),
            category_id=row.get("category_id"),
            category_slug=_text(row, "category_slug"),
            category_name=_text(row, "category_name"),
        )


def map_rows(rows, record):
    """
    Map raw rows to records, skipping (and logging) rows that cannot be mapped.
    None is accepted so a failed query flows through as "no entities".
    """
    records = []
    for row in rows or ():
        try:
            records.append(record.from_row(row))
        except RowError as e:
            log.warning("Skipping %s row: %s", record.__name__, e)
    return records
