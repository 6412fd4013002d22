from __future__ import annotations

import logging

import pytest

from townsite.models import Category, CategorySummary, Listing, map_rows, parse_tags


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ('["Cafe", "Wifi"]', ["Cafe", "Wifi"]),
        (["already", "decoded"], ["already", "decoded"]),
        ('["", "  ", "ok", null]', ["ok"]),
        ('["lunch", 24, true, ["x"]]', ["lunch"]),
        ("not json", []),
        ('{"a": 1}', []),
        ('"single"', []),
        ("", []),
        (None, []),
    ],
)
def test_parse_tags(raw, expected) -> None:
    assert parse_tags(raw) == expected


def test_listing_from_row_normalizes_sqlite_values() -> None:
    listing = Listing.from_row({
        "id": 7,
        "name": "Joe's Diner",
        "description": "  ",
        "phone": None,
        "address": "12 Main Rd",
        "tags": '["lunch"]',
        "verified": 1,
        "created_at": "2024-03-01 09:00:00",
        "latitude": "12.97",
        "longitude": None,
        "category_id": 1,
        "category_slug": "food",
        "category_name": "Food",
        "rn": 1,
    })

    assert listing.description is None
    assert listing.phone is None
    assert listing.address == "12 Main Rd"
    assert listing.tags == ("lunch",)
    assert listing.verified is True
    assert listing.latitude == pytest.approx(12.97)
    assert listing.longitude is None
    assert listing.category_slug == "food"


def test_listing_from_row_defaults_for_missing_columns() -> None:
    listing = Listing.from_row({"id": 3, "name": "Bare"})

    assert listing.tags == ()
    assert listing.verified is False
    assert listing.created_at == ""
    assert listing.category_slug is None


def test_string_flags_are_not_truthy_by_accident() -> None:
    assert Listing.from_row({"id": 1, "name": "x", "verified": "0"}).verified is False
    assert Listing.from_row({"id": 1, "name": "x", "verified": "true"}).verified is True


def test_category_summary_from_row() -> None:
    summary = CategorySummary.from_row({"id": 1, "slug": "food", "name": "Food", "listing_count": 4})

    assert summary.category == Category(id=1, slug="food", name="Food")
    assert summary.listing_count == 4


def test_map_rows_skips_unusable_rows(caplog: pytest.LogCaptureFixture) -> None:
    rows = [{"id": 1, "slug": "food", "name": "Food"}, {"id": 2, "name": "No slug"}]

    with caplog.at_level(logging.WARNING):
        categories = map_rows(rows, Category)

    assert [c.slug for c in categories] == ["food"]
    assert "Skipping Category row" in caplog.text


def test_map_rows_accepts_a_failed_fetch() -> None:
    assert map_rows(None, Listing) == []
