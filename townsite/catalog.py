"""
The read queries the page builders need, each returning typed records.

All joins, de-duplication and sampling happen in SQLite on the Datasette
side; Python only maps rows to records and groups the sample by category.
Every fetch returns an empty list (or dict) when the query fails, so callers
have a single "nothing to render" case.
"""

from .models import Category, CategorySummary, Listing, map_rows

LISTING_COLUMNS = "l.*, c.slug AS category_slug, c.name AS category_name"


# json_each() aborts the whole statement on malformed JSON, and walks the keys
# of an object. Feed it only well-formed arrays; anything else becomes NULL.
def tags_array(column):
    return (
        f"CASE WHEN json_valid({column}) THEN "
        f"CASE WHEN json_type({column}) = 'array' THEN {column} END END"
    )


class Catalog:
    def __init__(self, client):
        self.client = client

    def categories(self):
        rows = self.client.execute("SELECT id, slug, name FROM categories ORDER BY name, id")
        return map_rows(rows, Category)

    def categories_with_counts(self):
        rows = self.client.execute(
            """
            SELECT c.id, c.slug, c.name, COUNT(l.id) AS listing_count
            FROM categories c
            LEFT JOIN listings l ON c.id = l.category_id
            GROUP BY c.id, c.slug, c.name
            ORDER BY c.name, c.id
            """
        )
        return map_rows(rows, CategorySummary)

    def listings(self, category_slug=None, tag=None, listing_id=None, limit=None):
        """
        Listings joined with their category's slug and name.

        At most one filter may be given:
          category_slug  only that category's listings, ordered by name
          tag            listings whose tags array contains tag, ordered by name
          listing_id     the single listing with that id
          (none)         every listing, newest first
        Listings without a category never match category_slug; the other
        variants return them with category_slug and category_name set to None.
        """
        filters = [f for f in (category_slug, tag, listing_id) if f is not None]
        if len(filters) > 1:
            raise ValueError("listings() takes at most one of category_slug, tag, listing_id")

        params = {}
        join = "LEFT JOIN"
        if category_slug is not None:
            join = "JOIN"
            where = "WHERE c.slug = :category_slug"
            order = "ORDER BY l.name, l.id"
            params["category_slug"] = category_slug
        elif tag is not None:
            where = (
                f"WHERE EXISTS (SELECT 1 FROM json_each({tags_array('l.tags')}) "
                "WHERE json_each.type = 'text' AND json_each.value = :tag)"
            )
            order = "ORDER BY l.name, l.id"
            params["tag"] = tag
        elif listing_id is not None:
            where = "WHERE l.id = :id"
            order = "ORDER BY l.created_at DESC, l.id DESC"
            params["id"] = listing_id
        else:
            where = ""
            order = "ORDER BY l.created_at DESC, l.id DESC"

        sql = (
            f"SELECT {LISTING_COLUMNS} FROM listings l "
            f"{join} categories c ON l.category_id = c.id {where} {order}"
        )
        if limit is not None:
            sql += " LIMIT CAST(:limit AS INTEGER)"
            params["limit"] = int(limit)
        return map_rows(self.client.execute(sql, params), Listing)

    def listing(self, listing_id):
        found = self.listings(listing_id=listing_id, limit=1)
        return found[0] if found else None

    def distinct_tags(self):
        """Every distinct string found in any listing's tags array, sorted. Non-string elements are ignored."""
        rows = self.client.execute(
            f"""
            SELECT DISTINCT json_each.value AS tag
            FROM listings, json_each({tags_array('listings.tags')})
            WHERE json_each.type = 'text'
            ORDER BY json_each.value
            """
        )
        tags = []
        for row in rows or ():
            tag = row.get("tag")
            if tag is None or not str(tag).strip():
                continue
            tags.append(str(tag))
        return tags

    def sample_per_category(self, cap):
        """
        Up to cap most recent listings per category in a single query,
        keyed by category slug. Listings without a category are never sampled.
        """
        rows = self.client.execute(
            f"""
            SELECT * FROM (
                SELECT {LISTING_COLUMNS},
                       ROW_NUMBER() OVER (
                           PARTITION BY c.id ORDER BY l.created_at DESC, l.id DESC
                       ) AS rn
                FROM listings l
                JOIN categories c ON l.category_id = c.id
            )
            WHERE rn <= CAST(:cap AS INTEGER)
            ORDER BY category_slug, rn
            """,
            {"cap": int(cap)},
        )
        samples: dict[str, list] = {}
        for listing in map_rows(rows, Listing):
            samples.setdefault(listing.category_slug, []).append(listing)
        return samples
