"""
URL segments for categories, listings and tags.

slugify() deletes anything outside [a-z0-9] rather
than transliterating, so "Café" becomes "caf". Existing links on the live site
were built with this rule and must keep resolving.
"""

import hashlib
import re

_DISALLOWED = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE = re.compile(r"\s+")
_HYPHENS = re.compile(r"-{2,}")


def slugify(text):
    """Lowercase, drop disallowed characters, turn whitespace runs into one hyphen."""
    if not text:
        return ""
    text = _DISALLOWED.sub("", str(text).lower())
    text = _WHITESPACE.sub("-", text.strip())
    return _HYPHENS.sub("-", text).strip("-")


class TagSlugs:
    """
    Tag -> directory name table, built once per run from the distinct tag list.

    Tags are free-form, so two different strings can normalize to the same
    slug ("Wi Fi" and "wi-fi") or to nothing at all ("☕"). Every page that
    links to a tag goes through this table, which guarantees that a link
    always points at the directory the tag builder actually wrote:
      empty slug      ->  tag-<8 hex chars of sha1(tag)>
      repeated slug   ->  slug-2, slug-3, ... in sorted tag order
    """

    def __init__(self, tags=()):
        self._slugs: dict[str, str] = {}
        taken: set[str] = set()
        for tag in sorted(set(tags)):
            base = slugify(tag) or _fallback(tag)
            candidate, n = base, 1
            while candidate in taken:
                n += 1
                candidate = f"{base}-{n}"
            taken.add(candidate)
            self._slugs[tag] = candidate

    def __getitem__(self, tag):
        # Tags that were not in the distinct list (e.g. the tag query failed)
        # still get a usable link.
        if tag in self._slugs:
            return self._slugs[tag]
        return slugify(tag) or _fallback(tag)

    def __contains__(self, tag):
        return tag in self._slugs

    def __len__(self):
        return len(self._slugs)

    def items(self):
        return self._slugs.items()


def _fallback(tag):
    return "tag-" + hashlib.sha1(tag.encode("utf-8")).hexdigest()[:8]
