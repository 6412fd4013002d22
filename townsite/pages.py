"""
Page builders: turn catalog records into Zola documents.

Layout under the content root:
  _index.md                              home page, categories + popular tags
  c/{category}/_index.md                 one section per category
  c/{category}/{listing}/{id}/index.md   one page per listing
  t/{tag}/index.md                       one page per tag

The listing directory is nested under the listing id because names are not
unique: two "Joe's Diner" entries slugify identically but still get their own
pages. Every link below is built from the same helpers that build the paths,
so a link can never point somewhere the builders did not write.

The *_document() functions are pure (records in, Document out). The Pages
class fetches, builds and writes.
"""

import logging
from dataclasses import dataclass
from pathlib import PurePosixPath

from .document import Document, one_line, truncate, write_document
from .slugs import TagSlugs, slugify

log = logging.getLogger(__name__)

SUMMARY_LIMIT = 200
META_DESCRIPTION_LIMIT = 160

EMPTY_INDEX = "*No categories found.*"
EMPTY_TAGS = "*No tags yet.*"
EMPTY_CATEGORY = "*No listings found in this category.*"
EMPTY_TAG = "*No listings found with this tag.*"


# ---- Paths and links ----------------------------------------------------------------------------------------------------------
def listing_slug(listing):
    """Slug of the listing name, or the id when the name has no usable characters."""
    return slugify(listing.name) or str(listing.id)


def category_url(category_slug):
    return f"/c/{category_slug}/"


def listing_url(category_slug, listing):
    return f"/c/{category_slug}/{listing_slug(listing)}/{listing.id}/"


def tag_url(tag_slug):
    return f"/t/{tag_slug}/"


def listing_path(category_slug, listing):
    return PurePosixPath("c", category_slug, listing_slug(listing), str(listing.id), "index.md")


def _count(n, noun="listing"):
    return f"{n} {noun}" + ("" if n == 1 else "s")


# ---- Documents ----------------------------------------------------------------------------------------------------------------
def index_document(settings, summaries, samples, tags, tag_slugs):
    doc = Document(PurePosixPath("_index.md"), {
        "title":       one_line(settings.index_title),
        "description": one_line(settings.index_description),
        "template":    "index.html",
    })
    doc.add(f"# {settings.index_heading}")
    doc.add(settings.welcome)
    doc.add("## Categories")

    if not summaries:
        doc.add(EMPTY_INDEX)
    for summary in summaries:
        cat = summary.category
        doc.add(f"### [{cat.name}]({category_url(cat.slug)})\n*{_count(summary.listing_count)}*")
        sample = samples.get(cat.slug, [])[:settings.sample_size]
        if sample:
            items = [f"- [{listing.name}]({listing_url(cat.slug, listing)})" for listing in sample]
            if summary.listing_count > settings.sample_size:
                items.append(f"- [View all {cat.name} listings →]({category_url(cat.slug)})")
            doc.add("\n".join(items))

    doc.add("## Popular Tags")
    shown = tags[:settings.tag_limit]
    doc.add(" ".join(f"[{tag}]({tag_url(tag_slugs[tag])})" for tag in shown) if shown else EMPTY_TAGS)
    return doc


def listing_summary(listing, href, with_contact=True):
    """
    Heading, truncated description and optionally a contact line: the
    per-listing block shared by category and tag pages.
    """
    lines = [f"## [{listing.name}]({href})"]
    if listing.description:
        lines.append(truncate(listing.description, SUMMARY_LIMIT))
    if with_contact:
        contact = []
        if listing.phone:
            contact.append(f"📞 {listing.phone}")
        if listing.address:
            contact.append(f"📍 {listing.address}")
        if contact:
            lines.append("  ".join(contact))
    return "\n".join(lines)


def category_document(settings, category, listings):
    doc = Document(PurePosixPath("c", category.slug, "_index.md"), {
        "title":       one_line(f"{category.name} - {settings.site_name}"),
        "description": one_line(f"All {category.name.lower()} listings in {settings.region}"),
        "template":    "category.html",
        "extra": {
            "category_name": one_line(category.name),
            "category_slug": category.slug,
        },
    })
    doc.add(f"# {category.name}")
    if not listings:
        return doc.add(EMPTY_CATEGORY)

    doc.add(f"*{_count(len(listings))} found*")
    for listing in listings:
        # relative link: the listing lives under this section
        href = f"{listing_slug(listing)}/{listing.id}/"
        doc.add(listing_summary(listing, href))
    return doc


def listing_document(settings, category_slug, listing, tag_slugs):
    doc = Document(listing_path(category_slug, listing), {
        "title":       one_line(f"{listing.name} - {settings.site_name}"),
        "description": truncate(one_line(listing.description), META_DESCRIPTION_LIMIT),
        "template":    "listing.html",
        "extra": {
            "listing_name":  one_line(listing.name),
            "category_slug": category_slug,
            "phone":         one_line(listing.phone),
            "address":       one_line(listing.address),
            "tags":          list(listing.tags),
            "verified":      listing.verified,
            "created_at":    listing.created_at,
            # None is skipped by the renderer, so unmapped listings get no coordinates
            "latitude":      listing.latitude,
            "longitude":     listing.longitude,
        },
    })
    doc.add(f"# {listing.name}")
    doc.add(listing.description)

    if listing.phone or listing.address:
        contact = ["## Contact"]
        if listing.phone:
            contact.append(f"**Phone:** {listing.phone}")
        if listing.address:
            contact.append(f"**Address:** {listing.address}")
        doc.add("\n\n".join(contact))

    if listing.tags:
        links = " ".join(f"[{tag}]({tag_url(tag_slugs[tag])})" for tag in listing.tags)
        doc.add(f"## Tags\n\n{links}")

    if listing.verified:
        doc.add("*✓ Verified listing*")

    back_to = listing.category_name or category_slug
    doc.add(f"[← Back to all {back_to}]({category_url(category_slug)})")
    return doc


def tag_document(settings, tag, tag_slug, listings):
    doc = Document(PurePosixPath("t", tag_slug, "index.md"), {
        "title":       one_line(f"#{tag} - {settings.site_name}"),
        "description": one_line(f"All listings tagged with {tag}"),
        "template":    "tag.html",
        "extra": {
            "tag_name": one_line(tag),
            "tag_slug": tag_slug,
        },
    })
    doc.add(f"# #{tag}")
    if not listings:
        return doc.add(EMPTY_TAG)

    doc.add(f"*{_count(len(listings))} found*")
    for listing in listings:
        if listing.category_slug:
            block = listing_summary(listing, listing_url(listing.category_slug, listing), with_contact=False)
            name = listing.category_name or listing.category_slug
            block += f"\n*Category: [{name}]({category_url(listing.category_slug)})*"
        else:
            # Uncategorized listings have no page of their own to link to.
            block = f"## {listing.name}"
            if listing.description:
                block += "\n" + truncate(listing.description, SUMMARY_LIMIT)
            block += "\n*Uncategorized*"
        doc.add(block)
    return doc


# ---- Builders -----------------------------------------------------------------------------------------------------------------
@dataclass
class GenerationReport:
    index: int = 0
    categories: int = 0
    listings: int = 0
    tags: int = 0

    @property
    def total(self):
        return self.index + self.categories + self.listings + self.tags


class Pages:
    """
    Fetch-and-write for each page family, against one catalog and one
    content root. The distinct tag list is fetched once and shared, so the
    links on listing and index pages agree with the directories the tag
    builder writes.
    """

    def __init__(self, catalog, settings, root):
        self.catalog = catalog
        self.settings = settings
        self.root = root
        self.counts = GenerationReport()
        self._tags = None
        self._tag_slugs = None

    def _load_tags(self):
        if self._tags is None:
            self._tags = self.catalog.distinct_tags()
            self._tag_slugs = TagSlugs(self._tags)

    @property
    def tags(self):
        self._load_tags()
        return self._tags

    @property
    def tag_slugs(self):
        self._load_tags()
        return self._tag_slugs

    def write(self, doc):
        return write_document(self.root, doc)

    def build_index(self):
        log.info("Generating index page...")
        summaries = self.catalog.categories_with_counts()
        samples = self.catalog.sample_per_category(self.settings.sample_size)
        self.write(index_document(self.settings, summaries, samples, self.tags, self.tag_slugs))
        self.counts.index += 1

    def build_categories(self):
        log.info("Generating category pages...")
        for category in self.catalog.categories():
            log.info("  Generating category: %s", category.name)
            listings = self.catalog.listings(category_slug=category.slug)
            self.write(category_document(self.settings, category, listings))
            self.counts.categories += 1
            self.build_listings(category.slug, listings)

    def build_listings(self, category_slug, listings):
        for listing in listings:
            self.write(listing_document(self.settings, category_slug, listing, self.tag_slugs))
            self.counts.listings += 1

    def build_tags(self):
        log.info("Generating tag pages...")
        for tag in self.tags:
            tag_slug = self.tag_slugs[tag]
            log.info("  Generating tag: %s", tag)
            listings = self.catalog.listings(tag=tag)
            self.write(tag_document(self.settings, tag, tag_slug, listings))
            self.counts.tags += 1
