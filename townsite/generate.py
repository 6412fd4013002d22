"""
Regenerate the whole content tree from the current data.

There is no incremental mode: the content root is deleted and rebuilt from
scratch on every run. If a run dies halfway the tree is left partly written;
the next run starts by deleting it again.

Two runs must not share a content root at the same time. Nothing here
coordinates them; that is up to whoever schedules the runs.
"""

import logging
import shutil
from pathlib import Path

from .catalog import Catalog
from .datasette import DatasetteClient
from .pages import Pages

log = logging.getLogger(__name__)

SUBDIRS = ("c", "t")


def clean_content_dir(root):
    """Delete root if it exists, then recreate it with its fixed subdirectories."""
    root = Path(root)
    if root.exists():
        shutil.rmtree(root)
    for sub in SUBDIRS:
        (root / sub).mkdir(parents=True, exist_ok=True)
    return root


def client_for(settings, session=None):
    return DatasetteClient(
        settings.datasette_url,
        database=settings.database,
        token=settings.token,
        timeout=settings.timeout,
        rate_limit=settings.rate_limit,
        session=session,
    )


def regenerate(settings, client=None):
    """
    Clear the content root and write every page.

    Order matters: index, then categories (each writing its listings), then
    tags. Counts and samples are read from the data at fetch time, not kept
    between builders. Returns the number of pages written per family.
    """
    log.info("Datasette: %s  |  DB: %s  |  Output: %s", settings.datasette_url, settings.database, settings.content_dir)
    root = clean_content_dir(settings.content_dir)

    own_client = client is None
    client = client or client_for(settings)
    try:
        pages = Pages(Catalog(client), settings, root)
        pages.build_index()
        pages.build_categories()
        pages.build_tags()
    finally:
        if own_client:
            client.close()

    counts = pages.counts
    log.info(
        "Done. %d pages: %d index, %d categories, %d listings, %d tags",
        counts.total, counts.index, counts.categories, counts.listings, counts.tags,
    )
    return counts
