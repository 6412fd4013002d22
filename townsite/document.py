"""
Documents as data: front-matter plus an ordered list of Markdown blocks.

Page builders append blocks one at a time, skipping the optional ones, and
render() joins them with blank lines. Keeping the pieces separate is what
lets truncation and the optional sections be tested on their own.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from . import frontmatter

log = logging.getLogger(__name__)

ELLIPSIS = "..."


def truncate(text, limit):
    """
    Cut text to limit characters and mark the cut with "...".
    Text that already fits is returned unchanged (no marker).
    """
    if text is None:
        return ""
    if len(text) <= limit:
        return text
    return text[:limit] + ELLIPSIS


def one_line(text):
    """Collapse line breaks and runs of whitespace; front-matter strings cannot span lines."""
    return " ".join((text or "").split())


@dataclass
class Document:
    path: PurePosixPath
    front_matter: dict = field(default_factory=dict)
    blocks: list = field(default_factory=list)

    def add(self, block):
        if block:
            self.blocks.append(block.strip("\n"))
        return self

    def render(self):
        head = frontmatter.render(self.front_matter)
        if not self.blocks:
            return head + "\n"
        return head + "\n\n" + "\n\n".join(self.blocks) + "\n"


def write_document(root, doc):
    """Write doc under root, creating parent directories. Errors propagate."""
    root = Path(root)
    out_path = root / doc.path
    out_path.parent.mkdir(parents=True, exist_ok=True)
    out_path.write_text(doc.render(), encoding="utf-8")
    log.info("  wrote %s", out_path.relative_to(root).as_posix())
    return out_path
