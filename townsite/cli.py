"""
Command line entry point.

    townsite [DATASETTE_URL]

Everything else comes from the environment or site.yml (see config.py).
Exit status is non-zero only when the run cannot start; a query that fails
mid-run leaves an empty-state page behind and the run carries on.
"""

import argparse
import logging
import os
import sys

from .config import ConfigError, load_settings
from .generate import regenerate

NEXT_STEPS = """
Next steps:
1. Review the generated content in the '{root}' directory
2. Run 'zola build' to build the static site
3. Run 'zola serve' to preview locally"""


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="townsite",
        description="Regenerate Zola content pages from a Datasette instance",
    )
    parser.add_argument("datasette_url", nargs="?", default=None, help="Datasette base URL (overrides DATASETTE_URL)")
    return parser.parse_args(argv)


def configure_logging(environ=None):
    env = os.environ if environ is None else environ
    level = env.get("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv=None):
    args = parse_args(argv)
    configure_logging()
    try:
        settings = load_settings(args.datasette_url)
    except ConfigError as e:
        sys.exit(f"Configuration error: {e}")

    regenerate(settings)
    print(NEXT_STEPS.format(root=settings.content_dir))
    return 0


if __name__ == "__main__":
    main()
