"""Generate Zola content for a community directory from a Datasette instance."""

__version__ = "0.1.0"
