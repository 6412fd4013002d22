"""
Run settings.

Precedence, lowest first:
  1. the defaults below (the 560005.town directory)
  2. an optional YAML file: $SITE_CONFIG, or ./site.yml when it exists
  3. environment variables (DATASETTE_URL, DATASETTE_DB, DATASETTE_TOKEN,
     CONTENT_DIR, RATE_LIMIT, HTTP_TIMEOUT)
  4. the datasette URL given on the command line

Site wording (titles, welcome text, region) only lives in the YAML file;
connection details can come from anywhere, so a container can be configured
with environment variables alone.
"""

import os
from dataclasses import dataclass, fields
from pathlib import Path
from urllib.parse import urlparse

import yaml

from .datasette import TownsiteError

DEFAULT_DATASETTE_URL = "https://edit.560005.town"
DEFAULT_SITE_FILE = "site.yml"

# env var -> (setting, type)
_ENV = {
    "DATASETTE_URL":   ("datasette_url", str),
    "DATASETTE_DB":    ("database", str),
    "DATASETTE_TOKEN": ("token", str),
    "CONTENT_DIR":     ("content_dir", Path),
    "RATE_LIMIT":      ("rate_limit", float),
    "HTTP_TIMEOUT":    ("timeout", float),
}

# site.yml keys that are not plain strings
_FILE_TYPES = {
    "timeout":     float,
    "rate_limit":  float,
    "sample_size": int,
    "tag_limit":   int,
    "content_dir": Path,
}


class ConfigError(TownsiteError):
    """Settings that make a run impossible before it starts."""


@dataclass(frozen=True)
class SiteSettings:
    datasette_url: str = DEFAULT_DATASETTE_URL
    database: str = "data"
    token: str | None = None
    timeout: float = 30.0
    rate_limit: float = 0.0
    content_dir: Path = Path("content")

    site_name: str = "560005.town"
    region: str = "East Bangalore"
    index_title: str = "560005.town - East Bangalore Directory"
    index_description: str = "Community-maintained listings of local services, people, and places"
    index_heading: str = "East Bangalore Directory"
    welcome: str = (
        "Welcome to the community directory for East Bangalore. "
        "Find local services, people, and places."
    )

    sample_size: int = 3
    tag_limit: int = 20

    def validate(self):
        parsed = urlparse(self.datasette_url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ConfigError(f"Datasette URL must be an http(s) URL, got {self.datasette_url!r}")
        if not self.database:
            raise ConfigError("Datasette database name is empty")
        if self.sample_size < 0 or self.tag_limit < 0:
            raise ConfigError("sample_size and tag_limit must not be negative")
        if self.timeout <= 0 or self.rate_limit < 0:
            raise ConfigError("timeout must be positive and rate_limit must not be negative")
        return self


def load_site_file(path):
    """Read the YAML settings file. A missing file is an error only if it was asked for explicitly."""
    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigError(f"Cannot read settings file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in settings file {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Settings file must be a mapping: {path}")

    known = {f.name for f in fields(SiteSettings)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown settings in {path}: {', '.join(unknown)}")
    values = {}
    for name, raw in data.items():
        if raw is None:
            continue
        cast = _FILE_TYPES.get(name, str)
        if isinstance(raw, (dict, list)) or (cast is int and isinstance(raw, float)):
            raise ConfigError(f"{name} in {path} must be a {cast.__name__}, got {raw!r}")
        try:
            values[name] = cast(raw)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{name} in {path} must be a {cast.__name__}, got {raw!r}") from e
    return values


def load_settings(url=None, environ=None, cwd=None):
    """Build SiteSettings from defaults, the YAML file, the environment and the CLI URL."""
    env = os.environ if environ is None else environ
    values = {}

    site_file = env.get("SITE_CONFIG")
    if site_file:
        values.update(load_site_file(site_file))
    else:
        default_file = Path(cwd or ".") / DEFAULT_SITE_FILE
        if default_file.exists():
            values.update(load_site_file(default_file))

    for var, (name, cast) in _ENV.items():
        raw = env.get(var)
        if raw is None or raw == "":
            continue
        try:
            values[name] = cast(raw)
        except ValueError as e:
            raise ConfigError(f"{var}={raw!r} is not a valid {cast.__name__}") from e

    if url:
        values["datasette_url"] = url

    try:
        settings = SiteSettings(**values)
    except TypeError as e:
        raise ConfigError(str(e)) from e
    return settings.validate()
