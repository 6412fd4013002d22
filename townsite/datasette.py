"""
Read-only SQL against a Datasette instance.

Datasette runs arbitrary SELECT statements passed as ?sql= on
GET /{database}.json and binds any other query-string parameter to the
matching :name placeholder, so values are never pasted into SQL text.

Datasette API details this client relies on:
  - _shape=objects returns {"ok": true, "rows": [{column: value}, ...]}
    instead of the default rows-as-lists shape.
  - A bad statement comes back as HTTP 400 with {"ok": false, "error": "..."}.
  - Results are capped at the instance's max_returned_rows (1000 by default);
    when that happens the body carries "truncated": true.
  - Parameter names starting with an underscore are reserved for Datasette
    itself and are not bound.
"""

import logging
import re
import time
from dataclasses import dataclass, field

import requests

log = logging.getLogger(__name__)

_READ_ONLY = re.compile(r"^\s*(select|with)\b", re.IGNORECASE)


class TownsiteError(Exception):
    """Base class for everything this package raises on purpose."""


class TransportFailure(TownsiteError):
    """The data source could not be reached (DNS, refused connection, timeout)."""


class QueryFailure(TownsiteError):
    """The data source was reached but rejected or failed the query."""

    def __init__(self, message, sql="", status=None):
        super().__init__(message)
        self.sql = sql
        self.status = status


@dataclass
class QueryResult:
    rows: list = field(default_factory=list)
    columns: list = field(default_factory=list)
    truncated: bool = False


def is_read_only(sql):
    return bool(_READ_ONLY.match(sql or ""))


class DatasetteClient:
    """
    One client per run. The base URL is fixed at construction time, so two
    clients pointed at different instances never see each other's settings.
    """

    def __init__(self, base_url, database="data", token=None, timeout=30.0, rate_limit=0.0, session=None):
        self.base_url = base_url.rstrip("/")
        self.database = database
        self.timeout = timeout
        self.rate_limit = rate_limit
        self.session = session or requests.Session()
        self.session.headers["Accept"] = "application/json"
        if token:
            self.session.headers["Authorization"] = f"Bearer {token}"

    @property
    def endpoint(self):
        return f"{self.base_url}/{self.database}.json"

    def query(self, sql, params=None):
        """
        Run one statement and return its rows.

        Raises TransportFailure when the request never got an answer and
        QueryFailure when Datasette answered with an error. Statements that
        are not SELECT/WITH are refused before anything is sent.
        """
        if not is_read_only(sql):
            raise QueryFailure("refusing to run a statement that is not a SELECT", sql=sql)

        query_params = {"sql": sql, "_shape": "objects"}
        for name, value in (params or {}).items():
            if name.startswith("_"):
                raise QueryFailure(f"parameter name {name!r} is reserved by Datasette", sql=sql)
            query_params[name] = "" if value is None else str(value)

        try:
            resp = self.session.get(self.endpoint, params=query_params, timeout=self.timeout)
        except requests.RequestException as e:
            raise TransportFailure(f"{self.endpoint}: {e}") from e
        finally:
            if self.rate_limit:
                time.sleep(self.rate_limit)  # be a polite client; rate limit after every call

        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.ok or not isinstance(body, dict) or body.get("ok") is False:
            message = body.get("error") if isinstance(body, dict) else None
            raise QueryFailure(message or f"HTTP {resp.status_code}", sql=sql, status=resp.status_code)

        result = QueryResult(
            rows=body.get("rows") or [],
            columns=body.get("columns") or [],
            truncated=bool(body.get("truncated")),
        )
        if result.truncated:
            log.warning("Result truncated at %d rows by the server: %s", len(result.rows), _one_line(sql))
        return result

    def execute(self, sql, params=None):
        """
        Like query(), but a failure is logged and turned into None.

        A failed fetch must not stop the run: the page that needed the data
        renders its empty state and the next fetch starts fresh. There is no
        retry; the next regeneration is the retry.
        """
        try:
            return self.query(sql, params).rows
        except TransportFailure as e:
            log.warning("Could not reach data source: %s\n  SQL: %s", e, _one_line(sql))
        except QueryFailure as e:
            log.warning("Query failed (%s): %s\n  SQL: %s", e.status or "refused", e, _one_line(sql))
        return None

    def close(self):
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()


def _one_line(sql):
    return " ".join(sql.split())
