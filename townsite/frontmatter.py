"""
Zola front-matter: a TOML block between two +++ lines.

Only the subset the templates need is supported: strings, booleans, numbers,
flat arrays and one level of tables (used for [extra]). Strings are written
as TOML basic strings, so line breaks must be flattened by the caller.
"""

import json
from collections.abc import Mapping

DELIMITER = "+++"


def format_value(value):
    # bool before int: bool is a subclass of int
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return repr(value)
    if isinstance(value, str):
        return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'
    if isinstance(value, (list, tuple)):
        return json.dumps(list(value), ensure_ascii=False, separators=(",", ":"))
    return format_value(str(value))


def render(fields):
    """
    Render a front-matter block from a dict, skipping None values.

    Keys keep their insertion order. Nested dicts become [tables]; TOML
    requires every table to come after the top-level keys, so they are
    collected and written last, each preceded by a blank line.
    """
    lines, tables = [], []
    for key, value in fields.items():
        if value is None:
            continue
        if isinstance(value, Mapping):
            tables.append((key, value))
            continue
        lines.append(f"{key} = {format_value(value)}")
    for name, table in tables:
        lines.append("")
        lines.append(f"[{name}]")
        lines.extend(f"{k} = {format_value(v)}" for k, v in table.items() if v is not None)
    return "\n".join([DELIMITER, *lines, DELIMITER])
