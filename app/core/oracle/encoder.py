# app/core/oracle/encoder.py
"""
ENCODER MODULE - Turn JSON values into Oracle SQL literals

    None          -> NULL
    "15-01-2025"  -> TO_DATE('15-01-2025', 'DD-MM-YYYY')
    "O'Brien"     -> 'O''Brien'
    42 / True     -> 42 / true
"""

import json
import re
from typing import Any

# Shape check only, ASCII digits: "99-99-9999" matches too
DATE_PATTERN = re.compile(r"^\d{2}-\d{2}-\d{4}$", re.ASCII)
DATE_FORMAT = "DD-MM-YYYY"


def quote_string(text: str) -> str:
    """Single-quote a string, doubling every embedded quote."""
    return "'" + text.replace("'", "''") + "'"


def format_oracle_value(value: Any) -> str:
    """
    Format a value for use inside Oracle SQL text.

    Args:
        value: Any JSON scalar (str, int, float, bool) or None

    Returns:
        The SQL literal as a string. Never raises for JSON input.
    """
    if value is None:
        return "NULL"

    if isinstance(value, str):
        if DATE_PATTERN.fullmatch(value):
            return f"TO_DATE('{value}', '{DATE_FORMAT}')"
        return quote_string(value)

    # bool before int: True is an int in Python
    if isinstance(value, bool):
        return "true" if value else "false"

    if isinstance(value, (int, float)):
        return str(value)

    # Nested objects/arrays are stored as their JSON text
    return quote_string(json.dumps(value, ensure_ascii=False))
