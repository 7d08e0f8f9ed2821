"""Amenities codec — facility lists <-> PostgreSQL text[] literals.

The rooms table stores facilities in an ``amenities text[]`` column. Writes go
through PostgREST as an array literal (``{"Sea view","Linen"}``). Reads may
come back as a native JSON array, or as text for rows written by older clients
(JSON-encoded strings or bare array literals).
"""

import json
import logging
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

EMPTY_ARRAY = "{}"


# ---------- Stored representations ----------

@dataclass(frozen=True)
class NativeArray:
    """Column value already decoded into a list by the data API."""
    items: list


@dataclass(frozen=True)
class TextArray:
    """Column value delivered as text: JSON array or ``{...}`` literal."""
    text: str


@dataclass(frozen=True)
class Missing:
    """NULL or empty column value."""


StoredAmenities = NativeArray | TextArray | Missing


def classify_amenities(value: Any) -> StoredAmenities:
    if isinstance(value, (list, tuple)):
        return NativeArray(list(value))
    if isinstance(value, str) and value.strip():
        return TextArray(value.strip())
    return Missing()


# ---------- Encode ----------

def _quote_element(item: str) -> str:
    escaped = item.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def encode_amenities(facilities: list[str]) -> str:
    """Render a facility list as a text[] literal; ``[]`` becomes ``{}``."""
    if not facilities:
        return EMPTY_ARRAY
    return "{" + ",".join(_quote_element(str(f)) for f in facilities) + "}"


# ---------- Decode ----------

def _split_array_body(body: str) -> list[str]:
    """Split the inside of ``{...}`` on commas outside double quotes.

    Backslash escapes are kept in the element text here and resolved by
    ``_unquote_element``.
    """
    parts: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            current.append(ch)
            current.append(body[i + 1])
            i += 2
            continue
        if ch == '"':
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            parts.append("".join(current))
            current = []
            i += 1
            continue
        current.append(ch)
        i += 1
    parts.append("".join(current))
    return parts


def _unquote_element(raw: str) -> str:
    item = raw.strip()
    if len(item) >= 2 and item.startswith('"') and item.endswith('"'):
        item = item[1:-1]
    out: list[str] = []
    i = 0
    while i < len(item):
        if item[i] == "\\" and i + 1 < len(item):
            out.append(item[i + 1])
            i += 2
        else:
            out.append(item[i])
            i += 1
    return "".join(out)


def _decode_array_literal(text: str) -> list[str] | None:
    if not (text.startswith("{") and text.endswith("}")):
        return None
    body = text[1:-1]
    if not body.strip():
        return []
    return [item for item in (_unquote_element(p) for p in _split_array_body(body)) if item]


def _decode_json(text: str) -> list[str] | None:
    try:
        parsed = json.loads(text)
    except (ValueError, RecursionError):
        return None
    if not isinstance(parsed, list):
        return None
    return [str(item) for item in parsed if item is not None]


def _decode_text(text: str) -> list[str]:
    decoded = _decode_json(text)
    if decoded is not None:
        return decoded

    decoded = _decode_array_literal(text)
    if decoded is not None:
        return decoded

    logger.warning(f"Unrecognized amenities value, defaulting to empty list: {text[:80]!r}")
    return []


def decode_amenities(value: Any) -> list[str]:
    """Decode a stored amenities value into a facility list. Never raises.

    Order: native list, JSON text, ``{...}`` literal, then ``[]``.
    """
    match classify_amenities(value):
        case NativeArray(items=items):
            return [str(item) for item in items if item is not None]
        case TextArray(text=text):
            return _decode_text(text)
        case Missing():
            return []
