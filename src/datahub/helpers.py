from __future__ import annotations

import math
from typing import Any, Optional, Sequence

import pandas as pd

from src.errors import DataError

from .config import LANGUAGE_SEGMENT, NATIVE_TOKEN
from .records import ItemId, Language


def parse_item_id(raw: Any) -> ItemId:
    """Split an upstream identifier into its segments and resolve the language side."""
    if raw is None or (isinstance(raw, float) and math.isnan(raw)):
        raise DataError("item_id is missing")
    text = str(raw)
    segments = text.split("_")
    if len(segments) <= LANGUAGE_SEGMENT:
        raise DataError(f"item_id {text!r} has no language segment")
    language: Language = "native" if segments[LANGUAGE_SEGMENT] == NATIVE_TOKEN else "target"
    return ItemId(raw=text, source_set=segments[0], sequence=segments[1], language=language)


def to_int(value: Any) -> int:
    """Robustly convert observation counts to non-negative ints."""
    if value is None:
        raise DataError("Expected integer-like value, received None")
    if isinstance(value, bool):
        return int(value)
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise DataError(f"Cannot convert {value!r} to int") from exc
    if math.isnan(number) or not number.is_integer():
        raise DataError(f"Cannot convert {value!r} to int")
    if number < 0:
        raise DataError(f"Observation count must be non-negative, got {value!r}")
    return int(number)


def to_optional_float(value: Any) -> Optional[float]:
    """Return a float, or None when the upstream estimator left the cell empty."""
    if value is None:
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise DataError(f"Cannot convert {value!r} to float") from exc
    if math.isnan(number):
        return None
    return number


def require_columns(frame: pd.DataFrame, columns: Sequence[str], *, source: str) -> None:
    """Raise a DataError naming every column the table lacks."""
    missing = [column for column in columns if column not in frame.columns]
    if missing:
        raise DataError(f"{source} is missing required columns: {', '.join(missing)}")

