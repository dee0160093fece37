"""Static configuration for the upstream difficulty store layout."""

from __future__ import annotations

from pathlib import Path
from typing import Tuple, TypedDict


class StoreLayout(TypedDict):
    predictions_pattern: str
    answers_pattern: str
    suffixes: Tuple[str, ...]


class StoreColumns(TypedDict):
    item_id: str
    n_obs: str
    rof: str
    answer: str


# Default directories used by the Typer CLI; callers may override these.
DEFAULT_DATA_ROOT = Path("data")
DEFAULT_OUTPUT_ROOT = Path("data/maps")

# ---------------------------------------------------------------------------
# Upstream store payloads.

STORE_LAYOUT: StoreLayout = {
    "predictions_pattern": "{course}.predictions",
    "answers_pattern": "{course}.answers",
    # Probed in order when locating a course's tables.
    "suffixes": (".parquet", ".feather", ".csv", ".tsv"),
}

COLUMNS: StoreColumns = {
    "item_id": "item_id",
    "n_obs": "n_obs",
    "rof": "rof",
    "answer": "answer",
}

PREDICTION_COLUMNS: Tuple[str, ...] = (COLUMNS["item_id"], COLUMNS["n_obs"], COLUMNS["rof"])
ANSWER_COLUMNS: Tuple[str, ...] = (COLUMNS["item_id"], COLUMNS["answer"])

# Third underscore-delimited segment of an item id; "1" marks the native side.
LANGUAGE_SEGMENT = 2
NATIVE_TOKEN = "1"


__all__ = [
    "ANSWER_COLUMNS",
    "COLUMNS",
    "DEFAULT_DATA_ROOT",
    "DEFAULT_OUTPUT_ROOT",
    "LANGUAGE_SEGMENT",
    "NATIVE_TOKEN",
    "PREDICTION_COLUMNS",
    "STORE_LAYOUT",
    "StoreColumns",
    "StoreLayout",
]
