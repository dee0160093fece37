"""Helpers for reading upstream tables and tracking artifact metadata."""

from __future__ import annotations

import hashlib
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import pandas as pd

from .config import STORE_LAYOUT

METADATA_SUFFIX = ".meta.json"


def sha256sum(path: Path) -> str:
    """Compute the SHA256 checksum for a file."""
    digest = hashlib.sha256()
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(1024 * 1024), b""):
            digest.update(chunk)
    return digest.hexdigest()


def write_metadata(path: Path, payload: Mapping[str, Any]) -> None:
    """Persist metadata next to the artifact it describes."""
    path.write_text(json.dumps(payload, indent=2, sort_keys=True))


def locate_table(root: Path, stem: str, suffixes: Optional[Sequence[str]] = None) -> Path:
    """Return the first `root/stem<suffix>` that exists."""
    candidates = [root / f"{stem}{suffix}" for suffix in (suffixes or STORE_LAYOUT["suffixes"])]
    for candidate in candidates:
        if candidate.exists():
            return candidate
    tried = ", ".join(str(candidate) for candidate in candidates)
    raise FileNotFoundError(f"No table found for '{stem}'. Tried: {tried}")


def read_table(path: Path, **csv_kwargs: Any) -> pd.DataFrame:
    """Read a tabular file, dispatching on its suffix; `csv_kwargs` only apply to delimited text."""
    suffix = path.suffix.lower()
    if suffix == ".csv":
        return pd.read_csv(path, **csv_kwargs)
    if suffix == ".tsv":
        return pd.read_csv(path, sep="\t", **csv_kwargs)
    if suffix == ".parquet":
        return pd.read_parquet(path)
    if suffix == ".feather":
        return pd.read_feather(path)
    raise ValueError(f"Unsupported table format '{path.suffix}' for {path}")


def write_csv_atomic(frame: pd.DataFrame, dest: Path) -> None:
    """Write a frame to CSV through a temporary file so readers never see partial output."""
    dest.parent.mkdir(parents=True, exist_ok=True)
    with tempfile.NamedTemporaryFile("w", delete=False, dir=dest.parent, suffix=".tmp", encoding="utf-8") as tmp:
        frame.to_csv(tmp, index=False)
    os.replace(tmp.name, dest)


__all__ = [
    "METADATA_SUFFIX",
    "locate_table",
    "read_table",
    "sha256sum",
    "write_csv_atomic",
    "write_metadata",
]
