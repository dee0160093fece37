"""Tabular handoff to the external renderer."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional, Sequence

import pandas as pd

from src.datahub.io import METADATA_SUFFIX, write_csv_atomic, write_metadata
from src.datahub.records import ProjectedPoint

HANDOFF_COLUMNS = ("x", "y", "rof", "label", "language", "course")


def to_frame(points: Sequence[ProjectedPoint]) -> pd.DataFrame:
    """Flatten points into the renderer's column layout, keeping their order."""
    return pd.DataFrame(
        {
            "x": [point.x for point in points],
            "y": [point.y for point in points],
            "rof": [point.rof for point in points],
            "label": [point.label for point in points],
            "language": [point.language for point in points],
            "course": [point.course for point in points],
        },
        columns=list(HANDOFF_COLUMNS),
    )


def write_handoff(
    course: str,
    points: Sequence[ProjectedPoint],
    output_root: Path,
    metadata: Optional[Mapping[str, Any]] = None,
) -> Path:
    """Write `<output_root>/<course>.points.csv` plus a metadata sidecar."""
    dest = output_root / f"{course}.points.csv"
    write_csv_atomic(to_frame(points), dest)

    payload = {
        "course": course,
        "rows": len(points),
        "written_at": datetime.now(timezone.utc).isoformat(timespec="seconds"),
        **(metadata or {}),
    }
    write_metadata(dest.with_name(dest.name + METADATA_SUFFIX), payload)
    print(f"[pipeline] Saved {course} handoff ({len(points)} points) → {dest}")
    return dest


__all__ = ["HANDOFF_COLUMNS", "to_frame", "write_handoff"]
