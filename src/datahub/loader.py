from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import pandas as pd

from .config import ANSWER_COLUMNS, COLUMNS, DEFAULT_DATA_ROOT, PREDICTION_COLUMNS, STORE_LAYOUT
from .helpers import require_columns
from .io import locate_table, read_table


@dataclass(frozen=True)
class CourseTables:
    """Raw upstream tables for one course, validated for required columns."""

    course: str
    predictions: pd.DataFrame
    answers: pd.DataFrame
    predictions_path: Path
    answers_path: Path


def load_course_tables(course: str, root: Path = DEFAULT_DATA_ROOT) -> CourseTables:
    """Locate and read the predictions/answers tables for `course` under `root`."""
    predictions_path = locate_table(root, STORE_LAYOUT["predictions_pattern"].format(course=course))
    answers_path = locate_table(root, STORE_LAYOUT["answers_pattern"].format(course=course))

    predictions = read_table(predictions_path, dtype={COLUMNS["item_id"]: str})
    # Answers such as "nan" or "null" are legitimate vocabulary; only blank cells are missing.
    answers = read_table(
        answers_path,
        dtype={COLUMNS["item_id"]: str, COLUMNS["answer"]: str},
        keep_default_na=False,
        na_values=[""],
    )

    require_columns(predictions, PREDICTION_COLUMNS, source=str(predictions_path))
    require_columns(answers, ANSWER_COLUMNS, source=str(answers_path))

    print(f"[join] Loaded {course}: {len(predictions)} predictions, {len(answers)} answers")
    return CourseTables(
        course=course,
        predictions=predictions,
        answers=answers,
        predictions_path=predictions_path,
        answers_path=answers_path,
    )
