"""Join difficulty estimates with answer text for one course."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List

import pandas as pd

from src.errors import DataError

from .config import ANSWER_COLUMNS, COLUMNS, PREDICTION_COLUMNS
from .helpers import parse_item_id, require_columns, to_int, to_optional_float
from .records import DifficultyRecord


@dataclass(frozen=True)
class JoinResult:
    """Joined records plus per-reason counts of the rows that were filtered out."""

    course: str
    records: List[DifficultyRecord]
    dropped: Dict[str, int] = field(default_factory=dict)

    @property
    def empty(self) -> bool:
        return not self.records


def join_difficulty(predictions: pd.DataFrame, answers: pd.DataFrame, course: str) -> JoinResult:
    """
    Inner-join predictions and answers on item id and tag each row with its language.

    Rows without a rate-of-forgetting estimate, without answer text, or with an
    identifier that carries no language segment are dropped and counted. An
    empty result is reported as a warning; callers decide whether to continue.
    """
    item_col, n_obs_col, rof_col, answer_col = (
        COLUMNS["item_id"],
        COLUMNS["n_obs"],
        COLUMNS["rof"],
        COLUMNS["answer"],
    )
    require_columns(predictions, PREDICTION_COLUMNS, source=f"{course} predictions")
    require_columns(answers, ANSWER_COLUMNS, source=f"{course} answers")

    dropped: Counter[str] = Counter()

    left = _unique_by_item(predictions[list(PREDICTION_COLUMNS)], "duplicate prediction id", dropped)
    right = _unique_by_item(answers[list(ANSWER_COLUMNS)], "duplicate answer id", dropped)

    merged = left.merge(right, on=item_col, how="inner", validate="one_to_one")
    dropped["unmatched id"] += (len(left) - len(merged)) + (len(right) - len(merged))

    records: List[DifficultyRecord] = []
    for row in merged.itertuples(index=False):
        data = row._asdict()
        try:
            rof = to_optional_float(data[rof_col])
            item = parse_item_id(data[item_col])
            n_obs = to_int(data[n_obs_col])
        except DataError as exc:
            exc.bind(course)
            dropped["malformed row"] += 1
            print(f"[join] Dropping {data[item_col]!r}: {exc.message}")
            continue
        if rof is None:
            dropped["missing rof"] += 1
            continue
        answer = data[answer_col]
        if answer is None or (isinstance(answer, float) and pd.isna(answer)):
            dropped["missing answer"] += 1
            continue
        records.append(
            DifficultyRecord(
                item_id=item.raw,
                n_obs=n_obs,
                rof=rof,
                answer=str(answer),
                language=item.language,
                course=course,
            )
        )

    reasons = {reason: count for reason, count in dropped.items() if count}
    if reasons:
        summary = ", ".join(f"{reason}={count}" for reason, count in sorted(reasons.items()))
        print(f"[join] {course}: filtered {sum(reasons.values())} rows ({summary})")
    if not records:
        print(f"[join] Warning: join produced no usable records for course '{course}'.")
    else:
        print(f"[join] {course}: {len(records)} joined records")
    return JoinResult(course=course, records=records, dropped=reasons)


def _unique_by_item(frame: pd.DataFrame, reason: str, dropped: Counter[str]) -> pd.DataFrame:
    """Drop rows without an id and keep the first occurrence of repeated ids."""
    item_col = COLUMNS["item_id"]
    present = frame[frame[item_col].notna()]
    dropped["missing id"] += len(frame) - len(present)
    present = present.assign(**{item_col: present[item_col].astype(str)})
    unique = present.drop_duplicates(subset=item_col, keep="first")
    dropped[reason] += len(present) - len(unique)
    return unique
