"""Collapse records that share a normalized surface form."""

from __future__ import annotations

from collections import defaultdict
from typing import Dict, List, Literal, Sequence, Tuple

from src.datahub.records import DifficultyRecord, LANGUAGES, Language, LexicalItem

from .normalize import normalize_answer

TiePolicy = Literal["keep_all", "smallest_id"]
TIE_POLICIES: Tuple[TiePolicy, ...] = ("keep_all", "smallest_id")
GroupKey = Tuple[str, str, Language]


def group_records(records: Sequence[DifficultyRecord]) -> Dict[GroupKey, List[DifficultyRecord]]:
    """Bucket records by (course, normalized answer, language), preserving first-seen order."""
    groups: Dict[GroupKey, List[DifficultyRecord]] = defaultdict(list)
    for record in records:
        key = (record.course, normalize_answer(record.answer), record.language)
        groups[key].append(record)
    return dict(groups)


def select_representatives(
    members: Sequence[DifficultyRecord],
    tie_policy: TiePolicy = "keep_all",
) -> List[DifficultyRecord]:
    """
    Keep the member(s) with the largest observation count.

    `keep_all` retains every member tied at the maximum, which can leave several
    items with the same label in one group. `smallest_id` resolves the tie by
    keeping the member with the lexicographically smallest item id.
    """
    if not members:
        raise ValueError("Cannot select a representative from an empty group.")
    if tie_policy not in TIE_POLICIES:
        raise ValueError(f"Unknown tie policy '{tie_policy}'. Available: {list(TIE_POLICIES)}")

    best = max(record.n_obs for record in members)
    survivors = [record for record in members if record.n_obs == best]
    if tie_policy == "smallest_id":
        return [min(survivors, key=lambda record: record.item_id)]
    return survivors


def deduplicate(
    records: Sequence[DifficultyRecord],
    tie_policy: TiePolicy = "keep_all",
) -> Dict[Language, List[LexicalItem]]:
    """Group joined records and emit one lexical item per surviving representative, split by language."""
    by_language: Dict[Language, List[LexicalItem]] = {language: [] for language in LANGUAGES}
    groups = group_records(records)
    tied_groups = 0

    for (course, normalized, language), members in groups.items():
        survivors = select_representatives(members, tie_policy)
        if len(survivors) > 1:
            tied_groups += 1
        for record in survivors:
            by_language[language].append(
                LexicalItem(
                    course=course,
                    normalized_answer=normalized,
                    language=language,
                    representative=record,
                )
            )

    kept = sum(len(items) for items in by_language.values())
    print(f"[dedup] {len(records)} records -> {len(groups)} surface forms, {kept} items kept")
    if tied_groups:
        print(f"[dedup] {tied_groups} groups kept more than one record tied at the maximum n_obs ({tie_policy}).")
    return by_language
