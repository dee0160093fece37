"""Answer normalization and duplicate collapsing."""

from .dedup import TIE_POLICIES, TiePolicy, deduplicate, group_records, select_representatives
from .normalize import normalize_answer

__all__ = [
    "TIE_POLICIES",
    "TiePolicy",
    "deduplicate",
    "group_records",
    "normalize_answer",
    "select_representatives",
]
