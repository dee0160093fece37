from .helpers import parse_item_id
from .join import JoinResult, join_difficulty
from .loader import CourseTables, load_course_tables
from .records import DifficultyRecord, ItemId, LANGUAGES, Language, LexicalItem, ProjectedPoint

__all__ = [
    "CourseTables",
    "DifficultyRecord",
    "ItemId",
    "JoinResult",
    "LANGUAGES",
    "Language",
    "LexicalItem",
    "ProjectedPoint",
    "join_difficulty",
    "load_course_tables",
    "parse_item_id",
]
