"""Course-level orchestration: profiles, per-language runs, render ordering and handoff."""

from .course_runner import CourseResult, LanguageResult, retriever_factory_for, run_course, run_language
from .handoff import HANDOFF_COLUMNS, to_frame, write_handoff
from .ordering import order_for_render
from .profiles import CourseProfile, build_profile, load_profiles

__all__ = [
    "CourseProfile",
    "CourseResult",
    "HANDOFF_COLUMNS",
    "LanguageResult",
    "build_profile",
    "load_profiles",
    "order_for_render",
    "retriever_factory_for",
    "run_course",
    "run_language",
    "to_frame",
    "write_handoff",
]
