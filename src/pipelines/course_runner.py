"""Run join → dedup → embed → project → order for a course, isolating each language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence

import numpy as np

from src.datahub.join import JoinResult, join_difficulty
from src.datahub.loader import CourseTables
from src.datahub.records import LANGUAGES, Language, LexicalItem, ProjectedPoint
from src.embeddings.cache import EmbeddingCache
from src.embeddings.retriever import EmbeddingRetriever
from src.errors import EmbeddingError, PipelineError, ProjectionError
from src.lexicon.dedup import deduplicate
from src.projection.engine import ProjectionEngine, ProjectionResult

from .ordering import order_for_render
from .profiles import CourseProfile

RetrieverFactory = Callable[[CourseProfile, Language], EmbeddingRetriever]


@dataclass
class LanguageResult:
    """Outcome of one language pipeline; `error` is set when a stage aborted it."""

    course: str
    language: Language
    points: List[ProjectedPoint] = field(default_factory=list)
    projection: Optional[ProjectionResult] = None
    error: Optional[PipelineError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class CourseResult:
    course: str
    join: JoinResult
    languages: Dict[Language, LanguageResult]

    @property
    def points(self) -> List[ProjectedPoint]:
        """Successful languages' points, each language already in render order."""
        ordered: List[ProjectedPoint] = []
        for language in LANGUAGES:
            result = self.languages.get(language)
            if result is not None and result.ok:
                ordered.extend(result.points)
        return ordered

    @property
    def failures(self) -> List[PipelineError]:
        return [result.error for result in self.languages.values() if result.error is not None]


def retriever_factory_for(cache: Optional[EmbeddingCache] = None) -> RetrieverFactory:
    """Build retrievers from a profile's model paths and tool settings."""

    def factory(profile: CourseProfile, language: Language) -> EmbeddingRetriever:
        return EmbeddingRetriever(
            profile.model_for(language),
            tool=profile.tool,
            cache=cache,
            language=language,
        )

    return factory


def run_language(
    profile: CourseProfile,
    language: Language,
    items: Sequence[LexicalItem],
    retriever_factory: Optional[RetrieverFactory] = None,
) -> LanguageResult:
    """
    Embed and project one language's lexical items.

    Embedding and projection failures are caught here and recorded on the
    result so a sibling language can still finish; other exceptions propagate.
    """
    factory = retriever_factory or retriever_factory_for()
    course = profile.course
    if not items:
        print(f"[pipeline] Warning: no lexical items for {course}/{language}; skipping.")
        return LanguageResult(course=course, language=language)

    try:
        retriever = factory(profile, language)
        matrix = retriever.retrieve([item.normalized_answer for item in items])
        projection = ProjectionEngine(profile.projection_for(language)).project(matrix)
    except (EmbeddingError, ProjectionError) as exc:
        exc.bind(course, language)
        print(f"[pipeline] {exc.diagnostic}")
        return LanguageResult(course=course, language=language, error=exc)

    points = _to_points(items, projection.coordinates)
    print(f"[pipeline] {course}/{language}: {len(points)} points ready")
    return LanguageResult(
        course=course,
        language=language,
        points=order_for_render(points),
        projection=projection,
    )


def run_course(
    profile: CourseProfile,
    tables: CourseTables,
    retriever_factory: Optional[RetrieverFactory] = None,
) -> CourseResult:
    """Join and deduplicate a course's tables, then run each language independently."""
    joined = join_difficulty(tables.predictions, tables.answers, profile.course)
    by_language = deduplicate(joined.records, tie_policy=profile.tie_policy)

    results: Dict[Language, LanguageResult] = {}
    for language in LANGUAGES:
        results[language] = run_language(
            profile,
            language,
            by_language.get(language, []),
            retriever_factory=retriever_factory,
        )
    return CourseResult(course=profile.course, join=joined, languages=results)


def _to_points(items: Sequence[LexicalItem], coords: np.ndarray) -> List[ProjectedPoint]:
    points: List[ProjectedPoint] = []
    for item, row in zip(items, coords):
        # One-dimensional layouts still hand the renderer a y value.
        y = float(row[1]) if row.shape[0] > 1 else 0.0
        points.append(ProjectedPoint(item=item, x=float(row[0]), y=y, rof=item.rof))
    return points


__all__ = [
    "CourseResult",
    "LanguageResult",
    "RetrieverFactory",
    "retriever_factory_for",
    "run_course",
    "run_language",
]
