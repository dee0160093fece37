"""Record types flowing between the pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Tuple

import numpy as np

Language = Literal["native", "target"]
LANGUAGES: Tuple[Language, ...] = ("native", "target")


@dataclass(frozen=True)
class ItemId:
    """Structured form of an upstream learning-item identifier."""

    raw: str
    source_set: str
    sequence: str
    language: Language


@dataclass(frozen=True)
class DifficultyRecord:
    """One learning item with its estimated rate of forgetting and answer text."""

    item_id: str
    n_obs: int
    rof: float
    answer: str
    language: Language
    course: str


@dataclass(frozen=True)
class LexicalItem:
    """A unique surface form within a course/language, represented by its best-observed record."""

    course: str
    normalized_answer: str
    language: Language
    representative: DifficultyRecord

    @property
    def rof(self) -> float:
        return self.representative.rof

    @property
    def key(self) -> Tuple[str, str, Language]:
        return (self.course, self.normalized_answer, self.language)


@dataclass(frozen=True)
class EmbeddingVector:
    item: LexicalItem
    values: np.ndarray


@dataclass(frozen=True)
class ProjectedPoint:
    """Two-dimensional placement of a lexical item, carrying its difficulty for rendering."""

    item: LexicalItem
    x: float
    y: float
    rof: float

    @property
    def label(self) -> str:
        return self.item.normalized_answer

    @property
    def language(self) -> Language:
        return self.item.language

    @property
    def course(self) -> str:
        return self.item.course


__all__ = [
    "DifficultyRecord",
    "EmbeddingVector",
    "ItemId",
    "LANGUAGES",
    "Language",
    "LexicalItem",
    "ProjectedPoint",
]
