"""Error taxonomy shared by every pipeline stage."""

from __future__ import annotations

from typing import Optional


class PipelineError(Exception):
    """Base error carrying the failing stage and, when known, the course and language."""

    def __init__(
        self,
        stage: str,
        message: str,
        *,
        course: Optional[str] = None,
        language: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.stage = stage
        self.message = message
        self.course = course
        self.language = language

    def bind(self, course: str, language: Optional[str] = None) -> "PipelineError":
        """Attach course/language context without losing what the raiser already set."""
        self.course = self.course or course
        self.language = self.language or language
        return self

    @property
    def diagnostic(self) -> str:
        scope = "/".join(part for part in (self.course, self.language) if part)
        where = f" for {scope}" if scope else ""
        return f"{self.stage} failed{where}: {self.message}"

    def __str__(self) -> str:
        return self.diagnostic


class DataError(PipelineError):
    """Upstream rows that cannot be joined or parsed."""

    def __init__(self, message: str, **kwargs: Optional[str]) -> None:
        super().__init__("join", message, **kwargs)


class EmbeddingError(PipelineError):
    """Vector retrieval failed for a language."""

    def __init__(self, message: str, **kwargs: Optional[str]) -> None:
        super().__init__("embedding", message, **kwargs)


class ProjectionError(PipelineError):
    """Dimensionality reduction could not produce a layout."""

    def __init__(self, message: str, **kwargs: Optional[str]) -> None:
        super().__init__("projection", message, **kwargs)


__all__ = ["PipelineError", "DataError", "EmbeddingError", "ProjectionError"]
