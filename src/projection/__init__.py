"""Manifold projection of embedding matrices to plotting coordinates."""

from .config import ProjectionConfig, SUPPORTED_METRICS
from .engine import ProjectionEngine, ProjectionResult, effective_neighborhood, project_embeddings

__all__ = [
    "ProjectionConfig",
    "ProjectionEngine",
    "ProjectionResult",
    "SUPPORTED_METRICS",
    "effective_neighborhood",
    "project_embeddings",
]
