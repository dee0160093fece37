"""Configuration for the manifold projection step."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from src.errors import ProjectionError

SUPPORTED_METRICS: Tuple[str, ...] = ("cosine", "euclidean", "manhattan", "correlation")


@dataclass(frozen=True)
class ProjectionConfig:
    """UMAP settings for one course/language.

    The defaults favour legible label clouds over faithful distances: a wide
    neighbourhood and a large minimum distance keep labels from piling up.
    """

    output_dimensions: int = 2
    distance_metric: str = "cosine"
    neighborhood_size: int = 50
    minimum_distance: float = 0.5
    spread: float = 1.0
    random_seed: int = 42

    def validate(self) -> None:
        if self.output_dimensions < 1:
            raise ProjectionError("output_dimensions must be at least 1.")
        if self.distance_metric not in SUPPORTED_METRICS:
            raise ProjectionError(
                f"Unsupported distance metric '{self.distance_metric}'. Available: {list(SUPPORTED_METRICS)}"
            )
        if self.neighborhood_size < 2:
            raise ProjectionError("neighborhood_size must be at least 2.")
        if self.spread <= 0:
            raise ProjectionError("spread must be strictly positive.")
        if self.minimum_distance < 0:
            raise ProjectionError("minimum_distance cannot be negative.")
        if self.minimum_distance > self.spread:
            raise ProjectionError("minimum_distance cannot exceed spread.")
        if self.random_seed < 0:
            raise ProjectionError("random_seed must be non-negative.")

    def with_overrides(self, **changes: Any) -> "ProjectionConfig":
        """Return a copy with `changes` applied; unknown keys raise ValueError."""
        known = {field.name for field in fields(self)}
        unknown = set(changes) - known
        if unknown:
            raise ValueError(f"Unknown projection keys: {', '.join(sorted(unknown))}")
        return replace(self, **changes)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any], base: Optional["ProjectionConfig"] = None) -> "ProjectionConfig":
        """Build a config from a JSON-style mapping; validation is left to the engine run."""
        return (base or cls()).with_overrides(**dict(payload))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


__all__ = ["ProjectionConfig", "SUPPORTED_METRICS"]
