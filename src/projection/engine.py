"""Reduce a language's embedding matrix to plotting coordinates with UMAP.

UMAP builds an approximate nearest-neighbour graph under the configured metric,
turns it into a fuzzy weighted graph of local neighbourhoods, and lays the graph
out in `output_dimensions` by stochastic gradient descent that pulls neighbours
together and pushes non-neighbours apart. Only relative placement carries
meaning; the axes themselves are arbitrary.
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass
from typing import Optional, Tuple

import numpy as np
import umap
from sklearn.manifold import trustworthiness

from src.errors import ProjectionError

from .config import ProjectionConfig

# Below this many rows there is no neighbourhood graph to speak of.
MIN_MANIFOLD_ROWS = 3
# Trustworthiness is quadratic in the row count; skip it for large vocabularies.
DIAGNOSTIC_MAX_ROWS = 5000
DIAGNOSTIC_NEIGHBORS = 5


@dataclass(frozen=True)
class ProjectionResult:
    """Layout for one matrix plus the settings that were actually used."""

    coordinates: np.ndarray
    effective_neighbors: int
    clamped: bool
    trustworthiness: Optional[float] = None

    @property
    def n_rows(self) -> int:
        return int(self.coordinates.shape[0])


def effective_neighborhood(n_rows: int, requested: int) -> Tuple[int, bool]:
    """
    Clamp the neighbourhood size to what `n_rows` points can support.

    A point has at most `n_rows - 1` neighbours, so whenever `n_rows <= requested`
    the size is reduced to `n_rows - 1` (zero for a single row) and the clamp is reported.
    """
    if n_rows <= requested:
        return max(n_rows - 1, 0), True
    return requested, False


class ProjectionEngine:
    """Run UMAP with a fixed, explicitly seeded configuration."""

    def __init__(self, config: Optional[ProjectionConfig] = None) -> None:
        self.config = config or ProjectionConfig()

    def project(self, matrix: np.ndarray) -> ProjectionResult:
        """Return one coordinate row per input row, in input order."""
        cfg = self.config
        cfg.validate()

        data = np.asarray(matrix, dtype=np.float32)
        if data.ndim != 2:
            raise ProjectionError(f"Expected a 2-D embedding matrix, got shape {data.shape}")
        if not np.all(np.isfinite(data)):
            raise ProjectionError("Embedding matrix contains non-finite values.")

        n_rows = data.shape[0]
        neighbors, clamped = effective_neighborhood(n_rows, cfg.neighborhood_size)
        if clamped:
            print(
                f"[project] Neighbourhood size clamped from {cfg.neighborhood_size} to {neighbors} "
                f"for {n_rows} rows."
            )

        if n_rows < MIN_MANIFOLD_ROWS:
            coords = _degenerate_layout(n_rows, cfg)
            return ProjectionResult(coordinates=coords, effective_neighbors=neighbors, clamped=clamped)

        coords = self._run_umap(data, neighbors)
        score = _trustworthiness(data, coords, cfg.distance_metric)
        if score is not None:
            print(f"[project] {n_rows} rows projected (k={neighbors}, trustworthiness={score:.3f})")
        else:
            print(f"[project] {n_rows} rows projected (k={neighbors})")
        return ProjectionResult(
            coordinates=coords,
            effective_neighbors=neighbors,
            clamped=clamped,
            trustworthiness=score,
        )

    def _run_umap(self, data: np.ndarray, neighbors: int) -> np.ndarray:
        cfg = self.config
        reducer = umap.UMAP(
            n_components=cfg.output_dimensions,
            n_neighbors=neighbors,
            min_dist=cfg.minimum_distance,
            spread=cfg.spread,
            metric=cfg.distance_metric,
            init=_initialisation(data.shape[0], cfg.output_dimensions),
            random_state=cfg.random_seed,
            transform_seed=cfg.random_seed,
            verbose=False,
        )
        try:
            with warnings.catch_warnings():
                # Seeding forces single-threaded optimisation; UMAP warns about it on every call.
                warnings.filterwarnings("ignore", message=".*n_jobs value.*", category=UserWarning)
                coords = reducer.fit_transform(data)
        except (ValueError, RuntimeError, ArithmeticError) as exc:
            raise ProjectionError(f"UMAP failed: {exc}") from exc

        coords = np.asarray(coords, dtype=np.float32)
        expected = (data.shape[0], cfg.output_dimensions)
        if coords.shape != expected:
            raise ProjectionError(f"UMAP returned shape {coords.shape}, expected {expected}")
        if not np.all(np.isfinite(coords)):
            raise ProjectionError("UMAP layout did not converge to finite coordinates.")
        return coords


def project_embeddings(matrix: np.ndarray, config: Optional[ProjectionConfig] = None) -> ProjectionResult:
    """Functional shorthand for `ProjectionEngine(config).project(matrix)`."""
    return ProjectionEngine(config).project(matrix)


def _initialisation(n_rows: int, dims: int) -> str:
    # The spectral initialiser needs more Lanczos vectors than tiny graphs provide.
    return "spectral" if n_rows > 2 * (dims + 1) + 1 else "random"


def _degenerate_layout(n_rows: int, cfg: ProjectionConfig) -> np.ndarray:
    """Fixed placement for 0-2 rows: the origin, or a pair straddling it on the first axis."""
    coords = np.zeros((n_rows, cfg.output_dimensions), dtype=np.float32)
    if n_rows == 2:
        coords[0, 0] = -cfg.spread / 2
        coords[1, 0] = cfg.spread / 2
    return coords


def _trustworthiness(data: np.ndarray, coords: np.ndarray, metric: str) -> Optional[float]:
    n_rows = data.shape[0]
    if n_rows > DIAGNOSTIC_MAX_ROWS:
        return None
    k = min(DIAGNOSTIC_NEIGHBORS, math.ceil(n_rows / 2) - 1)
    if k < 1:
        return None
    return float(trustworthiness(data, coords, n_neighbors=k, metric=metric))


__all__ = [
    "DIAGNOSTIC_MAX_ROWS",
    "MIN_MANIFOLD_ROWS",
    "ProjectionEngine",
    "ProjectionResult",
    "effective_neighborhood",
    "project_embeddings",
]
