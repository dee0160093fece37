"""In-run LRU cache for retrieved vectors."""

from __future__ import annotations

from collections import OrderedDict
from typing import Optional, Tuple

import numpy as np

VectorKey = Tuple[str, str]  # (resolved model path, input text)


class EmbeddingCache:
    """LRU cache of vectors keyed by model artifact and input text.

    Instances live only as long as the caller holds them; nothing is persisted.
    """

    def __init__(self, max_items: int = 100_000) -> None:
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        self._store: OrderedDict[VectorKey, np.ndarray] = OrderedDict()
        self._max_items = max_items

    def get(self, key: VectorKey) -> Optional[np.ndarray]:
        """Return the cached vector for `key`, updating recency, or None if missing."""
        if key not in self._store:
            return None
        self._store.move_to_end(key)
        return self._store[key]

    def set(self, key: VectorKey, vector: np.ndarray) -> None:
        """Insert a read-only copy of `vector`, evicting the oldest entry when full."""
        frozen = np.array(vector, dtype=np.float32, copy=True)
        frozen.setflags(write=False)
        if key in self._store:
            self._store.pop(key)
        elif len(self._store) >= self._max_items:
            self._store.popitem(last=False)
        self._store[key] = frozen

    def clear(self) -> None:
        """Remove every cached entry."""
        self._store.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._store

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._store)
