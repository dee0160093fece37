"""Vector-printing tool configuration.

The retriever runs a static-embedding command line tool (fastText's
``print-sentence-vectors`` by default). This module keeps the invocation
declarative: the command prefix, expected dimensionality, and runtime limits
live in one frozen record so profiles can override them per course.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple

from src.errors import EmbeddingError

DEFAULT_COMMAND: Tuple[str, ...] = ("fasttext", "print-sentence-vectors")
DEFAULT_DIM = 300


@dataclass(frozen=True)
class EmbeddingToolConfig:
    """How to invoke the vector tool and what it must return."""

    command: Tuple[str, ...] = DEFAULT_COMMAND
    dim: int = DEFAULT_DIM
    timeout: Optional[float] = 300.0
    retries: int = 0

    def validate(self) -> None:
        if not self.command:
            raise ValueError("Embedding tool command cannot be empty.")
        if self.dim < 1:
            raise ValueError("Embedding dimensionality must be positive.")
        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("Embedding timeout must be positive when set.")
        if self.retries < 0:
            raise ValueError("Embedding retries cannot be negative.")

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "EmbeddingToolConfig":
        known = {"command", "dim", "timeout", "retries"}
        unknown = set(payload) - known
        if unknown:
            raise ValueError(f"Unknown embedding tool keys: {', '.join(sorted(unknown))}")
        config = cls()
        if "command" in payload:
            command = payload["command"]
            if isinstance(command, str):
                command = command.split()
            config = replace(config, command=tuple(str(part) for part in command))
        if "dim" in payload:
            config = replace(config, dim=int(payload["dim"]))
        if "timeout" in payload:
            timeout = payload["timeout"]
            config = replace(config, timeout=None if timeout is None else float(timeout))
        if "retries" in payload:
            config = replace(config, retries=int(payload["retries"]))
        config.validate()
        return config

    def argv(self, model_path: Path) -> List[str]:
        """Build the argument list for `model_path`; the executable is resolved on PATH."""
        executable = self.command[0]
        resolved = shutil.which(executable)
        if resolved is None:
            raise EmbeddingError(f"Vector tool '{executable}' was not found on PATH.")
        return [resolved, *self.command[1:], str(model_path)]


def validate_model_path(model_path: Path) -> Path:
    """Resolve the model artifact, failing when it does not exist."""
    path = Path(model_path).expanduser()
    if not path.is_file():
        raise EmbeddingError(f"Model artifact not found: {path}")
    return path.resolve()


__all__ = ["DEFAULT_COMMAND", "DEFAULT_DIM", "EmbeddingToolConfig", "validate_model_path"]
