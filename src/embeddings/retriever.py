"""Retrieve static embeddings by running the vector tool as a subprocess."""

from __future__ import annotations

import subprocess
import tempfile
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import numpy as np

from src.datahub.records import EmbeddingVector, LexicalItem
from src.errors import EmbeddingError

from .cache import EmbeddingCache
from .tool import EmbeddingToolConfig, validate_model_path

_STDERR_TAIL = 500


class EmbeddingRetriever:
    """Fetch one vector per input string from a language's pretrained model.

    Parameters
    ----------
    model_path:
        Model artifact handed to the vector tool. Missing artifacts fail on the
        first retrieval, not at construction.
    tool:
        Command, dimensionality, timeout and retry budget for the tool.
    cache:
        Optional in-run cache; only strings it does not hold reach the subprocess.
    language:
        Used to label diagnostics.
    """

    def __init__(
        self,
        model_path: Path,
        tool: Optional[EmbeddingToolConfig] = None,
        cache: Optional[EmbeddingCache] = None,
        language: Optional[str] = None,
    ) -> None:
        self.model_path = Path(model_path)
        self.tool = tool or EmbeddingToolConfig()
        self.cache = cache
        self.language = language

    def retrieve(self, texts: Sequence[str]) -> np.ndarray:
        """
        Return a float32 matrix shaped (len(texts), dim), row i belonging to texts[i].

        Blank strings get an explicit zero row and are never sent to the tool.
        Identical strings are fetched once.
        """
        self.tool.validate()
        model = validate_model_path(self.model_path)
        dim = self.tool.dim
        matrix = np.zeros((len(texts), dim), dtype=np.float32)

        slots: Dict[str, List[int]] = {}
        blanks = 0
        for idx, text in enumerate(texts):
            line = _single_line(text)
            if not line:
                blanks += 1
                continue
            cached = self.cache.get((str(model), line)) if self.cache is not None else None
            if cached is not None:
                matrix[idx] = cached
                continue
            slots.setdefault(line, []).append(idx)

        if blanks:
            print(f"[embed] Warning: {blanks} blank input(s) for {self._scope()} received zero vectors.")

        pending = list(slots)
        if pending:
            print(f"[embed] Requesting {len(pending)} vectors for {self._scope()} from {model.name}")
            vectors = self._run(pending, model)
            for line, vector in zip(pending, vectors):
                for idx in slots[line]:
                    matrix[idx] = vector
                if self.cache is not None:
                    self.cache.set((str(model), line), vector)

        return matrix

    def embed_items(self, items: Sequence[LexicalItem]) -> List[EmbeddingVector]:
        """Retrieve vectors for lexical items using their normalized answers."""
        matrix = self.retrieve([item.normalized_answer for item in items])
        return [EmbeddingVector(item=item, values=row) for item, row in zip(items, matrix)]

    def _run(self, lines: Sequence[str], model: Path) -> np.ndarray:
        attempts = self.tool.retries + 1
        for attempt in range(1, attempts):
            try:
                return run_vector_tool(lines, model, self.tool)
            except _TransientToolFailure as exc:
                print(f"[embed] Attempt {attempt}/{attempts} failed for {self._scope()}: {exc}; retrying.")
        try:
            return run_vector_tool(lines, model, self.tool)
        except _TransientToolFailure as exc:
            raise EmbeddingError(str(exc), language=self.language) from exc

    def _scope(self) -> str:
        return f"language '{self.language}'" if self.language else "input"


class _TransientToolFailure(Exception):
    """Non-zero exit or timeout; eligible for retry."""


def run_vector_tool(lines: Sequence[str], model: Path, tool: EmbeddingToolConfig) -> np.ndarray:
    """
    Write `lines` to a scratch file, run the tool against it, and parse its output file.

    The scratch directory is removed on every exit path, including timeouts and
    failed launches.
    """
    argv = tool.argv(model)
    with tempfile.TemporaryDirectory(prefix="vectors-") as workdir:
        input_path = Path(workdir) / "input.txt"
        output_path = Path(workdir) / "vectors.txt"
        input_path.write_text("".join(f"{line}\n" for line in lines), encoding="utf-8")

        with input_path.open("rb") as stdin, output_path.open("wb") as stdout:
            try:
                completed = subprocess.run(
                    argv,
                    stdin=stdin,
                    stdout=stdout,
                    stderr=subprocess.PIPE,
                    timeout=tool.timeout,
                    check=False,
                )
            except subprocess.TimeoutExpired as exc:
                raise _TransientToolFailure(f"vector tool timed out after {exc.timeout}s") from exc
            except OSError as exc:
                raise EmbeddingError(f"could not launch vector tool: {exc}") from exc

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()[-_STDERR_TAIL:]
            raise _TransientToolFailure(f"vector tool exited with status {completed.returncode}: {stderr}")

        return parse_vectors(output_path.read_text(encoding="utf-8"), expected_rows=len(lines), dim=tool.dim)


def parse_vectors(payload: str, expected_rows: int, dim: int) -> np.ndarray:
    """
    Parse whitespace-delimited vectors, one per line.

    Lines carrying a leading label (dim + 1 fields, as printed by word-vector
    modes) have the label stripped. Any other width, or a row count different
    from `expected_rows`, is an error.
    """
    rows: List[List[float]] = []
    for line_num, line in enumerate(payload.splitlines(), 1):
        fields = line.split()
        if not fields:
            continue
        if len(fields) == dim + 1:
            fields = fields[1:]
        if len(fields) != dim:
            raise EmbeddingError(f"line {line_num}: expected {dim} values, got {len(fields)}")
        try:
            rows.append([float(value) for value in fields])
        except ValueError as exc:
            raise EmbeddingError(f"line {line_num}: {exc}") from exc

    if len(rows) != expected_rows:
        raise EmbeddingError(f"vector tool returned {len(rows)} vectors for {expected_rows} inputs")

    vectors = np.asarray(rows, dtype=np.float32).reshape(expected_rows, dim)
    if not np.all(np.isfinite(vectors)):
        raise EmbeddingError("vector tool returned non-finite values")
    return vectors


def _single_line(text: str) -> str:
    # The tool reads one query per line; embedded newlines would shift every later row.
    return " ".join(str(text).split())


__all__ = ["EmbeddingRetriever", "parse_vectors", "run_vector_tool"]
