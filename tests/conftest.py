"""Shared fixtures: a stand-in vector tool that behaves like `fasttext print-sentence-vectors`."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Tuple

import pytest

FAKE_TOOL_SOURCE = '''
import hashlib
import os
import random
import sys
import time

sys.stdin.reconfigure(encoding="utf-8")
model = os.path.basename(sys.argv[-1])
mode = os.environ.get("FAKE_TOOL_MODE", "ok")
dim = int(os.environ.get("FAKE_TOOL_DIM", "300"))
log = os.environ.get("FAKE_TOOL_LOG")

lines = [line.rstrip("\\n") for line in sys.stdin]
calls = 0
if log:
    with open(log, "a", encoding="utf-8") as handle:
        handle.write("|".join(lines) + "\\n")
    with open(log, encoding="utf-8") as handle:
        calls = sum(1 for _ in handle)

if mode == "fail" or "broken" in model:
    sys.stderr.write("cannot load model " + model + "\\n")
    sys.exit(3)
if mode == "flaky" and calls == 1:
    sys.exit(1)
if mode == "sleep":
    time.sleep(30)
if mode == "short":
    lines = lines[:-1]

for line in lines:
    seed = int.from_bytes(hashlib.sha256(line.encode("utf-8")).digest()[:8], "little")
    rng = random.Random(seed)
    sys.stdout.write(" ".join("%.6f" % rng.gauss(0.0, 1.0) for _ in range(dim)) + " \\n")
'''


@pytest.fixture
def vector_tool(tmp_path: Path) -> Tuple[str, ...]:
    """Command prefix for the stand-in tool, run with the current interpreter."""
    script = tmp_path / "fake_vector_tool.py"
    script.write_text(FAKE_TOOL_SOURCE, encoding="utf-8")
    return (sys.executable, str(script))


@pytest.fixture
def model_file(tmp_path: Path) -> Path:
    path = tmp_path / "models" / "cc.fr.300.bin"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"stand-in model")
    return path


@pytest.fixture
def tool_log(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """File the stand-in tool appends each batch of received lines to."""
    log = tmp_path / "tool.log"
    monkeypatch.setenv("FAKE_TOOL_LOG", str(log))
    return log
