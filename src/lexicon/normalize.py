"""Surface-form normalization for answer text."""

from __future__ import annotations

import re

# Anything that is neither a letter/digit, whitespace, nor an apostrophe. `\w` admits the
# underscore, so it is listed explicitly.
_DISALLOWED = re.compile(r"[^\w\s']|_")
_WHITESPACE = re.compile(r"\s+")


def normalize_answer(answer: str) -> str:
    """
    Lower-case `answer`, strip punctuation other than apostrophes, and collapse whitespace.

    Letters and digits from any script are kept, so accented forms survive
    ("Été!" -> "été"). Applying the function to its own output returns it unchanged.
    """
    lowered = answer.lower()
    stripped = _DISALLOWED.sub("", lowered)
    return _WHITESPACE.sub(" ", stripped).strip()
