"""Per-course tuning profiles loaded from JSON.

A profile file looks like::

    {
      "defaults": {
        "projection": {"neighborhood_size": 50, "minimum_distance": 0.5},
        "tool": {"command": ["fasttext", "print-sentence-vectors"], "timeout": 300},
        "tie_policy": "keep_all"
      },
      "courses": {
        "French": {
          "models": {"native": "models/cc.en.300.bin", "target": "models/cc.fr.300.bin"},
          "projection": {"spread": 1.5},
          "overrides": {"target": {"minimum_distance": 0.8}}
        }
      }
    }

Course entries inherit from ``defaults`` key by key. Model paths are resolved
relative to the profile file.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, cast

from src.datahub.records import LANGUAGES, Language
from src.errors import EmbeddingError
from src.embeddings.tool import EmbeddingToolConfig
from src.lexicon.dedup import TIE_POLICIES, TiePolicy
from src.projection.config import ProjectionConfig

_COURSE_KEYS = {"models", "projection", "overrides", "tool", "tie_policy"}
_DEFAULT_KEYS = {"projection", "tool", "tie_policy"}


@dataclass(frozen=True)
class CourseProfile:
    """Everything needed to run one course end to end."""

    course: str
    models: Dict[Language, Path]
    projection: ProjectionConfig = field(default_factory=ProjectionConfig)
    overrides: Dict[Language, ProjectionConfig] = field(default_factory=dict)
    tie_policy: TiePolicy = "keep_all"
    tool: EmbeddingToolConfig = field(default_factory=EmbeddingToolConfig)

    def projection_for(self, language: Language) -> ProjectionConfig:
        return self.overrides.get(language, self.projection)

    def model_for(self, language: Language) -> Path:
        try:
            return self.models[language]
        except KeyError as exc:
            raise EmbeddingError(
                f"No model artifact configured for language '{language}'",
                course=self.course,
                language=language,
            ) from exc

    def describe(self) -> Dict[str, Any]:
        """JSON-ready view of the resolved profile."""
        return {
            "course": self.course,
            "models": {language: str(path) for language, path in self.models.items()},
            "projection": {
                language: self.projection_for(language).to_dict() for language in LANGUAGES
            },
            "tie_policy": self.tie_policy,
            "tool": {
                "command": list(self.tool.command),
                "dim": self.tool.dim,
                "timeout": self.tool.timeout,
                "retries": self.tool.retries,
            },
        }


def load_profiles(path: Path) -> Dict[str, CourseProfile]:
    """Read a profile file and return profiles keyed by course name."""
    payload = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(payload, Mapping) or "courses" not in payload:
        raise ValueError(f"Profile file {path} must contain a 'courses' object.")
    unknown = set(payload) - {"defaults", "courses"}
    if unknown:
        raise ValueError(f"Unknown top-level profile keys: {', '.join(sorted(unknown))}")

    defaults = cast(Mapping[str, Any], payload.get("defaults") or {})
    _reject_unknown(defaults, _DEFAULT_KEYS, "defaults")
    base_dir = Path(path).resolve().parent

    profiles: Dict[str, CourseProfile] = {}
    for course, entry in cast(Mapping[str, Any], payload["courses"]).items():
        _reject_unknown(entry, _COURSE_KEYS, f"course '{course}'")
        profiles[course] = build_profile(course, entry, defaults=defaults, base_dir=base_dir)
    return profiles


def build_profile(
    course: str,
    entry: Mapping[str, Any],
    defaults: Optional[Mapping[str, Any]] = None,
    base_dir: Optional[Path] = None,
) -> CourseProfile:
    """Merge a course entry over the shared defaults."""
    defaults = defaults or {}
    models = _resolve_models(entry.get("models") or {}, base_dir)

    projection = ProjectionConfig.from_mapping(defaults.get("projection") or {})
    projection = ProjectionConfig.from_mapping(entry.get("projection") or {}, base=projection)

    overrides: Dict[Language, ProjectionConfig] = {}
    for language, changes in (entry.get("overrides") or {}).items():
        overrides[_as_language(language)] = ProjectionConfig.from_mapping(changes, base=projection)

    tool_payload = {**(defaults.get("tool") or {}), **(entry.get("tool") or {})}
    tie_policy = entry.get("tie_policy", defaults.get("tie_policy", "keep_all"))
    if tie_policy not in TIE_POLICIES:
        raise ValueError(f"Unknown tie policy '{tie_policy}' for course '{course}'.")

    return CourseProfile(
        course=course,
        models=models,
        projection=projection,
        overrides=overrides,
        tie_policy=cast(TiePolicy, tie_policy),
        tool=EmbeddingToolConfig.from_mapping(tool_payload),
    )


def _resolve_models(raw: Mapping[str, Any], base_dir: Optional[Path]) -> Dict[Language, Path]:
    models: Dict[Language, Path] = {}
    for language, value in raw.items():
        model_path = Path(str(value)).expanduser()
        if not model_path.is_absolute() and base_dir is not None:
            model_path = base_dir / model_path
        models[_as_language(language)] = model_path
    return models


def _as_language(value: str) -> Language:
    if value not in LANGUAGES:
        raise ValueError(f"Unknown language '{value}'. Expected one of {list(LANGUAGES)}.")
    return cast(Language, value)


def _reject_unknown(entry: Mapping[str, Any], allowed: set[str], where: str) -> None:
    unknown = set(entry) - allowed
    if unknown:
        raise ValueError(f"Unknown keys in {where}: {', '.join(sorted(unknown))}")


__all__ = ["CourseProfile", "build_profile", "load_profiles"]
