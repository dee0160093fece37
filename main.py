import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
import typer
from tqdm import tqdm

from src.datahub.config import DEFAULT_DATA_ROOT, DEFAULT_OUTPUT_ROOT
from src.datahub.io import sha256sum
from src.datahub.loader import load_course_tables
from src.embeddings import EmbeddingCache
from src.errors import DataError
from src.lexicon import normalize_answer
from src.pipelines import CourseResult, load_profiles, retriever_factory_for, run_course, write_handoff

app = typer.Typer()


@app.command()
def prepare(
    profiles_path: Path = typer.Option(
        ...,
        "--profiles",
        exists=True,
        file_okay=True,
        dir_okay=False,
        help="JSON file with per-course model paths and projection settings.",
    ),
    courses: List[str] = typer.Option(
        [],
        "--course",
        help="Course(s) to prepare; defaults to every course in the profile file.",
    ),
    data_root: Path = typer.Option(
        DEFAULT_DATA_ROOT,
        "--data-root",
        exists=False,
        file_okay=False,
        dir_okay=True,
        help="Directory holding <course>.predictions and <course>.answers tables.",
    ),
    output_root: Path = typer.Option(
        DEFAULT_OUTPUT_ROOT,
        "--output-root",
        exists=False,
        file_okay=False,
        dir_okay=True,
        writable=True,
        help="Directory where per-course point tables are written.",
    ),
    reuse_vectors: bool = typer.Option(
        False,
        "--reuse-vectors",
        help="Share retrieved vectors between courses that use the same model during this run.",
    ),
) -> None:
    """
    Join, deduplicate, embed and project vocabulary items, then write the renderer handoff.
    """
    try:
        profiles = load_profiles(profiles_path)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    selected = list(courses) or sorted(profiles)
    missing = [course for course in selected if course not in profiles]
    if missing:
        raise typer.BadParameter(f"No profile for course(s): {', '.join(missing)}")

    factory = retriever_factory_for(EmbeddingCache() if reuse_vectors else None)
    succeeded = 0
    failures: List[str] = []

    for course in tqdm(selected, desc="Courses", unit="course"):
        profile = profiles[course]
        try:
            tables = load_course_tables(course, root=data_root)
        except DataError as exc:
            failures.append(exc.bind(course).diagnostic)
            print(f"[cli] {failures[-1]}")
            continue
        except (FileNotFoundError, pd.errors.ParserError) as exc:
            failures.append(f"join failed for {course}: {exc}")
            print(f"[cli] {failures[-1]}")
            continue

        try:
            result = run_course(profile, tables, retriever_factory=factory)
        except DataError as exc:
            failures.append(exc.bind(course).diagnostic)
            print(f"[cli] {failures[-1]}")
            continue
        failures.extend(error.diagnostic for error in result.failures)
        if not any(language.ok and language.points for language in result.languages.values()):
            continue

        succeeded += 1
        metadata = _handoff_metadata(result, profile.describe(), [tables.predictions_path, tables.answers_path])
        write_handoff(course, result.points, output_root, metadata=metadata)

    if failures:
        print(f"[cli] {len(failures)} failure(s):")
        for message in failures:
            print(f"[cli]   {message}")
    if succeeded == 0:
        print("[cli] No course produced any points.")
        raise typer.Exit(code=1)
    print(f"[cli] Prepared {succeeded}/{len(selected)} course(s).")


@app.command()
def profile(
    course: str = typer.Argument(..., help="Course name as it appears in the profile file."),
    profiles_path: Path = typer.Option(..., "--profiles", exists=True, dir_okay=False),
) -> None:
    """Print the resolved settings for one course."""
    try:
        profiles = load_profiles(profiles_path)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    if course not in profiles:
        raise typer.BadParameter(f"No profile for course '{course}'. Available: {', '.join(sorted(profiles))}")
    typer.echo(json.dumps(profiles[course].describe(), indent=2))


@app.command()
def normalize(answers: List[str] = typer.Argument(..., help="Answer strings to normalize.")) -> None:
    """Show the surface form each answer is grouped under."""
    for answer in answers:
        typer.echo(f"{answer!r} -> {normalize_answer(answer)!r}")


def _handoff_metadata(result: CourseResult, profile: Dict[str, Any], inputs: List[Path]) -> Dict[str, Any]:
    languages: Dict[str, Optional[Dict[str, Any]]] = {}
    for language, outcome in result.languages.items():
        if outcome.error is not None:
            languages[language] = {"error": outcome.error.diagnostic}
        elif outcome.projection is None:
            languages[language] = None
        else:
            languages[language] = {
                "points": len(outcome.points),
                "effective_neighbors": outcome.projection.effective_neighbors,
                "clamped": outcome.projection.clamped,
                "trustworthiness": outcome.projection.trustworthiness,
            }
    return {
        "profile": profile,
        "inputs": {path.name: sha256sum(path) for path in inputs},
        "dropped": result.join.dropped,
        "languages": languages,
    }


if __name__ == "__main__":
    app()
