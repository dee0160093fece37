"""End-to-end checks for the Typer entry point."""

from __future__ import annotations

import json
from pathlib import Path
import sys
from typing import Tuple

import pandas as pd
from typer.testing import CliRunner

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

import main

runner = CliRunner()


def _write_inputs(data_root: Path) -> None:
    data_root.mkdir(parents=True, exist_ok=True)
    (data_root / "French.predictions.csv").write_text(
        "item_id,n_obs,rof\n"
        "f1_1_2,10,0.3\n"
        "f2_1_2,5,0.3\n"
        "f3_1_2,4,0.7\n"
        "f4_1_2,8,0.1\n"
        "f5_1_1,6,0.2\n"
        "f6_1_2,2,0.5\n",
        encoding="utf-8",
    )
    (data_root / "French.answers.csv").write_text(
        "item_id,answer\n"
        "f1_1_2,Le Chat\n"
        "f2_1_2,le chat\n"
        "f3_1_2,le chien\n"
        "f4_1_2,la maison\n"
        "f5_1_1,the cat\n"
        "f6_1_2,l'oiseau\n",
        encoding="utf-8",
    )


def _write_profiles(path: Path, vector_tool: Tuple[str, ...], target_model: str) -> None:
    payload = {
        "defaults": {"tool": {"command": list(vector_tool), "timeout": 60}},
        "courses": {
            "French": {
                "models": {"native": "models/cc.fr.300.bin", "target": target_model},
                "projection": {"neighborhood_size": 5},
            }
        },
    }
    path.write_text(json.dumps(payload), encoding="utf-8")


def test_normalize_command() -> None:
    result = runner.invoke(main.app, ["normalize", "Le Chat!", "l'été"])
    assert result.exit_code == 0
    assert "'Le Chat!' -> 'le chat'" in result.output
    assert "\"l'été\" -> \"l'été\"" in result.output


def test_prepare_writes_handoff(vector_tool: Tuple[str, ...], model_file: Path, tmp_path: Path) -> None:
    _write_inputs(tmp_path / "data")
    profiles = tmp_path / "profiles.json"
    _write_profiles(profiles, vector_tool, "models/cc.fr.300.bin")

    result = runner.invoke(
        main.app,
        [
            "prepare",
            "--profiles",
            str(profiles),
            "--data-root",
            str(tmp_path / "data"),
            "--output-root",
            str(tmp_path / "maps"),
        ],
    )

    assert result.exit_code == 0, result.output
    frame = pd.read_csv(tmp_path / "maps" / "French.points.csv", keep_default_na=False)
    assert frame["label"].tolist() == ["the cat", "le chien", "l'oiseau", "le chat", "la maison"]
    assert frame["language"].tolist() == ["native", "target", "target", "target", "target"]
    sidecar = json.loads((tmp_path / "maps" / "French.points.csv.meta.json").read_text(encoding="utf-8"))
    assert sidecar["languages"]["target"]["points"] == 4
    assert sidecar["languages"]["native"]["points"] == 1
    assert set(sidecar["inputs"]) == {"French.predictions.csv", "French.answers.csv"}


def test_prepare_fails_when_nothing_is_produced(
    vector_tool: Tuple[str, ...], model_file: Path, tmp_path: Path
) -> None:
    _write_inputs(tmp_path / "data")
    profiles = tmp_path / "profiles.json"
    _write_profiles(profiles, vector_tool, "models/cc.fr.300.bin")

    result = runner.invoke(
        main.app,
        ["prepare", "--profiles", str(profiles), "--data-root", str(tmp_path / "missing")],
    )

    assert result.exit_code == 1
    assert "No course produced any points" in result.output


def test_profile_command(vector_tool: Tuple[str, ...], tmp_path: Path) -> None:
    profiles = tmp_path / "profiles.json"
    _write_profiles(profiles, vector_tool, "models/broken.bin")

    result = runner.invoke(main.app, ["profile", "French", "--profiles", str(profiles)])

    assert result.exit_code == 0
    described = json.loads(result.output)
    assert described["projection"]["native"]["neighborhood_size"] == 5
    assert described["models"]["target"].endswith("broken.bin")


def test_prepare_isolates_courses_with_bad_tables(
    vector_tool: Tuple[str, ...], model_file: Path, tmp_path: Path
) -> None:
    data_root = tmp_path / "data"
    _write_inputs(data_root)
    # German carries one non-numeric rof cell; Broken cannot be parsed at all.
    (data_root / "German.predictions.csv").write_text(
        "item_id,n_obs,rof\ng1_1_2,3,oops\ng2_1_2,4,0.4\n", encoding="utf-8"
    )
    (data_root / "German.answers.csv").write_text(
        "item_id,answer\ng1_1_2,der Hund\ng2_1_2,die Katze\n", encoding="utf-8"
    )
    (data_root / "Broken.predictions.csv").write_text(
        "item_id,n_obs,rof\nb1_1_2,1,0.2\nb2_1_2,1,0.3,9,9\n", encoding="utf-8"
    )
    (data_root / "Broken.answers.csv").write_text("item_id,answer\nb1_1_2,x\n", encoding="utf-8")

    course_entry = {"models": {"native": "models/cc.fr.300.bin", "target": "models/cc.fr.300.bin"}}
    profiles = tmp_path / "profiles.json"
    profiles.write_text(
        json.dumps(
            {
                "defaults": {
                    "tool": {"command": list(vector_tool), "timeout": 60},
                    "projection": {"neighborhood_size": 5},
                },
                "courses": {"Broken": course_entry, "French": course_entry, "German": course_entry},
            }
        ),
        encoding="utf-8",
    )

    result = runner.invoke(
        main.app,
        [
            "prepare",
            "--profiles",
            str(profiles),
            "--data-root",
            str(data_root),
            "--output-root",
            str(tmp_path / "maps"),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "join failed for Broken" in result.output
    assert not (tmp_path / "maps" / "Broken.points.csv").exists()
    assert (tmp_path / "maps" / "French.points.csv").exists()
    german = pd.read_csv(tmp_path / "maps" / "German.points.csv", keep_default_na=False)
    assert german["label"].tolist() == ["die katze"]
    sidecar = json.loads((tmp_path / "maps" / "German.points.csv.meta.json").read_text(encoding="utf-8"))
    assert sidecar["dropped"] == {"malformed row": 1}


def test_profile_command_reports_bad_profile_file(tmp_path: Path) -> None:
    profiles = tmp_path / "profiles.json"
    profiles.write_text(json.dumps({"courses": {"French": {"modles": {}}}}), encoding="utf-8")

    result = runner.invoke(main.app, ["profile", "French", "--profiles", str(profiles)])

    assert result.exit_code == 2
    assert not isinstance(result.exception, ValueError)
    assert "Traceback" not in result.output
