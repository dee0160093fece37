"""Tests for identifier parsing, upstream loading, and the difficulty/answer join."""

from __future__ import annotations

from pathlib import Path
import sys

import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.datahub.helpers import parse_item_id, require_columns, to_int, to_optional_float
from src.datahub.io import locate_table, read_table
from src.datahub.join import join_difficulty
from src.datahub.loader import load_course_tables
from src.errors import DataError


# ---------------------------------------------------------------------------
# Helper fixtures and utilities


def _predictions(rows: list[tuple[str, int, float | None]]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=["item_id", "n_obs", "rof"])


def _answers(rows: list[tuple[str, str | None]]) -> pd.DataFrame:
    return pd.DataFrame(rows, columns=["item_id", "answer"])


def _write_course_fixture(root: Path, course: str = "French") -> Path:
    root.mkdir(parents=True, exist_ok=True)
    (root / f"{course}.predictions.csv").write_text(
        "item_id,n_obs,rof\n"
        "f1_1_2,10,0.3\n"
        "f2_1_2,5,0.3\n"
        "f3_4_1,7,\n"
        "f4_9_1,3,0.21\n",
        encoding="utf-8",
    )
    (root / f"{course}.answers.csv").write_text(
        "item_id,answer\n"
        "f1_1_2,Le Chat\n"
        "f2_1_2,le chat\n"
        "f3_4_1,the cat\n"
        "f4_9_1,nan\n",
        encoding="utf-8",
    )
    return root


# ---------------------------------------------------------------------------
# Identifier parsing


def test_parse_item_id_reads_third_segment() -> None:
    target = parse_item_id("f1_1_2")
    native = parse_item_id("f7_3_1")

    assert target.language == "target"
    assert target.source_set == "f1"
    assert target.sequence == "1"
    assert native.language == "native"


def test_parse_item_id_only_exact_one_is_native() -> None:
    assert parse_item_id("a_b_01").language == "target"
    assert parse_item_id("a_b_1_extra").language == "native"
    assert parse_item_id("a_b_").language == "target"


def test_parse_item_id_rejects_short_ids() -> None:
    with pytest.raises(DataError):
        parse_item_id("f1_1")
    with pytest.raises(DataError):
        parse_item_id(None)


def test_to_int_and_optional_float() -> None:
    assert to_int(3) == 3
    assert to_int("7") == 7
    assert to_int(4.0) == 4
    with pytest.raises(DataError):
        to_int(None)
    with pytest.raises(DataError):
        to_int(-1)
    with pytest.raises(DataError):
        to_int(2.5)

    assert to_optional_float("0.25") == pytest.approx(0.25)
    assert to_optional_float(float("nan")) is None
    assert to_optional_float(None) is None


def test_require_columns_names_missing() -> None:
    frame = pd.DataFrame({"item_id": ["a_b_1"]})
    with pytest.raises(DataError, match="n_obs, rof"):
        require_columns(frame, ("item_id", "n_obs", "rof"), source="preds")


# ---------------------------------------------------------------------------
# Join tests


def test_join_copies_values_verbatim() -> None:
    predictions = _predictions([("f1_1_2", 10, 0.3), ("f2_1_1", 5, 0.125)])
    answers = _answers([("f1_1_2", "Le Chat"), ("f2_1_1", "the cat")])

    result = join_difficulty(predictions, answers, "French")

    by_id = {record.item_id: record for record in result.records}
    assert set(by_id) == {"f1_1_2", "f2_1_1"}
    assert by_id["f1_1_2"].n_obs == 10
    assert by_id["f1_1_2"].rof == pytest.approx(0.3)
    assert by_id["f1_1_2"].answer == "Le Chat"
    assert by_id["f1_1_2"].language == "target"
    assert by_id["f2_1_1"].language == "native"
    assert all(record.course == "French" for record in result.records)


def test_join_drops_missing_rof_and_unmatched() -> None:
    predictions = _predictions([("f1_1_2", 10, 0.3), ("f2_1_2", 4, None), ("f3_1_2", 1, 0.9)])
    answers = _answers([("f1_1_2", "chien"), ("f2_1_2", "chat"), ("f9_1_2", "orphan")])

    result = join_difficulty(predictions, answers, "French")

    assert [record.item_id for record in result.records] == ["f1_1_2"]
    assert result.dropped["missing rof"] == 1
    assert result.dropped["unmatched id"] == 2


def test_join_filters_malformed_identifiers() -> None:
    predictions = _predictions([("bad", 1, 0.2), ("f1_1_1", 2, 0.4)])
    answers = _answers([("bad", "x"), ("f1_1_1", "dog")])

    result = join_difficulty(predictions, answers, "French")

    assert [record.item_id for record in result.records] == ["f1_1_1"]
    assert result.dropped["malformed row"] == 1


def test_join_filters_non_numeric_rof() -> None:
    predictions = pd.DataFrame(
        {"item_id": ["f1_1_2", "f2_1_2"], "n_obs": [10, 4], "rof": ["0.3", "oops"]}
    )
    answers = _answers([("f1_1_2", "chat"), ("f2_1_2", "chien")])

    result = join_difficulty(predictions, answers, "French")

    assert [record.item_id for record in result.records] == ["f1_1_2"]
    assert result.dropped == {"malformed row": 1}


@pytest.mark.parametrize("n_obs", [2.5, -3, "many"])
def test_join_filters_malformed_observation_counts(n_obs: object, capsys: pytest.CaptureFixture[str]) -> None:
    predictions = pd.DataFrame(
        {"item_id": ["f1_1_2", "f2_1_2"], "n_obs": [10, n_obs], "rof": [0.3, 0.4]}
    )
    answers = _answers([("f1_1_2", "chat"), ("f2_1_2", "chien")])

    result = join_difficulty(predictions, answers, "French")

    assert [record.item_id for record in result.records] == ["f1_1_2"]
    assert result.dropped == {"malformed row": 1}
    assert "Dropping 'f2_1_2'" in capsys.readouterr().out


def test_join_keeps_first_of_repeated_ids() -> None:
    predictions = _predictions([("f1_1_2", 10, 0.3), ("f1_1_2", 99, 0.9)])
    answers = _answers([("f1_1_2", "chat")])

    result = join_difficulty(predictions, answers, "French")

    assert len(result.records) == 1
    assert result.records[0].n_obs == 10
    assert result.dropped["duplicate prediction id"] == 1


def test_join_empty_result_is_a_warning(capsys: pytest.CaptureFixture[str]) -> None:
    predictions = _predictions([("f1_1_2", 10, None)])
    answers = _answers([("f1_1_2", "chat")])

    result = join_difficulty(predictions, answers, "French")

    assert result.empty
    assert "Warning" in capsys.readouterr().out


def test_join_rejects_missing_columns() -> None:
    with pytest.raises(DataError):
        join_difficulty(pd.DataFrame({"item_id": ["a_b_1"]}), _answers([]), "French")


# ---------------------------------------------------------------------------
# Loader tests


def test_load_course_tables_from_csv(tmp_path: Path) -> None:
    root = _write_course_fixture(tmp_path / "data")

    tables = load_course_tables("French", root=root)
    result = join_difficulty(tables.predictions, tables.answers, "French")

    assert tables.predictions_path.name == "French.predictions.csv"
    answers = {record.item_id: record.answer for record in result.records}
    # "nan" is vocabulary, not a missing value.
    assert answers["f4_9_1"] == "nan"
    assert "f3_4_1" not in answers
    assert len(result.records) == 3


def test_locate_table_reports_candidates(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="French.predictions"):
        locate_table(tmp_path, "French.predictions")


def test_read_table_rejects_unknown_suffix(tmp_path: Path) -> None:
    path = tmp_path / "table.xlsx"
    path.write_text("", encoding="utf-8")
    with pytest.raises(ValueError):
        read_table(path)


def test_read_table_tsv(tmp_path: Path) -> None:
    path = tmp_path / "German.answers.tsv"
    path.write_text("item_id\tanswer\ng1_1_2\tder Hund\n", encoding="utf-8")

    frame = read_table(path, dtype={"item_id": str})

    assert frame.loc[0, "answer"] == "der Hund"
