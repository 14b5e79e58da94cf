from __future__ import annotations

import json
from pathlib import Path

import pytest

from lovcite.cli.format_citation import main as format_citation_main
from lovcite.cli.ingest_statute import main as ingest_statute_main
from lovcite.cli.load_seeds import main as load_seeds_main
from lovcite.cli.validate_citation import main as validate_citation_main
from lovcite.cli.watch_folder import main as watch_folder_main

_FIXTURE = Path(__file__).resolve().parents[1] / "fixtures" / "lov_2018_502.xml"


@pytest.fixture(autouse=True)
def _quiet_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("LOVCITE_LOG_LEVEL", "WARNING")
    monkeypatch.delenv("LOVCITE_DB_PATH", raising=False)
    monkeypatch.delenv("LOVCITE_SEED_DIR", raising=False)


def _ingest_and_load(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> Path:
    drop_dir = tmp_path / "drop"
    drop_dir.mkdir()
    (drop_dir / "lov-2018-502.xml").write_bytes(_FIXTURE.read_bytes())
    seed_dir = tmp_path / "seed"
    db_path = tmp_path / "lovcite.db"

    assert ingest_statute_main(["--path", str(drop_dir), "--output-dir", str(seed_dir), "--legal-basis-ref", "1:1"]) == 0
    capsys.readouterr()
    assert load_seeds_main(["--path", str(seed_dir), "--db-path", str(db_path)]) == 0
    capsys.readouterr()
    return db_path


def test_ingest_cli_reports_seed_summary(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    seed_dir = tmp_path / "seed"

    exit_code = ingest_statute_main(["--path", str(_FIXTURE), "--output-dir", str(seed_dir)])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["processed"] == 1
    assert payload["errors"] == []
    result = payload["results"][0]
    assert result["seed_id"] == "2018:502"
    assert result["status"] == "in_force"
    assert result["provision_count"] == 4
    assert result["definition_count"] == 3
    assert result["cross_reference_count"] == 2
    assert result["eu_reference_count"] == 2
    assert result["warning_count"] == 0
    assert Path(result["seed_path"]) == seed_dir / "2018_502.json"
    assert (seed_dir / "2018_502.json").exists()


def test_ingest_cli_collects_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    drop_dir = tmp_path / "drop"
    drop_dir.mkdir()
    (drop_dir / "broken.xml").write_text("<Dokument><Meta>", encoding="utf-8")
    (drop_dir / "notes.txt").write_text("ignored", encoding="utf-8")

    exit_code = ingest_statute_main(["--path", str(drop_dir), "--output-dir", str(tmp_path / "seed")])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["processed"] == 0
    assert len(payload["errors"]) == 1
    assert payload["errors"][0]["source_path"].endswith("broken.xml")
    assert "Malformed XML" in payload["errors"][0]["error"]


def test_load_cli_reports_bad_seed(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    seed_dir = tmp_path / "seed"
    seed_dir.mkdir()
    (seed_dir / "bad.json").write_text(json.dumps({"title": "Uden id"}), encoding="utf-8")

    exit_code = load_seeds_main(["--path", str(seed_dir), "--db-path", str(tmp_path / "lovcite.db")])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 1
    assert payload["loaded"] == []
    assert "'id'" in payload["errors"][0]["error"]


def test_validate_cli_matches_loaded_provision(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_path = _ingest_and_load(tmp_path, capsys)

    exit_code = validate_citation_main(["--citation", "2018:502 § 3, stk. 2", "--db-path", str(db_path)])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["matched"] is True
    assert payload["section"] == "3"
    assert payload["pinpoint"] == "2"
    assert payload["resolved_provision"] == "3"
    assert payload["formatted"] == "2018:502 § 3, stk. 2"
    assert payload["warnings"] == []


def test_validate_cli_reports_missing_document(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_path = _ingest_and_load(tmp_path, capsys)

    exit_code = validate_citation_main(["--citation", "9999:1 § 1", "--db-path", str(db_path)])
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["matched"] is False
    assert payload["warnings"] == ["document not found: 9999:1"]


def test_validate_cli_compact_ref_uses_ambient_document(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_path = _ingest_and_load(tmp_path, capsys)

    exit_code = validate_citation_main(
        ["--citation", "3:5", "--document-id", "2018:502", "--as-of-date", "2010-01-01", "--db-path", str(db_path)]
    )
    payload = json.loads(capsys.readouterr().out)

    assert exit_code == 0
    assert payload["chapter"] == "3"
    assert payload["matched"] is False
    assert payload["warnings"][0] == "document exists, provision not found: 3:5"


def test_validate_cli_parse_and_date_errors(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    db_path = tmp_path / "lovcite.db"

    parse_exit = validate_citation_main(["--citation", "kap3", "--document-id", "2018:502", "--db-path", str(db_path)])
    parse_payload = json.loads(capsys.readouterr().out)
    date_exit = validate_citation_main(["--citation", "2018:502 § 1", "--as-of-date", "i går", "--db-path", str(db_path)])
    date_output = capsys.readouterr()

    assert parse_exit == 2
    assert "Chapter given without a section" in parse_payload["error"]
    assert date_exit == 2
    assert "ISO date" in date_output.err


def test_format_cli_styles(capsys: pytest.CaptureFixture[str]) -> None:
    assert format_citation_main(["--citation", "3:5", "--document-id", "2018:502"]) == 0
    full = json.loads(capsys.readouterr().out)
    assert format_citation_main(["--citation", "2018:502 § 5 a, stk. 2", "--format", "short"]) == 0
    short = json.loads(capsys.readouterr().out)

    assert full["formatted"] == "2018:502 kap. 3 § 5"
    assert short["formatted"] == "§ 5 a"
    assert format_citation_main(["--citation", "§ 5"]) == 2


def test_watch_cli_rejects_missing_directory(tmp_path: Path) -> None:
    assert watch_folder_main(["--watch-dir", str(tmp_path / "missing"), "--no-load"]) == 2
