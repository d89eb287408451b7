"""Tests for the agentprep CLI."""

from __future__ import annotations

import re
from pathlib import Path

from typer.testing import CliRunner

from agentprep.cli import app

runner = CliRunner()
ENV = {"AGENTPREP_API_URL": "", "AGENTPREP_OWNER": "", "AGENTPREP_DB": ""}
ID_PATTERN = re.compile(r"uc-[0-9a-f]{12}")


def _invoke(db: Path, *args: str):
    return runner.invoke(app, ["--db", str(db), "--owner", "tester", *args], env=ENV)


def _created_id(output: str) -> str:
    match = ID_PATTERN.search(output)
    assert match, output
    return match.group(0)


def test_init_creates_database(tmp_path: Path) -> None:
    db = tmp_path / "nested" / "agentprep.db"
    result = _invoke(db, "init")
    assert result.exit_code == 0, result.output
    assert db.exists()
    assert "tester" in result.output


def test_create_and_list(tmp_path: Path) -> None:
    db = tmp_path / "agentprep.db"
    result = _invoke(db, "create", "Invoices", "--priority", "high", "--tag", "finance")
    assert result.exit_code == 0, result.output
    use_case_id = _created_id(result.output)

    result = _invoke(db, "list")
    assert result.exit_code == 0, result.output
    assert "Invoices" in result.output

    result = _invoke(db, "list", "--priority", "low")
    assert result.exit_code == 0, result.output
    assert "No use cases found" in result.output

    result = _invoke(db, "show", use_case_id)
    assert result.exit_code == 0, result.output
    assert "Invoices" in result.output
    assert "Not enough metrics" in result.output
    assert "Still missing" in result.output


def test_add_remove_and_metrics(tmp_path: Path) -> None:
    db = tmp_path / "agentprep.db"
    use_case_id = _created_id(_invoke(db, "create", "Invoices").output)

    result = _invoke(db, "add", use_case_id, "roles", '{"name": "AP Clerk"}')
    assert result.exit_code == 0, result.output
    role_id = re.search(r"role-[0-9a-f]{12}", result.output)
    assert role_id

    result = _invoke(db, "remove", use_case_id, "roles", role_id.group(0))
    assert result.exit_code == 0, result.output

    result = _invoke(
        db,
        "metrics",
        use_case_id,
        "--baseline-volume",
        "500",
        "--handling-time",
        "15",
        "--fte-cost",
        "45",
    )
    assert result.exit_code == 0, result.output
    assert "Annual savings" in result.output
    assert "Readiness" in result.output


def test_add_rejects_bad_json(tmp_path: Path) -> None:
    db = tmp_path / "agentprep.db"
    use_case_id = _created_id(_invoke(db, "create", "Invoices").output)
    result = _invoke(db, "add", use_case_id, "roles", "{not json")
    assert result.exit_code == 1
    assert "Invalid JSON" in result.output


def test_missing_use_case_exits_with_error(tmp_path: Path) -> None:
    result = _invoke(tmp_path / "agentprep.db", "show", "uc-000000000000")
    assert result.exit_code == 1
    assert "not found" in result.output


def test_demo_show_and_rank(tmp_path: Path) -> None:
    db = tmp_path / "agentprep.db"
    result = _invoke(db, "demo")
    assert result.exit_code == 0, result.output
    assert "1,228,700.00" in result.output
    use_case_id = _created_id(result.output)

    again = _invoke(db, "demo")
    assert _created_id(again.output) == use_case_id

    result = _invoke(db, "show", use_case_id)
    assert result.exit_code == 0, result.output
    assert "Invoice Processing Automation" in result.output
    assert "Receive Invoice" in result.output
    assert "Still missing" not in result.output

    result = _invoke(db, "rank", "--min-score", "4")
    assert result.exit_code == 0, result.output
    assert use_case_id in result.output


def test_export_import_and_delete(tmp_path: Path) -> None:
    db = tmp_path / "agentprep.db"
    use_case_id = _created_id(_invoke(db, "demo").output)
    pack_path = tmp_path / "pack.yaml"

    result = _invoke(db, "export", use_case_id, "--output", str(pack_path), "--format", "yaml")
    assert result.exit_code == 0, result.output
    assert pack_path.exists()

    result = _invoke(db, "import", str(pack_path))
    assert result.exit_code == 0, result.output
    imported_id = _created_id(result.output)
    assert imported_id != use_case_id

    result = _invoke(db, "delete", use_case_id, "--yes")
    assert result.exit_code == 0, result.output
    assert _invoke(db, "show", use_case_id).exit_code == 1
    assert _invoke(db, "show", imported_id).exit_code == 0


def test_export_rejects_unknown_format(tmp_path: Path) -> None:
    result = _invoke(
        tmp_path / "agentprep.db",
        "export",
        "uc-000000000000",
        "--output",
        str(tmp_path / "x.csv"),
        "--format",
        "csv",
    )
    assert result.exit_code == 1


def test_import_of_broken_yaml_reports_error(tmp_path: Path) -> None:
    pack_path = tmp_path / "broken.yaml"
    pack_path.write_text("use_case: [unclosed\n")
    result = _invoke(tmp_path / "agentprep.db", "import", str(pack_path))
    assert result.exit_code == 1
    assert "not valid YAML" in " ".join(result.output.split())


def test_export_to_missing_directory_reports_error(tmp_path: Path) -> None:
    db = tmp_path / "agentprep.db"
    use_case_id = _created_id(_invoke(db, "create", "Invoices").output)
    target = tmp_path / "missing" / "pack.json"
    result = _invoke(db, "export", use_case_id, "--output", str(target))
    assert result.exit_code == 1
    assert "Cannot write" in " ".join(result.output.split())
