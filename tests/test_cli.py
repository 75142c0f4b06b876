import json
from pathlib import Path

from prodsync.cli import main

from .payloads import current_row, legacy_row, table_payload


def _write_teams(tmp_path: Path) -> Path:
    path = tmp_path / "teams.csv"
    path.write_text("id,name\nt-o101,GOOO101M\nt-o102,GOOO102M\n", encoding="utf-8")
    return path


def test_cli_sync_round(tmp_path: Path, capsys):
    db = tmp_path / "cli.sqlite"
    assert main(["--db", str(db), "load-teams", str(_write_teams(tmp_path))]) == 0
    assert "Loaded 2 teams" in capsys.readouterr().out

    first = tmp_path / "part1.json"
    first.write_text(table_payload([legacy_row("803006", "2025-12-16T00:00:00", 2)]), encoding="utf-8")
    second = tmp_path / "part2.json"
    second.write_text(
        table_payload([current_row("803007A", "2025-12-16T00:00:00", 3), current_row("999999", "2025-12-16", 1)]),
        encoding="utf-8",
    )

    assert main(["--db", str(db), "sync", str(first), str(second)]) == 0
    result = json.loads(capsys.readouterr().out)
    assert result["success"] is True
    assert result["inserted"] == 2
    assert result["ignored"] == 1
    assert result["total_received"] == 3

    assert main(["--db", str(db), "show"]) == 0
    snapshot = json.loads(capsys.readouterr().out)
    assert snapshot == [
        {"team_id": "t-o101", "date": "2025-12-16", "production_value": 2.0},
        {"team_id": "t-o102", "date": "2025-12-16", "production_value": 3.0},
    ]


def test_cli_sync_reports_payload_errors(tmp_path: Path, capsys):
    payload = tmp_path / "empty.json"
    payload.write_text("", encoding="utf-8")

    assert main(["--db", str(tmp_path / "cli.sqlite"), "sync", str(payload)]) == 1
    error = json.loads(capsys.readouterr().out)
    assert error["success"] is False
    assert error["error"] == "Request body is empty"


def test_cli_normalize(capsys):
    assert main(["normalize", "803006A", "999999"]) == 0
    out = capsys.readouterr().out
    assert "803006A -> GOOO101M" in out
    assert "999999 -> 999999" in out
