from datetime import date

import pytest

from prodsync.config import TeamCodeMapping
from prodsync.ingest import RawRow, aggregate_rows, parse_row_date, parse_row_value

from .payloads import TEAMS, current_row, legacy_row

INDEX = {team.name: team.id for team in TEAMS}


def _rows(*payload_rows):
    return [RawRow.from_mapping(row) for row in payload_rows]


def test_parse_row_date_keeps_calendar_prefix():
    assert parse_row_date("2025-12-16T00:00:00") == date(2025, 12, 16)
    assert parse_row_date("2025-12-16") == date(2025, 12, 16)
    assert parse_row_date("2025-12-16 08:30:00") == date(2025, 12, 16)


@pytest.mark.parametrize("value", [None, "", "16/12/2025", "2025-13-01T00:00:00", 20251216])
def test_parse_row_date_rejects_unusable_values(value):
    assert parse_row_date(value) is None


def test_parse_row_value_variants():
    assert parse_row_value(3) == 3.0
    assert parse_row_value(2.5) == 2.5
    assert parse_row_value("12,5") == pytest.approx(12.5)
    assert parse_row_value(" 7.25 ") == pytest.approx(7.25)
    assert parse_row_value(True) is None
    assert parse_row_value("abc") is None
    assert parse_row_value(None) is None
    assert parse_row_value(float("nan")) is None


def test_duplicates_are_summed(team_codes: TeamCodeMapping):
    rows = _rows(
        legacy_row("803006", "2025-12-16T00:00:00", 10),
        current_row("803006A", "2025-12-16T00:00:00", 5.5),
        legacy_row("803007", "2025-12-16T00:00:00", 1),
    )
    result = aggregate_rows(rows, INDEX, team_codes)

    values = {(rec.team_id, rec.date): rec.production_value for rec in result.records}
    assert values == {
        ("t-o101", date(2025, 12, 16)): pytest.approx(15.5),
        ("t-o102", date(2025, 12, 16)): pytest.approx(1.0),
    }
    assert result.received == 3
    assert result.ignored == 0
    assert result.aggregated == 1


def test_aggregation_is_order_independent(team_codes: TeamCodeMapping):
    payload = [
        legacy_row("803006", "2025-12-16", 3),
        legacy_row("803007", "2025-12-17", 4),
        current_row("803006A", "2025-12-16", 8),
        current_row("803007", "2025-12-17", 1),
    ]
    forward = aggregate_rows(_rows(*payload), INDEX, team_codes)
    backward = aggregate_rows(_rows(*reversed(payload)), INDEX, team_codes)
    assert forward.records == backward.records


def test_unknown_teams_and_bad_rows_are_ignored(team_codes: TeamCodeMapping):
    rows = _rows(
        legacy_row("999999", "2025-12-16", 1),
        legacy_row(None, "2025-12-16", 1),
        legacy_row("803006", "not a date", 1),
        legacy_row("803006", "2025-12-16", "n/a"),
        {"unrelated": 1},
        legacy_row("803008", "2025-12-16", 2),
    )
    result = aggregate_rows(rows, INDEX, team_codes)

    assert [(rec.team_id, rec.production_value) for rec in result.records] == [("t-o103", 2.0)]
    assert result.received == 6
    assert result.ignored == 5


def test_unknown_team_tolerance(team_codes: TeamCodeMapping):
    known = ["803006", "803007", "803008", "703014"]
    payload = [legacy_row(known[i % 4], f"2025-12-{10 + i % 3:02d}", 1) for i in range(7)]
    payload += [legacy_row(code, "2025-12-10", 1) for code in ("999999", "111111A", "703099")]

    result = aggregate_rows(_rows(*payload), INDEX, team_codes)
    assert len(result.records) <= 7
    assert result.ignored >= 3
    assert result.received == 10


def test_records_sorted_by_key(team_codes: TeamCodeMapping):
    rows = _rows(
        legacy_row("803007", "2025-12-17", 1),
        legacy_row("803006", "2025-12-18", 1),
        legacy_row("803006", "2025-12-16", 1),
    )
    result = aggregate_rows(rows, INDEX, team_codes)
    keys = [rec.key for rec in result.records]
    assert keys == sorted(keys)
