import json
from pathlib import Path

import pytest

from prodsync.config import TeamCodeMapping, get_team_codes


def test_suffix_and_plain_codes_share_a_team(team_codes: TeamCodeMapping):
    assert team_codes.normalize("803006A") == team_codes.normalize("803006") == "GOOO101M"


def test_suffix_strip_is_case_insensitive(team_codes: TeamCodeMapping):
    assert team_codes.normalize("703014a") == "GOOV101M"


def test_unknown_codes_pass_through(team_codes: TeamCodeMapping):
    assert team_codes.normalize("999999") == "999999"
    assert team_codes.normalize("999999A") == "999999A"
    assert team_codes.normalize("GOOO101M") == "GOOO101M"


def test_only_one_suffix_letter_is_stripped(team_codes: TeamCodeMapping):
    assert team_codes.normalize("803006AB") == "803006AB"


def test_numeric_and_padded_codes(team_codes: TeamCodeMapping):
    assert team_codes.normalize(803008) == "GOOO103M"
    assert team_codes.normalize(" 803007 ") == "GOOO102M"
    assert team_codes.normalize(None) == ""


def test_bundled_table_contents(team_codes: TeamCodeMapping):
    assert len(team_codes) == 32
    assert team_codes.normalize("703006") == "GOOP001M"
    assert team_codes.normalize("803013A") == "GOOO108M"


def test_exact_entry_beats_suffix_fallback():
    mapping = TeamCodeMapping.from_mapping({"100": "BASE", "100A": "SPECIAL"})
    assert mapping.normalize("100A") == "SPECIAL"
    assert mapping.normalize("100B") == "BASE"


def test_load_table_from_file(tmp_path: Path):
    path = tmp_path / "codes.json"
    path.write_text(json.dumps({"123456": "GOOX001M"}), encoding="utf-8")

    mapping = TeamCodeMapping.load(path)
    assert mapping.normalize("123456A") == "GOOX001M"
    assert mapping.normalize("803006") == "803006"


def test_load_rejects_non_object(tmp_path: Path):
    path = tmp_path / "codes.json"
    path.write_text(json.dumps(["803006", "GOOO101M"]), encoding="utf-8")
    with pytest.raises(ValueError):
        TeamCodeMapping.load(path)


def test_load_rejects_blank_entries():
    with pytest.raises(ValueError):
        TeamCodeMapping.from_mapping({"803006": " "})


def test_default_table_is_cached():
    assert get_team_codes() is get_team_codes()
    assert get_team_codes().normalize("803010A") == "GOOO105M"
