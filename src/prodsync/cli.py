"""Command-line interface for running production syncs locally."""

from __future__ import annotations

import argparse
import csv
import json
import sys
from pathlib import Path
from typing import List, Sequence

from prodsync.config import Settings, configure_logging, get_team_codes, load_settings
from prodsync.errors import SyncError
from prodsync.models import Team
from prodsync.persistence import SQLiteProductionStore, build_store
from prodsync.sync import ProductionSync


def _parse_args(argv: Sequence[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sync upstream production data into the snapshot table")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path (overrides PRODSYNC_DB_PATH)")
    parser.add_argument("--team-codes", type=Path, default=None, help="JSON team code table to use")
    parser.add_argument("--log-level", default=None, help="Logging level (DEBUG, INFO, ...)")
    sub = parser.add_subparsers(dest="command", required=True)

    sync_cmd = sub.add_parser("sync", help="Run the pipeline on payload files")
    sync_cmd.add_argument(
        "payloads",
        type=Path,
        nargs="+",
        help="Payload files; several files are concatenated as one body",
    )

    teams_cmd = sub.add_parser("load-teams", help="Seed the SQLite team table from an id,name CSV")
    teams_cmd.add_argument("csv_path", type=Path, help="CSV with id and name columns")

    sub.add_parser("show", help="Print the current production snapshot")

    normalize_cmd = sub.add_parser("normalize", help="Show canonical names for external team codes")
    normalize_cmd.add_argument("codes", nargs="+", help="External team codes")
    return parser.parse_args(argv)


def _settings_from_args(args: argparse.Namespace) -> Settings:
    overrides: dict[str, object] = {}
    if args.db is not None:
        overrides["db_path"] = args.db
        overrides["backend"] = "sqlite"
    if args.team_codes is not None:
        overrides["team_codes_path"] = args.team_codes
    if args.log_level is not None:
        overrides["log_level"] = args.log_level
    return load_settings(**overrides)


def _read_teams(path: Path) -> List[Team]:
    with path.open(newline="", encoding="utf-8") as f:
        reader = csv.DictReader(f)
        missing = {"id", "name"} - set(reader.fieldnames or [])
        if missing:
            raise ValueError(f"{path} is missing columns: {', '.join(sorted(missing))}")
        return [
            Team(id=row["id"].strip(), name=row["name"].strip())
            for row in reader
            if (row.get("id") or "").strip()
        ]


def main(argv: Sequence[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = _settings_from_args(args)
    configure_logging(settings.log_level)
    team_codes = get_team_codes(settings.team_codes_path)

    if args.command == "normalize":
        for code in args.codes:
            print(f"{code} -> {team_codes.normalize(code)}")
        return 0

    try:
        store = build_store(settings)
        if args.command == "load-teams":
            if not isinstance(store, SQLiteProductionStore):
                print("load-teams only works with the sqlite backend", file=sys.stderr)
                return 2
            count = store.save_teams(_read_teams(args.csv_path))
            print(f"Loaded {count} teams into {settings.db_path}")
            return 0
        if args.command == "show":
            records = [record.to_row() for record in store.list_production()]
            print(json.dumps(records, indent=2, ensure_ascii=False))
            return 0

        body = b"".join(path.read_bytes() for path in args.payloads)
        result = ProductionSync(store, team_codes, max_documents=settings.max_documents).run(body)
    except SyncError as exc:
        print(json.dumps(exc.to_payload(), indent=2, ensure_ascii=False))
        return 1
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2
    print(json.dumps(result.to_payload(), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
