"""Lightweight REST client for the prodsync API."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

import httpx


def main() -> None:
    parser = argparse.ArgumentParser(description="Post production payloads to a prodsync service")
    parser.add_argument("base_url", help="Base URL of the API, e.g. http://localhost:8000")
    parser.add_argument("payloads", type=Path, nargs="*", help="Payload JSON files")
    parser.add_argument(
        "--separate",
        action="store_true",
        help="Send one request per file instead of concatenating them into one body",
    )
    parser.add_argument("--health", action="store_true", help="Check service health and exit")
    parser.add_argument("--timeout", type=float, default=60.0, help="Request timeout in seconds")
    args = parser.parse_args()

    with httpx.Client(base_url=args.base_url, timeout=args.timeout) as client:
        if args.health:
            resp = client.get("/health")
            resp.raise_for_status()
            print(json.dumps(resp.json(), indent=2))
            return

        if not args.payloads:
            raise SystemExit("At least one payload file is required")

        bodies = (
            [path.read_bytes() for path in args.payloads]
            if args.separate
            else [b"".join(path.read_bytes() for path in args.payloads)]
        )
        for body in bodies:
            resp = client.post(
                "/sync-production",
                content=body,
                headers={"Content-Type": "application/json"},
            )
            print(f"HTTP {resp.status_code}")
            print(json.dumps(resp.json(), indent=2, ensure_ascii=False))


if __name__ == "__main__":
    main()
