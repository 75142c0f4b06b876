"""External team code lookup.

The upstream automation tool reports teams by numeric operation codes, some
of them carrying a trailing letter (``803006A``). The fleet tables know teams
by their canonical names (``GOOO101M``). The table lives in a JSON resource so
new codes can be added without touching the code.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Mapping

logger = logging.getLogger(__name__)

_RESOURCE_NAME = "team_codes.json"


def _code_token(code: Any) -> str:
    if code is None:
        return ""
    return str(code).strip()


@dataclass(frozen=True)
class TeamCodeMapping:
    codes: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "TeamCodeMapping":
        codes: Dict[str, str] = {}
        for code, name in data.items():
            key = _code_token(code)
            value = _code_token(name)
            if not key or not value:
                raise ValueError(f"team code entry {code!r} -> {name!r} is incomplete")
            codes[key] = value
        return cls(codes=codes)

    @classmethod
    def load(cls, path: Path) -> "TeamCodeMapping":
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, dict):
            raise ValueError(f"team code table {path} must be a JSON object")
        mapping = cls.from_mapping(data)
        logger.info("Loaded %d team codes from %s", len(mapping), path)
        return mapping

    @classmethod
    def bundled(cls) -> "TeamCodeMapping":
        text = resources.files(__package__).joinpath(_RESOURCE_NAME).read_text(encoding="utf-8")
        return cls.from_mapping(json.loads(text))

    def __len__(self) -> int:
        return len(self.codes)

    def normalize(self, external_code: Any) -> str:
        """Return the canonical team name for an external code.

        Exact match wins, then the code with one trailing letter removed.
        Unknown codes come back unchanged.
        """

        code = _code_token(external_code)
        if code in self.codes:
            return self.codes[code]
        if code and code[-1].isalpha():
            stripped = code[:-1]
            if stripped in self.codes:
                return self.codes[stripped]
        return code


@lru_cache(maxsize=None)
def _load_cached(path: str | None) -> TeamCodeMapping:
    if path is None:
        return TeamCodeMapping.bundled()
    return TeamCodeMapping.load(Path(path))


def get_team_codes(path: Path | str | None = None) -> TeamCodeMapping:
    """Load a team code table once per process and reuse it."""

    return _load_cached(str(path) if path is not None else None)
