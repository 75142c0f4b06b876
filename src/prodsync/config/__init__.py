"""Configuration helpers: runtime settings and the team code table."""

from .settings import Settings, configure_logging, load_settings
from .team_codes import TeamCodeMapping, get_team_codes

__all__ = [
    "Settings",
    "TeamCodeMapping",
    "configure_logging",
    "get_team_codes",
    "load_settings",
]
