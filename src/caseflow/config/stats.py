"""Location of the statistics engine's output files."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Final

from .env import require_env_var

STATS_DIR_ENV: Final[str] = "CASEFLOW_STATS_DIR"


@dataclass(frozen=True, slots=True)
class StatsConfig:
    directory: Path


def get_stats_config() -> StatsConfig:
    """Raise ``MissingConfigurationError`` when ``CASEFLOW_STATS_DIR`` is unset."""

    return StatsConfig(directory=Path(require_env_var(STATS_DIR_ENV)).expanduser())
