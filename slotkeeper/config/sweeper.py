"""
slotkeeper.config.sweeper – lifecycle sweeper schedule.

Env vars: SWEEPER_ENABLED, SWEEPER_INTERVAL_SECONDS, SWEEPER_BATCH_SIZE.
"""
from __future__ import annotations

import os
from dataclasses import dataclass

from slotkeeper.config._validators import env_bool


@dataclass(frozen=True)
class SweeperConfig:
    enabled: bool = True
    interval_seconds: float = 60.0
    """Period between ticks. Not semantically significant, only latency."""

    batch_size: int = 200
    """Max appointments moved per phase per tick."""

    def __post_init__(self) -> None:
        if not isinstance(self.enabled, bool):
            raise ValueError("enabled must be a boolean")
        if isinstance(self.interval_seconds, bool) or not isinstance(self.interval_seconds, (int, float)):
            raise ValueError(f"interval_seconds must be a number, got {self.interval_seconds!r}")
        if self.interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be > 0, got {self.interval_seconds!r}")
        if isinstance(self.batch_size, bool) or not isinstance(self.batch_size, int) or self.batch_size < 1:
            raise ValueError(f"batch_size must be an integer >= 1, got {self.batch_size!r}")

    @classmethod
    def from_env(cls, **overrides: object) -> SweeperConfig:
        enabled = overrides.get("enabled")
        interval = overrides.get("interval_seconds")
        batch = overrides.get("batch_size")
        return cls(
            enabled=env_bool("SWEEPER_ENABLED", True) if enabled is None else bool(enabled),
            interval_seconds=float(
                interval if interval is not None else os.environ.get("SWEEPER_INTERVAL_SECONDS", "60")
            ),
            batch_size=int(batch if batch is not None else os.environ.get("SWEEPER_BATCH_SIZE", "200")),
        )


def load_sweeper_config(**overrides: object) -> SweeperConfig:
    return SweeperConfig.from_env(**overrides)
