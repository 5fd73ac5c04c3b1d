from __future__ import annotations
from typing import Iterable, List

from . import exceptions
from .config import ChartConfig
from .types import BasalScheduleEntry, Viewport


def check_viewport(viewport: Viewport) -> None:
    exceptions.require(
        viewport.visible_hours > 0,
        f"visible_hours must be positive, got {viewport.visible_hours}.",
        exceptions.ConfigError,
    )
    exceptions.require(
        viewport.total_hours > 0,
        f"total_hours must be positive, got {viewport.total_hours}.",
        exceptions.ConfigError,
    )


def check_config(config: ChartConfig) -> None:
    exceptions.require(
        config.y_lines_count > 0, "y_lines_count must be positive.", exceptions.ConfigError
    )
    exceptions.require(
        config.basal_window_hours > 0,
        "basal_window_hours must be positive.",
        exceptions.ConfigError,
    )
    exceptions.require(
        config.min_glucose <= config.max_glucose,
        "min_glucose must not exceed max_glucose.",
        exceptions.ConfigError,
    )


def sorted_schedule(schedule: Iterable[BasalScheduleEntry]) -> List[BasalScheduleEntry]:
    """Return the daily schedule ordered by minute of day.

    Raises ScheduleError for entries outside a single day.
    """
    entries = list(schedule)
    for e in entries:
        if not 0 <= e.minutes < 1440:
            raise exceptions.ScheduleError(
                f"Basal schedule minute {e.minutes} is outside 0..1439."
            )
    return sorted(entries, key=lambda e: e.minutes)
