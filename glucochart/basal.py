from __future__ import annotations

import logging
import pandas as pd
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple

from . import canon, utils, validate
from .axes import TimeAxis
from .config import ChartConfig, default_config
from .types import BasalPaths, BasalScheduleEntry, PumpEvent, Point

logger = logging.getLogger(__name__)

# Days the daily schedule is laid out over. Any window starting on day 0
# and no longer than ~48h stays inside it, so midnight needs no special case.
SCHEDULE_DAYS = 3


@dataclass(frozen=True)
class TempBasalRun:
    start: pd.Timestamp
    end: pd.Timestamp
    rate: float


def rate_scale(max_basal: float, config: ChartConfig) -> float:
    return config.basal_height / max(max_basal, canon.EPSILON)


def rate_to_y(rate: Optional[float], max_basal: float, config: ChartConfig) -> float:
    return config.basal_height - (rate or 0.0) * rate_scale(max_basal, config)


def normalize_schedule(
    schedule: Iterable[BasalScheduleEntry],
    time_begin: pd.Timestamp,
    tz: str = canon.DEFAULT_TZ,
) -> List[Tuple[pd.Timestamp, float]]:
    """
    Absolute (time, rate) points for the daily schedule, starting at local
    midnight of the day containing time_begin and repeated for SCHEDULE_DAYS.
    """
    day_start = utils.start_of_day(time_begin, tz)
    entries = validate.sorted_schedule(schedule)
    return [
        (day_start + pd.Timedelta(days=day, minutes=e.minutes), e.rate)
        for day in range(SCHEDULE_DAYS)
        for e in entries
    ]


def regular_basal_points(
    schedule: Sequence[BasalScheduleEntry],
    time_begin: pd.Timestamp,
    time_end: pd.Timestamp,
    axis: TimeAxis,
    max_basal: float,
    config: Optional[ChartConfig] = None,
) -> List[Point]:
    """
    Schedule change points inside [time_begin, time_end).

    The rate in effect at time_begin is emitted as a point clipped to
    time_begin; points before it are dropped.
    """
    cfg = config or default_config()
    if time_begin >= time_end:
        return []

    normalized = normalize_schedule(schedule, time_begin, cfg.tz)
    points: List[Point] = []
    for (t0, rate0), (t1, _) in zip(normalized, normalized[1:]):
        if t0 < time_begin and t1 < time_begin:
            continue
        if t0 < time_begin <= t1:
            points.append(Point(axis.x(time_begin), rate_to_y(rate0, max_basal, cfg)))
        elif time_begin <= t0 < time_end:
            points.append(Point(axis.x(t0), rate_to_y(rate0, max_basal, cfg)))
    return points


def pair_overrides(
    events: Sequence[PumpEvent], now: pd.Timestamp, tz: str = canon.DEFAULT_TZ
) -> List[TempBasalRun]:
    """
    Read temp basal runs from adjacent (TempBasal, TempBasalDuration) records.

    Records are consumed two at a time; a pair in the wrong order, or a
    trailing single record, is dropped. Runs come back ordered by start time
    whatever order the pump history lists them in.
    """
    runs: List[TempBasalRun] = []
    for i in range(0, len(events), 2):
        chunk = events[i : i + 2]
        if (
            len(chunk) != 2
            or chunk[0].kind != canon.TEMP_BASAL
            or chunk[1].kind != canon.TEMP_BASAL_DURATION
        ):
            logger.debug("Dropping unpaired temp basal records at index %d", i)
            continue
        start = utils.resolve_time(chunk[0].timestamp, now, tz)
        end = start + pd.Timedelta(minutes=chunk[1].duration_min or 0)
        runs.append(TempBasalRun(start=start, end=end, rate=chunk[0].rate or 0.0))
    runs.sort(key=lambda r: r.start)
    return runs


def temp_basal_points(
    runs: Sequence[TempBasalRun],
    schedule: Sequence[BasalScheduleEntry],
    time_begin: pd.Timestamp,
    time_end: pd.Timestamp,
    axis: TimeAxis,
    max_basal: float,
    config: Optional[ChartConfig] = None,
) -> List[Point]:
    """
    Schedule points for each gap, interleaved with override corners.

    Runs must be ordered by start. Each run is clipped to the window and cut
    short where the next run starts; runs left with no width are skipped.
    """
    cfg = config or default_config()
    points: List[Point] = []
    cursor = time_begin
    next_starts = [r.start for r in runs[1:]] + [time_end]
    for run, next_start in zip(runs, next_starts):
        start = max(run.start, cursor)
        end = min(run.end, next_start, time_end)
        if end <= start:
            continue
        points.extend(regular_basal_points(schedule, cursor, start, axis, max_basal, cfg))
        points.append(Point(axis.x(start), rate_to_y(run.rate, max_basal, cfg)))
        points.append(Point(axis.x(end), cfg.basal_height))
        cursor = end
    points.extend(regular_basal_points(schedule, cursor, time_end, axis, max_basal, cfg))
    return points


def step_path(points: Sequence[Point], start_x: float, baseline_y: float) -> List[Point]:
    """Expand corner points into a step outline: across at the old y, then up/down."""
    path = [Point(start_x, baseline_y)]
    y = baseline_y
    for p in points:
        path.append(Point(p.x, y))
        path.append(p)
        y = p.y
    return path


def build_basal_paths(
    temp_basals: Sequence[PumpEvent],
    schedule: Sequence[BasalScheduleEntry],
    max_basal: float,
    axis: TimeAxis,
    now: pd.Timestamp,
    config: Optional[ChartConfig] = None,
    time_begin: Optional[pd.Timestamp] = None,
    time_end: Optional[pd.Timestamp] = None,
) -> BasalPaths:
    """
    Basal strip geometry.

    The override path covers [time_begin, time_end] (default: a rolling
    window starting basal_lookback_hours before now) and is closed against
    the baseline for fill. The schedule-only reference path always spans the
    default rolling window and starts left of the chart.
    """
    cfg = config or default_config()
    baseline = cfg.basal_height
    window_begin = now - pd.Timedelta(hours=cfg.basal_lookback_hours)
    window_end = window_begin + pd.Timedelta(hours=cfg.basal_window_hours)
    time_begin = window_begin if time_begin is None else utils.to_timestamp(time_begin, cfg.tz)
    time_end = window_end if time_end is None else utils.to_timestamp(time_end, cfg.tz)

    runs = pair_overrides(temp_basals, now, cfg.tz)
    corners = temp_basal_points(runs, schedule, time_begin, time_end, axis, max_basal, cfg)
    temp_path = step_path(corners, 0.0, baseline)
    end_x = axis.x(time_end)
    temp_path += [
        Point(end_x, temp_path[-1].y),
        Point(end_x, baseline),
        Point(0.0, baseline),
    ]

    regular = regular_basal_points(schedule, window_begin, window_end, axis, max_basal, cfg)
    regular_path = step_path(regular, cfg.regular_path_start_x, baseline)
    regular_path.append(Point(axis.x(window_end), regular_path[-1].y))

    paths = BasalPaths(
        temp_points=tuple(corners), temp_path=tuple(temp_path), regular_path=tuple(regular_path)
    )
    if not runs:
        return paths

    # label sits at the end of the latest override, kept inside the window
    last = runs[-1]
    last_x = axis.x(min(last.end, time_end))
    last_point = Point(last_x, rate_to_y(last.rate, max_basal, cfg))
    return replace(
        paths,
        last_point=last_point,
        last_rate=last.rate,
        label_position=Point(last_point.x + cfg.basal_label_offset_x, baseline / 2),
    )
