from __future__ import annotations
import numpy as np
import pandas as pd
from typing import Callable, Optional, Sequence, Tuple

from . import canon, utils
from .axes import TimeAxis, ValueAxis
from .types import GlucoseReading, Point


def reading_series(
    readings: Sequence[GlucoseReading], tz: str = canon.DEFAULT_TZ
) -> Tuple[list[pd.Timestamp], list[float]]:
    times = [utils.to_timestamp(r.time, tz) for r in readings]
    values = [float(r.value or 0) for r in readings]
    return times, values


def value_at(
    query: pd.Timestamp,
    times: Sequence[pd.Timestamp],
    values: Sequence[float],
    to_x: Optional[Callable[[pd.Timestamp], float]] = None,
) -> float:
    """
    Value of an irregular series at an arbitrary time.

    Interpolates linearly between the bracketing samples by the fractional
    position of the query's x coordinate (``to_x``; epoch seconds if omitted).
    When no sample precedes the query, or none follows it, the last value is
    held. An empty series yields 0.
    """
    if len(times) == 0:
        return 0.0

    to_x = to_x or utils.epoch_seconds
    secs = utils.epoch_seconds_array(times)
    # first sample strictly after the query
    nxt = int(np.searchsorted(secs, utils.epoch_seconds(query), side="right"))
    if nxt == 0 or nxt >= len(times):
        return float(values[-1])

    prev_x = to_x(times[nxt - 1])
    next_x = to_x(times[nxt])
    delta = next_x - prev_x
    if abs(delta) <= canon.EPSILON:
        return float(values[nxt])
    fraction = (to_x(query) - prev_x) / delta
    return float(values[nxt - 1] + (values[nxt] - values[nxt - 1]) * fraction)


def point_on_series(
    query: pd.Timestamp,
    times: Sequence[pd.Timestamp],
    values: Sequence[float],
    time_axis: TimeAxis,
    value_axis: ValueAxis,
) -> Point:
    value = value_at(query, times, values, to_x=time_axis.x)
    return Point(x=time_axis.x(query), y=value_axis.y(value))


def interpolated_point(
    query: pd.Timestamp,
    readings: Sequence[GlucoseReading],
    time_axis: TimeAxis,
    value_axis: ValueAxis,
    tz: str = canon.DEFAULT_TZ,
) -> Point:
    """Point on the drawn glucose curve at ``query``, interpolated in pixel space.

    Converts the readings on every call; callers placing many points should
    build the series once with reading_series and use point_on_series.
    """
    times, values = reading_series(readings, tz)
    return point_on_series(query, times, values, time_axis, value_axis)
