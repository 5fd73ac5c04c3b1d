from __future__ import annotations
import pandas as pd
from typing import Dict, List, Optional, Sequence

from . import canon, interpolate, utils
from .axes import TimeAxis, ValueAxis
from .config import ChartConfig, default_config
from .types import BolusEvent, BolusMarker, GlucoseReading, Point, Rect, Suggestion


def _dots(xs, ys, size: float) -> List[Rect]:
    half = size / 2
    return [Rect(float(x) - half, float(y) - half, size, size) for x, y in zip(xs, ys)]


def glucose_dots(
    readings: Sequence[GlucoseReading],
    time_axis: TimeAxis,
    value_axis: ValueAxis,
    config: Optional[ChartConfig] = None,
) -> List[Rect]:
    """Fixed-size dot per reading; coordinates are mapped as whole arrays."""
    cfg = config or default_config()
    if not readings:
        return []
    xs = time_axis.xs([utils.to_timestamp(r.time, cfg.tz) for r in readings])
    ys = value_axis.ys([r.value for r in readings])
    return _dots(xs, ys, cfg.dot_size)


def bolus_markers(
    boluses: Sequence[BolusEvent],
    readings: Sequence[GlucoseReading],
    time_axis: TimeAxis,
    value_axis: ValueAxis,
    now: pd.Timestamp,
    config: Optional[ChartConfig] = None,
) -> List[BolusMarker]:
    """
    Bolus circles sitting on the interpolated glucose curve.

    Diameter grows linearly with the dose; each marker carries its own
    amount and label anchor just below the circle.
    """
    cfg = config or default_config()
    times, values = interpolate.reading_series(readings, cfg.tz)
    markers: List[BolusMarker] = []
    for bolus in boluses:
        t = utils.resolve_time(bolus.timestamp, now, cfg.tz)
        amount = bolus.amount or 0.0
        center = interpolate.point_on_series(t, times, values, time_axis, value_axis)
        rect = Rect.centered(center, cfg.bolus_size + amount * cfg.bolus_scale)
        markers.append(
            BolusMarker(
                rect=rect,
                amount=amount,
                label_position=Point(rect.mid_x, rect.max_y + cfg.bolus_label_offset),
            )
        )
    return markers


def prediction_dots(
    suggestion: Optional[Suggestion],
    time_axis: TimeAxis,
    value_axis: ValueAxis,
    config: Optional[ChartConfig] = None,
) -> Dict[str, List[Rect]]:
    """Dots per prediction series keyed by 'iob', 'cob', 'zt', 'uam'."""
    cfg = config or default_config()
    out: Dict[str, List[Rect]] = {key: [] for key in canon.PREDICTION_KEYS}
    if suggestion is None or suggestion.predictions is None or suggestion.deliver_at is None:
        return out

    deliver_at = utils.to_timestamp(suggestion.deliver_at, cfg.tz)
    for key in canon.PREDICTION_KEYS:
        values = suggestion.predictions.series(key)
        if not values:
            continue
        times = utils.prediction_times(deliver_at, len(values))
        out[key] = _dots(time_axis.xs(times), value_axis.ys(values), cfg.dot_size)
    return out
