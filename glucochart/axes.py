from __future__ import annotations
import numpy as np
import pandas as pd
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from . import canon, utils
from .config import ChartConfig, default_config
from .types import (
    Canvas,
    GlucoseReading,
    GlucoseUnits,
    Suggestion,
    TimeGridLine,
    ValueDomain,
    ValueGridLine,
    Viewport,
)

# ------------------ time axis ------------------


def anchor_time(
    readings: Sequence[GlucoseReading], now: pd.Timestamp, tz: str = canon.DEFAULT_TZ
) -> pd.Timestamp:
    """Earliest reading truncated to its minute, or now - 24h without readings."""
    if not readings:
        return now - pd.Timedelta(days=1)
    return utils.to_timestamp(readings[0].time, tz).floor("min")


def full_width(canvas_width: float, viewport: Viewport) -> float:
    return canvas_width * viewport.total_hours / viewport.visible_hours


def one_second_step(canvas_width: float, viewport: Viewport) -> float:
    return full_width(canvas_width, viewport) / (viewport.total_hours * 3600.0)


def x_for_time(
    t: pd.Timestamp, canvas: Canvas, viewport: Viewport, anchor: pd.Timestamp
) -> float:
    step = one_second_step(canvas.width, viewport)
    return (utils.epoch_seconds(t) - utils.epoch_seconds(anchor)) * step


def additional_width(
    canvas: Canvas,
    viewport: Viewport,
    readings: Sequence[GlucoseReading],
    suggestion: Optional[Suggestion],
    config: Optional[ChartConfig] = None,
) -> float:
    """Extra width past the history so the longest prediction fits."""
    cfg = config or default_config()
    if (
        suggestion is None
        or suggestion.predictions is None
        or suggestion.deliver_at is None
        or not readings
    ):
        return cfg.min_additional_width

    longest = suggestion.predictions.longest()
    last_delta = (
        utils.to_timestamp(readings[-1].time, cfg.tz)
        - utils.to_timestamp(suggestion.deliver_at, cfg.tz)
    ).total_seconds()
    additional_time = longest * canon.PREDICTION_CADENCE_MIN * 60.0 - last_delta
    px = additional_time * one_second_step(canvas.width, viewport)
    return max(px, cfg.min_additional_width)


@dataclass(frozen=True)
class TimeAxis:
    canvas: Canvas
    viewport: Viewport
    anchor: pd.Timestamp

    @property
    def step(self) -> float:
        return one_second_step(self.canvas.width, self.viewport)

    @property
    def full_width(self) -> float:
        return full_width(self.canvas.width, self.viewport)

    def x(self, t: pd.Timestamp) -> float:
        return x_for_time(t, self.canvas, self.viewport, self.anchor)

    def xs(self, times: Sequence[pd.Timestamp]) -> np.ndarray:
        secs = utils.epoch_seconds_array(times)
        return (secs - utils.epoch_seconds(self.anchor)) * self.step


def hour_grid(axis: TimeAxis) -> List[TimeGridLine]:
    """Vertical grid lines, one per hour, covering twice the total hours."""
    hours = axis.viewport.total_hours * 2
    times = [axis.anchor + pd.Timedelta(hours=h) for h in range(hours)]
    return [TimeGridLine(x=float(x), time=t) for x, t in zip(axis.xs(times), times)]


# ------------------ value axis ------------------


def value_domain(
    readings: Sequence[GlucoseReading],
    suggestion: Optional[Suggestion],
    config: Optional[ChartConfig] = None,
) -> Tuple[int, int]:
    """
    (min_value, max_value) over readings and every prediction series.

    - Both empty: max falls back to the default ceiling.
    - min is always clamped to at most the default floor, even when real
      data sits above it; max has no matching clamp.
    """
    cfg = config or default_config()
    values = [r.value for r in readings if r.value is not None]
    if suggestion is not None and suggestion.predictions is not None:
        values.extend(suggestion.predictions.all_values())

    if not values:
        return cfg.min_glucose, cfg.max_glucose
    return min(min(values), cfg.min_glucose), max(values)


def _plot_height(canvas: Canvas, config: ChartConfig) -> float:
    h = canvas.height - config.top_y_padding - config.basal_height - config.bottom_y_padding
    return max(h, canon.EPSILON)


def y_for_value(
    value: float,
    canvas: Canvas,
    min_value: float,
    max_value: float,
    config: Optional[ChartConfig] = None,
) -> float:
    cfg = config or default_config()
    step = _plot_height(canvas, cfg) / utils.safe_span(max_value - min_value)
    return canvas.height - cfg.bottom_y_padding - (value - min_value) * step


@dataclass(frozen=True)
class ValueAxis:
    canvas: Canvas
    min_value: int
    max_value: int
    config: ChartConfig

    @classmethod
    def from_data(
        cls,
        canvas: Canvas,
        readings: Sequence[GlucoseReading],
        suggestion: Optional[Suggestion],
        config: Optional[ChartConfig] = None,
    ) -> "ValueAxis":
        cfg = config or default_config()
        lo, hi = value_domain(readings, suggestion, cfg)
        return cls(canvas=canvas, min_value=lo, max_value=hi, config=cfg)

    def y(self, value: Optional[float]) -> float:
        return y_for_value(
            value or 0, self.canvas, self.min_value, self.max_value, self.config
        )

    def ys(self, values: Sequence[Optional[float]]) -> np.ndarray:
        v = np.asarray([x or 0 for x in values], dtype=float)
        step = _plot_height(self.canvas, self.config) / utils.safe_span(
            self.max_value - self.min_value
        )
        return self.canvas.height - self.config.bottom_y_padding - (v - self.min_value) * step

    def domain(self) -> ValueDomain:
        return ValueDomain(
            min_value=self.min_value,
            max_value=self.max_value,
            min_y=self.y(self.max_value),
            max_y=self.y(self.min_value),
        )


def domain_for_labels(
    canvas: Canvas,
    readings: Sequence[GlucoseReading],
    suggestion: Optional[Suggestion],
    config: Optional[ChartConfig] = None,
) -> ValueDomain:
    return ValueAxis.from_data(canvas, readings, suggestion, config).domain()


def value_grid(axis: ValueAxis, units: GlucoseUnits = "mg/dL") -> List[ValueGridLine]:
    """Evenly spaced horizontal lines, top to bottom, with label values."""
    d = axis.domain()
    n = axis.config.y_lines_count
    y_step = (d.max_y - d.min_y) / n
    value_step = (d.max_value - d.min_value) / n
    factor = canon.MMOL_PER_MGDL if units == "mmol/L" else 1.0
    return [
        ValueGridLine(
            y=d.min_y + line * y_step,
            value=round(d.max_value - line * value_step) * factor,
        )
        for line in range(n + 1)
    ]
