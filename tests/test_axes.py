"""Time and value axis tests.

- x_for_time is strictly increasing and scaled by visible hours.
- additional_width reserves room for the longest prediction.
- value_domain falls back to 70..450 and always floors the minimum.
- y_for_value is decreasing and agrees with domain_for_labels.
"""

from datetime import timedelta

import math
import pandas as pd
import pytest

from glucochart import axes
from glucochart.types import Canvas, GlucoseReading, Predictions, Suggestion

from conftest import NOW, T0


def test_anchor_truncates_to_minute():
    r = [GlucoseReading(time=T0 + timedelta(seconds=42), value=100)]
    anchor = axes.anchor_time(r, pd.Timestamp(NOW))
    assert anchor == pd.Timestamp(T0)


def test_anchor_falls_back_to_day_ago():
    now = pd.Timestamp(NOW)
    assert axes.anchor_time([], now) == now - pd.Timedelta(days=1)


def test_full_width_and_step(canvas, viewport):
    assert axes.full_width(canvas.width, viewport) == pytest.approx(2400.0)
    assert axes.one_second_step(canvas.width, viewport) == pytest.approx(100.0 / 3600.0)


def test_x_for_time_is_strictly_increasing(canvas, viewport):
    anchor = pd.Timestamp(T0)
    times = [anchor + pd.Timedelta(minutes=m) for m in (-30, 0, 1, 59, 60, 600)]
    xs = [axes.x_for_time(t, canvas, viewport, anchor) for t in times]
    assert all(a < b for a, b in zip(xs, xs[1:]))
    assert axes.x_for_time(anchor, canvas, viewport, anchor) == 0.0
    assert xs[4] == pytest.approx(100.0)


def test_time_axis_vector_matches_scalar(canvas, viewport):
    axis = axes.TimeAxis(canvas=canvas, viewport=viewport, anchor=pd.Timestamp(T0))
    times = [pd.Timestamp(T0) + pd.Timedelta(minutes=7 * i) for i in range(5)]
    assert list(axis.xs(times)) == pytest.approx([axis.x(t) for t in times])


def test_additional_width_minimum_without_predictions(canvas, viewport, readings):
    assert axes.additional_width(canvas, viewport, readings, None) == 150.0
    assert axes.additional_width(canvas, viewport, [], Suggestion()) == 150.0


def test_additional_width_fits_longest_prediction(canvas, viewport, readings):
    # 48 samples = 4h; delivered 10 minutes before the last reading
    sug = Suggestion(
        deliver_at=readings[-1].time - timedelta(minutes=10),
        predictions=Predictions(iob=[100] * 48, cob=[100] * 3),
    )
    width = axes.additional_width(canvas, viewport, readings, sug)
    assert width == pytest.approx((4 * 3600 - 600) * 100.0 / 3600.0)


def test_additional_width_short_predictions_use_minimum(canvas, viewport, readings, suggestion):
    assert axes.additional_width(canvas, viewport, readings, suggestion) == 150.0


def test_hour_grid_spans_twice_total_hours(canvas, viewport):
    axis = axes.TimeAxis(canvas=canvas, viewport=viewport, anchor=pd.Timestamp(T0))
    grid = axes.hour_grid(axis)
    assert len(grid) == 48
    assert grid[0].x == 0.0 and grid[1].x == pytest.approx(100.0)
    assert grid[1].time == pd.Timestamp(T0) + pd.Timedelta(hours=1)


def test_value_domain_defaults_when_empty(config):
    assert axes.value_domain([], None, config) == (70, 450)
    assert axes.value_domain([], Suggestion(predictions=Predictions()), config) == (70, 450)


def test_value_domain_floors_minimum(readings, config):
    # readings span 100..210; the floor still pulls min down to 70
    assert axes.value_domain(readings, None, config) == (70, 210)


def test_value_domain_uses_predictions(readings, config):
    sug = Suggestion(predictions=Predictions(zt=[40, 500]))
    assert axes.value_domain(readings, sug, config) == (40, 500)


def test_y_for_value_decreasing(canvas, default_value_axis):
    ys = [default_value_axis.y(v) for v in (70, 100, 180, 300, 450)]
    assert all(a > b for a, b in zip(ys, ys[1:]))


def test_domain_for_labels_matches_axis(canvas, config):
    d = axes.domain_for_labels(canvas, [], None, config)
    assert (d.min_value, d.max_value) == (70, 450)
    # plot area: 400 - (20 + 60) - 50 = 270 px
    assert d.min_y == pytest.approx(80.0)
    assert d.max_y == pytest.approx(350.0)
    assert d.min_y == pytest.approx(axes.y_for_value(450, canvas, 70, 450, config))
    assert d.max_y == pytest.approx(axes.y_for_value(70, canvas, 70, 450, config))


def test_zero_span_domain_is_finite(canvas, config):
    flat = [GlucoseReading(time=T0, value=70)]
    axis = axes.ValueAxis.from_data(canvas, flat, None, config)
    assert (axis.min_value, axis.max_value) == (70, 70)
    assert math.isfinite(axis.y(70)) and math.isfinite(axis.y(100))


def test_tiny_canvas_keeps_values_ordered(config):
    axis = axes.ValueAxis.from_data(Canvas(width=10, height=10), [], None, config)
    assert axis.y(100) < axis.y(90)


def test_value_grid_labels(default_value_axis):
    grid = axes.value_grid(default_value_axis)
    assert len(grid) == 6
    assert [g.value for g in grid] == [450, 374, 298, 222, 146, 70]
    assert grid[0].y == pytest.approx(80.0)
    assert grid[-1].y == pytest.approx(350.0)


def test_value_grid_mmol_converts_labels_only(default_value_axis):
    mg = axes.value_grid(default_value_axis, "mg/dL")
    mmol = axes.value_grid(default_value_axis, "mmol/L")
    assert [g.y for g in mmol] == [g.y for g in mg]
    assert mmol[0].value == pytest.approx(450 * 0.0555)
