from datetime import datetime, timedelta, timezone

import pandas as pd
import pytest

from glucochart import axes
from glucochart.config import default_config
from glucochart.types import (
    BasalScheduleEntry,
    Canvas,
    GlucoseReading,
    Predictions,
    Suggestion,
    Viewport,
)

NOW = datetime(2025, 1, 2, 12, 0, tzinfo=timezone.utc)
T0 = datetime(2025, 1, 2, 6, 0, tzinfo=timezone.utc)


@pytest.fixture
def config():
    return default_config()


@pytest.fixture
def canvas():
    # 500 px over 5 visible hours -> 100 px per hour
    return Canvas(width=500, height=400)


@pytest.fixture
def viewport():
    return Viewport(visible_hours=5, total_hours=24)


@pytest.fixture
def readings():
    # 12 readings, 5 minutes apart, 100..210 mg/dL
    return [
        GlucoseReading(time=T0 + timedelta(minutes=5 * i), value=100 + 10 * i)
        for i in range(12)
    ]


@pytest.fixture
def schedule():
    return [
        BasalScheduleEntry(minutes=0, rate=0.5),
        BasalScheduleEntry(minutes=480, rate=1.0),
    ]


@pytest.fixture
def suggestion(readings):
    return Suggestion(
        deliver_at=readings[-1].time,
        predictions=Predictions(
            iob=[200, 190, 180],
            cob=[210, 220],
            zt=[],
            uam=[205, 200, 195, 190],
        ),
    )


@pytest.fixture
def midnight_axis(canvas, viewport):
    """Time axis anchored at 2025-01-02 00:00 UTC."""
    anchor = pd.Timestamp("2025-01-02 00:00", tz="UTC")
    return axes.TimeAxis(canvas=canvas, viewport=viewport, anchor=anchor)


@pytest.fixture
def default_value_axis(canvas, config):
    """Value axis over the default 70..450 domain."""
    return axes.ValueAxis.from_data(canvas, [], None, config)
