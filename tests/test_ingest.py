"""DataFrame ingest tests: readings, pump history split and schedule parsing."""

from datetime import datetime, timezone

import numpy as np
import pandas as pd
import pytest

from glucochart import exceptions, ingest

UTC = timezone.utc


def test_readings_sorted_and_localized():
    df = pd.DataFrame(
        {
            "time": ["2025-01-02 06:10", "2025-01-02 06:00", "2025-01-02 06:05"],
            "sgv": [120, 100, np.nan],
        }
    )
    readings = ingest.readings_from_frame(df)
    assert [r.value for r in readings] == [100, None, 120]
    assert readings[0].time == datetime(2025, 1, 2, 6, 0, tzinfo=UTC)
    assert all(r.time.tzinfo is not None for r in readings)


def test_readings_from_datetime_index():
    idx = pd.date_range("2025-01-02 06:00", periods=3, freq="5min", tz="UTC")
    df = pd.DataFrame({"glucose": [101.4, 110.0, 118.6]}, index=idx)
    readings = ingest.readings_from_frame(df)
    assert [r.value for r in readings] == [101, 110, 119]
    assert readings[-1].time == datetime(2025, 1, 2, 6, 10, tzinfo=UTC)


def test_readings_explicit_value_column():
    df = pd.DataFrame({"timestamp": ["2025-01-02T06:00:00Z"], "bg": [95]})
    (reading,) = ingest.readings_from_frame(df, value_col="bg")
    assert reading.value == 95


def test_readings_missing_columns_raise():
    with pytest.raises(exceptions.IngestError):
        ingest.readings_from_frame(pd.DataFrame({"time": ["2025-01-02"], "x": [1]}))
    with pytest.raises(exceptions.IngestError):
        ingest.readings_from_frame(pd.DataFrame({"when": ["2025-01-02"], "sgv": [1]}))


def test_pump_events_split():
    """Temp basal records keep their order; unknown kinds are ignored."""
    df = pd.DataFrame(
        {
            "timestamp": [
                "2025-01-02 03:00",
                "2025-01-02 03:00",
                "2025-01-02 04:00",
                "2025-01-02 05:00",
            ],
            "kind": ["TempBasal", "TempBasalDuration", "Bolus", "Suspend"],
            "rate": [2.0, np.nan, np.nan, np.nan],
            "duration_min": [np.nan, 30, np.nan, np.nan],
            "amount": [np.nan, np.nan, 1.5, np.nan],
        }
    )
    temp_basals, boluses = ingest.pump_events_from_frame(df)
    assert [e.kind for e in temp_basals] == ["TempBasal", "TempBasalDuration"]
    assert temp_basals[0].rate == 2.0
    assert temp_basals[0].duration_min is None
    assert temp_basals[1].duration_min == 30
    assert temp_basals[0].timestamp == datetime(2025, 1, 2, 3, 0, tzinfo=UTC)
    assert len(boluses) == 1
    assert boluses[0].amount == 1.5


def test_pump_events_accept_type_column():
    df = pd.DataFrame({"time": ["2025-01-02 04:00"], "type": ["Bolus"], "amount": [0.5]})
    temp_basals, boluses = ingest.pump_events_from_frame(df)
    assert temp_basals == []
    assert boluses[0].amount == 0.5


def test_pump_events_need_kind():
    with pytest.raises(exceptions.IngestError):
        ingest.pump_events_from_frame(pd.DataFrame({"time": ["2025-01-02"]}))


def test_schedule_from_minutes_and_start():
    by_minutes = ingest.schedule_from_frame(pd.DataFrame({"minutes": [0, 480], "rate": [0.5, 1.0]}))
    by_start = ingest.schedule_from_frame(
        pd.DataFrame({"start": ["00:00", "08:00"], "rate": [0.5, 1.0]})
    )
    assert by_minutes == by_start
    assert [e.minutes for e in by_start] == [0, 480]


def test_schedule_requires_columns():
    with pytest.raises(exceptions.IngestError):
        ingest.schedule_from_frame(pd.DataFrame({"minutes": [0]}))
    with pytest.raises(exceptions.IngestError):
        ingest.schedule_from_frame(pd.DataFrame({"rate": [1.0]}))
