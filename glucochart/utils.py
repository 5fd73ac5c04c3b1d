# glucochart/utils.py
from __future__ import annotations
import numpy as np
import pandas as pd
from datetime import datetime
from typing import Iterable, Optional
from zoneinfo import ZoneInfo

from . import canon


def to_timestamp(ts: datetime | str | pd.Timestamp, tz: str = canon.DEFAULT_TZ) -> pd.Timestamp:
    """Normalise to a tz-aware Timestamp; naive values are read as local to tz."""
    ts = pd.Timestamp(ts)
    return ts.tz_localize(ZoneInfo(tz)) if ts.tz is None else ts.tz_convert(ZoneInfo(tz))


def resolve_now(now: Optional[datetime], tz: str = canon.DEFAULT_TZ) -> pd.Timestamp:
    if now is None:
        return pd.Timestamp.now(tz=ZoneInfo(tz))
    return to_timestamp(now, tz)


def resolve_time(
    ts: Optional[datetime], now: pd.Timestamp, tz: str = canon.DEFAULT_TZ
) -> pd.Timestamp:
    """Missing timestamps fall back to the pass's ``now``."""
    return now if ts is None else to_timestamp(ts, tz)


def start_of_day(ts: pd.Timestamp, tz: str = canon.DEFAULT_TZ) -> pd.Timestamp:
    """Local midnight of the calendar day containing ts."""
    return to_timestamp(ts, tz).normalize()


def epoch_seconds(ts: pd.Timestamp) -> float:
    return ts.timestamp()


def epoch_seconds_array(times: Iterable[pd.Timestamp]) -> np.ndarray:
    return np.asarray([t.timestamp() for t in times], dtype=float)


def prediction_times(
    deliver_at: pd.Timestamp, count: int, cadence_min: int = canon.PREDICTION_CADENCE_MIN
) -> pd.DatetimeIndex:
    """Sample times of a prediction series: deliver_at + i * cadence."""
    return pd.date_range(start=deliver_at, periods=count, freq=f"{cadence_min}min")


def safe_span(span: float) -> float:
    return span if abs(span) > canon.EPSILON else canon.EPSILON
