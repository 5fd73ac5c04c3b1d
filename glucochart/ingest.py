from __future__ import annotations
import pandas as pd
from typing import List, Optional

from . import canon, exceptions, utils
from .types import BasalScheduleEntry, BolusEvent, GlucoseReading, PumpEvent


def _timestamp_column(df: pd.DataFrame) -> str:
    cols = {c.lower(): c for c in df.columns}
    tcol = next((cols[k] for k in canon.COMMON_TIMESTAMP_NAMES if k in cols), None)
    if tcol is None:
        raise exceptions.IngestError(
            "No timestamp column found. Expected one of: "
            + ", ".join(canon.COMMON_TIMESTAMP_NAMES)
            + "."
        )
    return tcol


def _with_time_column(df: pd.DataFrame, tz: str) -> pd.DataFrame:
    """Return a copy with a tz-aware '_time' column, sorted ascending."""
    new = df.copy()
    if isinstance(new.index, pd.DatetimeIndex):
        new = new.reset_index(names="_time")
    else:
        new = new.rename(columns={_timestamp_column(new): "_time"})
    new["_time"] = pd.to_datetime(new["_time"], errors="coerce")
    new = new[new["_time"].notna()]
    if new["_time"].dt.tz is None:
        new["_time"] = new["_time"].dt.tz_localize(tz)
    else:
        new["_time"] = new["_time"].dt.tz_convert(tz)
    return new.sort_values("_time", kind="stable").reset_index(drop=True)


def _optional(value):
    return None if pd.isna(value) else value


def readings_from_frame(
    df: pd.DataFrame,
    *,
    value_col: Optional[str] = None,
    tz: str = canon.DEFAULT_TZ,
) -> List[GlucoseReading]:
    """
    Glucose readings from a frame with a timestamp column (or DatetimeIndex)
    and a mg/dL value column ('glucose', 'sgv', 'value' or 'mg_dl').
    Output is ascending by time.
    """
    if value_col is None:
        value_col = next(
            (c for c in ("glucose", "sgv", "value", "mg_dl") if c in df.columns), None
        )
    if value_col is None or value_col not in df.columns:
        raise exceptions.IngestError("No glucose value column found.")

    d = _with_time_column(df, tz)
    values = pd.to_numeric(d[value_col], errors="coerce").round()
    return [
        GlucoseReading(time=t, value=None if pd.isna(v) else int(v))
        for t, v in zip(d["_time"].dt.to_pydatetime(), values)
    ]


def pump_events_from_frame(
    df: pd.DataFrame, *, tz: str = canon.DEFAULT_TZ
) -> tuple[List[PumpEvent], List[BolusEvent]]:
    """
    Split pump history into (temp basal records, boluses).

    Expects a 'kind' (or 'type') column. Temp basal records keep their
    original order so start/duration pairs stay adjacent.
    """
    kind_col = "kind" if "kind" in df.columns else "type"
    if kind_col not in df.columns:
        raise exceptions.IngestError("Pump history needs a 'kind' or 'type' column.")

    tcol = _timestamp_column(df)
    temp_basals: List[PumpEvent] = []
    boluses: List[BolusEvent] = []
    for row in df.to_dict(orient="records"):
        ts = _optional(row.get(tcol))
        ts = utils.to_timestamp(ts, tz).to_pydatetime() if ts is not None else None
        kind = row[kind_col]
        if kind == canon.BOLUS:
            boluses.append(BolusEvent(timestamp=ts, amount=_optional(row.get("amount"))))
        elif kind in (canon.TEMP_BASAL, canon.TEMP_BASAL_DURATION):
            duration = _optional(row.get("duration_min"))
            temp_basals.append(
                PumpEvent(
                    kind=kind,
                    timestamp=ts,
                    rate=_optional(row.get("rate")),
                    duration_min=None if duration is None else int(duration),
                )
            )
    return temp_basals, boluses


def schedule_from_frame(df: pd.DataFrame) -> List[BasalScheduleEntry]:
    """Daily basal schedule from 'minutes' (or 'start' as HH:MM) and 'rate'."""
    if "rate" not in df.columns:
        raise exceptions.IngestError("Basal schedule needs a 'rate' column.")
    if "minutes" in df.columns:
        minutes = df["minutes"].astype(int)
    elif "start" in df.columns:
        parsed = pd.to_datetime(df["start"].astype(str), format="%H:%M")
        minutes = parsed.dt.hour * 60 + parsed.dt.minute
    else:
        raise exceptions.IngestError("Basal schedule needs 'minutes' or 'start'.")
    return [
        BasalScheduleEntry(minutes=int(m), rate=float(r))
        for m, r in zip(minutes, df["rate"].fillna(0.0))
    ]
