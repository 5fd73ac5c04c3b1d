from __future__ import annotations
from typing import List, Literal, Mapping, Optional, Tuple
from dataclasses import dataclass
from datetime import datetime

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field

from . import canon

GlucoseUnits = Literal["mg/dL", "mmol/L"]
PumpEventKind = Literal["TempBasal", "TempBasalDuration", "Bolus"]


## Input records (immutable snapshots supplied by the host)
class _Record(BaseModel):
    model_config = ConfigDict(frozen=True)


class GlucoseReading(_Record):
    time: datetime
    value: Optional[int] = None  # mg/dL


class BasalScheduleEntry(_Record):
    minutes: int  # minute of day, 0..1439
    rate: float = 0.0  # U/hr


class PumpEvent(_Record):
    """One pump history record.

    A temporary basal is two adjacent records: a ``TempBasal`` carrying the
    start time and rate, then a ``TempBasalDuration`` carrying the minutes.
    """

    kind: PumpEventKind
    timestamp: Optional[datetime] = None
    rate: Optional[float] = None
    duration_min: Optional[int] = None
    amount: Optional[float] = None


class BolusEvent(_Record):
    timestamp: Optional[datetime] = None
    amount: Optional[float] = None  # U


class Predictions(_Record):
    iob: List[int] = Field(default_factory=list)
    cob: List[int] = Field(default_factory=list)
    zt: List[int] = Field(default_factory=list)
    uam: List[int] = Field(default_factory=list)

    def series(self, key: str) -> List[int]:
        return list(getattr(self, key) or [])

    def all_values(self) -> List[int]:
        return [v for key in canon.PREDICTION_KEYS for v in self.series(key)]

    def longest(self) -> int:
        return max((len(self.series(key)) for key in canon.PREDICTION_KEYS), default=0)


class Suggestion(_Record):
    deliver_at: Optional[datetime] = None
    predictions: Optional[Predictions] = None


class TempTarget(_Record):
    created_at: Optional[datetime] = None
    duration: Optional[float] = None  # minutes
    target_top: Optional[float] = None
    target_bottom: Optional[float] = None


class Canvas(_Record):
    width: float = Field(ge=0)
    height: float = Field(ge=0)


class Viewport(_Record):
    visible_hours: int = 5
    total_hours: int = 24


class ChartSnapshot(_Record):
    """Everything one layout pass reads.

    ``now`` pins the rolling basal window and every "missing timestamp"
    fallback; leave it unset only when wall-clock dependence is acceptable.
    """

    glucose: List[GlucoseReading] = Field(default_factory=list)
    suggestion: Optional[Suggestion] = None
    temp_basals: List[PumpEvent] = Field(default_factory=list)
    boluses: List[BolusEvent] = Field(default_factory=list)
    basal_profile: List[BasalScheduleEntry] = Field(default_factory=list)
    temp_targets: List[TempTarget] = Field(default_factory=list)
    max_basal: float = 0.0
    units: GlucoseUnits = "mg/dL"
    now: Optional[datetime] = None


## Geometry
@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    x: float
    y: float
    width: float
    height: float

    @classmethod
    def centered(cls, center: Point, size: float) -> "Rect":
        return cls(center.x - size / 2, center.y - size / 2, size, size)

    @property
    def mid_x(self) -> float:
        return self.x + self.width / 2

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def mid_y(self) -> float:
        return self.y + self.height / 2

    @property
    def max_y(self) -> float:
        return self.y + self.height


@dataclass(frozen=True)
class ValueDomain:
    min_value: int
    max_value: int
    min_y: float  # y of max_value (top of the glucose area)
    max_y: float  # y of min_value


@dataclass(frozen=True)
class TimeGridLine:
    x: float
    time: pd.Timestamp


@dataclass(frozen=True)
class ValueGridLine:
    y: float
    value: float  # already converted to the display units


@dataclass(frozen=True)
class BolusMarker:
    rect: Rect
    amount: float
    label_position: Point


@dataclass(frozen=True)
class BasalPaths:
    """Step-function outlines for the basal strip.

    - temp_points: corner points before step expansion
    - temp_path: closed outline (schedule merged with overrides) for fill
    - regular_path: open outline of the schedule alone
    - last_point/last_rate: end of the latest override, for the rate label
    """

    temp_points: Tuple[Point, ...] = ()
    temp_path: Tuple[Point, ...] = ()
    regular_path: Tuple[Point, ...] = ()
    last_point: Point = Point(0.0, 0.0)
    last_rate: Optional[float] = None
    label_position: Optional[Point] = None


@dataclass(frozen=True)
class ChartLayout:
    """Every artifact of one layout pass.

    Sequences are tuples and prediction_dots is a read-only mapping, so a
    layout handed out by a cache cannot be changed under later callers.
    """

    anchor: pd.Timestamp
    full_width: float
    additional_width: float
    domain: ValueDomain
    glucose_dots: Tuple[Rect, ...]
    bolus_markers: Tuple[BolusMarker, ...]
    prediction_dots: Mapping[str, Tuple[Rect, ...]]
    basal: BasalPaths
    temp_targets: Tuple[Rect, ...]
    time_grid: Tuple[TimeGridLine, ...]
    value_grid: Tuple[ValueGridLine, ...]

    @property
    def content_width(self) -> float:
        return self.full_width + self.additional_width
