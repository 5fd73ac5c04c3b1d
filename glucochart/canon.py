from __future__ import annotations
from typing import Final, Tuple

DEFAULT_TZ: Final[str] = "UTC"
PREDICTION_CADENCE_MIN: Final[int] = 5
PREDICTION_KEYS: Final[Tuple[str, ...]] = ("iob", "cob", "zt", "uam")
COMMON_TIMESTAMP_NAMES = ("time", "timestamp", "date", "datetime", "ts", "created_at")

# mg/dL -> mmol/L, labels only
MMOL_PER_MGDL: Final[float] = 0.0555

# Pump history record kinds
TEMP_BASAL: Final[str] = "TempBasal"
TEMP_BASAL_DURATION: Final[str] = "TempBasalDuration"
BOLUS: Final[str] = "Bolus"

# Guards against zero spans in scale factors
EPSILON: Final[float] = 1e-6
