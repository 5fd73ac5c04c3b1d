from __future__ import annotations

from dataclasses import dataclass

from . import canon


@dataclass(frozen=True)
class ChartConfig:
    # Horizontal
    min_additional_width: float = 150.0

    # Vertical margins; the basal strip sits above the glucose area
    basal_height: float = 60.0
    top_y_padding: float = 20.0
    bottom_y_padding: float = 50.0

    # Value domain defaults (mg/dL)
    max_glucose: int = 450
    min_glucose: int = 70
    y_lines_count: int = 5

    # Markers
    dot_size: float = 4.0
    bolus_size: float = 8.0
    bolus_scale: float = 8.0
    bolus_label_offset: float = 8.0
    temp_target_padding: float = 3.0

    # Basal windows
    basal_lookback_hours: int = 24
    basal_window_hours: int = 30
    regular_path_start_x: float = -50.0
    basal_label_offset_x: float = 30.0

    # Zone the pump's daily basal schedule is written in. Schedule minutes are
    # counted from local midnight here, whatever offset the input timestamps
    # carry; naive timestamps are also read in this zone.
    tz: str = canon.DEFAULT_TZ


def default_config() -> ChartConfig:
    return ChartConfig()
