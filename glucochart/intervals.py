from __future__ import annotations
import pandas as pd
from dataclasses import replace
from typing import List, Optional, Sequence

from . import utils
from .axes import TimeAxis, ValueAxis
from .config import ChartConfig, default_config
from .types import Rect, TempTarget


def temp_target_rects(
    targets: Sequence[TempTarget],
    time_axis: TimeAxis,
    value_axis: ValueAxis,
    now: pd.Timestamp,
    config: Optional[ChartConfig] = None,
) -> List[Rect]:
    """One band per temp target, padded vertically, in input order."""
    cfg = config or default_config()
    pad = cfg.temp_target_padding
    rects: List[Rect] = []
    for target in targets:
        start = utils.resolve_time(target.created_at, now, cfg.tz)
        end = start + pd.Timedelta(minutes=target.duration or 0)
        x0 = time_axis.x(start)
        x1 = time_axis.x(end)
        y0 = value_axis.y(int(target.target_top or 0))
        y1 = value_axis.y(int(target.target_bottom or 0))
        rects.append(Rect(x=x0, y=y0 - pad, width=x1 - x0, height=y1 - y0 + 2 * pad))
    return rects


def merge_overlaps(rects: Sequence[Rect]) -> List[Rect]:
    """
    Remove horizontal overlap in a single left-to-right pass.

    When the previous band runs past the next band's left edge it is cut to
    end there; the next band is never touched, so later bands win. A previous
    band that starts after the next one collapses to zero width.
    """
    merged: List[Rect] = []
    for rect in rects:
        if merged and merged[-1].max_x > rect.x:
            last = merged[-1]
            merged[-1] = replace(last, width=max(rect.x - last.x, 0.0))
        merged.append(rect)
    return merged
