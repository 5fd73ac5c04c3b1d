from __future__ import annotations

from dataclasses import asdict
from typing import Dict, List, Sequence

import pandas as pd

from .types import BolusMarker, ChartLayout, Point, Rect


def rects_to_frame(rects: Sequence[Rect]) -> pd.DataFrame:
    return pd.DataFrame(
        [asdict(r) for r in rects], columns=["x", "y", "width", "height"]
    )


def points_to_frame(points: Sequence[Point]) -> pd.DataFrame:
    return pd.DataFrame([asdict(p) for p in points], columns=["x", "y"])


def bolus_markers_to_frame(markers: Sequence[BolusMarker]) -> pd.DataFrame:
    """One row per marker: rect columns, amount, and label anchor."""
    rows = [
        {
            **asdict(m.rect),
            "amount": m.amount,
            "label_x": m.label_position.x,
            "label_y": m.label_position.y,
        }
        for m in markers
    ]
    return pd.DataFrame(
        rows, columns=["x", "y", "width", "height", "amount", "label_x", "label_y"]
    )


def prediction_dots_to_frame(dots: Dict[str, List[Rect]]) -> pd.DataFrame:
    """Long format: one row per dot with its series name and sample index."""
    frames = []
    for key, rects in dots.items():
        if not rects:
            continue
        f = rects_to_frame(rects)
        f.insert(0, "series", key)
        f.insert(1, "index", list(range(len(f))))
        frames.append(f)
    if not frames:
        return pd.DataFrame(columns=["series", "index", "x", "y", "width", "height"])
    return pd.concat(frames, ignore_index=True)


def to_records(layout: ChartLayout) -> Dict[str, object]:
    """
    Plain-Python payload of a layout for hosts that serialise it.

    Timestamps become ISO strings; geometry becomes lists of dicts.
    """
    return {
        "anchor": layout.anchor.isoformat(),
        "full_width": layout.full_width,
        "additional_width": layout.additional_width,
        "content_width": layout.content_width,
        "domain": asdict(layout.domain),
        "glucose_dots": [asdict(r) for r in layout.glucose_dots],
        "bolus_markers": [asdict(m) for m in layout.bolus_markers],
        "prediction_dots": {
            k: [asdict(r) for r in v] for k, v in layout.prediction_dots.items()
        },
        "basal": asdict(layout.basal),
        "temp_targets": [asdict(r) for r in layout.temp_targets],
        "time_grid": [
            {"x": g.x, "time": g.time.isoformat()} for g in layout.time_grid
        ],
        "value_grid": [asdict(g) for g in layout.value_grid],
    }
