from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass
from hashlib import sha256
from types import MappingProxyType
from typing import Any, Callable, List, Optional, Tuple

import pandas as pd

from . import axes, basal, intervals, points, utils, validate
from .config import ChartConfig, default_config
from .types import BasalPaths, Canvas, ChartLayout, ChartSnapshot, Viewport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LayoutContext:
    """Shared, read-only inputs of one layout pass."""

    snapshot: ChartSnapshot
    time_axis: axes.TimeAxis
    value_axis: axes.ValueAxis
    now: pd.Timestamp
    config: ChartConfig


def _frozen(artifact: Any) -> Any:
    if isinstance(artifact, dict):
        return MappingProxyType({k: tuple(v) for k, v in artifact.items()})
    if isinstance(artifact, list):
        return tuple(artifact)
    return artifact


def _glucose_dots(ctx: LayoutContext):
    return points.glucose_dots(ctx.snapshot.glucose, ctx.time_axis, ctx.value_axis, ctx.config)


def _bolus_markers(ctx: LayoutContext):
    return points.bolus_markers(
        ctx.snapshot.boluses,
        ctx.snapshot.glucose,
        ctx.time_axis,
        ctx.value_axis,
        ctx.now,
        ctx.config,
    )


def _prediction_dots(ctx: LayoutContext):
    return points.prediction_dots(
        ctx.snapshot.suggestion, ctx.time_axis, ctx.value_axis, ctx.config
    )


def _basal(ctx: LayoutContext):
    return basal.build_basal_paths(
        ctx.snapshot.temp_basals,
        ctx.snapshot.basal_profile,
        ctx.snapshot.max_basal,
        ctx.time_axis,
        ctx.now,
        ctx.config,
    )


def _temp_targets(ctx: LayoutContext):
    rects = intervals.temp_target_rects(
        ctx.snapshot.temp_targets, ctx.time_axis, ctx.value_axis, ctx.now, ctx.config
    )
    return intervals.merge_overlaps(rects)


# name -> (builder, empty artifact). Builders only read the context, so they
# are independent of each other and of their order here.
ARTIFACTS: List[Tuple[str, Callable[[LayoutContext], Any], Callable[[], Any]]] = [
    ("glucose_dots", _glucose_dots, list),
    ("bolus_markers", _bolus_markers, list),
    ("prediction_dots", _prediction_dots, dict),
    ("basal", _basal, BasalPaths),
    ("temp_targets", _temp_targets, list),
]


def compute_layout(
    snapshot: ChartSnapshot,
    canvas: Canvas,
    viewport: Viewport,
    config: Optional[ChartConfig] = None,
) -> ChartLayout:
    """Compute every chart artifact from one immutable snapshot.

    Each artifact is rebuilt from scratch. A builder that fails is logged and
    replaced by its empty artifact so the rest of the chart still renders.
    """
    cfg = config or default_config()
    validate.check_config(cfg)
    validate.check_viewport(viewport)

    now = utils.resolve_now(snapshot.now, cfg.tz)
    anchor = axes.anchor_time(snapshot.glucose, now, cfg.tz)
    time_axis = axes.TimeAxis(canvas=canvas, viewport=viewport, anchor=anchor)
    value_axis = axes.ValueAxis.from_data(canvas, snapshot.glucose, snapshot.suggestion, cfg)
    ctx = LayoutContext(
        snapshot=snapshot, time_axis=time_axis, value_axis=value_axis, now=now, config=cfg
    )

    built = {}
    for name, build, empty in ARTIFACTS:
        try:
            built[name] = _frozen(build(ctx))
        except Exception:
            logger.exception("Failed to build chart artifact %r", name)
            built[name] = _frozen(empty())

    return ChartLayout(
        anchor=anchor,
        full_width=time_axis.full_width,
        additional_width=axes.additional_width(
            canvas, viewport, snapshot.glucose, snapshot.suggestion, cfg
        ),
        domain=value_axis.domain(),
        time_grid=tuple(axes.hour_grid(time_axis)),
        value_grid=tuple(axes.value_grid(value_axis, snapshot.units)),
        **built,
    )


def fingerprint(
    snapshot: ChartSnapshot,
    canvas: Canvas,
    viewport: Viewport,
    config: ChartConfig,
) -> str:
    """Content hash of everything a layout pass reads."""
    payload = {
        "snapshot": snapshot.model_dump(mode="json"),
        "canvas": canvas.model_dump(mode="json"),
        "viewport": viewport.model_dump(mode="json"),
        "config": asdict(config),
    }
    dumped = json.dumps(payload, sort_keys=True, default=str)
    return sha256(dumped.encode("utf-8")).hexdigest()


class LayoutCache:
    """Remembers the last layout and its input fingerprint.

    Any difference in snapshot, canvas, viewport or config triggers a full
    recompute; there is no partial update. Hits return the same immutable
    ChartLayout object.
    """

    def __init__(self, config: Optional[ChartConfig] = None):
        self.config = config or default_config()
        self._key: Optional[str] = None
        self._layout: Optional[ChartLayout] = None

    def layout(
        self, snapshot: ChartSnapshot, canvas: Canvas, viewport: Viewport
    ) -> ChartLayout:
        key = fingerprint(snapshot, canvas, viewport, self.config)
        if self._layout is not None and key == self._key:
            logger.debug("Layout cache hit (%s)", key[:12])
            return self._layout
        logger.debug("Layout cache miss (%s), recomputing", key[:12])
        self._layout = compute_layout(snapshot, canvas, viewport, self.config)
        self._key = key
        return self._layout

    def clear(self) -> None:
        self._key = None
        self._layout = None
