from . import (
    canon,
    config,
    exceptions,
    types,
    utils,
    validate,
    axes,
    interpolate,
    basal,
    intervals,
    points,
    engine,
    ingest,
    formats,
)
from .engine import LayoutCache, compute_layout

__all__ = [
    "canon",
    "config",
    "exceptions",
    "types",
    "utils",
    "validate",
    "axes",
    "interpolate",
    "basal",
    "intervals",
    "points",
    "engine",
    "ingest",
    "formats",
    "LayoutCache",
    "compute_layout",
]
