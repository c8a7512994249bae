"""Line-level diffing and rendering."""

from groot.diff.diff_engine import (
    ADDED,
    REMOVED,
    UNCHANGED,
    DiffEngine,
    DiffSegment,
    RenderedLine,
    diff_lines,
    render,
)

__all__ = [
    "ADDED",
    "REMOVED",
    "UNCHANGED",
    "DiffEngine",
    "DiffSegment",
    "RenderedLine",
    "diff_lines",
    "render",
]
