"""逐帧标注状态引擎：帧历史、活动多边形、时间轴传播与帧序号换算。"""

from .geometry import (
    circle_from_points,
    contains_point,
    find_shape_at,
    polygon_area,
    rectangle_from_corners,
    shape_area,
    translate,
)
from .history import FrameHistoryEntry, FrameHistoryStore
from .polygon import ActivePolygonBuilder
from .propagation import PropagationDirection, paste_to_frame, propagate
from .timing import InvalidFrameRateError, frame_index, frame_time, total_frames

__all__ = [
    "FrameHistoryEntry",
    "FrameHistoryStore",
    "ActivePolygonBuilder",
    "PropagationDirection",
    "propagate",
    "paste_to_frame",
    "InvalidFrameRateError",
    "frame_index",
    "frame_time",
    "total_frames",
    "rectangle_from_corners",
    "circle_from_points",
    "contains_point",
    "find_shape_at",
    "translate",
    "polygon_area",
    "shape_area",
]
