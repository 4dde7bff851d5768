"""核心模块入口，聚合数据模型、配置与日志工具供引擎与 CLI 复用。"""

from .datamodels import (
    CircleShape,
    Point,
    PolygonShape,
    RectangleShape,
    Shape,
    new_shape_id,
    shape_from_dict,
    shape_to_dict,
    shapes_to_dicts,
    with_new_id,
)
from .config import AnnotatorConfig, DrawingConfig, SessionConfig, load_config
from .logging_utils import get_logger, setup_logging

__all__ = [
    "Point",
    "PolygonShape",
    "RectangleShape",
    "CircleShape",
    "Shape",
    "new_shape_id",
    "with_new_id",
    "shape_to_dict",
    "shape_from_dict",
    "shapes_to_dicts",
    "AnnotatorConfig",
    "DrawingConfig",
    "SessionConfig",
    "load_config",
    "get_logger",
    "setup_logging",
]
