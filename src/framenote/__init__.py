"""FrameNote：视频逐帧几何标注的状态引擎。"""

from .session import AnnotationSession, DrawingTool, ToolMode

__all__ = [
    "AnnotationSession",
    "DrawingTool",
    "ToolMode",
]
