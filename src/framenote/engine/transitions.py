"""形状集合的纯状态转换：只计算下一个集合，不做 commit。

拖拽等实时编辑先用这些函数生成预览集合，确认后再交给 FrameHistoryStore.commit。
未找到的 ID 原样返回输入，调用方可用 find_shape 判断是否命中。
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Optional, Sequence, Tuple

from framenote.core import Shape

from .geometry import translate

ShapeSet = Tuple[Shape, ...]


def find_shape(shapes: Sequence[Shape], shape_id: str) -> Optional[Shape]:
    for shape in shapes:
        if shape.id == shape_id:
            return shape
    return None


def add_shape(shapes: Sequence[Shape], shape: Shape) -> ShapeSet:
    return tuple(shapes) + (shape,)


def replace_shape(shapes: Sequence[Shape], shape: Shape) -> ShapeSet:
    return tuple(shape if item.id == shape.id else item for item in shapes)


def update_shape(shapes: Sequence[Shape], shape_id: str, **changes: Any) -> ShapeSet:
    """按字段更新（label/color/几何），非法值由 dataclass 构造时抛 ValueError。"""

    if "id" in changes:
        raise ValueError("不允许修改形状 ID")
    target = find_shape(shapes, shape_id)
    if target is None:
        return tuple(shapes)
    return replace_shape(shapes, replace(target, **changes))


def remove_shape(shapes: Sequence[Shape], shape_id: str) -> ShapeSet:
    return tuple(item for item in shapes if item.id != shape_id)


def move_shape(shapes: Sequence[Shape], shape_id: str, dx: float, dy: float) -> ShapeSet:
    target = find_shape(shapes, shape_id)
    if target is None:
        return tuple(shapes)
    return replace_shape(shapes, translate(target, dx, dy))
