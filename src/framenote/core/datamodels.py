"""核心数据结构定义：点与三种标注形状（多边形/矩形/圆）。

坐标统一使用视频原生像素空间，屏幕坐标换算由渲染层负责。形状均为不可变对象，
快照之间可以安全共享同一个实例。
"""

from __future__ import annotations

import uuid
from dataclasses import asdict, dataclass, field, replace
from typing import Any, ClassVar, Dict, Sequence, Tuple, Union


def new_shape_id() -> str:
    """生成全局唯一的形状 ID。"""

    return str(uuid.uuid4())


def _check_label(label: str) -> None:
    if not label or not label.strip():
        raise ValueError("形状 label 不能为空")


def _check_non_negative(name: str, value: float) -> None:
    if value < 0:
        raise ValueError(f"{name} 不能为负: {value}")


@dataclass(frozen=True, slots=True)
class Point:
    """视频像素空间中的二维坐标。"""

    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Point":
        return cls(x=float(data["x"]), y=float(data["y"]))


@dataclass(frozen=True, slots=True)
class PolygonShape:
    """已完成的多边形；is_closed=False 表示未显式闭合但已定稿。"""

    kind: ClassVar[str] = "polygon"

    id: str
    label: str
    color: str
    points: Tuple[Point, ...] = field(default_factory=tuple)
    is_closed: bool = True

    def __post_init__(self) -> None:
        _check_label(self.label)
        if not isinstance(self.points, tuple):
            object.__setattr__(self, "points", tuple(self.points))


@dataclass(frozen=True, slots=True)
class RectangleShape:
    """矩形，(x, y) 为左上角。"""

    kind: ClassVar[str] = "rectangle"

    id: str
    label: str
    color: str
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        _check_label(self.label)
        _check_non_negative("width", self.width)
        _check_non_negative("height", self.height)


@dataclass(frozen=True, slots=True)
class CircleShape:
    """圆，(x, y) 为圆心。"""

    kind: ClassVar[str] = "circle"

    id: str
    label: str
    color: str
    x: float
    y: float
    radius: float

    def __post_init__(self) -> None:
        _check_label(self.label)
        _check_non_negative("radius", self.radius)


Shape = Union[PolygonShape, RectangleShape, CircleShape]

SHAPE_TYPES: Dict[str, type] = {
    PolygonShape.kind: PolygonShape,
    RectangleShape.kind: RectangleShape,
    CircleShape.kind: CircleShape,
}


def with_new_id(shape: Shape) -> Shape:
    """复制形状并分配新 ID，几何、标签与颜色保持不变。"""

    return replace(shape, id=new_shape_id())


def shape_to_dict(shape: Shape) -> Dict[str, Any]:
    """转换为带 type 字段的普通 dict，便于控制台展示与测试断言。"""

    payload = asdict(shape)
    payload["type"] = shape.kind
    if isinstance(shape, PolygonShape):
        payload["points"] = [point.to_dict() for point in shape.points]
    return payload


def shape_from_dict(data: Dict[str, Any]) -> Shape:
    """从 dict 还原形状，未知 type 抛出 ValueError。"""

    kind = data.get("type")
    if kind == PolygonShape.kind:
        return PolygonShape(
            id=str(data["id"]),
            label=data["label"],
            color=data["color"],
            points=tuple(Point.from_dict(item) for item in data.get("points", [])),
            is_closed=bool(data.get("is_closed", True)),
        )
    if kind == RectangleShape.kind:
        return RectangleShape(
            id=str(data["id"]),
            label=data["label"],
            color=data["color"],
            x=float(data["x"]),
            y=float(data["y"]),
            width=float(data["width"]),
            height=float(data["height"]),
        )
    if kind == CircleShape.kind:
        return CircleShape(
            id=str(data["id"]),
            label=data["label"],
            color=data["color"],
            x=float(data["x"]),
            y=float(data["y"]),
            radius=float(data["radius"]),
        )
    raise ValueError(f"未知形状类型: {kind!r}")


def shapes_to_dicts(shapes: Sequence[Shape]) -> list[Dict[str, Any]]:
    return [shape_to_dict(shape) for shape in shapes]
