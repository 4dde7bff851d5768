"""几何工具：由指针手势构造形状、命中测试、平移与面积。"""

from __future__ import annotations

import math
from dataclasses import replace
from typing import Optional, Sequence

import numpy as np

from framenote.core import CircleShape, Point, PolygonShape, RectangleShape, Shape, new_shape_id


def distance(a: Point, b: Point) -> float:
    return math.hypot(a.x - b.x, a.y - b.y)


def rectangle_from_corners(
    start: Point,
    end: Point,
    *,
    label: str,
    color: str,
    min_size: float = 5.0,
) -> Optional[RectangleShape]:
    """两角点规范化为左上角 + 宽高；任一边不大于 min_size 视为退化，返回 None。"""

    width = abs(start.x - end.x)
    height = abs(start.y - end.y)
    if width <= min_size or height <= min_size:
        return None
    return RectangleShape(
        id=new_shape_id(),
        label=label,
        color=color,
        x=min(start.x, end.x),
        y=min(start.y, end.y),
        width=width,
        height=height,
    )


def circle_from_points(
    center: Point,
    edge: Point,
    *,
    label: str,
    color: str,
    min_radius: float = 5.0,
) -> Optional[CircleShape]:
    """圆心 + 圆周上一点构造圆；半径不大于 min_radius 返回 None。"""

    radius = distance(center, edge)
    if radius <= min_radius:
        return None
    return CircleShape(id=new_shape_id(), label=label, color=color, x=center.x, y=center.y, radius=radius)


def _point_in_polygon(points: Sequence[Point], point: Point) -> bool:
    # even-odd 射线法；未闭合多边形也按闭合处理
    inside = False
    j = len(points) - 1
    for i in range(len(points)):
        pi, pj = points[i], points[j]
        if (pi.y > point.y) != (pj.y > point.y):
            cross_x = (pj.x - pi.x) * (point.y - pi.y) / (pj.y - pi.y) + pi.x
            if point.x < cross_x:
                inside = not inside
        j = i
    return inside


def contains_point(shape: Shape, point: Point) -> bool:
    if isinstance(shape, RectangleShape):
        return shape.x <= point.x <= shape.x + shape.width and shape.y <= point.y <= shape.y + shape.height
    if isinstance(shape, CircleShape):
        return math.hypot(point.x - shape.x, point.y - shape.y) <= shape.radius
    if isinstance(shape, PolygonShape):
        return len(shape.points) > 2 and _point_in_polygon(shape.points, point)
    raise TypeError(f"未知形状类型: {type(shape).__name__}")


def find_shape_at(shapes: Sequence[Shape], point: Point) -> Optional[str]:
    """返回最上层（列表靠后）命中形状的 ID。"""

    for shape in reversed(shapes):
        if contains_point(shape, point):
            return shape.id
    return None


def translate(shape: Shape, dx: float, dy: float) -> Shape:
    """平移后的副本，ID 不变。"""

    if isinstance(shape, PolygonShape):
        return replace(shape, points=tuple(Point(p.x + dx, p.y + dy) for p in shape.points))
    if isinstance(shape, (RectangleShape, CircleShape)):
        return replace(shape, x=shape.x + dx, y=shape.y + dy)
    raise TypeError(f"未知形状类型: {type(shape).__name__}")


def polygon_area(points: Sequence[Point]) -> float:
    """鞋带公式求面积，不足 3 点为 0。"""

    if len(points) < 3:
        return 0.0
    coords = np.array([(p.x, p.y) for p in points], dtype=np.float64)
    xs, ys = coords[:, 0], coords[:, 1]
    return float(0.5 * abs(np.dot(xs, np.roll(ys, -1)) - np.dot(ys, np.roll(xs, -1))))


def shape_area(shape: Shape) -> float:
    if isinstance(shape, RectangleShape):
        return shape.width * shape.height
    if isinstance(shape, CircleShape):
        return math.pi * shape.radius**2
    if isinstance(shape, PolygonShape):
        return polygon_area(shape.points)
    raise TypeError(f"未知形状类型: {type(shape).__name__}")
