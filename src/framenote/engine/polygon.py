"""正在绘制中的多边形，点列表拥有独立的 undo/redo 历史。

每次点击只记入这里的历史，不进入帧级历史；多边形闭合、被放弃（切换工具/帧）
或清空时，帧级历史只收到一次 commit。
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from framenote.core import Point, PolygonShape, get_logger, new_shape_id

from .geometry import distance

logger = get_logger(__name__)

MIN_CLOSED_POINTS = 3


class ActivePolygonBuilder:
    """多点点击构造多边形的临时状态。"""

    def __init__(self) -> None:
        self._history: List[Tuple[Point, ...]] = [()]
        self._history_index = 0

    def __len__(self) -> int:
        return len(self.points)

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._history[self._history_index]

    @property
    def history(self) -> Tuple[Tuple[Point, ...], ...]:
        return tuple(self._history)

    @property
    def history_index(self) -> int:
        return self._history_index

    @property
    def is_empty(self) -> bool:
        return not self.points

    @property
    def can_undo(self) -> bool:
        return self._history_index > 0

    @property
    def can_redo(self) -> bool:
        return self._history_index < len(self._history) - 1

    @property
    def can_close(self) -> bool:
        return len(self.points) >= MIN_CLOSED_POINTS

    def add_point(self, point: Point) -> None:
        new_points = self.points + (point,)
        del self._history[self._history_index + 1 :]
        self._history.append(new_points)
        self._history_index = len(self._history) - 1

    def undo_point(self) -> bool:
        if not self.can_undo:
            return False
        self._history_index -= 1
        return True

    def redo_point(self) -> bool:
        if not self.can_redo:
            return False
        self._history_index += 1
        return True

    def can_close_at(self, point: Point, snap_distance: float) -> bool:
        """点击位置是否足够靠近首个顶点，可以视为闭合操作。"""

        return self.can_close and distance(point, self.points[0]) <= snap_distance

    def close(self, label: str, color: str) -> Optional[PolygonShape]:
        """少于 3 个点时返回 None；不会重置自身，由调用方提交后 reset()。"""

        if not self.can_close:
            logger.debug("close rejected: %d points", len(self.points))
            return None
        return PolygonShape(
            id=new_shape_id(),
            label=label,
            color=color,
            points=self.points,
            is_closed=True,
        )

    def finalize_open(self, label: str, color: str) -> Optional[PolygonShape]:
        """把未闭合的点列表定稿为开放多边形，没有点时返回 None。"""

        if self.is_empty:
            return None
        return PolygonShape(
            id=new_shape_id(),
            label=label,
            color=color,
            points=self.points,
            is_closed=False,
        )

    def reset(self) -> None:
        self._history = [()]
        self._history_index = 0
