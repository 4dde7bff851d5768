"""Annotation session: one video, one store, one polygon builder.

The session is the single logical writer. Every pointer/keyboard/tick event is
handled synchronously and leaves the engine in a consistent state; pending
work (an open polygon, the first click of a rectangle/circle, a drag) is
finalized or discarded before the frame changes so it never lands on the
wrong frame.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from framenote.core import AnnotatorConfig, Point, Shape, get_logger
from framenote.engine import (
    ActivePolygonBuilder,
    FrameHistoryStore,
    PropagationDirection,
    circle_from_points,
    find_shape_at,
    paste_to_frame,
    propagate,
    rectangle_from_corners,
)
from framenote.engine import timing
from framenote.engine.transitions import add_shape, find_shape, move_shape, remove_shape, update_shape

logger = get_logger(__name__)


class DrawingTool(str, Enum):
    POLYGON = "polygon"
    RECTANGLE = "rectangle"
    CIRCLE = "circle"


class ToolMode(str, Enum):
    DRAW = "draw"
    SELECT = "select"


@dataclass(slots=True)
class DragState:
    """拖拽只记录起点与当前位置，位移在读取/提交时叠加到最新已提交集合上。"""

    shape_id: str
    origin: Point
    last: Point

    @property
    def offset(self) -> Tuple[float, float]:
        return self.last.x - self.origin.x, self.last.y - self.origin.y


class AnnotationSession:
    """Wires user events to the per-frame annotation engine."""

    def __init__(self, config: Optional[AnnotatorConfig] = None, *, store: Optional[FrameHistoryStore] = None) -> None:
        cfg = config or AnnotatorConfig()
        self._drawing = cfg.drawing
        self.store = store if store is not None else FrameHistoryStore()
        self.builder = ActivePolygonBuilder()
        self._fps = timing.validate_fps(cfg.session.fps)
        self._duration = cfg.session.duration_seconds
        self._time = 0.0
        self._playing = False
        self.tool = DrawingTool.POLYGON
        self.mode = ToolMode.DRAW
        self.drawing_enabled = False
        self.default_label = cfg.drawing.default_label
        self.default_color = cfg.drawing.default_color
        self._selected_id: Optional[str] = None
        self._copied: Optional[Shape] = None
        self._temp_start: Optional[Point] = None
        self._temp_current: Optional[Point] = None
        self._drag: Optional[DragState] = None

    @property
    def fps(self) -> int:
        return self._fps

    @property
    def duration(self) -> float:
        return self._duration

    @property
    def current_time(self) -> float:
        return self._time

    @property
    def is_playing(self) -> bool:
        return self._playing

    @property
    def total_frames(self) -> int:
        return timing.total_frames(self._duration, self._fps)

    @property
    def frame_index(self) -> int:
        return self._index_at(self._time)

    def _index_at(self, time: float) -> int:
        index = timing.frame_index(time, self._fps)
        total = self.total_frames
        if total > 0:
            # time == duration 落在最后一帧
            index = min(index, total - 1)
        return index

    @property
    def shapes(self) -> Tuple[Shape, ...]:
        """Shapes to display: the drag preview while dragging, else the committed set."""

        committed = self.store.get_current_shapes(self.frame_index)
        if self._drag is not None:
            return move_shape(committed, self._drag.shape_id, *self._drag.offset)
        return committed

    @property
    def selected_id(self) -> Optional[str]:
        return self._selected_id

    @property
    def selected_shape(self) -> Optional[Shape]:
        if self._selected_id is None:
            return None
        return find_shape(self.shapes, self._selected_id)

    @property
    def copied_shape(self) -> Optional[Shape]:
        return self._copied

    @property
    def active_points(self) -> Tuple[Point, ...]:
        return self.builder.points

    @property
    def temp_start(self) -> Optional[Point]:
        return self._temp_start

    @property
    def temp_current(self) -> Optional[Point]:
        return self._temp_current

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    @property
    def can_undo(self) -> bool:
        return self.store.can_undo(self.frame_index)

    @property
    def can_redo(self) -> bool:
        return self.store.can_redo(self.frame_index)

    def status(self) -> Dict[str, Any]:
        return {
            "time": round(self._time, 6),
            "frame": self.frame_index,
            "total_frames": self.total_frames,
            "fps": self._fps,
            "tool": self.tool.value,
            "mode": self.mode.value,
            "drawing": self.drawing_enabled,
            "playing": self._playing,
            "shapes": len(self.shapes),
            "active_points": len(self.builder),
            "selected": self._selected_id,
            "copied": self._copied.id if self._copied else None,
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
        }

    def load_video(self, duration: float) -> None:
        """Start a fresh session for a new video; all annotations are discarded."""

        if duration < 0:
            raise ValueError(f"duration 不能为负: {duration}")
        self.store.reset()
        self.builder.reset()
        self._duration = float(duration)
        self._time = 0.0
        self._playing = False
        self._copied = None
        self._clear_transient()
        logger.info("loaded video duration=%.3fs fps=%d frames=%d", self._duration, self._fps, self.total_frames)

    def _clear_transient(self) -> None:
        self._selected_id = None
        self._temp_start = None
        self._temp_current = None
        self._drag = None

    def _flush_pending(self) -> Optional[Shape]:
        """Finalize the open polygon onto the current frame and drop other pending state."""

        shape = self.builder.finalize_open(self.default_label, self.default_color)
        if shape is not None:
            self.store.commit(self.frame_index, add_shape(self.store.get_current_shapes(self.frame_index), shape))
            logger.debug("finalized open polygon on frame %d", self.frame_index)
        self.builder.reset()
        self._clear_transient()
        return shape

    def _move_to_time(self, time: float) -> int:
        time = max(0.0, float(time))
        if self._duration > 0:
            time = min(time, self._duration)
        previous = self.frame_index
        target = self._index_at(time)
        if target != previous:
            self._flush_pending()
            logger.debug("frame %d -> %d", previous, target)
        self._time = time
        return target

    def seek(self, time: float) -> int:
        """Scrub to a time. Ignored while playing."""

        if self._playing:
            return self.frame_index
        return self._move_to_time(time)

    def tick(self, time: float) -> int:
        """Playback tick: one atomic time -> frame -> shape-set swap."""

        return self._move_to_time(time)

    def go_to_frame(self, index: int) -> bool:
        if self._playing or index < 0:
            return False
        total = self.total_frames
        if total > 0 and index >= total:
            return False
        self._move_to_time(timing.frame_time(index, self._fps))
        return True

    def next_frame(self) -> bool:
        return self.go_to_frame(self.frame_index + 1)

    def prev_frame(self) -> bool:
        return self.go_to_frame(self.frame_index - 1)

    def set_fps(self, fps: int) -> int:
        """Change the frame rate. Stored annotations keep their old frame indices."""

        timing.validate_fps(fps)
        if fps == self._fps:
            return self.frame_index
        self._flush_pending()
        self._fps = fps
        logger.info("fps changed to %d; frame %d at t=%.3fs", fps, self.frame_index, self._time)
        return self.frame_index

    def set_playing(self, playing: bool) -> None:
        if playing and not self._playing:
            self._flush_pending()
        self._playing = playing

    def set_tool(self, tool: DrawingTool | str) -> None:
        tool = DrawingTool(tool)
        if tool is not DrawingTool.POLYGON:
            self._flush_pending()
        self._temp_start = None
        self._temp_current = None
        self.tool = tool

    def set_mode(self, mode: ToolMode | str) -> None:
        mode = ToolMode(mode)
        if mode is not ToolMode.DRAW:
            self._flush_pending()
        self._temp_start = None
        self._temp_current = None
        self.mode = mode

    def set_drawing_enabled(self, enabled: bool) -> None:
        if not enabled:
            self._flush_pending()
        self.drawing_enabled = enabled

    def set_defaults(self, *, label: Optional[str] = None, color: Optional[str] = None) -> None:
        if label is not None:
            if not label.strip():
                raise ValueError("label 不能为空")
            self.default_label = label
        if color is not None:
            self.default_color = color

    def _commit_added(self, shape: Shape) -> Shape:
        frame = self.frame_index
        self.store.commit(frame, add_shape(self.store.get_current_shapes(frame), shape))
        return shape

    def click(self, point: Point) -> bool:
        """Pointer click in video-pixel space. Returns False when the click is ignored."""

        if self._playing:
            return False
        if self.mode is ToolMode.SELECT:
            return self.select(find_shape_at(self.shapes, point))
        if not self.drawing_enabled:
            return False

        if self.tool is DrawingTool.POLYGON:
            if self.builder.can_close_at(point, self._drawing.close_snap_distance):
                self.close_polygon()
            else:
                self.builder.add_point(point)
            return True

        if self._temp_start is None:
            self._temp_start = point
            self._temp_current = point
            return True
        shape = self._complete_temp_shape(self._temp_start, point)
        self._temp_start = None
        self._temp_current = None
        if shape is not None:
            self._commit_added(shape)
        return True

    def _complete_temp_shape(self, start: Point, end: Point) -> Optional[Shape]:
        if self.tool is DrawingTool.RECTANGLE:
            return rectangle_from_corners(
                start, end, label=self.default_label, color=self.default_color, min_size=self._drawing.min_shape_size
            )
        return circle_from_points(
            start, end, label=self.default_label, color=self.default_color, min_radius=self._drawing.min_circle_radius
        )

    def pointer_move(self, point: Point) -> None:
        if self._playing:
            return
        if self._drag is not None:
            self.drag_to(point)
        elif self._temp_start is not None:
            self._temp_current = point

    def close_polygon(self) -> Optional[Shape]:
        if self._playing:
            return None
        shape = self.builder.close(self.default_label, self.default_color)
        if shape is None:
            return None
        self._commit_added(shape)
        self.builder.reset()
        return shape

    def undo_point(self) -> bool:
        return not self._playing and self.builder.undo_point()

    def redo_point(self) -> bool:
        return not self._playing and self.builder.redo_point()

    def undo(self) -> bool:
        if self._playing:
            return False
        self._clear_transient()
        return self.store.undo(self.frame_index)

    def redo(self) -> bool:
        if self._playing:
            return False
        self._clear_transient()
        return self.store.redo(self.frame_index)

    def clear_frame(self) -> bool:
        if self._playing:
            return False
        self.builder.reset()
        self._clear_transient()
        self.store.clear(self.frame_index)
        return True

    def select(self, shape_id: Optional[str]) -> bool:
        """Select a shape on the current frame; None or an unknown id clears selection."""

        if shape_id is None or find_shape(self.shapes, shape_id) is None:
            self._selected_id = None
            return False
        self._selected_id = shape_id
        return True

    def delete_selected(self) -> bool:
        shape = self.selected_shape
        if self._playing or shape is None:
            return False
        frame = self.frame_index
        self.store.commit(frame, remove_shape(self.store.get_current_shapes(frame), shape.id))
        self._selected_id = None
        return True

    def update_selected(self, **changes: Any) -> bool:
        shape = self.selected_shape
        if self._playing or shape is None or not changes:
            return False
        frame = self.frame_index
        self.store.commit(frame, update_shape(self.store.get_current_shapes(frame), shape.id, **changes))
        return True

    def begin_drag(self, point: Point) -> bool:
        """Start dragging the topmost shape under the pointer. Select mode only."""

        if self._playing or self._drag is not None or self.mode is not ToolMode.SELECT:
            return False
        shape_id = find_shape_at(self.store.get_current_shapes(self.frame_index), point)
        if shape_id is None:
            return False
        self._selected_id = shape_id
        self._drag = DragState(shape_id=shape_id, origin=point, last=point)
        return True

    def drag_to(self, point: Point) -> None:
        if self._drag is not None:
            self._drag.last = point

    def end_drag(self) -> bool:
        """Commit the move once, on top of whatever is committed now.

        A drag that moved nothing, or whose shape was removed meanwhile, commits nothing.
        """

        drag = self._drag
        if drag is None:
            return False
        self._drag = None
        frame = self.frame_index
        current = self.store.get_current_shapes(frame)
        dx, dy = drag.offset
        if (dx, dy) == (0, 0) or find_shape(current, drag.shape_id) is None:
            return False
        self.store.commit(frame, move_shape(current, drag.shape_id, dx, dy))
        return True

    def copy_selected(self) -> bool:
        shape = self.selected_shape
        if shape is None:
            return False
        self._copied = shape
        return True

    def paste_to_next(self) -> bool:
        if self._playing:
            return False
        return paste_to_frame(self.store, self._copied, self.frame_index + 1, self.total_frames)

    def paste_to_previous(self) -> bool:
        if self._playing:
            return False
        return paste_to_frame(self.store, self._copied, self.frame_index - 1, self.total_frames)

    def propagate(self, direction: PropagationDirection | str) -> List[int]:
        if self._playing:
            return []
        return propagate(self.store, self._copied, self.frame_index, self.total_frames, PropagationDirection(direction))

    def propagate_forward(self) -> List[int]:
        return self.propagate(PropagationDirection.FORWARD)

    def propagate_backward(self) -> List[int]:
        return self.propagate(PropagationDirection.BACKWARD)
