"""标注会话测试：覆盖绘制、导航、拖拽、复制传播等端到端流程。"""

import pytest

from framenote.core import AnnotatorConfig, Point, PolygonShape, RectangleShape
from framenote.engine import InvalidFrameRateError
from framenote.session import AnnotationSession, DrawingTool, ToolMode


def _session(duration: float = 10.0, fps: int = 30) -> AnnotationSession:
    cfg = AnnotatorConfig.model_validate({"session": {"fps": fps}})
    session = AnnotationSession(cfg)
    session.load_video(duration)
    session.set_drawing_enabled(True)
    return session


def _draw_rect(session: AnnotationSession, x1: float, y1: float, x2: float, y2: float) -> None:
    session.set_tool(DrawingTool.RECTANGLE)
    session.click(Point(x1, y1))
    session.click(Point(x2, y2))


def test_rectangle_undo_redo_scenario() -> None:
    session = _session()
    session.set_defaults(label="car", color="#FF0000")

    assert session.seek(1.0) == 30
    _draw_rect(session, 10, 10, 60, 60)

    rect = session.shapes[0]
    assert isinstance(rect, RectangleShape)
    assert (rect.x, rect.y, rect.width, rect.height, rect.label, rect.color) == (10, 10, 50, 50, "car", "#FF0000")

    assert session.undo()
    assert session.store.get_shapes_for_frame(30) == ()
    assert session.redo()
    assert session.store.get_shapes_for_frame(30) == (rect,)


def test_scrubbing_does_not_create_entries() -> None:
    session = _session()

    for step in range(20):
        session.seek(step * 0.1)
    session.next_frame()
    session.prev_frame()

    assert len(session.store) == 0


def test_degenerate_rectangle_not_stored() -> None:
    session = _session()

    _draw_rect(session, 10, 10, 12, 80)

    assert session.shapes == ()
    assert session.temp_start is None
    assert len(session.store) == 0


def test_temp_shape_preview_and_circle() -> None:
    session = _session()
    session.set_tool("circle")

    session.click(Point(100, 100))
    session.pointer_move(Point(110, 100))
    assert session.temp_current == Point(110, 100)

    session.click(Point(100, 120))
    circle = session.shapes[0]
    assert circle.kind == "circle"
    assert circle.radius == pytest.approx(20.0)


def test_polygon_closes_when_clicking_first_point() -> None:
    session = _session()
    for x, y in [(0, 0), (100, 0), (100, 100)]:
        session.click(Point(x, y))
    assert len(session.active_points) == 3
    assert session.shapes == ()

    session.click(Point(4, 3))

    polygon = session.shapes[0]
    assert isinstance(polygon, PolygonShape)
    assert polygon.is_closed
    assert len(polygon.points) == 3
    assert session.active_points == ()
    # 逐点点击不进入帧级历史，闭合只产生一次 commit
    assert len(session.store.entry(0).history) == 2


def test_close_polygon_rejected_with_two_points() -> None:
    session = _session()
    for x, y in [(0, 0), (10, 0), (10, 10)]:
        session.click(Point(x, y))
    session.undo_point()

    assert session.close_polygon() is None
    assert session.active_points == (Point(0, 0), Point(10, 0))
    assert len(session.store) == 0


def test_frame_change_finalizes_open_polygon_on_left_frame() -> None:
    session = _session()
    session.seek(0.5)
    left = session.frame_index
    session.click(Point(1, 1))
    session.click(Point(50, 50))

    session.next_frame()

    assert session.frame_index == left + 1
    assert session.active_points == ()
    assert session.shapes == ()
    finalized = session.store.get_shapes_for_frame(left)
    assert len(finalized) == 1
    assert not finalized[0].is_closed


def test_tool_switch_finalizes_polygon() -> None:
    session = _session()
    session.click(Point(1, 1))
    session.set_tool(DrawingTool.RECTANGLE)

    assert session.active_points == ()
    assert session.shapes[0].is_closed is False


def test_disable_drawing_finalizes_and_blocks_clicks() -> None:
    session = _session()
    session.click(Point(1, 1))
    session.set_drawing_enabled(False)

    assert len(session.shapes) == 1
    assert not session.click(Point(5, 5))
    assert session.active_points == ()


def test_select_drag_commits_once() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    session.set_mode(ToolMode.SELECT)

    assert session.begin_drag(Point(20, 20))
    session.drag_to(Point(30, 25))
    session.drag_to(Point(40, 30))
    assert session.shapes[0].x == 30
    # 拖拽过程中 store 尚未改变
    assert session.store.get_shapes_for_frame(0)[0].x == 10

    assert session.end_drag()
    rect = session.shapes[0]
    assert (rect.x, rect.y) == (30, 20)
    assert len(session.store.entry(0).history) == 3


def test_drag_without_motion_commits_nothing() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    session.set_mode(ToolMode.SELECT)

    assert session.begin_drag(Point(20, 20))
    assert not session.end_drag()
    assert len(session.store.entry(0).history) == 2
    assert not session.begin_drag(Point(500, 500))


def test_drag_keeps_polygon_closed_meanwhile() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    session.set_mode(ToolMode.SELECT)

    assert session.begin_drag(Point(10, 10))
    session.drag_to(Point(20, 20))
    for x, y in [(100, 100), (150, 100), (150, 150)]:
        session.builder.add_point(Point(x, y))
    polygon = session.close_polygon()
    assert polygon is not None

    assert session.end_drag()
    shapes = session.store.get_shapes_for_frame(0)
    assert [s.kind for s in shapes] == ["rectangle", "polygon"]
    assert (shapes[0].x, shapes[0].y) == (20, 20)
    assert shapes[1] == polygon


def test_drag_does_not_revive_deleted_shape() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    session.set_mode(ToolMode.SELECT)

    assert session.begin_drag(Point(10, 10))
    session.drag_to(Point(20, 20))
    assert session.delete_selected()

    assert not session.end_drag()
    assert session.shapes == ()
    assert session.store.get_shapes_for_frame(0) == ()


def test_begin_drag_requires_select_mode() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    session.set_tool(DrawingTool.POLYGON)
    session.click(Point(100, 100))
    session.click(Point(150, 100))

    assert not session.begin_drag(Point(20, 20))
    assert not session.is_dragging
    assert session.active_points == (Point(100, 100), Point(150, 100))
    assert len(session.store.entry(0).history) == 2


def test_undo_keeps_polygon_in_progress() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    session.set_tool(DrawingTool.POLYGON)
    session.click(Point(100, 100))
    session.click(Point(150, 100))

    assert session.undo()

    assert session.shapes == ()
    assert session.active_points == (Point(100, 100), Point(150, 100))
    assert session.redo()
    assert len(session.shapes) == 1
    assert len(session.active_points) == 2


def test_undo_clears_selection() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    session.set_mode("select")
    session.click(Point(30, 30))
    assert session.selected_id == session.shapes[0].id

    session.undo()

    assert session.selected_id is None
    assert not session.delete_selected()


def test_relabel_and_delete_selected() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    shape_id = session.shapes[0].id
    assert session.select(shape_id)

    assert session.update_selected(label="truck", color="#0000FF")
    assert session.shapes[0].label == "truck"
    assert session.shapes[0].id == shape_id

    assert session.delete_selected()
    assert session.shapes == ()
    assert session.undo()
    assert session.shapes[0].label == "truck"


def test_select_unknown_id_reports_not_found() -> None:
    session = _session()

    assert not session.select("missing")
    assert session.selected_id is None


def test_copy_paste_and_propagate() -> None:
    session = _session(duration=1.0, fps=10)
    session.go_to_frame(5)
    _draw_rect(session, 10, 10, 60, 60)
    source = session.shapes[0]
    assert not session.paste_to_next()

    session.select(source.id)
    assert session.copy_selected()
    assert session.paste_to_next()
    assert session.paste_to_previous()
    assert session.store.frames() == [4, 5, 6]

    touched = session.propagate_forward()
    assert touched == [6, 7, 8, 9]
    assert len(session.store.get_shapes_for_frame(6)) == 2
    assert all(s.id != source.id for s in session.store.get_shapes_for_frame(9))

    assert session.propagate_backward() == [0, 1, 2, 3, 4]


def test_paste_next_at_last_frame_is_noop() -> None:
    session = _session(duration=1.0, fps=10)
    session.go_to_frame(9)
    _draw_rect(session, 10, 10, 60, 60)
    session.select(session.shapes[0].id)
    session.copy_selected()

    assert not session.paste_to_next()
    assert session.propagate_forward() == []
    assert not session.next_frame()


def test_set_fps_does_not_remap_stored_shapes() -> None:
    session = _session()
    session.seek(1.0)
    _draw_rect(session, 10, 10, 60, 60)
    stored = session.store.get_shapes_for_frame(30)

    assert session.set_fps(25) == 25
    assert session.store.get_shapes_for_frame(30) == stored
    assert session.shapes == ()
    assert session.store.frames() == [30]

    with pytest.raises(InvalidFrameRateError):
        session.set_fps(0)


def test_playback_blocks_edits_and_ticks_frames() -> None:
    session = _session()
    session.click(Point(1, 1))
    session.set_playing(True)

    assert session.active_points == ()
    assert len(session.shapes) == 1
    assert not session.click(Point(20, 20))
    assert session.seek(5.0) == 0
    assert session.tick(2.0) == 60
    assert session.store.get_shapes_for_frame(60) == ()

    session.set_playing(False)
    assert session.seek(0.0) == 0
    assert len(session.shapes) == 1


def test_end_of_video_maps_to_last_frame() -> None:
    session = _session(duration=2.0, fps=30)

    assert session.seek(10.0) == 59
    assert session.current_time == 2.0


def test_clear_frame_and_load_video_reset() -> None:
    session = _session()
    _draw_rect(session, 10, 10, 60, 60)
    session.set_tool(DrawingTool.POLYGON)
    session.click(Point(1, 1))

    assert session.clear_frame()
    assert session.shapes == ()
    assert session.active_points == ()
    assert session.undo()
    assert len(session.shapes) == 1

    session.select(session.shapes[0].id)
    session.copy_selected()
    session.load_video(3.0)
    assert len(session.store) == 0
    assert session.copied_shape is None
    assert session.total_frames == 90


def test_status_snapshot() -> None:
    session = _session()
    status = session.status()

    assert status["frame"] == 0
    assert status["fps"] == 30
    assert status["tool"] == "polygon"
    assert status["can_undo"] is False
