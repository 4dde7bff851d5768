"""文本命令控制台：把一行命令映射到 AnnotationSession 的操作。

控制台只是一个可替换的前端，便于脚本回放与调试；每条命令返回一段要打印的文本。
"""

from __future__ import annotations

import json
import shlex
from typing import Callable, Dict, Iterable, Iterator, List, Sequence

from framenote.core import Point, get_logger, shapes_to_dicts
from framenote.session import AnnotationSession, DrawingTool, ToolMode

logger = get_logger(__name__)

HELP_TEXT = """\
load SECONDS            加载新视频（清空全部标注）
seek SECONDS | tick SECONDS | goto FRAME | next | prev
fps N                   修改帧率（已有标注不重新映射）
play | pause
tool polygon|rectangle|circle
mode draw|select
draw on|off
defaults LABEL [COLOR]  新形状的默认标签/颜色
click X Y | hover X Y
close | undo-point | redo-point
undo | redo | clear
select ID|none | pick X Y | delete
label TEXT | color VALUE
drag X1 Y1 X2 Y2
copy | paste next|prev | propagate forward|backward
show | status | help"""


class ConsoleError(ValueError):
    """命令无法解析或参数不合法。"""


def _float(value: str) -> float:
    try:
        return float(value)
    except ValueError as exc:
        raise ConsoleError(f"需要数字: {value!r}") from exc


def _int(value: str) -> int:
    try:
        return int(value)
    except ValueError as exc:
        raise ConsoleError(f"需要整数: {value!r}") from exc


def _point(args: Sequence[str]) -> Point:
    return Point(_float(args[0]), _float(args[1]))


def _flag(value: str) -> bool:
    lowered = value.lower()
    if lowered in ("on", "true", "1", "yes"):
        return True
    if lowered in ("off", "false", "0", "no"):
        return False
    raise ConsoleError(f"需要 on/off: {value!r}")


def _ok(done: bool) -> str:
    return "ok" if done else "noop"


class SessionConsole:
    """按命令名分派到 session；未知命令或参数个数不符抛出 ConsoleError。"""

    def __init__(self, session: AnnotationSession) -> None:
        self.session = session
        self._commands: Dict[str, tuple[int, Callable[[List[str]], str]]] = {
            "load": (1, lambda a: self._load(_float(a[0]))),
            "seek": (1, lambda a: f"frame {self.session.seek(_float(a[0]))}"),
            "tick": (1, lambda a: f"frame {self.session.tick(_float(a[0]))}"),
            "goto": (1, lambda a: _ok(self.session.go_to_frame(_int(a[0])))),
            "next": (0, lambda a: _ok(self.session.next_frame())),
            "prev": (0, lambda a: _ok(self.session.prev_frame())),
            "fps": (1, self._fps),
            "play": (0, lambda a: self._playing(True)),
            "pause": (0, lambda a: self._playing(False)),
            "tool": (1, self._tool),
            "mode": (1, self._mode),
            "draw": (1, lambda a: self._drawing(_flag(a[0]))),
            "defaults": (-1, self._defaults),
            "click": (2, lambda a: _ok(self.session.click(_point(a)))),
            "hover": (2, lambda a: self._hover(_point(a))),
            "close": (0, self._close),
            "undo-point": (0, lambda a: _ok(self.session.undo_point())),
            "redo-point": (0, lambda a: _ok(self.session.redo_point())),
            "undo": (0, lambda a: _ok(self.session.undo())),
            "redo": (0, lambda a: _ok(self.session.redo())),
            "clear": (0, lambda a: _ok(self.session.clear_frame())),
            "select": (1, self._select),
            "pick": (2, self._pick),
            "delete": (0, lambda a: _ok(self.session.delete_selected())),
            "label": (-1, lambda a: _ok(self.session.update_selected(label=" ".join(a)))),
            "color": (1, lambda a: _ok(self.session.update_selected(color=a[0]))),
            "drag": (4, self._drag),
            "copy": (0, lambda a: _ok(self.session.copy_selected())),
            "paste": (1, self._paste),
            "propagate": (1, self._propagate),
            "show": (0, lambda a: json.dumps(shapes_to_dicts(self.session.shapes), ensure_ascii=False)),
            "status": (0, lambda a: json.dumps(self.session.status(), ensure_ascii=False)),
            "help": (0, lambda a: HELP_TEXT),
        }

    def execute(self, line: str) -> str:
        """执行单行命令；空行与 # 开头的注释行返回空串。"""

        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            return ""
        try:
            # 颜色值形如 #FF0000，不能按 shlex 注释处理
            tokens = shlex.split(stripped)
        except ValueError as exc:
            raise ConsoleError(str(exc)) from exc
        if not tokens:
            return ""
        name, args = tokens[0].lower(), tokens[1:]
        if name not in self._commands:
            raise ConsoleError(f"未知命令: {name}")
        arity, handler = self._commands[name]
        logger.debug("command %s %s", name, args)
        if arity >= 0 and len(args) != arity:
            raise ConsoleError(f"{name} 需要 {arity} 个参数，实际 {len(args)} 个")
        if arity < 0 and not args:
            raise ConsoleError(f"{name} 至少需要 1 个参数")
        try:
            return handler(args)
        except ConsoleError:
            raise
        except ValueError as exc:
            raise ConsoleError(str(exc)) from exc

    def run(self, lines: Iterable[str]) -> Iterator[str]:
        for line in lines:
            output = self.execute(line)
            if output:
                yield output

    def _load(self, duration: float) -> str:
        self.session.load_video(duration)
        return f"loaded {self.session.total_frames} frames"

    def _fps(self, args: List[str]) -> str:
        return f"frame {self.session.set_fps(_int(args[0]))}"

    def _playing(self, playing: bool) -> str:
        self.session.set_playing(playing)
        return "playing" if playing else "paused"

    def _tool(self, args: List[str]) -> str:
        self.session.set_tool(DrawingTool(args[0].lower()))
        return f"tool {self.session.tool.value}"

    def _mode(self, args: List[str]) -> str:
        self.session.set_mode(ToolMode(args[0].lower()))
        return f"mode {self.session.mode.value}"

    def _drawing(self, enabled: bool) -> str:
        self.session.set_drawing_enabled(enabled)
        return "drawing on" if enabled else "drawing off"

    def _defaults(self, args: List[str]) -> str:
        if len(args) > 2:
            raise ConsoleError("defaults 需要 LABEL [COLOR]")
        self.session.set_defaults(label=args[0], color=args[1] if len(args) > 1 else None)
        return f"defaults {self.session.default_label} {self.session.default_color}"

    def _hover(self, point: Point) -> str:
        self.session.pointer_move(point)
        return ""

    def _close(self, args: List[str]) -> str:
        shape = self.session.close_polygon()
        return shape.id if shape is not None else "noop"

    def _select(self, args: List[str]) -> str:
        target = None if args[0].lower() == "none" else args[0]
        return _ok(self.session.select(target))

    def _pick(self, args: List[str]) -> str:
        self.session.set_mode(ToolMode.SELECT)
        self.session.click(_point(args))
        return self.session.selected_id or "none"

    def _drag(self, args: List[str]) -> str:
        start, end = _point(args[:2]), _point(args[2:])
        self.session.set_mode(ToolMode.SELECT)
        if not self.session.begin_drag(start):
            return "noop"
        self.session.drag_to(end)
        return _ok(self.session.end_drag())

    def _paste(self, args: List[str]) -> str:
        where = args[0].lower()
        if where == "next":
            return _ok(self.session.paste_to_next())
        if where in ("prev", "previous"):
            return _ok(self.session.paste_to_previous())
        raise ConsoleError(f"paste 需要 next/prev: {where!r}")

    def _propagate(self, args: List[str]) -> str:
        frames = self.session.propagate(args[0].lower())
        if not frames:
            return "noop"
        return f"propagated to {len(frames)} frames ({frames[0]}..{frames[-1]})"
