from __future__ import annotations

# 本模块负责：
# 1) 按帧序号维护互相独立的形状集合快照历史；
# 2) commit 是唯一写入口：截断 redo 尾部后追加新快照；
# 3) undo/redo 只移动游标，不删除任何快照。
# 条目在第一次写入时才创建，单纯拖动进度条经过的帧不会留下记录。

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from framenote.core import Shape, get_logger

logger = get_logger(__name__)

ShapeSet = Tuple[Shape, ...]


def _check_frame(frame_index: int) -> None:
    if frame_index < 0:
        raise ValueError(f"frame index 不能为负: {frame_index}")


@dataclass(slots=True)
class FrameHistoryEntry:
    """单帧的快照历史。

    - history: 快照列表，history[0] 恒为空集合（条目诞生状态）。
    - current_index: 当前生效快照的下标，0 <= current_index < len(history)。
    """

    history: List[ShapeSet] = field(default_factory=lambda: [()])
    current_index: int = 0

    @property
    def current(self) -> ShapeSet:
        return self.history[self.current_index]

    @property
    def can_undo(self) -> bool:
        return self.current_index > 0

    @property
    def can_redo(self) -> bool:
        return self.current_index < len(self.history) - 1

    def push(self, shapes: Sequence[Shape]) -> None:
        del self.history[self.current_index + 1 :]
        self.history.append(tuple(shapes))
        self.current_index = len(self.history) - 1


class FrameHistoryStore:
    """帧序号 -> FrameHistoryEntry 的映射，是所有已提交形状的唯一持有者。

    一个视频会话对应一个 store，加载新视频时调用 reset() 整体丢弃。
    """

    def __init__(self) -> None:
        self._entries: Dict[int, FrameHistoryEntry] = {}

    def __contains__(self, frame_index: object) -> bool:
        return frame_index in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[int]:
        return iter(sorted(self._entries))

    def entry(self, frame_index: int) -> Optional[FrameHistoryEntry]:
        return self._entries.get(frame_index)

    def frames(self) -> List[int]:
        """当前快照非空的帧序号（升序）。"""

        return sorted(idx for idx, entry in self._entries.items() if entry.current)

    def get_current_shapes(self, frame_index: int) -> ShapeSet:
        _check_frame(frame_index)
        entry = self._entries.get(frame_index)
        if entry is None:
            return ()
        return entry.current

    def commit(self, frame_index: int, shapes: Iterable[Shape]) -> None:
        _check_frame(frame_index)
        snapshot = tuple(shapes)
        entry = self._entries.get(frame_index)
        if entry is None:
            entry = FrameHistoryEntry()
            self._entries[frame_index] = entry
        entry.push(snapshot)
        logger.debug("commit frame=%d shapes=%d depth=%d", frame_index, len(snapshot), len(entry.history))

    def commit_many(self, snapshots: Mapping[int, Iterable[Shape]]) -> None:
        """一次性为多个帧各提交一次；先校验全部帧序号再写入。"""

        materialized = {idx: tuple(shapes) for idx, shapes in snapshots.items()}
        for idx in materialized:
            _check_frame(idx)
        for idx in sorted(materialized):
            self.commit(idx, materialized[idx])

    def undo(self, frame_index: int) -> bool:
        _check_frame(frame_index)
        entry = self._entries.get(frame_index)
        if entry is None or not entry.can_undo:
            return False
        entry.current_index -= 1
        logger.debug("undo frame=%d index=%d", frame_index, entry.current_index)
        return True

    def redo(self, frame_index: int) -> bool:
        _check_frame(frame_index)
        entry = self._entries.get(frame_index)
        if entry is None or not entry.can_redo:
            return False
        entry.current_index += 1
        logger.debug("redo frame=%d index=%d", frame_index, entry.current_index)
        return True

    def clear(self, frame_index: int) -> None:
        self.commit(frame_index, ())

    def can_undo(self, frame_index: int) -> bool:
        entry = self._entries.get(frame_index)
        return entry is not None and entry.can_undo

    def can_redo(self, frame_index: int) -> bool:
        entry = self._entries.get(frame_index)
        return entry is not None and entry.can_redo

    def reset(self) -> None:
        self._entries = {}
        logger.debug("store reset")

    # 对外接口别名
    get_shapes_for_frame = get_current_shapes
    commit_shapes = commit
    clear_frame = clear
