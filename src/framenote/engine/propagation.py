"""把复制的形状粘贴到相邻帧，或沿时间轴批量传播到一段连续帧。

形状按原样复制（每份新 ID），不做任何插值。传播是追加操作，重复调用会
在每帧各追加一份。
"""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from framenote.core import Shape, get_logger, with_new_id

from .history import FrameHistoryStore

logger = get_logger(__name__)


class PropagationDirection(str, Enum):
    FORWARD = "forward"
    BACKWARD = "backward"


def propagation_range(from_frame: int, total_frames: int, direction: PropagationDirection) -> range:
    """前向为 (from_frame, total_frames)，后向为 [0, from_frame)。"""

    if direction is PropagationDirection.FORWARD:
        return range(from_frame + 1, total_frames)
    return range(0, min(from_frame, total_frames))


def propagate(
    store: FrameHistoryStore,
    copied_shape: Optional[Shape],
    from_frame: int,
    total_frames: int,
    direction: PropagationDirection,
) -> List[int]:
    """向范围内每一帧追加一份新副本，每帧各 commit 一次；返回涉及的帧序号。"""

    if copied_shape is None or total_frames <= 0 or from_frame < 0:
        return []
    frames = list(propagation_range(from_frame, total_frames, PropagationDirection(direction)))
    if not frames:
        return []
    store.commit_many({idx: store.get_current_shapes(idx) + (with_new_id(copied_shape),) for idx in frames})
    logger.info(
        "propagated %s '%s' %s from frame %d to %d frames",
        copied_shape.kind,
        copied_shape.label,
        PropagationDirection(direction).value,
        from_frame,
        len(frames),
    )
    return frames


def paste_to_frame(
    store: FrameHistoryStore,
    copied_shape: Optional[Shape],
    target_frame: int,
    total_frames: int,
) -> bool:
    """把副本粘贴到单个目标帧；目标越界或无复制内容时不做任何事。"""

    if copied_shape is None or not 0 <= target_frame < total_frames:
        return False
    store.commit(target_frame, store.get_current_shapes(target_frame) + (with_new_id(copied_shape),))
    return True
