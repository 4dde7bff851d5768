"""播放时间与帧序号之间的换算。

帧率可以在运行时修改，修改只影响之后的换算，已存储的标注不会被重新映射：
改帧率之后，原先画在第 N 帧的形状会出现在另一个时间点上。
"""

from __future__ import annotations

import math

# 相对误差容限：只吸收乘法舍入（如 29.999999999999996），不吞掉真实的小数部分
_RELATIVE_TOLERANCE = 1e-9


def _floor_product(seconds: float, fps: int) -> int:
    value = seconds * fps
    nearest = round(value)
    if abs(value - nearest) <= _RELATIVE_TOLERANCE * max(1.0, abs(value)):
        return int(nearest)
    return int(math.floor(value))


class InvalidFrameRateError(ValueError):
    """帧率不是正整数时抛出。"""


def validate_fps(fps: int) -> int:
    if isinstance(fps, bool) or not isinstance(fps, int) or fps <= 0:
        raise InvalidFrameRateError(f"fps 必须为正整数: {fps!r}")
    return fps


def frame_index(time: float, fps: int) -> int:
    """floor(time * fps)，time 为秒。"""

    validate_fps(fps)
    if time < 0:
        raise ValueError(f"time 不能为负: {time}")
    return _floor_product(time, fps)


def frame_time(index: int, fps: int) -> float:
    """帧起始时间（秒），frame_index(frame_time(n)) == n。"""

    validate_fps(fps)
    if index < 0:
        raise ValueError(f"frame index 不能为负: {index}")
    return index / fps


def total_frames(duration: float, fps: int) -> int:
    """视频总帧数，duration 为 0 时返回 0。"""

    validate_fps(fps)
    if duration <= 0:
        return 0
    return _floor_product(duration, fps)
