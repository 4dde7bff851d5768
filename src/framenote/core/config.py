"""配置加载工具，集中管理帧率、默认标签/颜色与绘制阈值。"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, MutableMapping, Sequence, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

CONFIG_ENV_KEY = "FRAMENOTE_CONFIG_PATH"


class SessionConfig(BaseModel):
    """会话级参数：默认帧率与视频时长（未加载视频时为 0）。"""

    fps: int = 30
    duration_seconds: float = 0.0

    @field_validator("fps")
    @classmethod
    def _fps_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("fps 必须为正整数")
        return value

    @field_validator("duration_seconds")
    @classmethod
    def _duration_non_negative(cls, value: float) -> float:
        if value < 0:
            raise ValueError("duration_seconds 不能为负")
        return value


class DrawingConfig(BaseModel):
    """绘制参数，阈值单位均为视频原生像素。"""

    default_label: str = "object"
    default_color: str = "#FF0000"
    min_shape_size: float = 5.0
    min_circle_radius: float = 5.0
    close_snap_distance: float = 10.0

    @field_validator("default_label")
    @classmethod
    def _label_not_empty(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("default_label 不能为空")
        return value


class AnnotatorConfig(BaseModel):
    """聚合各部分配置。"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    session: SessionConfig = Field(default_factory=SessionConfig)
    drawing: DrawingConfig = Field(default_factory=DrawingConfig)
    raw: Dict[str, Any] = Field(default_factory=dict, description="原始配置字典，便于调试。")

    def model_post_init(self, __context: Any) -> None:  # type: ignore[override]
        # 保留原始配置便于日志输出
        if not self.raw:
            self.raw = self.to_raw_dict()

    def to_raw_dict(self) -> Dict[str, Any]:
        """导出基础 dict，供日志使用。"""

        return {
            "session": self.session.model_dump(),
            "drawing": self.drawing.model_dump(),
        }


def _default_config_path() -> Path:
    return Path(__file__).resolve().parents[3] / "configs" / "baseline.yaml"


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise ValueError(f"配置文件 {path} 内容需为字典")
        return data


ENV_OVERRIDE_MAP: Dict[str, Tuple[Sequence[str], Callable[[str], Any]]] = {
    "FRAMENOTE_FPS": (("session", "fps"), int),
    "FRAMENOTE_DEFAULT_LABEL": (("drawing", "default_label"), str),
    "FRAMENOTE_DEFAULT_COLOR": (("drawing", "default_color"), str),
}


def _apply_env_overrides(data: MutableMapping[str, Any], env: Mapping[str, str]) -> None:
    for env_key, (path, caster) in ENV_OVERRIDE_MAP.items():
        if env_key in env:
            _set_nested_value(data, path, caster(env[env_key]))


def _set_nested_value(target: MutableMapping[str, Any], path: Sequence[str], value: Any) -> None:
    cursor: MutableMapping[str, Any] = target
    *parents, last = path
    for key in parents:
        if key not in cursor or not isinstance(cursor[key], MutableMapping):
            cursor[key] = {}
        cursor = cursor[key]  # type: ignore[assignment]
    cursor[last] = value


def load_config(path: str | Path | None = None, *, env: Mapping[str, str] | None = None) -> AnnotatorConfig:
    """加载配置：优先显式路径，其次环境变量，最后回退默认 baseline。"""

    env_map = os.environ if env is None else env
    config_path = path or env_map.get(CONFIG_ENV_KEY)
    target_path = Path(config_path).expanduser() if config_path else _default_config_path()
    data = _load_yaml(target_path)
    _apply_env_overrides(data, env_map)

    return AnnotatorConfig.model_validate({**data, "raw": data})
