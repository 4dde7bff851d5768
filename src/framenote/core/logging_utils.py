"""日志工具：handler 只挂在 framenote 包 logger 上，不改动宿主程序的 root logger。

引擎（历史栈、多边形构建、传播）的日志量远大于会话层，所以 framenote.engine
可以单独设置级别，例如 CLI 保持 WARNING、只把引擎打开到 DEBUG 来追踪 commit/undo。
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

PACKAGE_LOGGER = "framenote"
ENGINE_LOGGER = "framenote.engine"
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

_HANDLER_NAME = "framenote-console"


def parse_level(level: str) -> int:
    """日志级别名转数值，大小写不敏感；未知名称抛 ValueError。"""

    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"未知日志级别: {level!r}")
    return value


def setup_logging(
    level: str = "INFO",
    *,
    engine_level: Optional[str] = None,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """配置包 logger 并返回它；重复调用会替换旧 handler，不会重复输出。

    engine_level 为 None 时引擎沿用包级别。stream 缺省为调用时的 sys.stderr。
    """

    package_level = parse_level(level)
    engine_value = parse_level(engine_level) if engine_level is not None else logging.NOTSET

    package_logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in list(package_logger.handlers):
        if handler.get_name() == _HANDLER_NAME:
            package_logger.removeHandler(handler)

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    package_logger.addHandler(handler)
    package_logger.setLevel(package_level)
    logging.getLogger(ENGINE_LOGGER).setLevel(engine_value)
    return package_logger


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """获取模块专属 logger；不在 framenote 命名空间下的名字会被挂到包 logger 之下。"""

    if not name:
        return logging.getLogger(PACKAGE_LOGGER)
    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)
