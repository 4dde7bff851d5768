"""FrameNote Typer CLI：帧序号换算与交互式标注控制台。"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Iterable, Optional

import typer

from framenote.console import ConsoleError, SessionConsole
from framenote.core import AnnotatorConfig, get_logger, load_config, setup_logging
from framenote.engine import InvalidFrameRateError, frame_index
from framenote.session import AnnotationSession

app = typer.Typer(help="FrameNote 逐帧标注 CLI")
logger = get_logger("framenote.cli")


@app.callback()
def main() -> None:
    """FrameNote 顶层 CLI，占位以展示子命令列表。"""

    return None


def _resolve_config(config_path: Optional[Path]) -> AnnotatorConfig:
    return load_config(config_path) if config_path else load_config()


@app.command("frame-index")
def frame_index_cmd(
    time: float = typer.Argument(..., min=0.0, help="播放时间（秒）"),
    fps: Optional[int] = typer.Option(None, "--fps", help="帧率，默认读取配置"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="自定义配置文件"),
) -> None:
    """输出 floor(time * fps)。"""

    rate = fps if fps is not None else _resolve_config(config_path).session.fps
    try:
        typer.echo(str(frame_index(time, rate)))
    except InvalidFrameRateError as exc:
        raise typer.BadParameter(str(exc), param_hint="fps") from exc


def _iter_lines(script: Optional[Path]) -> Iterable[str]:
    if script is not None:
        return script.read_text(encoding="utf-8").splitlines()
    return sys.stdin


@app.command("session")
def session_cmd(
    script: Optional[Path] = typer.Argument(None, exists=True, dir_okay=False, resolve_path=True, help="命令脚本，缺省读取标准输入"),
    duration: Optional[float] = typer.Option(None, "--duration", min=0.0, help="视频时长（秒），覆盖配置"),
    fps: Optional[int] = typer.Option(None, "--fps", help="帧率，覆盖配置"),
    config_path: Optional[Path] = typer.Option(None, "--config", help="自定义配置文件"),
    strict: bool = typer.Option(False, "--strict", help="遇到错误命令立即退出"),
    log_level: str = typer.Option("WARNING", "--log-level", help="日志级别"),
    engine_log_level: Optional[str] = typer.Option(None, "--engine-log-level", help="引擎（历史/多边形/传播）日志级别，缺省同 --log-level"),
) -> None:
    """运行标注控制台，逐行执行命令并打印结果。"""

    try:
        setup_logging(log_level, engine_level=engine_log_level)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="log-level") from exc
    cfg = _resolve_config(config_path)
    session_updates = {}
    if duration is not None:
        session_updates["duration_seconds"] = duration
    if fps is not None:
        session_updates["fps"] = fps
    if session_updates:
        # 通过 model_validate 复用字段校验
        merged = {**cfg.session.model_dump(), **session_updates}
        cfg = cfg.model_copy(update={"session": type(cfg.session).model_validate(merged)})

    session = AnnotationSession(cfg)
    if cfg.session.duration_seconds > 0:
        session.load_video(cfg.session.duration_seconds)
    console = SessionConsole(session)

    errors = 0
    for number, line in enumerate(_iter_lines(script), start=1):
        try:
            output = console.execute(line)
        except ConsoleError as exc:
            errors += 1
            typer.echo(f"line {number}: {exc}", err=True)
            if strict:
                raise typer.Exit(code=1) from exc
            continue
        if output:
            typer.echo(output)
    logger.info("session finished, %d error(s)", errors)


if __name__ == "__main__":  # pragma: no cover
    app()
