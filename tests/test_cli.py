"""CLI 与控制台行为测试。"""

import json

import pytest
from typer.testing import CliRunner

from framenote.cli import app
from framenote.console import ConsoleError, SessionConsole
from framenote.core import AnnotatorConfig
from framenote.session import AnnotationSession

runner = CliRunner()


def test_frame_index_cli() -> None:
    result = runner.invoke(app, ["frame-index", "1.0", "--fps", "30"])

    assert result.exit_code == 0
    assert result.output.strip() == "30"


def test_frame_index_cli_uses_config_fps(monkeypatch) -> None:
    monkeypatch.setattr(
        "framenote.cli.load_config",
        lambda *_, **__: AnnotatorConfig.model_validate({"session": {"fps": 24}}),
    )

    result = runner.invoke(app, ["frame-index", "2.0"])

    assert result.exit_code == 0
    assert result.output.strip() == "48"


def test_session_cli_runs_script(monkeypatch, tmp_path) -> None:
    monkeypatch.setattr("framenote.cli.load_config", lambda *_, **__: AnnotatorConfig())
    script = tmp_path / "edit.txt"
    script.write_text(
        "\n".join(
            [
                "# 在 1 秒处画一个矩形",
                "seek 1.0",
                "draw on",
                "tool rectangle",
                "defaults car #FF0000",
                "click 10 10",
                "click 60 60",
                "show",
                "undo",
                "show",
            ]
        ),
        encoding="utf-8",
    )

    result = runner.invoke(app, ["session", str(script), "--duration", "5"])

    assert result.exit_code == 0
    json_lines = [line for line in result.output.splitlines() if line.startswith("[")]
    first, second = (json.loads(line) for line in json_lines)
    assert first[0]["type"] == "rectangle"
    assert first[0]["label"] == "car"
    assert first[0]["width"] == 50
    assert second == []


def test_session_cli_reads_stdin_and_reports_errors(monkeypatch) -> None:
    monkeypatch.setattr("framenote.cli.load_config", lambda *_, **__: AnnotatorConfig())

    result = runner.invoke(app, ["session", "--duration", "1"], input="bogus\nstatus\n")

    assert result.exit_code == 0
    assert '"total_frames": 30' in result.output


def test_session_cli_strict_exits_on_error(monkeypatch) -> None:
    monkeypatch.setattr("framenote.cli.load_config", lambda *_, **__: AnnotatorConfig())

    result = runner.invoke(app, ["session", "--strict"], input="fps 0\nstatus\n")

    assert result.exit_code == 1
    assert "total_frames" not in result.output


def test_console_polygon_and_propagate() -> None:
    console = SessionConsole(AnnotationSession(AnnotatorConfig()))
    outputs = list(
        console.run(
            [
                "load 1",
                "goto 28",
                "draw on",
                "click 0 0",
                "click 100 0",
                "click 100 100",
                "close",
                "pick 90 10",
                "copy",
                "propagate forward",
                "propagate forward",
            ]
        )
    )

    assert outputs[0] == "loaded 30 frames"
    # 传播是追加操作，重复执行会再追加一份
    assert outputs[-2] == outputs[-1] == "propagated to 1 frames (29..29)"
    assert len(console.session.store.get_shapes_for_frame(29)) == 2


@pytest.mark.parametrize("line", ["frobnicate", "seek", "click 1", "tool hexagon", "draw maybe", "paste sideways"])
def test_console_rejects_bad_commands(line) -> None:
    console = SessionConsole(AnnotationSession(AnnotatorConfig()))

    with pytest.raises(ConsoleError):
        console.execute(line)


def test_session_cli_rejects_unknown_log_level(monkeypatch) -> None:
    monkeypatch.setattr("framenote.cli.load_config", lambda *_, **__: AnnotatorConfig())

    result = runner.invoke(app, ["session", "--engine-log-level", "loud"], input="status\n")

    assert result.exit_code == 2
    assert "total_frames" not in result.output


def test_console_drag_switches_to_select_mode() -> None:
    console = SessionConsole(AnnotationSession(AnnotatorConfig()))
    outputs = list(
        console.run(["load 1", "draw on", "tool rectangle", "click 10 10", "click 60 60", "drag 20 20 30 35"])
    )

    assert outputs[-1] == "ok"
    rect = console.session.shapes[0]
    assert (rect.x, rect.y) == (20, 25)
    assert console.session.mode.value == "select"
