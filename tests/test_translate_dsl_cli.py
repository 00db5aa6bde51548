"""
Tests for scripts/translate_dsl.py — argument handling, output and exit codes.
"""

import io
import json

import pytest

from scripts.translate_dsl import main
from tools.base import StudioTool, ToolParameter, ToolResult
from tools.registry import ToolRegistry


@pytest.fixture
def dsl_file(tmp_path):
    path = tmp_path / "song.dsl"
    path.write_text(
        'track(instrument="Serum", name="Bass")\n    .newClip(bar=1, length_bars=8)\n',
        encoding="utf-8",
    )
    return path


@pytest.fixture
def session_file(tmp_path, session_state):
    path = tmp_path / "session.json"
    path.write_text(json.dumps(session_state), encoding="utf-8")
    return path


class TestSuccess:
    def test_translates_file(self, dsl_file, capsys):
        assert main([str(dsl_file)]) == 0

        actions = json.loads(capsys.readouterr().out)
        assert actions == [
            {"action": "create_track", "instrument": "Serum", "name": "Bass", "index": 0},
            {"action": "create_clip_at_bar", "track": 0, "bar": 1, "length_bars": 8},
        ]

    def test_reads_stdin(self, monkeypatch, capsys):
        monkeypatch.setattr("sys.stdin", io.StringIO("track().setMute(mute=true)"))

        assert main([]) == 0
        actions = json.loads(capsys.readouterr().out)
        assert actions[1] == {"action": "set_track_mute", "track": 0, "mute": True}

    def test_single_line_output(self, dsl_file, capsys):
        assert main([str(dsl_file), "--indent", "0"]) == 0
        assert capsys.readouterr().out.count("\n") == 1

    def test_session_file(self, tmp_path, session_file, capsys):
        source = tmp_path / "ref.dsl"
        source.write_text("track(selected=true).setSolo(solo=true)", encoding="utf-8")

        assert main([str(source), "--session", str(session_file)]) == 0
        actions = json.loads(capsys.readouterr().out)
        assert actions == [{"action": "set_track_solo", "track": 1, "solo": True}]

    def test_lenient_flag(self, tmp_path, capsys):
        source = tmp_path / "tempo.dsl"
        source.write_text("track().setTempo(bpm=128)", encoding="utf-8")

        assert main([str(source), "--lenient"]) == 0
        assert len(json.loads(capsys.readouterr().out)) == 1

    def test_env_config(self, monkeypatch, tmp_path, capsys):
        monkeypatch.setenv("DSL_DEFAULT_LENGTH_BARS", "16")
        source = tmp_path / "clip.dsl"
        source.write_text("track().newClip(bar=2)", encoding="utf-8")

        assert main([str(source)]) == 0
        assert json.loads(capsys.readouterr().out)[1]["length_bars"] == 16


class TestFailures:
    def test_dsl_error_exit_1(self, tmp_path, capsys):
        source = tmp_path / "bad.dsl"
        source.write_text(".newClip(bar=3)", encoding="utf-8")

        assert main([str(source)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert "DSL error [syntax_error]" in captured.err

    def test_unknown_operation_strict_exit_1(self, tmp_path, capsys):
        source = tmp_path / "tempo.dsl"
        source.write_text("track().setTempo(bpm=128)", encoding="utf-8")

        assert main([str(source)]) == 1
        assert "unknown operation setTempo" in capsys.readouterr().err

    def test_missing_source_exit_2(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.dsl")]) == 2
        assert "Cannot read" in capsys.readouterr().err

    def test_invalid_session_json_exit_2(self, dsl_file, tmp_path, capsys):
        session = tmp_path / "session.json"
        session.write_text("{not json", encoding="utf-8")

        assert main([str(dsl_file), "--session", str(session)]) == 2
        assert "Invalid session file" in capsys.readouterr().err

    def test_invalid_session_shape_exit_2(self, dsl_file, tmp_path, capsys):
        session = tmp_path / "session.json"
        session.write_text(json.dumps({"tracks": "Bass"}), encoding="utf-8")

        assert main([str(dsl_file), "--session", str(session)]) == 2

    def test_bad_env_exit_2(self, monkeypatch, dsl_file, capsys):
        monkeypatch.setenv("DSL_STRICT_OPERATIONS", "sometimes")

        assert main([str(dsl_file)]) == 2
        assert "Invalid configuration" in capsys.readouterr().err

    def test_session_not_an_object_exit_2(self, dsl_file, tmp_path, capsys):
        session = tmp_path / "session.json"
        session.write_text(json.dumps(["Bass"]), encoding="utf-8")

        assert main([str(dsl_file), "--session", str(session)]) == 2
        assert "expected a JSON object" in capsys.readouterr().err

    def test_oversized_number_exit_1(self, tmp_path, capsys):
        source = tmp_path / "huge.dsl"
        source.write_text("track().newClip(bar=" + "1" * 5000 + ")", encoding="utf-8")

        assert main([str(source)]) == 1
        assert "DSL error [missing_required_parameter]" in capsys.readouterr().err


class TestLenientLeadingChain:
    def test_applies_to_selected_track(self, tmp_path, session_file, capsys):
        source = tmp_path / "mute.dsl"
        source.write_text(".setMute(mute=true)", encoding="utf-8")

        assert main([str(source), "--session", str(session_file), "--lenient"]) == 0
        actions = json.loads(capsys.readouterr().out)
        assert actions == [{"action": "set_track_mute", "track": 1, "mute": True}]

    def test_no_selection_exit_1(self, tmp_path, capsys):
        source = tmp_path / "mute.dsl"
        source.write_text(".setMute(mute=true)", encoding="utf-8")

        assert main([str(source), "--lenient"]) == 1
        assert "DSL error [no_track_context]" in capsys.readouterr().err


class RecordingTool(StudioTool):
    """Stands in for translate_dsl and records what the CLI passes."""

    def __init__(self):
        self.calls: list[dict] = []

    @property
    def name(self) -> str:
        return "translate_dsl"

    @property
    def description(self) -> str:
        return "Records calls"

    @property
    def parameters(self) -> list[ToolParameter]:
        return [
            ToolParameter(name="dsl_code", type=str, description="DSL program"),
            ToolParameter(name="session", type=dict, description="State", required=False),
            ToolParameter(name="lenient", type=bool, description="Lenient", required=False),
        ]

    def execute(self, **kwargs) -> ToolResult:
        self.calls.append(kwargs)
        return ToolResult(success=True, data={"actions": [{"action": "noop"}]})


class TestRegistryDispatch:
    @pytest.fixture
    def recording_tool(self, monkeypatch):
        tool = RecordingTool()
        registry = ToolRegistry()
        registry.register(tool)
        monkeypatch.setattr("scripts.translate_dsl.get_registry", lambda: registry)
        return tool

    def test_translation_goes_through_registered_tool(
        self, recording_tool, dsl_file, session_file, session_state, capsys
    ):
        assert main([str(dsl_file), "--session", str(session_file), "--lenient"]) == 0

        assert json.loads(capsys.readouterr().out) == [{"action": "noop"}]
        (call,) = recording_tool.calls
        assert call["dsl_code"].startswith('track(instrument="Serum"')
        assert call["session"] == session_state
        assert call["lenient"] is True

    def test_no_session_flag_omits_session(self, recording_tool, dsl_file, capsys):
        assert main([str(dsl_file)]) == 0
        assert "session" not in recording_tool.calls[0]
        assert recording_tool.calls[0]["lenient"] is False
