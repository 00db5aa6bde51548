"""
Tests for tools/studio/translate_dsl.py — the translate_dsl tool.

Tests cover:
    - Tool contract (name, parameters, serialisation)
    - Successful translation with and without session state
    - DSL errors and invalid session payloads reported as failed results
"""

from core.config import LENIENT_CONFIG
from tools.studio.translate_dsl import TranslateDSL


class TestTranslateDSLProperties:
    def test_name(self):
        assert TranslateDSL().name == "translate_dsl"

    def test_description_mentions_operations(self):
        description = TranslateDSL().description
        assert "newClip" in description
        assert "selected=true" in description

    def test_parameters(self):
        params = {p.name: p for p in TranslateDSL().parameters}
        assert params["dsl_code"].required is True
        assert params["dsl_code"].type is str
        assert params["session"].required is False
        assert params["session"].type is dict
        assert params["lenient"].type is bool
        assert params["lenient"].default is False

    def test_to_dict(self):
        schema = TranslateDSL().to_dict()["input_schema"]
        assert schema["required"] == ["dsl_code"]
        assert schema["properties"]["session"]["type"] == "object"
        assert schema["properties"]["lenient"] == {
            "type": "boolean",
            "description": TranslateDSL().parameters[2].description,
            "default": False,
        }


class TestTranslateDSLSuccess:
    def test_translates_program(self):
        result = TranslateDSL()(dsl_code='track(instrument="Serum").newClip(bar=3)')

        assert result.success is True
        assert result.data == {
            "actions": [
                {"action": "create_track", "instrument": "Serum", "index": 0},
                {"action": "create_clip_at_bar", "track": 0, "bar": 3, "length_bars": 4},
            ]
        }
        assert result.metadata == {"action_count": 2, "created_tracks": 1, "session_tracks": 0}

    def test_uses_session_state(self, session_state):
        result = TranslateDSL()(
            dsl_code="track(selected=true).setVolume(volume_db=-6)", session=session_state
        )

        assert result.success is True
        assert result.data["actions"] == [
            {"action": "set_track_volume", "track": 1, "volume_db": -6.0}
        ]
        assert result.metadata["created_tracks"] == 0
        assert result.metadata["session_tracks"] == 3

    def test_each_call_starts_numbering_at_zero(self):
        tool = TranslateDSL()
        tool(dsl_code="track() track()")
        result = tool(dsl_code="track()")
        assert result.data["actions"][0]["index"] == 0

    def test_lenient_config(self):
        result = TranslateDSL(LENIENT_CONFIG)(dsl_code="track().setTempo(bpm=120)")
        assert result.success is True
        assert result.metadata["action_count"] == 1

    def test_lenient_parameter(self):
        result = TranslateDSL()(dsl_code="track().setTempo(bpm=120)", lenient=True)
        assert result.success is True
        assert result.metadata["action_count"] == 1

    def test_lenient_leading_chain_targets_selected_track(self, session_state):
        result = TranslateDSL()(
            dsl_code=".setSolo(solo=true)", session=session_state, lenient=True
        )
        assert result.data["actions"] == [{"action": "set_track_solo", "track": 1, "solo": True}]

    def test_reads_environment_on_each_call(self, monkeypatch):
        tool = TranslateDSL()
        assert tool(dsl_code="track().newClip(bar=1)").data["actions"][1]["length_bars"] == 4

        monkeypatch.setenv("DSL_DEFAULT_LENGTH_BARS", "16")
        assert tool(dsl_code="track().newClip(bar=1)").data["actions"][1]["length_bars"] == 16

    def test_explicit_config_ignores_environment(self, monkeypatch):
        monkeypatch.setenv("DSL_STRICT_OPERATIONS", "true")
        result = TranslateDSL(LENIENT_CONFIG)(dsl_code="track().setTempo(bpm=120)")
        assert result.success is True


class TestTranslateDSLErrors:
    def test_missing_dsl_code(self):
        result = TranslateDSL()()
        assert result.success is False
        assert "dsl_code" in result.error

    def test_empty_code(self):
        result = TranslateDSL()(dsl_code="   ")
        assert result.success is False
        assert result.metadata["error_kind"] == "empty_input"

    def test_syntax_error(self):
        result = TranslateDSL()(dsl_code=".newClip(bar=3)")
        assert result.success is False
        assert result.metadata == {"error_kind": "syntax_error", "statement_index": 0}
        assert "track(...)" in result.error

    def test_unresolved_selection(self):
        result = TranslateDSL()(
            dsl_code="track(selected=true).setMute(mute=true)",
            session={"tracks": [{"name": "Drums"}]},
        )
        assert result.success is False
        assert result.metadata["error_kind"] == "unresolved_selection"

    def test_missing_parameter_reports_statement(self):
        result = TranslateDSL()(dsl_code="track() track().setPan()")
        assert result.success is False
        assert result.metadata["error_kind"] == "missing_required_parameter"
        assert result.metadata["statement_index"] == 1

    def test_invalid_session(self):
        result = TranslateDSL()(dsl_code="track()", session={"tracks": "Bass"})
        assert result.success is False
        assert result.error.startswith("Invalid session state")
        assert result.metadata == {"error_kind": "invalid_session"}

    def test_session_wrong_type(self):
        result = TranslateDSL()(dsl_code="track()", session=["Bass"])
        assert result.success is False
        assert result.error_kind == "invalid_input"
        assert "must be object" in result.error

    def test_unknown_keyword(self):
        result = TranslateDSL()(dsl_code="track()", strict=False)
        assert result.error_kind == "invalid_input"

    def test_invalid_environment(self, monkeypatch):
        monkeypatch.setenv("DSL_DEFAULT_NOTE_VELOCITY", "loud")
        result = TranslateDSL()(dsl_code="track()")
        assert result.success is False
        assert result.error_kind == "invalid_config"
        assert "DSL_DEFAULT_NOTE_VELOCITY" in result.error

    def test_oversized_number_reported(self):
        result = TranslateDSL()(dsl_code="track().newClip(bar=" + "1" * 5000 + ")")
        assert result.success is False
        assert result.error_kind == "missing_required_parameter"
