"""
Tests for tool registry and auto-discovery.
"""

import pytest

from tools.base import StudioTool, ToolParameter, ToolResult
from tools.registry import ToolRegistry, get_registry
from tools.studio.translate_dsl import TranslateDSL


class StubTool(StudioTool):
    """Minimal tool used to exercise registration."""

    @property
    def name(self) -> str:
        return "stub_tool"

    @property
    def description(self) -> str:
        return "Stub"

    @property
    def parameters(self) -> list[ToolParameter]:
        return []

    def execute(self, **kwargs) -> ToolResult:
        return ToolResult(success=True)


class TestToolRegistry:
    """Test ToolRegistry registration and lookup."""

    def test_register_and_get(self):
        registry = ToolRegistry()
        tool = StubTool()
        registry.register(tool)

        assert registry.get("stub_tool") is tool
        assert "stub_tool" in registry
        assert len(registry) == 1

    def test_register_duplicate_raises(self):
        registry = ToolRegistry()
        registry.register(StubTool())

        with pytest.raises(ValueError, match="already registered"):
            registry.register(StubTool())

    def test_get_unknown_returns_none(self):
        assert ToolRegistry().get("translate_dsl") is None

    def test_require_returns_tool(self):
        registry = ToolRegistry()
        tool = StubTool()
        registry.register(tool)
        assert registry.require("stub_tool") is tool

    def test_require_unknown_lists_available(self):
        registry = ToolRegistry()
        registry.register(StubTool())
        with pytest.raises(KeyError, match=r"translate_dsl.*available: stub_tool"):
            registry.require("translate_dsl")

    def test_list_tools(self):
        registry = ToolRegistry()
        registry.register(StubTool())
        registry.register(TranslateDSL())

        names = sorted(t["name"] for t in registry.list_tools())
        assert names == ["stub_tool", "translate_dsl"]


class TestToolRegistryDiscovery:
    """Test auto-discovery of tools."""

    def test_discover_finds_translate_dsl(self):
        registry = ToolRegistry()

        count = registry.discover("tools")

        assert count >= 1
        assert "translate_dsl" in registry
        assert isinstance(registry.get("translate_dsl"), TranslateDSL)

    def test_discover_skips_abstract_base(self):
        registry = ToolRegistry()
        registry.discover("tools")

        assert all(t["name"] for t in registry.list_tools())

    def test_discover_nonexistent_package(self):
        registry = ToolRegistry()

        assert registry.discover("nonexistent_package") == 0
        assert len(registry) == 0

    def test_global_registry_is_singleton(self):
        assert get_registry() is get_registry()
        assert "translate_dsl" in get_registry()

    def test_discovered_tool_translates(self):
        tool = get_registry().require("translate_dsl")
        result = tool(dsl_code="track(id=1).setMute(mute=true)")
        assert result.data["actions"] == [{"action": "set_track_mute", "track": 0, "mute": True}]

    def test_discovered_tools_describe_schema(self):
        registry = ToolRegistry()
        registry.discover("tools")
        (entry,) = [t for t in registry.list_tools() if t["name"] == "translate_dsl"]
        assert entry["input_schema"]["required"] == ["dsl_code"]
