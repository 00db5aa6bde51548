"""
Tool registry with automatic discovery.

The registry discovers all StudioTool subclasses and provides
lookup by name. No hardcoding — tools register themselves.
"""

import importlib
import inspect
import logging
import pkgutil

from tools.base import StudioTool

logger = logging.getLogger(__name__)


class ToolRegistry:
    """
    Registry for all studio tools with automatic discovery.

    Tools are discovered by scanning the tools/ package tree for
    StudioTool subclasses. No manual registration required.

    Usage:
        registry = ToolRegistry()
        registry.discover()

        tool = registry.require("translate_dsl")
        result = tool(dsl_code='track(instrument="Serum").newClip(bar=1)')

    scripts/translate_dsl.py goes through the global instance from
    :func:`get_registry`.
    """

    def __init__(self):
        self._tools: dict[str, StudioTool] = {}

    def register(self, tool: StudioTool) -> None:
        """
        Register a tool instance.

        Args:
            tool: StudioTool instance to register

        Raises:
            ValueError: If tool with same name already registered
        """
        if tool.name in self._tools:
            raise ValueError(f"Tool '{tool.name}' is already registered")

        self._tools[tool.name] = tool

    def get(self, name: str) -> StudioTool | None:
        """
        Get tool by name.

        Args:
            name: Tool name

        Returns:
            StudioTool instance or None if not found
        """
        return self._tools.get(name)

    def require(self, name: str) -> StudioTool:
        """
        Get tool by name, failing loudly when it is absent.

        Raises:
            KeyError: If no tool with that name is registered; the message
                lists the available names.
        """
        tool = self._tools.get(name)
        if tool is None:
            available = ", ".join(sorted(self._tools)) or "none"
            raise KeyError(f"Tool '{name}' not found in registry (available: {available})")
        return tool

    def list_tools(self) -> list[dict]:
        """
        List all registered tools.

        Returns:
            List of tool dicts (name, description, input_schema)
        """
        return [tool.to_dict() for tool in self._tools.values()]

    def discover(self, package_name: str = "tools") -> int:
        """
        Auto-discover all StudioTool subclasses in package.

        Walks every module below ``package_name`` and registers each concrete
        StudioTool subclass it defines.  Classes merely imported into a
        module are skipped so a tool is never registered twice.

        Args:
            package_name: Package to scan (default: "tools")

        Returns:
            Number of tools discovered
        """
        try:
            package = importlib.import_module(package_name)
        except ImportError:
            return 0

        if not hasattr(package, "__path__"):
            return 0

        count = 0
        for _finder, module_name, _is_pkg in pkgutil.walk_packages(
            list(package.__path__), prefix=f"{package_name}."
        ):
            try:
                module = importlib.import_module(module_name)
            except ImportError as exc:
                logger.warning("ToolRegistry: skipping %s (%s)", module_name, exc)
                continue

            for _name, obj in inspect.getmembers(module, inspect.isclass):
                if obj is StudioTool or obj.__module__ != module.__name__:
                    continue
                if issubclass(obj, StudioTool) and not inspect.isabstract(obj):
                    self.register(obj())
                    count += 1

        return count

    def __len__(self) -> int:
        """Return number of registered tools."""
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        """Check if tool is registered."""
        return name in self._tools


# Global registry instance
_registry: ToolRegistry | None = None


def get_registry() -> ToolRegistry:
    """
    Get global tool registry singleton.

    Auto-discovers tools on first call.

    Returns:
        Initialized ToolRegistry
    """
    global _registry
    if _registry is None:
        _registry = ToolRegistry()
        _registry.discover()
    return _registry
