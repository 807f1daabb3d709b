"""Tool registry: the collaborator the protocol dispatcher lists and calls tools through."""

import copy
import logging
from collections.abc import Callable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

ToolHandler = Callable[[dict[str, Any]], Any]


class ToolExecutionError(Exception):
    """Raised when a tool is unknown or its execution fails."""


class ToolProvider(Protocol):
    """Interface consumed by the protocol dispatcher."""

    def list_tools(self) -> list[dict[str, Any]]: ...

    def call(self, name: str, arguments: dict[str, Any]) -> Any: ...


class ToolRegistry:
    """Ordered mapping of tool name to (definition, handler).

    Handlers are plain functions that take the arguments dict and return a
    JSON-serialisable value. Each handler validates its own arguments and
    raises on bad input.
    """

    def __init__(self) -> None:
        self._tools: dict[str, tuple[dict[str, Any], ToolHandler]] = {}

    def register(self, definition: dict[str, Any], handler: ToolHandler) -> None:
        name = str(definition["name"])
        logger.info(f"Registering tool: {name}")
        self._tools[name] = (definition, handler)

    def has_tool(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self) -> list[dict[str, Any]]:
        """Return tool definitions in registration order."""
        logger.debug(f"Listing {len(self._tools)} available tools")
        return [copy.deepcopy(definition) for definition, _ in self._tools.values()]

    def call(self, name: str, arguments: dict[str, Any]) -> Any:
        """Execute a tool.

        Raises:
            ToolExecutionError: If the tool does not exist or its handler raises.
        """
        entry = self._tools.get(name)
        if entry is None:
            logger.error(f"Tool not found: {name}")
            raise ToolExecutionError(f"Tool not found: {name}")

        _, handler = entry
        logger.info(f"Calling tool: {name} with arguments: {arguments}")
        try:
            result = handler(arguments or {})
        except Exception as e:
            logger.error(f"Error executing tool {name}: {e}")
            raise ToolExecutionError(f"Error executing tool: {e}") from e

        logger.info(f"Tool {name} executed successfully")
        return result
