"""Built-in tools exposed through tools/list and tools/call.

- calculator: Arithmetic expression evaluation and two-operand operations
- weather: Mocked weather lookup
- game: Rock, Paper, Scissors

``default_registry()`` wires every built-in tool into a ``ToolRegistry``.
"""

import random
from functools import partial

from ..mcp.tool_defs import TOOL_DEFINITIONS
from ..models import ToolName
from .calculator import (
    evaluate_expression,
    handle_add,
    handle_calculator,
    handle_divide,
    handle_multiply,
    handle_subtract,
)
from .game import handle_play_rock_paper_scissors, handle_rock_paper_scissors
from .registry import ToolExecutionError, ToolHandler, ToolProvider, ToolRegistry
from .weather import handle_weather


def default_registry(rng: random.Random | None = None) -> ToolRegistry:
    """Build a registry holding every built-in tool, in definition order."""
    rng = rng or random.Random()
    handlers: dict[str, ToolHandler] = {
        ToolName.CALCULATOR: handle_calculator,
        ToolName.ADD: handle_add,
        ToolName.SUBTRACT: handle_subtract,
        ToolName.MULTIPLY: handle_multiply,
        ToolName.DIVIDE: handle_divide,
        ToolName.WEATHER: handle_weather,
        ToolName.ROCK_PAPER_SCISSORS: partial(handle_rock_paper_scissors, rng=rng),
        ToolName.PLAY_ROCK_PAPER_SCISSORS: partial(handle_play_rock_paper_scissors, rng=rng),
    }

    registry = ToolRegistry()
    for definition in TOOL_DEFINITIONS:
        registry.register(definition, handlers[definition["name"]])
    return registry


__all__ = [
    "ToolExecutionError",
    "ToolHandler",
    "ToolProvider",
    "ToolRegistry",
    "default_registry",
    "evaluate_expression",
]
