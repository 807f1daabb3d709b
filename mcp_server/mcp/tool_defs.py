"""MCP Tool Definitions.

This module contains all tool definitions returned by the tools/list method.
Each tool definition includes the JSON schema for its input parameters.

Tool Categories:
    - Arithmetic: calculator, add, subtract, multiply, divide
    - Lookup: weather (mocked)
    - Games: rock_paper_scissors, play_rock_paper_scissors
"""

from ..models import ToolName


def _binary_operands(first: str, second: str) -> dict:
    return {
        "type": "object",
        "properties": {
            "a": {"type": "number", "description": first},
            "b": {"type": "number", "description": second},
        },
        "required": ["a", "b"],
    }


TOOL_DEFINITIONS: list[dict] = [
    # ============ Arithmetic Tools ============
    {
        "name": ToolName.CALCULATOR,
        "description": "Evaluate a mathematical expression (supports +, -, *, /, parentheses)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "expression": {
                    "type": "string",
                    "description": "Expression to evaluate, e.g. 2 + 3 * 4",
                },
            },
            "required": ["expression"],
        },
    },
    {
        "name": ToolName.ADD,
        "description": "Return the sum of two numbers",
        "inputSchema": _binary_operands("First operand", "Second operand"),
    },
    {
        "name": ToolName.SUBTRACT,
        "description": "Return the difference between two numbers",
        "inputSchema": _binary_operands("Minuend", "Subtrahend"),
    },
    {
        "name": ToolName.MULTIPLY,
        "description": "Return the product of two numbers",
        "inputSchema": _binary_operands("First factor", "Second factor"),
    },
    {
        "name": ToolName.DIVIDE,
        "description": "Return the quotient of two numbers",
        "inputSchema": _binary_operands("Dividend", "Divisor"),
    },
    # ============ Lookup Tools ============
    {
        "name": ToolName.WEATHER,
        "description": "Gets weather information for a location (mock data)",
        "inputSchema": {
            "type": "object",
            "properties": {
                "location": {
                    "type": "string",
                    "description": "City or location name",
                },
            },
            "required": ["location"],
        },
    },
    # ============ Game Tools ============
    {
        "name": ToolName.ROCK_PAPER_SCISSORS,
        "description": "Play Rock, Paper, Scissors - randomly returns one of the three options",
        "inputSchema": {"type": "object", "properties": {}, "required": []},
    },
    {
        "name": ToolName.PLAY_ROCK_PAPER_SCISSORS,
        "description": "Play Rock, Paper, Scissors against a computer - you choose your move",
        "inputSchema": {
            "type": "object",
            "properties": {
                "choice": {
                    "type": "string",
                    "enum": ["rock", "paper", "scissors"],
                    "description": "Your choice: rock, paper, or scissors",
                },
            },
            "required": ["choice"],
        },
    },
]
