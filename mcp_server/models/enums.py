"""Enumeration types for the MCP server."""

from enum import StrEnum


class ToolName(StrEnum):
    """Built-in tools."""

    CALCULATOR = "calculator"
    ADD = "add"
    SUBTRACT = "subtract"
    MULTIPLY = "multiply"
    DIVIDE = "divide"
    WEATHER = "weather"
    ROCK_PAPER_SCISSORS = "rock_paper_scissors"
    PLAY_ROCK_PAPER_SCISSORS = "play_rock_paper_scissors"


class McpMethod(StrEnum):
    """Protocol methods handled by the dispatcher."""

    INITIALIZE = "initialize"
    TOOLS_LIST = "tools/list"
    TOOLS_CALL = "tools/call"
    # Notifications
    NOTIFICATION_CANCEL = "notifications/cancel"
    NOTIFICATION_CANCELLED = "notifications/cancelled"
    NOTIFICATION_INITIALIZED = "notifications/initialized"


class RpsChoice(StrEnum):
    """Rock, Paper, Scissors moves."""

    ROCK = "rock"
    PAPER = "paper"
    SCISSORS = "scissors"
