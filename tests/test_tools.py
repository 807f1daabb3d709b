"""Tests for mcp_server.tools - built-in tool handlers and the registry."""

import pytest

from mcp_server.models import ToolName
from mcp_server.tools import ToolExecutionError, ToolRegistry, default_registry, evaluate_expression
from mcp_server.tools.calculator import handle_add, handle_divide, handle_multiply, handle_subtract
from mcp_server.tools.game import (
    determine_winner,
    handle_play_rock_paper_scissors,
    handle_rock_paper_scissors,
)
from mcp_server.tools.weather import handle_weather


class FixedChoice:
    """Stands in for random.Random and always picks the same move."""

    def __init__(self, move: str):
        self.move = move

    def choice(self, options):
        assert self.move in options
        return self.move


class TestEvaluateExpression:
    @pytest.mark.parametrize(
        "expression, expected",
        [
            ("2 + 3 * 4", 14.0),
            ("(1 + 2) * 3", 9.0),
            ("-4 + 10", 6.0),
            ("7 / 2", 3.5),
            ("1.5 * 2", 3.0),
        ],
    )
    def test_valid_expressions(self, expression, expected):
        assert evaluate_expression(expression) == expected

    @pytest.mark.parametrize(
        "expression, message",
        [
            ("", "Expression is required"),
            ("   ", "Expression is required"),
            ("2 + a", "Invalid characters in expression"),
            ("__import__('os')", "Invalid characters in expression"),
            ("1 / 0", "Division by zero"),
            ("2 ** 3", "Invalid mathematical expression"),
            ("2 +", "Invalid mathematical expression"),
        ],
    )
    def test_rejected_expressions(self, expression, message):
        with pytest.raises(ValueError, match=message):
            evaluate_expression(expression)


class TestArithmeticTools:
    def test_operations(self):
        assert handle_add({"a": 2, "b": 3}) == 5
        assert handle_subtract({"a": 2, "b": 3}) == -1
        assert handle_multiply({"a": 2.5, "b": 4}) == 10.0
        assert handle_divide({"a": 9, "b": 3}) == 3.0

    def test_divide_by_zero(self):
        with pytest.raises(ValueError, match="Cannot divide by zero"):
            handle_divide({"a": 1, "b": 0})

    @pytest.mark.parametrize("arguments", [{"a": 1}, {"a": "1", "b": 2}, {"a": True, "b": 2}])
    def test_operands_must_be_numbers(self, arguments):
        with pytest.raises(ValueError, match="must be a number"):
            handle_add(arguments)


class TestWeather:
    def test_returns_mock_record(self):
        result = handle_weather({"location": "Oslo"})
        assert result["location"] == "Oslo"
        assert result["temperature"] == "22°C"

    @pytest.mark.parametrize("arguments", [{}, {"location": ""}, {"location": 5}])
    def test_location_required(self, arguments):
        with pytest.raises(ValueError, match="Location is required"):
            handle_weather(arguments)


class TestRockPaperScissors:
    @pytest.mark.parametrize(
        "player, computer, outcome",
        [
            ("rock", "scissors", "You win!"),
            ("paper", "rock", "You win!"),
            ("scissors", "paper", "You win!"),
            ("rock", "paper", "Computer wins!"),
            ("paper", "paper", "It's a tie!"),
        ],
    )
    def test_determine_winner(self, player, computer, outcome):
        assert determine_winner(player, computer) == outcome

    def test_random_move(self):
        assert handle_rock_paper_scissors({}, FixedChoice("paper")) == "Computer chose: paper"

    def test_play_normalises_choice(self):
        result = handle_play_rock_paper_scissors({"choice": " Paper "}, FixedChoice("rock"))
        assert result == "You chose: paper, Computer chose: rock. You win!"

    def test_play_invalid_choice_returns_message(self):
        result = handle_play_rock_paper_scissors({"choice": "lizard"}, FixedChoice("rock"))
        assert result == "Invalid choice! Please choose rock, paper, or scissors."

    def test_play_missing_choice_raises(self):
        with pytest.raises(ValueError):
            handle_play_rock_paper_scissors({}, FixedChoice("rock"))


class TestToolRegistry:
    def test_default_registry_holds_every_tool_in_order(self):
        registry = default_registry()
        assert [tool["name"] for tool in registry.list_tools()] == list(ToolName)
        assert all("inputSchema" in tool for tool in registry.list_tools())

    def test_list_tools_returns_copies(self):
        registry = default_registry()
        registry.list_tools()[0]["description"] = "changed"
        assert registry.list_tools()[0]["description"] != "changed"

    def test_call_dispatches_to_handler(self):
        registry = default_registry()
        assert registry.call("multiply", {"a": 3, "b": 4}) == 12

    def test_unknown_tool(self):
        with pytest.raises(ToolExecutionError, match="Tool not found: missing"):
            default_registry().call("missing", {})

    def test_handler_failure_is_wrapped(self):
        with pytest.raises(ToolExecutionError, match="Error executing tool: Cannot divide by zero"):
            default_registry().call("divide", {"a": 1, "b": 0})

    def test_custom_registration(self):
        registry = ToolRegistry()
        registry.register(
            {"name": "echo", "description": "Echo", "inputSchema": {"type": "object"}},
            lambda arguments: arguments.get("text"),
        )
        assert registry.has_tool("echo")
        assert not registry.has_tool("missing")
        assert registry.call("echo", {"text": "hi"}) == "hi"
