"""Rock, Paper, Scissors tools."""

import random
from typing import Any

from ..models import RpsChoice

OPTIONS = [choice.value for choice in RpsChoice]

# Each move and the move it beats
_BEATS = {
    RpsChoice.ROCK: RpsChoice.SCISSORS,
    RpsChoice.PAPER: RpsChoice.ROCK,
    RpsChoice.SCISSORS: RpsChoice.PAPER,
}


def determine_winner(player_choice: str, computer_choice: str) -> str:
    if player_choice == computer_choice:
        return "It's a tie!"
    if _BEATS[RpsChoice(player_choice)] == computer_choice:
        return "You win!"
    return "Computer wins!"


def handle_rock_paper_scissors(arguments: dict[str, Any], rng: random.Random) -> str:
    return f"Computer chose: {rng.choice(OPTIONS)}"


def handle_play_rock_paper_scissors(arguments: dict[str, Any], rng: random.Random) -> str:
    choice = arguments.get("choice")
    if not isinstance(choice, str):
        raise ValueError("Parameter 'choice' must be one of: rock, paper, scissors")

    player_choice = choice.strip().lower()
    if player_choice not in OPTIONS:
        return "Invalid choice! Please choose rock, paper, or scissors."

    computer_choice = rng.choice(OPTIONS)
    result = determine_winner(player_choice, computer_choice)
    return f"You chose: {player_choice}, Computer chose: {computer_choice}. {result}"
