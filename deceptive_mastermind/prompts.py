"""Prompt text and response parsing shared by the LLM-driven players."""

from typing import Optional
import json
import re

from .actions import GuessAction, InvalidAction, PlayerAction, ScanRequestAction
from .game import GameConfig
from .secret_code import CODE_LENGTH, DIGIT_MAX, DIGIT_MIN


def build_system_prompt(game_config: GameConfig) -> str:
    """Build system prompt based on game configuration."""
    return f"""You are playing a deceptive variant of Mastermind.

RULES:
- The secret code has {CODE_LENGTH} positions
- Each position contains a digit from {DIGIT_MIN} to {DIGIT_MAX}
- Digits may repeat.
- You have a maximum of {game_config.max_rounds} guesses.

FEEDBACK:
- Correct positions: right digit in the right position
- Misplaced: right digit in the wrong position
- You are NOT told which positions are correct

DECEPTION:
- Up to {game_config.max_deceptive_rounds} rounds per game show feedback where one number is off by one.
- Such feedback is marked as deceptive (a trailing '?').
- Once per game you may request a Truth Scan instead of guessing. It reveals the true
  feedback of a round you choose (the latest round if you omit it) and does not cost a guess.

RESPONSE FORMAT:
Respond with ONLY a JSON object. To guess:
{{"guess": [1, 2, 3, 4]}}
To use the Truth Scan on round 3:
{{"action": "scan", "round": 3}}

Do not include any other text or explanation outside the JSON object."""


def build_history_text(game_history: list[dict], scan_available: bool, last_error: Optional[str] = None) -> str:
    """Describe the game so far and ask for the next action."""
    if not game_history:
        text = "Make your first guess."
    else:
        text = "Previous guesses:\n\n"
        for entry in game_history:
            fb = entry["feedback"]
            text += f"Round {entry['round_number']}:\n"
            text += f"Guess: {entry['guess']}\n"
            text += f"Feedback: {fb['correct_positions']} correct positions, {fb['misplaced']} misplaced"
            text += " (deceptive)\n" if fb["deceptive"] else "\n"
            if entry.get("revealed"):
                rv = entry["revealed"]
                text += f"Truth Scan: {rv['correct_positions']} correct positions, {rv['misplaced']} misplaced\n"
            text += "\n"

        text += "Truth Scan: available.\n" if scan_available else "Truth Scan: already used.\n"

        if last_error:
            text += f"Your last action was rejected ({last_error}). Please respond with a valid action in the correct JSON format."
        else:
            text += "Provide your next action."

    return text


def _action_from_data(data) -> Optional[PlayerAction]:
    if not isinstance(data, dict):
        return None

    if str(data.get("action", "")).lower() == "scan":
        round_number = data.get("round")
        if round_number is None:
            return ScanRequestAction()
        if isinstance(round_number, int) and not isinstance(round_number, bool):
            return ScanRequestAction(round_number)
        return None

    if "guess" in data and isinstance(data["guess"], list):
        return GuessAction(tuple(data["guess"]))

    return None


def parse_action_response(response: str) -> PlayerAction:
    """Extract a guess or scan request from a JSON response."""
    # Strategy 1: Try direct JSON parse
    try:
        action = _action_from_data(json.loads(response.strip()))
        if action is not None:
            return action
    except json.JSONDecodeError:
        pass

    # Strategy 2: Try to extract JSON from markdown code blocks
    json_match = re.search(r'```(?:json)?\s*(\{.*?\})\s*```', response, re.DOTALL)
    if json_match:
        try:
            action = _action_from_data(json.loads(json_match.group(1)))
            if action is not None:
                return action
        except json.JSONDecodeError:
            pass

    # Strategy 3: Try the last bare JSON object in the response
    matches = list(re.finditer(r'\{[^{}]*\}', response))
    if matches:
        try:
            action = _action_from_data(json.loads(matches[-1].group(0)))
            if action is not None:
                return action
        except json.JSONDecodeError:
            pass

    return InvalidAction(reason="Failed to parse response", raw=response)
