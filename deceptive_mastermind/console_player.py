"""Interactive player reading from the terminal."""

from typing import Callable, Optional
import re

from .actions import GuessAction, InvalidAction, PlayerAction, ScanRequestAction

YES_ANSWERS = {"yes", "y"}
NO_ANSWERS = {"no", "n"}


NUMBER = re.compile(r"[0-9]{1,3}")


def parse_text_action(text: str) -> PlayerAction:
    """
    Turn a typed line into an action.

    Accepted forms: "1234", "1 2 3 4", "1,2,3,4", "scan" and "scan 3".
    Digit ranges are not checked here; the game rejects bad guesses.
    Only ASCII digits count, and a number token is at most three digits long.
    """
    cleaned = text.strip().lower()

    if cleaned.startswith("scan"):
        rest = cleaned[len("scan"):].strip()
        if not rest:
            return ScanRequestAction()
        if NUMBER.fullmatch(rest):
            return ScanRequestAction(int(rest))
        return InvalidAction(reason=f"Unknown round '{rest[:20]}'", raw=text)

    if re.fullmatch(r"[0-9]{1,8}", cleaned):
        return GuessAction(tuple(int(c) for c in cleaned))

    parts = [p for p in re.split(r"[\s,]+", cleaned) if p]
    if parts and all(NUMBER.fullmatch(p) for p in parts):
        return GuessAction(tuple(int(p) for p in parts))

    return InvalidAction(reason="Enter digits like 1234 or type 'scan'", raw=text)


class ConsolePlayer:
    """Player that types guesses at the console."""

    def __init__(self, input_func: Optional[Callable[[str], str]] = None, output: Callable[[str], None] = print):
        self.input_func = input_func or input
        self.output = output

    def has_played_before(self) -> bool:
        return self._ask_yes_no()

    def is_ready(self) -> bool:
        return self._ask_yes_no()

    def wants_replay(self) -> bool:
        return self._ask_yes_no()

    def get_next_action(self, game_history: list[dict], scan_available: bool, last_error: Optional[str] = None) -> PlayerAction:
        hint = "guess or 'scan'" if scan_available else "guess"
        return parse_text_action(self.input_func(f"Enter your {hint}: "))

    def _ask_yes_no(self) -> bool:
        while True:
            answer = self.input_func("> ").strip().lower()
            if answer in YES_ANSWERS:
                return True
            if answer in NO_ANSWERS:
                return False
            self.output("Please answer 'yes' or 'no'.")
