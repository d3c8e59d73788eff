"""Manual input mode using clipboard for web UI interaction."""

from typing import Callable, Optional

import pyperclip

from .actions import InvalidAction, PlayerAction
from .console_player import parse_text_action
from .game import GameConfig
from .prompts import build_history_text, build_system_prompt, parse_action_response


class ClipboardPlayer:
    """Player that relays prompts to a web LLM through the clipboard."""

    def __init__(
        self,
        game_config: GameConfig,
        model_label: str = "manual",
        games: int = 1,
        input_func: Optional[Callable[[str], str]] = None,
        output: Callable[[str], None] = print,
    ):
        """
        Initialize clipboard player.

        Args:
            game_config: Game configuration
            model_label: Label for the model being tested manually
            games: Number of games to play before declining a replay
        """
        self.game_config = game_config
        self.model_label = model_label
        self.games_remaining = games
        self.input_func = input_func or input
        self.output = output
        self.system_prompt = build_system_prompt(game_config)

    def has_played_before(self) -> bool:
        return True

    def is_ready(self) -> bool:
        return True

    def wants_replay(self) -> bool:
        self.games_remaining -= 1
        return self.games_remaining > 0

    def get_next_action(self, game_history: list[dict], scan_available: bool, last_error: Optional[str] = None) -> PlayerAction:
        """Get an action via manual input with clipboard assistance."""
        prompt = self.system_prompt + "\n\n" + build_history_text(game_history, scan_available, last_error)

        try:
            pyperclip.copy(prompt)
            banner = "PROMPT COPIED TO CLIPBOARD"
        except pyperclip.PyperclipException:
            banner = "CLIPBOARD UNAVAILABLE - COPY THE PROMPT BELOW"

        self.output("\n" + "=" * 70)
        self.output(banner)
        self.output("=" * 70)
        self.output(prompt)
        self.output("=" * 70)
        self.output("\nPaste this into your LLM web interface and copy the response.")
        self.output("\nOptions:")
        self.output("  - Press Enter to paste from clipboard")
        self.output("  - Type/paste the response manually")
        self.output("  - Type 'quit' to exit")

        user_input = self.input_func("Enter response: ").strip()

        if user_input.lower() == 'quit':
            raise KeyboardInterrupt("User quit")

        # If user just pressed enter, try to paste from clipboard
        if not user_input:
            try:
                user_input = pyperclip.paste()
                self.output(f"\nPasted from clipboard:\n{user_input[:200]}...\n")
            except pyperclip.PyperclipException:
                self.output("Could not paste from clipboard. Please type the response.")
                user_input = self.input_func("Enter response: ").strip()

        action = parse_action_response(user_input)
        if isinstance(action, InvalidAction):
            # Accept a plain typed answer such as "1234" or "scan 2"
            typed = parse_text_action(user_input)
            if not isinstance(typed, InvalidAction):
                return typed
        return action
