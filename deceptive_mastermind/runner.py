"""Game lifecycle: introduction, round loop, game over and replay."""

from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Sequence
import logging
import random
import time

from tabulate import tabulate

from .actions import GuessAction, InvalidAction, ScanRequestAction
from .clipboard_player import ClipboardPlayer
from .console_player import ConsolePlayer
from .game import GameConfig, GameSession
from .llm_player import LLMPlayer
from .secret_code import CODE_LENGTH, DIGIT_MAX, DIGIT_MIN

logger = logging.getLogger(__name__)

SEPARATOR_LINE = "-" * 40
GAME_OVER_SEPARATOR = "=========== GAME OVER ============"
NEW_GAME_SEPARATOR = "+++++++++++ NEW GAME +++++++++++"

WIN_MESSAGE = "Congratulations! You won in {rounds_played} rounds!"
LOSS_MESSAGE = "Game Over! The secret code was: {secret_digits}"
DECEPTIVE_COUNT_MESSAGE = "Deceptive rounds used: {count}"
RETURN_TO_MENU_MESSAGE = "Returning to main menu..."


def build_rules_text(config: GameConfig) -> str:
    return f"""=== MASTERMIND GAME RULES ===
1. The computer will generate a secret code of {CODE_LENGTH} digits ({DIGIT_MIN}-{DIGIT_MAX}).
2. You have {config.max_rounds} attempts to guess the code correctly.
3. After each guess, you'll receive feedback:
   - Number of digits in the correct position
   - Number of correct digits in the wrong position

SPECIAL MECHANICS:
* Deceptive Rounds: Up to {config.max_deceptive_rounds} rounds may give slightly altered feedback
  (marked with a '?')
* Truth Scan: Once per game, you can reveal the true feedback of a
  previous round. Type 'scan' (latest round) or 'scan <round>'.

EXAMPLE:
Secret Code: 1234
Your Guess: 1356
Feedback: Correct positions: 1, Misplaced: 1
(1 is correct position, 3 is right digit wrong position)

Are you ready to start? (yes/no)"""


class GamePhase(Enum):
    NOT_STARTED = "not_started"
    INTRODUCTION = "introduction"
    IN_ROUND = "in_round"
    ROUND_RESOLVED = "round_resolved"
    GAME_OVER = "game_over"
    TERMINATED = "terminated"


@dataclass
class GameResult:
    """Complete result of one game. Kept in memory for the session only."""
    player: dict
    secret: list[int]
    rounds: list[dict]
    outcome: str  # "win" | "loss" | "abandoned"
    total_rounds: int
    deceptive_rounds_used: int
    truth_scan_used: bool
    timestamp: str
    duration_seconds: float


class MastermindGame:
    """Runs games for one player until they stop asking for more."""

    def __init__(
        self,
        player,
        config: Optional[GameConfig] = None,
        rng: Optional[random.Random] = None,
        output: Callable[[str], None] = print,
        secret: Optional[Sequence[int]] = None,
    ):
        """
        Initialize the game controller.

        Args:
            player: ConsolePlayer, LLMPlayer or ClipboardPlayer instance
            config: Game configuration
            rng: Random source shared by every game of this controller
            output: Sink for player-facing text
            secret: Optional predefined secret, reused for every game
        """
        self.player = player
        self.config = config or GameConfig()
        self.rng = rng if rng is not None else random.Random()
        self.output = output
        self.predefined_secret = secret
        self.session: Optional[GameSession] = None
        self.results: list[GameResult] = []
        self.phase = GamePhase.NOT_STARTED
        self._last_error: Optional[str] = None
        self._announced_round = 0

    def play(self) -> list[GameResult]:
        """Play games until the player declines a replay."""
        if not self.handle_game_introduction():
            self.phase = GamePhase.TERMINATED
            return self.results

        while True:
            self.initialize_new_game()
            outcome, duration = self.play_game_loop()
            self.results.append(self.end_game(outcome, duration))

            self.output("\nPlay again? (yes/no)")
            if not self.player.wants_replay():
                break

        self.phase = GamePhase.TERMINATED
        self.print_session_summary()
        self.output("\n" + SEPARATOR_LINE)
        self.output(RETURN_TO_MENU_MESSAGE)
        self.output(SEPARATOR_LINE)
        return self.results

    def handle_game_introduction(self) -> bool:
        """Show the welcome and, for new players, the rules. False if declined."""
        self.phase = GamePhase.INTRODUCTION

        self.output("\n" + SEPARATOR_LINE)
        self.output("Welcome to Mastermind!")
        self.output(SEPARATOR_LINE)
        self.output("Have you played this version before? (yes/no)")

        if not self.player.has_played_before():
            self.output(build_rules_text(self.config))
            if not self.player.is_ready():
                self.output("\nMaybe next time! Goodbye.\n")
                return False

        self.output("\n" + SEPARATOR_LINE)
        self.output(f"Try to guess the {CODE_LENGTH}-digit code.")
        self.output(f"You have {self.config.max_rounds} attempts.")
        self.output(SEPARATOR_LINE)
        return True

    def initialize_new_game(self):
        """Fresh secret, empty history, deception counter and truth scan reset."""
        self.session = GameSession(
            self.config,
            rng=self.rng,
            output=self.output,
            secret=self.predefined_secret,
        )
        self._last_error = None
        self._announced_round = 0
        self.phase = GamePhase.IN_ROUND
        self.output("\n" + NEW_GAME_SEPARATOR)

    def play_game_loop(self) -> tuple[str, float]:
        """
        Play rounds until the game is over.

        Returns:
            (outcome, duration_seconds)
        """
        start_time = time.time()
        invalid_streak = 0
        outcome = "loss"

        while not self.session.is_game_over():
            if invalid_streak >= self.config.max_consecutive_invalid:
                logger.warning("Abandoning game after %d unusable actions", invalid_streak)
                self.output(
                    f"Too many invalid inputs ({invalid_streak}) (safety limit). Ending this game."
                )
                outcome = "abandoned"
                break

            if self.play_round():
                invalid_streak = 0
            else:
                invalid_streak += 1

        if self.session.won:
            outcome = "win"

        return outcome, round(time.time() - start_time, 2)

    def play_round(self) -> bool:
        """
        Ask for one action and carry it out.

        Returns:
            True if the action was usable (a scored guess or a successful scan).
        """
        self.phase = GamePhase.IN_ROUND
        round_number = self.session.rounds_played + 1
        if round_number != self._announced_round:
            self.output(f"\n--- Round {round_number} of {self.config.max_rounds} ---")
            self._announced_round = round_number

        action = self.player.get_next_action(
            self.session.history(),
            self.session.scan_available,
            self._last_error,
        )

        if isinstance(action, GuessAction):
            return self.process_guess(action)
        elif isinstance(action, ScanRequestAction):
            return self.process_scan(action)
        elif isinstance(action, InvalidAction):
            self._report_input_error(action.reason)
            return False
        else:
            self._report_input_error(f"Unexpected action {action!r}")
            return False

    def process_guess(self, action: GuessAction) -> bool:
        result = self.session.make_guess(action.digits)

        if not result["valid"]:
            self._report_input_error(result["error"])
            return False

        self._last_error = None
        self.phase = GamePhase.ROUND_RESOLVED
        self.output(f"\nFeedback: {result['round'].feedback}")
        return True

    def process_scan(self, action: ScanRequestAction) -> bool:
        self.output("\n--- Truth Scan Requested ---")
        success = self.session.request_truth_scan(action.round_number)

        if success:
            self._last_error = None
            self.output("--- Truth Scan Complete ---")
        else:
            self._last_error = "Truth scan failed"
            self.output("--- Truth Scan Failed ---")
        self.output("(Continuing round after Truth Scan...)")
        return success

    def _report_input_error(self, message: str):
        logger.info("Input error: %s", message)
        self._last_error = message
        self.output(f"Input error: {message}. Please try again.")

    def end_game(self, outcome: str, duration: float) -> GameResult:
        """Report the outcome and build the game's result."""
        self.phase = GamePhase.GAME_OVER
        session = self.session

        self.output("\n" + GAME_OVER_SEPARATOR)

        if not session.rounds:
            self.output("Game ended without any guesses.")
        else:
            if outcome == "win":
                self.output(WIN_MESSAGE.format(rounds_played=session.rounds_played))
            else:
                self.output(LOSS_MESSAGE.format(secret_digits=session.secret))
            self.output(DECEPTIVE_COUNT_MESSAGE.format(count=session.deceptive_rounds_used))
            self.output(self.render_history())

        self.output(GAME_OVER_SEPARATOR)

        return GameResult(
            player=self._get_player_config(),
            secret=list(session.secret.digits),
            rounds=session.history(),
            outcome=outcome,
            total_rounds=session.rounds_played,
            deceptive_rounds_used=session.deceptive_rounds_used,
            truth_scan_used=not session.scan_available,
            timestamp=datetime.now(timezone.utc).isoformat(),
            duration_seconds=duration,
        )

    def render_history(self) -> str:
        """Round history table, with the true score next to deceptive rounds."""
        rows = []
        for played in self.session.rounds:
            revealed = self.session.revealed.get(played.round_number)
            rows.append([
                played.round_number,
                str(played.guess),
                str(played.feedback),
                str(revealed) if revealed is not None else "",
            ])
        return tabulate(rows, headers=["Round", "Guess", "Feedback", "Truth Scan"], disable_numparse=True)

    def print_session_summary(self):
        if not self.results:
            return

        rows = [
            [i, r.outcome, r.total_rounds, r.deceptive_rounds_used, "yes" if r.truth_scan_used else "no"]
            for i, r in enumerate(self.results, 1)
        ]
        wins = sum(1 for r in self.results if r.outcome == "win")

        self.output("\n" + SEPARATOR_LINE)
        self.output("SESSION SUMMARY")
        self.output(tabulate(rows, headers=["Game", "Outcome", "Rounds", "Deceptive", "Scan used"]))
        self.output(f"Wins: {wins}/{len(self.results)}")
        self.output(SEPARATOR_LINE)

    def _get_player_config(self) -> dict:
        """Get player configuration as dict."""
        if isinstance(self.player, LLMPlayer):
            return {
                "mode": "api",
                "model": self.player.llm_config.model,
                "temperature": self.player.llm_config.temperature,
                "max_tokens": self.player.llm_config.max_tokens,
            }
        elif isinstance(self.player, ClipboardPlayer):
            return {"mode": "clipboard", "model": self.player.model_label}
        elif isinstance(self.player, ConsolePlayer):
            return {"mode": "console", "model": None}
        else:
            return {"mode": type(self.player).__name__, "model": None}
