"""Core game state for a single Mastermind game."""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence
import logging
import random

from .feedback import Feedback
from .rounds import DECEPTION_PROBABILITY, MAX_DECEPTIVE_ROUNDS, DeceptionPolicy, Round
from .secret_code import CODE_LENGTH, Code, InvalidCodeError, SecretCode, generate_random_code
from .truth_scanner import TruthScanner

MAX_ROUNDS = 12

logger = logging.getLogger(__name__)


@dataclass
class GameConfig:
    """Configuration for a game of deceptive Mastermind."""
    max_rounds: int = MAX_ROUNDS
    deception_probability: float = DECEPTION_PROBABILITY
    max_deceptive_rounds: int = MAX_DECEPTIVE_ROUNDS
    max_consecutive_invalid: int = 10  # safety limit on unusable input


class GameSession:
    """State of one game: secret, round history, deception and truth scan."""

    def __init__(
        self,
        config: GameConfig,
        rng: Optional[random.Random] = None,
        output: Callable[[str], None] = print,
        secret: Optional[Sequence[int]] = None,
    ):
        """
        Initialize a new game.

        Args:
            config: Game configuration
            rng: Random source for the secret and deception. Unseeded if None.
            output: Sink for player-facing text
            secret: Optional predefined secret. If None, generates random secret.
        """
        self.config = config
        self.rng = rng if rng is not None else random.Random()
        self.output = output
        self.deception = DeceptionPolicy(
            probability=config.deception_probability,
            max_rounds=config.max_deceptive_rounds,
            rng=self.rng,
        )
        self.scanner = TruthScanner(output=output)
        self.reset(secret)

    def reset(self, secret: Optional[Sequence[int]] = None):
        """Start over: new secret, empty history, deception and scan restored."""
        if secret is not None:
            self.secret = SecretCode(secret)
        else:
            self.secret = generate_random_code(CODE_LENGTH, self.rng)
        self.rounds: list[Round] = []
        self.revealed: dict[int, Feedback] = {}
        self.deception.reset()
        self.scanner.reset_truth_scanner()

    def make_guess(self, digits: Sequence[int]) -> dict:
        """
        Score a guess and record it as a new round.

        Returns:
            {
                "valid": bool,
                "error": str | None,
                "round": Round  # Only present if valid=True
            }
        """
        if self.is_game_over():
            return {"valid": False, "error": "The game is already over"}

        try:
            guess = Code(digits)
        except InvalidCodeError as e:
            logger.debug("Rejected guess %r: %s", digits, e)
            return {"valid": False, "error": str(e)}

        true_feedback = Feedback.compute(self.secret, guess)
        new_round = self.deception.create_round(len(self.rounds) + 1, guess, true_feedback)
        self.rounds.append(new_round)

        return {"valid": True, "error": None, "round": new_round}

    def request_truth_scan(self, round_number: Optional[int] = None) -> bool:
        """Run the truth scan; the revealed feedback is kept per round."""
        success = self.scanner.handle_truth_scan_request(self.rounds, self.secret, round_number)
        if success:
            self.revealed[self.scanner.last_round_number] = self.scanner.last_result
        return success

    @property
    def won(self) -> bool:
        if not self.rounds:
            return False
        # Judge the real score, never the displayed one
        return Feedback.compute(self.secret, self.rounds[-1].guess).is_solved

    def is_game_over(self) -> bool:
        """Check if game has ended (won or max rounds reached)."""
        if self.won:
            return True
        return len(self.rounds) >= self.config.max_rounds

    @property
    def rounds_played(self) -> int:
        return len(self.rounds)

    @property
    def deceptive_rounds_used(self) -> int:
        return self.deception.deceptive_rounds_used

    @property
    def scan_available(self) -> bool:
        return self.scanner.available

    def history(self) -> list[dict]:
        """Rounds as plain dicts, including any truth scan result."""
        entries = []
        for played in self.rounds:
            entry = played.to_dict()
            revealed = self.revealed.get(played.round_number)
            if revealed is not None:
                entry["revealed"] = revealed.to_dict()
            entries.append(entry)
        return entries
