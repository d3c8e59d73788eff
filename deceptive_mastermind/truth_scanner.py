"""One-shot reveal of a round's true feedback."""

from typing import Callable, Optional, Sequence
import logging

from .feedback import Feedback
from .rounds import Round
from .secret_code import Code

logger = logging.getLogger(__name__)


class TruthScanner:
    """
    Reveals the real feedback of a played round, once per game.

    The scanned Round is left untouched; only a corrected view is emitted.
    """

    def __init__(self, output: Callable[[str], None] = print):
        self.output = output
        self.used = False
        self.last_result: Optional[Feedback] = None
        self.last_round_number: Optional[int] = None

    @property
    def available(self) -> bool:
        return not self.used

    def reset_truth_scanner(self):
        """Make the scan available again (new game)."""
        self.used = False
        self.last_result = None
        self.last_round_number = None

    def handle_truth_scan_request(
        self,
        rounds: Sequence[Round],
        secret: Code,
        round_number: Optional[int] = None,
    ) -> bool:
        """
        Reveal the true feedback for a round.

        Args:
            rounds: Rounds played so far, in order
            secret: The game's secret code
            round_number: Round to scan; the latest round if None

        Returns:
            True if a scan was performed, False if it was refused.
        """
        if self.used:
            logger.info("Truth scan refused: already used this game")
            self.output("The Truth Scan has already been used this game.")
            return False

        if not rounds:
            logger.info("Truth scan refused: no rounds played")
            self.output("There are no rounds to scan yet.")
            return False

        if round_number is None:
            target = rounds[-1]
        elif 1 <= round_number <= len(rounds):
            target = rounds[round_number - 1]
        else:
            logger.info("Truth scan refused: round %s does not exist", round_number)
            self.output(f"Round {round_number} has not been played.")
            return False

        truth = Feedback.compute(secret, target.guess)

        self.used = True
        self.last_result = truth
        self.last_round_number = target.round_number

        self.output(f"Round {target.round_number} guess {target.guess}")
        self.output(f"True feedback: {truth}")
        if target.is_deceptive:
            self.output("The feedback shown for this round was altered.")
        else:
            self.output("The feedback shown for this round was accurate.")

        return True
