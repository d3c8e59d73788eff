"""Played rounds and the deceptive-round policy."""

from dataclasses import dataclass
from typing import Optional
import logging
import random

from .feedback import Feedback
from .secret_code import Code

MAX_DECEPTIVE_ROUNDS = 3
DECEPTION_PROBABILITY = 0.25

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Round:
    """A single scored guess."""
    round_number: int
    guess: Code
    feedback: Feedback  # as displayed to the player
    is_deceptive: bool = False

    def to_dict(self) -> dict:
        return {
            "round_number": self.round_number,
            "guess": list(self.guess.digits),
            "feedback": self.feedback.to_dict(),
            "is_deceptive": self.is_deceptive,
        }


class DeceptionPolicy:
    """Decides which rounds get altered feedback, up to a per-game cap."""

    def __init__(
        self,
        probability: float = DECEPTION_PROBABILITY,
        max_rounds: int = MAX_DECEPTIVE_ROUNDS,
        rng: Optional[random.Random] = None,
    ):
        """
        Initialize the policy.

        Args:
            probability: Chance that an eligible round is made deceptive
            max_rounds: Maximum deceptive rounds per game
            rng: Random source for both the selection and the perturbation
        """
        if not 0.0 <= probability <= 1.0:
            raise ValueError(f"Deception probability must be in [0, 1], got {probability}")
        if not 0 <= max_rounds <= MAX_DECEPTIVE_ROUNDS:
            raise ValueError(
                f"Deceptive round cap must be between 0 and {MAX_DECEPTIVE_ROUNDS}, got {max_rounds}"
            )

        self.probability = probability
        self.max_rounds = max_rounds
        self.rng = rng if rng is not None else random.Random()
        self._used = 0

    @property
    def deceptive_rounds_used(self) -> int:
        return self._used

    def get_deceptive_rounds_used(self) -> int:
        return self._used

    @property
    def remaining(self) -> int:
        return self.max_rounds - self._used

    def reset(self):
        self._used = 0

    def apply(self, feedback: Feedback) -> Feedback:
        """Return the feedback to display, perturbed if this round is chosen."""
        # A solving guess always shows its real score
        if feedback.is_solved or self.remaining <= 0:
            return feedback

        if self.rng.random() >= self.probability:
            return feedback

        self._used += 1
        logger.debug("Round marked deceptive (%d/%d)", self._used, self.max_rounds)
        return feedback.perturbed(self.rng)

    def create_round(self, round_number: int, guess: Code, true_feedback: Feedback) -> Round:
        """Wrap a scored guess in a Round, applying the policy."""
        shown = self.apply(true_feedback)
        return Round(
            round_number=round_number,
            guess=guess,
            feedback=shown,
            is_deceptive=shown.deceptive,
        )
