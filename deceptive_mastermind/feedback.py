"""Guess scoring and deceptive feedback."""

from collections import Counter
from dataclasses import dataclass, replace
import random

from .secret_code import CODE_LENGTH, Code, MastermindError

DECEPTION_MARKER = " ?"


class MismatchedLengthError(MastermindError, ValueError):
    """Raised when a guess and a secret have different lengths."""
    pass


@dataclass(frozen=True)
class Feedback:
    """Result of scoring a guess, possibly altered for display."""
    correct_positions: int
    misplaced: int
    deceptive: bool = False

    @classmethod
    def compute(cls, secret: Code, guess: Code) -> "Feedback":
        """
        Score a guess against the secret.

        Algorithm:
        1. Count exact position matches
        2. Count the remaining secret digits by value
        3. Each remaining guess digit consumes one matching secret digit

        Raises:
            MismatchedLengthError: If the codes differ in length
        """
        if len(guess) != len(secret):
            raise MismatchedLengthError(
                f"Guess has {len(guess)} digits but secret has {len(secret)}"
            )

        correct = 0
        secret_remaining = Counter()
        guess_remaining = []

        for s, g in zip(secret, guess):
            if s == g:
                correct += 1
            else:
                secret_remaining[s] += 1
                guess_remaining.append(g)

        misplaced = 0
        for digit in guess_remaining:
            if secret_remaining[digit] > 0:
                misplaced += 1
                secret_remaining[digit] -= 1

        return cls(correct, misplaced)

    @property
    def is_solved(self) -> bool:
        return self.correct_positions == CODE_LENGTH

    def perturbed(self, rng: random.Random) -> "Feedback":
        """
        Return a deceptive copy with one count moved by exactly one.

        Only moves that keep both counts in [0, CODE_LENGTH] and their sum
        at most CODE_LENGTH, and that never show every position correct,
        are considered.
        """
        candidates = []
        for field in ("correct_positions", "misplaced"):
            for delta in (1, -1):
                values = {
                    "correct_positions": self.correct_positions,
                    "misplaced": self.misplaced,
                }
                values[field] += delta
                if min(values.values()) < 0 or sum(values.values()) > CODE_LENGTH:
                    continue
                # A disguised score never looks like a win
                if values["correct_positions"] >= CODE_LENGTH:
                    continue
                candidates.append(values)

        chosen = rng.choice(candidates)
        return replace(self, deceptive=True, **chosen)

    def to_dict(self) -> dict:
        return {
            "correct_positions": self.correct_positions,
            "misplaced": self.misplaced,
            "deceptive": self.deceptive,
        }

    def __str__(self) -> str:
        text = f"Correct positions: {self.correct_positions}, Misplaced: {self.misplaced}"
        if self.deceptive:
            text += DECEPTION_MARKER
        return text
