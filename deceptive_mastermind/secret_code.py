"""Code sequences and secret code generation."""

from typing import Iterable, Optional
import logging
import random
import re

CODE_LENGTH = 4
DIGIT_MIN = 1
DIGIT_MAX = 6

logger = logging.getLogger(__name__)


class MastermindError(Exception):
    """Base exception for game rule violations."""
    pass


class InvalidCodeError(MastermindError, ValueError):
    """Raised when a digit sequence is not a valid code."""
    pass


class InvalidLengthError(MastermindError, ValueError):
    """Raised when a code of an unsupported length is requested."""
    pass


class Code:
    """Immutable sequence of CODE_LENGTH digits in [DIGIT_MIN, DIGIT_MAX]."""

    __slots__ = ("_digits",)

    def __init__(self, digits: Iterable[int]):
        """
        Build a code from an ordered digit sequence.

        Args:
            digits: Exactly CODE_LENGTH integers, each in [DIGIT_MIN, DIGIT_MAX]

        Raises:
            InvalidCodeError: If the length or any digit is out of range
        """
        try:
            values = tuple(digits)
        except TypeError:
            raise InvalidCodeError(f"Code must be a sequence of digits, got {digits!r}")

        if len(values) != CODE_LENGTH:
            raise InvalidCodeError(
                f"Code must have exactly {CODE_LENGTH} digits, but got {len(values)}"
            )

        for value in values:
            # bool is an int subclass but never a digit
            if isinstance(value, bool) or not isinstance(value, int):
                raise InvalidCodeError(f"Code digits must be integers, got {value!r}")
            if not DIGIT_MIN <= value <= DIGIT_MAX:
                raise InvalidCodeError(
                    f"Digit {value} out of range, allowed {DIGIT_MIN}-{DIGIT_MAX}"
                )

        self._digits = values

    @classmethod
    def parse(cls, text: str) -> "Code":
        """Parse "1234", "1 2 3 4" or "1,2,3,4" into a code."""
        cleaned = text.strip()
        if re.fullmatch(r"[0-9]{1,8}", cleaned):
            parts = list(cleaned)
        else:
            parts = [p for p in re.split(r"[\s,]+", cleaned) if p]

        if not parts or not all(re.fullmatch(r"[0-9]{1,3}", p) for p in parts):
            raise InvalidCodeError(f"Could not read a code from {text!r}")

        return cls(int(p) for p in parts)

    @property
    def digits(self) -> tuple[int, ...]:
        return self._digits

    def __len__(self) -> int:
        return len(self._digits)

    def __getitem__(self, index: int) -> int:
        return self._digits[index]

    def __iter__(self):
        return iter(self._digits)

    def __eq__(self, other) -> bool:
        if isinstance(other, Code):
            return self._digits == other._digits
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._digits)

    def __str__(self) -> str:
        return "".join(str(d) for d in self._digits)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({list(self._digits)!r})"


class SecretCode(Code):
    """The hidden code a player has to break."""

    __slots__ = ()


def generate_random_code(length: int, rng: Optional[random.Random] = None) -> SecretCode:
    """
    Generate a random secret code.

    Args:
        length: Requested code length. Only CODE_LENGTH is supported.
        rng: Random source. A fresh unseeded generator is used if omitted.

    Raises:
        InvalidLengthError: If length is not CODE_LENGTH
    """
    if length != CODE_LENGTH:
        raise InvalidLengthError(f"Code length must be {CODE_LENGTH}, got {length}")

    rng = rng if rng is not None else random.Random()
    digits = [rng.randint(DIGIT_MIN, DIGIT_MAX) for _ in range(length)]

    logger.debug("Generated secret code %s", "".join(map(str, digits)))
    return SecretCode(digits)
