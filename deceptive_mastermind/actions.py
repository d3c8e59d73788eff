"""Actions a player can take on their turn."""

from dataclasses import dataclass
from typing import Optional, Union


@dataclass(frozen=True)
class GuessAction:
    """Submit a guess. Digits are validated when turned into a Code."""
    digits: tuple[int, ...]


@dataclass(frozen=True)
class ScanRequestAction:
    """Use the truth scan, on the latest round unless a round is given."""
    round_number: Optional[int] = None


@dataclass(frozen=True)
class InvalidAction:
    """Input that could not be understood."""
    reason: str = "Unrecognized input"
    raw: str = ""


PlayerAction = Union[GuessAction, ScanRequestAction, InvalidAction]
