"""Shared fixtures: scripted players and captured output."""
import os
import random

# Use litellm's bundled model cost map instead of a background network fetch,
# which deadlocks module imports during test collection when offline.
os.environ.setdefault("LITELLM_LOCAL_MODEL_COST_MAP", "True")

import pytest

from deceptive_mastermind.game import GameConfig


class ScriptedPlayer:
    """Plays a fixed list of actions and records what it was shown."""

    def __init__(self, actions=(), played_before=True, ready=True, replays=()):
        self.actions = list(actions)
        self.played_before = played_before
        self.ready = ready
        self.replays = list(replays)
        self.calls = []

    def has_played_before(self):
        return self.played_before

    def is_ready(self):
        return self.ready

    def wants_replay(self):
        return self.replays.pop(0) if self.replays else False

    def get_next_action(self, game_history, scan_available, last_error=None):
        self.calls.append({
            "history": game_history,
            "scan_available": scan_available,
            "last_error": last_error,
        })
        return self.actions.pop(0)


@pytest.fixture
def make_player():
    return ScriptedPlayer


@pytest.fixture
def output():
    """Collects every line the game emits."""
    lines = []
    return lines


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def honest_config():
    """No deceptive rounds."""
    return GameConfig(deception_probability=0.0)


@pytest.fixture
def liar_config():
    """Every eligible round is deceptive."""
    return GameConfig(deception_probability=1.0)
