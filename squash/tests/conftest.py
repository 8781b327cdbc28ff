"""Shared test fixtures."""

import pytest

from squash.engine.clock import ManualClock
from squash.engine.game import Game
from squash.engine.match import Match


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def game(clock):
    g = Game(clock=clock)
    g.set_names("Alice", "Bob")
    return g


@pytest.fixture
def match(clock):
    m = Match(clock=clock)
    m.setup_match("Alice", "Bob", starting_server=m.starting_server)
    return m


@pytest.fixture
def play(clock):
    """Record one point after a rally of ``seconds``."""
    def _play(game, scorer, zone, shot_type, seconds=1.0):
        clock.advance(seconds)
        return game.record_point(scorer, zone, shot_type)
    return _play
