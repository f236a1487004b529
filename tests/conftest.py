import os

# Must be set before app.py is imported: the app reads DARTS_* settings at import time.
os.environ.setdefault("DARTS_SQLALCHEMY_DATABASE_URI", "sqlite://")

from dataclasses import replace  # noqa: E402

import pytest  # noqa: E402

import match  # noqa: E402
from match import DartInput  # noqa: E402


def S(value):
    return DartInput.scored(value, 1)


def D(value):
    return DartInput.scored(value, 2)


def T(value):
    return DartInput.scored(value, 3)


BULL = DartInput.scored(25)
BULLSEYE = DartInput.scored(50)
MISS = DartInput.miss()


def with_scores(state, *scores):
    """Put each player on the given remaining score."""
    players = tuple(replace(p, current_score=s) for p, s in zip(state.players, scores))
    return replace(state, players=players)


@pytest.fixture
def two_players():
    return match.start_game(["Ann", "Bob"], game_type=501, finish_mode="double", total_legs=1, now=1000.0)


@pytest.fixture
def client():
    from app import app as flask_app, db

    flask_app.config["TESTING"] = True
    with flask_app.app_context():
        db.drop_all()
        db.create_all()
    return flask_app.test_client()
