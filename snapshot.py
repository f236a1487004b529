"""
Plain-data snapshots of a match, for storing between requests.

The layout is whatever dataclasses.asdict produces; callers should treat it as opaque.
"""

import json
import logging
import time
from dataclasses import asdict

from match import DartInput, MatchState, Player, TurnHistory, UndoStack, FINISH_DOUBLE

logger = logging.getLogger(__name__)


class SnapshotError(ValueError):
    """Raised when a stored snapshot cannot be turned back into a MatchState."""


def state_to_dict(state: MatchState) -> dict:
    return asdict(state)


def _or_default(value, default):
    # stored zeros (e.g. start_time 0.0) are real values, only absent/null fields get defaults
    return default if value is None else value


def _turn_from_dict(data):
    return TurnHistory(
        darts=tuple(data["darts"]),
        dart_details=tuple(DartInput(**d) for d in data["dart_details"]),
        total=data["total"],
        score_after=data["score_after"],
        was_bust=data["was_bust"],
        is_winning_round=data.get("is_winning_round", False),
        darts_actually_thrown=data.get("darts_actually_thrown", 3),
        leg_number=data.get("leg_number", 1),
    )


def _player_from_dict(data):
    if data is None:
        return None
    return Player(
        id=data["id"],
        name=data["name"],
        starting_score=data["starting_score"],
        current_score=data["current_score"],
        history=tuple(_turn_from_dict(t) for t in data.get("history") or ()),
        legs_won=_or_default(data.get("legs_won"), 0),
    )


def state_from_dict(data, now=None) -> MatchState:
    """
    Rebuild a MatchState. Fields older snapshots lack are filled with their defaults
    (double out, one leg, leg 1, no legs won, start time = now).
    """
    if not isinstance(data, dict):
        raise SnapshotError(f"Expected a mapping, got {type(data).__name__}")
    try:
        return MatchState(
            phase=data["phase"],
            game_type=data["game_type"],
            finish_mode=_or_default(data.get("finish_mode"), FINISH_DOUBLE),
            total_legs=_or_default(data.get("total_legs"), 1),
            current_leg=_or_default(data.get("current_leg"), 1),
            players=tuple(_player_from_dict(p) for p in data.get("players") or ()),
            active_player_index=data.get("active_player_index", 0),
            winner=_player_from_dict(data.get("winner")),
            leg_winner=_player_from_dict(data.get("leg_winner")),
            start_time=_or_default(data.get("start_time"), time.time() if now is None else now),
        )
    except (KeyError, TypeError) as e:
        logger.warning("Rejected malformed match snapshot: %s", e)
        raise SnapshotError(f"Malformed match snapshot: {e}") from e


def undo_to_list(undo_stack: UndoStack) -> list:
    return [state_to_dict(s) for s in undo_stack.snapshots]


def undo_from_list(items) -> UndoStack:
    return UndoStack(snapshots=tuple(state_from_dict(item) for item in items or ()))


def dumps(state: MatchState) -> str:
    return json.dumps(state_to_dict(state))


def loads(text: str) -> MatchState:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise SnapshotError(f"Snapshot is not valid JSON: {e}") from e
    return state_from_dict(data)
