import json

import pytest

import match
import snapshot
from conftest import MISS, D, S, T, with_scores
from match import UndoStack


def played_state():
    state = match.start_game(["Ann", "Bob"], total_legs=3, now=1234.5)
    state = match.apply_turn(state, [T(20), MISS, S(5)])
    state = match.apply_turn(state, [T(20), T(20), T(20)])
    state = with_scores(state, 40, 321)
    return match.apply_turn(state, [D(20)])


def test_dict_round_trip_is_lossless():
    state = played_state()
    assert state.leg_winner is not None
    assert snapshot.state_from_dict(snapshot.state_to_dict(state)) == state


def test_json_round_trip_is_lossless():
    state = played_state()
    text = snapshot.dumps(state)
    json.loads(text)
    assert snapshot.loads(text) == state


def test_undo_stack_round_trip():
    state, stack = match.play_turn(match.start_game(["Ann"], now=1.0), UndoStack(), [S(20)])
    state, stack = match.play_turn(state, stack, [S(19)])
    items = json.loads(json.dumps(snapshot.undo_to_list(stack)))
    assert snapshot.undo_from_list(items) == stack


def test_missing_fields_get_defaults():
    data = snapshot.state_to_dict(match.start_game(["Ann"], now=5.0))
    for key in ("finish_mode", "total_legs", "current_leg", "start_time"):
        del data[key]
    del data["players"][0]["legs_won"]
    state = snapshot.state_from_dict(data, now=99.0)
    assert state.finish_mode == "double"
    assert state.total_legs == 1
    assert state.current_leg == 1
    assert state.start_time == 99.0
    assert state.players[0].legs_won == 0


def test_zero_start_time_survives_round_trip():
    state = match.start_game(["Ann"], now=0.0)
    back = snapshot.state_from_dict(snapshot.state_to_dict(state), now=5.0)
    assert back.start_time == 0.0
    assert back == state


@pytest.mark.parametrize("bad", [None, [], {"players": []}, {"phase": "playing"}])
def test_malformed_snapshot_raises(bad):
    with pytest.raises(snapshot.SnapshotError):
        snapshot.state_from_dict(bad)


def test_loads_rejects_invalid_json():
    with pytest.raises(snapshot.SnapshotError):
        snapshot.loads("{not json")
