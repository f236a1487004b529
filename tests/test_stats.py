from datetime import datetime

import match
from conftest import MISS, D, S, T, with_scores
from match import DartInput
from stats import compute_statistics, player_stats, share_text


def finished_game():
    state = match.start_game(["Ann", "Bob"], game_type=301, now=0)
    state = match.apply_turn(state, [T(20), T(20), T(20)])  # Ann 301 -> 121
    state = match.apply_turn(state, [S(20), S(20), MISS])  # Bob 301 -> 261
    state = with_scores(state, 121, 10)
    state = match.apply_turn(state, [T(20), T(19), MISS])  # Ann 121 -> 4
    state = match.apply_turn(state, [T(20)])  # Bob busts
    return match.apply_turn(state, [D(2), DartInput.empty(), DartInput.empty()])


def test_busts_count_darts_but_no_points():
    bob = finished_game().players[1]
    s = player_stats(bob)
    assert s.total_rounds == 2
    assert s.bust_rounds == 1
    assert s.total_darts == 4
    assert s.total_points_scored == 40
    assert s.avg_per_3_darts == 30.0


def test_darts_actually_thrown_used_for_average():
    ann = finished_game().players[0]
    s = player_stats(ann)
    assert s.total_darts == 7
    assert s.total_points_scored == 301
    assert round(s.avg_per_3_darts, 1) == 129.0


def test_ranking_by_legs_then_remaining():
    stats = compute_statistics(finished_game().players)
    assert [s.player.name for s in stats] == ["Ann", "Bob"]
    assert [s.position for s in stats] == [1, 2]


def test_ranking_falls_back_to_average():
    state = match.start_game(["Low", "High"], now=0)
    state = match.apply_turn(state, [S(1), S(1), S(1)])
    state = match.apply_turn(state, [T(20), T(20), T(20)])
    state = with_scores(state, 100, 100)
    stats = compute_statistics(state.players)
    assert [s.player.name for s in stats] == ["High", "Low"]


def test_no_history_means_zero_average():
    state = match.start_game(["Ann"], now=0)
    s = player_stats(state.players[0])
    assert s.total_darts == 0
    assert s.avg_per_3_darts == 0.0


def test_share_text_single_leg():
    state = finished_game()
    text = share_text(state, now=datetime(2024, 5, 1, 20, 30))
    lines = text.splitlines()
    assert lines[0] == "DART STATISTICS"
    assert "Game: 301 | Double Out" in lines
    assert "Date: 05/01/2024 20:30" in lines
    assert "#  Player  Rem  Avg3 Darts" in lines
    assert "1. Ann       0 129.0     7" in lines
    assert "2. Bob      10  30.0     4" in lines
    assert "Winner: Ann" in lines
    assert lines[-1] == "Busts included (0 pts)"


def test_share_text_multi_leg_truncates_long_names():
    state = match.start_game(["Bartholomew Smith", "Al"], total_legs=3, finish_mode="simple", now=0)
    text = share_text(state, now=datetime(2024, 1, 2, 3, 4))
    assert "Game: 501 | Legs: 3 | Simple" in text
    assert "Bartholom." in text
    assert "0/3" in text
    assert "Winner:" not in text
