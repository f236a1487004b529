"""
Match statistics and the plain-text summary players share after a game.

Busted turns count their darts but score 0 points.
"""

from dataclasses import dataclass, replace
from datetime import datetime
from typing import List

from match import FINISH_DOUBLE, MatchState, Player


@dataclass(frozen=True)
class PlayerStats:
    player: Player
    total_darts: int
    total_points_scored: int
    avg_per_3_darts: float
    total_rounds: int
    bust_rounds: int
    position: int = 0

    def to_dict(self):
        return {
            "player_id": self.player.id,
            "name": self.player.name,
            "legs_won": self.player.legs_won,
            "current_score": self.player.current_score,
            "total_darts": self.total_darts,
            "total_points_scored": self.total_points_scored,
            "avg_per_3_darts": round(self.avg_per_3_darts, 1),
            "total_rounds": self.total_rounds,
            "bust_rounds": self.bust_rounds,
            "position": self.position,
        }


def player_stats(player: Player) -> PlayerStats:
    total_darts = 0
    points = 0
    busts = 0
    for turn in player.history:
        total_darts += turn.darts_actually_thrown
        if turn.was_bust:
            busts += 1
        else:
            points += turn.total
    avg = (points / total_darts) * 3 if total_darts else 0.0
    return PlayerStats(
        player=player,
        total_darts=total_darts,
        total_points_scored=points,
        avg_per_3_darts=avg,
        total_rounds=len(player.history),
        bust_rounds=busts,
    )


def compute_statistics(players) -> List[PlayerStats]:
    """Stats for every player, ranked by legs won, then lowest remaining score, then average."""
    stats = [player_stats(p) for p in players]
    stats.sort(key=lambda s: (-s.player.legs_won, s.player.current_score, -s.avg_per_3_darts))
    return [replace(s, position=i) for i, s in enumerate(stats, start=1)]


def share_text(state: MatchState, stats=None, now=None) -> str:
    if stats is None:
        stats = compute_statistics(state.players)
    now = now or datetime.now()
    multi_leg = state.total_legs > 1
    mode = "Double Out" if state.finish_mode == FINISH_DOUBLE else "Simple"
    width = min(max([len(p.name) for p in state.players] + [6]), 10)

    lines = ["DART STATISTICS", "=" * 24]
    if multi_leg:
        lines.append(f"Game: {state.game_type} | Legs: {state.total_legs} | {mode}")
    else:
        lines.append(f"Game: {state.game_type} | {mode}")
    lines.append(f"Date: {now:%m/%d/%Y %H:%M}")
    lines.append("")

    lines.append("```")
    third = "Legs" if multi_leg else "Rem"
    lines.append(f"{'#':<3}{'Player':<{width + 1}}{third:>4} {'Avg3':>5} {'Darts':>5}")
    lines.append("=" * (3 + width + 1 + 4 + 1 + 5 + 1 + 5))
    for s in stats:
        name = s.player.name
        name = name[: width - 1] + "." if len(name) > width else f"{name:<{width}}"
        pos = f"{s.position}. ".ljust(3)
        column = f"{s.player.legs_won}/{state.total_legs}" if multi_leg else str(s.player.current_score)
        lines.append(f"{pos}{name} {column:>4} {s.avg_per_3_darts:>5.1f} {s.total_darts:>5}")
    lines.append("```")
    lines.append("")

    if state.winner is not None:
        lines.append(f"Winner: {state.winner.name}")
    lines.append("Avg/3 = (Pts/Darts) x 3")
    lines.append("Busts included (0 pts)")
    return "\n".join(lines)
