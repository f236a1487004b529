"""
x01 match rules: turn resolution, bust/finish checks, leg and match progression, undo.

Every transition takes a MatchState and returns a new one; nothing is mutated in place,
so keeping earlier states around is all undo needs.
"""

import logging
import math
import time
import uuid
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

GAME_TYPES = (301, 501)
FINISH_SIMPLE = "simple"
FINISH_DOUBLE = "double"
FINISH_MODES = (FINISH_SIMPLE, FINISH_DOUBLE)
LEG_OPTIONS = (1, 3, 5, 7, 9)
MAX_PLAYERS = 6
UNDO_LIMIT = 10
DARTS_PER_TURN = 3

PHASE_SETUP = "setup"
PHASE_PLAYING = "playing"
PHASE_LEG_FINISHED = "legFinished"
PHASE_FINISHED = "finished"
PHASES = (PHASE_SETUP, PHASE_PLAYING, PHASE_LEG_FINISHED, PHASE_FINISHED)

DART_EMPTY = "empty"
DART_MISS = "miss"
DART_SCORED = "scored"
DART_STATES = (DART_EMPTY, DART_MISS, DART_SCORED)

SINGLE_BULL = 25
BULLSEYE = 50
BULL_VALUES = (SINGLE_BULL, BULLSEYE)


class InvalidStateError(RuntimeError):
    """Raised when an operation is called in a phase that does not allow it."""


@dataclass(frozen=True)
class DartInput:
    """
    One dart of a turn.

    - value: None until entered, then 0-20, 25 (bull) or 50 (bullseye)
    - multiplier: 1 single, 2 double, 3 triple; ignored for the bulls
    - state: "empty" (not thrown), "miss" or "scored"
    """

    value: Optional[int] = None
    multiplier: int = 1
    state: str = DART_EMPTY

    @classmethod
    def scored(cls, value, multiplier=1):
        return cls(value=value, multiplier=multiplier, state=DART_SCORED)

    @classmethod
    def miss(cls):
        return cls(value=0, multiplier=1, state=DART_MISS)

    @classmethod
    def empty(cls):
        return cls()

    @property
    def points(self) -> int:
        if self.state != DART_SCORED or not self.value:
            return 0
        if self.value in BULL_VALUES:
            return self.value
        return self.value * self.multiplier

    @property
    def is_double_finish(self) -> bool:
        if self.value == BULLSEYE:
            return True
        return self.multiplier == 2 and self.value not in BULL_VALUES

    @property
    def label(self) -> str:
        if self.state == DART_EMPTY:
            return "-"
        if self.state == DART_MISS or not self.value:
            return "Miss"
        if self.value == BULLSEYE:
            return "Bullseye"
        if self.value == SINGLE_BULL:
            return "Bull"
        prefix = "T" if self.multiplier == 3 else ("D" if self.multiplier == 2 else "S")
        return f"{prefix}{self.value}"


@dataclass(frozen=True)
class TurnHistory:
    darts: Tuple[int, int, int]
    dart_details: Tuple[DartInput, DartInput, DartInput]
    total: int
    score_after: int
    was_bust: bool
    is_winning_round: bool
    darts_actually_thrown: int
    leg_number: int


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    starting_score: int
    current_score: int
    history: Tuple[TurnHistory, ...] = ()
    legs_won: int = 0


@dataclass(frozen=True)
class MatchState:
    phase: str = PHASE_SETUP
    game_type: int = 501
    finish_mode: str = FINISH_DOUBLE
    total_legs: int = 1
    current_leg: int = 1
    players: Tuple[Player, ...] = ()
    active_player_index: int = 0
    winner: Optional[Player] = None
    leg_winner: Optional[Player] = None
    start_time: float = 0.0

    @property
    def active_player(self) -> Optional[Player]:
        if not self.players:
            return None
        return self.players[self.active_player_index]

    @property
    def legs_to_win(self) -> int:
        return math.ceil(self.total_legs / 2)


@dataclass(frozen=True)
class UndoStack:
    """Bounded stack of states captured before each turn (oldest dropped first)."""

    snapshots: Tuple[MatchState, ...] = ()
    limit: int = UNDO_LIMIT

    def __len__(self):
        return len(self.snapshots)

    def push(self, state: MatchState) -> "UndoStack":
        kept = self.snapshots[-(self.limit - 1):] if self.limit > 1 else ()
        return replace(self, snapshots=kept + (state,))

    def pop(self) -> Tuple[Optional[MatchState], "UndoStack"]:
        if not self.snapshots:
            return None, self
        return self.snapshots[-1], replace(self, snapshots=self.snapshots[:-1])

    def cleared(self) -> "UndoStack":
        return replace(self, snapshots=())


def new_game() -> MatchState:
    """A blank match waiting in setup."""
    return MatchState(start_time=time.time())


def start_game(names, game_type=501, finish_mode=FINISH_DOUBLE, total_legs=1, now=None) -> MatchState:
    """
    Create the players and move to the first leg.

    Raises ValueError for an empty or oversized roster, blank names or an unknown
    game type, finish mode or leg count.
    """
    names = [str(n).strip() if n is not None else "" for n in (names or [])]
    if not names:
        raise ValueError("At least one player is required")
    if len(names) > MAX_PLAYERS:
        raise ValueError(f"A game can have at most {MAX_PLAYERS} players")
    if any(not n for n in names):
        raise ValueError("Player names must not be blank")
    if game_type not in GAME_TYPES:
        raise ValueError(f"Unknown game type: {game_type!r}")
    if finish_mode not in FINISH_MODES:
        raise ValueError(f"Unknown finish mode: {finish_mode!r}")
    if total_legs not in LEG_OPTIONS:
        raise ValueError(f"Number of legs must be one of {LEG_OPTIONS}")

    players = tuple(
        Player(id=uuid.uuid4().hex[:12], name=name, starting_score=game_type, current_score=game_type)
        for name in names
    )
    logger.debug("Starting %s (%s out, %s legs) for %d players", game_type, finish_mode, total_legs, len(players))
    return MatchState(
        phase=PHASE_PLAYING,
        game_type=game_type,
        finish_mode=finish_mode,
        total_legs=total_legs,
        current_leg=1,
        players=players,
        active_player_index=0,
        start_time=time.time() if now is None else now,
    )


def _pad_throws(throws: Sequence[DartInput]) -> Tuple[DartInput, DartInput, DartInput]:
    throws = tuple(throws or ())
    if len(throws) > DARTS_PER_TURN:
        raise ValueError(f"A turn has at most {DARTS_PER_TURN} darts")
    return throws + (DartInput.empty(),) * (DARTS_PER_TURN - len(throws))


def _last_scoring_dart(details):
    for dart in reversed(details):
        if dart.state == DART_SCORED and dart.value:
            return dart
    return None


def resolve_turn(pre_score, throws, finish_mode, leg_number=1) -> TurnHistory:
    """Score one turn for a player standing on `pre_score`; pure, no state involved."""
    details = _pad_throws(throws)
    darts = tuple(d.points for d in details)
    total = sum(darts)
    new_score = pre_score - total

    if finish_mode == FINISH_SIMPLE:
        bust = new_score < 0
    else:
        bust = new_score < 0 or new_score == 1

    win = False
    if new_score == 0 and not bust:
        if finish_mode == FINISH_SIMPLE:
            win = True
        else:
            last = _last_scoring_dart(details)
            win = last is not None and last.is_double_finish
            # Reaching zero without a double (or bullseye) does not count.
            bust = not win

    return TurnHistory(
        darts=darts,
        dart_details=details,
        total=total,
        score_after=pre_score if bust else new_score,
        was_bust=bust,
        is_winning_round=win,
        darts_actually_thrown=sum(1 for d in details if d.state != DART_EMPTY),
        leg_number=leg_number,
    )


def _replace_player(players, index, updated):
    return players[:index] + (updated,) + players[index + 1:]


def apply_turn(state: MatchState, throws, finish_mode=None) -> MatchState:
    """Resolve the active player's turn and return the next state."""
    if state.phase != PHASE_PLAYING:
        raise InvalidStateError(f"Cannot apply a turn while the match is in phase '{state.phase}'")

    mode = finish_mode or state.finish_mode
    index = state.active_player_index
    active = state.players[index]
    turn = resolve_turn(active.current_score, throws, mode, state.current_leg)

    updated = replace(active, current_score=turn.score_after, history=active.history + (turn,))
    if turn.was_bust:
        logger.debug("Bust for %s: %s from %s", active.name, turn.total, active.current_score)

    if turn.is_winning_round:
        updated = replace(updated, legs_won=updated.legs_won + 1)
        players = _replace_player(state.players, index, updated)
        if state.total_legs == 1 or updated.legs_won >= state.legs_to_win:
            logger.info("%s won the match (%d/%d legs)", updated.name, updated.legs_won, state.total_legs)
            return replace(state, phase=PHASE_FINISHED, players=players, winner=updated, leg_winner=None)
        logger.info("%s won leg %d", updated.name, state.current_leg)
        return replace(state, phase=PHASE_LEG_FINISHED, players=players, leg_winner=updated)

    players = _replace_player(state.players, index, updated)
    return replace(state, players=players, active_player_index=(index + 1) % len(players))


def advance_leg(state: MatchState) -> MatchState:
    """Start the next leg after a leg win; scores reset, history and legs won are kept."""
    if state.phase != PHASE_LEG_FINISHED:
        raise InvalidStateError(f"Cannot advance to the next leg from phase '{state.phase}'")
    players = tuple(replace(p, current_score=p.starting_score) for p in state.players)
    logger.debug("Advancing to leg %d", state.current_leg + 1)
    return replace(
        state,
        phase=PHASE_PLAYING,
        current_leg=state.current_leg + 1,
        players=players,
        active_player_index=0,
        leg_winner=None,
    )


def play_turn(state: MatchState, undo_stack: UndoStack, throws) -> Tuple[MatchState, UndoStack]:
    """
    apply_turn plus undo bookkeeping.

    The pre-turn state is pushed onto the stack; when the turn ends the leg or the
    match the stack is emptied instead, so a finished leg cannot be undone.
    """
    next_state = apply_turn(state, throws)
    if next_state.phase != PHASE_PLAYING:
        return next_state, undo_stack.cleared()
    return next_state, undo_stack.push(state)


def undo(state: MatchState, undo_stack: UndoStack) -> Tuple[MatchState, UndoStack]:
    """Restore the state before the last turn. Nothing to undo leaves both unchanged."""
    previous, remaining = undo_stack.pop()
    if previous is None:
        return state, undo_stack
    logger.debug("Undo: restoring leg %d, player index %d", previous.current_leg, previous.active_player_index)
    return previous, remaining


def rematch(state: MatchState, now=None) -> MatchState:
    """Same players and settings, everything else back to the first leg."""
    if state.phase == PHASE_SETUP:
        raise InvalidStateError("Cannot restart a match that has not been set up")
    players = tuple(
        replace(p, current_score=p.starting_score, history=(), legs_won=0) for p in state.players
    )
    return replace(
        state,
        phase=PHASE_PLAYING,
        current_leg=1,
        players=players,
        active_player_index=0,
        winner=None,
        leg_winner=None,
        start_time=time.time() if now is None else now,
    )
