import logging
import os
from datetime import datetime

from flask import Flask, jsonify, request
from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import SQLAlchemyError

import match
import snapshot
from checkout import format_checkout, suggest_checkout
from stats import compute_statistics, share_text

# Basic logging setup; set DARTS_LOG_LEVEL=DEBUG to see every state transition.
logging.basicConfig(level=os.environ.get("DARTS_LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)

app = Flask(__name__)
base_dir = os.path.abspath(os.path.dirname(__file__))
app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite:///" + os.path.join(base_dir, "darts.db")
app.config["SQLALCHEMY_TRACK_MODIFICATIONS"] = False
# DARTS_SQLALCHEMY_DATABASE_URI etc. override the defaults above
app.config.from_prefixed_env("DARTS")
db = SQLAlchemy(app)


# Models
class Game(db.Model):
    """
    One match. The engine state and its undo stack are stored as opaque JSON snapshots
    and replaced wholesale on every transition.
    """

    id = db.Column(db.Integer, primary_key=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    state = db.Column(db.JSON, nullable=False)
    undo = db.Column(db.JSON, nullable=False, default=list)

    def load(self):
        return snapshot.state_from_dict(self.state), snapshot.undo_from_list(self.undo)

    def store(self, state, undo_stack):
        self.state = snapshot.state_to_dict(state)
        self.undo = snapshot.undo_to_list(undo_stack)


class Settings(db.Model):
    """
    Single-row settings table holding the last active game id so the client can restore
    an in-progress game after reload.
    """

    id = db.Column(db.Integer, primary_key=True)
    last_active_game_id = db.Column(db.Integer, nullable=True)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    def to_dict(self):
        return {
            "last_active_game_id": self.last_active_game_id,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


with app.app_context():
    db.create_all()


# Errors
@app.errorhandler(match.InvalidStateError)
def handle_invalid_state(e):
    logger.warning("Rejected out-of-phase request: %s", e)
    return jsonify({"error": str(e)}), 409


@app.errorhandler(snapshot.SnapshotError)
def handle_bad_snapshot(e):
    logger.error("Stored game could not be loaded: %s", e)
    return jsonify({"error": "Stored game is corrupt", "details": str(e)}), 500


# Helpers
def _set_last_active(game_id):
    s = Settings.query.first()
    if not s:
        s = Settings()
        db.session.add(s)
    s.last_active_game_id = game_id


def _commit(game, state, undo_stack, action):
    """Persist the new state; returns an error response tuple on failure, else None."""
    try:
        game.store(state, undo_stack)
        db.session.add(game)
        db.session.commit()
    except SQLAlchemyError as e:
        logger.exception("Failed to %s for game id=%s: %s", action, game.id, e)
        try:
            db.session.rollback()
        except SQLAlchemyError:
            logger.debug("Rollback failed after %s error for game id=%s", action, game.id)
        return jsonify({"error": f"Failed to {action}"}), 500
    return None


def _parse_throw(raw):
    if raw is None:
        return match.DartInput.empty()
    if not isinstance(raw, dict):
        raise ValueError("Each throw must be an object with value/multiplier/state")
    value = raw.get("value")
    multiplier = raw.get("multiplier")
    multiplier = 1 if multiplier is None else int(multiplier)
    state = raw.get("state")
    # multiplier 0 is the OUT ring: a miss whatever the value
    if multiplier == 0:
        state, value, multiplier = match.DART_MISS, 0, 1
    if state is None:
        if value is None:
            state = match.DART_EMPTY
        else:
            state = match.DART_SCORED if int(value) > 0 else match.DART_MISS
    if state not in match.DART_STATES:
        raise ValueError(f"Unknown dart state: {state!r}")
    if value is not None:
        value = int(value)
        if not (0 <= value <= 20 or value in match.BULL_VALUES):
            raise ValueError(f"Invalid dart value: {value}")
    if multiplier not in (1, 2, 3):
        raise ValueError(f"Invalid multiplier: {multiplier}")
    if state == match.DART_SCORED and value in match.BULL_VALUES:
        multiplier = 1
    return match.DartInput(value=value, multiplier=multiplier, state=state)


def _parse_setup(data):
    try:
        game_type = int(data.get("game_type", 501))
        total_legs = int(data.get("total_legs", 1))
    except (TypeError, ValueError):
        raise ValueError("game_type and total_legs must be integers") from None
    names = data.get("players")
    if names is None:
        names = []
    if not isinstance(names, list) or not all(isinstance(n, str) for n in names):
        raise ValueError("players must be a list of names")
    return dict(
        names=names,
        game_type=game_type,
        finish_mode=data.get("finish_mode", match.FINISH_DOUBLE),
        total_legs=total_legs,
    )


def turn_to_dict(turn):
    return {
        "darts": list(turn.darts),
        "labels": [d.label for d in turn.dart_details],
        "total": turn.total,
        "score_after": turn.score_after,
        "was_bust": turn.was_bust,
        "is_winning_round": turn.is_winning_round,
        "darts_actually_thrown": turn.darts_actually_thrown,
        "leg_number": turn.leg_number,
    }


def game_to_dict(game, state, undo_stack):
    players_out = []
    for index, p in enumerate(state.players):
        last_turn = p.history[-1] if p.history else None
        route = suggest_checkout(p.current_score, state.finish_mode)
        players_out.append(
            {
                "id": p.id,
                "name": p.name,
                "starting_score": p.starting_score,
                "current_score": p.current_score,
                "legs_won": p.legs_won,
                "is_active": state.phase == match.PHASE_PLAYING and index == state.active_player_index,
                "last_turn": turn_to_dict(last_turn) if last_turn else None,
                "suggestion": route,
                "suggestion_text": format_checkout(route),
            }
        )
    return {
        "id": game.id,
        "phase": state.phase,
        "game_type": state.game_type,
        "finish_mode": state.finish_mode,
        "total_legs": state.total_legs,
        "legs_to_win": state.legs_to_win,
        "current_leg": state.current_leg,
        "active_player_index": state.active_player_index,
        "winner": state.winner.name if state.winner else None,
        "leg_winner": state.leg_winner.name if state.leg_winner else None,
        "start_time": state.start_time,
        "can_undo": len(undo_stack) > 0,
        "players": players_out,
    }


# Game creation
@app.route("/api/new_game", methods=["POST"])
def new_game():
    """
    Create a match. With a "players" list in the payload the first leg starts right away:
      { "players": ["Ann", "Bob"], "game_type": 501, "finish_mode": "double", "total_legs": 3 }
    Without players the match waits in setup for /api/games/<id>/start.
    """
    payload = request.get_json(silent=True) or {}
    state = match.new_game()
    if payload.get("players"):
        try:
            state = match.start_game(**_parse_setup(payload))
        except ValueError as e:
            return jsonify({"error": str(e)}), 400

    try:
        game = Game()
        game.store(state, match.UndoStack())
        db.session.add(game)
        db.session.flush()
        _set_last_active(game.id)
        db.session.commit()
    except SQLAlchemyError as e:
        logger.exception("Failed to create game: %s", e)
        db.session.rollback()
        return jsonify({"error": "Failed to create game", "details": str(e)}), 500

    logger.info("Created game id=%s (phase=%s, players=%d)", game.id, state.phase, len(state.players))
    return jsonify({"game_id": game.id, "game": game_to_dict(game, state, match.UndoStack())}), 201


@app.route("/api/games/<int:game_id>/start", methods=["POST"])
def start_game(game_id):
    """Start a match that is waiting in setup. Same payload as /api/new_game."""
    game = db.get_or_404(Game, game_id)
    state, _ = game.load()
    if state.phase != match.PHASE_SETUP:
        raise match.InvalidStateError(f"Game already started (phase '{state.phase}')")
    try:
        state = match.start_game(**_parse_setup(request.get_json(silent=True) or {}))
    except ValueError as e:
        return jsonify({"error": str(e)}), 400

    undo_stack = match.UndoStack()
    _set_last_active(game.id)
    error = _commit(game, state, undo_stack, "start game")
    if error:
        return error
    logger.info("Game id=%s started with %d players", game.id, len(state.players))
    return jsonify({"status": "ok", "game": game_to_dict(game, state, undo_stack)})


# Turn API
@app.route("/api/games/<int:game_id>/turn", methods=["POST"])
def submit_turn(game_id):
    """
    Submit the active player's turn:
      { "throws": [ {"value": 20, "multiplier": 3}, {"value": 0, "state": "miss"}, null ] }
    Fewer than three throws are treated as darts not thrown (e.g. after a finish).
    Returns the updated game plus the resolved turn (bust / winning flags).
    """
    game = db.get_or_404(Game, game_id)
    data = request.get_json(silent=True) or {}
    raw_throws = data.get("throws")
    if not isinstance(raw_throws, list):
        return jsonify({"error": "throws must be a list"}), 400
    if len(raw_throws) > match.DARTS_PER_TURN:
        return jsonify({"error": f"A turn has at most {match.DARTS_PER_TURN} darts"}), 400
    try:
        throws = [_parse_throw(t) for t in raw_throws]
    except (TypeError, ValueError) as e:
        return jsonify({"error": str(e)}), 400

    state, undo_stack = game.load()
    index = state.active_player_index
    state, undo_stack = match.play_turn(state, undo_stack, throws)

    error = _commit(game, state, undo_stack, "record turn")
    if error:
        return error

    turn = state.players[index].history[-1]
    if state.phase == match.PHASE_FINISHED:
        status = "match_won"
    elif state.phase == match.PHASE_LEG_FINISHED:
        status = "leg_won"
    elif turn.was_bust:
        status = "bust"
    else:
        status = "ok"
    return jsonify({"status": status, "turn": turn_to_dict(turn), "game": game_to_dict(game, state, undo_stack)})


@app.route("/api/games/<int:game_id>/undo", methods=["POST"])
def undo_turn(game_id):
    """Undo the last turn of the current leg. Nothing to undo is not an error."""
    game = db.get_or_404(Game, game_id)
    state, undo_stack = game.load()
    if not len(undo_stack):
        return jsonify({"status": "noop", "game": game_to_dict(game, state, undo_stack)})

    state, undo_stack = match.undo(state, undo_stack)
    error = _commit(game, state, undo_stack, "undo turn")
    if error:
        return error
    logger.info("Undo for game id=%s (%d snapshots left)", game.id, len(undo_stack))
    return jsonify({"status": "ok", "game": game_to_dict(game, state, undo_stack)})


@app.route("/api/games/<int:game_id>/next_leg", methods=["POST"])
def next_leg(game_id):
    """
    Advance to the next leg after a leg win:
      - reset all players' current_score to their starting_score
      - increment the leg counter, first player throws first
    The undo history does not carry over.
    """
    game = db.get_or_404(Game, game_id)
    state, _ = game.load()
    state = match.advance_leg(state)
    undo_stack = match.UndoStack()
    error = _commit(game, state, undo_stack, "advance leg")
    if error:
        return error
    logger.info("Game id=%s advanced to leg %d", game.id, state.current_leg)
    return jsonify({"status": "ok", "current_leg": state.current_leg, "game": game_to_dict(game, state, undo_stack)})


# Endpoint: restart game (rematch with the same players and settings)
@app.route("/api/games/<int:game_id>/restart", methods=["POST"])
def restart_game(game_id):
    """
    Restart the game: reset all players' scores, history and legs won, go back to leg 1
    and make the game active again.
    """
    logger.info("Restart requested for game id=%s", game_id)
    game = db.get_or_404(Game, game_id)
    state, _ = game.load()
    state = match.rematch(state)
    undo_stack = match.UndoStack()
    _set_last_active(game.id)
    error = _commit(game, state, undo_stack, "restart game")
    if error:
        return error
    logger.info("Game id=%s restarted successfully", game_id)
    return jsonify({"status": "ok", "message": "Game restarted", "game": game_to_dict(game, state, undo_stack)})


# Endpoint: end game (discard the match and go back to setup)
# Provide two routes for compatibility: /end and /end_game
@app.route("/api/games/<int:game_id>/end", methods=["POST"])
@app.route("/api/games/<int:game_id>/end_game", methods=["POST"])
def end_game(game_id):
    """Discard the match state and return the game to setup."""
    logger.info("End game requested for game id=%s", game_id)
    game = db.get_or_404(Game, game_id)
    state = match.new_game()
    undo_stack = match.UndoStack()

    # Clear last_active_game_id so the frontend won't try to restore a discarded game
    s = Settings.query.first()
    if s and s.last_active_game_id == game.id:
        s.last_active_game_id = None

    error = _commit(game, state, undo_stack, "end game")
    if error:
        return error
    logger.info("Game id=%s returned to setup", game_id)
    return jsonify({"status": "ok", "message": "Game ended", "game": game_to_dict(game, state, undo_stack)})


# Game state (per-player checkout hint and last visit)
@app.route("/api/game_state/<int:game_id>", methods=["GET"])
def game_state(game_id):
    game = db.get_or_404(Game, game_id)
    state, undo_stack = game.load()
    return jsonify(game_to_dict(game, state, undo_stack))


@app.route("/api/games/<int:game_id>/stats", methods=["GET"])
def game_stats(game_id):
    """
    Returns per-player statistics ranked by legs won, remaining score and 3-dart average,
    plus a plain-text summary suitable for sharing.
    """
    game = db.get_or_404(Game, game_id)
    state, _ = game.load()
    stats = compute_statistics(state.players)
    return jsonify(
        {
            "game_id": game.id,
            "players": [s.to_dict() for s in stats],
            "share_text": share_text(state, stats),
        }
    )


@app.route("/api/checkout/<int:score>", methods=["GET"])
def checkout(score):
    mode = request.args.get("mode", match.FINISH_DOUBLE)
    if mode not in match.FINISH_MODES:
        return jsonify({"error": f"Unknown finish mode: {mode}"}), 400
    route = suggest_checkout(score, mode)
    return jsonify({"score": score, "mode": mode, "suggestion": route, "text": format_checkout(route)})


@app.route("/api/settings", methods=["GET"])
def settings_api():
    s = Settings.query.first()
    if not s:
        return jsonify({"last_active_game_id": None, "updated_at": None})
    return jsonify(s.to_dict())


if __name__ == "__main__":
    app.run(debug=True)
