from flask import Blueprint, jsonify, request, current_app
from functools import wraps
import threading
import time
import uuid
from bingo import bcrypt, db, SESSION_EXTENSION
from bingo.models import PlayerRecord, save_player, clear_all_scorecards
from bingo.services.game import (
    ArgumentError,
    ClaimType,
    PlayerNotFound,
    Session,
    SessionStateError,
)


game = Blueprint('game', __name__)

_last_host_action: dict[str, float] = {}
# Serialises core calls that change cards with the directory write that follows
_directory_lock = threading.Lock()


def _session() -> Session:
    return current_app.extensions[SESSION_EXTENSION]


def _parse_player_id(value) -> uuid.UUID:
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        raise ArgumentError('Invalid player id')


def _restore_from_directory(player_id: uuid.UUID, requested_name=None):
    """Rehydrate a player the directory knows but this process has not seen yet."""
    record = db.session.get(PlayerRecord, str(player_id))
    if record is None:
        raise PlayerNotFound('Unknown player id')
    name = record.display_name
    if not (name or '').strip():
        if not (requested_name or '').strip():
            raise ArgumentError('Display name required the first time you join the game')
        name = requested_name.strip()
    with _directory_lock:
        player = _session().restore_player(player_id, name, record.joined_at_utc(), record.scorecard)
        save_player(player)
    current_app.logger.info(f"[restore] player={player_id} from directory")
    return player


def _json_body() -> dict:
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else {}


def _resolve_player(player_id: uuid.UUID):
    try:
        return _session().get_player(player_id)
    except PlayerNotFound:
        return _restore_from_directory(player_id)


def host_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        provided = request.headers.get('X-Host-Key', '')
        key_hash = current_app.config['HOST_KEY_HASH']
        # bcrypt only looks at the first 72 bytes and newer releases reject longer input
        if not provided or len(provided.encode('utf-8')) > 72 or not bcrypt.check_password_hash(key_hash, provided):
            current_app.logger.warning(f"[host-denied] path={request.path}")
            return jsonify({'error': 'Invalid host key'}), 403
        return view(*args, **kwargs)
    return wrapper


def _debounced(action: str) -> bool:
    try:
        debounce_ms = int(current_app.config.get('HOST_DEBOUNCE_MS', 0))
    except (TypeError, ValueError):
        debounce_ms = 0
    if debounce_ms <= 0:
        return False
    now = time.time() * 1000.0
    last = _last_host_action.get(action, 0)
    if now - last < debounce_ms:
        return True
    _last_host_action[action] = now
    return False


@game.errorhandler(PlayerNotFound)
def handle_not_found(exc):
    return jsonify({'error': str(exc)}), 404


@game.errorhandler(ArgumentError)
def handle_bad_argument(exc):
    return jsonify({'error': str(exc)}), 400


@game.errorhandler(SessionStateError)
def handle_state_conflict(exc):
    return jsonify({'error': str(exc)}), 409


@game.route('/players', methods=['POST'])
def register_player():
    data = _json_body()
    name = data.get('display_name')
    if name is not None and not isinstance(name, str):
        return jsonify({'error': 'display_name must be a string'}), 400
    max_len = int(current_app.config.get('MAX_DISPLAY_NAME_LENGTH', 40))
    if name and len(name.strip()) > max_len:
        return jsonify({'error': f'Display name must be {max_len} characters or less'}), 400

    raw_id = data.get('player_id')
    if raw_id is None:
        player = _session().register_player(name)
        save_player(player)
        return jsonify(player.to_dict()), 201

    player_id = _parse_player_id(raw_id)
    try:
        player = _session().register_player(name, player_id)
    except PlayerNotFound:
        player = _restore_from_directory(player_id, requested_name=name)
    return jsonify(player.to_dict())


@game.route('/players', methods=['GET'])
def list_players():
    joined = {p.id for p in _session().list_players()}
    records = PlayerRecord.query.order_by(PlayerRecord.joined_at).all()
    return jsonify({
        'players': [r.to_dict(joined=r.player_uuid in joined) for r in records]
    })


@game.route('/players/<string:player_id>', methods=['GET'])
def get_player(player_id):
    player = _resolve_player(_parse_player_id(player_id))
    return jsonify(player.to_dict())


@game.route('/scorecards', methods=['GET'])
def preview_scorecards():
    default = int(current_app.config.get('PREVIEW_DEFAULT_COUNT', 6))
    limit = int(current_app.config.get('MAX_PREVIEW_COUNT', 20))
    count = request.args.get('count', default, type=int)
    if count > limit:
        return jsonify({'error': f'count must be {limit} or less'}), 400
    cards = _session().preview_scorecards(max(1, count))
    return jsonify({'scorecards': [c.to_dict() for c in cards]})


@game.route('/players/<string:player_id>/scorecard', methods=['POST'])
def select_scorecard(player_id):
    data = _json_body()
    card_id = data.get('scorecard_id')
    if not isinstance(card_id, str) or not card_id.strip():
        return jsonify({'error': 'scorecard_id is required'}), 400

    pid = _parse_player_id(player_id)
    _resolve_player(pid)
    with _directory_lock:
        player = _session().assign_scorecard(pid, card_id.strip())
        save_player(player)
    current_app.logger.info(f"[assign] player={pid} card={card_id}")
    return jsonify(player.to_dict())


@game.route('/game/state', methods=['GET'])
def get_game_state():
    return jsonify(_session().snapshot().to_dict())


@game.route('/game/start', methods=['POST'])
@host_required
def start_game():
    if _debounced('start'):
        return jsonify({'message': 'debounced'}), 202
    snapshot = _session().start()
    current_app.logger.info(f"[start] status={snapshot.status.value} remaining={snapshot.remaining_calls}")
    return jsonify(snapshot.to_dict())


@game.route('/game/draw', methods=['POST'])
@host_required
def draw_next():
    if _debounced('draw'):
        return jsonify({'message': 'debounced'}), 202
    snapshot = _session().draw_next()
    current_app.logger.info(
        f"[draw] call={snapshot.current_call!r} remaining={snapshot.remaining_calls} status={snapshot.status.value}"
    )
    return jsonify(snapshot.to_dict())


@game.route('/game/reset', methods=['POST'])
@host_required
def reset_game():
    drop_players = request.args.get('drop_players', 'false').strip().lower() in ('1', 'true', 'yes')
    with _directory_lock:
        snapshot = _session().reset(drop_players)
        cleared = clear_all_scorecards()
    _last_host_action.clear()
    current_app.logger.info(f"[reset] drop_players={drop_players} directory_cards_cleared={cleared}")
    return jsonify(snapshot.to_dict())


@game.route('/game/claim', methods=['POST'])
@host_required
def claim_win():
    data = _json_body()
    raw_type = data.get('claim_type')
    try:
        claim_type = ClaimType(str(raw_type).strip().lower())
    except ValueError:
        return jsonify({'error': f'Unknown claim type: {raw_type}'}), 400
    if data.get('player_id') is None:
        return jsonify({'error': 'player_id is required'}), 400

    pid = _parse_player_id(data.get('player_id'))
    _resolve_player(pid)
    evaluation = _session().claim_win(pid, claim_type)
    current_app.logger.info(
        f"[claim] player={pid} type={claim_type.value} accepted={evaluation.accepted} message={evaluation.message!r}"
    )
    return jsonify(evaluation.to_dict())
