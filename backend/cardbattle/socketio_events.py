from flask import current_app, request
from flask_login import current_user
from flask_socketio import emit, join_room, leave_room

from cardbattle import socketio
from cardbattle.services.battle.decks import validate_deck
from cardbattle.services.battle.payloads import as_dict, parse_int, parse_positive_int
from cardbattle.services.battle.results import ActionResult, ErrorKind
from cardbattle.services.battle.state import PlayerEntry
from cardbattle.services.battle.store import get_store


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _emit_error(message: str, kind: ErrorKind) -> None:
    # Only the offending connection hears about a rejected action
    emit('error', {'message': message, 'kind': kind.value})


def _broadcast_rooms_list() -> None:
    socketio.emit('roomsListUpdated', get_store().rooms.get_rooms_list(), namespace=request.namespace)


def _send_views(room_id: int, event: str, extra=None) -> None:
    engine = get_store().engine
    game = engine.get_game(room_id)
    if not game:
        return
    for sid in list(game.players):
        view = engine.project_view(room_id, sid)
        if view is None:
            continue
        if extra:
            view.update(extra)
        emit(event, view, to=sid)


def handle_connect(auth=None):
    if not current_user.is_authenticated:
        current_app.logger.info(f"[connect-refused] sid={_get_sid()}")
        return False
    get_store().mark_connected(_get_sid())
    current_app.logger.info(f"[connect] sid={_get_sid()} user={current_user.id}")
    emit('connected', {'userId': current_user.id, 'username': current_user.username})


def handle_disconnect(reason=None):
    # Waiting rooms and games of a departed connection are torn down; there is no resume
    sid = _get_sid()
    store = get_store()
    # Marked gone before the game scan, so a join racing with this
    # disconnect either sees the host gone or has its game found below
    store.mark_disconnected(sid)
    hosted = store.rooms.rooms_hosted_by(sid)
    for room in hosted:
        store.rooms.remove_room(room.id)
    for game in store.engine.games_for_connection(sid):
        if store.engine.remove_game(game.room_id) is None:
            continue
        socketio.emit('gameAbandoned', {'roomId': game.room_id},
                      to=game.room_channel_name, namespace=request.namespace)
        current_app.logger.info(f"[game-abandoned] room={game.room_id} sid={sid}")
    if hosted:
        _broadcast_rooms_list()


def handle_create_room(data):
    store = get_store()
    validated = validate_deck(current_user.id, as_dict(data).get('deckId'))
    if not validated.ok:
        _emit_error(validated.message, validated.kind)
        return

    room = store.rooms.create_room(
        room_id=store.rooms.next_room_id(),
        host_user_id=current_user.id,
        host_username=current_user.username,
        host_connection_id=_get_sid(),
        deck_id=validated.deck.id,
    )
    join_room(room.room_channel_name)
    current_app.logger.info(f"[room-created] room={room.id} host={room.host_username} deck={room.deck_id}")

    emit('roomCreated', room.to_dict())
    _broadcast_rooms_list()


def handle_get_rooms(data=None):
    emit('roomsList', get_store().rooms.get_rooms_list())


def handle_cancel_room(data):
    store = get_store()
    room_id = parse_positive_int(as_dict(data).get('roomId'))
    if room_id is None:
        _emit_error('Invalid room', ErrorKind.INVALID_INPUT)
        return
    room = store.rooms.get_room(room_id)
    if not room:
        _emit_error('Room does not exist', ErrorKind.NOT_FOUND)
        return
    if room.host_connection_id != _get_sid():
        _emit_error('Only the host can cancel this room', ErrorKind.FORBIDDEN)
        return

    store.rooms.remove_room(room_id)
    leave_room(room.room_channel_name)
    emit('roomCancelled', {'id': room_id})
    _broadcast_rooms_list()


def handle_join_room(data):
    store = get_store()
    payload = as_dict(data)
    sid = _get_sid()
    room_id = parse_positive_int(payload.get('roomId'))
    if room_id is None:
        _emit_error('Invalid room', ErrorKind.INVALID_INPUT)
        return

    validated = validate_deck(current_user.id, payload.get('deckId'))
    if not validated.ok:
        _emit_error(validated.message, validated.kind)
        return

    room = store.rooms.get_room(room_id)
    if not room:
        _emit_error('Room does not exist', ErrorKind.NOT_FOUND)
        return
    if room.host_connection_id == sid:
        _emit_error('You are already the host of this room', ErrorKind.FORBIDDEN)
        return

    host_deck = validate_deck(room.host_user_id, room.deck_id)
    if not host_deck.ok:
        _emit_error('Host deck is invalid', host_deck.kind)
        return

    # All lookups are done; only now take the room out of the lobby
    room = store.rooms.claim_room(room_id)
    if not room:
        _emit_error('Room does not exist', ErrorKind.NOT_FOUND)
        return

    # The guest is in the channel before the game exists
    join_room(room.room_channel_name)
    store.engine.start_game(
        room_id,
        room.room_channel_name,
        PlayerEntry(room.host_connection_id, room.host_user_id, room.host_username,
                    list(host_deck.deck.cards)),
        PlayerEntry(sid, current_user.id, current_user.username, list(validated.deck.cards)),
    )

    if not store.is_connected(room.host_connection_id):
        # The host left between the claim and the deal
        if store.engine.remove_game(room_id) is not None:
            emit('gameAbandoned', {'roomId': room_id})
            current_app.logger.info(f"[game-abandoned] room={room_id} sid={room.host_connection_id}")
        _broadcast_rooms_list()
        return

    _send_views(room_id, 'gameStarted')
    _broadcast_rooms_list()


def _run_action(data, apply) -> ActionResult:
    room_id = parse_positive_int(as_dict(data).get('roomId'))
    if room_id is None:
        result = ActionResult.failure(ErrorKind.INVALID_INPUT, 'Invalid room')
    else:
        result = apply(get_store().engine, room_id, _get_sid())
    if not result.ok:
        emit('error', result.to_error_payload())
        return result
    _send_views(room_id, 'gameStateUpdated')
    return result


def handle_draw_cards(data):
    _run_action(data, lambda engine, room_id, sid: engine.apply_draw_cards(room_id, sid))


def handle_play_card(data):
    card_index = parse_int(as_dict(data).get('cardIndex'))
    _run_action(data, lambda engine, room_id, sid: engine.apply_play_card(room_id, sid, card_index))


def handle_end_turn(data):
    _run_action(data, lambda engine, room_id, sid: engine.apply_end_turn(room_id, sid))


def handle_attack(data):
    result = _run_action(data, lambda engine, room_id, sid: engine.apply_attack(room_id, sid))
    if result.ok and result.winner_connection_id:
        room_id = parse_positive_int(as_dict(data).get('roomId'))
        _send_views(room_id, 'gameEnded', {'winnerConnectionId': result.winner_connection_id})
        game = get_store().engine.remove_game(room_id)
        if game is not None:
            for sid in game.players:
                leave_room(game.room_channel_name, sid=sid)
            current_app.logger.info(f"[game-closed] room={room_id}")


_HANDLERS = (
    ('connect', handle_connect),
    ('disconnect', handle_disconnect),
    ('createRoom', handle_create_room),
    ('getRooms', handle_get_rooms),
    ('cancelRoom', handle_cancel_room),
    ('joinRoom', handle_join_room),
    ('drawCards', handle_draw_cards),
    ('playCard', handle_play_card),
    ('attack', handle_attack),
    ('endTurn', handle_end_turn),
)


def register_socketio_handlers(namespace: str = '/ws', testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on ``namespace``. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    for event, handler in _HANDLERS:
        socketio.on_event(event, handler, namespace=namespace)

    if testing and namespace != '/':
        # Test-only mirror on default namespace
        for event, handler in _HANDLERS:
            socketio.on_event(event, handler, namespace='/')
