from flask_socketio import join_room, leave_room, emit
from cheetahtype import socketio
from cheetahtype.models import TEST_MODES
from cheetahtype.errors import ValidationError
from cheetahtype.services.leaderboard import board_time_limit, leaderboard_room


def handle_connect():
    emit('connected', {'message': 'Connected to /ws'})


def _board_room(data):
    mode = (data or {}).get('mode') or 'time'
    if mode not in TEST_MODES:
        emit('error', {'message': f'Unknown mode {mode}'})
        return None
    try:
        time_limit = board_time_limit(mode, (data or {}).get('time_limit'))
    except ValidationError as exc:
        emit('error', {'message': exc.message})
        return None
    return leaderboard_room(mode, time_limit)


def handle_subscribe_leaderboard(data):
    room = _board_room(data)
    if room is None:
        return
    join_room(room)
    emit('subscribed', {'room': room})


def handle_unsubscribe_leaderboard(data):
    room = _board_room(data)
    if room is None:
        return
    leave_room(room)
    emit('unsubscribed', {'room': room})


def handle_ping(data):
    emit('pong', data or {})


def register_socketio_handlers(testing: bool = False) -> None:
    """Register Socket.IO event handlers.

    Always register on namespace '/ws'. When testing is True, also mirror
    handlers on the default namespace '/' to accommodate the test harness.
    """
    namespaces = ['/ws', '/'] if testing else ['/ws']
    for namespace in namespaces:
        socketio.on_event('connect', handle_connect, namespace=namespace)
        socketio.on_event('subscribe_leaderboard', handle_subscribe_leaderboard, namespace=namespace)
        socketio.on_event('unsubscribe_leaderboard', handle_unsubscribe_leaderboard, namespace=namespace)
        socketio.on_event('ping', handle_ping, namespace=namespace)
