from flask_socketio import emit
from flask import current_app, request
from balance import lobby, socketio
from balance.services.games.scheduler import schedule_resolution


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def handle_connect(auth=None):
    current_app.logger.info(f"[connect] sid={_get_sid()}")
    emit('players', lobby.roster())


def handle_disconnect(reason=None):
    current_app.logger.info(f"[disconnect] sid={_get_sid()} reason={reason}")
    lobby.leave(_get_sid())


def handle_join(data=None):
    # Clients send the bare name; {'name': ...} is accepted as well
    name = data.get('name') if isinstance(data, dict) else data
    player = lobby.join(_get_sid(), name)
    emit('joined', {'id': player.id, 'name': player.name})


def handle_start_round(data=None):
    lobby.start_round()


def handle_choice(value=None):
    ready_round = lobby.submit_choice(_get_sid(), value)
    if ready_round is not None:
        schedule_resolution(current_app._get_current_object(), ready_round)


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register the game's Socket.IO event handlers on ``namespace``."""
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    socketio.on_event('join', handle_join, namespace=namespace)
    socketio.on_event('startRound', handle_start_round, namespace=namespace)
    socketio.on_event('choice', handle_choice, namespace=namespace)
