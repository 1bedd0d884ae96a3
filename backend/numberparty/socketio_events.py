from functools import wraps
from typing import Dict, NamedTuple

from flask import current_app, request
from flask_socketio import emit, join_room, leave_room

from numberparty import socketio
from numberparty.models import PHASE_LOBBY, Room
from numberparty.services.rooms.registry import RoomRegistry


class ConnectionSession(NamedTuple):
    room_name: str
    user_name: str


def channel_for(room_name: str) -> str:
    return f"room:{room_name}"


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _serialized(handler):
    """Run a handler while holding the registry lock."""
    @wraps(handler)
    def wrapper(self, *args, **kwargs):
        with self.registry.lock:
            return handler(self, *args, **kwargs)
    return wrapper


class RoomEvents:
    """Socket.IO handlers for the room protocol.

    Owns the per-connection sessions (sid -> room/user) set on join and
    cleared on leave, kick or disconnect.
    """

    def __init__(self, registry: RoomRegistry, namespace: str = '/'):
        self.registry = registry
        self.namespace = namespace
        self.sessions: Dict[str, ConnectionSession] = {}

    # ---- helpers ----

    def _broadcast(self, room: Room, include_self: bool = True) -> None:
        emit('roomUpdate', room.to_dict(), to=channel_for(room.name),
             include_self=include_self, namespace=self.namespace)

    def _reject(self, message: str, event: str = 'error') -> None:
        current_app.logger.info(f"[rejected] sid={_get_sid()} event={event} reason={message}")
        emit(event, message)

    def _current(self):
        """Resolve the caller's session and room, or (None, None)."""
        session = self.sessions.get(_get_sid())
        if session is None:
            return None, None
        room = self.registry.get(session.room_name)
        if room is None:
            current_app.logger.debug(f"[stale] sid={_get_sid()} room={session.room_name} is gone")
            return None, None
        return session, room

    def _host_context(self, action: str):
        session, room = self._current()
        if room is None:
            return None, None
        if not room.is_host(session.user_name):
            self._reject(f"Only the host can {action}")
            return None, None
        return session, room

    def _detach(self, sid: str) -> None:
        session = self.sessions.pop(sid, None)
        if session is None:
            return
        room = self.registry.get(session.room_name)
        if room is None:
            return
        room.remove_participant(sid)
        if room.is_empty():
            self.registry.delete(room.name)
            current_app.logger.info(f"[room-deleted] room={room.name}")
        else:
            socketio.emit('roomUpdate', room.to_dict(), to=channel_for(room.name),
                          skip_sid=sid, namespace=self.namespace)

    # ---- connection lifecycle ----

    def handle_connect(self, auth=None):
        current_app.logger.debug(f"[connect] sid={_get_sid()}")

    @_serialized
    def handle_disconnect(self, reason=None):
        sid = _get_sid()
        current_app.logger.info(f"[disconnect] sid={sid} reason={reason}")
        self._detach(sid)

    @_serialized
    def handle_leave_room(self, data=None):
        sid = _get_sid()
        session = self.sessions.get(sid)
        if session is None:
            return
        self._detach(sid)
        leave_room(channel_for(session.room_name))
        current_app.logger.info(f"[leave] room={session.room_name} user={session.user_name}")

    # ---- room protocol ----

    @_serialized
    def handle_join_room(self, data=None):
        data = data if isinstance(data, dict) else {}
        room_name = data.get('roomName')
        user_name = data.get('userName')
        if not isinstance(room_name, str) or not isinstance(user_name, str) or not room_name or not user_name:
            self._reject('Room name and user name are required', event='joinError')
            return

        existing_room = self.registry.get(room_name)
        if existing_room is not None and existing_room.phase != PHASE_LOBBY \
                and existing_room.get_participant(user_name) is None:
            self._reject('A round is in progress; wait for the lobby', event='joinError')
            return

        sid = _get_sid()
        previous = self.sessions.get(sid)
        if previous is not None and previous.room_name != room_name:
            self._detach(sid)
            leave_room(channel_for(previous.room_name))

        room = self.registry.get_or_create(room_name)
        is_new = room.add_participant(user_name, sid)
        # Renaming within the same room: the new name is online before the
        # old one drops, so the room never looks empty
        if previous is not None and previous.room_name == room_name and previous.user_name != user_name:
            room.mark_offline(previous.user_name)
        self.sessions[sid] = ConnectionSession(room_name, user_name)
        join_room(channel_for(room_name))

        participant = room.get_participant(user_name)
        current_app.logger.info(
            f"[join] room={room_name} user={user_name} new={is_new} host={participant.is_host}"
        )
        emit('joinSuccess', {
            'roomName': room_name,
            'userName': user_name,
            'isHost': participant.is_host,
            'roomState': room.to_dict(),
        })
        # A reconnecting client gets the room-wide update as well
        self._broadcast(room, include_self=not is_new)

    @_serialized
    def handle_start_round(self, data=None):
        session, room = self._host_context('start a round')
        if room is None:
            return
        if not room.start_round():
            self._reject('Cannot start a round now')
            return
        current_app.logger.info(f"[start] room={room.name} players={len(room.frozen_order)}")
        self._broadcast(room)

    @_serialized
    def handle_submit_number(self, number=None):
        session, room = self._current()
        if room is None:
            return
        if not room.submit_number(session.user_name, number):
            self._reject('Submission rejected')
            return
        current_app.logger.info(
            f"[submit] room={room.name} user={session.user_name} "
            f"submitted={len(room.submissions)}/{len(room.frozen_order)}"
        )
        emit('numberSubmitted', {})
        self._broadcast(room)

    def _reveal(self, force: bool):
        session, room = self._host_context('force the reveal' if force else 'reveal the result')
        if room is None:
            return
        if not room.reveal(force=force):
            self._reject('Cannot reveal the result' if force else 'Not everyone has submitted yet')
            return
        current_app.logger.info(
            f"[reveal] room={room.name} forced={force} total={room.result.total} winner={room.winner}"
        )
        self._broadcast(room)

    @_serialized
    def handle_reveal_result(self, data=None):
        self._reveal(force=False)

    @_serialized
    def handle_force_reveal(self, data=None):
        self._reveal(force=True)

    @_serialized
    def handle_back_to_lobby(self, data=None):
        session, room = self._host_context('return to the lobby')
        if room is None:
            return
        room.back_to_lobby()
        current_app.logger.info(f"[lobby] room={room.name}")
        self._broadcast(room)

    @_serialized
    def handle_kick_user(self, user_name=None):
        session, room = self._host_context('kick players')
        if room is None:
            return
        if room.phase != PHASE_LOBBY:
            self._reject('Players can only be kicked in the lobby')
            return
        if not isinstance(user_name, str):
            self._reject('Unknown player')
            return
        kicked_sid = room.kick_participant(user_name)
        if kicked_sid is None:
            self._reject('Unknown player')
            return

        current_app.logger.info(f"[kick] room={room.name} user={user_name} by={session.user_name}")
        emit('kicked', {}, to=kicked_sid, namespace=self.namespace)
        kicked_session = self.sessions.get(kicked_sid)
        if kicked_session is not None and kicked_session.room_name == room.name:
            del self.sessions[kicked_sid]
            leave_room(channel_for(room.name), sid=kicked_sid, namespace=self.namespace)

        if room.is_empty():
            self.registry.delete(room.name)
            current_app.logger.info(f"[room-deleted] room={room.name}")
            return
        self._broadcast(room)


def register_socketio_handlers(events: RoomEvents) -> None:
    """Register the room protocol on ``events.namespace``.

    Client event names are camelCase to match the browser client.
    """
    namespace = events.namespace
    socketio.on_event('connect', events.handle_connect, namespace=namespace)
    socketio.on_event('disconnect', events.handle_disconnect, namespace=namespace)
    socketio.on_event('joinRoom', events.handle_join_room, namespace=namespace)
    socketio.on_event('leaveRoom', events.handle_leave_room, namespace=namespace)
    socketio.on_event('startRound', events.handle_start_round, namespace=namespace)
    socketio.on_event('submitNumber', events.handle_submit_number, namespace=namespace)
    socketio.on_event('revealResult', events.handle_reveal_result, namespace=namespace)
    socketio.on_event('forceReveal', events.handle_force_reveal, namespace=namespace)
    socketio.on_event('backToLobby', events.handle_back_to_lobby, namespace=namespace)
    socketio.on_event('kickUser', events.handle_kick_user, namespace=namespace)
