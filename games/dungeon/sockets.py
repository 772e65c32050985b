# games/dungeon/sockets.py
from flask import current_app
from flask_socketio import emit, join_room, leave_room

from .engine.errors import DungeonError
from .engine.models import Command
from .engine.narration import narrate


def room_for(namespace, name):
    return f"dungeon-{namespace}-{name}"


def snapshot_for(state, log=None):
    """
    Returns the payload pushed to watchers: full state plus the structured
    log of the turn that produced it and its rendered narration.
    """
    return {
        "state": state.to_dict(),
        "log": log.to_dict() if log else None,
        "narration": narrate(log) if log else [],
        "turn_round": state.turn_round,
    }


def broadcast_update(socketio, state, log=None):
    if socketio is None:
        return
    socketio.emit(
        "dungeon_snapshot",
        snapshot_for(state, log),
        to=room_for(state.namespace, state.name),
    )


def _session_key(payload):
    if not isinstance(payload, dict):
        return None, None
    namespace, name = payload.get("namespace") or "default", payload.get("name")
    if not isinstance(namespace, str) or not isinstance(name, str):
        return None, None
    return namespace, name


def register_dungeon_socket_handlers(socketio):
    @socketio.on("dungeon_watch")
    def dungeon_watch(payload):
        namespace, name = _session_key(payload)
        if not name:
            emit("dungeon_system", {"error": "name required", "kind": "invalid_command"})
            return
        try:
            state = current_app.extensions["dungeon"].snapshot(namespace, name)
        except DungeonError as exc:
            emit("dungeon_system", {"error": str(exc), "kind": exc.kind})
            return
        join_room(room_for(namespace, name))
        emit("dungeon_snapshot", snapshot_for(state))

    @socketio.on("dungeon_unwatch")
    def dungeon_unwatch(payload):
        namespace, name = _session_key(payload)
        if name:
            leave_room(room_for(namespace, name))

    @socketio.on("dungeon_command")
    def dungeon_command(payload):
        namespace, name = _session_key(payload)
        if not name:
            emit("dungeon_system", {"error": "name required", "kind": "invalid_command"})
            return
        try:
            state, log = current_app.extensions["dungeon"].submit(namespace, name, Command.from_dict(payload))
        except DungeonError as exc:
            emit("dungeon_system", {"error": str(exc), "kind": exc.kind})
            return
        current_app.extensions["dungeon_metrics"].command_submitted(namespace, name, payload.get("action"))
        emit("dungeon_system", "Command resolved.")
        broadcast_update(socketio, state, log)
        if log.terminal != "none":
            socketio.emit("dungeon_system", f"Dungeon {log.terminal}.", to=room_for(namespace, name))
