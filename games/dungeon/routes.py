# games/dungeon/routes.py
import logging

from flask import Blueprint, Response, current_app, jsonify, request

from .engine.errors import (
    DungeonError,
    GameOver,
    InvalidCommand,
    SessionBusy,
    SessionExists,
    SessionNotFound,
)
from .engine.models import Command
from .sockets import broadcast_update, snapshot_for

logger = logging.getLogger(__name__)

dungeon_bp = Blueprint("dungeon", __name__)

STATUS_CODES = [
    (SessionNotFound, 404),
    (SessionBusy, 409),
    (SessionExists, 409),
    (GameOver, 409),
    (InvalidCommand, 400),
]


def registry():
    return current_app.extensions["dungeon"]


def metrics():
    return current_app.extensions["dungeon_metrics"]


def _is_int(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _text(payload, key, default=""):
    value = payload.get(key)
    if value is None:
        return default
    if not isinstance(value, str):
        raise InvalidCommand(f"{key} must be a string")
    return value or default


def error_response(exc: DungeonError):
    code = next((status for cls, status in STATUS_CODES if isinstance(exc, cls)), 400)
    if not isinstance(exc, SessionNotFound):
        logger.warning("request error status=%s kind=%s error=%s", code, exc.kind, exc)
    return jsonify({"error": str(exc), "kind": exc.kind}), code


@dungeon_bp.errorhandler(DungeonError)
def handle_dungeon_error(exc):
    return error_response(exc)


@dungeon_bp.after_app_request
def count_request(response):
    if "dungeon_metrics" in current_app.extensions:
        path = request.url_rule.rule if request.url_rule else "unmatched"
        metrics().http_requests.labels(
            method=request.method, path=path, status=str(response.status_code)
        ).inc()
    return response


@dungeon_bp.route("/healthz")
def healthz():
    return "", 200


@dungeon_bp.route("/metrics")
def prometheus_metrics():
    return Response(metrics().render(), content_type=metrics().content_type)


@dungeon_bp.route("/api/v1/dungeons", methods=["POST"])
def create_dungeon():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "invalid request body", "kind": InvalidCommand.kind}), 400
    monsters = payload.get("monsters")
    if monsters is not None and not _is_int(monsters):
        raise InvalidCommand("monsters must be an integer")
    seed = payload.get("seed")
    if seed is not None and not _is_int(seed):
        raise InvalidCommand("seed must be an integer")
    state = registry().create_session(
        _text(payload, "namespace", "default"),
        _text(payload, "name"),
        difficulty=_text(payload, "difficulty", "normal"),
        hero_class=_text(payload, "heroClass", "warrior"),
        monsters=monsters,
        seed=seed,
    )
    metrics().sessions_created.inc()
    return jsonify(state.to_dict()), 201


@dungeon_bp.route("/api/v1/dungeons", methods=["GET"])
def list_dungeons():
    return jsonify(registry().list_sessions())


@dungeon_bp.route("/api/v1/dungeons/<namespace>/<name>", methods=["GET"])
def get_dungeon(namespace, name):
    return jsonify(registry().snapshot(namespace, name).to_dict())


@dungeon_bp.route("/api/v1/dungeons/<namespace>/<name>", methods=["DELETE"])
def delete_dungeon(namespace, name):
    registry().delete_session(namespace, name)
    current_app.extensions["dungeon_limiter"].forget(f"{namespace}/{name}")
    return "", 204


@dungeon_bp.route("/api/v1/dungeons/<namespace>/<name>/commands", methods=["POST"])
def submit_command(namespace, name):
    if not current_app.extensions["dungeon_limiter"].allow(f"{namespace}/{name}"):
        metrics().commands_rate_limited.inc()
        return jsonify({"error": "rate limit exceeded, try again shortly", "kind": "rate_limited"}), 429

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({"error": "invalid request body", "kind": InvalidCommand.kind}), 400

    state, log = registry().submit(namespace, name, Command.from_dict(payload))
    metrics().command_submitted(namespace, name, payload.get("action"))
    logger.info("command resolved dungeon=%s/%s action=%s round=%d", namespace, name, payload.get("action"), state.turn_round)
    broadcast_update(current_app.extensions.get("dungeon_socketio"), state, log)
    return jsonify(snapshot_for(state, log))
