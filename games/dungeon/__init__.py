# games/dungeon/__init__.py
from .content.balance import DEFAULTS
from .metrics import DungeonMetrics
from .ratelimit import RateLimiter
from .routes import dungeon_bp
from .sockets import register_dungeon_socket_handlers
from .state import SessionRegistry


def init_dungeon(app, socketio, registry=None):
    if registry is None:
        registry = SessionRegistry(lock_timeout=app.config.get("LOCK_TIMEOUT"))
    app.extensions["dungeon"] = registry
    app.extensions["dungeon_socketio"] = socketio
    app.extensions["dungeon_metrics"] = DungeonMetrics(registry)
    app.extensions["dungeon_limiter"] = RateLimiter(
        app.config.get("COMMAND_INTERVAL", DEFAULTS["command_interval"])
    )
    app.register_blueprint(dungeon_bp)
    register_dungeon_socket_handlers(socketio)
    return registry
