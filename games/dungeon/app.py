# games/dungeon/app.py
import logging
import os

from flask import Flask
from flask_socketio import SocketIO
from rich.logging import RichHandler

from . import init_dungeon
from .content.balance import DEFAULTS


def setup_logging(level=logging.INFO):
    logging.basicConfig(
        level=level,
        format="%(name)s - %(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=False, rich_tracebacks=True)],
    )
    logging.getLogger("werkzeug").setLevel(logging.WARNING)


def create_app(config=None, registry=None):
    app = Flask(__name__)
    app.config.from_mapping(
        LOCK_TIMEOUT=DEFAULTS["lock_timeout"],
        COMMAND_INTERVAL=DEFAULTS["command_interval"],
    )
    # DUNGEON_LOCK_TIMEOUT=1.0 -> LOCK_TIMEOUT
    app.config.from_prefixed_env("DUNGEON")
    if config:
        app.config.update(config)

    socketio = SocketIO(app, async_mode="threading", cors_allowed_origins="*")
    init_dungeon(app, socketio, registry=registry)
    return app, socketio


def main():
    setup_logging(logging.DEBUG if os.environ.get("DUNGEON_DEBUG") else logging.INFO)
    app, socketio = create_app()
    port = int(os.environ.get("PORT", "8080"))
    logging.getLogger(__name__).info("Backend listening on :%d", port)
    socketio.run(app, host="0.0.0.0", port=port, allow_unsafe_werkzeug=True)


if __name__ == "__main__":
    main()
