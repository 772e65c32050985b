# games/dungeon/engine/errors.py
"""Engine exceptions. A raised error always means the session state is unchanged."""


class DungeonError(Exception):
    """Base class for every rejected dungeon operation."""

    kind = "error"


class SessionNotFound(DungeonError):
    """Raised when no session exists for a namespace/name pair."""

    kind = "session_not_found"


class SessionBusy(DungeonError):
    """Raised when another command holds the session lock past the timeout."""

    kind = "session_busy"


class SessionExists(DungeonError):
    """Raised when creating a session whose namespace/name is taken."""

    kind = "session_exists"


class GameOver(DungeonError):
    """Raised for mutating commands after victory or defeat."""

    kind = "game_over"


class InvalidCommand(DungeonError):
    """Raised for malformed or out-of-place commands."""

    kind = "invalid_command"


class InvalidTarget(InvalidCommand):
    kind = "invalid_target"


class AbilityUnavailable(InvalidCommand):
    kind = "ability_unavailable"


class InvalidItem(InvalidCommand):
    kind = "invalid_item"
