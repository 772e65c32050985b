# games/dungeon/state.py
from __future__ import annotations

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from .content.balance import DEFAULTS
from .engine import resolver
from .engine.errors import InvalidCommand, SessionBusy, SessionExists, SessionNotFound
from .engine.models import CombatLog, Command, DungeonState

logger = logging.getLogger(__name__)

Key = Tuple[str, str]


@dataclass
class Session:
    state: DungeonState
    lock: threading.Lock = field(default_factory=threading.Lock)


class SessionRegistry:
    """
    Owns every live DungeonState, one per (namespace, name).

    Commands for one session are serialized by that session's lock; different
    sessions never share a lock. A command resolves on a private copy that is
    swapped in only when it succeeds, so readers never see a half-resolved turn.
    """

    def __init__(self, lock_timeout: Optional[float] = None) -> None:
        self.lock_timeout = DEFAULTS["lock_timeout"] if lock_timeout is None else float(lock_timeout)
        self._sessions: Dict[Key, Session] = {}
        self._guard = threading.Lock()

    def _get(self, namespace: str, name: str) -> Session:
        with self._guard:
            session = self._sessions.get((namespace, name))
        if session is None:
            logger.debug("no session %s/%s", namespace, name)
            raise SessionNotFound(f"dungeon {namespace}/{name} not found")
        return session

    def create_session(
        self,
        namespace: str,
        name: str,
        difficulty: str = "normal",
        hero_class: str = "warrior",
        monsters: Optional[int] = None,
        seed: Optional[int] = None,
        modifier: Optional[str] = None,
    ) -> DungeonState:
        if not namespace or not name:
            raise InvalidCommand("namespace and name are required")
        state = resolver.create_dungeon(
            namespace, name, difficulty, hero_class, monsters=monsters, seed=seed, modifier=modifier
        )
        with self._guard:
            if (namespace, name) in self._sessions:
                raise SessionExists(f"dungeon {namespace}/{name} already exists")
            self._sessions[(namespace, name)] = Session(state=state)
        logger.info(
            "dungeon created %s/%s difficulty=%s class=%s monsters=%d modifier=%s",
            namespace, name, difficulty, hero_class, len(state.monsters), state.modifier,
        )
        return copy.deepcopy(state)

    def submit(self, namespace: str, name: str, command: Command, rng=None) -> Tuple[DungeonState, CombatLog]:
        """The only mutation entry point. Blocks up to ``lock_timeout`` for the session lock."""
        session = self._get(namespace, name)
        if not session.lock.acquire(timeout=self.lock_timeout):
            logger.info("dungeon %s/%s busy, rejecting %s", namespace, name, command.action)
            raise SessionBusy(f"dungeon {namespace}/{name} is resolving another command")
        try:
            working = copy.deepcopy(session.state)
            log = resolver.resolve_command(working, command, rng)
            session.state = working
        finally:
            session.lock.release()
        logger.debug("%s/%s resolved %s round=%d", namespace, name, command.action, working.turn_round)
        return copy.deepcopy(working), log

    def snapshot(self, namespace: str, name: str) -> DungeonState:
        # committed states are never mutated in place, so no lock is needed
        return copy.deepcopy(self._get(namespace, name).state)

    def delete_session(self, namespace: str, name: str) -> None:
        with self._guard:
            removed = self._sessions.pop((namespace, name), None)
        if removed is None:
            raise SessionNotFound(f"dungeon {namespace}/{name} not found")
        logger.info("dungeon deleted %s/%s", namespace, name)

    def list_sessions(self) -> List[Dict]:
        with self._guard:
            sessions = sorted(self._sessions.items())
        summaries = []
        for (namespace, name), session in sessions:
            state = session.state
            summaries.append({
                "name": name,
                "namespace": namespace,
                "difficulty": state.difficulty,
                "hero_class": state.hero_class,
                "living_monsters": state.living_monsters(),
                "dead_monsters": len(state.monsters) - state.living_monsters(),
                "boss_state": state.boss.state,
                "victory": state.victory,
                "defeated": state.defeated,
            })
        return summaries

    def __len__(self) -> int:
        with self._guard:
            return len(self._sessions)
