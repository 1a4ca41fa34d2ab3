import threading
from typing import Set

from flask import current_app

from .engine import GameEngine
from .rooms import RoomRegistry

EXTENSION_KEY = 'battle_store'


class BattleStore:
    """Owns the waiting rooms, running games and live connections of one process."""

    def __init__(self, rng=None):
        self.rooms = RoomRegistry()
        self.engine = GameEngine(rng=rng)
        self._connections: Set[str] = set()
        self._lock = threading.Lock()

    def init_app(self, app):
        app.extensions[EXTENSION_KEY] = self

    def mark_connected(self, connection_id: str) -> None:
        with self._lock:
            self._connections.add(connection_id)

    def mark_disconnected(self, connection_id: str) -> None:
        with self._lock:
            self._connections.discard(connection_id)

    def is_connected(self, connection_id: str) -> bool:
        with self._lock:
            return connection_id in self._connections


def get_store() -> BattleStore:
    return current_app.extensions[EXTENSION_KEY]
