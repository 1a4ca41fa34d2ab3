"""In-memory registry of waiting rooms.

Rooms live only as long as the process. Running several server processes
needs an external coordinator; this registry does not share state.
"""

import itertools
import threading
from dataclasses import dataclass
from typing import Dict, List, Optional


def room_channel_name(room_id: int) -> str:
    return f"room-{room_id}"


@dataclass(frozen=True)
class WaitingRoom:
    id: int
    host_user_id: int
    host_username: str
    host_connection_id: str
    deck_id: int
    room_channel_name: str

    def to_dict(self):
        return {
            'id': self.id,
            'hostUsername': self.host_username,
            'deckId': self.deck_id,
        }


class RoomRegistry:
    def __init__(self) -> None:
        self._rooms: Dict[int, WaitingRoom] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def next_room_id(self) -> int:
        with self._lock:
            return next(self._ids)

    def create_room(self, room_id: int, host_user_id: int, host_username: str,
                    host_connection_id: str, deck_id: int) -> WaitingRoom:
        room = WaitingRoom(
            id=room_id,
            host_user_id=host_user_id,
            host_username=host_username,
            host_connection_id=host_connection_id,
            deck_id=deck_id,
            room_channel_name=room_channel_name(room_id),
        )
        with self._lock:
            self._rooms[room_id] = room
        return room

    def get_rooms_list(self) -> List[dict]:
        with self._lock:
            return [room.to_dict() for room in self._rooms.values()]

    def get_room(self, room_id: int) -> Optional[WaitingRoom]:
        with self._lock:
            return self._rooms.get(room_id)

    def remove_room(self, room_id: int) -> None:
        with self._lock:
            self._rooms.pop(room_id, None)

    def claim_room(self, room_id: int) -> Optional[WaitingRoom]:
        """Atomically remove and return a room; None if someone got there first."""
        with self._lock:
            return self._rooms.pop(room_id, None)

    def rooms_hosted_by(self, connection_id: str) -> List[WaitingRoom]:
        with self._lock:
            return [r for r in self._rooms.values() if r.host_connection_id == connection_id]
