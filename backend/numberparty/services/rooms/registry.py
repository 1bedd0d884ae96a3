import threading
from typing import Dict, List, Optional

from numberparty.models import Room


class RoomRegistry:
    """In-memory map of room name to Room for one server process.

    Rooms are created on first join and dropped as soon as nobody in
    them is online. ``lock`` serialises handler execution when the
    Socket.IO async mode dispatches events on several threads.
    """

    def __init__(self, min_players: int = 2):
        self.min_players = min_players
        self.lock = threading.RLock()
        self._rooms: Dict[str, Room] = {}

    def get(self, name: str) -> Optional[Room]:
        return self._rooms.get(name)

    def get_or_create(self, name: str) -> Room:
        room = self._rooms.get(name)
        if room is None:
            room = Room(name, min_players=self.min_players)
            self._rooms[name] = room
        return room

    def delete(self, name: str) -> None:
        self._rooms.pop(name, None)

    def rooms(self) -> List[Room]:
        return list(self._rooms.values())

    def __contains__(self, name) -> bool:
        return name in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)
