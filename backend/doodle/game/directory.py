from __future__ import annotations

import logging
import uuid
from threading import RLock
from typing import Callable

from .events import RoomEvent
from .models import RoomSettings
from .registry import PlayerRegistry
from .room import Room
from .timers import Scheduler
from .words import WordSupply


logger = logging.getLogger(__name__)

RoomListener = Callable[[Room, RoomEvent], None]


def room_summary(room: Room) -> dict:
    return {
        "id": room.id,
        "name": room.name,
        "memberCount": room.member_count,
        "capacity": room.capacity,
        "phase": room.phase,
    }


class RoomDirectory:
    """Owns every live room and relays what they publish to subscribers."""

    def __init__(
        self,
        players: PlayerRegistry,
        words: WordSupply,
        scheduler: Scheduler,
        settings: RoomSettings | None = None,
    ) -> None:
        self.players = players
        self.words = words
        self.scheduler = scheduler
        self.settings = settings or RoomSettings()
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._listeners: list[RoomListener] = []

    def subscribe(self, listener: RoomListener) -> None:
        self._listeners.append(listener)

    def _publish(self, room: Room, event: RoomEvent) -> None:
        for listener in list(self._listeners):
            listener(room, event)

    def create(self, name: str | None = None) -> Room:
        with self._lock:
            room_id = uuid.uuid4().hex
            while room_id in self._rooms:
                room_id = uuid.uuid4().hex

            room = Room(
                room_id,
                (name or "").strip() or f"Room {len(self._rooms) + 1}",
                players=self.players,
                words=self.words,
                scheduler=self.scheduler,
                settings=self.settings,
                publish=self._publish,
            )
            self._rooms[room_id] = room

        logger.info("Created room %s (%s)", room.id, room.name)
        return room

    def get(self, room_id: str) -> Room | None:
        with self._lock:
            return self._rooms.get(room_id)

    def remove(self, room_id: str) -> Room | None:
        with self._lock:
            room = self._rooms.pop(room_id, None)
        if room is not None:
            room.close()
            logger.info("Removed room %s", room_id)
        return room

    def find_by_member(self, player_id: str) -> Room | None:
        with self._lock:
            for room in self._rooms.values():
                if room.has_member(player_id):
                    return room
        return None

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def list_summaries(self) -> list[dict]:
        return [room_summary(r) for r in self.list_rooms()]

    def close(self) -> None:
        with self._lock:
            rooms = list(self._rooms.values())
            self._rooms.clear()
        for room in rooms:
            room.close()

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def __contains__(self, room_id: object) -> bool:
        with self._lock:
            return room_id in self._rooms
