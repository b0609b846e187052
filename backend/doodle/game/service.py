from __future__ import annotations

import logging
from typing import Any, Iterable, Protocol

from . import events
from .directory import RoomDirectory
from .errors import (
    AlreadyInRoom,
    GameAlreadyStarted,
    InvalidPayload,
    NotDrawer,
    NotEnoughPlayers,
    NotInRoom,
    NotRegistered,
    RoomFull,
    RoomNotFound,
)
from .events import RoomEvent
from .models import ConnectionId, Player
from .registry import PlayerRegistry
from .room import Room
from .words import word_hint


logger = logging.getLogger(__name__)

LOBBY_GROUP = "lobby"


class Transport(Protocol):
    def send(self, connection_id: str, event: str, payload: Any) -> None: ...

    def broadcast(self, group: str, event: str, payload: Any, skip: Iterable[str] = ()) -> None: ...

    def join(self, connection_id: str, group: str) -> None: ...

    def leave(self, connection_id: str, group: str) -> None: ...


def room_public_state(room: Room, viewer_id: str | None = None) -> dict:
    """Full room snapshot as seen by ``viewer_id``.

    The secret word is only included for the current drawer; everybody else
    gets a hint with the same shape.
    """
    with room.lock:
        payload = {
            "id": room.id,
            "name": room.name,
            "players": room.roster(),
            "capacity": room.capacity,
            "phase": room.phase,
            "round": room.round,
            "maxRounds": room.max_rounds,
            "currentDrawer": room.drawer_id,
            "wordHint": word_hint(room.word) if room.word else None,
            "timeLeft": room.time_left,
            "messages": [m.to_dict() for m in room.messages],
            "strokes": list(room.strokes),
        }
        if viewer_id and viewer_id == room.drawer_id and room.word:
            payload["currentWord"] = room.word
        return payload


class SessionGateway:
    """Turns client intents into room operations and room events into broadcasts."""

    def __init__(
        self,
        players: PlayerRegistry,
        rooms: RoomDirectory,
        transport: Transport,
        max_message_length: int = 200,
    ) -> None:
        self.players = players
        self.rooms = rooms
        self.transport = transport
        self.max_message_length = max_message_length
        rooms.subscribe(self._relay)

    # ---- fan-out ----

    def _relay(self, room: Room, event: RoomEvent) -> None:
        if event.private and event.private_to:
            skip = set(event.skip) | {event.private_to}
            self.transport.broadcast(room.id, event.name, event.payload, skip=sorted(skip))
            if event.private_to not in event.skip:
                self.transport.send(event.private_to, event.name, {**event.payload, **event.private})
        else:
            self.transport.broadcast(room.id, event.name, event.payload, skip=list(event.skip))

        if event.name in (events.GAME_STARTED, events.GAME_ENDED):
            self.broadcast_lobby()

    def lobby_snapshot(self) -> dict:
        return {"rooms": self.rooms.list_summaries()}

    def broadcast_lobby(self) -> None:
        self.transport.broadcast(LOBBY_GROUP, events.LOBBY_ROOMS, self.rooms.list_summaries())

    # ---- lookups ----

    def _player(self, connection_id: ConnectionId) -> Player:
        player = self.players.get(connection_id)
        if player is None:
            raise NotRegistered()
        return player

    def _room(self, room_id: str) -> Room:
        room = self.rooms.get(room_id) if room_id else None
        if room is None:
            raise RoomNotFound(room_id)
        return room

    def _member_room(self, connection_id: ConnectionId, room_id: str) -> Room:
        room = self._room(room_id)
        if not room.has_member(connection_id):
            raise NotInRoom()
        return room

    def _ensure_live(self, room: Room) -> None:
        # Call with room.lock held: the room may have emptied and left the
        # directory between lookup and lock.
        if self.rooms.get(room.id) is not room:
            raise RoomNotFound(room.id)

    def _ensure_member(self, connection_id: ConnectionId, room: Room) -> None:
        self._ensure_live(room)
        if not room.has_member(connection_id):
            raise NotInRoom()

    def _ensure_not_in_room(self, connection_id: ConnectionId) -> None:
        if self.rooms.find_by_member(connection_id) is not None:
            raise AlreadyInRoom()

    # ---- intents ----

    def join_lobby(self, connection_id: ConnectionId, name: str | None) -> Player:
        self._ensure_not_in_room(connection_id)
        player = self.players.register(connection_id, name)

        self.transport.join(connection_id, LOBBY_GROUP)
        self.transport.send(connection_id, events.LOBBY_DATA, self.lobby_snapshot())
        self.broadcast_lobby()
        return player

    def create_room(self, connection_id: ConnectionId, name: str | None) -> Room:
        player = self._player(connection_id)
        self._ensure_not_in_room(connection_id)

        room = self.rooms.create(name)
        with room.lock:
            room.add_member(player)
            self._enter_room(connection_id, room)
        self.broadcast_lobby()
        return room

    def join_room(self, connection_id: ConnectionId, room_id: str) -> Room:
        player = self._player(connection_id)
        room = self._room(room_id)
        self._ensure_not_in_room(connection_id)

        with room.lock:
            self._ensure_live(room)
            if not room.add_member(player):
                raise RoomFull(room_id)
            self._enter_room(connection_id, room)
        logger.info("Player %s joined room %s", connection_id, room.id)
        self.broadcast_lobby()
        return room

    def _enter_room(self, connection_id: ConnectionId, room: Room) -> None:
        self.transport.leave(connection_id, LOBBY_GROUP)
        self.transport.join(connection_id, room.id)
        self.transport.send(connection_id, events.ROOM_JOINED, {"room": room_public_state(room, connection_id)})

    def start_game(self, connection_id: ConnectionId, room_id: str) -> None:
        room = self._member_room(connection_id, room_id)
        with room.lock:
            self._ensure_member(connection_id, room)
            if room.phase != "waiting":
                raise GameAlreadyStarted()
            if not room.start():
                raise NotEnoughPlayers()

    def send_message(self, connection_id: ConnectionId, room_id: str, text: Any) -> None:
        if not isinstance(text, str) or not text.strip():
            raise InvalidPayload()
        room = self._member_room(connection_id, room_id)
        with room.lock:
            self._ensure_member(connection_id, room)
            room.submit_guess(connection_id, text.strip()[: self.max_message_length])

    def draw_stroke(self, connection_id: ConnectionId, room_id: str, stroke: Any) -> None:
        if not isinstance(stroke, dict):
            raise InvalidPayload()
        room = self._member_room(connection_id, room_id)
        with room.lock:
            self._ensure_member(connection_id, room)
            if not room.submit_stroke(connection_id, stroke):
                raise NotDrawer()

    def clear_canvas(self, connection_id: ConnectionId, room_id: str) -> None:
        room = self._member_room(connection_id, room_id)
        with room.lock:
            self._ensure_member(connection_id, room)
            if not room.clear_strokes(connection_id):
                raise NotDrawer()

    def leave_room(self, connection_id: ConnectionId, room_id: str) -> None:
        room = self._member_room(connection_id, room_id)
        self._detach(connection_id, room)

        self.transport.join(connection_id, LOBBY_GROUP)
        self.transport.send(connection_id, events.LOBBY_DATA, self.lobby_snapshot())
        self.broadcast_lobby()

    def disconnect(self, connection_id: ConnectionId) -> None:
        room = self.rooms.find_by_member(connection_id)
        if room is not None:
            self._detach(connection_id, room)
        self.players.remove(connection_id)
        self.transport.leave(connection_id, LOBBY_GROUP)
        logger.info("Connection %s disconnected", connection_id)
        self.broadcast_lobby()

    def _detach(self, connection_id: ConnectionId, room: Room) -> None:
        with room.lock:
            self.transport.leave(connection_id, room.id)
            room.remove_member(connection_id)
            if room.is_empty:
                self.rooms.remove(room.id)

    def shutdown(self) -> None:
        self.rooms.close()
