"""
Rejected client intents.

Every rejection is recoverable: it is reported to the originating connection
only, as ``{"error": code}`` on ``event``, and never changes room state.
"""
from __future__ import annotations

from .events import GAME_ERROR, ROOM_ERROR


class RejectedIntent(Exception):
    code = "rejected"
    event = ROOM_ERROR

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.code)


class InvalidPayload(RejectedIntent):
    code = "invalid_payload"


class NotRegistered(RejectedIntent):
    """The connection never joined the lobby."""
    code = "not_registered"


class RoomNotFound(RejectedIntent):
    code = "room_not_found"

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__(f"Room {room_id} not found")


class RoomFull(RejectedIntent):
    code = "room_full"

    def __init__(self, room_id: str) -> None:
        self.room_id = room_id
        super().__init__(f"Room {room_id} is full")


class AlreadyInRoom(RejectedIntent):
    code = "already_in_room"


class NotInRoom(RejectedIntent):
    code = "not_in_room"


class GameRejected(RejectedIntent):
    event = GAME_ERROR


class NotEnoughPlayers(GameRejected):
    code = "not_enough_players"


class GameAlreadyStarted(GameRejected):
    code = "game_already_started"


class NotDrawer(GameRejected):
    """Only the current drawer may draw or clear the canvas."""
    code = "not_drawer"
