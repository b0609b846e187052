from __future__ import annotations

from dataclasses import dataclass, field


# Outbound event names (core -> clients)
LOBBY_DATA = "lobby:data"
LOBBY_ROOMS = "lobby:rooms"
ROOM_JOINED = "room:joined"
PLAYER_JOINED = "room:player_joined"
PLAYER_LEFT = "room:player_left"
PLAYERS_UPDATE = "room:players"
GAME_STARTED = "game:started"
TURN_CHANGED = "game:turn"
TIME_TICK = "game:tick"
GAME_ENDED = "game:ended"
CHAT_MESSAGE = "chat:message"
GUESS_CORRECT = "guess:correct"
STROKE = "draw:stroke"
CANVAS_CLEARED = "draw:clear"
ROOM_ERROR = "room:error"
GAME_ERROR = "game:error"


@dataclass(frozen=True)
class RoomEvent:
    """Something a room wants its members to see.

    ``private`` is merged into ``payload`` for ``private_to`` only; everyone
    else receives ``payload`` alone. Connections in ``skip`` receive nothing.
    """

    name: str
    payload: dict
    skip: tuple[str, ...] = ()
    private: dict = field(default_factory=dict)
    private_to: str | None = None
