from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, NewType


ConnectionId = NewType("ConnectionId", str)

Phase = Literal["waiting", "playing", "ended"]


def now_ms() -> int:
    return int(time.time() * 1000)


@dataclass
class Player:
    id: ConnectionId
    name: str
    score: int = 0

    def public(self) -> dict:
        return {"id": self.id, "name": self.name, "score": self.score}


@dataclass
class ChatEntry:
    id: int
    player_id: ConnectionId
    player_name: str
    text: str
    timestamp: int = field(default_factory=now_ms)
    is_correct: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "playerId": self.player_id,
            "playerName": self.player_name,
            "text": self.text,
            "timestamp": self.timestamp,
            "isCorrect": self.is_correct,
        }


@dataclass(frozen=True)
class RoomSettings:
    capacity: int = 8
    max_rounds: int = 3
    min_players: int = 2
    turn_duration_sec: int = 60
    grace_delay_sec: float = 2.0
    guess_points: int = 100
    draw_points: int = 50

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "RoomSettings":
        return cls(
            capacity=int(config.get("ROOM_CAPACITY", cls.capacity)),
            max_rounds=int(config.get("MAX_ROUNDS", cls.max_rounds)),
            min_players=int(config.get("MIN_PLAYERS", cls.min_players)),
            turn_duration_sec=int(config.get("TURN_DURATION_SEC", cls.turn_duration_sec)),
            grace_delay_sec=float(config.get("GRACE_DELAY_SEC", cls.grace_delay_sec)),
            guess_points=int(config.get("GUESS_POINTS", cls.guess_points)),
            draw_points=int(config.get("DRAW_POINTS", cls.draw_points)),
        )
