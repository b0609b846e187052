from __future__ import annotations

import logging
import random
from threading import RLock

from .models import ConnectionId, Player


logger = logging.getLogger(__name__)


def normalize_name(raw: str | None, max_length: int = 20) -> str:
    n = "".join(ch for ch in (raw or "") if ord(ch) >= 32).strip()
    return n[:max_length].strip()


class PlayerRegistry:
    """Live connections and the player profile each one plays as."""

    def __init__(self, max_name_length: int = 20, rng: random.Random | None = None) -> None:
        self.max_name_length = max_name_length
        self._rng = rng or random.Random()
        self._lock = RLock()
        self._players: dict[ConnectionId, Player] = {}

    def register(self, connection_id: ConnectionId, requested_name: str | None) -> Player:
        name = normalize_name(requested_name, self.max_name_length)
        if not name:
            name = f"Player{self._rng.randint(0, 999)}"

        with self._lock:
            player = Player(id=connection_id, name=name, score=0)
            self._players[connection_id] = player

        logger.info("Registered player %s as %r", connection_id, name)
        return player

    def get(self, connection_id: ConnectionId) -> Player | None:
        with self._lock:
            return self._players.get(connection_id)

    def remove(self, connection_id: ConnectionId) -> Player | None:
        with self._lock:
            return self._players.pop(connection_id, None)

    def __contains__(self, connection_id: object) -> bool:
        with self._lock:
            return connection_id in self._players

    def __len__(self) -> int:
        with self._lock:
            return len(self._players)
