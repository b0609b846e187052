from __future__ import annotations

import logging
from threading import RLock
from typing import Any, Callable

from . import events
from .events import RoomEvent
from .models import ChatEntry, ConnectionId, Phase, Player, RoomSettings
from .registry import PlayerRegistry
from .timers import Scheduler, TimerHandle
from .words import WordSupply, word_hint


logger = logging.getLogger(__name__)


def normalize_guess(text: str) -> str:
    return (text or "").strip().lower()


class Room:
    """One game session: members, turn/round state machine, timers and logs.

    Every public method takes ``lock``; timer callbacks do too, so a room is
    only ever mutated by one handler at a time. Outbound events go through
    ``publish`` while the lock is held, which keeps them in mutation order.
    """

    def __init__(
        self,
        room_id: str,
        name: str,
        players: PlayerRegistry,
        words: WordSupply,
        scheduler: Scheduler,
        settings: RoomSettings | None = None,
        publish: Callable[["Room", RoomEvent], Any] | None = None,
    ) -> None:
        self.id = room_id
        self.name = name
        self.settings = settings or RoomSettings()
        self.lock = RLock()

        self._players = players
        self._words = words
        self._scheduler = scheduler
        self._publish_cb = publish

        self.phase: Phase = "waiting"
        self.round = 0
        self.drawer_id: ConnectionId | None = None
        self.word = ""
        self.time_left = self.settings.turn_duration_sec
        self.messages: list[ChatEntry] = []
        self.strokes: list[dict] = []

        self._member_ids: list[ConnectionId] = []
        self._turn = 0
        self._guessed = False
        self._next_message_id = 1
        self._countdown: TimerHandle | None = None
        self._grace: TimerHandle | None = None

    # ---- membership ----

    @property
    def capacity(self) -> int:
        return self.settings.capacity

    @property
    def max_rounds(self) -> int:
        return self.settings.max_rounds

    @property
    def member_ids(self) -> list[ConnectionId]:
        with self.lock:
            return list(self._member_ids)

    @property
    def member_count(self) -> int:
        return len(self._member_ids)

    @property
    def is_empty(self) -> bool:
        return not self._member_ids

    def has_member(self, player_id: str) -> bool:
        return player_id in self._member_ids

    def members(self) -> list[Player]:
        with self.lock:
            found = (self._players.get(pid) for pid in self._member_ids)
            return [p for p in found if p is not None]

    def roster(self) -> list[dict]:
        return [p.public() for p in self.members()]

    def add_member(self, player: Player) -> bool:
        with self.lock:
            if player.id in self._member_ids:
                return True
            if len(self._member_ids) >= self.capacity:
                return False

            self._member_ids.append(player.id)
            self._publish(events.PLAYER_JOINED, {"player": player.public()}, skip=(player.id,))
            return True

    def remove_member(self, player_id: ConnectionId) -> bool:
        with self.lock:
            if player_id not in self._member_ids:
                return False

            position = self._member_ids.index(player_id)
            del self._member_ids[position]
            self._publish(events.PLAYER_LEFT, {"playerId": player_id, "players": self.roster()})

            if not self._member_ids:
                # Nobody left to rotate to; the directory drops the room.
                self._cancel_timers()
                self.drawer_id = None
                return True

            if self.phase == "playing" and player_id == self.drawer_id:
                # The follower has shifted into the departed drawer's slot.
                self._rotate(position)
            return True

    # ---- state machine ----

    def start(self) -> bool:
        with self.lock:
            if self.phase != "waiting" or len(self._member_ids) < self.settings.min_players:
                return False

            self.phase = "playing"
            self.round = 1
            self._begin_turn(self._member_ids[0], events.GAME_STARTED)
            logger.info("Room %s started with %d players", self.id, len(self._member_ids))
            return True

    def advance_turn(self) -> bool:
        with self.lock:
            if self.phase != "playing" or not self._member_ids:
                return False

            if self.drawer_id in self._member_ids:
                position = self._member_ids.index(self.drawer_id) + 1
            else:
                position = 0
            self._rotate(position)
            return True

    def end(self) -> bool:
        with self.lock:
            if self.phase != "playing":
                return False

            self._cancel_timers()
            self.phase = "ended"
            self.word = ""
            self.drawer_id = None
            self.strokes = []

            members = self.members()
            winner = self._winner(members)
            self._publish(
                events.GAME_ENDED,
                {
                    "winner": winner.public() if winner else None,
                    "players": [p.public() for p in members],
                },
            )
            logger.info("Room %s ended, winner=%s", self.id, winner.id if winner else None)
            return True

    @staticmethod
    def _winner(members: list[Player]) -> Player | None:
        best: Player | None = None
        for p in members:
            if best is None or p.score > best.score:
                best = p
        return best

    def _rotate(self, position: int) -> None:
        self._cancel_timers()

        if position >= len(self._member_ids):
            position = 0
            self.round += 1

        if self.round > self.max_rounds:
            self.end()
            return

        self._begin_turn(self._member_ids[position], events.TURN_CHANGED)

    def _begin_turn(self, drawer_id: ConnectionId, event_name: str) -> None:
        self._cancel_timers()
        self._turn += 1
        self._guessed = False
        self.drawer_id = drawer_id
        self.word = self._words.pick()
        self.time_left = self.settings.turn_duration_sec
        self.strokes = []

        self._publish(
            event_name,
            {
                "drawerId": drawer_id,
                "round": self.round,
                "maxRounds": self.max_rounds,
                "timeLeft": self.time_left,
                "wordHint": word_hint(self.word),
            },
            private={"word": self.word},
            private_to=drawer_id,
        )
        logger.info("Room %s round %d: %s is drawing", self.id, self.round, drawer_id)
        self._start_countdown()

    # ---- timers ----

    def _start_countdown(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
        self._countdown = self._scheduler.call_later(1, self._tick, self._turn)

    def _tick(self, turn: int) -> None:
        with self.lock:
            if turn != self._turn or self.phase != "playing":
                return

            self.time_left = max(0, self.time_left - 1)
            self._publish(events.TIME_TICK, {"timeLeft": self.time_left})
            logger.debug("Room %s tick %d", self.id, self.time_left)

            if self.time_left <= 0:
                self._countdown = None
                self.advance_turn()
                return

            self._countdown = self._scheduler.call_later(1, self._tick, turn)

    def _after_grace(self, turn: int) -> None:
        with self.lock:
            if turn != self._turn or self.phase != "playing":
                return
            self._grace = None
            self.advance_turn()

    def _cancel_timers(self) -> None:
        if self._countdown is not None:
            self._countdown.cancel()
            self._countdown = None
        if self._grace is not None:
            self._grace.cancel()
            self._grace = None

    def close(self) -> None:
        with self.lock:
            self._cancel_timers()

    # ---- chat / drawing ----

    def submit_guess(self, player_id: ConnectionId, text: str) -> ChatEntry:
        with self.lock:
            player = self._players.get(player_id)
            entry = ChatEntry(
                id=self._next_message_id,
                player_id=player_id,
                player_name=player.name if player else "",
                text=text,
            )
            self._next_message_id += 1
            self.messages.append(entry)

            correct = (
                self.phase == "playing"
                and not self._guessed
                and player_id != self.drawer_id
                and bool(self.word)
                and normalize_guess(text) == normalize_guess(self.word)
            )
            entry.is_correct = correct
            self._publish(events.CHAT_MESSAGE, entry.to_dict())

            if correct:
                self._award(player, self._players.get(self.drawer_id) if self.drawer_id else None)
            return entry

    def _award(self, guesser: Player | None, drawer: Player | None) -> None:
        self._guessed = True
        if guesser is not None:
            guesser.score += self.settings.guess_points
        if drawer is not None:
            drawer.score += self.settings.draw_points

        self._publish(
            events.GUESS_CORRECT,
            {
                "playerId": guesser.id if guesser else None,
                "playerName": guesser.name if guesser else "",
                "word": self.word,
            },
        )
        self._publish(events.PLAYERS_UPDATE, {"players": self.roster()})

        if self._grace is not None:
            self._grace.cancel()
        self._grace = self._scheduler.call_later(self.settings.grace_delay_sec, self._after_grace, self._turn)

    def submit_stroke(self, player_id: ConnectionId, stroke: dict) -> bool:
        with self.lock:
            if self.phase != "playing" or player_id != self.drawer_id:
                return False
            self.strokes.append(stroke)
            self._publish(events.STROKE, stroke, skip=(player_id,))
            return True

    def clear_strokes(self, player_id: ConnectionId) -> bool:
        with self.lock:
            if self.phase != "playing" or player_id != self.drawer_id:
                return False
            self.strokes = []
            self._publish(events.CANVAS_CLEARED, {"roomId": self.id}, skip=(player_id,))
            return True

    def _publish(
        self,
        name: str,
        payload: dict,
        skip: tuple[str, ...] = (),
        private: dict | None = None,
        private_to: str | None = None,
    ) -> None:
        if self._publish_cb is None:
            return
        self._publish_cb(self, RoomEvent(name, payload, skip=skip, private=private or {}, private_to=private_to))
