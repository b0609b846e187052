from __future__ import annotations

import functools
import logging
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO, emit

from ..game.errors import InvalidPayload, RejectedIntent
from ..game.models import ConnectionId
from ..game.service import SessionGateway
from . import events


logger = logging.getLogger(__name__)


def _payload(data: Any) -> dict:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise InvalidPayload()
    return data


def _room_id(payload: dict) -> str:
    room_id = str(payload.get("roomId", "")).strip()
    if not room_id:
        raise InvalidPayload()
    return room_id


def _sid() -> ConnectionId:
    return ConnectionId(request.sid)  # type: ignore[attr-defined]


def _intent(fn: Callable[[dict], Any]) -> Callable[[Any], dict]:
    """Run a handler and turn a rejection into an error event + ack."""

    @functools.wraps(fn)
    def wrapper(data=None):
        try:
            fn(_payload(data))
        except RejectedIntent as exc:
            logger.info("Rejected %s from %s: %s", fn.__name__, request.sid, exc.code)
            emit(exc.event, {"error": exc.code})
            return {"ok": False, "error": exc.code}
        return {"ok": True}

    return wrapper


def register_socketio_handlers(socketio: SocketIO, gateway: SessionGateway) -> None:
    @socketio.on("connect")
    def on_connect(auth=None):
        logger.info("Connection %s opened", request.sid)

    @socketio.on(events.LOBBY_JOIN)
    @_intent
    def lobby_join(payload):
        gateway.join_lobby(_sid(), str(payload.get("name", "") or ""))

    @socketio.on(events.ROOM_CREATE)
    @_intent
    def room_create(payload):
        gateway.create_room(_sid(), str(payload.get("name", "") or ""))

    @socketio.on(events.ROOM_JOIN)
    @_intent
    def room_join(payload):
        gateway.join_room(_sid(), _room_id(payload))

    @socketio.on(events.ROOM_LEAVE)
    @_intent
    def room_leave(payload):
        gateway.leave_room(_sid(), _room_id(payload))

    @socketio.on(events.GAME_START)
    @_intent
    def game_start(payload):
        gateway.start_game(_sid(), _room_id(payload))

    @socketio.on(events.CHAT_SEND)
    @_intent
    def chat_send(payload):
        gateway.send_message(_sid(), _room_id(payload), payload.get("text"))

    @socketio.on(events.DRAW_STROKE)
    @_intent
    def draw_stroke(payload):
        gateway.draw_stroke(_sid(), _room_id(payload), payload.get("stroke"))

    @socketio.on(events.DRAW_CLEAR)
    @_intent
    def draw_clear(payload):
        gateway.clear_canvas(_sid(), _room_id(payload))

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        gateway.disconnect(_sid())
