from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..game.directory import room_summary
from ..game.service import SessionGateway

bp = Blueprint("rooms", __name__)


def _gateway() -> SessionGateway:
    return current_app.extensions["doodle"]


@bp.get("/rooms")
def list_rooms():
    return jsonify({"rooms": _gateway().rooms.list_summaries()})


@bp.get("/rooms/<room_id>")
def get_room(room_id: str):
    room = _gateway().rooms.get(room_id)
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(room_summary(room))
