from __future__ import annotations

from flask import Blueprint, current_app, jsonify

from ..rooms.codes import is_valid_code
from ..rooms.models import Room

bp = Blueprint("rooms", __name__)


def room_public_state(room: Room) -> dict:
    # Connection ids stay server-side.
    return {
        "code": room.code,
        "createdAt": room.created_at,
        "hasDisplay": room.display_connection is not None,
        "hasController": room.controller_connection is not None,
        "annotations": room.annotation_dicts(),
    }


@bp.get("/rooms/<code>")
def get_room(code: str):
    rooms = current_app.extensions["minenav"]["rooms"]
    room = rooms.get_room(code) if is_valid_code(code) else None
    if not room:
        return jsonify({"error": "room_not_found"}), 404
    return jsonify(room_public_state(room))


@bp.get("/rooms")
def list_rooms():
    rooms = current_app.extensions["minenav"]["rooms"]
    return jsonify([room_public_state(room) for room in rooms.list_rooms()])
