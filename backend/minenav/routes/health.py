from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("health", __name__)


@bp.get("/health")
def health():
    rooms = current_app.extensions["minenav"]["rooms"]
    return jsonify({"ok": True, "rooms": rooms.count()})
