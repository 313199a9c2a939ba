import os
from pathlib import Path

_REPO_ROOT = Path(__file__).resolve().parents[2]


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO async mode; empty picks a platform default in create_app()
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    # Storage: one JSON file per room. Empty DATA_DIR keeps rooms in memory only.
    DATA_DIR = os.environ.get("DATA_DIR", str(_REPO_ROOT / "data"))
    RESTORE_ROOMS = os.environ.get("RESTORE_ROOMS", "1") == "1"

    # Static client bundles (display/, controller/, converter/)
    PUBLIC_DIR = os.environ.get("PUBLIC_DIR", str(_REPO_ROOT / "public"))

    # Relay
    # "payload": trust the roomId carried by each event
    # "bound": only accept events for the room the connection is bound to
    ROOM_AUTH_MODE = os.environ.get("ROOM_AUTH_MODE", "payload")
    EXCLUSIVE_CONTROLLER_JOIN = os.environ.get("EXCLUSIVE_CONTROLLER_JOIN", "0") == "1"
    UNIQUE_ANNOTATION_IDS = os.environ.get("UNIQUE_ANNOTATION_IDS", "0") == "1"

    # Dev server (backend/app.py)
    HOST = os.environ.get("HOST", "0.0.0.0")
    PORT = int(os.environ.get("PORT", "3000"))

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
    LOG_FILE = os.environ.get("LOG_FILE", "")
