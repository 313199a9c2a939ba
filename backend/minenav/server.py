from __future__ import annotations

import logging
import sys
from typing import Any, Mapping

from flask import Flask
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .realtime.auth import get_authorizer
from .realtime.handlers import register_socketio_handlers
from .realtime.registry import SessionRegistry
from .realtime.router import EventRouter
from .rooms.store import FileRoomRepository, InMemoryRoomRepository, RoomRepository
from .routes.clients import bp as clients_bp
from .routes.health import bp as health_bp
from .routes.rooms import bp as rooms_bp

logger = logging.getLogger(__name__)

EXTENSION_KEY = "minenav"


def _build_repository(app: Flask) -> RoomRepository:
    data_dir = app.config.get("DATA_DIR", "")
    if not data_dir:
        logger.info("DATA_DIR is empty, rooms are kept in memory only")
        return InMemoryRoomRepository()

    repo = FileRoomRepository(data_dir)
    if app.config.get("RESTORE_ROOMS", False):
        repo.load_all()
    return repo


def _async_mode(app: Flask) -> str:
    configured = app.config.get("SOCKETIO_ASYNC_MODE", "")
    if configured:
        return configured
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def create_app(
    overrides: Mapping[str, Any] | None = None,
    rooms: RoomRepository | None = None,
) -> tuple[Flask, SocketIO]:
    app = Flask(__name__, static_folder=None)
    app.config.from_object(Config)
    if overrides:
        app.config.update(overrides)

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=_async_mode(app),
    )

    if rooms is None:
        rooms = _build_repository(app)
    registry = SessionRegistry(
        rooms,
        exclusive_controller_join=app.config.get("EXCLUSIVE_CONTROLLER_JOIN", False),
    )
    router = EventRouter(
        rooms,
        registry,
        authorize=get_authorizer(app.config.get("ROOM_AUTH_MODE", "payload")),
        unique_annotation_ids=app.config.get("UNIQUE_ANNOTATION_IDS", False),
    )
    app.extensions[EXTENSION_KEY] = {"rooms": rooms, "registry": registry, "router": router}

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(clients_bp)

    register_socketio_handlers(socketio, registry, router)

    return app, socketio
