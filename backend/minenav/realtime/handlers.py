from __future__ import annotations

import logging
from typing import Any, Callable

from flask import request
from flask_socketio import SocketIO, join_room

from . import events
from .dispatch import Dispatch
from .registry import SessionRegistry
from .router import EventRouter

logger = logging.getLogger(__name__)


def register_socketio_handlers(socketio: SocketIO, registry: SessionRegistry, router: EventRouter) -> None:
    def _deliver(dispatch: Dispatch) -> dict | None:
        if dispatch.join:
            join_room(dispatch.join)
        for delivery in dispatch.deliveries:
            socketio.emit(delivery.event, *delivery.args, to=delivery.to)
        return dispatch.ack

    def _relay(event: str, handle: Callable[[str, Any], Dispatch]) -> None:
        def handler(data=None, *_args):
            return _deliver(handle(request.sid, data))

        handler.__name__ = "on_" + event.replace("-", "_")
        socketio.on_event(event, handler)

    @socketio.on("connect")
    def on_connect(auth=None):
        logger.info("Client connected: %s", request.sid)

    @socketio.on(events.CREATE_ROOM)
    def on_create_room(*_args):
        return _deliver(registry.create_room(request.sid))

    @socketio.on(events.JOIN_ROOM)
    def on_join_room(room_code=None, *_args):
        return _deliver(registry.join_room(request.sid, room_code))

    @socketio.on(events.RECONNECT_ROOM)
    def on_reconnect_room(data=None, *_args):
        return _deliver(registry.reconnect(request.sid, data))

    _relay(events.TABLET_MOVEMENT, router.tablet_movement)
    _relay(events.TOUCH_MOVEMENT, router.touch_movement)
    _relay(events.TOGGLE_FLASHLIGHT, router.toggle_flashlight)
    _relay(events.ADD_DANGER_ZONE, router.add_danger_zone)
    _relay(events.ADD_ARROW, router.add_arrow)
    _relay(events.ADD_INCIDENT, router.add_incident)
    _relay(events.ADD_RESTRICTED_ZONE, router.add_restricted_zone)
    _relay(events.CLEAR_ANNOTATIONS, router.clear_annotations)
    _relay(events.REMOVE_ANNOTATION, router.remove_annotation)
    _relay(events.CAMERA_POSITION, router.camera_position)
    _relay(events.REQUEST_PLACEMENT, router.request_placement)
    _relay(events.PLACEMENT_POSITION, router.placement_position)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        logger.info("Client disconnected: %s", request.sid)
        _deliver(registry.disconnect(request.sid))
