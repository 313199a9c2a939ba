from __future__ import annotations

import logging
from dataclasses import dataclass
from threading import RLock
from typing import Any

from ..rooms.codes import is_valid_code
from ..rooms.models import ROLES, Role
from ..rooms.store import BindOutcome, RoomRepository
from . import events
from .dispatch import Dispatch, ErrorKind, ack_error, ack_ok

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Binding:
    room_code: str
    role: Role


class SessionRegistry:
    """Tracks which connection acts as which role in which room."""

    def __init__(self, rooms: RoomRepository, exclusive_controller_join: bool = False) -> None:
        self._rooms = rooms
        self._exclusive_controller_join = exclusive_controller_join
        self._lock = RLock()
        self._bindings: dict[str, Binding] = {}

    def binding_for(self, connection: str) -> Binding | None:
        with self._lock:
            return self._bindings.get(connection)

    def _bind(self, connection: str, room_code: str, role: str) -> None:
        with self._lock:
            self._bindings[connection] = Binding(room_code=room_code, role=role)

    def create_room(self, connection: str) -> Dispatch:
        room = self._rooms.create_room(connection)
        self._bind(connection, room.code, "display")
        logger.info("Room created: %s by display %s", room.code, connection)
        return Dispatch(ack=ack_ok(roomCode=room.code), join=room.code)

    def join_room(self, connection: str, room_code: Any) -> Dispatch:
        room = self._rooms.get_room(room_code) if is_valid_code(room_code) else None
        if room is None:
            logger.info("Join rejected for %s: room %r not found", connection, room_code)
            return Dispatch(ack=ack_error(ErrorKind.ROOM_NOT_FOUND))

        outcome = self._rooms.bind_controller(room.code, connection, exclusive=self._exclusive_controller_join)
        if outcome is BindOutcome.ROOM_NOT_FOUND:
            return Dispatch(ack=ack_error(ErrorKind.ROOM_NOT_FOUND))
        if outcome is BindOutcome.ALREADY_BOUND:
            logger.info("Join rejected for %s: room %s already has a controller", connection, room.code)
            return Dispatch(ack=ack_error(ErrorKind.ROLE_ALREADY_BOUND))

        self._bind(connection, room.code, "controller")

        dispatch = Dispatch(ack=ack_ok(annotations=room.annotation_dicts()), join=room.code)
        dispatch.send(events.CONTROLLER_CONNECTED, room.display_connection)
        logger.info("Controller %s joined room %s", connection, room.code)
        return dispatch

    def reconnect(self, connection: str, data: Any) -> Dispatch:
        payload = data if isinstance(data, dict) else {}
        room_code = payload.get("roomId")
        role = payload.get("deviceType")

        room = self._rooms.get_room(room_code) if isinstance(room_code, str) else None
        if room is None:
            return Dispatch(ack=ack_error(ErrorKind.ROOM_NOT_FOUND))

        if role not in ROLES:
            return Dispatch(ack=ack_error(ErrorKind.ROLE_ALREADY_BOUND))

        outcome = self._rooms.rebind(room.code, role, connection)
        if outcome is BindOutcome.ROOM_NOT_FOUND:
            return Dispatch(ack=ack_error(ErrorKind.ROOM_NOT_FOUND))
        if outcome is BindOutcome.ALREADY_BOUND:
            logger.info("Reconnect rejected for %s: %s already connected in room %s", connection, role, room.code)
            return Dispatch(ack=ack_error(ErrorKind.ROLE_ALREADY_BOUND))

        self._bind(connection, room.code, role)
        logger.info("%s %s reconnected to room %s", role.capitalize(), connection, room.code)

        if role == "display":
            return Dispatch(
                ack=ack_ok(
                    annotations=room.annotation_dicts(),
                    hasController=room.controller_connection is not None,
                ),
                join=room.code,
            )

        dispatch = Dispatch(ack=ack_ok(annotations=room.annotation_dicts()), join=room.code)
        dispatch.send(events.CONTROLLER_CONNECTED, room.display_connection)
        return dispatch

    def disconnect(self, connection: str) -> Dispatch:
        with self._lock:
            binding = self._bindings.pop(connection, None)

        dispatch = Dispatch()
        if binding is None:
            return dispatch

        room = self._rooms.get_room(binding.room_code)
        if room is None:
            return dispatch

        if binding.role == "display":
            dispatch.send(events.DISPLAY_DISCONNECTED, room.controller_connection)
            # The room is kept for reconnection.
            self._rooms.unbind_display(room.code)
        else:
            dispatch.send(events.CONTROLLER_DISCONNECTED, room.display_connection)
            self._rooms.unbind_controller(room.code)

        logger.info("%s %s left room %s", binding.role.capitalize(), connection, room.code)
        return dispatch
