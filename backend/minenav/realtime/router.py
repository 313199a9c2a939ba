from __future__ import annotations

import logging
from datetime import datetime
from typing import Any

from ..rooms.models import SEVERITIES, Annotation, Arrow, DangerZone, Incident, RestrictedZone, Room
from ..rooms.store import RoomRepository
from ..utils.clock import Clock, iso_date, iso_timestamp, to_millis, utc_now
from . import events
from .auth import RoomAuthorizer, trust_payload
from .dispatch import Dispatch
from .registry import SessionRegistry

logger = logging.getLogger(__name__)


class EventRouter:
    """Relays controller/display events within a room.

    Every relay event carries its room code as ``roomId``. Events naming an
    unknown room, or a room the authorizer rejects, are dropped without an
    acknowledgment.
    """

    def __init__(
        self,
        rooms: RoomRepository,
        registry: SessionRegistry,
        authorize: RoomAuthorizer = trust_payload,
        clock: Clock | None = None,
        unique_annotation_ids: bool = False,
    ) -> None:
        self._rooms = rooms
        self._registry = registry
        self._authorize = authorize
        self._clock = clock or utc_now
        self._unique_annotation_ids = unique_annotation_ids

    def _room_for(self, connection: str, data: Any, event: str) -> tuple[dict, Room] | None:
        if not isinstance(data, dict):
            logger.debug("Dropped %s from %s: payload is not an object", event, connection)
            return None

        room_code = data.get("roomId")
        if not isinstance(room_code, str):
            logger.debug("Dropped %s from %s: missing roomId", event, connection)
            return None

        if not self._authorize(connection, room_code, self._registry):
            logger.debug("Dropped %s from %s: not bound to room %s", event, connection, room_code)
            return None

        room = self._rooms.get_room(room_code)
        if room is None:
            logger.debug("Dropped %s from %s: room %s not found", event, connection, room_code)
            return None
        return data, room

    # Display-bound relays

    def tablet_movement(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.TABLET_MOVEMENT)
        if found is None:
            return Dispatch()
        payload, room = found
        return Dispatch().send(
            events.MOVEMENT_UPDATE,
            room.display_connection,
            {"rotation": payload.get("rotation"), "speed": payload.get("speed")},
        )

    def touch_movement(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.TOUCH_MOVEMENT)
        if found is None:
            return Dispatch()
        payload, room = found
        return Dispatch().send(
            events.TOUCH_MOVEMENT_UPDATE,
            room.display_connection,
            {"movement": payload.get("movement"), "isRunning": payload.get("isRunning")},
        )

    def toggle_flashlight(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.TOGGLE_FLASHLIGHT)
        if found is None:
            return Dispatch()
        _, room = found
        return Dispatch().send(events.FLASHLIGHT_TOGGLE, room.display_connection)

    def request_placement(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.REQUEST_PLACEMENT)
        if found is None:
            return Dispatch()
        payload, room = found
        return Dispatch().send(
            events.GET_PLACEMENT_POSITION,
            room.display_connection,
            {"type": payload.get("type"), "callback": payload.get("callback")},
        )

    # Controller-bound relays

    def camera_position(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.CAMERA_POSITION)
        if found is None:
            return Dispatch()
        payload, room = found
        return Dispatch().send(events.CAMERA_POSITION_UPDATE, room.controller_connection, payload.get("position"))

    def placement_position(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.PLACEMENT_POSITION)
        if found is None:
            return Dispatch()
        payload, room = found
        return Dispatch().send(
            events.PLACEMENT_POSITION_RESPONSE, room.controller_connection, payload.get("position")
        )

    # Annotations (persisted, broadcast to the whole room)

    def _new_id(self, room: Room, kind: str, now: datetime) -> str:
        annotation_id = f"{kind}_{to_millis(now)}"
        if not self._unique_annotation_ids:
            return annotation_id

        taken = {a.id for a in room.annotations}
        candidate, n = annotation_id, 0
        while candidate in taken:
            n += 1
            candidate = f"{annotation_id}_{n}"
        return candidate

    def _add(self, room: Room, annotation: Annotation) -> Dispatch:
        self._rooms.append_annotation(room.code, annotation)
        logger.info("Annotation %s added in room %s", annotation.id, room.code)
        return Dispatch().send(events.ANNOTATION_ADDED, room.code, annotation.to_dict())

    def add_danger_zone(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.ADD_DANGER_ZONE)
        if found is None:
            return Dispatch()
        payload, room = found
        now = self._clock()
        annotation = DangerZone(
            id=self._new_id(room, "danger", now),
            created_at=iso_timestamp(now),
            position=payload.get("position"),
            radius=payload.get("radius") or 5,
            label=payload.get("label") or "Danger Zone",
        )
        return self._add(room, annotation)

    def add_arrow(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.ADD_ARROW)
        if found is None:
            return Dispatch()
        payload, room = found
        now = self._clock()
        annotation = Arrow(
            id=self._new_id(room, "arrow", now),
            created_at=iso_timestamp(now),
            start=payload.get("start"),
            end=payload.get("end"),
            label=payload.get("label") or "Direction",
        )
        return self._add(room, annotation)

    def add_incident(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.ADD_INCIDENT)
        if found is None:
            return Dispatch()
        payload, room = found
        now = self._clock()

        severity = payload.get("severity") or "medium"
        if severity not in SEVERITIES:
            logger.warning("Unknown incident severity %r in room %s, using medium", severity, room.code)
            severity = "medium"

        annotation = Incident(
            id=self._new_id(room, "incident", now),
            created_at=iso_timestamp(now),
            position=payload.get("position"),
            date=payload.get("date") or iso_date(now),
            description=payload.get("description") or "Incident reported",
            severity=severity,
        )
        return self._add(room, annotation)

    def add_restricted_zone(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.ADD_RESTRICTED_ZONE)
        if found is None:
            return Dispatch()
        payload, room = found

        vertices = payload.get("vertices")
        if not isinstance(vertices, list) or len(vertices) < 3:
            logger.warning("Rejected restricted zone in room %s: need at least 3 vertices", room.code)
            return Dispatch()

        now = self._clock()
        annotation = RestrictedZone(
            id=self._new_id(room, "restricted", now),
            created_at=iso_timestamp(now),
            vertices=tuple(vertices),
            active=payload["active"] if "active" in payload else True,
        )
        return self._add(room, annotation)

    def clear_annotations(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.CLEAR_ANNOTATIONS)
        if found is None:
            return Dispatch()
        _, room = found
        self._rooms.clear_annotations(room.code)
        logger.info("All annotations cleared in room %s", room.code)
        return Dispatch().send(events.ANNOTATIONS_CLEARED, room.code)

    def remove_annotation(self, connection: str, data: Any) -> Dispatch:
        found = self._room_for(connection, data, events.REMOVE_ANNOTATION)
        if found is None:
            return Dispatch()
        payload, room = found
        annotation_id = payload.get("annotationId")
        self._rooms.remove_annotation(room.code, annotation_id)
        logger.info("Annotation %s removed in room %s", annotation_id, room.code)
        return Dispatch().send(events.ANNOTATION_REMOVED, room.code, {"id": annotation_id})
