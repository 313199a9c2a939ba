from __future__ import annotations

import enum
import json
import logging
import random
from abc import ABC, abstractmethod
from pathlib import Path
from threading import RLock

from ..utils.clock import Clock, iso_timestamp, utc_now
from .codes import CodeAllocator
from .models import Annotation, Room

logger = logging.getLogger(__name__)


class BindOutcome(enum.Enum):
    BOUND = "bound"
    ALREADY_BOUND = "already_bound"
    ROOM_NOT_FOUND = "room_not_found"


class RoomRepository(ABC):
    """Owns the table of active rooms.

    Every annotation mutation is written through to durable storage before the
    call returns. Role slots are ephemeral and are not persisted on their own.
    """

    def __init__(self, clock: Clock | None = None, rng: random.Random | None = None) -> None:
        self._lock = RLock()
        self._rooms: dict[str, Room] = {}
        self._clock = clock or utc_now
        self._codes = CodeAllocator(self._is_taken, rng=rng)

    @abstractmethod
    def _persist(self, room: Room) -> None:
        ...

    def _is_taken(self, code: str) -> bool:
        return code in self._rooms

    def create_room(self, display_connection: str) -> Room:
        with self._lock:
            code = self._codes.allocate()
            room = Room(
                code=code,
                created_at=iso_timestamp(self._clock()),
                display_connection=display_connection,
            )
            self._rooms[code] = room
            return room

    def get_room(self, code: str) -> Room | None:
        with self._lock:
            return self._rooms.get(code)

    def list_rooms(self) -> list[Room]:
        with self._lock:
            return list(self._rooms.values())

    def count(self) -> int:
        with self._lock:
            return len(self._rooms)

    def bind_controller(self, code: str, connection: str, exclusive: bool = False) -> BindOutcome:
        """Bind the controller slot.

        By default the last joiner wins and an existing binding is overwritten.
        With ``exclusive`` a slot held by another connection is left alone.
        """
        with self._lock:
            room = self.get_room(code)
            if room is None:
                return BindOutcome.ROOM_NOT_FOUND
            previous = room.controller_connection
            if previous is not None and previous != connection:
                if exclusive:
                    return BindOutcome.ALREADY_BOUND
                logger.warning("Controller %s replaced %s in room %s", connection, previous, code)
            room.controller_connection = connection
            return BindOutcome.BOUND

    def rebind(self, code: str, role: str, connection: str) -> BindOutcome:
        with self._lock:
            room = self.get_room(code)
            if room is None:
                return BindOutcome.ROOM_NOT_FOUND
            if room.slot(role) is not None:
                return BindOutcome.ALREADY_BOUND
            room.set_slot(role, connection)
            return BindOutcome.BOUND

    def unbind_display(self, code: str) -> bool:
        return self._unbind(code, "display")

    def unbind_controller(self, code: str) -> bool:
        return self._unbind(code, "controller")

    def _unbind(self, code: str, role: str) -> bool:
        with self._lock:
            room = self.get_room(code)
            if room is None:
                return False
            room.set_slot(role, None)
            return True

    def append_annotation(self, code: str, annotation: Annotation) -> bool:
        with self._lock:
            room = self.get_room(code)
            if room is None:
                return False
            room.annotations.append(annotation)
            self._persist(room)
            return True

    def remove_annotation(self, code: str, annotation_id: str) -> bool:
        """Drop every annotation with ``annotation_id``; unknown ids are a no-op."""
        with self._lock:
            room = self.get_room(code)
            if room is None:
                return False
            room.annotations = [a for a in room.annotations if a.id != annotation_id]
            self._persist(room)
            return True

    def clear_annotations(self, code: str) -> bool:
        with self._lock:
            room = self.get_room(code)
            if room is None:
                return False
            room.annotations = []
            self._persist(room)
            return True


class InMemoryRoomRepository(RoomRepository):
    def _persist(self, room: Room) -> None:
        return


class FileRoomRepository(RoomRepository):
    """Rooms are kept in memory and mirrored to ``<data_dir>/room_<code>.json``."""

    def __init__(
        self,
        data_dir: str | Path,
        clock: Clock | None = None,
        rng: random.Random | None = None,
    ) -> None:
        super().__init__(clock=clock, rng=rng)
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, code: str) -> Path:
        return self.data_dir / f"room_{code}.json"

    def _is_taken(self, code: str) -> bool:
        return code in self._rooms or self.path_for(code).exists()

    def _persist(self, room: Room) -> None:
        path = self.path_for(room.code)
        try:
            path.write_text(json.dumps(room.to_record(), indent=2), encoding="utf-8")
        except (OSError, TypeError, ValueError):
            # Memory stays authoritative; the next mutation rewrites the file.
            logger.exception("Failed to persist room %s to %s", room.code, path)

    def _load(self, code: str) -> Room | None:
        path = self.path_for(code)
        if not path.exists():
            return None
        try:
            record = json.loads(path.read_text(encoding="utf-8"))
            room = Room.from_record(code, record)
        except (OSError, ValueError, KeyError, TypeError):
            logger.exception("Error loading room state from %s", path)
            return None

        # Connection ids from a previous process are meaningless.
        room.display_connection = None
        room.controller_connection = None
        return room

    def get_room(self, code: str) -> Room | None:
        with self._lock:
            room = self._rooms.get(code)
            if room is None and isinstance(code, str) and code.isdigit():
                room = self._load(code)
                if room is not None:
                    self._rooms[code] = room
                    logger.info("Room %s loaded from %s", code, self.path_for(code))
            return room

    def load_all(self) -> int:
        """Restore every readable room file; returns the number of rooms loaded."""
        loaded = 0
        with self._lock:
            for path in sorted(self.data_dir.glob("room_*.json")):
                code = path.stem[len("room_"):]
                if code in self._rooms:
                    continue
                room = self._load(code)
                if room is None:
                    continue
                self._rooms[code] = room
                loaded += 1
        if loaded:
            logger.info("Restored %d room(s) from %s", loaded, self.data_dir)
        return loaded
