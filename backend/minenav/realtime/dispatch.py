from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any


class ErrorKind(enum.Enum):
    """Relay failures reported to the caller through the acknowledgment."""

    ROOM_NOT_FOUND = "Room not found"
    ROLE_ALREADY_BOUND = "Device type already connected"


def ack_ok(**fields: Any) -> dict:
    return {"success": True, **fields}


def ack_error(kind: ErrorKind) -> dict:
    return {"success": False, "error": kind.value}


@dataclass(frozen=True)
class Delivery:
    event: str
    to: str  # connection id or room code
    args: tuple = ()


@dataclass
class Dispatch:
    """Outcome of one inbound event, independent of the transport.

    ``ack`` is returned to the sender's callback, ``join`` names a room the
    sender must be subscribed to, and ``deliveries`` are emitted in order.
    """

    ack: dict | None = None
    join: str | None = None
    deliveries: list[Delivery] = field(default_factory=list)

    def send(self, event: str, to: str | None, *args: Any) -> "Dispatch":
        if to:
            self.deliveries.append(Delivery(event=event, to=to, args=args))
        return self
