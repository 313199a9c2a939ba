from __future__ import annotations

from typing import Callable

from .registry import SessionRegistry

# (connection, room code named by the event, registry) -> allowed?
RoomAuthorizer = Callable[[str, str, SessionRegistry], bool]


def trust_payload(connection: str, room_code: str, registry: SessionRegistry) -> bool:
    """Accept whatever room the event names, bound or not."""
    return True


def bound_room_only(connection: str, room_code: str, registry: SessionRegistry) -> bool:
    binding = registry.binding_for(connection)
    return binding is not None and binding.room_code == room_code


AUTHORIZERS: dict[str, RoomAuthorizer] = {
    "payload": trust_payload,
    "bound": bound_room_only,
}


def get_authorizer(mode: str) -> RoomAuthorizer:
    try:
        return AUTHORIZERS[mode]
    except KeyError:
        raise ValueError(f"unknown ROOM_AUTH_MODE {mode!r}; expected one of {sorted(AUTHORIZERS)}") from None
