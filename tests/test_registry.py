import threading

from backend.minenav.realtime import events
from backend.minenav.realtime.dispatch import Delivery
from backend.minenav.realtime.registry import Binding, SessionRegistry


def _paired(registry, rooms):
    code = registry.create_room("display-1").ack["roomCode"]
    registry.join_room("controller-1", code)
    return rooms.get_room(code)


def test_create_room_binds_display(registry, rooms):
    dispatch = registry.create_room("display-1")

    code = dispatch.ack["roomCode"]
    assert dispatch.ack == {"success": True, "roomCode": code}
    assert dispatch.join == code
    assert rooms.get_room(code).display_connection == "display-1"
    assert registry.binding_for("display-1") == Binding(room_code=code, role="display")


def test_join_unknown_room_fails_without_mutation(registry, rooms):
    registry.create_room("display-1")
    before = [(r.code, r.display_connection, r.controller_connection) for r in rooms.list_rooms()]

    for bad in ("0000", "12", None, 4821, {"roomId": "1234"}):
        dispatch = registry.join_room("controller-1", bad)
        assert dispatch.ack == {"success": False, "error": "Room not found"}
        assert dispatch.join is None
        assert dispatch.deliveries == []

    after = [(r.code, r.display_connection, r.controller_connection) for r in rooms.list_rooms()]
    assert after == before
    assert registry.binding_for("controller-1") is None


def test_join_returns_annotations_and_notifies_display(registry, rooms, router):
    code = registry.create_room("display-1").ack["roomCode"]
    router.add_danger_zone("display-1", {"roomId": code, "position": {"x": 0, "y": 0, "z": 0}})

    dispatch = registry.join_room("controller-1", code)

    assert dispatch.ack["success"] is True
    assert [a["type"] for a in dispatch.ack["annotations"]] == ["danger"]
    assert dispatch.join == code
    assert dispatch.deliveries == [Delivery(events.CONTROLLER_CONNECTED, "display-1")]
    assert rooms.get_room(code).controller_connection == "controller-1"


def test_last_joiner_wins(registry, rooms):
    room = _paired(registry, rooms)

    dispatch = registry.join_room("controller-2", room.code)

    assert dispatch.ack["success"] is True
    assert room.controller_connection == "controller-2"


def test_exclusive_join_rejects_second_controller(rooms):
    registry = SessionRegistry(rooms, exclusive_controller_join=True)
    room = _paired(registry, rooms)

    dispatch = registry.join_room("controller-2", room.code)

    assert dispatch.ack == {"success": False, "error": "Device type already connected"}
    assert room.controller_connection == "controller-1"
    assert registry.join_room("controller-1", room.code).ack["success"] is True


def test_exclusive_join_admits_one_of_concurrent_controllers(rooms):
    registry = SessionRegistry(rooms, exclusive_controller_join=True)
    code = registry.create_room("display-1").ack["roomCode"]
    joiners = [f"controller-{i}" for i in range(8)]
    barrier = threading.Barrier(len(joiners))
    acks = {}

    def join(connection):
        barrier.wait(timeout=5)
        acks[connection] = registry.join_room(connection, code).ack

    threads = [threading.Thread(target=join, args=(c,)) for c in joiners]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)

    winners = [c for c, ack in acks.items() if ack["success"]]
    assert len(acks) == len(joiners)
    assert len(winners) == 1
    assert rooms.get_room(code).controller_connection == winners[0]
    assert registry.binding_for(winners[0]) == Binding(code, "controller")
    for loser in set(joiners) - set(winners):
        assert acks[loser] == {"success": False, "error": "Device type already connected"}
        assert registry.binding_for(loser) is None


def test_display_disconnect_keeps_controller(registry, rooms):
    room = _paired(registry, rooms)

    dispatch = registry.disconnect("display-1")

    assert dispatch.deliveries == [Delivery(events.DISPLAY_DISCONNECTED, "controller-1")]
    assert rooms.get_room(room.code) is room
    assert room.display_connection is None
    assert room.controller_connection == "controller-1"
    assert registry.binding_for("display-1") is None
    assert registry.binding_for("controller-1") == Binding(room.code, "controller")


def test_controller_disconnect_notifies_display(registry, rooms):
    room = _paired(registry, rooms)

    dispatch = registry.disconnect("controller-1")

    assert dispatch.deliveries == [Delivery(events.CONTROLLER_DISCONNECTED, "display-1")]
    assert room.controller_connection is None


def test_disconnect_without_peer_sends_nothing(registry, rooms):
    code = registry.create_room("display-1").ack["roomCode"]

    assert registry.disconnect("display-1").deliveries == []
    assert rooms.get_room(code).display_connection is None


def test_disconnect_unknown_connection_is_noop(registry):
    dispatch = registry.disconnect("nobody")
    assert dispatch.ack is None
    assert dispatch.deliveries == []


def test_display_reconnect_succeeds_once(registry, rooms):
    room = _paired(registry, rooms)
    registry.disconnect("display-1")

    first = registry.reconnect("display-2", {"roomId": room.code, "deviceType": "display"})
    second = registry.reconnect("display-3", {"roomId": room.code, "deviceType": "display"})

    assert first.ack == {"success": True, "annotations": [], "hasController": True}
    assert first.join == room.code
    assert second.ack == {"success": False, "error": "Device type already connected"}
    assert room.display_connection == "display-2"


def test_controller_reconnect_notifies_display(registry, rooms):
    room = _paired(registry, rooms)
    registry.disconnect("controller-1")

    dispatch = registry.reconnect("controller-2", {"roomId": room.code, "deviceType": "controller"})

    assert dispatch.ack == {"success": True, "annotations": []}
    assert dispatch.deliveries == [Delivery(events.CONTROLLER_CONNECTED, "display-1")]
    assert registry.binding_for("controller-2") == Binding(room.code, "controller")


def test_reconnect_failures(registry, rooms):
    room = _paired(registry, rooms)

    assert registry.reconnect("x", {"roomId": "0000", "deviceType": "display"}).ack == {
        "success": False,
        "error": "Room not found",
    }
    assert registry.reconnect("x", None).ack["error"] == "Room not found"
    assert registry.reconnect("x", {"roomId": room.code, "deviceType": "projector"}).ack == {
        "success": False,
        "error": "Device type already connected",
    }
    assert registry.reconnect("x", {"roomId": room.code, "deviceType": "controller"}).ack["success"] is False


def test_display_reconnect_reports_missing_controller(registry, rooms):
    code = registry.create_room("display-1").ack["roomCode"]
    registry.disconnect("display-1")

    dispatch = registry.reconnect("display-2", {"roomId": code, "deviceType": "display"})

    assert dispatch.ack["hasController"] is False
    assert dispatch.deliveries == []
