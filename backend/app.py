import os
import sys
from pathlib import Path

from dotenv import load_dotenv

CLIENT_PATHS = ("/display/", "/controller/", "/converter/")


def _wants_eventlet() -> bool:
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return False
    return os.environ.get("SOCKETIO_ASYNC_MODE", "").strip() in ("", "eventlet")


def startup_banner(host: str, port: int, room_count: int) -> list[str]:
    """Lines printed to the log once the relay is ready."""
    # 0.0.0.0 is not a browsable address.
    shown = "localhost" if host in ("0.0.0.0", "") else host
    lines = [f"MineNav relay listening on http://{host}:{port}"]
    lines += [f"  {path.strip('/')}: http://{shown}:{port}{path}" for path in CLIENT_PATHS]
    if room_count:
        lines.append(f"  {room_count} room(s) available for reconnection")
    return lines


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    # Must run before Flask/socketio are imported.
    if _wants_eventlet():
        import eventlet

        eventlet.monkey_patch()

    try:
        from backend.minenav.config import Config
        from backend.minenav.server import create_app
        from backend.minenav.utils.logging import setup_logging_from
    except ImportError:  # pragma: no cover
        from minenav.config import Config
        from minenav.server import create_app
        from minenav.utils.logging import setup_logging_from

    setup_logging_from(Config)

    app, socketio = create_app()
    rooms = app.extensions["minenav"]["rooms"]

    for line in startup_banner(Config.HOST, Config.PORT, rooms.count()):
        app.logger.info(line)

    socketio.run(
        app,
        host=Config.HOST,
        port=Config.PORT,
        debug=os.environ.get("FLASK_DEBUG", "1") == "1",
        allow_unsafe_werkzeug=os.environ.get("ALLOW_UNSAFE_WERKZEUG", "1") == "1",
        use_reloader=os.environ.get("FLASK_USE_RELOADER", "0") == "1",
    )


if __name__ == "__main__":
    main()
