from dotenv import load_dotenv

load_dotenv()

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
