from __future__ import annotations

from pathlib import Path

from flask import Blueprint, abort, current_app, send_from_directory

bp = Blueprint("clients", __name__)

CLIENTS = ("display", "controller", "converter")

LANDING_PAGE = """<!DOCTYPE html>
<html>
<head>
    <title>AR Mine Safety Navigation System</title>
</head>
<body>
    <h1>AR Mine Safety Navigation</h1>
    <p>Select your device type to get started</p>
    <ul>
        <li><a href="/display/">Laptop Display</a></li>
        <li><a href="/controller/">Tablet Controller</a></li>
        <li><a href="/converter/">Blueprint Converter</a></li>
    </ul>
</body>
</html>
"""


def _client_dir(client: str) -> Path:
    if client not in CLIENTS:
        abort(404)
    client_dir = Path(current_app.config.get("PUBLIC_DIR", "")) / client
    if not client_dir.is_dir():
        abort(404)
    return client_dir


@bp.get("/")
def index():
    return LANDING_PAGE


@bp.get("/<client>/")
def client_index(client: str):
    return send_from_directory(_client_dir(client), "index.html")


@bp.get("/<client>/<path:path>")
def client_asset(client: str, path: str):
    return send_from_directory(_client_dir(client), path)
