"""
project: The Alley
module: __init__.py
License: MIT

Flask application and core extensions setup.

This module wires together the Flask app and SQLAlchemy. Configuration is
sourced from environment variables with reasonable defaults for development.
A local `instance/` directory is used for SQLite and the rotating log file.
"""

import logging
import os
import uuid
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask, jsonify
from flask_sqlalchemy import SQLAlchemy

# Load .env if present so `SECRET_KEY`, `DATABASE_URL`, etc. can be supplied
# without exporting shell variables during development.
load_dotenv()

app = Flask(__name__, instance_relative_config=True)

try:
    os.makedirs(app.instance_path, exist_ok=True)
except OSError:
    # Read-only checkouts still work with an explicit DATABASE_URL
    pass

secret_key = os.getenv("SECRET_KEY", "dev-secret-change-me")
database_url = os.getenv("DATABASE_URL")

# During pytest runs, isolate to a separate test database
if not database_url:
    is_pytest = bool(os.getenv("PYTEST_CURRENT_TEST"))
    db_filename = "alley_test.db" if is_pytest else "alley.db"
    db_path = Path(app.instance_path) / db_filename
    database_url = f"sqlite:///{db_path.as_posix()}"

app.config.update(
    SECRET_KEY=secret_key,
    SQLALCHEMY_DATABASE_URI=database_url,
    SQLALCHEMY_TRACK_MODIFICATIONS=False,
    # World growth / bootstrap knobs
    MAP_GROWTH_LIMIT=int(os.getenv("ALLEY_MAP_GROWTH_LIMIT", "11")),
    SEED_WORLD_ON_START=os.getenv("ALLEY_SEED_WORLD_ON_START", "0") in ("1", "true", "yes"),
)

engine_opts = {}
if database_url.startswith("sqlite:"):
    engine_opts["connect_args"] = {
        "timeout": 10,  # busy timeout (seconds) for sqlite
        "check_same_thread": False,  # requests may be served from worker threads
    }
db = SQLAlchemy(app, session_options={"expire_on_commit": False}, engine_options=engine_opts)


# Register HTTP blueprints (import after app/db created)
from alley.routes.engine import bp_engine  # noqa: E402

app.register_blueprint(bp_engine)


def create_app():
    """Return the Flask app instance with all tables created.

    Table creation is idempotent, so calling this from the CLI, the server
    bootstrap and the test fixtures is safe.
    """
    from alley import models  # noqa: F401 ensure model metadata is loaded

    with app.app_context():
        db.create_all()
    return app


# Error handling: in non-debug mode, return a short error id and log details
@app.errorhandler(500)
def internal_error(e):
    error_id = uuid.uuid4().hex[:8]
    logging.exception("Unhandled exception (id=%s)", error_id)
    return jsonify({"error": "internal server error", "error_id": error_id}), 500
