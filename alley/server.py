"""
project: The Alley
module: server.py
License: MIT

Server bootstrap utilities: logging setup, optional world seeding on start
and the development web server runner.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler

from alley import app, create_app
from alley.logging_utils import get_logger
from alley.services.world_seeder import WorldSeeder
from alley.storage import get_storage

log = get_logger("alley.server")


def start_server(host="0.0.0.0", port=5000, debug: bool = False):  # pragma: no cover (runtime only)
    """Create tables, configure logging and serve the app.

    When SEED_WORLD_ON_START is set and the store has no maps yet, one map,
    item and NPC are seeded before the first request.
    """
    create_app()
    with app.app_context():
        _configure_logging()
        if app.config.get("SEED_WORLD_ON_START"):
            bootstrap_world()
    try:
        print(f"[INFO] Starting server on {host}:{port}")
        app.run(host=host, port=port, debug=debug)
    except KeyboardInterrupt:
        print("\n[INFO] Server stopped by user (Ctrl+C)")
        sys.exit(0)


def _configure_logging():
    """Configure logging to both console and a rotating file in instance/.

    The file path will be instance/app.log. Retains a few backups to avoid growth.
    """
    log_dir = app.instance_path
    try:
        os.makedirs(log_dir, exist_ok=True)
    except OSError:
        pass
    log_path = os.path.join(log_dir, "app.log")

    root = logging.getLogger()
    root.setLevel(logging.INFO)

    formatter = logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    file_handler = RotatingFileHandler(log_path, maxBytes=1_000_000, backupCount=3)
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    console = logging.StreamHandler()
    console.setLevel(logging.INFO)
    console.setFormatter(formatter)

    # Avoid duplicate handlers if reconfigured
    for h in list(root.handlers):
        root.removeHandler(h)

    root.addHandler(file_handler)
    root.addHandler(console)


def bootstrap_world(rng=None):
    """Seed one of each world entity if no map exists yet.

    Returns the seeding report, or None when the world was already present.
    Must run inside an application context.
    """
    storage = get_storage()
    if storage.maps.count() > 0:
        return None
    report = WorldSeeder(storage, rng=rng).initialize_world()
    log.info(event="world_bootstrapped", **{kind: result.id for kind, result in report.items()})
    return report
