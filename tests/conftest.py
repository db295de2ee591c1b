import os
import random
import sys
import tempfile

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# The app reads DATABASE_URL at import time; point it at a throwaway file
_DB_DIR = tempfile.mkdtemp(prefix="alley-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"

from alley import create_app, db  # noqa: E402
from alley.storage import Storage  # noqa: E402


@pytest.fixture(scope="session")
def test_app():
    app = create_app()
    app.config.update({"TESTING": True})
    return app


@pytest.fixture(autouse=True)
def _push_app_context(test_app):
    ctx = test_app.app_context()
    ctx.push()
    try:
        yield
    finally:
        ctx.pop()


@pytest.fixture(autouse=True)
def _fresh_db(_push_app_context, test_app):
    """Every test starts from an empty world."""
    db.session.remove()
    db.drop_all()
    db.create_all()
    yield
    db.session.remove()
    test_app.config["RNG"] = None


@pytest.fixture()
def client(test_app):
    return test_app.test_client()


@pytest.fixture()
def storage():
    return Storage()


@pytest.fixture()
def rng():
    return random.Random(1234)
