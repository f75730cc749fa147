"""
Shared pytest fixtures for the OKR tracker test suite.

Provides:
    - app: Flask application (session-scoped)
    - _setup_db: Database table creation/teardown (session-scoped)
    - session: Per-test DB cleanup w/ rollback + recreate (autouse)
    - client: Flask test client (function-scoped)
    - upload_dir: per-test UPLOAD_FOLDER under tmp_path
    - node / objective / task: pre-created OKR chain via the ORM
"""

import pytest

from app import create_app
from app.models import db as _db
from app.models.node import Node
from app.models.okr import Objective
from app.models.task import Task


# ── App & DB fixtures ────────────────────────────────────────────────────


@pytest.fixture(scope="session")
def app():
    """Create the Flask application once per test session."""
    application = create_app("testing")
    return application


@pytest.fixture(scope="session")
def _setup_db(app):
    """Create all tables at session start, drop at end."""
    with app.app_context():
        _db.create_all()
    yield
    with app.app_context():
        _db.drop_all()


@pytest.fixture(autouse=True)
def session(app, _setup_db):
    """Per-test: open app context, rollback after test, recreate tables."""
    with app.app_context():
        yield
        _db.session.rollback()
        _db.drop_all()
        _db.create_all()


@pytest.fixture()
def client(app):
    """Flask test client."""
    return app.test_client()


@pytest.fixture()
def upload_dir(app, tmp_path):
    """Point UPLOAD_FOLDER at a throwaway directory for one test."""
    previous = app.config["UPLOAD_FOLDER"]
    app.config["UPLOAD_FOLDER"] = str(tmp_path)
    yield tmp_path
    app.config["UPLOAD_FOLDER"] = previous


# ── Convenience fixtures ─────────────────────────────────────────────────
# Committed, not just flushed: services roll back on refused writes and
# must not take fixture rows with them.


@pytest.fixture()
def node():
    n = Node(name="Sales")
    _db.session.add(n)
    _db.session.commit()
    return n


@pytest.fixture()
def objective(node):
    o = Objective(node_id=node.id, description="Grow revenue", display_order=0)
    _db.session.add(o)
    _db.session.commit()
    return o


@pytest.fixture()
def task(objective):
    t = Task(objective_id=objective.id, title="Launch campaign", final_deliverables=[])
    _db.session.add(t)
    _db.session.commit()
    return t
