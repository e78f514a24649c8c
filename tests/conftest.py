"""Pytest configuration for the bankroll ledger."""

import sys
from pathlib import Path

import pytest


def _ensure_repo_on_path():
    """Make the repository importable without an editable install."""
    repo_root = Path(__file__).resolve().parent.parent
    path_str = str(repo_root)
    if path_str not in sys.path:
        sys.path.insert(0, path_str)


_ensure_repo_on_path()

from app import create_app  # noqa: E402
from models import db  # noqa: E402
from services import build_services  # noqa: E402
from store import RecordStore  # noqa: E402


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SEED_DEMO_DATA': False,
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def store(app):
    return RecordStore(db.session)


@pytest.fixture
def services(store):
    return build_services(store)


@pytest.fixture
def client(app):
    return app.test_client()
