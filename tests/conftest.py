import os

os.environ["APP_ENV"] = "testing"

import pytest

from app import app as flask_app, order_boards
from extensions import db
from store import Store


class ContextStore:
    """Store that opens its own app context for every call.

    Requests made through the test client then get a fresh context too, so
    nothing cached on ``g`` (like the logged-in user) leaks between clients.
    """

    def __init__(self, app):
        self.app = app

    def __getattr__(self, name):
        method = getattr(Store, name)

        def call(*args, **kwargs):
            with self.app.app_context():
                return method(Store(db.session), *args, **kwargs)
        return call


@pytest.fixture
def app():
    with flask_app.app_context():
        db.create_all()
    yield flask_app
    with flask_app.app_context():
        db.drop_all()
    order_boards.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return ContextStore(app)
