import os
# Ensure the app factory picks the Testing config & SQLite memory DB
os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///:memory:")

import pytest
from app import create_app
from app.extensions import db
from app.models import Question, User

TEST_PASSWORD = "letmein"


@pytest.fixture(scope="session")
def app():
    app = create_app()
    app.config.update(
        TESTING=True,
        SQLALCHEMY_DATABASE_URI="sqlite:///:memory:",
        WTF_CSRF_ENABLED=False,
        RATELIMIT_ENABLED=False,
        GATE_PASSWORD=TEST_PASSWORD,
        GATE_PASSWORD_HASH=None,
    )
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def gated_client(client):
    """A client that has already passed the password gate."""
    resp = client.post("/auth/login", data={"password": TEST_PASSWORD})
    assert resp.status_code == 302
    return client


@pytest.fixture(autouse=True)
def _db_clean(app):
    # Clean BEFORE each test
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()
    yield
    # And AFTER each test (keeps state hermetic even if a test fails mid-transaction)
    with app.app_context():
        db.session.rollback()
        for tbl in reversed(db.metadata.sorted_tables):
            db.session.execute(tbl.delete())
        db.session.commit()


@pytest.fixture()
def seeded(app):
    """Three questions and two users. Returns plain ids (rows would detach)."""
    with app.app_context():
        qs = [Question(prompt=f"Question {i}?", reference_answer=f"Answer {i}.") for i in (1, 2, 3)]
        ann = User(display_name="Ann", submission_count=0, is_active=True)
        ben = User(display_name="Ben", submission_count=0, is_active=True)
        db.session.add_all(qs + [ann, ben])
        db.session.commit()
        return {
            "questions": [q.id for q in qs],
            "ann": ann.id,
            "ben": ben.id,
        }
