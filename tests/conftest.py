import fnmatch
import threading

import pytest
from flask_jwt_extended import create_access_token
from sqlalchemy import event

from library_api import create_app
from library_api.config import Config
from library_api.extensions import cache, db
from library_api.models.book import Book
from library_api.models.user import ROLE_ADMIN, ROLE_LIBRARIAN, ROLE_MEMBER
from library_api.services.user_service import UserService


@pytest.fixture
def app(tmp_path):
    # a file database: concurrency tests open one connection per thread
    db_file = tmp_path / "library_test.db"

    class TestConfig(Config):
        TESTING = True
        SQLALCHEMY_DATABASE_URI = f"sqlite:///{db_file}"
        SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"timeout": 30, "check_same_thread": False}}
        JWT_SECRET_KEY = "test-jwt-secret-key-with-enough-length-for-hs256"
        REDIS_URL = ""
        LOG_LEVEL = "WARNING"

    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.engine.dispose()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(role=ROLE_MEMBER, email=None, password="secret123"):
        counter["n"] += 1
        return UserService.create_user(
            email=email or f"user{counter['n']}@example.com",
            password=password,
            role=role,
        )

    return _make


@pytest.fixture
def make_book(app):
    counter = {"n": 0}

    def _make(total=1, available=None, title=None, author="Some Author"):
        counter["n"] += 1
        book = Book(
            title=title or f"Book {counter['n']}",
            author=author,
            isbn=f"978000000{counter['n']:04d}",
            publication_year=2000,
            total_copies=total,
            available_copies=total if available is None else available,
        )
        db.session.add(book)
        db.session.commit()
        return book

    return _make


@pytest.fixture
def member(make_user):
    return make_user(ROLE_MEMBER)


@pytest.fixture
def admin(make_user):
    return make_user(ROLE_ADMIN)


@pytest.fixture
def librarian(make_user):
    return make_user(ROLE_LIBRARIAN)


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(
            identity=str(user.id),
            additional_claims={"role": user.role, "email": user.email},
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


def fresh_book(book_id):
    return db.session.get(Book, book_id, populate_existing=True)


def run_concurrently(app, fn, args_list):
    """
    Run fn(*args) once per entry of args_list, each in its own thread with its
    own app context (and therefore its own session/connection). All threads
    are released together by a barrier. Returns one outcome per call: "ok" or
    the raised exception.
    """
    barrier = threading.Barrier(len(args_list))
    outcomes = [None] * len(args_list)

    def worker(i, args):
        with app.app_context():
            barrier.wait()
            try:
                fn(*args)
                outcomes[i] = "ok"
            except Exception as e:
                outcomes[i] = e

    threads = [threading.Thread(target=worker, args=(i, args)) for i, args in enumerate(args_list)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes


class FakeRedis:
    """In-memory stand-in for the handful of redis.Redis calls the cache makes."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = value
        self.ttls[key] = ttl

    def scan_iter(self, match="*"):
        return [k for k in list(self.store) if fnmatch.fnmatch(k, match)]

    def delete(self, *keys):
        for k in keys:
            self.store.pop(k, None)
            self.ttls.pop(k, None)


@pytest.fixture
def fake_redis(app):
    fake = FakeRedis()
    cache.client = fake
    yield fake
    cache.client = None


@pytest.fixture
def sql_log(app):
    """Every SQL statement sent to the database while the test runs, whitespace-normalized."""
    statements = []

    def _record(conn, cursor, statement, parameters, context, executemany):
        statements.append(" ".join(statement.split()))

    event.listen(db.engine, "before_cursor_execute", _record)
    yield statements
    event.remove(db.engine, "before_cursor_execute", _record)
