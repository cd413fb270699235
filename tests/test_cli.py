from library_api.cli import SAMPLE_BOOKS
from library_api.models.book import Book
from library_api.models.user import User


def test_seed_books_is_idempotent(app):
    runner = app.test_cli_runner()

    first = runner.invoke(args=["seed-books"])
    assert first.exit_code == 0
    assert f"Seeded {len(SAMPLE_BOOKS)} book(s)." in first.output

    second = runner.invoke(args=["seed-books"])
    assert "Seeded 0 book(s)." in second.output
    assert Book.query.count() == len(SAMPLE_BOOKS)
    assert all(b.available_copies == b.total_copies for b in Book.query.all())


def test_create_user_command(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["create-user", "admin@example.com", "secret123", "--role", "admin"])
    assert result.exit_code == 0
    assert User.query.filter_by(email="admin@example.com").one().role == "admin"

    dup = runner.invoke(args=["create-user", "admin@example.com", "secret123"])
    assert dup.exit_code != 0
    assert "Email already exists" in dup.output
