import click

from library_api.errors import ServiceError
from library_api.extensions import db
from library_api.models.user import ROLE_MEMBER, ROLES
from library_api.repositories.book_repo import BookRepo
from library_api.services.book_service import BookService
from library_api.services.user_service import UserService

SAMPLE_BOOKS = [
    {"title": "Clean Code", "author": "Robert C. Martin", "isbn": "9780132350884",
     "publication_year": 2008, "total_copies": 5},
    {"title": "The Pragmatic Programmer", "author": "Andrew Hunt, David Thomas", "isbn": "9780201616224",
     "publication_year": 1999, "total_copies": 3},
    {"title": "Design Patterns: Elements of Reusable Object-Oriented Software", "author": "Erich Gamma et al.",
     "isbn": "9780201633610", "publication_year": 1994, "total_copies": 4},
    {"title": "Refactoring", "author": "Martin Fowler", "isbn": "9780134757599",
     "publication_year": 2018, "total_copies": 3},
    {"title": "Introduction to Algorithms", "author": "Thomas H. Cormen et al.", "isbn": "9780262046305",
     "publication_year": 2022, "total_copies": 2},
    {"title": "The Mythical Man-Month", "author": "Frederick P. Brooks Jr.", "isbn": "9780201835953",
     "publication_year": 1995, "total_copies": 4},
    {"title": "Code Complete", "author": "Steve McConnell", "isbn": "9780735619678",
     "publication_year": 2004, "total_copies": 3},
    {"title": "Domain-Driven Design", "author": "Eric Evans", "isbn": "9780321125217",
     "publication_year": 2003, "total_copies": 3},
]


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables (development; use `flask db upgrade` with migrations)."""
        db.create_all()
        click.echo("Tables created.")

    @app.cli.command("seed-books")
    def seed_books():
        """Insert the sample catalog, skipping ISBNs that already exist."""
        created = 0
        for item in SAMPLE_BOOKS:
            if BookRepo.get_by_isbn(item["isbn"]):
                continue
            BookService.create_book(item)
            created += 1
        click.echo(f"Seeded {created} book(s).")

    @app.cli.command("create-user")
    @click.argument("email")
    @click.argument("password")
    @click.option("--role", type=click.Choice(ROLES), default=ROLE_MEMBER, show_default=True)
    def create_user(email, password, role):
        try:
            user = UserService.create_user(email=email, password=password, role=role)
        except ServiceError as e:
            raise click.ClickException(e.message)
        click.echo(f"Created {user.role} {user.email} (id={user.id}).")
