from sqlalchemy import case, func, or_, select, update

from library_api.extensions import db
from library_api.models.book import Book


class BookRepo:
    @staticmethod
    def get(book_id: int, fresh: bool = False):
        return db.session.get(Book, book_id, populate_existing=fresh)

    @staticmethod
    def get_by_isbn(isbn: str):
        return Book.query.filter_by(isbn=isbn).first()

    @staticmethod
    def search(q: str, page: int, limit: int):
        """Newest-first page of books whose title or author contains q. Returns (rows, total)."""
        query = Book.query
        if q:
            like = f"%{q.lower()}%"
            query = query.filter(or_(func.lower(Book.title).like(like), func.lower(Book.author).like(like)))

        total = query.count()
        rows = (
            query.order_by(Book.created_at.desc(), Book.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    @staticmethod
    def availability_for(book_ids):
        if not book_ids:
            return {}
        rows = db.session.execute(
            select(Book.id, Book.available_copies).where(Book.id.in_(book_ids))
        ).all()
        return {row.id: row.available_copies for row in rows}

    @staticmethod
    def add(book: Book):
        db.session.add(book)
        db.session.flush()
        return book

    @staticmethod
    def flush():
        db.session.flush()

    # -----------------------------
    # Atomic conditional updates
    # -----------------------------
    @staticmethod
    def take_copy(book_id: int) -> bool:
        """
        available_copies -= 1, guarded by available_copies > 0, as one UPDATE.
        False means no row matched: the book is missing or out of copies.
        """
        stmt = (
            update(Book)
            .where(Book.id == book_id, Book.available_copies > 0)
            .values(available_copies=Book.available_copies - 1)
            .returning(Book.id)
            .execution_options(synchronize_session=False)
        )
        return db.session.execute(stmt).first() is not None

    @staticmethod
    def restore_copy(book_id: int) -> bool:
        """available_copies = min(total_copies, available_copies + 1), computed in the UPDATE."""
        incremented = Book.available_copies + 1
        stmt = (
            update(Book)
            .where(Book.id == book_id)
            .values(
                available_copies=case(
                    (incremented > Book.total_copies, Book.total_copies),
                    else_=incremented,
                )
            )
            .execution_options(synchronize_session=False)
        )
        return db.session.execute(stmt).rowcount == 1

    @staticmethod
    def resize(book_id: int, new_total: int) -> bool:
        """
        Change capacity and shift availability by the same delta, clamped to
        [0, new_total]. The delta is taken from the row inside the UPDATE so a
        concurrent borrow/return is never overwritten.
        """
        shifted = Book.available_copies + (new_total - Book.total_copies)
        stmt = (
            update(Book)
            .where(Book.id == book_id)
            .values(
                total_copies=new_total,
                available_copies=case(
                    (shifted < 0, 0),
                    (shifted > new_total, new_total),
                    else_=shifted,
                ),
            )
            .execution_options(synchronize_session=False)
        )
        return db.session.execute(stmt).rowcount == 1
