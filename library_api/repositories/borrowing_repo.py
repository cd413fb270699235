from datetime import datetime
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.orm import joinedload

from library_api.extensions import db
from library_api.models.book import Book
from library_api.models.borrowing import Borrowing


class BorrowingRepo:
    @staticmethod
    def get(borrowing_id: int, fresh: bool = False):
        return db.session.get(Borrowing, borrowing_id, populate_existing=fresh)

    @staticmethod
    def get_with_relations(borrowing_id: int):
        return db.session.get(
            Borrowing,
            borrowing_id,
            options=[joinedload(Borrowing.book), joinedload(Borrowing.user)],
            populate_existing=True,
        )

    @staticmethod
    def add(borrowing: Borrowing):
        db.session.add(borrowing)
        db.session.flush()
        return borrowing

    @staticmethod
    def mark_returned(borrowing_id: int, user_id: int, now: datetime) -> Optional[int]:
        """
        Set returned_at, guarded by returned_at IS NULL and ownership, as one UPDATE.
        Returns the borrowed book id, or None when no row matched.
        """
        stmt = (
            update(Borrowing)
            .where(
                Borrowing.id == borrowing_id,
                Borrowing.returned_at.is_(None),
                Borrowing.user_id == user_id,
            )
            .values(returned_at=now)
            .returning(Borrowing.book_id)
            .execution_options(synchronize_session=False)
        )
        row = db.session.execute(stmt).first()
        return row.book_id if row else None

    @staticmethod
    def list_active(user_id: int, book_id: int):
        return (
            Borrowing.query
            .filter(
                Borrowing.user_id == user_id,
                Borrowing.book_id == book_id,
                Borrowing.returned_at.is_(None),
            )
            .order_by(Borrowing.borrowed_at.asc(), Borrowing.id.asc())
            .all()
        )

    @staticmethod
    def page_for_book(book_id: int, page: int, limit: int):
        query = Borrowing.query.filter(Borrowing.book_id == book_id)
        total = query.count()
        rows = (
            query.options(joinedload(Borrowing.user))
            .order_by(Borrowing.borrowed_at.desc(), Borrowing.id.desc())
            .offset((page - 1) * limit)
            .limit(limit)
            .all()
        )
        return rows, total

    @staticmethod
    def most_borrowed(limit: int):
        borrow_count = func.count(Borrowing.id).label("borrow_count")
        stmt = (
            select(Book.id.label("book_id"), Book.title, borrow_count)
            .join(Borrowing, Borrowing.book_id == Book.id)
            .group_by(Book.id, Book.title)
            .order_by(borrow_count.desc(), Book.id.asc())
            .limit(limit)
        )
        return db.session.execute(stmt).all()
