"""
Borrow / return of book copies.

The two shared counters (books.available_copies and borrowings.returned_at)
are only ever changed by single conditional UPDATE statements, each inside
one transaction together with the writes that depend on it. There is no
read-check-write in Python and no in-process lock: when N requests race for
K copies the database lets exactly K of the guarded UPDATEs match a row.

Reads made after a failed UPDATE only pick the error message; they are not
authoritative and may already be stale.
"""

import math
from datetime import datetime

from flask import current_app

from library_api.errors import InvalidRequestError, InvariantViolation, NotFoundError
from library_api.models.borrowing import Borrowing
from library_api.repositories.book_repo import BookRepo
from library_api.repositories.borrowing_repo import BorrowingRepo
from library_api.repositories.user_repo import UserRepo
from library_api.utils.transaction import transaction
from library_api.utils.validation import clamp_page

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


def _clamp_limit(limit) -> int:
    return min(MAX_PAGE_SIZE, max(1, int(limit)))


class BorrowingService:
    @staticmethod
    def borrow(user_id: int, book_id: int) -> Borrowing:
        with transaction():
            user = UserRepo.get_by_id(user_id)
            if not user:
                raise NotFoundError("User not found")

            if not BookRepo.take_copy(book_id):
                # diagnostic only
                if BookRepo.get(book_id, fresh=True) is None:
                    raise NotFoundError("Book not found")
                raise InvalidRequestError("No copies available")

            borrowing = BorrowingRepo.add(Borrowing(
                user_id=user.id,
                book_id=book_id,
                borrowed_at=datetime.utcnow(),
                returned_at=None,
            ))
            borrowing_id = borrowing.id

        current_app.logger.info(f"[borrowings] user={user_id} borrowed book={book_id} borrowing={borrowing_id}")
        return borrowing

    @staticmethod
    def return_book(user_id: int, borrowing_id: int) -> Borrowing:
        with transaction():
            book_id = BorrowingRepo.mark_returned(borrowing_id, user_id, datetime.utcnow())

            if book_id is None:
                BorrowingService._explain_failed_return(user_id, borrowing_id)

            BookRepo.restore_copy(book_id)

            borrowing = BorrowingRepo.get_with_relations(borrowing_id)
            if borrowing is None:
                current_app.logger.error(
                    f"[borrowings] borrowing={borrowing_id} matched the return update but cannot be read back"
                )
                raise InvariantViolation("Borrowing not found after update")

        current_app.logger.info(f"[borrowings] user={user_id} returned borrowing={borrowing_id} book={book_id}")
        return borrowing

    @staticmethod
    def _explain_failed_return(user_id: int, borrowing_id: int):
        existing = BorrowingRepo.get(borrowing_id, fresh=True)
        if existing is None:
            raise NotFoundError("Borrowing not found")
        if existing.returned_at is not None:
            raise InvalidRequestError("Already returned")
        if existing.user_id != user_id:
            raise InvalidRequestError("Cannot return someone else's borrowing")

        # the guarded update and this read disagree; should not happen
        current_app.logger.error(
            f"[borrowings] unexplained return failure borrowing={borrowing_id} user={user_id}"
        )
        raise InvalidRequestError("Unable to return borrowing")

    # -----------------------------
    # Read side
    # -----------------------------
    @staticmethod
    def active_borrowings_for(user_id: int, book_id: int):
        return BorrowingRepo.list_active(user_id, book_id)

    @staticmethod
    def history_for_book(book_id: int, page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> dict:
        limit = _clamp_limit(limit)
        page = clamp_page(page, limit)

        rows, total = BorrowingRepo.page_for_book(book_id, page, limit)
        return {
            "data": rows,
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }

    @staticmethod
    def most_borrowed(limit: int = 10):
        rows = BorrowingRepo.most_borrowed(_clamp_limit(limit))
        return [
            {"book_id": r.book_id, "title": r.title, "borrow_count": int(r.borrow_count)}
            for r in rows
        ]
