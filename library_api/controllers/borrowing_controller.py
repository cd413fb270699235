from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from library_api.models.user import ROLE_ADMIN, ROLE_LIBRARIAN
from library_api.services.borrowing_service import BorrowingService, DEFAULT_PAGE_SIZE
from library_api.utils.decorators import current_user_id, role_required
from library_api.utils.validation import query_int, required_id

borrowing_bp = Blueprint("borrowings", __name__)


def _iso(dt):
    return dt.isoformat() if dt else None


def borrowing_to_dict(b, with_book=True) -> dict:
    data = {
        "id": b.id,
        "user_id": b.user_id,
        "book_id": b.book_id,
        "borrowed_at": _iso(b.borrowed_at),
        "returned_at": _iso(b.returned_at),
        "active": b.is_active,
    }
    if with_book and b.book is not None:
        data["book"] = {
            "id": b.book.id,
            "title": b.book.title,
            "author": b.book.author,
            "isbn": b.book.isbn,
            "total_copies": b.book.total_copies,
            "available_copies": b.book.available_copies,
        }
    if b.user is not None:
        data["user"] = {"id": b.user.id, "email": b.user.email}
    return data


@borrowing_bp.post("/borrow")
@jwt_required()
def borrow_book():
    data = request.get_json(silent=True) or {}
    book_id = required_id(data, "book_id")
    b = BorrowingService.borrow(current_user_id(), book_id)
    return jsonify({"success": True, "data": borrowing_to_dict(b)}), 201


@borrowing_bp.post("/return")
@jwt_required()
def return_book():
    data = request.get_json(silent=True) or {}
    borrowing_id = required_id(data, "borrowing_id")
    b = BorrowingService.return_book(current_user_id(), borrowing_id)
    return jsonify({"success": True, "data": borrowing_to_dict(b)})


@borrowing_bp.get("/book/<id:book_id>/active")
@jwt_required()
def my_active_borrowings(book_id: int):
    rows = BorrowingService.active_borrowings_for(current_user_id(), book_id)
    return jsonify({"success": True, "data": [borrowing_to_dict(b, with_book=False) for b in rows]})


@borrowing_bp.get("/book/<id:book_id>/history")
@jwt_required()
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def book_history(book_id: int):
    result = BorrowingService.history_for_book(
        book_id,
        page=query_int(request.args, "page", 1),
        limit=query_int(request.args, "limit", DEFAULT_PAGE_SIZE),
    )
    result["data"] = [borrowing_to_dict(b, with_book=False) for b in result["data"]]
    return jsonify({"success": True, **result})


@borrowing_bp.get("/most-borrowed")
@jwt_required()
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def most_borrowed():
    rows = BorrowingService.most_borrowed(query_int(request.args, "limit", 10))
    return jsonify({"success": True, "data": rows})
