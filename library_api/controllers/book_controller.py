from flask import Blueprint, request, jsonify
from flask_jwt_extended import jwt_required

from library_api.models.user import ROLE_ADMIN, ROLE_LIBRARIAN
from library_api.services.book_service import BookService, book_to_dict
from library_api.utils.decorators import role_required
from library_api.utils.validation import query_int

book_bp = Blueprint("books", __name__)


@book_bp.get("/")
def list_books():
    result = BookService.list_books(
        q=request.args.get("q", ""),
        page=query_int(request.args, "page", 1),
        limit=query_int(request.args, "limit", 10),
    )
    return jsonify({"success": True, **result})


@book_bp.get("/<id:book_id>")
def get_book(book_id: int):
    b = BookService.get_book(book_id)
    return jsonify({"success": True, "data": book_to_dict(b)})


@book_bp.post("/")
@jwt_required()
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def create_book():
    data = request.get_json(silent=True) or {}
    b = BookService.create_book(data)
    return jsonify({"success": True, "data": book_to_dict(b)}), 201


@book_bp.patch("/<id:book_id>")
@jwt_required()
@role_required(ROLE_ADMIN, ROLE_LIBRARIAN)
def update_book(book_id: int):
    data = request.get_json(silent=True) or {}
    b = BookService.update_book(book_id, data)
    return jsonify({"success": True, "data": book_to_dict(b)})
