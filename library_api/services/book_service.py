import math

from flask import current_app
from sqlalchemy.exc import IntegrityError

from library_api.errors import InvalidRequestError, NotFoundError
from library_api.extensions import cache
from library_api.models.book import Book
from library_api.repositories.book_repo import BookRepo
from library_api.utils.transaction import transaction
from library_api.utils.validation import clamp_page, optional_int, required_int, required_str

BOOKS_CACHE_PREFIX = "books:"

TITLE_MAX = 500
AUTHOR_MAX = 300
ISBN_MAX = 20
PUBLICATION_YEAR_MAX = 2500
QUANTITY_MAX = 10_000
SEARCH_QUERY_MAX = 200


def book_to_dict(b: Book, with_availability: bool = True) -> dict:
    data = {
        "id": b.id,
        "title": b.title,
        "author": b.author,
        "isbn": b.isbn,
        "publication_year": b.publication_year,
        "total_copies": b.total_copies,
        "created_at": b.created_at.isoformat() if b.created_at else None,
        "updated_at": b.updated_at.isoformat() if b.updated_at else None,
    }
    if with_availability:
        data["available_copies"] = b.available_copies
    return data


class BookService:
    @staticmethod
    def _cache_key(q: str, page: int, limit: int) -> str:
        if q:
            return f"{BOOKS_CACHE_PREFIX}search:{q.lower()}:{page}:{limit}"
        return f"{BOOKS_CACHE_PREFIX}list:{page}:{limit}"

    @staticmethod
    def list_books(q: str = "", page: int = 1, limit: int = 10) -> dict:
        """
        Paginated catalog listing, read through the Redis cache.
        Cached pages never carry available_copies; it is always re-read from the
        database because borrow/return change it without touching the cache.
        """
        q = (q or "").strip()[:SEARCH_QUERY_MAX]
        limit = min(100, max(1, int(limit)))
        page = clamp_page(page, limit)
        key = BookService._cache_key(q, page, limit)

        cached = cache.get(key)
        if isinstance(cached, dict) and isinstance(cached.get("data"), list):
            fresh = BookRepo.availability_for([b["id"] for b in cached["data"]])
            for item in cached["data"]:
                item["available_copies"] = fresh.get(item["id"], 0)
            return cached

        rows, total = BookRepo.search(q, page, limit)
        result = {
            "data": [book_to_dict(b, with_availability=False) for b in rows],
            "total": total,
            "page": page,
            "limit": limit,
            "total_pages": math.ceil(total / limit),
        }
        cache.set(key, result)

        for item, b in zip(result["data"], rows):
            item["available_copies"] = b.available_copies
        return result

    @staticmethod
    def get_book(book_id: int) -> Book:
        book = BookRepo.get(book_id)
        if not book:
            raise NotFoundError("Book not found")
        return book

    @staticmethod
    def _ensure_isbn_unique(isbn: str, ignore_book_id=None):
        existing = BookRepo.get_by_isbn(isbn)
        if existing and existing.id != ignore_book_id:
            raise InvalidRequestError("ISBN already exists")

    @staticmethod
    def create_book(data: dict) -> Book:
        title = required_str(data, "title", TITLE_MAX)
        author = required_str(data, "author", AUTHOR_MAX)
        isbn = required_str(data, "isbn", ISBN_MAX)
        year = required_int(data, "publication_year", 1, PUBLICATION_YEAR_MAX)
        total = required_int(data, "total_copies", 0, QUANTITY_MAX)
        available = optional_int(data, "available_copies", 0, QUANTITY_MAX)

        available = total if available is None else min(available, total)

        try:
            with transaction():
                BookService._ensure_isbn_unique(isbn)
                book = BookRepo.add(Book(
                    title=title,
                    author=author,
                    isbn=isbn,
                    publication_year=year,
                    total_copies=total,
                    available_copies=available,
                ))
                book_id = book.id
        except IntegrityError:
            # concurrent create with the same ISBN
            raise InvalidRequestError("ISBN already exists")

        cache.invalidate(BOOKS_CACHE_PREFIX)
        current_app.logger.info(f"[books] created book={book_id} isbn={isbn} total={total}")
        return book

    @staticmethod
    def update_book(book_id: int, data: dict) -> Book:
        """
        Partial update of descriptive fields. A total_copies change goes through
        BookRepo.resize so availability moves by the same delta atomically.
        available_copies itself is not editable here.
        """
        try:
            with transaction():
                book = BookService.get_book(book_id)

                if "title" in data:
                    book.title = required_str(data, "title", TITLE_MAX)
                if "author" in data:
                    book.author = required_str(data, "author", AUTHOR_MAX)
                if "isbn" in data:
                    isbn = required_str(data, "isbn", ISBN_MAX)
                    if isbn != book.isbn:
                        BookService._ensure_isbn_unique(isbn, book.id)
                    book.isbn = isbn
                if "publication_year" in data:
                    book.publication_year = required_int(data, "publication_year", 1, PUBLICATION_YEAR_MAX)

                new_total = optional_int(data, "total_copies", 0, QUANTITY_MAX)
                # flush descriptive changes before the Core UPDATE touches the same row
                BookRepo.flush()
                if new_total is not None:
                    BookRepo.resize(book.id, new_total)

                book = BookRepo.get(book_id, fresh=True)
        except IntegrityError:
            raise InvalidRequestError("ISBN already exists")

        cache.invalidate(BOOKS_CACHE_PREFIX)
        current_app.logger.info(f"[books] updated book={book_id}")
        return book
