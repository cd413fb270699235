from datetime import datetime
from library_api.extensions import db


class Borrowing(db.Model):
    __tablename__ = "borrowings"
    __table_args__ = (
        # history_for_book: where book_id order by borrowed_at desc
        db.Index("ix_borrowings_book_borrowed_at", "book_id", "borrowed_at"),
        # active_borrowings_for: user_id + book_id + returned_at is null
        db.Index("ix_borrowings_user_book_returned_at", "user_id", "book_id", "returned_at"),
    )

    id = db.Column(db.Integer, primary_key=True)

    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    book_id = db.Column(db.Integer, db.ForeignKey("books.id"), nullable=False)

    borrowed_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    returned_at = db.Column(db.DateTime, nullable=True)

    user = db.relationship("User", backref="borrowings")
    book = db.relationship("Book", backref="borrowings")

    @property
    def is_active(self) -> bool:
        return self.returned_at is None
