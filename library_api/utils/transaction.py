from contextlib import contextmanager

from library_api.extensions import db


@contextmanager
def transaction():
    """
    All-or-nothing unit of work on the request session.
    Commits when the block finishes, rolls back and re-raises on any exception.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
