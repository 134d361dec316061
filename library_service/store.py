"""Persistence layer over a SQLAlchemy session.

The store owns every query the services need and the transaction scope
they run in. Services never touch the session directly.
"""
import logging
from contextlib import contextmanager
from datetime import date
from typing import Iterable, List, Optional, Type

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from library_service.config import settings
from library_service.exceptions import DuplicateResourceError, ResourceNotFoundError
from library_service.models import (
    ACTIVE_STATUSES,
    Book,
    Borrower,
    BorrowRecord,
    BorrowStatus,
)

logger = logging.getLogger(__name__)

ENTITY_LABELS = {
    Book: "Book",
    Borrower: "Borrower",
    BorrowRecord: "Borrow record",
}


UNIQUE_VIOLATION = "23505"


def _is_unique_violation(error: IntegrityError) -> bool:
    """True when the driver reports a unique-constraint violation.

    PostgreSQL drivers expose the SQLSTATE as ``pgcode``. SQLite has no
    SQLSTATE, so its constraint message is matched instead.
    """
    pgcode = getattr(error.orig, "pgcode", None)
    if pgcode is not None:
        return pgcode == UNIQUE_VIOLATION
    return str(error.orig).startswith("UNIQUE constraint failed")


class Store:
    """CRUD and indexed lookups for books, borrowers and borrow records."""

    def __init__(self, session: Session):
        self.session = session

    @contextmanager
    def transaction(self):
        """Commit on normal exit, roll back and re-raise on any error."""
        try:
            yield self
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise

    @contextmanager
    def savepoint(self):
        """Nested transaction: an error rolls back only the work done inside it."""
        with self.session.begin_nested():
            yield self

    # Generic access

    def find_by_id(self, model: Type, entity_id: int, for_update: bool = False):
        query = self.session.query(model).filter(model.id == entity_id)
        if for_update:
            query = query.with_for_update()
        return query.first()

    def get(self, model: Type, entity_id: int, for_update: bool = False):
        """Like find_by_id, but raises ResourceNotFoundError when absent."""
        entity = self.find_by_id(model, entity_id, for_update=for_update)
        if entity is None:
            raise ResourceNotFoundError(f"{ENTITY_LABELS[model]} not found with id: {entity_id}")
        return entity

    def _flush(self, entity):
        try:
            self.session.flush()
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateResourceError(
                    f"{ENTITY_LABELS[type(entity)]} violates a unique constraint"
                ) from e
            raise
        return entity

    def insert(self, entity):
        self.session.add(entity)
        return self._flush(entity)

    def insert_book(self, book: Book) -> Book:
        return self.insert(book)

    def insert_borrower(self, borrower: Borrower) -> Borrower:
        return self.insert(borrower)

    def insert_record(self, record: BorrowRecord) -> BorrowRecord:
        return self.insert(record)

    def update(self, entity):
        return self._flush(entity)

    def delete(self, entity) -> None:
        self.session.delete(entity)
        self.session.flush()

    def flush(self) -> None:
        self.session.flush()

    def refresh(self, entity):
        self.session.refresh(entity)
        return entity

    # Books

    def list_books(self) -> List[Book]:
        return self.session.query(Book).order_by(Book.id).all()

    def find_book_by_isbn(self, isbn: str) -> Optional[Book]:
        return self.session.query(Book).filter(Book.isbn == isbn).first()

    def find_books_by_category(self, category: str) -> List[Book]:
        return self.session.query(Book).filter(Book.category == category).order_by(Book.id).all()

    def find_books_by_title_like(self, title: str) -> List[Book]:
        return self.session.query(Book).filter(Book.title.ilike(f"%{title}%")).order_by(Book.id).all()

    def find_books_by_author_like(self, author: str) -> List[Book]:
        return self.session.query(Book).filter(Book.author.ilike(f"%{author}%")).order_by(Book.id).all()

    def find_low_stock_books(self, ratio: Optional[float] = None) -> List[Book]:
        ratio = settings.low_stock_ratio if ratio is None else ratio
        return self.session.query(Book).filter(
            Book.available_copies < Book.total_copies * ratio
        ).order_by(Book.id).all()

    def decrement_available_copies(self, book_id: int) -> bool:
        """Take one copy off the shelf; False when none was left."""
        updated = self.session.query(Book).filter(
            Book.id == book_id,
            Book.available_copies > 0
        ).update(
            {Book.available_copies: Book.available_copies - 1},
            synchronize_session=False
        )
        return updated == 1

    def increment_available_copies(self, book_id: int) -> bool:
        """Put one copy back; False when the book is already fully stocked."""
        updated = self.session.query(Book).filter(
            Book.id == book_id,
            Book.available_copies < Book.total_copies
        ).update(
            {Book.available_copies: Book.available_copies + 1},
            synchronize_session=False
        )
        return updated == 1

    def delete_book(self, book: Book) -> None:
        """Delete a book together with its closed borrow history."""
        purged = self.session.query(BorrowRecord).filter(
            BorrowRecord.book_id == book.id
        ).delete(synchronize_session=False)
        if purged:
            logger.info(f"Purged {purged} closed borrow records of book {book.id}")
        self.delete(book)

    # Borrowers

    def list_borrowers(self, is_active: Optional[bool] = None) -> List[Borrower]:
        query = self.session.query(Borrower)
        if is_active is not None:
            query = query.filter(Borrower.is_active == is_active)
        return query.order_by(Borrower.id).all()

    def find_borrower_by_email(self, email: str) -> Optional[Borrower]:
        return self.session.query(Borrower).filter(Borrower.email == email).first()

    def find_borrower_by_membership_id(self, membership_id: str) -> Optional[Borrower]:
        return self.session.query(Borrower).filter(Borrower.membership_id == membership_id).first()

    def delete_borrower(self, borrower: Borrower) -> None:
        """Delete a borrower together with their closed borrow history."""
        purged = self.session.query(BorrowRecord).filter(
            BorrowRecord.borrower_id == borrower.id
        ).delete(synchronize_session=False)
        if purged:
            logger.info(f"Purged {purged} closed borrow records of borrower {borrower.id}")
        self.delete(borrower)

    # Borrow records

    def find_records_by_borrower(self, borrower_id: int) -> List[BorrowRecord]:
        return self.session.query(BorrowRecord).filter(
            BorrowRecord.borrower_id == borrower_id
        ).order_by(BorrowRecord.id).all()

    def find_records_by_book(self, book_id: int) -> List[BorrowRecord]:
        return self.session.query(BorrowRecord).filter(
            BorrowRecord.book_id == book_id
        ).order_by(BorrowRecord.id).all()

    def find_records_by_status(self, status: BorrowStatus) -> List[BorrowRecord]:
        return self.session.query(BorrowRecord).filter(
            BorrowRecord.status == status
        ).order_by(BorrowRecord.due_date.asc(), BorrowRecord.id).all()

    def find_overdue_records(self, as_of: date, for_update: bool = False) -> List[BorrowRecord]:
        """Records still BORROWED whose due date is before as_of."""
        query = self.session.query(BorrowRecord).filter(
            BorrowRecord.status == BorrowStatus.BORROWED,
            BorrowRecord.due_date < as_of
        ).order_by(BorrowRecord.due_date.asc(), BorrowRecord.id)
        if for_update:
            query = query.with_for_update()
        return query.all()

    def count_active_borrows(
        self,
        borrower_id: int,
        statuses: Iterable[BorrowStatus] = (BorrowStatus.BORROWED,)
    ) -> int:
        return self.session.query(BorrowRecord).filter(
            BorrowRecord.borrower_id == borrower_id,
            BorrowRecord.status.in_(list(statuses))
        ).count()

    def count_active_records_for_book(self, book_id: int) -> int:
        return self.session.query(BorrowRecord).filter(
            BorrowRecord.book_id == book_id,
            BorrowRecord.status.in_(ACTIVE_STATUSES)
        ).count()

    def count_active_records_for_borrower(self, borrower_id: int) -> int:
        return self.count_active_borrows(borrower_id, ACTIVE_STATUSES)
