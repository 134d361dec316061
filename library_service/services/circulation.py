"""Borrow/return workflow.

A borrow record moves BORROWED -> RETURNED on return, BORROWED -> OVERDUE
when the overdue sweep finds it past its due date, OVERDUE -> RETURNED on a
late return, and BORROWED/OVERDUE -> LOST when the copy is written off.
RETURNED and LOST are terminal.

Every state-changing call runs in one store transaction that covers the
eligibility reads, the record write and the book copy counter, so two
requests racing for the last copy or for the borrow limit cannot both win.
"""
import logging
from datetime import date, timedelta
from typing import Callable, List, Optional

from library_service.config import settings
from library_service.exceptions import (
    BookNotAvailableError,
    BorrowerNotActiveError,
    InvalidOperationError,
    ValidationError,
)
from library_service.models import (
    ACTIVE_STATUSES,
    Book,
    BookStatus,
    Borrower,
    BorrowRecord,
    BorrowStatus,
)
from library_service.services.catalog import CatalogService
from library_service.store import Store
from library_service.utils.timezone import days_between, today

logger = logging.getLogger(__name__)

MIN_BORROW_DAYS = 1
MAX_BORROW_DAYS = 90


def calculate_fine(due_date: date, return_date: date, per_day: Optional[float] = None) -> float:
    """Late fee for a return: whole calendar days past due times the daily rate."""
    per_day = settings.fine_per_day if per_day is None else per_day
    days_late = days_between(due_date, return_date)
    return days_late * per_day if days_late > 0 else 0.0


class CirculationService:
    def __init__(
        self,
        store: Store,
        catalog: CatalogService,
        clock: Callable[[], date] = today,
    ):
        self.store = store
        self.catalog = catalog
        self.clock = clock

    def _limit_statuses(self):
        if settings.count_overdue_toward_limit:
            return ACTIVE_STATUSES
        return (BorrowStatus.BORROWED,)

    def borrow(self, book_id: int, borrower_id: int, borrow_days: Optional[int] = None) -> BorrowRecord:
        """Lend one copy of a book to a borrower."""
        if borrow_days is None:
            borrow_days = settings.default_borrow_days
        if not MIN_BORROW_DAYS <= borrow_days <= MAX_BORROW_DAYS:
            raise ValidationError(
                f"Borrow days must be between {MIN_BORROW_DAYS} and {MAX_BORROW_DAYS}"
            )

        with self.store.transaction():
            # Lock order: book, then borrower
            book = self.store.get(Book, book_id, for_update=True)
            borrower = self.store.get(Borrower, borrower_id, for_update=True)

            if not borrower.is_active:
                logger.warning(f"Borrow refused: borrower {borrower_id} is not active")
                raise BorrowerNotActiveError("Borrower account is not active")

            if book.available_copies <= 0 or book.status == BookStatus.MAINTENANCE:
                logger.warning(f"Borrow refused: book {book_id} has no available copy")
                raise BookNotAvailableError("Book is currently not available")

            limit = settings.max_active_borrows
            active = self.store.count_active_borrows(borrower.id, self._limit_statuses())
            if active >= limit:
                logger.warning(f"Borrow refused: borrower {borrower_id} already has {active} books")
                raise InvalidOperationError(
                    f"Borrower has reached maximum borrow limit of {limit} books"
                )

            borrow_date = self.clock()
            record = BorrowRecord(
                book_id=book.id,
                borrower_id=borrower.id,
                borrow_date=borrow_date,
                due_date=borrow_date + timedelta(days=borrow_days),
                status=BorrowStatus.BORROWED,
                fine_amount=0.0,
            )
            self.store.insert_record(record)
            self.catalog.decrement_available(book.id)

        logger.info(f"Book {book_id} borrowed by {borrower_id} (record {record.id}, due {record.due_date})")
        return record

    def return_book(self, record_id: int, notes: Optional[str] = None) -> BorrowRecord:
        """Close an active record, charging the late fee if past due."""
        with self.store.transaction():
            record = self.store.get(BorrowRecord, record_id, for_update=True)

            if record.status not in ACTIVE_STATUSES:
                raise InvalidOperationError("Book has already been returned or marked as lost")

            return_date = self.clock()
            record.return_date = return_date
            record.fine_amount = calculate_fine(record.due_date, return_date)
            record.status = BorrowStatus.RETURNED
            if notes is not None:
                record.notes = notes
            self.store.update(record)

            self.catalog.increment_available(record.book_id)

        logger.info(f"Record {record_id} returned on {record.return_date}, fine {record.fine_amount:.2f}")
        return record

    def mark_as_lost(self, record_id: int) -> BorrowRecord:
        """Write off the copy and charge the flat lost-book fine.

        The copy is not put back on the shelf; adjusting total copies is left
        to the operator.
        """
        with self.store.transaction():
            record = self.store.get(BorrowRecord, record_id, for_update=True)

            if record.status == BorrowStatus.RETURNED:
                raise InvalidOperationError("Cannot mark returned book as lost")
            if record.status == BorrowStatus.LOST:
                raise InvalidOperationError("Book is already marked as lost")

            record.status = BorrowStatus.LOST
            record.return_date = self.clock()
            record.fine_amount = settings.lost_book_fine
            self.store.update(record)

        logger.info(f"Record {record_id} marked as lost, fine {record.fine_amount:.2f}")
        return record

    def list_overdue(self) -> List[BorrowRecord]:
        """Flag every BORROWED record past its due date as OVERDUE and list all overdue records.

        Repeated runs return the same records and change nothing further.
        """
        with self.store.transaction():
            as_of = self.clock()
            newly_overdue = self.store.find_overdue_records(as_of, for_update=True)
            for record in newly_overdue:
                record.status = BorrowStatus.OVERDUE
            if newly_overdue:
                self.store.flush()
                logger.info(f"Overdue sweep flagged {len(newly_overdue)} records as of {as_of}")

            overdue = self.store.find_records_by_status(BorrowStatus.OVERDUE)

        return overdue

    def list_active(self) -> List[BorrowRecord]:
        return self.store.find_records_by_status(BorrowStatus.BORROWED)

    def records_by_borrower(self, borrower_id: int) -> List[BorrowRecord]:
        return self.store.find_records_by_borrower(borrower_id)

    def records_by_book(self, book_id: int) -> List[BorrowRecord]:
        return self.store.find_records_by_book(book_id)
