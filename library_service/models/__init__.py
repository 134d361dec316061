from .book import Book, BookStatus
from .borrower import Borrower, MembershipType
from .borrow_record import BorrowRecord, BorrowStatus, ACTIVE_STATUSES

__all__ = [
    "Book",
    "BookStatus",
    "Borrower",
    "MembershipType",
    "BorrowRecord",
    "BorrowStatus",
    "ACTIVE_STATUSES",
]
