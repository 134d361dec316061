from .book import BookBase, BookCreate, BookUpdate, BookResponse
from .borrower import BorrowerBase, BorrowerCreate, BorrowerUpdate, BorrowerResponse
from .borrow_record import BorrowRequest, ReturnRequest, BorrowRecordResponse

__all__ = [
    "BookBase", "BookCreate", "BookUpdate", "BookResponse",
    "BorrowerBase", "BorrowerCreate", "BorrowerUpdate", "BorrowerResponse",
    "BorrowRequest", "ReturnRequest", "BorrowRecordResponse",
]
