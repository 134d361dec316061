import logging
from typing import List, Optional

from library_service.exceptions import (
    BookNotAvailableError,
    ConflictError,
    DuplicateResourceError,
    InvalidOperationError,
)
from library_service.models import Book, BookStatus
from library_service.schemas.book import BookCreate, BookUpdate
from library_service.store import Store

logger = logging.getLogger(__name__)


def derive_status(book: Book, requested: Optional[BookStatus] = None) -> BookStatus:
    """Status implied by the copy count, honouring a MAINTENANCE override."""
    if requested == BookStatus.MAINTENANCE:
        return BookStatus.MAINTENANCE
    if requested is None and book.status == BookStatus.MAINTENANCE:
        return BookStatus.MAINTENANCE
    return BookStatus.AVAILABLE if book.available_copies > 0 else BookStatus.OUT_OF_STOCK


class CatalogService:
    """Book lifecycle and the copy counter used by circulation."""

    def __init__(self, store: Store):
        self.store = store

    def create_book(self, data: BookCreate) -> Book:
        with self.store.transaction():
            if self.store.find_book_by_isbn(data.isbn):
                raise DuplicateResourceError(f"Book with ISBN {data.isbn} already exists")

            book = Book(
                title=data.title,
                author=data.author,
                isbn=data.isbn,
                category=data.category,
                total_copies=data.total_copies,
                available_copies=data.total_copies,
                publisher=data.publisher,
                publish_year=data.publish_year,
                description=data.description,
                status=BookStatus.AVAILABLE,
            )
            self.store.insert_book(book)

        logger.info(f"Book {book.id} created (ISBN {book.isbn}, {book.total_copies} copies)")
        return book

    def get_book(self, book_id: int) -> Book:
        return self.store.get(Book, book_id)

    def list_books(self) -> List[Book]:
        return self.store.list_books()

    def update_book(self, book_id: int, data: BookUpdate) -> Book:
        with self.store.transaction():
            book = self.store.get(Book, book_id, for_update=True)

            if book.isbn != data.isbn and self.store.find_book_by_isbn(data.isbn):
                raise DuplicateResourceError(f"Book with ISBN {data.isbn} already exists")

            # Copies currently out stay out; only the shelf count absorbs the change
            delta = data.total_copies - book.total_copies
            available = book.available_copies + delta
            if available < 0:
                logger.warning(
                    f"Rejected shrinking book {book_id} to {data.total_copies} copies "
                    f"with {book.out_copies} on loan"
                )
                raise InvalidOperationError(
                    f"Cannot reduce total copies to {data.total_copies}: "
                    f"{book.out_copies} copies are currently borrowed"
                )

            book.title = data.title
            book.author = data.author
            book.isbn = data.isbn
            book.category = data.category
            book.publisher = data.publisher
            book.publish_year = data.publish_year
            book.description = data.description
            book.total_copies = data.total_copies
            book.available_copies = available
            book.status = derive_status(book, data.status)
            self.store.update(book)

        logger.info(f"Book {book_id} updated ({book.available_copies}/{book.total_copies} available, {book.status.value})")
        return book

    def delete_book(self, book_id: int) -> None:
        with self.store.transaction():
            book = self.store.get(Book, book_id, for_update=True)
            active = self.store.count_active_records_for_book(book_id)
            if active:
                raise ConflictError(f"Book {book_id} has {active} active borrow records")
            self.store.delete_book(book)

        logger.info(f"Book {book_id} deleted")

    def search_by_title(self, title: str) -> List[Book]:
        return self.store.find_books_by_title_like(title)

    def search_by_author(self, author: str) -> List[Book]:
        return self.store.find_books_by_author_like(author)

    def search_by_category(self, category: str) -> List[Book]:
        return self.store.find_books_by_category(category)

    def low_stock(self) -> List[Book]:
        return self.store.find_low_stock_books()

    # Copy counter, only called from within a circulation transaction

    def decrement_available(self, book_id: int) -> Book:
        if not self.store.decrement_available_copies(book_id):
            raise BookNotAvailableError("Book is currently not available")

        book = self.store.refresh(self.store.get(Book, book_id))
        if book.available_copies == 0 and book.status != BookStatus.MAINTENANCE:
            book.status = BookStatus.OUT_OF_STOCK
            self.store.update(book)
        return book

    def increment_available(self, book_id: int) -> Book:
        if not self.store.increment_available_copies(book_id):
            logger.warning(f"Book {book_id} already has all copies on the shelf")

        book = self.store.refresh(self.store.get(Book, book_id))
        if book.available_copies > 0 and book.status == BookStatus.OUT_OF_STOCK:
            book.status = BookStatus.AVAILABLE
            self.store.update(book)
        return book
