class LibraryError(Exception):
    """Base exception for library service errors."""

    kind = "unexpected"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(LibraryError):
    """Input violates a schema constraint."""

    kind = "validation"


class ResourceNotFoundError(LibraryError):
    """Requested id does not exist in the store."""

    kind = "resource-not-found"


class DuplicateResourceError(LibraryError):
    """Unique constraint violated (isbn, email, membership id)."""

    kind = "duplicate-resource"


class BookNotAvailableError(LibraryError):
    """No copy of the book can be lent out."""

    kind = "book-not-available"


class BorrowerNotActiveError(LibraryError):
    """Borrower account is deactivated."""

    kind = "borrower-not-active"


class InvalidOperationError(LibraryError):
    """Illegal state transition or limit exceeded."""

    kind = "invalid-operation"


class ConflictError(LibraryError):
    """Operation blocked by active borrow records."""

    kind = "conflict"
