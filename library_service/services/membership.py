import logging
import secrets
from typing import List

from library_service.exceptions import ConflictError, DuplicateResourceError
from library_service.models import Borrower, MembershipType
from library_service.schemas.borrower import BorrowerCreate, BorrowerUpdate
from library_service.store import Store

logger = logging.getLogger(__name__)

MEMBERSHIP_PREFIX = "MEM-"
MEMBERSHIP_ID_ATTEMPTS = 10


def generate_membership_id() -> str:
    """MEM- followed by 8 uppercase hex characters from a CSPRNG."""
    return MEMBERSHIP_PREFIX + secrets.token_hex(4).upper()


class MembershipService:
    """Borrower lifecycle."""

    def __init__(self, store: Store, id_factory=generate_membership_id):
        self.store = store
        self.id_factory = id_factory

    def _insert_with_new_membership_id(self, data: BorrowerCreate) -> Borrower:
        """Insert the borrower, drawing a fresh membership id on every collision.

        The lookup skips ids already committed; the unique index catches an id
        taken by a concurrent registration, and only the savepoint is undone.
        """
        for _ in range(MEMBERSHIP_ID_ATTEMPTS):
            membership_id = self.id_factory()
            if self.store.find_borrower_by_membership_id(membership_id) is not None:
                logger.warning(f"Membership id collision on {membership_id}, retrying")
                continue

            borrower = Borrower(
                name=data.name,
                email=data.email,
                phone=data.phone,
                membership_id=membership_id,
                membership_type=data.membership_type or MembershipType.REGULAR,
                is_active=True,
            )
            try:
                with self.store.savepoint():
                    self.store.insert_borrower(borrower)
            except DuplicateResourceError:
                if self.store.find_borrower_by_email(data.email):
                    raise DuplicateResourceError(f"Borrower with email {data.email} already exists")
                logger.warning(f"Membership id {membership_id} was taken concurrently, retrying")
                continue
            return borrower
        raise DuplicateResourceError("Could not allocate a unique membership id")

    def create_borrower(self, data: BorrowerCreate) -> Borrower:
        with self.store.transaction():
            if self.store.find_borrower_by_email(data.email):
                raise DuplicateResourceError(f"Borrower with email {data.email} already exists")
            borrower = self._insert_with_new_membership_id(data)

        logger.info(f"Borrower {borrower.id} registered as {borrower.membership_id}")
        return borrower

    def get_borrower(self, borrower_id: int) -> Borrower:
        return self.store.get(Borrower, borrower_id)

    def list_borrowers(self) -> List[Borrower]:
        return self.store.list_borrowers()

    def list_active_borrowers(self) -> List[Borrower]:
        return self.store.list_borrowers(is_active=True)

    def update_borrower(self, borrower_id: int, data: BorrowerUpdate) -> Borrower:
        with self.store.transaction():
            borrower = self.store.get(Borrower, borrower_id, for_update=True)

            if borrower.email != data.email and self.store.find_borrower_by_email(data.email):
                raise DuplicateResourceError(f"Borrower with email {data.email} already exists")

            borrower.name = data.name
            borrower.email = data.email
            borrower.phone = data.phone
            if data.membership_type is not None:
                borrower.membership_type = data.membership_type
            if data.is_active is not None:
                borrower.is_active = data.is_active
            self.store.update(borrower)

        logger.info(f"Borrower {borrower_id} updated")
        return borrower

    def set_active(self, borrower_id: int, active: bool) -> Borrower:
        with self.store.transaction():
            borrower = self.store.get(Borrower, borrower_id, for_update=True)
            if borrower.is_active != active:
                borrower.is_active = active
                self.store.update(borrower)

        logger.info(f"Borrower {borrower_id} {'activated' if active else 'deactivated'}")
        return borrower

    def activate_borrower(self, borrower_id: int) -> Borrower:
        return self.set_active(borrower_id, True)

    def deactivate_borrower(self, borrower_id: int) -> Borrower:
        return self.set_active(borrower_id, False)

    def delete_borrower(self, borrower_id: int) -> None:
        with self.store.transaction():
            borrower = self.store.get(Borrower, borrower_id, for_update=True)
            active = self.store.count_active_records_for_borrower(borrower_id)
            if active:
                raise ConflictError(f"Borrower {borrower_id} has {active} active borrow records")
            self.store.delete_borrower(borrower)

        logger.info(f"Borrower {borrower_id} deleted")
