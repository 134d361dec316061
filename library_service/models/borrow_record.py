import enum
from sqlalchemy import Column, DateTime, Date, Integer, Float, Text, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from library_service.database import Base

class BorrowStatus(str, enum.Enum):
    BORROWED = "BORROWED"
    RETURNED = "RETURNED"
    OVERDUE = "OVERDUE"
    LOST = "LOST"

# Statuses that hold a physical copy out of the library
ACTIVE_STATUSES = (BorrowStatus.BORROWED, BorrowStatus.OVERDUE)

class BorrowRecord(Base):
    __tablename__ = "borrow_records"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    book_id = Column(Integer, ForeignKey("books.id", ondelete="RESTRICT"), nullable=False, index=True)
    borrower_id = Column(Integer, ForeignKey("borrowers.id", ondelete="RESTRICT"), nullable=False, index=True)
    borrow_date = Column(Date, nullable=False)
    due_date = Column(Date, nullable=False, index=True)
    return_date = Column(Date, nullable=True)
    status = Column(Enum(BorrowStatus, native_enum=False, length=20), default=BorrowStatus.BORROWED, nullable=False, index=True)
    fine_amount = Column(Float, default=0.0, nullable=False)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    # Read-only lookups for the response view; records never own books or borrowers
    book = relationship("Book", viewonly=True)
    borrower = relationship("Borrower", viewonly=True)
    
    __table_args__ = (
        CheckConstraint("due_date >= borrow_date", name="chk_record_due_date"),
        CheckConstraint("fine_amount >= 0", name="chk_record_fine_amount"),
    )
    
    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES
    
    def to_dict(self):
        return {
            "id": self.id,
            "bookId": self.book_id,
            "borrowerId": self.borrower_id,
            "borrowDate": self.borrow_date.isoformat() if self.borrow_date else None,
            "dueDate": self.due_date.isoformat() if self.due_date else None,
            "returnDate": self.return_date.isoformat() if self.return_date else None,
            "status": self.status.value if self.status else None,
            "fineAmount": float(self.fine_amount or 0.0),
            "notes": self.notes,
            "bookTitle": self.book.title if self.book else None,
            "borrowerName": self.borrower.name if self.borrower else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
