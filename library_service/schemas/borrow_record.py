from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from typing import Optional

class BorrowRequest(BaseModel):
    """Request body for lending a book to a borrower."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    book_id: int
    borrower_id: int
    borrow_days: Optional[int] = Field(None, ge=1, le=90, description="Loan length in days, defaults to 14")

class ReturnRequest(BaseModel):
    """Request body for handing a borrowed book back."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)
    
    record_id: int
    notes: Optional[str] = None

class BorrowRecordResponse(BaseModel):
    id: int
    bookId: int
    borrowerId: int
    borrowDate: str
    dueDate: str
    returnDate: Optional[str] = None
    status: str
    fineAmount: float
    notes: Optional[str] = None
    bookTitle: Optional[str] = None
    borrowerName: Optional[str] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    
    class Config:
        from_attributes = True
