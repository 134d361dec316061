from fastapi import APIRouter, Depends, status
from typing import List
from library_service.dependencies import get_circulation
from library_service.schemas.borrow_record import BorrowRequest, ReturnRequest, BorrowRecordResponse
from library_service.services.circulation import CirculationService

router = APIRouter(prefix="/api/borrow", tags=["Circulation"])

@router.post("", response_model=BorrowRecordResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=BorrowRecordResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def borrow_book(request: BorrowRequest, circulation: CirculationService = Depends(get_circulation)):
    """Lend a book to a borrower.
    Fails when the borrower is inactive, no copy is left or the borrow limit is reached."""
    record = circulation.borrow(request.book_id, request.borrower_id, request.borrow_days)
    return record.to_dict()

@router.post("/return", response_model=BorrowRecordResponse)
def return_book(request: ReturnRequest, circulation: CirculationService = Depends(get_circulation)):
    """Return a borrowed book, charging a fine when it comes back late."""
    return circulation.return_book(request.record_id, request.notes).to_dict()

@router.get("/borrower/{borrower_id}", response_model=List[BorrowRecordResponse])
def get_records_by_borrower(borrower_id: int, circulation: CirculationService = Depends(get_circulation)):
    return [record.to_dict() for record in circulation.records_by_borrower(borrower_id)]

@router.get("/book/{book_id}", response_model=List[BorrowRecordResponse])
def get_records_by_book(book_id: int, circulation: CirculationService = Depends(get_circulation)):
    return [record.to_dict() for record in circulation.records_by_book(book_id)]

@router.get("/overdue", response_model=List[BorrowRecordResponse])
def get_overdue_records(circulation: CirculationService = Depends(get_circulation)):
    """Get overdue records.
    Records still marked borrowed past their due date are flagged overdue first."""
    return [record.to_dict() for record in circulation.list_overdue()]

@router.get("/active", response_model=List[BorrowRecordResponse])
def get_active_records(circulation: CirculationService = Depends(get_circulation)):
    return [record.to_dict() for record in circulation.list_active()]

@router.patch("/{record_id}/mark-lost", response_model=BorrowRecordResponse)
def mark_as_lost(record_id: int, circulation: CirculationService = Depends(get_circulation)):
    """Write off a borrowed copy and charge the lost-book fine."""
    return circulation.mark_as_lost(record_id).to_dict()
