from fastapi import APIRouter, Depends, Response, status
from typing import List
from library_service.dependencies import get_membership
from library_service.schemas.borrower import BorrowerCreate, BorrowerUpdate, BorrowerResponse
from library_service.services.membership import MembershipService

router = APIRouter(prefix="/api/borrowers", tags=["Borrowers"])

@router.post("", response_model=BorrowerResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=BorrowerResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_borrower(borrower_data: BorrowerCreate, membership: MembershipService = Depends(get_membership)):
    """Register a new borrower and issue a membership id."""
    return membership.create_borrower(borrower_data).to_dict()

@router.get("", response_model=List[BorrowerResponse])
@router.get("/", response_model=List[BorrowerResponse], include_in_schema=False)
def get_borrowers(membership: MembershipService = Depends(get_membership)):
    return [borrower.to_dict() for borrower in membership.list_borrowers()]

@router.get("/active", response_model=List[BorrowerResponse])
def get_active_borrowers(membership: MembershipService = Depends(get_membership)):
    return [borrower.to_dict() for borrower in membership.list_active_borrowers()]

@router.get("/{borrower_id}", response_model=BorrowerResponse)
def get_borrower(borrower_id: int, membership: MembershipService = Depends(get_membership)):
    """Get borrower details by ID."""
    return membership.get_borrower(borrower_id).to_dict()

@router.put("/{borrower_id}", response_model=BorrowerResponse)
def update_borrower(
    borrower_id: int,
    borrower_data: BorrowerUpdate,
    membership: MembershipService = Depends(get_membership)
):
    """Update a borrower; the membership id never changes."""
    return membership.update_borrower(borrower_id, borrower_data).to_dict()

@router.patch("/{borrower_id}/deactivate", status_code=status.HTTP_204_NO_CONTENT)
def deactivate_borrower(borrower_id: int, membership: MembershipService = Depends(get_membership)):
    membership.deactivate_borrower(borrower_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.patch("/{borrower_id}/activate", status_code=status.HTTP_204_NO_CONTENT)
def activate_borrower(borrower_id: int, membership: MembershipService = Depends(get_membership)):
    membership.activate_borrower(borrower_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.delete("/{borrower_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_borrower(borrower_id: int, membership: MembershipService = Depends(get_membership)):
    membership.delete_borrower(borrower_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
