from fastapi import APIRouter, Depends, Query, Response, status
from typing import List
from library_service.dependencies import get_catalog
from library_service.schemas.book import BookCreate, BookUpdate, BookResponse
from library_service.services.catalog import CatalogService

router = APIRouter(prefix="/api/books", tags=["Books"])

@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=BookResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
def create_book(book_data: BookCreate, catalog: CatalogService = Depends(get_catalog)):
    """Add a book to the catalog with all copies on the shelf."""
    return catalog.create_book(book_data).to_dict()

@router.get("", response_model=List[BookResponse])
@router.get("/", response_model=List[BookResponse], include_in_schema=False)
def get_books(catalog: CatalogService = Depends(get_catalog)):
    """Get all books."""
    return [book.to_dict() for book in catalog.list_books()]

@router.get("/search/title", response_model=List[BookResponse])
def search_books_by_title(
    title: str = Query(..., min_length=1, description="Case-insensitive title fragment"),
    catalog: CatalogService = Depends(get_catalog)
):
    return [book.to_dict() for book in catalog.search_by_title(title)]

@router.get("/search/author", response_model=List[BookResponse])
def search_books_by_author(
    author: str = Query(..., min_length=1, description="Case-insensitive author fragment"),
    catalog: CatalogService = Depends(get_catalog)
):
    return [book.to_dict() for book in catalog.search_by_author(author)]

@router.get("/category/{category}", response_model=List[BookResponse])
def get_books_by_category(category: str, catalog: CatalogService = Depends(get_catalog)):
    return [book.to_dict() for book in catalog.search_by_category(category)]

@router.get("/inventory/low-stock", response_model=List[BookResponse])
def get_low_stock_books(catalog: CatalogService = Depends(get_catalog)):
    """Books with fewer than 20% of their copies on the shelf."""
    return [book.to_dict() for book in catalog.low_stock()]

@router.get("/{book_id}", response_model=BookResponse)
def get_book(book_id: int, catalog: CatalogService = Depends(get_catalog)):
    """Get book details by ID."""
    return catalog.get_book(book_id).to_dict()

@router.put("/{book_id}", response_model=BookResponse)
def update_book(book_id: int, book_data: BookUpdate, catalog: CatalogService = Depends(get_catalog)):
    """Replace a book's details, reconciling available copies with the new total."""
    return catalog.update_book(book_id, book_data).to_dict()

@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_book(book_id: int, catalog: CatalogService = Depends(get_catalog)):
    catalog.delete_book(book_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
