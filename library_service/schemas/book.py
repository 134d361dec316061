import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional

from library_service.models.book import BookStatus

# 10 or 13 digits, hyphens allowed anywhere
ISBN_PATTERN = re.compile(r"^(?=(?:\D*\d){10}(?:(?:\D*\d){3})?$)[\d-]+$")

class BookBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)
    
    title: str = Field(..., min_length=1, max_length=255)
    author: str = Field(..., min_length=1, max_length=255)
    isbn: str = Field(..., min_length=1, max_length=20)
    category: str = Field(..., min_length=1, max_length=100)
    total_copies: int = Field(..., ge=1)
    publisher: Optional[str] = Field(None, max_length=255)
    publish_year: Optional[int] = Field(None, ge=1000, le=2100)
    description: Optional[str] = None
    
    @field_validator("isbn")
    @classmethod
    def check_isbn(cls, value: str) -> str:
        if not ISBN_PATTERN.match(value):
            raise ValueError("Invalid ISBN format")
        return value

class BookCreate(BookBase):
    pass

class BookUpdate(BookBase):
    """Full replacement of a book's editable fields.

    ``status`` is only honoured as an operator override: MAINTENANCE parks
    the book, any other value lifts maintenance and lets the status follow
    the available copies again.
    """
    status: Optional[BookStatus] = None

class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    isbn: str
    category: str
    totalCopies: int
    availableCopies: int
    publisher: Optional[str] = None
    publishYear: Optional[int] = None
    description: Optional[str] = None
    status: str
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    
    class Config:
        from_attributes = True
