import enum
from sqlalchemy import Column, String, DateTime, Integer, Text, Enum, CheckConstraint
from sqlalchemy.sql import func
from library_service.database import Base

class BookStatus(str, enum.Enum):
    AVAILABLE = "AVAILABLE"
    OUT_OF_STOCK = "OUT_OF_STOCK"
    MAINTENANCE = "MAINTENANCE"

class Book(Base):
    __tablename__ = "books"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(255), nullable=False)
    author = Column(String(255), nullable=False, index=True)
    isbn = Column(String(20), unique=True, nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    total_copies = Column(Integer, nullable=False)
    available_copies = Column(Integer, nullable=False)
    publisher = Column(String(255), nullable=True)
    publish_year = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    status = Column(Enum(BookStatus, native_enum=False, length=20), default=BookStatus.AVAILABLE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    __table_args__ = (
        CheckConstraint("total_copies >= 1", name="chk_book_total_copies"),
        CheckConstraint("available_copies >= 0 AND available_copies <= total_copies", name="chk_book_available_copies"),
    )
    
    @property
    def out_copies(self) -> int:
        return self.total_copies - self.available_copies
    
    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "author": self.author,
            "isbn": self.isbn,
            "category": self.category,
            "totalCopies": self.total_copies,
            "availableCopies": self.available_copies,
            "publisher": self.publisher,
            "publishYear": self.publish_year,
            "description": self.description,
            "status": self.status.value if self.status else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
