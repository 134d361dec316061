import enum
from sqlalchemy import Column, String, DateTime, Integer, Boolean, Enum
from sqlalchemy.sql import func
from library_service.database import Base

class MembershipType(str, enum.Enum):
    REGULAR = "REGULAR"
    PREMIUM = "PREMIUM"
    STUDENT = "STUDENT"

class Borrower(Base):
    __tablename__ = "borrowers"
    
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    phone = Column(String(10), nullable=False)
    membership_id = Column(String(12), unique=True, nullable=False, index=True)
    membership_type = Column(Enum(MembershipType, native_enum=False, length=20), default=MembershipType.REGULAR, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
    
    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "membershipId": self.membership_id,
            "membershipType": self.membership_type.value if self.membership_type else None,
            "isActive": self.is_active,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
