import re
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional

from library_service.models.borrower import MembershipType

# local@domain; the domain may be a bare host name such as "localhost"
EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s.]+(?:\.[^@\s.]+)*$")

class BorrowerBase(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, str_strip_whitespace=True)
    
    name: str = Field(..., min_length=1, max_length=255)
    email: str = Field(..., min_length=3, max_length=255)
    phone: str = Field(..., pattern=r"^[0-9]{10}$")
    membership_type: Optional[MembershipType] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, value: str) -> str:
        if not EMAIL_PATTERN.match(value):
            raise ValueError("Invalid email address")
        return value

class BorrowerCreate(BorrowerBase):
    pass

class BorrowerUpdate(BorrowerBase):
    is_active: Optional[bool] = None

class BorrowerResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: str
    membershipId: str
    membershipType: str
    isActive: bool
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None
    
    class Config:
        from_attributes = True
