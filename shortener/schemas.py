from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

# Auth
class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1, max_length=50)
    email: str = Field(..., max_length=100, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    password: str = Field(..., min_length=6, max_length=128)

class LoginRequest(BaseModel):
    email: str = Field(..., max_length=100)
    password: str

class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    role: str

class AuthResponse(BaseModel):
    token: str
    name: str
    email: str
    role: str

# Short links
class ShortLinkCreate(BaseModel):
    # Plain str: URL validation belongs to the allocator so bad input maps to 400, not 422
    original_url: str = Field(..., min_length=1)

class ShortLinkCreated(BaseModel):
    id: int
    original_url: str
    short_code: str
    short_url: str

class ShortLinkListItem(BaseModel):
    id: int
    original_url: str
    short_code: str
    created_by: str
    created_at: datetime
    visit_count: int

class ShortLinkDetails(ShortLinkListItem):
    last_accessed_at: Optional[datetime]

# About
class AboutUpdate(BaseModel):
    content: str = Field(..., min_length=1)

class AboutResponse(BaseModel):
    content: str
    last_updated_at: datetime
    updated_by_id: Optional[int]
    can_edit: bool = False
