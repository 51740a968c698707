# phenofarm/schemas/user.py
from pydantic import BaseModel, EmailStr, Field
from typing import Literal, Optional

# Shared properties for user models
class UserBase(BaseModel):
    email: EmailStr

# Schema for user authentication credentials
class UserLogin(UserBase):
    password: str

# Registration also creates the grower or dispensary profile
class UserCreate(UserBase):
    password: str = Field(min_length=8)
    role: Literal["GROWER", "DISPENSARY"]
    business_name: str = Field(min_length=1)
    name: Optional[str] = None

# Output schema for user profile details
class UserResponse(UserBase):
    id: int
    role: str
    name: Optional[str] = None
    grower_id: Optional[int] = None
    dispensary_id: Optional[int] = None

    class Config:
        from_attributes = True

# Schema for JWT authentication token response
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
