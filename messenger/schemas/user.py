from pydantic import BaseModel
from typing import Optional
from datetime import datetime

class UserCreate(BaseModel):
    login: str
    password: str
    phone: str

class UserLogin(BaseModel):
    login: str
    password: str

class UserResponse(BaseModel):
    login: str
    phone: str
    status: Optional[str] = None
    created_at: datetime

    class Config:
        from_attributes = True

class StatusUpdate(BaseModel):
    status: str

class StatusResponse(BaseModel):
    login: str
    status: Optional[str] = None

class ListMemberResponse(BaseModel):
    login: str
    status: Optional[str] = None

class Token(BaseModel):
    access_token: str
    token_type: str
    expires_in: int
