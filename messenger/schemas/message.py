from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime

class MessageCreate(BaseModel):
    text: str

class MessageUpdate(BaseModel):
    text: str

class MessageResponse(BaseModel):
    id: int
    chat_id: int
    sender_login: str
    timestamp: datetime
    text: str

    class Config:
        from_attributes = True

class MessagePage(BaseModel):
    chat_id: int
    offset: int
    page: int
    has_previous: bool
    previous_offset: Optional[int] = None
    has_next: bool
    next_offset: Optional[int] = None
    messages: List[MessageResponse]

class MessageStats(BaseModel):
    chat_id: int
    total_messages: int
    blocked_senders: List[str]
