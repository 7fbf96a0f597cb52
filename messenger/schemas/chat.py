from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime
from messenger.models.chat import ChatType

class ChatCreate(BaseModel):
    participants: List[str]
    initial_message: Optional[str] = None

class ChatResponse(BaseModel):
    id: int
    chat_type: ChatType
    initiator: str
    created_at: datetime

    class Config:
        from_attributes = True

class ChatWithMembersResponse(ChatResponse):
    members: List[str]
