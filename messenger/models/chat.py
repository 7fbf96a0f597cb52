from enum import Enum as PyEnum

from sqlalchemy import Column, String, Enum, ForeignKey, DateTime
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow

class ChatType(str, PyEnum):
    PRIVATE = "private"
    GROUP = "group"

class Chat(BaseModel):
    __tablename__ = "chats"

    # Derived from the participant count when the chat is created
    chat_type = Column(Enum(ChatType), nullable=False, default=ChatType.PRIVATE)
    initiator = Column(String(50), ForeignKey("users.login"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    members = relationship("ChatMember", back_populates="chat", order_by="ChatMember.id")
