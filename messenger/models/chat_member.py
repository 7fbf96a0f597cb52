from sqlalchemy import Column, String, Integer, ForeignKey, DateTime
from sqlalchemy.orm import relationship

from .base import BaseModel, utcnow

class ChatMember(BaseModel):
    __tablename__ = "chat_members"

    chat_id = Column(Integer, ForeignKey("chats.id"), nullable=False, index=True)
    member_login = Column(String(50), ForeignKey("users.login"), nullable=False, index=True)
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    chat = relationship("Chat", back_populates="members")
