from sqlalchemy import Column, Integer, ForeignKey, String, DateTime

from .base import BaseModel, utcnow

MESSAGE_MAX_LENGTH = 300

class Message(BaseModel):
    __tablename__ = "messages"

    chat_id = Column(Integer, ForeignKey("chats.id"), nullable=False, index=True)
    sender_login = Column(String(50), ForeignKey("users.login"), nullable=False, index=True)
    text = Column(String(MESSAGE_MAX_LENGTH), nullable=False)
    timestamp = Column(DateTime(timezone=True), default=utcnow, nullable=False, index=True)
