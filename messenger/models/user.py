from sqlalchemy import Column, String, Integer, ForeignKey, DateTime

from .base import Base, utcnow

STATUS_MAX_LENGTH = 140

class User(Base):
    __tablename__ = "users"

    login = Column(String(50), primary_key=True)
    # Stored as supplied; credential strength is out of scope
    password = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=False)
    status = Column(String(STATUS_MAX_LENGTH), nullable=True)
    contact_list_id = Column(Integer, ForeignKey("relationship_lists.id"), nullable=False, unique=True)
    block_list_id = Column(Integer, ForeignKey("relationship_lists.id"), nullable=False, unique=True)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
