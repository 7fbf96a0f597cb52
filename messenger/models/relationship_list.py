from enum import Enum as PyEnum

from sqlalchemy import Column, String, Enum, Integer, ForeignKey, UniqueConstraint

from .base import BaseModel

class ListKind(str, PyEnum):
    CONTACT = "contact"
    BLOCK = "block"

class RelationshipList(BaseModel):
    __tablename__ = "relationship_lists"

    kind = Column(Enum(ListKind), nullable=False)

class RelationshipMembership(BaseModel):
    __tablename__ = "relationship_memberships"

    list_id = Column(Integer, ForeignKey("relationship_lists.id"), nullable=False, index=True)
    member_login = Column(String(50), ForeignKey("users.login"), nullable=False, index=True)

    __table_args__ = (
        UniqueConstraint("list_id", "member_login", name="unique_list_member"),
    )
