from .base import Base
from .user import User
from .relationship_list import ListKind, RelationshipList, RelationshipMembership
from .chat import Chat, ChatType
from .chat_member import ChatMember
from .message import Message

__all__ = [
    "Base",
    "User",
    "ListKind",
    "RelationshipList",
    "RelationshipMembership",
    "Chat",
    "ChatType",
    "ChatMember",
    "Message",
]
