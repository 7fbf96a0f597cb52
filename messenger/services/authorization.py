"""Central decision point for who may read or mutate what inside a chat."""
import logging
from enum import Enum
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from messenger.exceptions import ForbiddenError
from messenger.models.chat import Chat
from messenger.models.message import Message
from messenger.repositories.chat_repository import ChatRepository

logger = logging.getLogger(__name__)


class Action(str, Enum):
    VIEW_CHAT = "view_chat"
    POST_MESSAGE = "post_message"
    EDIT_MESSAGE = "edit_message"
    DELETE_MESSAGE = "delete_message"
    ADD_MEMBER = "add_member"
    REMOVE_MEMBER = "remove_member"
    DELETE_CHAT = "delete_chat"


INITIATOR_ONLY = {Action.ADD_MEMBER, Action.REMOVE_MEMBER, Action.DELETE_CHAT}
MEMBERS_ONLY = {Action.VIEW_CHAT, Action.POST_MESSAGE}


def is_allowed(
    action: Action,
    requesting_login: str,
    chat: Chat,
    is_member: bool = False,
    message: Optional[Message] = None
) -> bool:
    """Pure allow/deny decision; callers supply the facts it depends on."""
    if action in INITIATOR_ONLY:
        return requesting_login == chat.initiator
    if action in MEMBERS_ONLY:
        return is_member
    if message is None:
        return False
    if action == Action.EDIT_MESSAGE:
        return message.sender_login == requesting_login
    if action == Action.DELETE_MESSAGE:
        return requesting_login in (message.sender_login, chat.initiator)
    return False


class AuthorizationGate:
    def __init__(self, db: AsyncSession):
        self.chats = ChatRepository(db)

    async def authorize(
        self,
        action: Action,
        requesting_login: str,
        chat_id: int,
        message: Optional[Message] = None
    ) -> Chat:
        """Return the chat when allowed, raise ForbiddenError otherwise."""
        chat = await self.chats.get(chat_id)
        is_member = False
        if action in MEMBERS_ONLY:
            is_member = await self.chats.is_member(chat_id, requesting_login)

        if not is_allowed(action, requesting_login, chat, is_member, message):
            logger.warning("Denied %s for %s on chat %s", action.value, requesting_login, chat_id)
            raise ForbiddenError(f"Not allowed to {action.value.replace('_', ' ')} in chat {chat_id}")
        return chat
