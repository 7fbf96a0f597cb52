import logging
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func

from messenger.database import atomic
from messenger.exceptions import ValidationError, NotFoundError
from messenger.models.message import Message, MESSAGE_MAX_LENGTH
from messenger.models.base import utcnow
from messenger.services.pagination import Page, fetch_page
from messenger.services.visibility import visible_to

logger = logging.getLogger(__name__)

def validate_text(text: str) -> None:
    if len(text) > MESSAGE_MAX_LENGTH:
        raise ValidationError(f"Message cannot be longer than {MESSAGE_MAX_LENGTH} characters")

class MessageRepository:
    """Append-only message ledger with in-place edit and per-message delete."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, chat_id: int, sender_login: str, text: str) -> Message:
        validate_text(text)

        message = Message(
            chat_id=chat_id,
            sender_login=sender_login,
            text=text,
            timestamp=utcnow()
        )
        async with atomic(self.db):
            self.db.add(message)
        await self.db.refresh(message)
        logger.info("%s posted message %s in chat %s", sender_login, message.id, chat_id)
        return message

    async def get_by_id(self, message_id: int, chat_id: Optional[int] = None) -> Optional[Message]:
        query = select(Message).where(Message.id == message_id)
        if chat_id is not None:
            query = query.where(Message.chat_id == chat_id)
        result = await self.db.execute(query.execution_options(populate_existing=True))
        return result.scalar_one_or_none()

    async def get(self, message_id: int, chat_id: int) -> Message:
        message = await self.get_by_id(message_id, chat_id)
        if not message:
            raise NotFoundError(f"Message {message_id} not found in chat {chat_id}")
        return message

    async def update(self, message_id: int, chat_id: int, text: str) -> Message:
        """Overwrite the text; id, chat, sender and timestamp never change."""
        validate_text(text)

        message = await self.get(message_id, chat_id)
        async with atomic(self.db):
            message.text = text
        logger.info("Edited message %s in chat %s", message_id, chat_id)
        return message

    async def delete(self, message_id: int, chat_id: int) -> None:
        message = await self.get(message_id, chat_id)
        async with atomic(self.db):
            await self.db.delete(message)
        logger.info("Deleted message %s from chat %s", message_id, chat_id)

    async def get_chat_message_count(self, chat_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Message.id)).where(Message.chat_id == chat_id)
        )
        return result.scalar() or 0

    async def get_visible_page(self, chat_id: int, viewer_login: str, offset: int = 0) -> Page:
        """Chronological view with the viewer's blocked senders filtered out."""
        return await fetch_page(self.db, chat_id, offset, visible_to(viewer_login))

    async def get_editable_page(self, chat_id: int, login: str, offset: int = 0) -> Page:
        return await fetch_page(self.db, chat_id, offset, Message.sender_login == login)

    async def get_deletable_page(self, chat_id: int, login: str, is_initiator: bool, offset: int = 0) -> Page:
        """Every message for the chat initiator, otherwise only the requester's own."""
        if is_initiator:
            return await fetch_page(self.db, chat_id, offset)
        return await fetch_page(self.db, chat_id, offset, Message.sender_login == login)
