import logging
from typing import Optional, List, Sequence

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_
from sqlalchemy.orm import selectinload

from messenger.database import atomic
from messenger.exceptions import ValidationError, NotFoundError, ConflictError
from messenger.models.chat import Chat, ChatType
from messenger.models.chat_member import ChatMember
from messenger.models.message import Message, MESSAGE_MAX_LENGTH
from messenger.models.user import User

logger = logging.getLogger(__name__)

def chat_type_for(participant_logins: Sequence[str]) -> ChatType:
    """More than one participant besides the initiator makes a group chat."""
    return ChatType.GROUP if len(participant_logins) > 1 else ChatType.PRIVATE

class ChatRepository:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        initiator_login: str,
        participant_logins: Sequence[str],
        initial_message: Optional[str] = None
    ) -> Chat:
        """Create a chat with its memberships (and optional opening message) atomically."""
        if not participant_logins:
            raise ValidationError("A chat needs at least one participant")
        if initial_message is not None and len(initial_message) > MESSAGE_MAX_LENGTH:
            raise ValidationError(f"Message cannot be longer than {MESSAGE_MAX_LENGTH} characters")

        await self._ensure_users_exist([initiator_login, *participant_logins])

        chat = Chat(chat_type=chat_type_for(participant_logins), initiator=initiator_login)
        async with atomic(self.db):
            self.db.add(chat)
            await self.db.flush()

            added = set()
            for login in [initiator_login, *participant_logins]:
                if login in added:
                    continue
                added.add(login)
                self.db.add(ChatMember(chat_id=chat.id, member_login=login))

            if initial_message is not None:
                self.db.add(Message(chat_id=chat.id, sender_login=initiator_login, text=initial_message))

        await self.db.refresh(chat)
        logger.info(
            "%s created %s chat %s with %d member(s)",
            initiator_login, chat.chat_type.value, chat.id, len(added)
        )
        return chat

    async def _ensure_users_exist(self, logins: Sequence[str]) -> None:
        wanted = set(logins)
        result = await self.db.execute(select(User.login).where(User.login.in_(list(wanted))))
        missing = wanted - set(result.scalars().all())
        if missing:
            raise NotFoundError(f"Unknown user(s): {', '.join(sorted(missing))}")

    async def get_by_id(self, chat_id: int) -> Optional[Chat]:
        result = await self.db.execute(
            select(Chat).options(selectinload(Chat.members))
            .where(Chat.id == chat_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def get(self, chat_id: int) -> Chat:
        chat = await self.get_by_id(chat_id)
        if not chat:
            raise NotFoundError(f"Chat {chat_id} not found")
        return chat

    async def get_user_chats(self, login: str) -> List[Chat]:
        """All chats where the user is a member."""
        member_of = select(ChatMember.chat_id).where(ChatMember.member_login == login)
        result = await self.db.execute(
            select(Chat).options(selectinload(Chat.members))
            .where(Chat.id.in_(member_of))
            .order_by(Chat.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def get_owned_chats(self, login: str) -> List[Chat]:
        result = await self.db.execute(
            select(Chat).options(selectinload(Chat.members))
            .where(Chat.initiator == login)
            .order_by(Chat.id)
            .execution_options(populate_existing=True)
        )
        return list(result.scalars().all())

    async def is_member(self, chat_id: int, login: str) -> bool:
        result = await self.db.execute(
            select(ChatMember.id).where(
                and_(ChatMember.chat_id == chat_id, ChatMember.member_login == login)
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def add_member(self, chat_id: int, login: str) -> ChatMember:
        await self.get(chat_id)
        await self._ensure_users_exist([login])
        if await self.is_member(chat_id, login):
            raise ConflictError(f"'{login}' is already a member of chat {chat_id}")

        member = ChatMember(chat_id=chat_id, member_login=login)
        async with atomic(self.db):
            self.db.add(member)
        logger.info("Added %s to chat %s", login, chat_id)
        return member

    async def remove_member(self, chat_id: int, login: str) -> bool:
        chat = await self.get(chat_id)
        if login == chat.initiator:
            raise ValidationError("The chat initiator cannot be removed from the chat")

        async with atomic(self.db):
            result = await self.db.execute(
                delete(ChatMember).where(
                    and_(ChatMember.chat_id == chat_id, ChatMember.member_login == login)
                )
            )
        if not result.rowcount:
            raise NotFoundError(f"'{login}' is not a member of chat {chat_id}")
        logger.info("Removed %s from chat %s", login, chat_id)
        return True

    async def delete(self, chat_id: int) -> None:
        """Delete the chat together with its memberships and messages."""
        async with atomic(self.db):
            await self.db.execute(delete(Message).where(Message.chat_id == chat_id))
            await self.db.execute(delete(ChatMember).where(ChatMember.chat_id == chat_id))
            result = await self.db.execute(delete(Chat).where(Chat.id == chat_id))
            if not result.rowcount:
                raise NotFoundError(f"Chat {chat_id} not found")
        logger.info("Deleted chat %s", chat_id)
