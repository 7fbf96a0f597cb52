import logging
from typing import Optional, AsyncIterator, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_, or_

from messenger.database import atomic
from messenger.exceptions import ValidationError, SelfReferenceError, NotFoundError, ConflictError
from messenger.models.user import User, STATUS_MAX_LENGTH
from messenger.models.relationship_list import ListKind, RelationshipList, RelationshipMembership
from messenger.models.chat import Chat
from messenger.models.chat_member import ChatMember
from messenger.models.message import Message
from messenger.schemas.user import UserCreate

logger = logging.getLogger(__name__)

class UserRepository:
    """Users together with their contact and block lists."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(self, user_data: UserCreate) -> User:
        """Provision both relationship lists and the user row in one transaction."""
        if not user_data.login:
            raise ValidationError("Login must not be empty")
        if await self.get_by_login(user_data.login):
            raise ValidationError(f"User '{user_data.login}' already exists")

        try:
            async with atomic(self.db):
                contact_list = RelationshipList(kind=ListKind.CONTACT)
                block_list = RelationshipList(kind=ListKind.BLOCK)
                self.db.add_all([contact_list, block_list])
                await self.db.flush()

                db_user = User(
                    login=user_data.login,
                    password=user_data.password,
                    phone=user_data.phone,
                    contact_list_id=contact_list.id,
                    block_list_id=block_list.id
                )
                self.db.add(db_user)
        except ConflictError:
            raise ValidationError(f"User '{user_data.login}' already exists")

        await self.db.refresh(db_user)
        logger.info("Created user %s", db_user.login)
        return db_user

    async def get_by_login(self, login: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.login == login))
        return result.scalar_one_or_none()

    async def get(self, login: str) -> User:
        user = await self.get_by_login(login)
        if not user:
            raise NotFoundError(f"User '{login}' not found")
        return user

    async def authenticate(self, login: str, password: str) -> User:
        result = await self.db.execute(
            select(User).where(and_(User.login == login, User.password == password))
        )
        user = result.scalar_one_or_none()
        if not user:
            logger.warning("Failed sign-in for %s", login)
            raise NotFoundError("Invalid login or password")
        return user

    async def get_status(self, login: str) -> Optional[str]:
        user = await self.get(login)
        return user.status

    async def update_status(self, login: str, status: str) -> User:
        if len(status) > STATUS_MAX_LENGTH:
            raise ValidationError(f"Status cannot be longer than {STATUS_MAX_LENGTH} characters")

        user = await self.get(login)
        async with atomic(self.db):
            user.status = status
        logger.info("Updated status of %s", login)
        return user

    async def list_id_for(self, kind: ListKind, owner_login: str) -> int:
        user = await self.get(owner_login)
        return user.contact_list_id if kind == ListKind.CONTACT else user.block_list_id

    async def add_to_list(self, kind: ListKind, owner_login: str, target_login: str) -> RelationshipMembership:
        if target_login == owner_login:
            raise SelfReferenceError(f"Cannot add yourself to your own {kind.value} list")

        list_id = await self.list_id_for(kind, owner_login)
        await self.get(target_login)

        existing = await self.db.execute(
            select(RelationshipMembership).where(
                and_(
                    RelationshipMembership.list_id == list_id,
                    RelationshipMembership.member_login == target_login
                )
            )
        )
        if existing.scalar_one_or_none():
            raise ConflictError(f"'{target_login}' is already on the {kind.value} list")

        edge = RelationshipMembership(list_id=list_id, member_login=target_login)
        async with atomic(self.db):
            self.db.add(edge)
        logger.info("%s added %s to %s list", owner_login, target_login, kind.value)
        return edge

    async def remove_from_list(self, kind: ListKind, owner_login: str, target_login: str) -> bool:
        """Delete the edge if present; returns whether anything was removed."""
        list_id = await self.list_id_for(kind, owner_login)
        async with atomic(self.db):
            result = await self.db.execute(
                delete(RelationshipMembership).where(
                    and_(
                        RelationshipMembership.list_id == list_id,
                        RelationshipMembership.member_login == target_login
                    )
                )
            )
        if result.rowcount:
            logger.info("%s removed %s from %s list", owner_login, target_login, kind.value)
        return bool(result.rowcount)

    async def list_members(self, kind: ListKind, owner_login: str) -> AsyncIterator[Tuple[str, Optional[str]]]:
        """Yield (login, status) for every user on the owner's list, in store order."""
        list_id = await self.list_id_for(kind, owner_login)
        result = await self.db.execute(
            select(User.login, User.status)
            .join(RelationshipMembership, RelationshipMembership.member_login == User.login)
            .where(RelationshipMembership.list_id == list_id)
        )
        for login, status in result.all():
            yield login, status

    async def delete(self, login: str) -> None:
        """Delete the account and everything that references it.

        The user's lists and list edges, edges naming the user on other lists,
        chat memberships, sent messages and initiated chats (with their
        members and messages) are all removed in the same transaction.
        """
        user = await self.get(login)
        own_lists = [user.contact_list_id, user.block_list_id]
        owned_chats = select(Chat.id).where(Chat.initiator == login)

        async with atomic(self.db):
            await self.db.execute(
                delete(Message).where(or_(Message.sender_login == login, Message.chat_id.in_(owned_chats)))
            )
            await self.db.execute(
                delete(ChatMember).where(or_(ChatMember.member_login == login, ChatMember.chat_id.in_(owned_chats)))
            )
            await self.db.execute(delete(Chat).where(Chat.initiator == login))
            await self.db.execute(
                delete(RelationshipMembership).where(
                    or_(
                        RelationshipMembership.member_login == login,
                        RelationshipMembership.list_id.in_(own_lists)
                    )
                )
            )
            await self.db.delete(user)
            await self.db.flush()
            await self.db.execute(delete(RelationshipList).where(RelationshipList.id.in_(own_lists)))
        logger.info("Deleted user %s", login)
