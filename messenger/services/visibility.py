"""Read-time suppression of messages from senders on the viewer's block list.

Blocking is directional and only consulted when rows are fetched, so
unblocking someone restores their messages on the next read.
"""
from typing import Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.models.message import Message
from messenger.models.relationship_list import RelationshipMembership
from messenger.models.user import User


def blocked_senders_query(viewer_login: str):
    return (
        select(RelationshipMembership.member_login)
        .join(User, User.block_list_id == RelationshipMembership.list_id)
        .where(User.login == viewer_login)
    )


def visible_to(viewer_login: str):
    """Row predicate keeping only messages the viewer has not blocked."""
    return Message.sender_login.not_in(blocked_senders_query(viewer_login))


async def blocked_senders(db: AsyncSession, viewer_login: str) -> Set[str]:
    result = await db.execute(blocked_senders_query(viewer_login))
    return set(result.scalars().all())
