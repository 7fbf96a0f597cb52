from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import select, and_
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.exceptions import ValidationError
from messenger.models.message import Message

PAGE_SIZE = 10


@dataclass
class Page:
    """One window of messages, newest first, addressed by a caller-held offset."""

    chat_id: int
    offset: int
    has_next: bool
    messages: List[Message] = field(default_factory=list)

    @property
    def page(self) -> int:
        return self.offset // PAGE_SIZE + 1

    @property
    def has_previous(self) -> bool:
        return self.offset >= PAGE_SIZE

    @property
    def previous_offset(self) -> Optional[int]:
        return self.offset - PAGE_SIZE if self.has_previous else None

    @property
    def next_offset(self) -> Optional[int]:
        return self.offset + PAGE_SIZE if self.has_next else None


async def fetch_page(db: AsyncSession, chat_id: int, offset: int = 0, *predicates) -> Page:
    """Return up to PAGE_SIZE messages of a chat matching every predicate.

    Rows are ordered by timestamp descending with the id as tie-breaker, so
    consecutive offsets never overlap. One extra row is read to tell whether
    a next page exists.
    """
    if offset < 0:
        raise ValidationError("Offset cannot be negative")

    result = await db.execute(
        select(Message)
        .where(and_(Message.chat_id == chat_id, *predicates))
        .order_by(Message.timestamp.desc(), Message.id.desc())
        .offset(offset)
        .limit(PAGE_SIZE + 1)
    )
    rows = list(result.scalars().all())
    return Page(
        chat_id=chat_id,
        offset=offset,
        has_next=len(rows) > PAGE_SIZE,
        messages=rows[:PAGE_SIZE]
    )
