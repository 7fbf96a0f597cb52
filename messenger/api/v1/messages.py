from fastapi import APIRouter, Depends, status, Query
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.database import get_db
from messenger.repositories.message_repository import MessageRepository
from messenger.schemas.message import MessageCreate, MessageUpdate, MessageResponse, MessagePage, MessageStats
from messenger.services.authorization import Action, AuthorizationGate
from messenger.services.pagination import Page
from messenger.services.visibility import blocked_senders
from messenger.auth import get_current_user
from messenger.models.user import User

router = APIRouter()

def page_response(page: Page) -> dict:
    return {
        "chat_id": page.chat_id,
        "offset": page.offset,
        "page": page.page,
        "has_previous": page.has_previous,
        "previous_offset": page.previous_offset,
        "has_next": page.has_next,
        "next_offset": page.next_offset,
        "messages": page.messages
    }

@router.get("/stats/{chat_id}", response_model=MessageStats)
async def get_chat_message_stats(
    chat_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Total messages in the chat and the senders hidden from the current user"""
    await AuthorizationGate(db).authorize(Action.VIEW_CHAT, current_user.login, chat_id)
    total_messages = await MessageRepository(db).get_chat_message_count(chat_id)
    hidden = await blocked_senders(db, current_user.login)
    return {
        "chat_id": chat_id,
        "total_messages": total_messages,
        "blocked_senders": sorted(hidden)
    }

@router.get("/{chat_id}", response_model=MessagePage)
async def get_chat_messages(
    chat_id: int,
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Newest-first page of messages, without senders the viewer has blocked"""
    await AuthorizationGate(db).authorize(Action.VIEW_CHAT, current_user.login, chat_id)
    page = await MessageRepository(db).get_visible_page(chat_id, current_user.login, offset)
    return page_response(page)

@router.get("/{chat_id}/editable", response_model=MessagePage)
async def get_editable_messages(
    chat_id: int,
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Page of the current user's own messages in the chat"""
    await AuthorizationGate(db).authorize(Action.VIEW_CHAT, current_user.login, chat_id)
    page = await MessageRepository(db).get_editable_page(chat_id, current_user.login, offset)
    return page_response(page)

@router.get("/{chat_id}/deletable", response_model=MessagePage)
async def get_deletable_messages(
    chat_id: int,
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Page of messages the current user may delete"""
    chat = await AuthorizationGate(db).authorize(Action.VIEW_CHAT, current_user.login, chat_id)
    page = await MessageRepository(db).get_deletable_page(
        chat_id,
        current_user.login,
        chat.initiator == current_user.login,
        offset
    )
    return page_response(page)

@router.post("/{chat_id}", response_model=MessageResponse, status_code=status.HTTP_201_CREATED)
async def send_message(
    chat_id: int,
    message_data: MessageCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await AuthorizationGate(db).authorize(Action.POST_MESSAGE, current_user.login, chat_id)
    return await MessageRepository(db).create(chat_id, current_user.login, message_data.text)

@router.put("/{chat_id}/{message_id}", response_model=MessageResponse)
async def edit_message(
    chat_id: int,
    message_id: int,
    message_data: MessageUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Replace the text of one of the current user's messages"""
    message_repo = MessageRepository(db)
    message = await message_repo.get(message_id, chat_id)
    await AuthorizationGate(db).authorize(Action.EDIT_MESSAGE, current_user.login, chat_id, message)
    return await message_repo.update(message_id, chat_id, message_data.text)

@router.delete("/{chat_id}/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_message(
    chat_id: int,
    message_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete a message; allowed for its sender and for the chat initiator"""
    message_repo = MessageRepository(db)
    message = await message_repo.get(message_id, chat_id)
    await AuthorizationGate(db).authorize(Action.DELETE_MESSAGE, current_user.login, chat_id, message)
    await message_repo.delete(message_id, chat_id)
