from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.database import get_db
from messenger.repositories.chat_repository import ChatRepository
from messenger.schemas.chat import ChatCreate, ChatResponse, ChatWithMembersResponse
from messenger.services.authorization import Action, AuthorizationGate
from messenger.auth import get_current_user
from messenger.models.chat import Chat
from messenger.models.user import User

router = APIRouter()

def with_members(chat: Chat) -> dict:
    return {
        "id": chat.id,
        "chat_type": chat.chat_type,
        "initiator": chat.initiator,
        "created_at": chat.created_at,
        "members": [member.member_login for member in chat.members]
    }

@router.get("/", response_model=List[ChatWithMembersResponse])
async def get_user_chats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """All chats the current user is a member of"""
    chats = await ChatRepository(db).get_user_chats(current_user.login)
    return [with_members(chat) for chat in chats]

@router.get("/owned", response_model=List[ChatWithMembersResponse])
async def get_owned_chats(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Chats the current user initiated"""
    chats = await ChatRepository(db).get_owned_chats(current_user.login)
    return [with_members(chat) for chat in chats]

@router.post("/", response_model=ChatResponse, status_code=status.HTTP_201_CREATED)
async def create_chat(
    chat_data: ChatCreate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Create a private (one participant) or group (several participants) chat"""
    return await ChatRepository(db).create(
        current_user.login,
        chat_data.participants,
        chat_data.initial_message
    )

@router.get("/{chat_id}", response_model=ChatWithMembersResponse)
async def get_chat(
    chat_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    chat = await AuthorizationGate(db).authorize(Action.VIEW_CHAT, current_user.login, chat_id)
    return with_members(chat)

@router.delete("/{chat_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_chat(
    chat_id: int,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete the chat with all of its members and messages (initiator only)"""
    await AuthorizationGate(db).authorize(Action.DELETE_CHAT, current_user.login, chat_id)
    await ChatRepository(db).delete(chat_id)

@router.post("/{chat_id}/members/{login}", status_code=status.HTTP_201_CREATED)
async def add_member_to_chat(
    chat_id: int,
    login: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await AuthorizationGate(db).authorize(Action.ADD_MEMBER, current_user.login, chat_id)
    await ChatRepository(db).add_member(chat_id, login)
    return {"message": f"'{login}' added to chat {chat_id}"}

@router.delete("/{chat_id}/members/{login}")
async def remove_member_from_chat(
    chat_id: int,
    login: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await AuthorizationGate(db).authorize(Action.REMOVE_MEMBER, current_user.login, chat_id)
    await ChatRepository(db).remove_member(chat_id, login)
    return {"message": f"'{login}' removed from chat {chat_id}"}
