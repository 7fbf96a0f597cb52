from typing import List
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.database import get_db
from messenger.repositories.user_repository import UserRepository
from messenger.schemas.user import UserResponse, StatusUpdate, StatusResponse, ListMemberResponse
from messenger.auth import get_current_user
from messenger.models.relationship_list import ListKind
from messenger.models.user import User

router = APIRouter()

@router.get("/me", response_model=UserResponse)
async def get_current_user_profile(current_user: User = Depends(get_current_user)):
    return current_user

@router.delete("/me", status_code=status.HTTP_204_NO_CONTENT)
async def delete_current_user(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Delete the account along with its lists, memberships, messages and owned chats"""
    await UserRepository(db).delete(current_user.login)

@router.get("/me/status", response_model=StatusResponse)
async def get_status(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    status_text = await UserRepository(db).get_status(current_user.login)
    return {"login": current_user.login, "status": status_text}

@router.put("/me/status", response_model=StatusResponse)
async def update_status(
    status_data: StatusUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = await UserRepository(db).update_status(current_user.login, status_data.status)
    return {"login": user.login, "status": user.status}

@router.get("/lists/{kind}", response_model=List[ListMemberResponse])
async def get_list_members(
    kind: ListKind,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    """Logins on the current user's contact or block list with their status"""
    user_repo = UserRepository(db)
    return [
        {"login": login, "status": status_text}
        async for login, status_text in user_repo.list_members(kind, current_user.login)
    ]

@router.post("/lists/{kind}/{login}", status_code=status.HTTP_201_CREATED)
async def add_to_list(
    kind: ListKind,
    login: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    await UserRepository(db).add_to_list(kind, current_user.login, login)
    return {"message": f"'{login}' added to {kind.value} list"}

@router.delete("/lists/{kind}/{login}")
async def remove_from_list(
    kind: ListKind,
    login: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    removed = await UserRepository(db).remove_from_list(kind, current_user.login, login)
    return {"removed": removed}

@router.get("/{login}", response_model=StatusResponse)
async def get_user(
    login: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user)
):
    user = await UserRepository(db).get(login)
    return {"login": user.login, "status": user.status}
