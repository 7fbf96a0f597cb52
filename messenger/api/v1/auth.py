from datetime import timedelta
from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from messenger.database import get_db
from messenger.repositories.user_repository import UserRepository
from messenger.schemas.user import UserCreate, UserResponse, Token, UserLogin
from messenger.auth import authenticate_user, create_access_token, get_current_user
from messenger.config import settings

router = APIRouter()

def issue_token(login: str) -> dict:
    expires = timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    token = create_access_token(data={"sub": login}, expires_delta=expires)
    return {"access_token": token, "token_type": "bearer", "expires_in": settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60}

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register_user(user_data: UserCreate, db: AsyncSession = Depends(get_db)):
    """Sign up: creates the user with empty contact and block lists"""
    return await UserRepository(db).create(user_data)

@router.post("/login", response_model=Token)
async def login_user(form_data: OAuth2PasswordRequestForm = Depends(), db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, form_data.username, form_data.password)
    return issue_token(user.login)

@router.post("/login-json", response_model=Token)
async def login_user_json(user_data: UserLogin, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, user_data.login, user_data.password)
    return issue_token(user.login)

@router.get("/me", response_model=UserResponse)
async def get_current_user_info(current_user = Depends(get_current_user)):
    return current_user
