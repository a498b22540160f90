from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from pydantic import BaseModel, EmailStr, Field
from app.database import get_db
from app.models.user import User
from app.middleware.auth import create_access_token, get_current_user
from app.middleware.rate_limit import limiter, AUTH_LIMIT
from app.services.profile_store import load_selected_role
from app.utils.logger import logger

router = APIRouter()


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=1)
    email: EmailStr
    password: str = Field(..., min_length=6)


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


def user_payload(user: User) -> dict:
    selected = load_selected_role(user)
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "selectedJobRole": selected.to_json() if selected else None,
        "createdAt": user.created_at.isoformat() if user.created_at else None,
    }


@router.post("/register")
@limiter.limit(AUTH_LIMIT)
async def register_user(
    request: Request,
    user_data: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """
    Register a new user

    Returns:
        - Bearer token and the user record
    """
    email = user_data.email.strip().lower()
    result = await db.execute(select(User).where(User.email == email))
    if result.scalar_one_or_none():
        raise HTTPException(status_code=400, detail="User already exists")

    user = User.create_user(name=user_data.name, email=email, password=user_data.password)
    db.add(user)
    await db.commit()
    await db.refresh(user)

    logger.info(f"[Auth] Registered user {user.id}")
    return {"token": create_access_token(user.id), "user": user_payload(user)}


@router.post("/login")
@limiter.limit(AUTH_LIMIT)
async def login_user(
    request: Request,
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    result = await db.execute(select(User).where(User.email == credentials.email.strip().lower()))
    user = result.scalar_one_or_none()

    if not user or not user.verify_password(credentials.password):
        raise HTTPException(status_code=400, detail="Invalid credentials")

    return {"token": create_access_token(user.id), "user": user_payload(user)}


@router.get("/me")
async def get_me(current_user: User = Depends(get_current_user)):
    """Current user profile (no password hash)"""
    return user_payload(current_user)
