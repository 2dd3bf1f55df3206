import logging
from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from ...auth import AUTH_COOKIE, TokenService, get_token_service
from ...config import get_settings
from ...crud import get_user_by_email, user_exists, create_user
from ...database import get_db
from ...exceptions import ConflictError
from ...models import User, ROLE_USER
from ...schemas import RegisterRequest, LoginRequest, UserResponse, AuthResponse
from ...security import hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth")

INVALID_CREDENTIALS = "Invalid email or password."

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(payload: RegisterRequest, db: AsyncSession = Depends(get_db)):
    email = payload.email.strip().lower()
    if await user_exists(db, email):
        raise HTTPException(status_code=409, detail="Email is already registered")

    user = User(
        name=payload.name.strip(),
        email=email,
        password_hash=hash_password(payload.password),
        role=ROLE_USER,
    )
    try:
        user = await create_user(db, user)
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))

    logger.info(f"Registered user {user.id}")
    return UserResponse(id=user.id, name=user.name, email=user.email, role=user.role)

@router.post("/login", response_model=AuthResponse)
async def login(
    payload: LoginRequest,
    response: Response,
    db: AsyncSession = Depends(get_db),
    tokens: TokenService = Depends(get_token_service),
):
    user = await get_user_by_email(db, payload.email.strip().lower())
    # Same message for unknown email and wrong password
    if user is None or not verify_password(user.password_hash, payload.password):
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

    token = tokens.create_access_token(user)
    response.set_cookie(
        key=AUTH_COOKIE,
        value=token,
        httponly=True,
        samesite="strict",
        secure=get_settings().PUBLIC_BASE_URL.startswith("https://"),
        path="/",
        max_age=int(tokens.expires_in.total_seconds()),
    )
    return AuthResponse(token=token, name=user.name, email=user.email, role=user.role)

@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(response: Response):
    response.delete_cookie(AUTH_COOKIE, path="/")
    return None
