from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from pydantic import BaseModel

from .config import Settings, get_settings
from .exceptions import ConfigurationError
from .models import User, ROLE_ADMIN

AUTH_COOKIE = "auth_token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="v1/auth/login", auto_error=False)

class TokenUser(BaseModel):
    id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN

class TokenService:
    def __init__(self, settings: Settings):
        if not settings.JWT_SECRET_KEY or not settings.JWT_SECRET_KEY.strip():
            raise ConfigurationError("JWT signing key is not configured. Set JWT_SECRET_KEY.")
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.issuer = settings.JWT_ISSUER
        self.audience = settings.JWT_AUDIENCE
        self.expires_in = timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS)

    def create_access_token(self, user: User) -> str:
        claims = {
            "sub": str(user.id),
            "email": user.email,
            "role": user.role,
            "iss": self.issuer,
            "aud": self.audience,
            "exp": datetime.now(timezone.utc) + self.expires_in,
        }
        return jwt.encode(claims, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> TokenUser:
        try:
            payload = jwt.decode(
                token,
                self.secret_key,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
            return TokenUser(id=int(payload["sub"]), email=payload.get("email", ""), role=payload.get("role", ""))
        except (JWTError, KeyError, ValueError):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")

@lru_cache
def get_token_service() -> TokenService:
    return TokenService(get_settings())

def _token_from_request(request: Request, bearer: Optional[str]) -> Optional[str]:
    # Browser clients send the token in the cookie set at login
    return bearer or request.cookies.get(AUTH_COOKIE)

def get_optional_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> Optional[TokenUser]:
    token = _token_from_request(request, bearer)
    if not token:
        return None
    try:
        return tokens.decode_access_token(token)
    except HTTPException:
        return None

def get_current_user(
    request: Request,
    bearer: Optional[str] = Depends(oauth2_scheme),
    tokens: TokenService = Depends(get_token_service),
) -> TokenUser:
    token = _token_from_request(request, bearer)
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return tokens.decode_access_token(token)

def require_admin(user: TokenUser = Depends(get_current_user)) -> TokenUser:
    if not user.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Admin role required")
    return user
