"""
Sign-in and session endpoints.

The PWA keeps its session in two HttpOnly cookies; API clients may use the
returned tokens as ``Authorization: Bearer`` instead.  ``/auth/me`` tells the
client which page its role lands on.

No postponed annotations here: slowapi wraps the login handler and FastAPI
must resolve its parameter types from real objects.
"""

from fastapi import (APIRouter, Cookie, Depends, HTTPException, Request,
                     Response, status)
from fastapi.security import OAuth2PasswordRequestForm
from slowapi import Limiter
from slowapi.util import get_remote_address
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from fupa.api.v1.deps import get_current_active_user, get_db
from fupa.core.config import settings
from fupa.core.security import (REFRESH, create_access_token,
                                create_refresh_token, decode_token,
                                verify_password)
from fupa.models.user import User
from fupa.schemas.attendance import LogoutResponse
from fupa.schemas.token import RefreshRequest, Token
from fupa.schemas.user import HOME_PAGES, CurrentUser, UserRead

# Login attempts are limited per client address
limiter = Limiter(key_func=get_remote_address)

router = APIRouter(prefix="/auth", tags=["auth"])

SESSION_COOKIES = ("access_token", "refresh_token")


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _start_session(response: Response, user: User) -> Token:
    """Mint a token pair for ``user`` and mirror it into the session cookies."""
    token = Token(
        access_token=create_access_token(user.uid, user.role),
        refresh_token=create_refresh_token(user.uid),
    )
    lifetimes = {
        "access_token": (f"Bearer {token.access_token}", settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60),
        "refresh_token": (token.refresh_token, settings.REFRESH_TOKEN_EXPIRE_DAYS * 86400),
    }
    for name, (value, max_age) in lifetimes.items():
        response.set_cookie(
            key=name,
            value=value,
            max_age=max_age,
            httponly=True,
            samesite="lax",
            secure=settings.COOKIE_SECURE,
        )
    return token


@router.post("/login", response_model=Token)
@limiter.limit(settings.LOGIN_RATE_LIMIT)
async def login(
    request: Request,
    response: Response,
    credentials: OAuth2PasswordRequestForm = Depends(),
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Sign in with email (as ``username``) and password."""
    email = credentials.username.strip().lower()
    user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()

    if user is None or not verify_password(credentials.password, user.hashed_password):
        raise _unauthorized("Incorrect email or password")
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Account is deactivated")
    return _start_session(response, user)


@router.post("/refresh", response_model=Token)
async def refresh(
    response: Response,
    body: RefreshRequest | None = None,
    refresh_cookie: str | None = Cookie(None, alias="refresh_token"),
    db: AsyncSession = Depends(get_db),
) -> Token:
    """Exchange a refresh token (JSON body first, cookie second) for a new pair."""
    raw = body.refresh_token if body is not None else refresh_cookie
    if not raw:
        raise _unauthorized("No refresh token supplied")

    claims = decode_token(raw, REFRESH)
    user = await db.get(User, claims["sub"]) if claims else None
    if user is None or not user.is_active:
        raise _unauthorized("Session expired, sign in again")
    return _start_session(response, user)


@router.post("/logout", response_model=LogoutResponse)
async def logout(response: Response) -> LogoutResponse:
    for name in SESSION_COOKIES:
        response.delete_cookie(name)
    return LogoutResponse(message="Logged out")


@router.get("/me", response_model=CurrentUser)
async def whoami(user: User = Depends(get_current_active_user)) -> CurrentUser:
    """The signed-in account plus the page its role lands on."""
    profile = UserRead.model_validate(user)
    return CurrentUser(**profile.model_dump(), home=HOME_PAGES.get(profile.role, HOME_PAGES["employee"]))
