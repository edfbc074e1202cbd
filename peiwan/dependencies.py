from typing import Annotated, Callable, Generator

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session

from peiwan.core.config import settings
from peiwan.core.security import decode_access_token
from peiwan.db.database import get_session
from peiwan.models import EARNING_ROLES, STAFF_ROLES, Role, User

oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.api_v1_prefix}/auth/token")


def get_db() -> Generator[Session, None, None]:
    yield from get_session()


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    try:
        payload = decode_access_token(token)
    except ValueError:
        raise credentials_exception

    user = db.get(User, payload.user_id)
    if user is None:
        raise credentials_exception
    return user


async def get_current_active_user(
    current_user: Annotated[User, Depends(get_current_user)],
) -> User:
    if not current_user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return current_user


def require_roles(roles: frozenset[Role], detail: str = "Not enough privileges") -> Callable:
    """Build a dependency that admits active users whose role is in ``roles``."""

    async def dependency(current_user: Annotated[User, Depends(get_current_active_user)]) -> User:
        if current_user.role not in roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=detail)
        return current_user

    return dependency


get_current_player = require_roles(frozenset({Role.player}), "Player role required")
get_current_customer_service = require_roles(frozenset({Role.customer_service}), "Customer service role required")
# Players and customer service own accounts and may withdraw.
get_current_earner = require_roles(EARNING_ROLES, "Earning account required")
get_current_staff_user = require_roles(STAFF_ROLES)
get_current_active_admin_user = require_roles(frozenset({Role.admin}))
