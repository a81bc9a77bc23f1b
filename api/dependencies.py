"""FastAPI dependencies for dependency injection."""

import logging

from fastapi import Depends, HTTPException, status, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
import jwt

from database.engine import get_db
from database.models.users import User, UserType
from core.privacy.policy import ViewerContext
from core.security import verify_jwt_token, get_request_metadata

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


async def require_authenticated_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the bearer token to a user, 401 otherwise."""
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = verify_jwt_token(credentials.credentials)
        user_id = int(payload["sub"])
    except jwt.ExpiredSignatureError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token has expired",
            headers={"WWW-Authenticate": "Bearer"},
        )
    except (jwt.InvalidTokenError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authentication token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await db.get(User, user_id)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return user


async def require_active_user(
    current_user: User = Depends(require_authenticated_user),
) -> User:
    """Require user to be active."""
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Inactive user account",
        )
    return current_user


async def get_viewer(
    request: Request,
    current_user: User = Depends(require_active_user),
) -> ViewerContext:
    """
    Build the viewer context once per request.

    Everything downstream receives this value explicitly; nothing re-reads
    the session or the user's entitlement mid-pipeline.
    """
    ip_address, user_agent = get_request_metadata(request)
    viewer = ViewerContext.from_user(current_user, ip_address, user_agent)
    request.state.viewer = viewer
    return viewer


async def require_industry_viewer(
    viewer: ViewerContext = Depends(get_viewer),
) -> ViewerContext:
    """Require an industry account with a company profile."""
    if viewer.role != UserType.INDUSTRY or viewer.industry_id is None:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Only companies can perform this action",
        )
    return viewer


MAX_PAGE_SIZE = 100


def get_pagination_params(page: int = 1, page_size: int = 20) -> dict:
    """
    Translate 1-indexed page parameters into limit and offset.

    Page sizes above MAX_PAGE_SIZE are clamped rather than rejected.
    """
    if page < 1 or page_size < 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="page and page_size must be >= 1",
        )

    page_size = min(page_size, MAX_PAGE_SIZE)
    return {"limit": page_size, "offset": (page - 1) * page_size}
