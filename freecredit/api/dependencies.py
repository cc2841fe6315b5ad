"""Request Dependencies — caller identity, admin guard, and service construction.

Invariants:
    - Caller identity comes from the X-User-Id header set by the upstream auth proxy
    - Admin routes require X-Admin-Token matching settings.admin_api_token
    - An empty admin_api_token disables admin routes entirely (403 for everyone)

Design Decisions:
    - Header-based identity: the auth provider session is verified in front of this
      service, which only needs the opaque user id
"""

import secrets

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from freecredit.config import Settings, get_settings
from freecredit.infrastructure.database import get_db
from freecredit.services.reaction_service import ReactionService


async def get_reaction_service(
    db: AsyncSession = Depends(get_db),
) -> ReactionService:
    return ReactionService(db)


def get_optional_user_id(
    x_user_id: str | None = Header(None),
) -> str | None:
    if x_user_id is None or not x_user_id.strip():
        return None
    return x_user_id.strip()


def get_current_user_id(
    user_id: str | None = Depends(get_optional_user_id),
) -> str:
    """Require an authenticated caller."""
    if user_id is None:
        raise HTTPException(
            status.HTTP_401_UNAUTHORIZED, detail="Authentication required",
        )
    return user_id


def require_admin(
    x_admin_token: str | None = Header(None),
    settings: Settings = Depends(get_settings),
) -> None:
    expected = settings.admin_api_token
    if not expected or not x_admin_token or not secrets.compare_digest(
        x_admin_token, expected,
    ):
        raise HTTPException(
            status.HTTP_403_FORBIDDEN, detail="Admin access required",
        )
