# slotwise/api/dependencies/host_auth.py
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from slotwise.db.session import get_db
from slotwise.models.user import User


async def get_current_host(
    user_id: Optional[str] = Header(
        default=None,
        alias="X-User-Id",
        description="Authenticated host id, set by the upstream auth gateway.",
    ),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Dependency that resolves the host behind a host-only endpoint.

    Rules
    -----
    - Login and sessions are handled upstream; the gateway forwards the
      authenticated host id in `X-User-Id`.
    - Missing or non-numeric header -> 401.
    - Id that matches no host          -> 401.
    """
    if not user_id or not user_id.strip().isdigit():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing or invalid X-User-Id header.",
        )

    host = await db.get(User, int(user_id.strip()))
    if host is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown user.",
        )
    return host
