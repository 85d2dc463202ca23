import uuid
from typing import Optional

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db
from app.schemas.caller import Caller
from app.services.media_service import MediaLifecycle, get_media_lifecycle
from app.services.temple_service import TempleService


async def get_caller(
    x_actor_id: Optional[str] = Header(None, alias="X-Actor-Id"),
    x_actor_role: Optional[str] = Header(None, alias="X-Actor-Role"),
    x_account_status: Optional[str] = Header(None, alias="X-Account-Status"),
) -> Caller:
    """
    Identity of the current caller, as asserted by the auth gateway.
    Raises 401 when the actor id is missing or malformed.
    """
    if not x_actor_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing caller identity",
        )
    try:
        actor_id = uuid.UUID(x_actor_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid caller identity",
        )

    return Caller(
        actor_id=actor_id,
        role=(x_actor_role or "").strip(),
        account_status=(x_account_status or "").strip(),
    )


async def get_temple_service(
    db: AsyncSession = Depends(get_db),
    media: MediaLifecycle = Depends(get_media_lifecycle),
) -> TempleService:
    return TempleService(db, media=media)
