from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from ..ai.client import AIClient, get_ai_client
from ..config import Settings, get_settings
from ..db import get_db
from ..services.user import ensure_user


def get_ai(settings: Settings = Depends(get_settings)) -> AIClient:
    return get_ai_client(settings)


def get_user_id(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    x_user_id: Optional[str] = Header(default=None),
    x_user_name: Optional[str] = Header(default=None),
    x_user_email: Optional[str] = Header(default=None),
) -> Optional[str]:
    """User id resolved by the upstream auth layer, or DEV_USER_ID for local runs."""
    user_id = x_user_id or settings.dev_user_id
    if user_id:
        ensure_user(db, user_id, name=x_user_name, email=x_user_email)
    return user_id
