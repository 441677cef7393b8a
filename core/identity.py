"""Authenticated user id supplied by the upstream identity provider."""

from typing import Optional

from fastapi import Depends, Header
from sqlalchemy.orm import Session

from core.database import get_db
from core.errors import UnauthorizedException
from core.settings import get_settings
from core.store import Store


def get_current_user_id(x_user_id: Optional[str] = Header(None)) -> str:
    if not x_user_id or not x_user_id.strip():
        raise UnauthorizedException()
    return x_user_id.strip()


def get_store(db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)) -> Store:
    return Store(db, user_id=user_id, system_owner_id=get_settings().system_owner_id)
