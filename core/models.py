"""Declarative base and column mixins shared by all entity models."""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, func
from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


class TimestampMixin:
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class OwnedMixin:
    """Entities are scoped by the owning user; shop scoping is optional."""

    user_id = Column(String(64), nullable=False, index=True)


class SoftDeleteMixin:
    is_active = Column(Boolean, nullable=False, default=True)
