"""Database engine and session management."""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from core.settings import get_settings
from core.models import Base
from modules.materials import models as material_models  # noqa: F401
from modules.products import models as product_models  # noqa: F401
from modules.variations import models as variation_models  # noqa: F401
from modules.variations import presets

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_engine(
    settings.database_url,
    connect_args={"check_same_thread": False} if settings.database_url.startswith("sqlite") else {},
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    Base.metadata.create_all(bind=engine)
    # Shared variation presets for the system owner (idempotent)
    session = SessionLocal()
    try:
        created = presets.seed_system_presets(session, settings.system_owner_id)
        if created:
            logger.info("Seeded %d system variation types", created)
    finally:
        session.close()
