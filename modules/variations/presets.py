"""Shared variation type presets owned by the system user."""

import logging
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from modules.variations.models import VariationOption, VariationType

logger = logging.getLogger(__name__)

# (type name, description, [(option name, description), ...])
DEFAULT_PRESETS: List[Tuple[str, str, List[Tuple[str, str]]]] = [
    (
        "Color",
        "Product color variation",
        [
            ("Red", "Red color"),
            ("Blue", "Blue color"),
            ("Green", "Green color"),
            ("Yellow", "Yellow color"),
            ("Pink", "Pink color"),
        ],
    ),
    (
        "Pattern",
        "Product pattern variation",
        [
            ("Plain", "No pattern"),
            ("Bone", "Bone pattern"),
        ],
    ),
    ("Size", "Product size variation", []),
]


def _types_for(db: Session, owner_id: str) -> List[VariationType]:
    return db.query(VariationType).filter(VariationType.user_id == owner_id).order_by(VariationType.name).all()


def seed_system_presets(db: Session, system_owner_id: str) -> int:
    """Create the default presets for the system owner unless it already has types."""
    if _types_for(db, system_owner_id):
        return 0
    for type_name, description, options in DEFAULT_PRESETS:
        variation_type = VariationType(name=type_name, description=description, user_id=system_owner_id)
        for option_name, option_description in options:
            variation_type.options.append(
                VariationOption(name=option_name, description=option_description, user_id=system_owner_id)
            )
        db.add(variation_type)
    db.commit()
    return len(DEFAULT_PRESETS)


def ensure_user_variation_types(db: Session, user_id: str, system_owner_id: str) -> List[VariationType]:
    """Copy the system presets to a user who has no variation types yet.

    Returns the types that were created; an empty list when the user already
    had types of their own.
    """
    if user_id == system_owner_id or _types_for(db, user_id):
        return []

    system_types = _types_for(db, system_owner_id)
    if not system_types:
        seed_system_presets(db, system_owner_id)
        system_types = _types_for(db, system_owner_id)

    created: List[VariationType] = []
    copied_options: Dict[str, int] = {}
    for source in system_types:
        copy = VariationType(name=source.name, description=source.description, user_id=user_id)
        for option in source.options:
            copy.options.append(VariationOption(name=option.name, description=option.description, user_id=user_id))
        copied_options[source.name] = len(source.options)
        db.add(copy)
        created.append(copy)
    db.commit()
    for variation_type in created:
        db.refresh(variation_type)
    logger.info("Copied %d preset variation type(s) to user %s: %s", len(created), user_id, copied_options)
    return created
