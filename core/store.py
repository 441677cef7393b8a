"""Store-integration layer over the SQLAlchemy session.

Every call returns a ``Result``. Reads are scoped to the calling user; with
``shared=True`` rows owned by the system owner are visible as well. Writes are
last-write-wins, with no version checks.
"""

import logging
from typing import Any, Iterable, List, Optional, Type

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import NotFoundException, StoreException
from core.result import Err, Ok, Result

logger = logging.getLogger(__name__)


def _label(model: Type[Any]) -> str:
    return model.__name__


def _apply_filters(query, model: Type[Any], filters: dict):
    for column, value in filters.items():
        attr = getattr(model, column)
        if isinstance(value, (list, tuple, set, frozenset)):
            query = query.filter(attr.in_(list(value)))
        else:
            query = query.filter(attr == value)
    return query


class Store:
    def __init__(self, db: Session, user_id: str, system_owner_id: Optional[str] = None):
        self.db = db
        self.user_id = user_id
        self.system_owner_id = system_owner_id

    def _owners(self, shared: bool) -> List[str]:
        owners = [self.user_id]
        if shared and self.system_owner_id and self.system_owner_id != self.user_id:
            owners.append(self.system_owner_id)
        return owners

    def _scoped(self, model: Type[Any], shared: bool = False):
        query = self.db.query(model)
        if hasattr(model, "user_id"):
            query = query.filter(model.user_id.in_(self._owners(shared)))
        return query

    def get(self, model: Type[Any], entity_id: str, shared: bool = False) -> Result:
        try:
            entity = self._scoped(model, shared).filter(model.id == entity_id).first()
        except SQLAlchemyError as exc:
            return self._failure(f"get {_label(model)}", exc)
        if entity is None:
            return Err(NotFoundException(f"{_label(model)} not found"))
        return Ok(entity)

    def find(self, model: Type[Any], shared: bool = False, order_by=None, **filters) -> Result:
        """Equality filters on columns; a list or tuple value becomes an IN filter."""
        try:
            query = _apply_filters(self._scoped(model, shared), model, filters)
            if order_by is not None:
                query = query.order_by(order_by)
            return Ok(query.all())
        except SQLAlchemyError as exc:
            return self._failure(f"find {_label(model)}", exc)

    def is_referenced(self, model: Type[Any], **filters) -> Result:
        """Whether any row matches the filters, whoever owns it.

        Guards hard deletes of shared rows that other users may point at.
        """
        try:
            query = _apply_filters(self.db.query(model.id), model, filters)
            return Ok(query.first() is not None)
        except SQLAlchemyError as exc:
            return self._failure(f"check references to {_label(model)}", exc)

    def insert(self, entity: Any) -> Result:
        if hasattr(entity, "user_id") and entity.user_id is None:
            entity.user_id = self.user_id
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
        except SQLAlchemyError as exc:
            return self._failure(f"insert {_label(type(entity))}", exc)
        return Ok(entity)

    def save(self, entities: Iterable[Any]) -> Result:
        """Write a batch of already-loaded entities in a single commit."""
        entities = list(entities)
        try:
            for entity in entities:
                self.db.add(entity)
            self.db.commit()
            for entity in entities:
                self.db.refresh(entity)
        except SQLAlchemyError as exc:
            return self._failure("save batch", exc)
        return Ok(entities)

    def update(self, entity: Any, **changes) -> Result:
        for field, value in changes.items():
            setattr(entity, field, value)
        result = self.save([entity])
        if not result.ok:
            return result
        return Ok(entity)

    def soft_delete(self, entity: Any) -> Result:
        result = self.update(entity, is_active=False)
        if result.ok:
            logger.info("Deactivated %s %s", _label(type(entity)), entity.id)
        return result

    def delete(self, entity: Any) -> Result:
        try:
            self.db.delete(entity)
            self.db.commit()
        except SQLAlchemyError as exc:
            return self._failure(f"delete {_label(type(entity))}", exc)
        return Ok(None)

    def _failure(self, action: str, exc: SQLAlchemyError) -> Err:
        self.db.rollback()
        logger.error("Store call '%s' failed: %s", action, exc)
        return Err(StoreException(f"Could not {action}"))
