"""
Generic SQLAlchemy repository.

A repository is a thin handle over one ``Session`` and one mapped class.
It never commits: the caller's unit of work decides when changes land.
"""

from typing import Any, Generic, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, exists, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from backoffice.db.models import Base
from backoffice.exceptions import ValidationFailure, translate_integrity_error

ModelT = TypeVar("ModelT", bound=Base)


class SqlRepository(Generic[ModelT]):
    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    @property
    def entity_name(self) -> str:
        return self.model.__name__

    def find_all(self) -> Sequence[ModelT]:
        return self.db.scalars(select(self.model).order_by(self.model.id)).all()

    def find_by_id(self, entity_id: int) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def exists_by_id(self, entity_id: int) -> bool:
        return self.db.scalar(select(exists().where(self.model.id == entity_id)))

    def save(self, entity: ModelT) -> ModelT:
        """
        Insert or update ``entity`` and flush it.

        Required columns are checked before any SQL is emitted; constraint
        failures raised by the store are translated to domain errors.

        Returns:
            The same instance, with its generated id and derived fields set
        """
        missing = entity.missing_required()
        if missing:
            raise ValidationFailure(
                f"{self.entity_name} is missing required fields: {', '.join(missing)}",
                fields=missing,
            )
        self.db.add(entity)
        self.flush()
        self.db.refresh(entity)
        return entity

    def delete(self, entity: ModelT) -> None:
        self.db.delete(entity)
        self.flush()

    def delete_by_id(self, entity_id: int) -> bool:
        entity = self.find_by_id(entity_id)
        if entity is None:
            return False
        self.delete(entity)
        return True

    def flush(self) -> None:
        try:
            self.db.flush()
        except IntegrityError as exc:
            raise translate_integrity_error(exc, self.entity_name) from exc

    def _find_where(self, *criteria: Any) -> Sequence[ModelT]:
        stmt = select(self.model).where(*criteria).order_by(self.model.id)
        return self.db.scalars(stmt).all()

    def _delete_where(self, *criteria: Any) -> int:
        try:
            result = self.db.execute(delete(self.model).where(*criteria))
        except IntegrityError as exc:
            raise translate_integrity_error(exc, self.entity_name) from exc
        return result.rowcount
