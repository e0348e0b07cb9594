# vetclinic/repositories/base.py
import uuid
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from sqlmodel import Session, SQLModel, select

ModelT = TypeVar("ModelT", bound=SQLModel)


class ClinicScopedRepository(Generic[ModelT]):
    """
    Data access for any table carrying a clinic_id.

    Every read takes clinic_id as a required argument, so a caller cannot
    list or fetch rows without naming the tenant.

    NOTE:
      - No commits here. Writes are flushed so ids are available, and the
        service decides when the unit of work is committed.
      - Keyword filters whose value is None are ignored.
    """

    model: type[ModelT]

    def _scoped(self, clinic_id: uuid.UUID, **filters: Any):
        stmt = select(self.model).where(self.model.clinic_id == clinic_id)
        for name, value in filters.items():
            if value is None:
                continue
            column = getattr(self.model, name)
            if isinstance(value, (list, tuple, set)):
                stmt = stmt.where(column.in_(list(value)))
            else:
                stmt = stmt.where(column == value)
        return stmt

    def get(
        self,
        session: Session,
        clinic_id: uuid.UUID,
        obj_id: uuid.UUID,
    ) -> ModelT | None:
        """Return the row only if it belongs to `clinic_id`."""
        obj = session.get(self.model, obj_id)
        if obj is None or obj.clinic_id != clinic_id:
            return None
        return obj

    def list_for_clinic(
        self,
        session: Session,
        clinic_id: uuid.UUID,
        *,
        order_by: Any = None,
        skip: int = 0,
        limit: int = 100,
        **filters: Any,
    ) -> list[ModelT]:
        stmt = self._scoped(clinic_id, **filters)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        stmt = stmt.offset(skip).limit(limit)
        return list(session.exec(stmt).all())

    def add(self, session: Session, obj: ModelT) -> ModelT:
        """Insert or update without committing, bumping updated_at if present."""
        if hasattr(obj, "updated_at"):
            obj.updated_at = datetime.now(timezone.utc)
        session.add(obj)
        session.flush()
        session.refresh(obj)
        return obj

    def delete(self, session: Session, obj: ModelT) -> None:
        session.delete(obj)
        session.flush()
