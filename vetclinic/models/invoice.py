# vetclinic/models/invoice.py
import uuid
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Invoice(SQLModel, table=True):
    """
    Point-of-sale invoice of a clinic.

    Written by the clinic's billing tooling; the API only lists them.
    """

    __tablename__ = "invoices"

    id: uuid.UUID = Field(
        default_factory=uuid.uuid4,
        primary_key=True,
        index=True,
    )

    clinic_id: uuid.UUID = Field(
        foreign_key="clinics.id",
        ondelete="CASCADE",
        index=True,
    )

    animal_id: uuid.UUID = Field(
        foreign_key="animals.id",
        index=True,
    )

    appointment_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="appointments.id",
    )

    # Identity id of the staff member who issued it
    user_id: uuid.UUID

    total_amount: float = Field(
        default=0,
        ge=0,
        description="Total charged, items included",
    )
    payment_method: str | None = None

    # pending | paid | cancelled
    payment_status: str = Field(default="pending", index=True)

    issued_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        index=True,
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
