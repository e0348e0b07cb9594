# vetclinic/models/animal.py
import uuid
from datetime import date, datetime, timezone

from sqlmodel import SQLModel, Field


class Animal(SQLModel, table=True):
    """Patient. Belongs to one tutor inside one clinic."""

    __tablename__ = "animals"

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

    tutor_id: uuid.UUID = Field(
        foreign_key="tutors.id",
        ondelete="CASCADE",
        index=True,
    )

    name: str = Field(max_length=100)
    species: str = Field(max_length=50)
    breed: str | None = None
    weight_kg: float | None = Field(default=None, ge=0)
    birth_date: date | None = None
    microchip: str | None = None
    coat_color: str | None = None
    photo_url: str | None = None
    notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
