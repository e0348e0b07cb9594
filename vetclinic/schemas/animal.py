# vetclinic/schemas/animal.py
import uuid
from datetime import date, datetime

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field


class AnimalBase(SQLModel):
    model_config = ConfigDict(extra="forbid")

    breed: str | None = None
    weight_kg: float | None = Field(default=None, ge=0)
    birth_date: date | None = None
    microchip: str | None = None
    coat_color: str | None = None
    photo_url: str | None = None
    notes: str | None = None

    @field_validator("breed", "microchip", "coat_color", "photo_url", "notes")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        return v or None

    @field_validator("birth_date")
    @classmethod
    def not_in_future(cls, v: date | None) -> date | None:
        if v is not None and v > date.today():
            raise ValueError("birth_date cannot be in the future")
        return v


class AnimalCreate(AnimalBase):
    tutor_id: uuid.UUID
    name: str = Field(max_length=100)
    species: str = Field(max_length=50)

    @field_validator("name", "species")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class AnimalUpdate(AnimalBase):
    """Partial update. The owning tutor cannot be changed here."""

    name: str | None = Field(default=None, max_length=100)
    species: str | None = Field(default=None, max_length=50)

    @field_validator("name", "species")
    @classmethod
    def not_empty(cls, v: str | None) -> str | None:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class AnimalRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    tutor_id: uuid.UUID
    name: str
    species: str
    breed: str | None
    weight_kg: float | None
    birth_date: date | None
    microchip: str | None
    coat_color: str | None
    photo_url: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
