# vetclinic/models/medical.py
import uuid
from datetime import date, datetime, timezone

from sqlmodel import SQLModel, Field


class MedicalRecord(SQLModel, table=True):
    """Clinical exam notes written by a veterinarian."""

    __tablename__ = "medical_records"

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
        ondelete="CASCADE",
        index=True,
    )

    veterinarian_id: uuid.UUID = Field(
        foreign_key="veterinarians.id",
        index=True,
    )

    appointment_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="appointments.id",
    )

    anamnesis: str | None = None
    temperature_celsius: float | None = None
    heart_rate: int | None = None
    respiratory_rate: int | None = None
    capillary_refill_time: float | None = None
    weight_kg: float | None = None
    clinical_impression: str | None = None
    diagnosis: str | None = None
    treatment_plan: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Vaccination(SQLModel, table=True):
    __tablename__ = "vaccinations"

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
        ondelete="CASCADE",
        index=True,
    )

    veterinarian_id: uuid.UUID = Field(
        foreign_key="veterinarians.id",
        index=True,
    )

    vaccine_name: str = Field(max_length=200)
    batch_number: str | None = None
    manufacturer: str | None = None
    administered_at: date
    next_dose_date: date | None = None
    notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )


class Prescription(SQLModel, table=True):
    """
    Medication prescribed to an animal.

    Lifecycle (free moves, timestamps kept):
      draft -> issued -> sent -> viewed
    """

    __tablename__ = "prescriptions"

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
        ondelete="CASCADE",
        index=True,
    )

    veterinarian_id: uuid.UUID = Field(
        foreign_key="veterinarians.id",
        index=True,
    )

    medical_record_id: uuid.UUID | None = Field(
        default=None,
        foreign_key="medical_records.id",
    )

    medication: str = Field(max_length=200)
    dosage: str = Field(max_length=100)
    frequency: str = Field(max_length=100)
    duration: str | None = None
    instructions: str | None = None
    prescribed_at: date

    # draft | issued | sent | viewed
    status: str = Field(default="issued", index=True)
    issued_at: datetime | None = None
    sent_at: datetime | None = None
    sent_to: str | None = None
    notes: str | None = None

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
    updated_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
    )
