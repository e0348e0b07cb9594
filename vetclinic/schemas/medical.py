# vetclinic/schemas/medical.py
import uuid
from datetime import date, datetime
from typing import Literal

from pydantic import ConfigDict, field_validator, model_validator
from sqlmodel import SQLModel, Field


class MedicalRecordCreate(SQLModel):
    """
    Exam notes.

    veterinarian_id is required when a staff member or receptionist
    writes the record; a veterinarian always writes as themself.
    """

    model_config = ConfigDict(extra="forbid")

    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID | None = None
    appointment_id: uuid.UUID | None = None

    anamnesis: str | None = None
    temperature_celsius: float | None = Field(default=None, gt=20, lt=50)
    heart_rate: int | None = Field(default=None, gt=0)
    respiratory_rate: int | None = Field(default=None, gt=0)
    capillary_refill_time: float | None = Field(default=None, ge=0)
    weight_kg: float | None = Field(default=None, ge=0)
    clinical_impression: str | None = None
    diagnosis: str | None = None
    treatment_plan: str | None = None


class MedicalRecordRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID
    appointment_id: uuid.UUID | None
    anamnesis: str | None
    temperature_celsius: float | None
    heart_rate: int | None
    respiratory_rate: int | None
    capillary_refill_time: float | None
    weight_kg: float | None
    clinical_impression: str | None
    diagnosis: str | None
    treatment_plan: str | None
    created_at: datetime
    updated_at: datetime


class VaccinationCreate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID | None = None
    vaccine_name: str = Field(max_length=200)
    batch_number: str | None = None
    manufacturer: str | None = None
    administered_at: date
    next_dose_date: date | None = None
    notes: str | None = None

    @field_validator("vaccine_name")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("vaccine_name cannot be empty")
        return v

    @model_validator(mode="after")
    def check_next_dose(self):
        if self.next_dose_date is not None and self.next_dose_date < self.administered_at:
            raise ValueError("next_dose_date cannot be before administered_at")
        return self


class VaccinationRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID
    vaccine_name: str
    batch_number: str | None
    manufacturer: str | None
    administered_at: date
    next_dose_date: date | None
    notes: str | None
    created_at: datetime
    updated_at: datetime


# ----- Prescriptions -----

PrescriptionStatus = Literal["draft", "issued", "sent", "viewed"]


class PrescriptionCreate(SQLModel):
    """
    veterinarian_id follows the same rule as medical records: ignored for
    a veterinarian principal, required for everybody else.
    """

    model_config = ConfigDict(extra="forbid")

    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID | None = None
    medical_record_id: uuid.UUID | None = None

    medication: str = Field(max_length=200)
    dosage: str = Field(max_length=100)
    frequency: str = Field(max_length=100)
    duration: str | None = None
    instructions: str | None = None
    prescribed_at: date | None = None
    status: PrescriptionStatus = "issued"
    notes: str | None = None

    @field_validator("medication", "dosage", "frequency")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class PrescriptionStatusUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    status: PrescriptionStatus
    sent_to: str | None = None


class PrescriptionRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    animal_id: uuid.UUID
    veterinarian_id: uuid.UUID
    medical_record_id: uuid.UUID | None
    medication: str
    dosage: str
    frequency: str
    duration: str | None
    instructions: str | None
    prescribed_at: date
    status: PrescriptionStatus
    issued_at: datetime | None
    sent_at: datetime | None
    sent_to: str | None
    notes: str | None
    created_at: datetime
    updated_at: datetime
