# vetclinic/schemas/profile.py
import uuid
from datetime import datetime
from typing import Literal

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from vetclinic.core.validators import normalize_cpf, normalize_crmv

ProfileKind = Literal["veterinarian", "receptionist", "tutor"]


def _strip_required(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("field cannot be empty")
    return v


def _strip_optional(v: str | None) -> str | None:
    if v is None:
        return v
    v = v.strip()
    return v or None


def _cpf_optional(v: str | None) -> str | None:
    if v is None or not v.strip():
        return None
    return normalize_cpf(v)


class UserProfileRead(SQLModel):
    """Staff profile (user_profiles row)."""

    id: uuid.UUID
    full_name: str | None
    cpf: str | None
    professional_register: str | None
    avatar_url: str | None
    is_super_admin: bool


# ----- Veterinarians -----


class VeterinarianCreate(SQLModel):
    """
    Register a veterinarian in the active clinic.

    create_account=True provisions a login right away (needs email + cpf);
    otherwise the row stays data-only until provisioned later.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    email: EmailStr | None = None
    cpf: str | None = None
    crmv: str
    phone: str | None = None
    specialization: str | None = None
    create_account: bool = False

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("cpf")
    @classmethod
    def clean_cpf(cls, v: str | None) -> str | None:
        return _cpf_optional(v)

    @field_validator("crmv")
    @classmethod
    def clean_crmv(cls, v: str) -> str:
        return normalize_crmv(v)

    @field_validator("phone", "specialization")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class VeterinarianUpdate(SQLModel):
    """
    Partial update of profile data.
    E-mail changes of a linked account go through PATCH .../account.
    """

    model_config = ConfigDict(extra="forbid")

    name: str | None = Field(default=None, max_length=200)
    email: EmailStr | None = None
    cpf: str | None = None
    crmv: str | None = None
    phone: str | None = None
    specialization: str | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        return None if v is None else _strip_required(v)

    @field_validator("cpf")
    @classmethod
    def clean_cpf(cls, v: str | None) -> str | None:
        return _cpf_optional(v)

    @field_validator("crmv")
    @classmethod
    def clean_crmv(cls, v: str | None) -> str | None:
        return None if v is None else normalize_crmv(v)


class VeterinarianRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    user_id: uuid.UUID | None
    name: str
    email: str | None
    cpf: str | None
    crmv: str
    phone: str | None
    specialization: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ----- Receptionists -----


class ReceptionistCreate(SQLModel):
    """
    Receptionists are always created with a login.
    Initial password = CPF digits.
    """

    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    email: EmailStr
    cpf: str
    phone: str | None = None

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return _strip_required(v)

    @field_validator("cpf")
    @classmethod
    def clean_cpf(cls, v: str) -> str:
        return normalize_cpf(v)

    @field_validator("phone")
    @classmethod
    def normalize_phone(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class ReceptionistRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    user_id: uuid.UUID | None
    name: str
    email: str | None
    cpf: str | None
    phone: str | None
    is_active: bool
    created_at: datetime
    updated_at: datetime


# ----- Tutors -----


class TutorBase(SQLModel):
    model_config = ConfigDict(extra="forbid")

    cpf: str | None = None
    email: EmailStr | None = None
    phone: str | None = None
    address: str | None = None
    number: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None

    @field_validator("cpf")
    @classmethod
    def clean_cpf(cls, v: str | None) -> str | None:
        return _cpf_optional(v)

    @field_validator("phone", "address", "number", "city", "state", "zip_code")
    @classmethod
    def normalize_optional(cls, v: str | None) -> str | None:
        return _strip_optional(v)


class TutorCreate(TutorBase):
    name: str = Field(max_length=200)
    create_account: bool = False

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        return _strip_required(v)


class TutorUpdate(TutorBase):
    name: str | None = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def normalize_name(cls, v: str | None) -> str | None:
        return None if v is None else _strip_required(v)


class TutorRead(SQLModel):
    id: uuid.UUID
    clinic_id: uuid.UUID
    user_id: uuid.UUID | None
    name: str
    cpf: str | None
    email: str | None
    phone: str | None
    address: str | None
    number: str | None
    city: str | None
    state: str | None
    zip_code: str | None
    created_at: datetime
    updated_at: datetime


# ----- Shared -----


class ActiveUpdate(SQLModel):
    model_config = ConfigDict(extra="forbid")

    is_active: bool


class AccountUpdate(SQLModel):
    """
    Admin change of a linked login. The e-mail is mirrored onto the
    profile row.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr | None = None
    new_password: str | None = Field(default=None, min_length=6, max_length=72)


class ProvisionResult(SQLModel):
    success: bool = True
    profile_id: uuid.UUID
    user_id: uuid.UUID
    email: str
    temporary_password: str
