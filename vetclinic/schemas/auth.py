# vetclinic/schemas/auth.py
import uuid
from datetime import datetime

from pydantic import EmailStr, ConfigDict, field_validator
from sqlmodel import SQLModel, Field

from vetclinic.core.principal import Portal
from vetclinic.core.validators import normalize_cpf
from vetclinic.schemas.clinic import MembershipRead
from vetclinic.schemas.profile import (
    ReceptionistRead,
    TutorRead,
    UserProfileRead,
    VeterinarianRead,
)

ProfileRead = UserProfileRead | VeterinarianRead | ReceptionistRead | TutorRead


class LoginRequest(SQLModel):
    """
    Credentials for one of the four portals.

    clinic_id (staff only) asks for a specific active clinic; ignored if
    the identity is not a member there.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=1)
    clinic_id: uuid.UUID | None = None


class IdentityRead(SQLModel):
    id: uuid.UUID
    email: str | None


class AuthContextRead(SQLModel):
    """
    Everything the client needs to render the authenticated area.

    clinics is only filled for the staff portal; other portals are pinned
    to their profile's clinic.
    """

    portal: Portal
    user: IdentityRead
    profile: ProfileRead | None
    clinics: list[MembershipRead]
    current_clinic_id: uuid.UUID


class LoginResponse(AuthContextRead):
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_at: datetime | None


class CurrentClinicSelect(SQLModel):
    model_config = ConfigDict(extra="forbid")

    clinic_id: uuid.UUID


class PasswordChange(SQLModel):
    model_config = ConfigDict(extra="forbid")

    new_password: str = Field(min_length=6, max_length=72)


class SignupClinic(SQLModel):
    model_config = ConfigDict(extra="forbid")

    name: str = Field(max_length=200)
    cnpj: str
    phone: str | None = None
    city: str | None = None

    @field_validator("name", "cnpj")
    @classmethod
    def not_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field cannot be empty")
        return v


class SignupProfile(SQLModel):
    model_config = ConfigDict(extra="forbid")

    full_name: str = Field(max_length=200)
    cpf: str | None = None

    @field_validator("full_name")
    @classmethod
    def normalize_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("full_name cannot be empty")
        return v

    @field_validator("cpf")
    @classmethod
    def clean_cpf(cls, v: str | None) -> str | None:
        if v is None or not v.strip():
            return None
        return normalize_cpf(v)


class SignupRequest(SQLModel):
    """
    Founding admin + clinic, created in one call.
    """

    model_config = ConfigDict(extra="forbid")

    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    clinic: SignupClinic
    profile: SignupProfile
