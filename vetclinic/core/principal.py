# vetclinic/core/principal.py
"""
Who is calling, and in which clinic.

A principal is resolved once per login and once per request from the
access token plus the claimed portal. The four variants form a closed set;
code that needs to branch on the portal checks `principal.kind`.
"""

import dataclasses
import uuid
from dataclasses import dataclass
from typing import ClassVar, Literal, Union

from vetclinic.core.errors import AuthorizationError
from vetclinic.models.clinic import UserProfile
from vetclinic.models.profile import Receptionist, Tutor, Veterinarian

Portal = Literal["staff", "veterinarian", "receptionist", "tutor"]

# Membership roles accepted by the staff portal ("tutor" is never staff)
STAFF_ROLES = {"super_admin", "admin", "veterinarian", "receptionist"}
ADMIN_ROLES = {"super_admin", "admin"}


@dataclass(frozen=True)
class Identity:
    """Authenticated Supabase user, as read from a verified access token."""

    id: uuid.UUID
    email: str | None
    access_token: str


@dataclass(frozen=True)
class ClinicMembership:
    clinic_id: uuid.UUID
    clinic_name: str
    role: str


@dataclass(frozen=True)
class StaffPrincipal:
    identity: Identity
    profile: UserProfile | None
    memberships: tuple[ClinicMembership, ...]
    current_clinic_id: uuid.UUID

    kind: ClassVar[str] = "staff"

    @property
    def clinic_id(self) -> uuid.UUID:
        return self.current_clinic_id

    @property
    def role(self) -> str:
        for m in self.memberships:
            if m.clinic_id == self.current_clinic_id:
                return m.role
        raise AuthorizationError("No membership in the selected clinic")

    @property
    def is_admin(self) -> bool:
        return self.role in ADMIN_ROLES

    def has_clinic(self, clinic_id: uuid.UUID) -> bool:
        return any(m.clinic_id == clinic_id for m in self.memberships)

    def select_clinic(self, clinic_id: uuid.UUID) -> "StaffPrincipal":
        """
        Return a copy whose active clinic is `clinic_id`.

        Raises:
            AuthorizationError: if the identity has no active membership there.
        """
        if not self.has_clinic(clinic_id):
            raise AuthorizationError("You are not a member of this clinic")
        return dataclasses.replace(self, current_clinic_id=clinic_id)


@dataclass(frozen=True)
class VeterinarianPrincipal:
    identity: Identity
    profile: Veterinarian

    kind: ClassVar[str] = "veterinarian"

    @property
    def clinic_id(self) -> uuid.UUID:
        return self.profile.clinic_id


@dataclass(frozen=True)
class ReceptionistPrincipal:
    identity: Identity
    profile: Receptionist

    kind: ClassVar[str] = "receptionist"

    @property
    def clinic_id(self) -> uuid.UUID:
        return self.profile.clinic_id


@dataclass(frozen=True)
class TutorPrincipal:
    identity: Identity
    profile: Tutor

    kind: ClassVar[str] = "tutor"

    @property
    def clinic_id(self) -> uuid.UUID:
        return self.profile.clinic_id


Principal = Union[StaffPrincipal, VeterinarianPrincipal, ReceptionistPrincipal, TutorPrincipal]
