# vetclinic/services/role_resolver.py
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from vetclinic.core.config import get_settings
from vetclinic.core.errors import RoleMismatchError
from vetclinic.core.principal import (
    STAFF_ROLES,
    ClinicMembership,
    Identity,
    Portal,
    Principal,
    ReceptionistPrincipal,
    StaffPrincipal,
    TutorPrincipal,
    VeterinarianPrincipal,
)
from vetclinic.repositories.clinic_repo import (
    ClinicRepository,
    MembershipRepository,
    UserProfileRepository,
)
from vetclinic.repositories.profile_repo import (
    ReceptionistRepository,
    TutorRepository,
    VeterinarianRepository,
)

logger = logging.getLogger(__name__)

UNKNOWN_CLINIC_NAME = "Unknown"


class RoleResolver:
    """
    Maps (identity, claimed portal) to a Principal.

    Rules:
      - staff:        active membership with a staff role in any clinic
      - veterinarian: veterinarians row with this user_id AND is_active
      - receptionist: receptionists row with this user_id
                      (is_active only if ENFORCE_ACTIVE_RECEPTIONIST)
      - tutor:        tutors row with this user_id

    Anything else raises RoleMismatchError. A storage failure during the
    lookup is reported the same way as "not found"; it is logged so it can
    still be told apart in the server logs.

    The resolver never signs anybody out; callers at the login boundary do.
    """

    def __init__(
        self,
        clinic_repo: ClinicRepository,
        membership_repo: MembershipRepository,
        user_profile_repo: UserProfileRepository,
        vet_repo: VeterinarianRepository,
        receptionist_repo: ReceptionistRepository,
        tutor_repo: TutorRepository,
    ):
        self.clinic_repo = clinic_repo
        self.membership_repo = membership_repo
        self.user_profile_repo = user_profile_repo
        self.vet_repo = vet_repo
        self.receptionist_repo = receptionist_repo
        self.tutor_repo = tutor_repo

    def resolve(self, session: Session, identity: Identity, portal: Portal) -> Principal:
        try:
            if portal == "staff":
                return self._resolve_staff(session, identity)
            if portal == "veterinarian":
                return self._resolve_veterinarian(session, identity)
            if portal == "receptionist":
                return self._resolve_receptionist(session, identity)
            if portal == "tutor":
                return self._resolve_tutor(session, identity)
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Profile lookup failed for {identity.id} on portal {portal}: {e}")
            raise RoleMismatchError(_NOT_A[portal])

        raise RoleMismatchError(f"Unknown portal: {portal}")

    # ----- Per-portal lookups -----

    def _resolve_staff(self, session: Session, identity: Identity) -> StaffPrincipal:
        rows = self.membership_repo.list_active_for_user(
            session, identity.id, roles=STAFF_ROLES
        )
        if not rows:
            raise RoleMismatchError(_NOT_A["staff"])

        # One batch lookup for clinic names
        clinics = self.clinic_repo.get_many(session, [r.clinic_id for r in rows])
        names = {c.id: c.name for c in clinics}

        memberships = tuple(
            ClinicMembership(
                clinic_id=r.clinic_id,
                clinic_name=names.get(r.clinic_id, UNKNOWN_CLINIC_NAME),
                role=r.role,
            )
            for r in rows
        )

        return StaffPrincipal(
            identity=identity,
            profile=self.user_profile_repo.get_by_id(session, identity.id),
            memberships=memberships,
            current_clinic_id=memberships[0].clinic_id,
        )

    def _resolve_veterinarian(
        self, session: Session, identity: Identity
    ) -> VeterinarianPrincipal:
        vet = self.vet_repo.get_by_user_id(session, identity.id)
        if vet is None:
            raise RoleMismatchError(_NOT_A["veterinarian"])
        if not vet.is_active:
            raise RoleMismatchError("Veterinarian account is inactive")
        return VeterinarianPrincipal(identity=identity, profile=vet)

    def _resolve_receptionist(
        self, session: Session, identity: Identity
    ) -> ReceptionistPrincipal:
        receptionist = self.receptionist_repo.get_by_user_id(session, identity.id)
        if receptionist is None:
            raise RoleMismatchError(_NOT_A["receptionist"])
        if get_settings().ENFORCE_ACTIVE_RECEPTIONIST and not receptionist.is_active:
            raise RoleMismatchError("Receptionist account is inactive")
        return ReceptionistPrincipal(identity=identity, profile=receptionist)

    def _resolve_tutor(self, session: Session, identity: Identity) -> TutorPrincipal:
        tutor = self.tutor_repo.get_by_user_id(session, identity.id)
        if tutor is None:
            raise RoleMismatchError(_NOT_A["tutor"])
        return TutorPrincipal(identity=identity, profile=tutor)


_NOT_A: dict[str, str] = {
    "staff": "User is not a member of any clinic",
    "veterinarian": "User is not a veterinarian",
    "receptionist": "User is not a receptionist",
    "tutor": "User is not a tutor",
}


def build_role_resolver() -> RoleResolver:
    return RoleResolver(
        ClinicRepository(),
        MembershipRepository(),
        UserProfileRepository(),
        VeterinarianRepository(),
        ReceptionistRepository(),
        TutorRepository(),
    )
