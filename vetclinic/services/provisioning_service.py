# vetclinic/services/provisioning_service.py
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from vetclinic.core.errors import (
    AuthorizationError,
    InvalidTransitionError,
    NotFoundError,
    RemoteError,
    ValidationError,
)
from vetclinic.core.identity import SupabaseIdentityProvider
from vetclinic.core.principal import ADMIN_ROLES, Principal
from vetclinic.core.validators import initial_password_for
from vetclinic.repositories.clinic_repo import MembershipRepository
from vetclinic.repositories.profile_repo import (
    ReceptionistRepository,
    TutorRepository,
    VeterinarianRepository,
)
from vetclinic.schemas.profile import AccountUpdate, ProfileKind, ProvisionResult

logger = logging.getLogger(__name__)

_LABELS: dict[str, str] = {
    "veterinarian": "Veterinarian",
    "receptionist": "Receptionist",
    "tutor": "Tutor",
}


class ProvisioningService:
    """
    Creates and maintains login accounts for role profiles.

    Provisioning steps:
      1. Re-check that the caller is an active admin/super_admin of the
         profile's clinic.
      2. Refuse profiles that are already linked; require email + CPF.
      3. Create the identity; initial password = CPF digits.
      4. Link user_id on the profile. If this fails the identity is
         deleted again and RemoteError is raised.
    """

    def __init__(
        self,
        membership_repo: MembershipRepository,
        vet_repo: VeterinarianRepository,
        receptionist_repo: ReceptionistRepository,
        tutor_repo: TutorRepository,
    ):
        self.membership_repo = membership_repo
        self.repos = {
            "veterinarian": vet_repo,
            "receptionist": receptionist_repo,
            "tutor": tutor_repo,
        }

    def provision(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        caller: Principal,
        kind: ProfileKind,
        profile_id: uuid.UUID,
    ) -> ProvisionResult:
        profile = self._get_profile(session, caller, kind, profile_id)
        return self.provision_profile(session, provider, caller, kind, profile)

    def provision_profile(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        caller: Principal,
        kind: ProfileKind,
        profile,
    ) -> ProvisionResult:
        """Provision an already-loaded profile row (used right after create)."""
        self.ensure_admin(session, caller, profile.clinic_id)

        label = _LABELS[kind]
        if profile.user_id is not None:
            raise InvalidTransitionError(f"{label} already has an access account")
        if not profile.email or not profile.cpf:
            raise ValidationError(
                "E-mail and CPF are required to create an access account"
            )

        try:
            password = initial_password_for(profile.cpf)
        except ValueError as e:
            raise ValidationError(str(e))

        user_id = provider.create_user(
            profile.email,
            password,
            {"full_name": profile.name, "user_type": kind},
        )

        try:
            self.repos[kind].link_identity(session, profile, user_id)
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(
                f"Linking {kind} {profile.id} to identity {user_id} failed, "
                f"deleting identity: {e}"
            )
            try:
                provider.delete_user(user_id)
            except RemoteError as cleanup_error:
                logger.error(f"Orphan identity {user_id} left behind: {cleanup_error.detail}")
            raise RemoteError("Could not link the access account to the profile")

        logger.info(
            f"Provisioned {kind} {profile.id} as identity {user_id} "
            f"by {caller.identity.id}"
        )
        return ProvisionResult(
            profile_id=profile.id,
            user_id=user_id,
            email=profile.email,
            temporary_password=password,
        )

    def update_account(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        caller: Principal,
        kind: ProfileKind,
        profile_id: uuid.UUID,
        payload: AccountUpdate,
    ):
        """
        Change e-mail and/or password of a linked login.
        A changed e-mail is mirrored onto the profile row.
        """
        profile = self._get_profile(session, caller, kind, profile_id)
        self.ensure_admin(session, caller, profile.clinic_id)

        if profile.user_id is None:
            raise ValidationError(f"{_LABELS[kind]} has no linked access account")

        email = str(payload.email) if payload.email else None
        provider.update_user(profile.user_id, email=email, password=payload.new_password)

        if email and email != profile.email:
            profile.email = email
            self.repos[kind].add(session, profile)
            session.commit()
            session.refresh(profile)

        logger.info(f"Account of {kind} {profile.id} updated by {caller.identity.id}")
        return profile

    def ensure_admin(
        self,
        session: Session,
        caller: Principal,
        clinic_id: uuid.UUID,
    ) -> None:
        """
        Raises:
            AuthorizationError(403): caller has no active admin membership
            in `clinic_id`.
        """
        membership = self.membership_repo.get_active(session, caller.identity.id, clinic_id)
        if membership is None or membership.role not in ADMIN_ROLES:
            logger.warning(
                f"Provisioning denied: user={caller.identity.id} clinic={clinic_id}"
            )
            raise AuthorizationError("Only clinic admins can manage access accounts")

    def _get_profile(
        self,
        session: Session,
        caller: Principal,
        kind: ProfileKind,
        profile_id: uuid.UUID,
    ):
        profile = self.repos[kind].get(session, caller.clinic_id, profile_id)
        if profile is None:
            raise NotFoundError(_LABELS[kind])
        return profile
