# vetclinic/services/auth_service.py
import logging
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from vetclinic.core.errors import (
    AuthorizationError,
    RemoteError,
    RoleMismatchError,
)
from vetclinic.core.identity import SupabaseIdentityProvider
from vetclinic.core.principal import (
    Identity,
    Portal,
    Principal,
    ReceptionistPrincipal,
    StaffPrincipal,
    TutorPrincipal,
    VeterinarianPrincipal,
)
from vetclinic.models.clinic import Clinic, ClinicUser, UserProfile
from vetclinic.repositories.clinic_repo import (
    ClinicRepository,
    MembershipRepository,
    UserProfileRepository,
)
from vetclinic.schemas.auth import (
    AuthContextRead,
    CurrentClinicSelect,
    IdentityRead,
    LoginRequest,
    LoginResponse,
    PasswordChange,
    SignupRequest,
)
from vetclinic.schemas.clinic import MembershipRead
from vetclinic.schemas.profile import (
    ReceptionistRead,
    TutorRead,
    UserProfileRead,
    VeterinarianRead,
)
from vetclinic.services.role_resolver import RoleResolver

logger = logging.getLogger(__name__)

# Role given to whoever signs a new clinic up
FOUNDER_ROLE = "admin"


class AuthService:
    """
    Portal login/logout and the caller's authenticated context.

    Responsibilities:
      - Sign in with the identity provider
      - Resolve the principal for the claimed portal
      - Sign the fresh session out again when the portal does not match
      - Signup of a new clinic with its founding admin
    """

    def __init__(
        self,
        resolver: RoleResolver,
        clinic_repo: ClinicRepository,
        membership_repo: MembershipRepository,
        user_profile_repo: UserProfileRepository,
    ):
        self.resolver = resolver
        self.clinic_repo = clinic_repo
        self.membership_repo = membership_repo
        self.user_profile_repo = user_profile_repo

    # -------- Login / logout --------

    def login(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        portal: Portal,
        payload: LoginRequest,
    ) -> LoginResponse:
        """
        Steps:
          1. Sign in (401 on bad credentials).
          2. Resolve the principal for `portal`.
          3. On mismatch: sign the new session out, then raise 403.
          4. Staff only: honour the preferred clinic if it is a membership.
        """
        auth = provider.sign_in(payload.email, payload.password)
        identity = Identity(
            id=auth.user_id,
            email=auth.email,
            access_token=auth.access_token,
        )

        try:
            principal = self.resolver.resolve(session, identity, portal)
        except RoleMismatchError as e:
            logger.warning(
                f"Portal mismatch at login: user={auth.user_id} portal={portal} "
                f"reason={e.detail}"
            )
            self._force_sign_out(provider, auth.access_token)
            raise

        if (
            isinstance(principal, StaffPrincipal)
            and payload.clinic_id is not None
            and principal.has_clinic(payload.clinic_id)
        ):
            principal = principal.select_clinic(payload.clinic_id)

        logger.info(f"Login ok: user={auth.user_id} portal={portal}")

        return LoginResponse(
            **self._context_fields(principal),
            access_token=auth.access_token,
            refresh_token=auth.refresh_token,
            expires_at=auth.expires_at,
        )

    def logout(self, provider: SupabaseIdentityProvider, identity: Identity) -> None:
        provider.sign_out(identity.access_token)
        logger.info(f"Logout: user={identity.id}")

    # -------- Context --------

    def me(self, principal: Principal) -> AuthContextRead:
        return AuthContextRead(**self._context_fields(principal))

    def select_current_clinic(
        self,
        principal: Principal,
        payload: CurrentClinicSelect,
    ) -> AuthContextRead:
        """
        The single setter for the active clinic.

        The server keeps no session state: the client stores the returned
        current_clinic_id and sends it back as X-Clinic-ID.

        Raises:
            AuthorizationError(403): not a staff principal, or not a member
            of the requested clinic.
        """
        if not isinstance(principal, StaffPrincipal):
            raise AuthorizationError("Only staff members can switch clinics")
        return self.me(principal.select_clinic(payload.clinic_id))

    def change_password(
        self,
        provider: SupabaseIdentityProvider,
        identity: Identity,
        payload: PasswordChange,
    ) -> None:
        provider.update_user(identity.id, password=payload.new_password)
        logger.info(f"Password changed: user={identity.id}")

    # -------- Signup --------

    def signup(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        payload: SignupRequest,
    ) -> LoginResponse:
        """
        Create identity + clinic + staff profile + admin membership.

        If any database write fails the identity is deleted again, so a
        failed signup leaves nothing behind.
        """
        user_id = provider.create_user(
            payload.email,
            payload.password,
            {"full_name": payload.profile.full_name},
        )

        try:
            clinic = self.clinic_repo.create(
                session,
                Clinic(
                    name=payload.clinic.name,
                    cnpj=payload.clinic.cnpj,
                    phone=payload.clinic.phone,
                    city=payload.clinic.city,
                ),
            )
            self.user_profile_repo.create(
                session,
                UserProfile(
                    id=user_id,
                    full_name=payload.profile.full_name,
                    cpf=payload.profile.cpf,
                ),
            )
            self.membership_repo.save(
                session,
                ClinicUser(clinic_id=clinic.id, user_id=user_id, role=FOUNDER_ROLE),
            )
            clinic_id = clinic.id
            session.commit()
        except SQLAlchemyError as e:
            session.rollback()
            logger.error(f"Signup failed for {payload.email}, removing identity {user_id}: {e}")
            self._discard_identity(provider, user_id)
            raise RemoteError("Could not create the clinic")

        logger.info(f"Signup ok: clinic={clinic_id} admin={user_id}")

        return self.login(
            session,
            provider,
            "staff",
            LoginRequest(
                email=payload.email,
                password=payload.password,
                clinic_id=clinic_id,
            ),
        )

    # -------- Helpers --------

    def _force_sign_out(self, provider: SupabaseIdentityProvider, access_token: str) -> None:
        # The mismatch is what the caller must see; a failed revoke is only logged
        try:
            provider.sign_out(access_token)
        except RemoteError as e:
            logger.error(f"Forced sign-out failed: {e.detail}")

    def _discard_identity(self, provider: SupabaseIdentityProvider, user_id: uuid.UUID) -> None:
        try:
            provider.delete_user(user_id)
        except RemoteError as e:
            logger.error(f"Orphan identity {user_id} could not be deleted: {e.detail}")

    def _context_fields(self, principal: Principal) -> dict:
        identity = principal.identity
        fields = {
            "portal": principal.kind,
            "user": IdentityRead(id=identity.id, email=identity.email),
            "current_clinic_id": principal.clinic_id,
            "clinics": [],
            "profile": None,
        }

        if isinstance(principal, StaffPrincipal):
            fields["clinics"] = [
                MembershipRead(
                    clinic_id=m.clinic_id,
                    clinic_name=m.clinic_name,
                    role=m.role,
                )
                for m in principal.memberships
            ]
            if principal.profile is not None:
                fields["profile"] = UserProfileRead.model_validate(principal.profile)
        elif isinstance(principal, VeterinarianPrincipal):
            fields["profile"] = VeterinarianRead.model_validate(principal.profile)
        elif isinstance(principal, ReceptionistPrincipal):
            fields["profile"] = ReceptionistRead.model_validate(principal.profile)
        elif isinstance(principal, TutorPrincipal):
            fields["profile"] = TutorRead.model_validate(principal.profile)

        return fields
