# vetclinic/routers/auth.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from vetclinic.core.auth import get_current_identity, get_principal
from vetclinic.core.identity import SupabaseIdentityProvider, get_identity_provider
from vetclinic.core.principal import Identity, Portal, Principal
from vetclinic.database import get_session
from vetclinic.repositories.clinic_repo import (
    ClinicRepository,
    MembershipRepository,
    UserProfileRepository,
)
from vetclinic.schemas.auth import (
    AuthContextRead,
    CurrentClinicSelect,
    LoginRequest,
    LoginResponse,
    PasswordChange,
    SignupRequest,
)
from vetclinic.services.auth_service import AuthService
from vetclinic.services.role_resolver import build_role_resolver

router = APIRouter(prefix="/auth", tags=["Auth"])

service = AuthService(
    build_role_resolver(),
    ClinicRepository(),
    MembershipRepository(),
    UserProfileRepository(),
)


@router.post(
    "/login/{portal}",
    response_model=LoginResponse,
)
def login(
    portal: Portal,
    payload: LoginRequest,
    session: Session = Depends(get_session),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Sign in through one of the portals: staff, veterinarian, receptionist, tutor.

    - 401 on bad credentials.
    - 403 when the account has no (active) profile for this portal; the
      session that was just opened is revoked before answering.
    """
    return service.login(session, provider, portal, payload)


@router.post(
    "/signup",
    response_model=LoginResponse,
    status_code=status.HTTP_201_CREATED,
)
def signup(
    payload: SignupRequest,
    session: Session = Depends(get_session),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Register a new clinic with its founding admin and sign them in.
    """
    return service.signup(session, provider, payload)


@router.post("/logout")
def logout(
    identity: Identity = Depends(get_current_identity),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """Revoke the caller's session at the identity provider."""
    service.logout(provider, identity)
    return {"success": True}


@router.get(
    "/me",
    response_model=AuthContextRead,
)
def me(principal: Principal = Depends(get_principal)):
    """
    Current identity, profile and clinics for the portal in X-Portal.
    """
    return service.me(principal)


@router.post("/password")
def change_password(
    payload: PasswordChange,
    identity: Identity = Depends(get_current_identity),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """Change the caller's own password (min. 6 characters)."""
    service.change_password(provider, identity, payload)
    return {"success": True}


@router.post(
    "/current-clinic",
    response_model=AuthContextRead,
)
def select_current_clinic(
    payload: CurrentClinicSelect,
    principal: Principal = Depends(get_principal),
):
    """
    Switch the active clinic (staff only).

    The id must be one of the caller's active memberships. Send it back
    as X-Clinic-ID on later requests.
    """
    return service.select_current_clinic(principal, payload)
