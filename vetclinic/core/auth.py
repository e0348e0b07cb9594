# vetclinic/core/auth.py
import uuid
from typing import Any

from fastapi import Depends, Header
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import jwt, JWTError
from sqlmodel import Session

from vetclinic.core.config import get_settings
from vetclinic.core.errors import AuthenticationError, AuthorizationError
from vetclinic.core.principal import (
    Identity,
    Portal,
    Principal,
    StaffPrincipal,
)
from vetclinic.database import get_session
from vetclinic.services.role_resolver import build_role_resolver

settings = get_settings()

# HTTP Bearer scheme:
# - auto_error=False => missing header is reported as our own 401
bearer_scheme = HTTPBearer(auto_error=False)

resolver = build_role_resolver()


def decode_access_token(token: str) -> dict[str, Any]:
    """
    Decode and verify a Supabase access token (JWT).

    Verification:
      - signature (HS256 using SUPABASE_JWT_SECRET)
      - expiration time (exp)
      - audience is NOT verified (Supabase 'aud' may vary)

    Args:
        token: raw JWT from the Authorization header.

    Returns:
        Decoded JWT claims.

    Raises:
        AuthenticationError(401): if token is invalid/expired.
    """
    try:
        return jwt.decode(
            token,
            settings.SUPABASE_JWT_SECRET,
            algorithms=[settings.SUPABASE_JWT_ALG],
            options={"verify_aud": False},
        )
    except JWTError:
        raise AuthenticationError("Invalid or expired token")


def get_current_identity(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Identity:
    """
    Resolve the Supabase identity behind the bearer token.

    Unlike the profile lookups, this never touches the database: the token
    alone proves who the caller is, not what they may do.

    Raises:
        AuthenticationError(401): if the header is missing or the token is
        malformed or lacks a UUID 'sub'.
    """
    if credentials is None:
        raise AuthenticationError("Authentication required")

    payload = decode_access_token(credentials.credentials)
    sub = payload.get("sub")
    if not sub:
        raise AuthenticationError("Token missing sub")

    # Supabase provides sub as a string; enforce UUID
    try:
        sub_uuid = uuid.UUID(sub)
    except ValueError:
        raise AuthenticationError("Invalid sub in token")

    return Identity(
        id=sub_uuid,
        email=payload.get("email"),
        access_token=credentials.credentials,
    )


def get_principal(
    identity: Identity = Depends(get_current_identity),
    session: Session = Depends(get_session),
    portal: Portal = Header("staff", alias="X-Portal"),
    clinic_id: uuid.UUID | None = Header(None, alias="X-Clinic-ID"),
) -> Principal:
    """
    Re-resolve the caller's role on every request.

    Headers:
      - X-Portal: staff (default) | veterinarian | receptionist | tutor
      - X-Clinic-ID: active clinic for staff with several memberships.
        Profile-based portals are pinned to their profile's clinic; a
        different value is rejected.

    Raises:
        RoleMismatchError(403): no matching (active) profile for the portal.
        AuthorizationError(403): X-Clinic-ID outside the caller's clinics.
    """
    principal = resolver.resolve(session, identity, portal)

    if clinic_id is not None:
        if isinstance(principal, StaffPrincipal):
            principal = principal.select_clinic(clinic_id)
        elif principal.clinic_id != clinic_id:
            raise AuthorizationError("You are not a member of this clinic")

    return principal


def require_portals(*kinds: str):
    """
    Build a dependency that only lets the given portal kinds through.

    Usage:

        require_operator = require_portals("staff", "receptionist")

        @router.post("/x")
        def x(principal: Principal = Depends(require_operator)):
            ...
    """

    def dependency(principal: Principal = Depends(get_principal)) -> Principal:
        if principal.kind not in kinds:
            raise AuthorizationError(
                f"Not available in the {principal.kind} portal"
            )
        return principal

    return dependency


# Front-desk work: scheduling, tutors, animals
require_operator = require_portals("staff", "receptionist")

# Anyone working inside the clinic
require_clinic_worker = require_portals("staff", "veterinarian", "receptionist")

require_tutor = require_portals("tutor")


def require_clinic_admin(
    principal: Principal = Depends(get_principal),
) -> StaffPrincipal:
    """
    Enforce an active admin/super_admin membership in the active clinic.

    Raises:
        AuthorizationError(403): for every other principal.
    """
    if not isinstance(principal, StaffPrincipal) or not principal.is_admin:
        raise AuthorizationError("Clinic admin access required")
    return principal
