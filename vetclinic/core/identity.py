# vetclinic/core/identity.py
"""
Identity provider adapter (Supabase Auth).

The rest of the code base only talks to the identity provider through
`SupabaseIdentityProvider`, and routers receive it via the
`get_identity_provider` dependency so tests can swap in a fake.
"""

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from functools import lru_cache
from typing import Any

import httpx
from supabase import AuthApiError, AuthError

from vetclinic.core.errors import AuthenticationError, RemoteError, ValidationError
from vetclinic.core.supabase_client import supabase_admin, supabase_public

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IdentitySession:
    """Tokens returned by a successful password sign-in."""

    user_id: uuid.UUID
    email: str
    access_token: str
    refresh_token: str
    expires_at: datetime | None


class SupabaseIdentityProvider:
    """
    Thin wrapper over Supabase Auth.

    Error mapping:
      - provider rejects credentials      -> AuthenticationError (401)
      - e-mail already registered         -> ValidationError (400)
      - network / unexpected auth failure -> RemoteError (502)
    """

    def sign_in(self, email: str, password: str) -> IdentitySession:
        try:
            res = supabase_public().auth.sign_in_with_password(
                {"email": email, "password": password}
            )
        except AuthApiError:
            raise AuthenticationError()
        except (AuthError, httpx.HTTPError) as e:
            logger.error(f"Identity provider sign-in failed: {e}")
            raise RemoteError("Authentication service unavailable")

        if res.session is None or res.user is None:
            raise AuthenticationError()

        expires_at = None
        if res.session.expires_at:
            expires_at = datetime.fromtimestamp(res.session.expires_at, tz=timezone.utc)

        return IdentitySession(
            user_id=uuid.UUID(str(res.user.id)),
            email=res.user.email or email,
            access_token=res.session.access_token,
            refresh_token=res.session.refresh_token,
            expires_at=expires_at,
        )

    def sign_out(self, access_token: str) -> None:
        """Revoke the session behind `access_token` (all refresh tokens)."""
        try:
            supabase_admin().auth.admin.sign_out(access_token)
        except (AuthError, httpx.HTTPError) as e:
            logger.error(f"Identity provider sign-out failed: {e}")
            raise RemoteError("Could not end the session")

    def create_user(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any] | None = None,
    ) -> uuid.UUID:
        """Create a confirmed identity and return its id."""
        try:
            res = supabase_admin().auth.admin.create_user(
                {
                    "email": email,
                    "password": password,
                    "email_confirm": True,
                    "user_metadata": metadata or {},
                }
            )
        except AuthApiError as e:
            if "already" in (e.message or "").lower():
                raise ValidationError("This e-mail is already registered")
            logger.error(f"Identity provider rejected user creation: {e.message}")
            raise RemoteError(f"Could not create access account: {e.message}")
        except (AuthError, httpx.HTTPError) as e:
            logger.error(f"Identity provider user creation failed: {e}")
            raise RemoteError("Could not create access account")

        if res.user is None:
            raise RemoteError("Could not create access account")
        return uuid.UUID(str(res.user.id))

    def delete_user(self, user_id: uuid.UUID) -> None:
        try:
            supabase_admin().auth.admin.delete_user(str(user_id))
        except (AuthError, httpx.HTTPError) as e:
            logger.error(f"Identity provider could not delete user {user_id}: {e}")
            raise RemoteError("Could not delete access account")

    def update_user(
        self,
        user_id: uuid.UUID,
        email: str | None = None,
        password: str | None = None,
    ) -> None:
        """Change e-mail and/or password. No-op when both are None."""
        attributes: dict[str, Any] = {}
        if email:
            attributes["email"] = email
        if password:
            attributes["password"] = password
        if not attributes:
            return

        try:
            supabase_admin().auth.admin.update_user_by_id(str(user_id), attributes)
        except AuthApiError as e:
            raise ValidationError(f"Could not update access account: {e.message}")
        except (AuthError, httpx.HTTPError) as e:
            logger.error(f"Identity provider could not update user {user_id}: {e}")
            raise RemoteError("Could not update access account")


@lru_cache
def get_identity_provider() -> SupabaseIdentityProvider:
    """FastAPI dependency returning the process-wide provider adapter."""
    return SupabaseIdentityProvider()
