# vetclinic/core/supabase_client.py
from functools import lru_cache
from supabase import create_client, Client, ClientOptions

from vetclinic.core.config import get_settings

settings = get_settings()


def supabase_public() -> Client:
    """
    Create a short-lived Supabase client with the anon/public key.

    Used for password sign-in on behalf of a portal user. Each call gets
    its own client, so the auth session it receives is never shared
    between concurrent logins. The browser owns the session afterwards,
    hence no refresh or persistence.
    """
    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_KEY,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )


@lru_cache
def supabase_admin() -> Client:
    """
    Service-role Supabase client, built once.

    Needed for account provisioning (create/delete/update users) and for
    revoking the session of a portal login that failed the role check.
    The service key stays on the server.

    Raises:
        RuntimeError: if SUPABASE_SERVICE_ROLE_KEY is not set.
    """
    if not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY is required for admin Auth calls")
    return create_client(
        settings.SUPABASE_URL,
        settings.SUPABASE_SERVICE_ROLE_KEY,
        options=ClientOptions(auto_refresh_token=False, persist_session=False),
    )
