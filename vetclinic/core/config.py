# vetclinic/core/config.py
from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Clinic backend settings, read from the process environment or `.env`.

    Must be set:
      - SUPABASE_URL, SUPABASE_KEY (anon key)
      - DATABASE_URL (Postgres behind the Supabase pooler, or sqlite:// locally)
      - SUPABASE_JWT_SECRET (verifies portal access tokens)

    May be set:
      - SUPABASE_SERVICE_ROLE_KEY (account provisioning + forced sign-out)
      - ENFORCE_ACTIVE_RECEPTIONIST (reject inactive receptionists at login)
      - DEFAULT_APPOINTMENT_DURATION_MINUTES, DEFAULT_REJECTION_REASON
    """

    PROJECT_NAME: str = "VetClinic API"
    API_V1_STR: str = "/api/v1"
    LOG_LEVEL: str = "INFO"

    # Comma-separated list of allowed browser origins
    CORS_ORIGINS: str = "http://localhost:5173,http://127.0.0.1:5173"

    # Supabase / DB config
    SUPABASE_URL: str
    SUPABASE_KEY: str
    DATABASE_URL: str

    # JWT verification (backend-side)
    SUPABASE_JWT_SECRET: str
    SUPABASE_JWT_ALG: str = "HS256"

    # Service role key bypasses RLS (backend only)
    SUPABASE_SERVICE_ROLE_KEY: str | None = None

    # Scheduling defaults
    DEFAULT_APPOINTMENT_DURATION_MINUTES: int = 30
    DEFAULT_REJECTION_REASON: str = "Time slot unavailable"

    # Veterinarians are always checked for is_active at login.
    # Receptionists only when this flag is on.
    ENFORCE_ACTIVE_RECEPTIONIST: bool = False

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """Settings are built once per process; tests set env vars before first use."""
    return Settings()
