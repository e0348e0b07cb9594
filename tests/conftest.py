import os

# Settings are read once at import time; configure before importing the app
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "http://supabase.test"
os.environ["SUPABASE_KEY"] = "anon-test-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-test-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlmodel import SQLModel, Session

from vetclinic.core.errors import AuthenticationError, ValidationError
from vetclinic.core.identity import IdentitySession, get_identity_provider
from vetclinic.database import engine, get_session
from vetclinic.main import app
from vetclinic.models.animal import Animal
from vetclinic.models.clinic import Clinic, ClinicUser, UserProfile
from vetclinic.models.profile import Receptionist, Tutor, Veterinarian

API = "/api/v1"
JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


class FakeIdentityProvider:
    """
    In-memory stand-in for Supabase Auth.

    Issues real HS256 access tokens signed with the test secret, so the
    app's own token verification runs unchanged.
    """

    def __init__(self):
        self.users: dict[uuid.UUID, dict] = {}
        self.signed_out: list[str] = []
        self.deleted: list[uuid.UUID] = []
        self.created: list[dict] = []

    # -------- test helpers --------

    def add_user(self, email: str, password: str = "secret123") -> uuid.UUID:
        user_id = uuid.uuid4()
        self.users[user_id] = {"email": email.lower(), "password": password}
        return user_id

    def token_for(self, user_id: uuid.UUID) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": str(user_id),
            "email": self.users[user_id]["email"] if user_id in self.users else None,
            "aud": "authenticated",
            "role": "authenticated",
            "iat": int(now.timestamp()),
            "exp": int((now + timedelta(hours=1)).timestamp()),
            "session_id": str(uuid.uuid4()),
        }
        return jwt.encode(claims, JWT_SECRET, algorithm="HS256")

    def find(self, email: str) -> uuid.UUID | None:
        for user_id, user in self.users.items():
            if user["email"] == email.lower():
                return user_id
        return None

    # -------- provider interface --------

    def sign_in(self, email: str, password: str) -> IdentitySession:
        user_id = self.find(email)
        if user_id is None or self.users[user_id]["password"] != password:
            raise AuthenticationError()
        token = self.token_for(user_id)
        return IdentitySession(
            user_id=user_id,
            email=email.lower(),
            access_token=token,
            refresh_token=f"refresh-{user_id}",
            expires_at=datetime.now(timezone.utc) + timedelta(hours=1),
        )

    def sign_out(self, access_token: str) -> None:
        self.signed_out.append(access_token)

    def create_user(self, email: str, password: str, metadata=None) -> uuid.UUID:
        if self.find(email) is not None:
            raise ValidationError("This e-mail is already registered")
        user_id = self.add_user(email, password)
        self.created.append({"id": user_id, "email": email, "metadata": metadata or {}})
        return user_id

    def delete_user(self, user_id: uuid.UUID) -> None:
        self.users.pop(user_id, None)
        self.deleted.append(user_id)

    def update_user(self, user_id: uuid.UUID, email=None, password=None) -> None:
        user = self.users[user_id]
        if email:
            user["email"] = email.lower()
        if password:
            user["password"] = password


class Seeder:
    """Writes fixture rows directly through the test session."""

    def __init__(self, session: Session, provider: FakeIdentityProvider):
        self.session = session
        self.provider = provider
        self._clock = datetime(2025, 1, 1, tzinfo=timezone.utc)

    def _tick(self) -> datetime:
        self._clock += timedelta(minutes=1)
        return self._clock

    def _save(self, obj):
        self.session.add(obj)
        self.session.commit()
        self.session.refresh(obj)
        return obj

    def clinic(self, name: str = "Clinica Centro") -> Clinic:
        return self._save(Clinic(name=name, cnpj="12345678000199", city="Sao Paulo"))

    def staff(
        self,
        clinic: Clinic,
        role: str = "admin",
        email: str | None = None,
        is_active: bool = True,
    ) -> uuid.UUID:
        email = email or f"{role}-{uuid.uuid4().hex[:8]}@clinic.example.com"
        user_id = self.provider.find(email) or self.provider.add_user(email)
        if self.session.get(UserProfile, user_id) is None:
            self._save(UserProfile(id=user_id, full_name=f"Staff {role}"))
        self.membership(clinic, user_id, role=role, is_active=is_active)
        return user_id

    def membership(
        self,
        clinic: Clinic,
        user_id: uuid.UUID,
        role: str = "admin",
        is_active: bool = True,
    ) -> ClinicUser:
        return self._save(
            ClinicUser(
                clinic_id=clinic.id,
                user_id=user_id,
                role=role,
                is_active=is_active,
                created_at=self._tick(),
            )
        )

    def veterinarian(
        self,
        clinic: Clinic,
        with_login: bool = False,
        is_active: bool = True,
        email: str | None = None,
        cpf: str | None = "52998224725",
    ) -> Veterinarian:
        email = email or f"vet-{uuid.uuid4().hex[:8]}@clinic.example.com"
        user_id = self.provider.add_user(email) if with_login else None
        return self._save(
            Veterinarian(
                clinic_id=clinic.id,
                user_id=user_id,
                name="Dra. Ana Souza",
                email=email,
                cpf=cpf,
                crmv="12345/SP",
                is_active=is_active,
            )
        )

    def receptionist(
        self,
        clinic: Clinic,
        with_login: bool = True,
        is_active: bool = True,
    ) -> Receptionist:
        email = f"desk-{uuid.uuid4().hex[:8]}@clinic.example.com"
        user_id = self.provider.add_user(email) if with_login else None
        return self._save(
            Receptionist(
                clinic_id=clinic.id,
                user_id=user_id,
                name="Carla Lima",
                email=email,
                cpf="11144477735",
                is_active=is_active,
            )
        )

    def tutor(self, clinic: Clinic, with_login: bool = False, name: str = "Joao Silva") -> Tutor:
        email = f"tutor-{uuid.uuid4().hex[:8]}@mail.example.com"
        user_id = self.provider.add_user(email) if with_login else None
        return self._save(
            Tutor(
                clinic_id=clinic.id,
                user_id=user_id,
                name=name,
                email=email,
                cpf="39053344705",
            )
        )

    def animal(self, clinic: Clinic, tutor: Tutor, name: str = "Rex") -> Animal:
        return self._save(
            Animal(clinic_id=clinic.id, tutor_id=tutor.id, name=name, species="dog")
        )


@pytest.fixture
def session():
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def provider():
    return FakeIdentityProvider()


@pytest.fixture
def client(session, provider):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_identity_provider] = lambda: provider
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def seed(session, provider):
    return Seeder(session, provider)


@pytest.fixture
def headers(provider):
    """
    Build request headers for an identity.

        headers(user_id)                              -> staff portal
        headers(user_id, portal="tutor")
        headers(user_id, clinic_id=clinic.id)         -> X-Clinic-ID
    """

    def build(user_id: uuid.UUID, portal: str = "staff", clinic_id: uuid.UUID | None = None):
        h = {
            "Authorization": f"Bearer {provider.token_for(user_id)}",
            "X-Portal": portal,
        }
        if clinic_id is not None:
            h["X-Clinic-ID"] = str(clinic_id)
        return h

    return build
