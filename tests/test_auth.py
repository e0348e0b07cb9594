import uuid

from fastapi import status
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from vetclinic.core.config import get_settings
from vetclinic.models.clinic import Clinic, ClinicUser
from vetclinic.routers import auth as auth_router

from conftest import API


def login(client, portal, email, password="secret123", **extra):
    return client.post(
        f"{API}/auth/login/{portal}",
        json={"email": email, "password": password, **extra},
    )


# -------- Staff portal --------


def test_staff_login_returns_clinics_and_first_membership(client, seed, provider):
    first = seed.clinic("Clinica A")
    second = seed.clinic("Clinica B")
    user_id = seed.staff(first, role="admin", email="ana@clinic.example.com")
    seed.membership(second, user_id, role="veterinarian")

    res = login(client, "staff", "ana@clinic.example.com")

    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body["portal"] == "staff"
    assert body["user"]["id"] == str(user_id)
    assert body["token_type"] == "bearer"
    assert [c["clinic_name"] for c in body["clinics"]] == ["Clinica A", "Clinica B"]
    assert body["current_clinic_id"] == str(first.id)
    assert body["profile"]["full_name"] == "Staff admin"
    assert provider.signed_out == []


def test_staff_login_honours_preferred_clinic(client, seed):
    first = seed.clinic("Clinica A")
    second = seed.clinic("Clinica B")
    user_id = seed.staff(first, email="ana@clinic.example.com")
    seed.membership(second, user_id, role="receptionist")

    res = login(client, "staff", "ana@clinic.example.com", clinic_id=str(second.id))

    assert res.status_code == status.HTTP_200_OK
    assert res.json()["current_clinic_id"] == str(second.id)


def test_staff_login_ignores_preferred_clinic_without_membership(client, seed):
    clinic = seed.clinic()
    other = seed.clinic("Outra")
    seed.staff(clinic, email="ana@clinic.example.com")

    res = login(client, "staff", "ana@clinic.example.com", clinic_id=str(other.id))

    assert res.status_code == status.HTTP_200_OK
    assert res.json()["current_clinic_id"] == str(clinic.id)


def test_suspended_membership_cannot_enter_staff_portal(client, seed, provider):
    clinic = seed.clinic()
    seed.staff(clinic, email="ana@clinic.example.com", is_active=False)

    res = login(client, "staff", "ana@clinic.example.com")

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()["detail"] == "User is not a member of any clinic"
    assert len(provider.signed_out) == 1


def test_bad_password_is_401_and_nothing_to_sign_out(client, seed, provider):
    clinic = seed.clinic()
    seed.staff(clinic, email="ana@clinic.example.com")

    res = login(client, "staff", "ana@clinic.example.com", password="wrong")

    assert res.status_code == status.HTTP_401_UNAUTHORIZED
    assert provider.signed_out == []


# -------- Portal mismatch --------


def test_staff_member_is_signed_out_of_veterinarian_portal(client, seed, provider):
    clinic = seed.clinic()
    seed.staff(clinic, email="ana@clinic.example.com")

    res = login(client, "veterinarian", "ana@clinic.example.com")

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()["detail"] == "User is not a veterinarian"
    assert len(provider.signed_out) == 1


def test_inactive_veterinarian_is_rejected(client, seed, provider):
    clinic = seed.clinic()
    vet = seed.veterinarian(clinic, with_login=True, is_active=False)

    res = login(client, "veterinarian", vet.email)

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()["detail"] == "Veterinarian account is inactive"
    assert len(provider.signed_out) == 1


def test_active_veterinarian_login_is_pinned_to_profile_clinic(client, seed):
    clinic = seed.clinic()
    vet = seed.veterinarian(clinic, with_login=True)

    res = login(client, "veterinarian", vet.email)

    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body["portal"] == "veterinarian"
    assert body["profile"]["id"] == str(vet.id)
    assert body["profile"]["crmv"] == "12345/SP"
    assert body["clinics"] == []
    assert body["current_clinic_id"] == str(clinic.id)


def test_inactive_receptionist_allowed_unless_enforced(client, seed, provider, monkeypatch):
    clinic = seed.clinic()
    desk = seed.receptionist(clinic, is_active=False)

    assert login(client, "receptionist", desk.email).status_code == status.HTTP_200_OK

    monkeypatch.setattr(get_settings(), "ENFORCE_ACTIVE_RECEPTIONIST", True)
    res = login(client, "receptionist", desk.email)

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert res.json()["detail"] == "Receptionist account is inactive"
    assert len(provider.signed_out) == 1


def test_tutor_login_and_mismatch(client, seed, provider):
    clinic = seed.clinic()
    tutor = seed.tutor(clinic, with_login=True)

    ok = login(client, "tutor", tutor.email)
    assert ok.status_code == status.HTTP_200_OK
    assert ok.json()["profile"]["name"] == "Joao Silva"

    res = login(client, "staff", tutor.email)
    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert len(provider.signed_out) == 1


def test_unknown_portal_is_422(client, seed):
    clinic = seed.clinic()
    seed.staff(clinic, email="ana@clinic.example.com")

    res = login(client, "admin", "ana@clinic.example.com")

    assert res.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


# -------- Token handling --------


def test_me_requires_token(client):
    res = client.get(f"{API}/auth/me")
    assert res.status_code == status.HTTP_401_UNAUTHORIZED
    assert res.json()["detail"] == "Authentication required"


def test_me_rejects_garbage_token(client):
    res = client.get(f"{API}/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert res.status_code == status.HTTP_401_UNAUTHORIZED


def test_me_resolves_role_per_request(client, seed, headers):
    clinic = seed.clinic()
    user_id = seed.staff(clinic)

    res = client.get(f"{API}/auth/me", headers=headers(user_id))
    assert res.status_code == status.HTTP_200_OK
    assert res.json()["portal"] == "staff"

    # Same token, different portal claim
    res = client.get(f"{API}/auth/me", headers=headers(user_id, portal="tutor"))
    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_logout_revokes_session(client, seed, headers, provider):
    clinic = seed.clinic()
    user_id = seed.staff(clinic)
    h = headers(user_id)

    res = client.post(f"{API}/auth/logout", headers=h)

    assert res.status_code == status.HTTP_200_OK
    assert provider.signed_out == [h["Authorization"].removeprefix("Bearer ")]


def test_change_password(client, seed, headers, provider):
    clinic = seed.clinic()
    user_id = seed.staff(clinic, email="ana@clinic.example.com")

    short = client.post(
        f"{API}/auth/password", json={"new_password": "123"}, headers=headers(user_id)
    )
    assert short.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    res = client.post(
        f"{API}/auth/password", json={"new_password": "n3w-pass"}, headers=headers(user_id)
    )
    assert res.status_code == status.HTTP_200_OK
    assert login(client, "staff", "ana@clinic.example.com", password="n3w-pass").status_code == 200


# -------- Active clinic --------


def test_current_clinic_setter_validates_membership(client, seed, headers):
    mine = seed.clinic("Minha")
    other = seed.clinic("Outra")
    foreign = seed.clinic("Alheia")
    user_id = seed.staff(mine)
    seed.membership(other, user_id, role="receptionist")

    ok = client.post(
        f"{API}/auth/current-clinic",
        json={"clinic_id": str(other.id)},
        headers=headers(user_id),
    )
    assert ok.status_code == status.HTTP_200_OK
    assert ok.json()["current_clinic_id"] == str(other.id)

    denied = client.post(
        f"{API}/auth/current-clinic",
        json={"clinic_id": str(foreign.id)},
        headers=headers(user_id),
    )
    assert denied.status_code == status.HTTP_403_FORBIDDEN


def test_foreign_clinic_header_is_rejected(client, seed, headers):
    mine = seed.clinic("Minha")
    foreign = seed.clinic("Alheia")
    user_id = seed.staff(mine)

    res = client.get(
        f"{API}/clinics/current", headers=headers(user_id, clinic_id=foreign.id)
    )

    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_tutor_cannot_claim_another_clinic(client, seed, headers):
    clinic = seed.clinic()
    other = seed.clinic("Outra")
    tutor = seed.tutor(clinic, with_login=True)

    res = client.get(
        f"{API}/animals",
        headers=headers(tutor.user_id, portal="tutor", clinic_id=other.id),
    )

    assert res.status_code == status.HTTP_403_FORBIDDEN


# -------- Signup --------


def signup_payload(email="founder@clinic.example.com"):
    return {
        "email": email,
        "password": "founder-pass",
        "clinic": {"name": "Clinica Nova", "cnpj": "11222333000181", "city": "Recife"},
        "profile": {"full_name": "Paula Reis", "cpf": "529.982.247-25"},
    }


def test_signup_creates_clinic_admin_and_signs_in(client, session, provider):
    res = client.post(f"{API}/auth/signup", json=signup_payload())

    assert res.status_code == status.HTTP_201_CREATED
    body = res.json()
    assert body["portal"] == "staff"
    assert body["clinics"][0]["clinic_name"] == "Clinica Nova"
    assert body["clinics"][0]["role"] == "admin"
    assert body["profile"]["cpf"] == "52998224725"

    membership = session.exec(select(ClinicUser)).one()
    assert str(membership.user_id) == body["user"]["id"]
    assert membership.is_active


def test_signup_duplicate_email_is_400(client, provider):
    provider.add_user("founder@clinic.example.com")

    res = client.post(f"{API}/auth/signup", json=signup_payload())

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert res.json()["detail"] == "This e-mail is already registered"


def test_signup_storage_failure_removes_identity(client, session, provider, monkeypatch):
    def broken_create(session, clinic):
        raise OperationalError("INSERT INTO clinics", {}, Exception("db down"))

    monkeypatch.setattr(auth_router.service.clinic_repo, "create", broken_create)

    res = client.post(f"{API}/auth/signup", json=signup_payload())

    assert res.status_code == status.HTTP_502_BAD_GATEWAY
    assert len(provider.deleted) == 1
    assert provider.find("founder@clinic.example.com") is None
    assert session.exec(select(Clinic)).all() == []
