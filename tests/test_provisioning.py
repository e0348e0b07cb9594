from fastapi import status
from sqlalchemy.exc import OperationalError
from sqlmodel import select

from vetclinic.models.profile import Receptionist, Veterinarian
from vetclinic.routers import veterinarians as vet_router

from conftest import API


def login(client, portal, email, password):
    return client.post(
        f"{API}/auth/login/{portal}", json={"email": email, "password": password}
    )


def test_provision_veterinarian_then_login_with_cpf(client, seed, headers, provider):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    vet = seed.veterinarian(clinic, email="ana.vet@clinic.example.com", cpf="52998224725")

    res = client.post(f"{API}/veterinarians/{vet.id}/account", headers=headers(admin_id))

    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body["success"] is True
    assert body["email"] == "ana.vet@clinic.example.com"
    assert body["temporary_password"] == "52998224725"
    assert provider.created[0]["metadata"]["user_type"] == "veterinarian"

    ok = login(client, "veterinarian", "ana.vet@clinic.example.com", "52998224725")
    assert ok.status_code == status.HTTP_200_OK
    assert ok.json()["profile"]["user_id"] == body["user_id"]


def test_provision_twice_is_conflict(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    vet = seed.veterinarian(clinic, with_login=True)

    res = client.post(f"{API}/veterinarians/{vet.id}/account", headers=headers(admin_id))

    assert res.status_code == status.HTTP_409_CONFLICT


def test_provision_requires_cpf(client, seed, headers, provider):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    vet = seed.veterinarian(clinic, cpf=None)

    res = client.post(f"{API}/veterinarians/{vet.id}/account", headers=headers(admin_id))

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert provider.created == []


def test_provision_denied_for_non_admin(client, seed, headers, provider):
    clinic = seed.clinic()
    staff_id = seed.staff(clinic, role="receptionist")
    vet = seed.veterinarian(clinic)

    res = client.post(f"{API}/veterinarians/{vet.id}/account", headers=headers(staff_id))

    assert res.status_code == status.HTTP_403_FORBIDDEN
    assert provider.created == []


def test_provision_denied_across_clinics(client, seed, headers, provider):
    mine = seed.clinic("Minha")
    other = seed.clinic("Outra")
    admin_id = seed.staff(mine, role="admin")
    vet = seed.veterinarian(other)

    res = client.post(f"{API}/veterinarians/{vet.id}/account", headers=headers(admin_id))

    assert res.status_code == status.HTTP_404_NOT_FOUND
    assert provider.created == []


def test_failed_link_deletes_identity(client, session, seed, headers, provider, monkeypatch):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    vet = seed.veterinarian(clinic, email="ana.vet@clinic.example.com", cpf="52998224725")

    def broken_link(session, profile, user_id):
        raise OperationalError("UPDATE veterinarians", {}, Exception("db down"))

    monkeypatch.setattr(vet_router.vet_repo, "link_identity", broken_link)

    res = client.post(f"{API}/veterinarians/{vet.id}/account", headers=headers(admin_id))

    assert res.status_code == status.HTTP_502_BAD_GATEWAY
    assert len(provider.deleted) == 1
    session.expire_all()
    assert session.get(Veterinarian, vet.id).user_id is None

    # The orphan credential is gone: signing in fails
    res = login(client, "veterinarian", "ana.vet@clinic.example.com", "52998224725")
    assert res.status_code == status.HTTP_401_UNAUTHORIZED


def test_create_veterinarian_with_account(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")

    res = client.post(
        f"{API}/veterinarians",
        json={
            "name": "Dr. Bruno Alves",
            "email": "bruno@clinic.example.com",
            "cpf": "111.444.777-35",
            "crmv": "54321/rj",
            "create_account": True,
        },
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_201_CREATED
    body = res.json()
    assert body["cpf"] == "11144477735"
    assert body["crmv"] == "54321/RJ"
    assert body["user_id"] is not None


def test_update_account_mirrors_email(client, session, seed, headers, provider):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    vet = seed.veterinarian(clinic, with_login=True)

    res = client.patch(
        f"{API}/veterinarians/{vet.id}/account",
        json={"email": "new.mail@clinic.example.com", "new_password": "another1"},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_200_OK
    assert res.json()["email"] == "new.mail@clinic.example.com"
    assert login(client, "veterinarian", "new.mail@clinic.example.com", "another1").status_code == 200


def test_update_account_requires_linked_identity(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    vet = seed.veterinarian(clinic)

    res = client.patch(
        f"{API}/veterinarians/{vet.id}/account",
        json={"new_password": "another1"},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_400_BAD_REQUEST


# -------- Receptionists --------


def test_create_receptionist_provisions_login(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")

    res = client.post(
        f"{API}/receptionists",
        json={"name": "Carla", "email": "carla@clinic.example.com", "cpf": "390.533.447-05"},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_201_CREATED
    assert res.json()["user_id"] is not None
    assert login(client, "receptionist", "carla@clinic.example.com", "39053344705").status_code == 200


def test_create_receptionist_removes_row_when_login_fails(client, session, seed, headers, provider):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    provider.add_user("carla@clinic.example.com")

    res = client.post(
        f"{API}/receptionists",
        json={"name": "Carla", "email": "carla@clinic.example.com", "cpf": "39053344705"},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_400_BAD_REQUEST
    assert session.exec(select(Receptionist)).all() == []


def test_deactivate_veterinarian_blocks_login(client, seed, headers, provider):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    vet = seed.veterinarian(clinic, with_login=True)

    res = client.patch(
        f"{API}/veterinarians/{vet.id}/active",
        json={"is_active": False},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_200_OK
    assert login(client, "veterinarian", vet.email, "secret123").status_code == 403


def test_receptionist_with_login_cannot_be_provisioned_again(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    desk = seed.receptionist(clinic)

    res = client.post(f"{API}/receptionists/{desk.id}/account", headers=headers(admin_id))

    assert res.status_code == status.HTTP_409_CONFLICT


# -------- Tutors --------


def test_provision_tutor_then_change_password(client, seed, headers, provider):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    tutor = seed.tutor(clinic)

    res = client.post(f"{API}/tutors/{tutor.id}/account", headers=headers(admin_id))
    assert res.status_code == status.HTTP_200_OK
    assert provider.created[0]["metadata"]["user_type"] == "tutor"

    res = client.patch(
        f"{API}/tutors/{tutor.id}/account",
        json={"new_password": "petlover9"},
        headers=headers(admin_id),
    )
    assert res.status_code == status.HTTP_200_OK
    assert login(client, "tutor", tutor.email, "petlover9").status_code == 200
