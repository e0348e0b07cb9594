from datetime import date, datetime, time, timedelta

from fastapi import status

from vetclinic.models.appointment import Appointment, AppointmentRequest

from conftest import API


def test_memberships_lists_active_clinics_only(client, seed, headers):
    a = seed.clinic("Clinica A")
    b = seed.clinic("Clinica B")
    c = seed.clinic("Clinica C")
    user_id = seed.staff(a)
    seed.membership(b, user_id, role="veterinarian")
    seed.membership(c, user_id, role="receptionist", is_active=False)

    res = client.get(f"{API}/clinics/memberships", headers=headers(user_id))

    assert res.status_code == status.HTTP_200_OK
    assert {m["clinic_name"]: m["role"] for m in res.json()} == {
        "Clinica A": "admin",
        "Clinica B": "veterinarian",
    }


def test_current_clinic_follows_header(client, seed, headers):
    a = seed.clinic("Clinica A")
    b = seed.clinic("Clinica B")
    user_id = seed.staff(a)
    seed.membership(b, user_id, role="admin")

    default = client.get(f"{API}/clinics/current", headers=headers(user_id))
    switched = client.get(f"{API}/clinics/current", headers=headers(user_id, clinic_id=b.id))

    assert default.json()["name"] == "Clinica A"
    assert switched.json()["name"] == "Clinica B"


def test_clinic_switch_filters_lists(client, seed, headers):
    a = seed.clinic("Clinica A")
    b = seed.clinic("Clinica B")
    user_id = seed.staff(a)
    seed.membership(b, user_id, role="admin")
    seed.animal(a, seed.tutor(a), name="Rex")
    seed.animal(b, seed.tutor(b), name="Mia")

    in_a = client.get(f"{API}/animals", headers=headers(user_id, clinic_id=a.id)).json()
    in_b = client.get(f"{API}/animals", headers=headers(user_id, clinic_id=b.id)).json()

    assert [x["name"] for x in in_a] == ["Rex"]
    assert [x["name"] for x in in_b] == ["Mia"]


# -------- Members (admin) --------


def test_members_admin_only(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    vet_staff_id = seed.staff(clinic, role="veterinarian")

    ok = client.get(f"{API}/clinics/current/members", headers=headers(admin_id))
    denied = client.get(f"{API}/clinics/current/members", headers=headers(vet_staff_id))

    assert ok.status_code == status.HTTP_200_OK
    assert len(ok.json()) == 2
    assert denied.status_code == status.HTTP_403_FORBIDDEN


def test_suspend_member_removes_staff_access(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    member_id = seed.staff(clinic, role="receptionist")

    res = client.patch(
        f"{API}/clinics/current/members/{member_id}",
        json={"is_active": False},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_200_OK
    assert res.json()["is_active"] is False
    assert client.get(f"{API}/auth/me", headers=headers(member_id)).status_code == 403


def test_admin_cannot_suspend_self(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")

    res = client.patch(
        f"{API}/clinics/current/members/{admin_id}",
        json={"is_active": False},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_400_BAD_REQUEST


def test_only_super_admin_grants_super_admin(client, seed, headers):
    clinic = seed.clinic()
    admin_id = seed.staff(clinic, role="admin")
    member_id = seed.staff(clinic, role="receptionist")

    res = client.patch(
        f"{API}/clinics/current/members/{member_id}",
        json={"role": "super_admin"},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_admin_cannot_change_super_admin(client, seed, headers):
    clinic = seed.clinic()
    owner_id = seed.staff(clinic, role="super_admin")
    admin_id = seed.staff(clinic, role="admin")

    res = client.patch(
        f"{API}/clinics/current/members/{owner_id}",
        json={"is_active": False, "role": "receptionist"},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_403_FORBIDDEN
    members = client.get(f"{API}/clinics/current/members", headers=headers(owner_id)).json()
    owner = next(m for m in members if m["user_id"] == str(owner_id))
    assert owner["role"] == "super_admin"
    assert owner["is_active"] is True


def test_super_admin_can_demote_super_admin(client, seed, headers):
    clinic = seed.clinic()
    owner_id = seed.staff(clinic, role="super_admin")
    partner_id = seed.staff(clinic, role="super_admin")

    res = client.patch(
        f"{API}/clinics/current/members/{partner_id}",
        json={"role": "admin"},
        headers=headers(owner_id),
    )

    assert res.status_code == status.HTTP_200_OK
    assert res.json()["role"] == "admin"


def test_member_of_other_clinic_is_404(client, seed, headers):
    mine = seed.clinic("Minha")
    other = seed.clinic("Outra")
    admin_id = seed.staff(mine, role="admin")
    stranger_id = seed.staff(other, role="receptionist")

    res = client.patch(
        f"{API}/clinics/current/members/{stranger_id}",
        json={"is_active": False},
        headers=headers(admin_id),
    )

    assert res.status_code == status.HTTP_404_NOT_FOUND


# -------- Dashboard --------


def test_dashboard_stats_are_clinic_scoped(client, session, seed, headers):
    clinic = seed.clinic()
    other = seed.clinic("Outra")
    user_id = seed.staff(clinic)
    vet = seed.veterinarian(clinic)
    tutor = seed.tutor(clinic)
    rex = seed.animal(clinic, tutor, "Rex")
    seed.animal(clinic, tutor, "Bolt")
    seed.animal(other, seed.tutor(other), "Mia")

    today = datetime.combine(date.today(), time(10, 0))
    session.add(
        Appointment(
            clinic_id=clinic.id, animal_id=rex.id, veterinarian_id=vet.id, scheduled_at=today
        )
    )
    session.add(
        Appointment(
            clinic_id=clinic.id,
            animal_id=rex.id,
            veterinarian_id=vet.id,
            scheduled_at=today + timedelta(days=1),
        )
    )
    session.add(
        AppointmentRequest(
            clinic_id=clinic.id,
            tutor_id=tutor.id,
            animal_id=rex.id,
            requested_date=date(2025, 3, 10),
            requested_time=time(9, 0),
        )
    )
    session.commit()

    res = client.get(f"{API}/clinics/current/stats", headers=headers(user_id))

    assert res.status_code == status.HTTP_200_OK
    body = res.json()
    assert body["total_animals"] == 2
    assert body["today_appointments"] == 1
    assert body["pending_requests"] == 1
    assert len(body["latest_pending_requests"]) == 1
