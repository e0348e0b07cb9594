from fastapi import status

from conftest import API


def test_create_and_update_animal(client, seed, headers):
    clinic = seed.clinic()
    h = headers(seed.staff(clinic))
    tutor = seed.tutor(clinic)

    res = client.post(
        f"{API}/animals",
        json={"tutor_id": str(tutor.id), "name": " Thor ", "species": "dog", "weight_kg": 12.5},
        headers=h,
    )
    assert res.status_code == status.HTTP_201_CREATED
    animal = res.json()
    assert animal["name"] == "Thor"
    assert animal["clinic_id"] == str(clinic.id)

    res = client.patch(f"{API}/animals/{animal['id']}", json={"breed": "Labrador"}, headers=h)
    assert res.status_code == status.HTTP_200_OK
    assert res.json()["breed"] == "Labrador"
    assert res.json()["weight_kg"] == 12.5


def test_owner_must_belong_to_same_clinic(client, seed, headers):
    clinic = seed.clinic()
    other = seed.clinic("Outra")
    h = headers(seed.staff(clinic))
    stranger = seed.tutor(other)

    res = client.post(
        f"{API}/animals",
        json={"tutor_id": str(stranger.id), "name": "Thor", "species": "dog"},
        headers=h,
    )

    assert res.status_code == status.HTTP_404_NOT_FOUND


def test_cross_clinic_get_is_404(client, seed, headers):
    clinic = seed.clinic()
    other = seed.clinic("Outra")
    h = headers(seed.staff(clinic))
    mia = seed.animal(other, seed.tutor(other), "Mia")

    assert client.get(f"{API}/animals/{mia.id}", headers=h).status_code == 404


def test_tutor_sees_only_own_animals(client, seed, headers):
    clinic = seed.clinic()
    joao = seed.tutor(clinic, with_login=True)
    maria = seed.tutor(clinic, name="Maria")
    rex = seed.animal(clinic, joao, "Rex")
    bidu = seed.animal(clinic, maria, "Bidu")
    h = headers(joao.user_id, portal="tutor")

    listed = client.get(f"{API}/animals", headers=h).json()
    assert [a["id"] for a in listed] == [str(rex.id)]

    # Asking for another tutor's animals is ignored
    listed = client.get(f"{API}/animals", params={"tutor_id": str(maria.id)}, headers=h).json()
    assert [a["id"] for a in listed] == [str(rex.id)]

    assert client.get(f"{API}/animals/{bidu.id}", headers=h).status_code == 404


def test_tutor_cannot_create_animals(client, seed, headers):
    clinic = seed.clinic()
    joao = seed.tutor(clinic, with_login=True)

    res = client.post(
        f"{API}/animals",
        json={"tutor_id": str(joao.id), "name": "Thor", "species": "dog"},
        headers=headers(joao.user_id, portal="tutor"),
    )

    assert res.status_code == status.HTTP_403_FORBIDDEN


def test_medical_record_written_as_veterinarian(client, seed, headers):
    clinic = seed.clinic()
    vet = seed.veterinarian(clinic, with_login=True)
    other_vet = seed.veterinarian(clinic)
    rex = seed.animal(clinic, seed.tutor(clinic))

    res = client.post(
        f"{API}/medical-records",
        json={
            "animal_id": str(rex.id),
            "veterinarian_id": str(other_vet.id),
            "temperature_celsius": 38.5,
            "diagnosis": "Otite",
        },
        headers=headers(vet.user_id, portal="veterinarian"),
    )

    assert res.status_code == status.HTTP_201_CREATED
    assert res.json()["veterinarian_id"] == str(vet.id)


def test_vaccination_needs_veterinarian_when_staff_writes(client, seed, headers):
    clinic = seed.clinic()
    h = headers(seed.staff(clinic))
    vet = seed.veterinarian(clinic)
    rex = seed.animal(clinic, seed.tutor(clinic))
    payload = {
        "animal_id": str(rex.id),
        "vaccine_name": "V10",
        "administered_at": "2025-03-10",
        "next_dose_date": "2026-03-10",
    }

    assert client.post(f"{API}/vaccinations", json=payload, headers=h).status_code == 400

    res = client.post(
        f"{API}/vaccinations", json={**payload, "veterinarian_id": str(vet.id)}, headers=h
    )
    assert res.status_code == status.HTTP_201_CREATED

    listed = client.get(f"{API}/vaccinations", params={"animal_id": str(rex.id)}, headers=h)
    assert [v["vaccine_name"] for v in listed.json()] == ["V10"]
