# vetclinic/routers/medical.py
import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlmodel import Session

from vetclinic.core.auth import get_principal, require_clinic_worker
from vetclinic.core.principal import Principal
from vetclinic.database import get_session
from vetclinic.repositories.animal_repo import AnimalRepository
from vetclinic.repositories.appointment_repo import AppointmentRepository
from vetclinic.repositories.medical_repo import (
    MedicalRecordRepository,
    PrescriptionRepository,
    VaccinationRepository,
)
from vetclinic.repositories.profile_repo import VeterinarianRepository
from vetclinic.schemas.medical import (
    MedicalRecordCreate,
    MedicalRecordRead,
    PrescriptionCreate,
    PrescriptionRead,
    PrescriptionStatus,
    PrescriptionStatusUpdate,
    VaccinationCreate,
    VaccinationRead,
)
from vetclinic.services.medical_service import MedicalService

router = APIRouter(tags=["Medical"])

service = MedicalService(
    MedicalRecordRepository(),
    VaccinationRepository(),
    PrescriptionRepository(),
    AnimalRepository(),
    VeterinarianRepository(),
    AppointmentRepository(),
)


# -------- Medical records --------


@router.get(
    "/medical-records",
    response_model=list[MedicalRecordRead],
)
def list_medical_records(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
    animal_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """Newest first; filter by animal with ?animal_id=."""
    return service.list_records(session, principal, animal_id, skip, limit)


@router.get(
    "/medical-records/{record_id}",
    response_model=MedicalRecordRead,
)
def get_medical_record(
    record_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.get_record(session, principal, record_id)


@router.post(
    "/medical-records",
    response_model=MedicalRecordRead,
    status_code=status.HTTP_201_CREATED,
)
def create_medical_record(
    payload: MedicalRecordCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.create_record(session, principal, payload)


# -------- Vaccinations --------


@router.get(
    "/vaccinations",
    response_model=list[VaccinationRead],
)
def list_vaccinations(
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_principal),
    animal_id: uuid.UUID | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    Most recent first. Tutors get the vaccination cards of their own
    animals only.
    """
    return service.list_vaccinations(session, principal, animal_id, skip, limit)


@router.post(
    "/vaccinations",
    response_model=VaccinationRead,
    status_code=status.HTTP_201_CREATED,
)
def create_vaccination(
    payload: VaccinationCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.create_vaccination(session, principal, payload)


@router.delete(
    "/vaccinations/{vaccination_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_vaccination(
    vaccination_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    service.delete_vaccination(session, principal, vaccination_id)


# -------- Prescriptions --------


@router.get(
    "/prescriptions",
    response_model=list[PrescriptionRead],
)
def list_prescriptions(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
    animal_id: uuid.UUID | None = None,
    status_filter: PrescriptionStatus | None = Query(None, alias="status"),
    skip: int = 0,
    limit: int = 50,
):
    """
    Newest first. A veterinarian only sees their own prescriptions.
    """
    return service.list_prescriptions(
        session, principal, animal_id, status_filter, skip, limit
    )


@router.get(
    "/prescriptions/{prescription_id}",
    response_model=PrescriptionRead,
)
def get_prescription(
    prescription_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.get_prescription(session, principal, prescription_id)


@router.post(
    "/prescriptions",
    response_model=PrescriptionRead,
    status_code=status.HTTP_201_CREATED,
)
def create_prescription(
    payload: PrescriptionCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.create_prescription(session, principal, payload)


@router.patch(
    "/prescriptions/{prescription_id}/status",
    response_model=PrescriptionRead,
)
def update_prescription_status(
    prescription_id: uuid.UUID,
    payload: PrescriptionStatusUpdate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.update_prescription_status(session, principal, prescription_id, payload)
