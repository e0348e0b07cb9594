# vetclinic/services/medical_service.py
import logging
import uuid
from datetime import date, datetime, timezone

from sqlmodel import Session

from vetclinic.core.errors import NotFoundError, ValidationError
from vetclinic.core.principal import Principal, TutorPrincipal, VeterinarianPrincipal
from vetclinic.models.medical import MedicalRecord, Prescription, Vaccination
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
    PrescriptionCreate,
    PrescriptionStatusUpdate,
    VaccinationCreate,
)

logger = logging.getLogger(__name__)


class MedicalService:
    """
    Medical records, vaccinations and prescriptions.

    A veterinarian principal always writes under its own id; other writers
    must name the veterinarian.
    """

    def __init__(
        self,
        record_repo: MedicalRecordRepository,
        vaccination_repo: VaccinationRepository,
        prescription_repo: PrescriptionRepository,
        animal_repo: AnimalRepository,
        vet_repo: VeterinarianRepository,
        appointment_repo: AppointmentRepository,
    ):
        self.record_repo = record_repo
        self.vaccination_repo = vaccination_repo
        self.prescription_repo = prescription_repo
        self.animal_repo = animal_repo
        self.vet_repo = vet_repo
        self.appointment_repo = appointment_repo

    # -------- Medical records --------

    def list_records(
        self,
        session: Session,
        principal: Principal,
        animal_id: uuid.UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[MedicalRecord]:
        return self.record_repo.list_for_clinic(
            session,
            principal.clinic_id,
            order_by=MedicalRecord.created_at.desc(),
            skip=skip,
            limit=limit,
            animal_id=animal_id,
        )

    def get_record(
        self,
        session: Session,
        principal: Principal,
        record_id: uuid.UUID,
    ) -> MedicalRecord:
        record = self.record_repo.get(session, principal.clinic_id, record_id)
        if record is None:
            raise NotFoundError("Medical record")
        return record

    def create_record(
        self,
        session: Session,
        principal: Principal,
        payload: MedicalRecordCreate,
    ) -> MedicalRecord:
        clinic_id = principal.clinic_id
        self._check_animal(session, clinic_id, payload.animal_id)
        veterinarian_id = self._author(session, principal, payload.veterinarian_id)

        if payload.appointment_id is not None:
            appointment = self.appointment_repo.get(session, clinic_id, payload.appointment_id)
            if appointment is None or appointment.animal_id != payload.animal_id:
                raise NotFoundError("Appointment")

        data = payload.model_dump(exclude={"veterinarian_id"})
        record = MedicalRecord(clinic_id=clinic_id, veterinarian_id=veterinarian_id, **data)
        record = self.record_repo.add(session, record)
        session.commit()
        session.refresh(record)
        return record

    # -------- Vaccinations --------

    def list_vaccinations(
        self,
        session: Session,
        principal: Principal,
        animal_id: uuid.UUID | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Vaccination]:
        """Tutors only get the vaccination cards of their own animals."""
        animal_filter = animal_id
        if isinstance(principal, TutorPrincipal):
            own = self.animal_repo.list_for_clinic(
                session, principal.clinic_id, limit=1000, tutor_id=principal.profile.id
            )
            animal_filter = [a.id for a in own if animal_id is None or a.id == animal_id]

        return self.vaccination_repo.list_for_clinic(
            session,
            principal.clinic_id,
            order_by=Vaccination.administered_at.desc(),
            skip=skip,
            limit=limit,
            animal_id=animal_filter,
        )

    def create_vaccination(
        self,
        session: Session,
        principal: Principal,
        payload: VaccinationCreate,
    ) -> Vaccination:
        clinic_id = principal.clinic_id
        self._check_animal(session, clinic_id, payload.animal_id)
        veterinarian_id = self._author(session, principal, payload.veterinarian_id)

        data = payload.model_dump(exclude={"veterinarian_id"})
        vaccination = Vaccination(clinic_id=clinic_id, veterinarian_id=veterinarian_id, **data)
        vaccination = self.vaccination_repo.add(session, vaccination)
        session.commit()
        session.refresh(vaccination)
        return vaccination

    def delete_vaccination(
        self,
        session: Session,
        principal: Principal,
        vaccination_id: uuid.UUID,
    ) -> None:
        vaccination = self.vaccination_repo.get(session, principal.clinic_id, vaccination_id)
        if vaccination is None:
            raise NotFoundError("Vaccination")
        self.vaccination_repo.delete(session, vaccination)
        session.commit()

    # -------- Prescriptions --------

    def list_prescriptions(
        self,
        session: Session,
        principal: Principal,
        animal_id: uuid.UUID | None = None,
        status: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Prescription]:
        """Newest first. A veterinarian principal only sees what it prescribed."""
        veterinarian_id = None
        if isinstance(principal, VeterinarianPrincipal):
            veterinarian_id = principal.profile.id

        return self.prescription_repo.list_for_clinic(
            session,
            principal.clinic_id,
            order_by=Prescription.created_at.desc(),
            skip=skip,
            limit=limit,
            animal_id=animal_id,
            status=status,
            veterinarian_id=veterinarian_id,
        )

    def get_prescription(
        self,
        session: Session,
        principal: Principal,
        prescription_id: uuid.UUID,
    ) -> Prescription:
        prescription = self.prescription_repo.get(session, principal.clinic_id, prescription_id)
        if prescription is None:
            raise NotFoundError("Prescription")
        if (
            isinstance(principal, VeterinarianPrincipal)
            and prescription.veterinarian_id != principal.profile.id
        ):
            raise NotFoundError("Prescription")
        return prescription

    def create_prescription(
        self,
        session: Session,
        principal: Principal,
        payload: PrescriptionCreate,
    ) -> Prescription:
        clinic_id = principal.clinic_id
        self._check_animal(session, clinic_id, payload.animal_id)
        veterinarian_id = self._author(session, principal, payload.veterinarian_id)

        if payload.medical_record_id is not None:
            record = self.record_repo.get(session, clinic_id, payload.medical_record_id)
            if record is None or record.animal_id != payload.animal_id:
                raise NotFoundError("Medical record")

        data = payload.model_dump(exclude={"veterinarian_id", "prescribed_at"})
        prescription = Prescription(
            clinic_id=clinic_id,
            veterinarian_id=veterinarian_id,
            prescribed_at=payload.prescribed_at or date.today(),
            **data,
        )
        if prescription.status != "draft":
            prescription.issued_at = datetime.now(timezone.utc)

        prescription = self.prescription_repo.add(session, prescription)
        session.commit()
        session.refresh(prescription)
        return prescription

    def update_prescription_status(
        self,
        session: Session,
        principal: Principal,
        prescription_id: uuid.UUID,
        payload: PrescriptionStatusUpdate,
    ) -> Prescription:
        """
        Move a prescription along draft -> issued -> sent -> viewed.

        issued_at and sent_at are stamped the first time those states are
        reached; a 'sent' prescription needs a recipient.
        """
        prescription = self.get_prescription(session, principal, prescription_id)
        now = datetime.now(timezone.utc)

        if payload.status == "sent":
            sent_to = payload.sent_to or prescription.sent_to
            if not sent_to:
                raise ValidationError("sent_to is required to send a prescription")
            prescription.sent_to = sent_to
            prescription.sent_at = prescription.sent_at or now
        if payload.status != "draft" and prescription.issued_at is None:
            prescription.issued_at = now

        logger.info(
            f"Prescription {prescription_id}: {prescription.status} -> {payload.status} "
            f"by {principal.identity.id}"
        )
        prescription.status = payload.status
        self.prescription_repo.add(session, prescription)
        session.commit()
        session.refresh(prescription)
        return prescription

    # -------- Helpers --------

    def _check_animal(self, session: Session, clinic_id: uuid.UUID, animal_id: uuid.UUID) -> None:
        if self.animal_repo.get(session, clinic_id, animal_id) is None:
            raise NotFoundError("Animal")

    def _author(
        self,
        session: Session,
        principal: Principal,
        veterinarian_id: uuid.UUID | None,
    ) -> uuid.UUID:
        if isinstance(principal, VeterinarianPrincipal):
            return principal.profile.id
        if veterinarian_id is None:
            raise ValidationError("veterinarian_id is required")
        if self.vet_repo.get(session, principal.clinic_id, veterinarian_id) is None:
            raise NotFoundError("Veterinarian")
        return veterinarian_id
