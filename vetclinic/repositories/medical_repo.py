# vetclinic/repositories/medical_repo.py
from vetclinic.models.medical import MedicalRecord, Prescription, Vaccination
from vetclinic.repositories.base import ClinicScopedRepository


class MedicalRecordRepository(ClinicScopedRepository[MedicalRecord]):
    model = MedicalRecord


class VaccinationRepository(ClinicScopedRepository[Vaccination]):
    model = Vaccination


class PrescriptionRepository(ClinicScopedRepository[Prescription]):
    model = Prescription
