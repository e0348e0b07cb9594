# vetclinic/services/profile_service.py
import logging
import uuid

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from vetclinic.core.errors import InvalidTransitionError, NotFoundError, ValidationError
from vetclinic.core.identity import SupabaseIdentityProvider
from vetclinic.core.principal import Principal
from vetclinic.models.profile import Receptionist, Tutor, Veterinarian
from vetclinic.repositories.profile_repo import (
    ReceptionistRepository,
    TutorRepository,
    VeterinarianRepository,
)
from vetclinic.schemas.profile import (
    ActiveUpdate,
    ReceptionistCreate,
    TutorCreate,
    TutorUpdate,
    VeterinarianCreate,
    VeterinarianUpdate,
)
from vetclinic.services.provisioning_service import ProvisioningService

logger = logging.getLogger(__name__)


class _ProfileService:
    """
    Clinic-scoped CRUD shared by the three role-profile screens.

    Creating a profile together with its access account is all-or-nothing:
    when provisioning fails the new row is deleted again.
    """

    kind: str
    label: str

    def __init__(self, repo, provisioning: ProvisioningService):
        self.repo = repo
        self.provisioning = provisioning

    def list_profiles(
        self,
        session: Session,
        principal: Principal,
        skip: int = 0,
        limit: int = 100,
        **filters,
    ):
        return self.repo.list_for_clinic(
            session,
            principal.clinic_id,
            order_by=self.repo.model.name,
            skip=skip,
            limit=limit,
            **filters,
        )

    def get(self, session: Session, principal: Principal, profile_id: uuid.UUID):
        profile = self.repo.get(session, principal.clinic_id, profile_id)
        if profile is None:
            raise NotFoundError(self.label)
        return profile

    def delete(self, session: Session, principal: Principal, profile_id: uuid.UUID) -> None:
        """
        Remove the profile row. A linked identity is left in place; without
        the profile it can no longer enter this portal.
        """
        profile = self.get(session, principal, profile_id)
        try:
            self.repo.delete(session, profile)
            session.commit()
        except IntegrityError:
            session.rollback()
            raise InvalidTransitionError(
                f"{self.label} still has appointments or records and cannot be deleted"
            )
        logger.info(f"Deleted {self.kind} {profile_id} in clinic {principal.clinic_id}")

    def _update(self, session: Session, profile, data: dict):
        for key, value in data.items():
            setattr(profile, key, value)
        self.repo.add(session, profile)
        session.commit()
        session.refresh(profile)
        return profile

    def _create(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        principal: Principal,
        profile,
        with_account: bool,
    ):
        if with_account:
            self.provisioning.ensure_admin(session, principal, principal.clinic_id)
            if not profile.email or not profile.cpf:
                raise ValidationError(
                    "E-mail and CPF are required to create an access account"
                )

        profile = self.repo.add(session, profile)
        session.commit()
        session.refresh(profile)

        if not with_account:
            return profile

        try:
            self.provisioning.provision_profile(
                session, provider, principal, self.kind, profile
            )
        except HTTPException as e:
            logger.warning(
                f"Account creation for new {self.kind} {profile.id} failed "
                f"({e.detail}); removing the profile"
            )
            session.rollback()
            self.repo.delete(session, profile)
            session.commit()
            raise

        session.refresh(profile)
        return profile


class VeterinarianService(_ProfileService):
    kind = "veterinarian"
    label = "Veterinarian"

    def __init__(self, repo: VeterinarianRepository, provisioning: ProvisioningService):
        super().__init__(repo, provisioning)

    def create(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        principal: Principal,
        payload: VeterinarianCreate,
    ) -> Veterinarian:
        vet = Veterinarian(
            clinic_id=principal.clinic_id,
            **payload.model_dump(exclude={"create_account"}),
        )
        return self._create(session, provider, principal, vet, payload.create_account)

    def update(
        self,
        session: Session,
        principal: Principal,
        vet_id: uuid.UUID,
        payload: VeterinarianUpdate,
    ) -> Veterinarian:
        vet = self.get(session, principal, vet_id)
        data = payload.model_dump(exclude_unset=True)
        if "crmv" in data and data["crmv"] is None:
            raise ValidationError("crmv cannot be empty")
        return self._update(session, vet, data)

    def set_active(
        self,
        session: Session,
        principal: Principal,
        vet_id: uuid.UUID,
        payload: ActiveUpdate,
    ) -> Veterinarian:
        vet = self.get(session, principal, vet_id)
        vet = self._update(session, vet, {"is_active": payload.is_active})
        logger.info(f"Veterinarian {vet_id} active={payload.is_active}")
        return vet


class ReceptionistService(_ProfileService):
    kind = "receptionist"
    label = "Receptionist"

    def __init__(self, repo: ReceptionistRepository, provisioning: ProvisioningService):
        super().__init__(repo, provisioning)

    def create(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        principal: Principal,
        payload: ReceptionistCreate,
    ) -> Receptionist:
        receptionist = Receptionist(
            clinic_id=principal.clinic_id,
            name=payload.name,
            email=str(payload.email),
            cpf=payload.cpf,
            phone=payload.phone,
        )
        return self._create(session, provider, principal, receptionist, True)

    def set_active(
        self,
        session: Session,
        principal: Principal,
        receptionist_id: uuid.UUID,
        payload: ActiveUpdate,
    ) -> Receptionist:
        receptionist = self.get(session, principal, receptionist_id)
        receptionist = self._update(session, receptionist, {"is_active": payload.is_active})
        logger.info(f"Receptionist {receptionist_id} active={payload.is_active}")
        return receptionist


class TutorService(_ProfileService):
    kind = "tutor"
    label = "Tutor"

    def __init__(self, repo: TutorRepository, provisioning: ProvisioningService):
        super().__init__(repo, provisioning)

    def create(
        self,
        session: Session,
        provider: SupabaseIdentityProvider,
        principal: Principal,
        payload: TutorCreate,
    ) -> Tutor:
        tutor = Tutor(
            clinic_id=principal.clinic_id,
            **payload.model_dump(exclude={"create_account"}),
        )
        return self._create(session, provider, principal, tutor, payload.create_account)

    def update(
        self,
        session: Session,
        principal: Principal,
        tutor_id: uuid.UUID,
        payload: TutorUpdate,
    ) -> Tutor:
        tutor = self.get(session, principal, tutor_id)
        return self._update(session, tutor, payload.model_dump(exclude_unset=True))
