# vetclinic/routers/tutors.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from vetclinic.core.auth import require_clinic_admin, require_clinic_worker, require_operator
from vetclinic.core.identity import SupabaseIdentityProvider, get_identity_provider
from vetclinic.core.principal import Principal, StaffPrincipal
from vetclinic.database import get_session
from vetclinic.repositories.clinic_repo import MembershipRepository
from vetclinic.repositories.profile_repo import (
    ReceptionistRepository,
    TutorRepository,
    VeterinarianRepository,
)
from vetclinic.schemas.profile import (
    AccountUpdate,
    ProvisionResult,
    TutorCreate,
    TutorRead,
    TutorUpdate,
)
from vetclinic.services.profile_service import TutorService
from vetclinic.services.provisioning_service import ProvisioningService

router = APIRouter(prefix="/tutors", tags=["Tutors"])

tutor_repo = TutorRepository()
provisioning = ProvisioningService(
    MembershipRepository(),
    VeterinarianRepository(),
    ReceptionistRepository(),
    tutor_repo,
)
service = TutorService(tutor_repo, provisioning)


@router.get(
    "",
    response_model=list[TutorRead],
)
def list_tutors(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
    skip: int = 0,
    limit: int = 100,
):
    """Tutors of the active clinic, ordered by name."""
    return service.list_profiles(session, principal, skip, limit)


@router.get(
    "/{tutor_id}",
    response_model=TutorRead,
)
def get_tutor(
    tutor_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.get(session, principal, tutor_id)


@router.post(
    "",
    response_model=TutorRead,
    status_code=status.HTTP_201_CREATED,
)
def create_tutor(
    payload: TutorCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Register a tutor (front desk).

    create_account=true also creates the tutor's login; that part is
    reserved for clinic admins.
    """
    return service.create(session, provider, principal, payload)


@router.patch(
    "/{tutor_id}",
    response_model=TutorRead,
)
def update_tutor(
    tutor_id: uuid.UUID,
    payload: TutorUpdate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    return service.update(session, principal, tutor_id, payload)


@router.delete(
    "/{tutor_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_tutor(
    tutor_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_operator),
):
    service.delete(session, principal, tutor_id)


@router.post(
    "/{tutor_id}/account",
    response_model=ProvisionResult,
)
def create_tutor_account(
    tutor_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """Provision a login for the tutor portal (initial password = CPF digits)."""
    return provisioning.provision(session, provider, admin, "tutor", tutor_id)


@router.patch(
    "/{tutor_id}/account",
    response_model=TutorRead,
)
def update_tutor_account(
    tutor_id: uuid.UUID,
    payload: AccountUpdate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """Change the e-mail and/or password of the tutor's login."""
    return provisioning.update_account(session, provider, admin, "tutor", tutor_id, payload)
