# vetclinic/routers/receptionists.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from vetclinic.core.auth import require_clinic_admin
from vetclinic.core.identity import SupabaseIdentityProvider, get_identity_provider
from vetclinic.core.principal import StaffPrincipal
from vetclinic.database import get_session
from vetclinic.repositories.clinic_repo import MembershipRepository
from vetclinic.repositories.profile_repo import (
    ReceptionistRepository,
    TutorRepository,
    VeterinarianRepository,
)
from vetclinic.schemas.profile import (
    AccountUpdate,
    ActiveUpdate,
    ProvisionResult,
    ReceptionistCreate,
    ReceptionistRead,
)
from vetclinic.services.profile_service import ReceptionistService
from vetclinic.services.provisioning_service import ProvisioningService

router = APIRouter(prefix="/receptionists", tags=["Receptionists"])

receptionist_repo = ReceptionistRepository()
provisioning = ProvisioningService(
    MembershipRepository(),
    VeterinarianRepository(),
    receptionist_repo,
    TutorRepository(),
)
service = ReceptionistService(receptionist_repo, provisioning)


# Receptionist management is an admin screen only


@router.get(
    "",
    response_model=list[ReceptionistRead],
)
def list_receptionists(
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    skip: int = 0,
    limit: int = 100,
):
    return service.list_profiles(session, admin, skip, limit)


@router.get(
    "/{receptionist_id}",
    response_model=ReceptionistRead,
)
def get_receptionist(
    receptionist_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
):
    return service.get(session, admin, receptionist_id)


@router.post(
    "",
    response_model=ReceptionistRead,
    status_code=status.HTTP_201_CREATED,
)
def create_receptionist(
    payload: ReceptionistCreate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Create a receptionist together with their login.

    Initial password = CPF digits. If the login cannot be created the
    receptionist row is not kept.
    """
    return service.create(session, provider, admin, payload)


@router.patch(
    "/{receptionist_id}/active",
    response_model=ReceptionistRead,
)
def set_receptionist_active(
    receptionist_id: uuid.UUID,
    payload: ActiveUpdate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
):
    return service.set_active(session, admin, receptionist_id, payload)


@router.post(
    "/{receptionist_id}/account",
    response_model=ProvisionResult,
)
def create_receptionist_account(
    receptionist_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """Provision a login for a receptionist row that has none yet."""
    return provisioning.provision(session, provider, admin, "receptionist", receptionist_id)


@router.patch(
    "/{receptionist_id}/account",
    response_model=ReceptionistRead,
)
def update_receptionist_account(
    receptionist_id: uuid.UUID,
    payload: AccountUpdate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    return provisioning.update_account(
        session, provider, admin, "receptionist", receptionist_id, payload
    )
