# vetclinic/routers/veterinarians.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from vetclinic.core.auth import get_principal, require_clinic_admin
from vetclinic.core.identity import SupabaseIdentityProvider, get_identity_provider
from vetclinic.core.principal import Principal, StaffPrincipal, TutorPrincipal
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
    VeterinarianCreate,
    VeterinarianRead,
    VeterinarianUpdate,
)
from vetclinic.services.profile_service import VeterinarianService
from vetclinic.services.provisioning_service import ProvisioningService

router = APIRouter(prefix="/veterinarians", tags=["Veterinarians"])

vet_repo = VeterinarianRepository()
provisioning = ProvisioningService(
    MembershipRepository(),
    vet_repo,
    ReceptionistRepository(),
    TutorRepository(),
)
service = VeterinarianService(vet_repo, provisioning)


@router.get(
    "",
    response_model=list[VeterinarianRead],
)
def list_veterinarians(
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_principal),
    is_active: bool | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    Veterinarians of the active clinic, ordered by name.

    Open to every portal; tutors only see active veterinarians.
    """
    if isinstance(principal, TutorPrincipal):
        is_active = True
    return service.list_profiles(session, principal, skip, limit, is_active=is_active)


@router.get(
    "/{vet_id}",
    response_model=VeterinarianRead,
)
def get_veterinarian(
    vet_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_principal),
):
    return service.get(session, principal, vet_id)


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=VeterinarianRead,
    status_code=status.HTTP_201_CREATED,
)
def create_veterinarian(
    payload: VeterinarianCreate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Register a veterinarian. With create_account=true the access account
    is created as well (initial password = CPF digits).
    """
    return service.create(session, provider, admin, payload)


@router.patch(
    "/{vet_id}",
    response_model=VeterinarianRead,
)
def update_veterinarian(
    vet_id: uuid.UUID,
    payload: VeterinarianUpdate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
):
    return service.update(session, admin, vet_id, payload)


@router.patch(
    "/{vet_id}/active",
    response_model=VeterinarianRead,
)
def set_veterinarian_active(
    vet_id: uuid.UUID,
    payload: ActiveUpdate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
):
    """Inactive veterinarians can no longer sign in to their portal."""
    return service.set_active(session, admin, vet_id, payload)


@router.delete(
    "/{vet_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_veterinarian(
    vet_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
):
    service.delete(session, admin, vet_id)


@router.post(
    "/{vet_id}/account",
    response_model=ProvisionResult,
)
def create_veterinarian_account(
    vet_id: uuid.UUID,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """
    Provision a login for a data-only veterinarian.

    - 409 if the veterinarian already has an account.
    - 400 if e-mail or CPF is missing.
    """
    return provisioning.provision(session, provider, admin, "veterinarian", vet_id)


@router.patch(
    "/{vet_id}/account",
    response_model=VeterinarianRead,
)
def update_veterinarian_account(
    vet_id: uuid.UUID,
    payload: AccountUpdate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
    provider: SupabaseIdentityProvider = Depends(get_identity_provider),
):
    """Change the e-mail and/or password of the linked login."""
    return provisioning.update_account(
        session, provider, admin, "veterinarian", vet_id, payload
    )
