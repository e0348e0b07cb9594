# vetclinic/routers/clinics.py
import uuid

from fastapi import APIRouter, Depends
from sqlmodel import Session

from vetclinic.core.auth import (
    require_clinic_admin,
    require_clinic_worker,
    require_portals,
)
from vetclinic.core.principal import Principal, StaffPrincipal
from vetclinic.database import get_session
from vetclinic.repositories.clinic_repo import ClinicRepository, MembershipRepository
from vetclinic.repositories.stats_repo import StatsRepository
from vetclinic.schemas.clinic import (
    ClinicDashboardStats,
    ClinicRead,
    MemberRead,
    MemberUpdate,
    MembershipRead,
)
from vetclinic.services.clinic_service import ClinicService

router = APIRouter(prefix="/clinics", tags=["Clinics"])

service = ClinicService(ClinicRepository(), MembershipRepository(), StatsRepository())

require_staff = require_portals("staff")


@router.get(
    "/memberships",
    response_model=list[MembershipRead],
)
def list_my_memberships(principal: StaffPrincipal = Depends(require_staff)):
    """Clinics the caller is an active staff member of, with their role."""
    return service.list_memberships(principal)


@router.get(
    "/current",
    response_model=ClinicRead,
)
def get_current_clinic(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.get_current_clinic(session, principal)


@router.get(
    "/current/stats",
    response_model=ClinicDashboardStats,
)
def get_dashboard_stats(
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    """
    Dashboard numbers for the active clinic:

      - total animals
      - appointments scheduled today
      - pending appointment requests (count + latest 5)
    """
    return service.get_dashboard_stats(session, principal)


# -------- Admin endpoints --------


@router.get(
    "/current/members",
    response_model=list[MemberRead],
)
def list_members(
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
):
    """All membership rows of the active clinic, suspended ones included."""
    return service.list_members(session, admin)


@router.patch(
    "/current/members/{user_id}",
    response_model=MemberRead,
)
def update_member(
    user_id: uuid.UUID,
    payload: MemberUpdate,
    session: Session = Depends(get_session),
    admin: StaffPrincipal = Depends(require_clinic_admin),
):
    """
    Change a member's role or suspend/reactivate them (admin only).
    Memberships are never deleted.
    """
    return service.update_member(session, admin, user_id, payload)
