# vetclinic/services/clinic_service.py
import logging
import uuid
from datetime import date, datetime, time, timedelta

from sqlmodel import Session

from vetclinic.core.errors import AuthorizationError, NotFoundError, ValidationError
from vetclinic.core.principal import Principal, StaffPrincipal
from vetclinic.models.clinic import Clinic, ClinicUser
from vetclinic.repositories.clinic_repo import ClinicRepository, MembershipRepository
from vetclinic.repositories.stats_repo import StatsRepository
from vetclinic.schemas.appointment import AppointmentRequestRead
from vetclinic.schemas.clinic import ClinicDashboardStats, MemberUpdate, MembershipRead

logger = logging.getLogger(__name__)


class ClinicService:
    """
    The active clinic, its members and its dashboard.
    """

    def __init__(
        self,
        clinic_repo: ClinicRepository,
        membership_repo: MembershipRepository,
        stats_repo: StatsRepository,
    ):
        self.clinic_repo = clinic_repo
        self.membership_repo = membership_repo
        self.stats_repo = stats_repo

    def list_memberships(self, principal: StaffPrincipal) -> list[MembershipRead]:
        return [
            MembershipRead(clinic_id=m.clinic_id, clinic_name=m.clinic_name, role=m.role)
            for m in principal.memberships
        ]

    def get_current_clinic(self, session: Session, principal: Principal) -> Clinic:
        clinic = self.clinic_repo.get_by_id(session, principal.clinic_id)
        if clinic is None:
            raise NotFoundError("Clinic")
        return clinic

    # -------- Members (admin) --------

    def list_members(self, session: Session, admin: StaffPrincipal) -> list[ClinicUser]:
        return self.membership_repo.list_for_clinic(session, admin.clinic_id)

    def update_member(
        self,
        session: Session,
        admin: StaffPrincipal,
        user_id: uuid.UUID,
        payload: MemberUpdate,
    ) -> ClinicUser:
        """
        Suspend/reactivate a member or change their role.

        Rules:
          - only rows of the active clinic
          - an admin cannot suspend themself
          - only a super_admin can hand out super_admin
          - only a super_admin can change a super_admin's row
        """
        member = self.membership_repo.get_in_clinic(session, admin.clinic_id, user_id)
        if member is None:
            raise NotFoundError("Member")

        if user_id == admin.identity.id and payload.is_active is False:
            raise ValidationError("You cannot suspend your own membership")

        if admin.role != "super_admin":
            if payload.role == "super_admin":
                raise AuthorizationError("Only a super admin can grant super_admin")
            if member.role == "super_admin":
                raise AuthorizationError("Only a super admin can change a super admin")

        if payload.role is not None:
            member.role = payload.role
        if payload.is_active is not None:
            member.is_active = payload.is_active

        self.membership_repo.save(session, member)
        session.commit()
        session.refresh(member)

        logger.info(
            f"Membership changed: clinic={admin.clinic_id} user={user_id} "
            f"role={member.role} active={member.is_active} by={admin.identity.id}"
        )
        return member

    # -------- Dashboard --------

    def get_dashboard_stats(
        self,
        session: Session,
        principal: Principal,
        day: date | None = None,
        latest_n_requests: int = 5,
    ) -> ClinicDashboardStats:
        # Appointment times are clinic-local, so "today" is the server's local day
        if day is None:
            day = date.today()
        start = datetime.combine(day, time.min)
        end = start + timedelta(days=1)

        clinic_id = principal.clinic_id

        latest = self.stats_repo.latest_pending_requests(
            session, clinic_id, limit=latest_n_requests
        )

        return ClinicDashboardStats(
            total_animals=self.stats_repo.count_animals(session, clinic_id),
            today_appointments=self.stats_repo.count_appointments_between(
                session, clinic_id, start, end
            ),
            pending_requests=self.stats_repo.count_pending_requests(session, clinic_id),
            latest_pending_requests=[
                AppointmentRequestRead.model_validate(r) for r in latest
            ],
        )
