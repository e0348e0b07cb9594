# vetclinic/repositories/clinic_repo.py
import uuid

from sqlmodel import Session, select

from vetclinic.models.clinic import Clinic, ClinicUser, UserProfile


class ClinicRepository:
    """
    Data access layer for clinics.

    Responsibilities:
      - Pure DB operations (CRUD + queries)
      - No FastAPI, no HTTP, no business logic
    """

    def get_by_id(self, session: Session, clinic_id: uuid.UUID) -> Clinic | None:
        return session.get(Clinic, clinic_id)

    def get_many(self, session: Session, clinic_ids: list[uuid.UUID]) -> list[Clinic]:
        """Batch lookup used to enrich memberships with clinic names."""
        if not clinic_ids:
            return []
        stmt = select(Clinic).where(Clinic.id.in_(clinic_ids))
        return list(session.exec(stmt).all())

    def create(self, session: Session, clinic: Clinic) -> Clinic:
        session.add(clinic)
        session.flush()
        session.refresh(clinic)
        return clinic


class MembershipRepository:
    """
    Data access layer for clinic_users.

    Ordering for an identity's memberships is membership creation time,
    then clinic id, so "first membership" is stable across calls.
    """

    def list_active_for_user(
        self,
        session: Session,
        user_id: uuid.UUID,
        roles: set[str] | None = None,
    ) -> list[ClinicUser]:
        stmt = select(ClinicUser).where(
            ClinicUser.user_id == user_id,
            ClinicUser.is_active == True,  # noqa: E712
        )
        if roles:
            stmt = stmt.where(ClinicUser.role.in_(sorted(roles)))
        stmt = stmt.order_by(ClinicUser.created_at, ClinicUser.clinic_id)
        return list(session.exec(stmt).all())

    def get_active(
        self,
        session: Session,
        user_id: uuid.UUID,
        clinic_id: uuid.UUID,
    ) -> ClinicUser | None:
        stmt = select(ClinicUser).where(
            ClinicUser.user_id == user_id,
            ClinicUser.clinic_id == clinic_id,
            ClinicUser.is_active == True,  # noqa: E712
        )
        return session.exec(stmt).first()

    def get_in_clinic(
        self,
        session: Session,
        clinic_id: uuid.UUID,
        user_id: uuid.UUID,
    ) -> ClinicUser | None:
        """Membership row regardless of is_active (admin screens)."""
        stmt = select(ClinicUser).where(
            ClinicUser.clinic_id == clinic_id,
            ClinicUser.user_id == user_id,
        )
        return session.exec(stmt).first()

    def list_for_clinic(self, session: Session, clinic_id: uuid.UUID) -> list[ClinicUser]:
        stmt = (
            select(ClinicUser)
            .where(ClinicUser.clinic_id == clinic_id)
            .order_by(ClinicUser.created_at)
        )
        return list(session.exec(stmt).all())

    def save(self, session: Session, membership: ClinicUser) -> ClinicUser:
        session.add(membership)
        session.flush()
        session.refresh(membership)
        return membership


class UserProfileRepository:
    def get_by_id(self, session: Session, user_id: uuid.UUID) -> UserProfile | None:
        return session.get(UserProfile, user_id)

    def create(self, session: Session, profile: UserProfile) -> UserProfile:
        session.add(profile)
        session.flush()
        session.refresh(profile)
        return profile
