# vetclinic/repositories/profile_repo.py
import uuid

from sqlmodel import Session, select

from vetclinic.models.profile import Receptionist, Tutor, Veterinarian
from vetclinic.repositories.base import ClinicScopedRepository


class _RoleProfileRepository(ClinicScopedRepository):
    """
    Shared lookups for the three role-profile tables.

    `get_by_user_id` is the only unscoped read: it is how a portal login
    discovers which clinic the identity belongs to.
    """

    def get_by_user_id(self, session: Session, user_id: uuid.UUID):
        stmt = select(self.model).where(self.model.user_id == user_id)
        return session.exec(stmt).first()

    def link_identity(self, session: Session, profile, user_id: uuid.UUID):
        """Write the identity back-reference onto a data-only profile."""
        profile.user_id = user_id
        return self.add(session, profile)


class VeterinarianRepository(_RoleProfileRepository):
    model = Veterinarian


class ReceptionistRepository(_RoleProfileRepository):
    model = Receptionist


class TutorRepository(_RoleProfileRepository):
    model = Tutor
