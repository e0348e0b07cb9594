# vetclinic/services/animal_service.py
import uuid

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from vetclinic.core.errors import InvalidTransitionError, NotFoundError
from vetclinic.core.principal import Principal, TutorPrincipal
from vetclinic.models.animal import Animal
from vetclinic.repositories.animal_repo import AnimalRepository
from vetclinic.repositories.profile_repo import TutorRepository
from vetclinic.schemas.animal import AnimalCreate, AnimalUpdate


class AnimalService:
    """
    Patients of the active clinic.

    A tutor principal only ever sees their own animals; every other
    principal sees the whole clinic.
    """

    def __init__(self, animal_repo: AnimalRepository, tutor_repo: TutorRepository):
        self.animal_repo = animal_repo
        self.tutor_repo = tutor_repo

    def list_animals(
        self,
        session: Session,
        principal: Principal,
        tutor_id: uuid.UUID | None = None,
        species: str | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[Animal]:
        if isinstance(principal, TutorPrincipal):
            tutor_id = principal.profile.id
        return self.animal_repo.list_for_clinic(
            session,
            principal.clinic_id,
            order_by=Animal.name,
            skip=skip,
            limit=limit,
            tutor_id=tutor_id,
            species=species,
        )

    def get_animal(
        self,
        session: Session,
        principal: Principal,
        animal_id: uuid.UUID,
    ) -> Animal:
        animal = self.animal_repo.get(session, principal.clinic_id, animal_id)
        if animal is None:
            raise NotFoundError("Animal")
        if isinstance(principal, TutorPrincipal) and animal.tutor_id != principal.profile.id:
            raise NotFoundError("Animal")
        return animal

    def create_animal(
        self,
        session: Session,
        principal: Principal,
        payload: AnimalCreate,
    ) -> Animal:
        # Owner must be a tutor of the same clinic
        if self.tutor_repo.get(session, principal.clinic_id, payload.tutor_id) is None:
            raise NotFoundError("Tutor")

        animal = Animal(clinic_id=principal.clinic_id, **payload.model_dump())
        animal = self.animal_repo.add(session, animal)
        session.commit()
        session.refresh(animal)
        return animal

    def update_animal(
        self,
        session: Session,
        principal: Principal,
        animal_id: uuid.UUID,
        payload: AnimalUpdate,
    ) -> Animal:
        animal = self.get_animal(session, principal, animal_id)
        for key, value in payload.model_dump(exclude_unset=True).items():
            setattr(animal, key, value)
        self.animal_repo.add(session, animal)
        session.commit()
        session.refresh(animal)
        return animal

    def delete_animal(
        self,
        session: Session,
        principal: Principal,
        animal_id: uuid.UUID,
    ) -> None:
        animal = self.get_animal(session, principal, animal_id)
        try:
            self.animal_repo.delete(session, animal)
            session.commit()
        except IntegrityError:
            session.rollback()
            raise InvalidTransitionError("Animal still has linked records")
