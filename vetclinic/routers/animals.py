# vetclinic/routers/animals.py
import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from vetclinic.core.auth import get_principal, require_clinic_worker
from vetclinic.core.principal import Principal
from vetclinic.database import get_session
from vetclinic.repositories.animal_repo import AnimalRepository
from vetclinic.repositories.profile_repo import TutorRepository
from vetclinic.schemas.animal import AnimalCreate, AnimalRead, AnimalUpdate
from vetclinic.services.animal_service import AnimalService

router = APIRouter(prefix="/animals", tags=["Animals"])

service = AnimalService(AnimalRepository(), TutorRepository())


@router.get(
    "",
    response_model=list[AnimalRead],
)
def list_animals(
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_principal),
    tutor_id: uuid.UUID | None = None,
    species: str | None = None,
    skip: int = 0,
    limit: int = 100,
):
    """
    Animals of the active clinic, ordered by name.
    In the tutor portal only the caller's own animals are returned.
    """
    return service.list_animals(session, principal, tutor_id, species, skip, limit)


@router.get(
    "/{animal_id}",
    response_model=AnimalRead,
)
def get_animal(
    animal_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(get_principal),
):
    return service.get_animal(session, principal, animal_id)


@router.post(
    "",
    response_model=AnimalRead,
    status_code=status.HTTP_201_CREATED,
)
def create_animal(
    payload: AnimalCreate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.create_animal(session, principal, payload)


@router.patch(
    "/{animal_id}",
    response_model=AnimalRead,
)
def update_animal(
    animal_id: uuid.UUID,
    payload: AnimalUpdate,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    return service.update_animal(session, principal, animal_id, payload)


@router.delete(
    "/{animal_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_animal(
    animal_id: uuid.UUID,
    session: Session = Depends(get_session),
    principal: Principal = Depends(require_clinic_worker),
):
    service.delete_animal(session, principal, animal_id)
