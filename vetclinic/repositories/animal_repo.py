# vetclinic/repositories/animal_repo.py
from vetclinic.models.animal import Animal
from vetclinic.repositories.base import ClinicScopedRepository


class AnimalRepository(ClinicScopedRepository[Animal]):
    model = Animal
