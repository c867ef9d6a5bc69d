import logging
from datetime import datetime
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from uuid6 import uuid7

from dragon_farm.authentication.basic_authentication import any_role, keeper_role
from dragon_farm.converter import DataConverter
from dragon_farm.dependencies import get_converter, get_coordinator
from dragon_farm.domain.errors import DataIntegrityError
from dragon_farm.models.basic_authentication_models import UserModel
from dragon_farm.models.dc_models import (
    DragonIntakeModel,
    DragonModel,
    PhenotypeEntryModel,
    TraitModel,
)
from dragon_farm.services.breeding_coordinator import BreedingCoordinator

dragon_router = APIRouter()


async def read_dragon_or_404(coordinator: BreedingCoordinator, dragon_id: UUID):
    dragon = await coordinator.farm_db.read_dragon(dragon_id)
    if dragon is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Dragon {dragon_id} not found",
        )
    return dragon


class TraitAPI:
    @staticmethod
    @dragon_router.get("/traits", response_model=List[TraitModel])
    async def get_traits(
        user_data: UserModel = Depends(any_role),
        coordinator: BreedingCoordinator = Depends(get_coordinator),
        converter: DataConverter = Depends(get_converter),
    ):
        return [converter.convert_trait_to_trait_model(trait) for trait in coordinator.registry.all_traits()]


class DragonAPI:
    @staticmethod
    @dragon_router.get("/dragons", response_model=List[DragonModel])
    async def get_dragons(
        user_data: UserModel = Depends(any_role),
        coordinator: BreedingCoordinator = Depends(get_coordinator),
        converter: DataConverter = Depends(get_converter),
    ):
        dragons = await coordinator.farm_db.read_all_dragons()
        return [converter.convert_dragonschema_to_dragonmodel(dragon) for dragon in dragons]

    @staticmethod
    @dragon_router.get("/dragons/{dragon_id}", response_model=DragonModel)
    async def get_dragon(
        dragon_id: UUID,
        user_data: UserModel = Depends(any_role),
        coordinator: BreedingCoordinator = Depends(get_coordinator),
        converter: DataConverter = Depends(get_converter),
    ):
        dragon = await read_dragon_or_404(coordinator, dragon_id)
        return converter.convert_dragonschema_to_dragonmodel(dragon)

    @staticmethod
    @dragon_router.get("/dragons/{dragon_id}/phenotype", response_model=List[PhenotypeEntryModel])
    async def get_phenotype(
        dragon_id: UUID,
        user_data: UserModel = Depends(any_role),
        coordinator: BreedingCoordinator = Depends(get_coordinator),
        converter: DataConverter = Depends(get_converter),
    ):
        dragon = await read_dragon_or_404(coordinator, dragon_id)
        return converter.convert_dragonschema_to_phenotype(dragon, coordinator.engine)

    @staticmethod
    @dragon_router.post("/dragons", response_model=DragonModel, status_code=status.HTTP_201_CREATED)
    async def add_dragon(
        intake: DragonIntakeModel,
        user_data: UserModel = Depends(keeper_role),
        coordinator: BreedingCoordinator = Depends(get_coordinator),
        converter: DataConverter = Depends(get_converter),
    ):
        """Farm intake of a dragon with a known genotype.

        The rarity score is derived from the genotype; clients cannot set it.
        """
        try:
            genotype = converter.convert_intake_to_genotype(intake)
            dragon = await coordinator.genotype_store.hatch(
                name=intake.name,
                sex=intake.sex,
                genotype=genotype,
                hatched_at=datetime.now(),
                dragon_id=uuid7(),
            )
        except DataIntegrityError as e:
            logging.warning(f"Rejected intake of {intake.name} by {user_data.username}: {e}")
            raise HTTPException(
                status_code=422,
                detail=str(e),
            )
        return converter.convert_dragonschema_to_dragonmodel(dragon)
