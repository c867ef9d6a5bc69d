"""Row-level helpers for the farm database.

None of these commit. Callers (dragon_farm.services.farm_db) open the
session and own the transaction with ``session.begin()``.
"""

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import joinedload
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from dragon_farm.domain.breeding_rules import (
    BreedingStatus,
    FailureReason,
    check_failure_reason,
    check_transition,
)
from dragon_farm.domain.genotype import Genotype
from dragon_farm.domain.traits import Trait
from dragon_farm.models.schema_models import (
    BreedingRequestSchema,
    DragonSchema,
    DragonTraitSchema,
)
from dragon_farm.models.schemas import (
    BreedingRequestTable,
    DragonTable,
    DragonTraitTable,
    TraitTable,
)


class CreateData:
    @staticmethod
    async def add_trait_data(trait: Trait, session: AsyncSession):
        """Add one trait definition

        Args:
            trait (Trait): Trait with dominant and recessive allele symbols
        """
        session.add(
            TraitTable(
                trait_id=trait.trait_id,
                name=trait.name,
                dominant_allele=trait.dominant_allele,
                recessive_allele=trait.recessive_allele,
            )
        )

    @staticmethod
    async def add_dragon_data(dragon: DragonSchema, session: AsyncSession):
        """Add the dragon row only. The genotype rows are added separately.

        Args:
            dragon (DragonSchema): Dragon with its derived rarity score
        """
        session.add(
            DragonTable(
                dragon_id=dragon.dragon_id,
                name=dragon.name,
                sex=dragon.sex.value,
                hatched_at=dragon.hatched_at,
                rarity_score=dragon.rarity_score,
            )
        )

    @staticmethod
    async def add_genotype_data(dragon_id: UUID, genotype: Genotype, session: AsyncSession):
        """Add one dragon_trait row per trait

        Args:
            dragon_id (UUID): Owner of the genotype
            genotype (Genotype): trait_id -> (allele_a, allele_b)
        """
        session.add_all(
            [
                DragonTraitTable(
                    dragon_id=dragon_id,
                    trait_id=trait_id,
                    allele_a=allele_a,
                    allele_b=allele_b,
                )
                for trait_id, (allele_a, allele_b) in sorted(genotype.items())
            ]
        )

    @staticmethod
    async def add_breeding_request_data(request: BreedingRequestSchema, session: AsyncSession):
        session.add(
            BreedingRequestTable(
                request_id=request.request_id,
                parent_a_id=request.parent_a_id,
                parent_b_id=request.parent_b_id,
                requested_at=request.requested_at,
                status=request.status.value,
                failure_reason=request.failure_reason.value if request.failure_reason else None,
                offspring_dragon_id=request.offspring_dragon_id,
                offspring_name=request.offspring_name,
                rng_seed=request.rng_seed,
                completed_at=request.completed_at,
            )
        )


class ReadData:
    @staticmethod
    async def read_trait_data(session: AsyncSession) -> List[Trait]:
        """Read every trait definition, ordered by trait id

        Returns:
            List[Trait]: Trait catalog
        """
        result = await session.execute(select(TraitTable).order_by(TraitTable.trait_id))
        return [Trait.model_validate(row) for row in result.scalars().all()]

    @staticmethod
    async def read_dragon_data(dragon_id: UUID, session: AsyncSession) -> Optional[DragonSchema]:
        """Read dragon data and its genotype rows

        Args:
            dragon_id (UUID): To identify the dragon

        Returns:
            DragonSchema: Dragon with genotype, None if it does not exist
        """
        stmt = (
            select(DragonTable)
            .options(joinedload(DragonTable.genotype))
            .where(DragonTable.dragon_id == dragon_id)
        )
        result = await session.execute(stmt)
        result = result.unique().scalars().first()

        if result is None:
            return None
        return DragonSchema.model_validate(result)

    @staticmethod
    async def read_all_dragon_data(session: AsyncSession) -> List[DragonSchema]:
        stmt = (
            select(DragonTable)
            .options(joinedload(DragonTable.genotype))
            .order_by(DragonTable.hatched_at, DragonTable.dragon_id)
        )
        result = await session.execute(stmt)
        return [DragonSchema.model_validate(row) for row in result.unique().scalars().all()]

    @staticmethod
    async def read_genotype_data(dragon_id: UUID, session: AsyncSession) -> List[DragonTraitSchema]:
        """Read the genotype rows of a dragon

        Args:
            dragon_id (UUID): To identify the dragon

        Returns:
            List[DragonTraitSchema]: One row per trait, empty if the dragon has no genotype
        """
        stmt = (
            select(DragonTraitTable)
            .where(DragonTraitTable.dragon_id == dragon_id)
            .order_by(DragonTraitTable.trait_id)
        )
        result = await session.execute(stmt)
        return [DragonTraitSchema.model_validate(row) for row in result.scalars().all()]

    @staticmethod
    async def read_breeding_request_data(request_id: UUID, session: AsyncSession) -> Optional[BreedingRequestSchema]:
        stmt = select(BreedingRequestTable).where(BreedingRequestTable.request_id == request_id)
        result = await session.execute(stmt)
        result = result.scalars().first()

        if result is None:
            return None
        return BreedingRequestSchema.model_validate(result)

    @staticmethod
    async def read_breeding_request_data_by_status(
        status: BreedingStatus, session: AsyncSession
    ) -> List[BreedingRequestSchema]:
        """Read requests in the given status, oldest first

        Args:
            status (BreedingStatus): Status to filter on

        Returns:
            List[BreedingRequestSchema]: Matching requests ordered by requested_at
        """
        stmt = (
            select(BreedingRequestTable)
            .where(BreedingRequestTable.status == status.value)
            .order_by(BreedingRequestTable.requested_at, BreedingRequestTable.request_id)
        )
        result = await session.execute(stmt)
        return [BreedingRequestSchema.model_validate(row) for row in result.scalars().all()]


class UpdateData:
    @staticmethod
    async def update_dragon_rarity_score(dragon_id: UUID, rarity_score: float, session: AsyncSession) -> bool:
        stmt = select(DragonTable).where(DragonTable.dragon_id == dragon_id).with_for_update()
        result = await session.execute(stmt)
        result = result.scalars().first()

        if result is None:
            return False

        result.rarity_score = rarity_score
        return True

    @staticmethod
    async def update_breeding_request_status(
        request_id: UUID,
        session: AsyncSession,
        expected_status: BreedingStatus,
        status: BreedingStatus,
        failure_reason: Optional[FailureReason] = None,
        offspring_dragon_id: Optional[UUID] = None,
        completed_at: Optional[datetime] = None,
    ) -> Optional[BreedingRequestSchema]:
        """Move a breeding request to a new status if it is still in the expected one

        Args:
            request_id (UUID): To identify the request
            expected_status (BreedingStatus): Status the request must currently have
            status (BreedingStatus): Status to move to
            failure_reason (FailureReason, optional): Required when status is Failed
            offspring_dragon_id (UUID, optional): Hatchling created by a Completed request
            completed_at (datetime, optional): Time the request reached a terminal status

        Returns:
            BreedingRequestSchema: The updated request, None if missing or not in expected_status
        """
        check_transition(expected_status, status)
        check_failure_reason(status, failure_reason)

        stmt = (
            select(BreedingRequestTable)
            .where(BreedingRequestTable.request_id == request_id)
            .with_for_update()
        )
        result = await session.execute(stmt)
        result = result.scalars().first()

        if result is None or result.status != expected_status.value:
            return None

        result.status = status.value
        result.failure_reason = failure_reason.value if failure_reason else None
        if offspring_dragon_id is not None:
            result.offspring_dragon_id = offspring_dragon_id
        if completed_at is not None:
            result.completed_at = completed_at
        return BreedingRequestSchema.model_validate(result)
