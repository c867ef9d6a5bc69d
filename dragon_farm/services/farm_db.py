"""DB service layer for the farm.

- Routers and the breeding coordinator never touch DB sessions directly; they call this module.
- This layer owns session/transaction boundaries.
- Use CRUD helpers that do NOT commit inside session.begin().
- SQLAlchemy failures leave as PersistenceError; a second genotype write as DuplicateGenotypeError.
"""

import functools
import logging
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from dragon_farm.crud import CreateData, ReadData, UpdateData
from dragon_farm.domain.breeding_rules import BreedingStatus, FailureReason
from dragon_farm.domain.errors import (
    DragonNotFoundError,
    DuplicateGenotypeError,
    InvalidTransitionError,
    PersistenceError,
)
from dragon_farm.domain.genotype import Genotype
from dragon_farm.domain.traits import Trait
from dragon_farm.models.schema_models import (
    BreedingRequestSchema,
    DragonSchema,
    DragonTraitSchema,
)
from dragon_farm.models.schemas import Base


def translate_db_errors(description: str):
    """Turn SQLAlchemy errors raised by a FarmDB method into PersistenceError."""

    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except SQLAlchemyError as e:
                logging.error(f"Failed to {description}: {e}")
                raise PersistenceError(f"Failed to {description}") from e

        return wrapper

    return decorator


class FarmDB:
    """Persistence collaborator for dragons, genotypes, traits and breeding requests."""

    def __init__(self, Session: async_sessionmaker):
        self.Session = Session

    @translate_db_errors("create tables")
    async def create_tables(self) -> None:
        async with self.Session() as session:
            async with session.begin():
                connection = await session.connection()
                await connection.run_sync(Base.metadata.create_all)

    # ==== Traits ==============================================================

    @translate_db_errors("read trait data")
    async def read_traits(self) -> List[Trait]:
        async with self.Session() as session:
            return await ReadData.read_trait_data(session)

    @translate_db_errors("create trait data")
    async def create_traits(self, traits: List[Trait]) -> None:
        async with self.Session() as session:
            async with session.begin():
                for trait in traits:
                    await CreateData.add_trait_data(trait, session)

    # ==== Dragons and genotypes ===============================================

    @translate_db_errors("read dragon data")
    async def read_dragon(self, dragon_id: UUID) -> Optional[DragonSchema]:
        async with self.Session() as session:
            return await ReadData.read_dragon_data(dragon_id, session)

    @translate_db_errors("read all dragon data")
    async def read_all_dragons(self) -> List[DragonSchema]:
        async with self.Session() as session:
            return await ReadData.read_all_dragon_data(session)

    @translate_db_errors("read genotype data")
    async def read_genotype(self, dragon_id: UUID) -> List[DragonTraitSchema]:
        async with self.Session() as session:
            return await ReadData.read_genotype_data(dragon_id, session)

    @translate_db_errors("create genotype data")
    async def create_genotype(self, dragon_id: UUID, genotype: Genotype, rarity_score: float) -> None:
        """Write the genotype of an existing dragon. Write-once.

        The dragon's rarity score is updated in the same transaction so it
        always matches the stored genotype.

        Raises:
            DragonNotFoundError: The dragon does not exist
            DuplicateGenotypeError: The dragon already has genotype rows
        """
        try:
            async with self.Session() as session:
                async with session.begin():
                    existing = await ReadData.read_genotype_data(dragon_id, session)
                    if existing:
                        raise DuplicateGenotypeError(dragon_id)
                    if not await UpdateData.update_dragon_rarity_score(dragon_id, rarity_score, session):
                        raise DragonNotFoundError(dragon_id)
                    await CreateData.add_genotype_data(dragon_id, genotype, session)
        except IntegrityError as e:
            # Lost a race with a concurrent writer on the (dragon_id, trait_id) key.
            raise DuplicateGenotypeError(dragon_id) from e

    @translate_db_errors("create dragon data")
    async def create_dragon(
        self,
        dragon: DragonSchema,
        genotype: Genotype,
        completed_request_id: Optional[UUID] = None,
    ) -> DragonSchema:
        """Create a dragon and its genotype in one transaction.

        When completed_request_id is given, the breeding request that produced
        the dragon is moved Breeding -> Completed in the same transaction, so
        either all three writes are visible or none is.

        Raises:
            DuplicateGenotypeError: A dragon with this id already exists
            InvalidTransitionError: The request is no longer Breeding
        """
        try:
            async with self.Session() as session:
                async with session.begin():
                    await CreateData.add_dragon_data(dragon, session)
                    await CreateData.add_genotype_data(dragon.dragon_id, genotype, session)
                    if completed_request_id is not None:
                        updated = await UpdateData.update_breeding_request_status(
                            completed_request_id,
                            session,
                            expected_status=BreedingStatus.breeding,
                            status=BreedingStatus.completed,
                            offspring_dragon_id=dragon.dragon_id,
                            completed_at=dragon.hatched_at,
                        )
                        if updated is None:
                            raise InvalidTransitionError(
                                f"Breeding request {completed_request_id} is no longer Breeding"
                            )
        except IntegrityError as e:
            raise DuplicateGenotypeError(dragon.dragon_id) from e

        return dragon

    # ==== Breeding requests ===================================================

    @translate_db_errors("create breeding request data")
    async def create_breeding_request(self, request: BreedingRequestSchema) -> BreedingRequestSchema:
        async with self.Session() as session:
            async with session.begin():
                await CreateData.add_breeding_request_data(request, session)
        return request

    @translate_db_errors("read breeding request data")
    async def read_breeding_request(self, request_id: UUID) -> Optional[BreedingRequestSchema]:
        async with self.Session() as session:
            return await ReadData.read_breeding_request_data(request_id, session)

    @translate_db_errors("read queued breeding requests")
    async def read_queued_breeding_requests(self) -> List[BreedingRequestSchema]:
        async with self.Session() as session:
            return await ReadData.read_breeding_request_data_by_status(BreedingStatus.queued, session)

    @translate_db_errors("read in-flight breeding requests")
    async def read_in_flight_breeding_requests(self) -> List[BreedingRequestSchema]:
        """Requests in Validating or Breeding, oldest first."""
        async with self.Session() as session:
            validating = await ReadData.read_breeding_request_data_by_status(BreedingStatus.validating, session)
            breeding = await ReadData.read_breeding_request_data_by_status(BreedingStatus.breeding, session)
        return sorted(validating + breeding, key=lambda request: (request.requested_at, request.request_id))

    @translate_db_errors("update breeding request status")
    async def transition_breeding_request(
        self,
        request_id: UUID,
        expected_status: BreedingStatus,
        status: BreedingStatus,
        failure_reason: Optional[FailureReason] = None,
        completed_at: Optional[datetime] = None,
    ) -> Optional[BreedingRequestSchema]:
        """Compare-and-set the status of a request.

        Returns:
            BreedingRequestSchema: The updated request, None if it was missing or not in expected_status
        """
        async with self.Session() as session:
            async with session.begin():
                return await UpdateData.update_breeding_request_status(
                    request_id,
                    session,
                    expected_status=expected_status,
                    status=status,
                    failure_reason=failure_reason,
                    completed_at=completed_at,
                )
