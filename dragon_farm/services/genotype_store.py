import logging
from datetime import datetime
from typing import Optional
from uuid import UUID

from dragon_farm.domain.breeding_rules import DragonSex
from dragon_farm.domain.errors import DragonNotFoundError
from dragon_farm.domain.genotype import Genotype, genotype_from_entries, validate_genotype
from dragon_farm.domain.rarity import RarityScorer
from dragon_farm.domain.traits import TraitRegistry
from dragon_farm.models.schema_models import DragonSchema
from dragon_farm.services.farm_db import FarmDB


class GenotypeStore:
    """Sole writer of genotype rows.

    Every write is validated against the trait registry first, and the
    dragon's rarity score is always computed here from the genotype being
    written.
    """

    def __init__(self, registry: TraitRegistry, scorer: RarityScorer, farm_db: FarmDB):
        self.registry = registry
        self.scorer = scorer
        self.farm_db = farm_db

    def validate(self, genotype: Genotype) -> None:
        validate_genotype(self.registry, genotype)

    async def get(self, dragon_id: UUID) -> Genotype:
        """Read the genotype of a dragon

        Args:
            dragon_id (UUID): To identify the dragon

        Raises:
            DragonNotFoundError: No genotype is stored for the dragon

        Returns:
            Genotype: trait_id -> (allele_a, allele_b)
        """
        rows = await self.farm_db.read_genotype(dragon_id)
        if not rows:
            raise DragonNotFoundError(dragon_id)
        return genotype_from_entries(rows)

    async def put(self, dragon_id: UUID, genotype: Genotype) -> None:
        """Store the genotype of an existing dragon. A dragon's genotype can be written only once.

        Args:
            dragon_id (UUID): To identify the dragon
            genotype (Genotype): Complete genotype, one pair per registered trait

        Raises:
            IncompleteGenotypeError: The genotype does not cover every trait exactly once
            InvalidAlleleError: A symbol is not an allele of its trait
            DuplicateGenotypeError: The dragon already has a genotype; it is left unchanged
        """
        self.validate(genotype)
        await self.farm_db.create_genotype(dragon_id, genotype, self.scorer.score(genotype))
        logging.info(f"Stored genotype for dragon {dragon_id}")

    async def hatch(
        self,
        name: str,
        sex: DragonSex,
        genotype: Genotype,
        hatched_at: datetime,
        dragon_id: UUID,
        completed_request_id: Optional[UUID] = None,
    ) -> DragonSchema:
        """Create a dragon together with its genotype, all-or-nothing

        Args:
            name (str): Dragon name
            sex (DragonSex): Male or Female
            genotype (Genotype): Complete genotype, one pair per registered trait
            hatched_at (datetime): Hatch time
            dragon_id (UUID): Fresh identity for the dragon
            completed_request_id (UUID, optional): Breeding request to complete in the same transaction

        Returns:
            DragonSchema: The stored dragon with its derived rarity score
        """
        self.validate(genotype)
        dragon = DragonSchema(
            dragon_id=dragon_id,
            name=name,
            sex=sex,
            hatched_at=hatched_at,
            rarity_score=self.scorer.score(genotype),
            genotype=[
                {"dragon_id": dragon_id, "trait_id": trait_id, "allele_a": pair[0], "allele_b": pair[1]}
                for trait_id, pair in sorted(genotype.items())
            ],
        )
        await self.farm_db.create_dragon(dragon, genotype, completed_request_id)
        logging.info(f"Hatched dragon {dragon_id} ({name}, {DragonSex(sex).value}) rarity={dragon.rarity_score}")
        return dragon
