"""Startup wiring: trait catalog, starter dragons and the breeding core."""

import logging
from datetime import datetime
from typing import List, NamedTuple
from uuid import UUID

from dragon_farm.domain.breeding_rules import DragonSex
from dragon_farm.domain.genetics import BreedingEngine
from dragon_farm.domain.genotype import Genotype
from dragon_farm.domain.rarity import DEFAULT_RECESSIVE_WEIGHT, RarityScorer
from dragon_farm.domain.traits import Trait, TraitRegistry
from dragon_farm.services.breeding_coordinator import DEFAULT_COMMIT_ATTEMPTS, BreedingCoordinator
from dragon_farm.services.farm_db import FarmDB
from dragon_farm.services.genotype_store import GenotypeStore

DEFAULT_TRAITS = [
    Trait(trait_id=1, name="Color", dominant_allele="R", recessive_allele="r"),
    Trait(trait_id=2, name="WingSpan", dominant_allele="W", recessive_allele="w"),
    Trait(trait_id=3, name="Claw", dominant_allele="S", recessive_allele="s"),
]


class StarterDragon(NamedTuple):
    dragon_id: UUID
    name: str
    sex: DragonSex
    genotype: Genotype


STARTER_HATCHED_AT = datetime(2025, 1, 1)

STARTER_DRAGONS = [
    StarterDragon(
        dragon_id=UUID("11111111-1111-1111-1111-111111111111"),
        name="Pyro",
        sex=DragonSex.male,
        genotype={1: ("R", "R"), 2: ("W", "w"), 3: ("S", "s")},
    ),
    StarterDragon(
        dragon_id=UUID("22222222-2222-2222-2222-222222222222"),
        name="Astra",
        sex=DragonSex.female,
        genotype={1: ("r", "r"), 2: ("w", "w"), 3: ("S", "s")},
    ),
]


async def load_trait_registry(farm_db: FarmDB, catalog: List[Trait] = DEFAULT_TRAITS) -> TraitRegistry:
    """Build the registry from the trait table, seeding it with the catalog when empty."""
    traits = await farm_db.read_traits()
    if not traits:
        logging.info(f"Seeding trait catalog with {len(catalog)} trait(s)")
        await farm_db.create_traits(catalog)
        traits = await farm_db.read_traits()
    return TraitRegistry(traits)


async def seed_starter_dragons(
    genotype_store: GenotypeStore, starters: List[StarterDragon] = STARTER_DRAGONS
) -> None:
    """Create the starter dragons that do not exist yet."""
    for starter in starters:
        if await genotype_store.farm_db.read_dragon(starter.dragon_id) is not None:
            continue
        await genotype_store.hatch(
            name=starter.name,
            sex=starter.sex,
            genotype=starter.genotype,
            hatched_at=STARTER_HATCHED_AT,
            dragon_id=starter.dragon_id,
        )


async def build_coordinator(
    farm_db: FarmDB,
    recessive_weight: float = DEFAULT_RECESSIVE_WEIGHT,
    commit_attempts: int = DEFAULT_COMMIT_ATTEMPTS,
    seed_starters: bool = True,
) -> BreedingCoordinator:
    """Create tables, load the trait registry, wire the breeding core together
    and fail requests left in flight by a previous process."""
    await farm_db.create_tables()
    registry = await load_trait_registry(farm_db)
    scorer = RarityScorer(registry, recessive_weight)
    genotype_store = GenotypeStore(registry, scorer, farm_db)
    if seed_starters:
        await seed_starter_dragons(genotype_store)
    coordinator = BreedingCoordinator(
        genotype_store,
        farm_db,
        BreedingEngine(registry),
        commit_attempts=commit_attempts,
    )
    # Reservations do not survive a restart; requests left in flight cannot resume.
    await coordinator.fail_stalled_requests()
    return coordinator
