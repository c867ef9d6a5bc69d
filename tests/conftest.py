"""Shared fixtures: trait catalog, a temporary SQLite farm and a wired breeding core."""

from datetime import datetime
from uuid import UUID

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from uuid6 import uuid7

from dragon_farm.domain.breeding_rules import DragonSex
from dragon_farm.domain.genetics import BreedingEngine
from dragon_farm.domain.rarity import RarityScorer
from dragon_farm.domain.traits import Trait, TraitRegistry
from dragon_farm.services.bootstrap import DEFAULT_TRAITS, load_trait_registry
from dragon_farm.services.breeding_coordinator import BreedingCoordinator
from dragon_farm.services.farm_db import FarmDB
from dragon_farm.services.genotype_store import GenotypeStore

HATCHED_AT = datetime(2025, 6, 1, 12, 0, 0)


@pytest.fixture
def registry():
    """Color(R/r), WingSpan(W/w), Claw(S/s)."""
    return TraitRegistry(DEFAULT_TRAITS)


@pytest.fixture
def two_trait_registry():
    return TraitRegistry(
        [
            Trait(trait_id=1, name="Color", dominant_allele="R", recessive_allele="r"),
            Trait(trait_id=2, name="WingSpan", dominant_allele="W", recessive_allele="w"),
        ]
    )


@pytest.fixture
def engine(registry):
    return BreedingEngine(registry)


@pytest_asyncio.fixture
async def farm_db(tmp_path):
    """FarmDB on a fresh SQLite file with every table created."""
    db_engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'farm.sqlite3'}")
    Session = async_sessionmaker(autocommit=False, class_=AsyncSession, expire_on_commit=False, bind=db_engine)
    farm_db = FarmDB(Session)
    await farm_db.create_tables()
    yield farm_db
    await db_engine.dispose()


@pytest_asyncio.fixture
async def genotype_store(farm_db):
    registry = await load_trait_registry(farm_db)
    return GenotypeStore(registry, RarityScorer(registry), farm_db)


@pytest_asyncio.fixture
async def coordinator(genotype_store, farm_db):
    return BreedingCoordinator(
        genotype_store,
        farm_db,
        BreedingEngine(genotype_store.registry),
        commit_wait_multiplier=0,
    )


async def hatch_dragon(genotype_store: GenotypeStore, name: str, sex: DragonSex, genotype) -> UUID:
    """Store a dragon with the given genotype and return its id."""
    dragon = await genotype_store.hatch(
        name=name,
        sex=sex,
        genotype=genotype,
        hatched_at=HATCHED_AT,
        dragon_id=uuid7(),
    )
    return dragon.dragon_id
