from pydantic import BaseModel, Field
from uuid import UUID
from datetime import datetime
from typing import List, Optional

from dragon_farm.domain.breeding_rules import BreedingStatus, DragonSex, FailureReason
from dragon_farm.domain.genetics import Expression


class TraitModel(BaseModel):
    trait_id: int
    name: str
    dominant_allele: str
    recessive_allele: str

    class Config:
        from_attributes = True


class GenotypeEntryModel(BaseModel):
    trait_id: int
    allele_a: str
    allele_b: str

    class Config:
        from_attributes = True


class PhenotypeEntryModel(BaseModel):
    trait_id: int
    trait_name: str
    expression: Expression


class DragonIntakeModel(BaseModel):
    """Farm intake of a dragon whose genotype is already known."""
    name: str = Field(min_length=1, max_length=100)
    sex: DragonSex
    genotype: List[GenotypeEntryModel]


class DragonModel(BaseModel):
    dragon_id: UUID
    name: str
    sex: DragonSex
    hatched_at: datetime
    rarity_score: float
    genotype: List[GenotypeEntryModel]


class BreedingRequestModel(BaseModel):
    parent_a_id: UUID
    parent_b_id: UUID
    rng_seed: Optional[int] = Field(default=None, ge=0, lt=2**63)  # replay a previous cross
    offspring_name: Optional[str] = Field(default=None, min_length=1, max_length=100)


class BreedingStatusModel(BaseModel):
    request_id: UUID
    status: BreedingStatus
    offspring_dragon_id: Optional[UUID] = None
    failure_reason: Optional[FailureReason] = None
