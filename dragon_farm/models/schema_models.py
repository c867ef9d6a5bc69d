from pydantic import BaseModel
from typing import List, Optional
from uuid import UUID
from datetime import datetime

from dragon_farm.domain.breeding_rules import BreedingStatus, DragonSex, FailureReason


class DragonTraitSchema(BaseModel):
    dragon_id: UUID
    trait_id: int
    allele_a: str
    allele_b: str

    class Config:
        from_attributes = True


class DragonSchema(BaseModel):
    dragon_id: UUID
    name: str
    sex: DragonSex
    hatched_at: datetime
    rarity_score: float
    genotype: List[DragonTraitSchema] = []

    class Config:
        from_attributes = True


class BreedingRequestSchema(BaseModel):
    request_id: UUID
    parent_a_id: UUID
    parent_b_id: UUID
    requested_at: datetime
    status: BreedingStatus
    failure_reason: Optional[FailureReason] = None
    offspring_dragon_id: Optional[UUID] = None
    offspring_name: Optional[str] = None
    rng_seed: int
    completed_at: Optional[datetime] = None

    class Config:
        from_attributes = True
