from sqlalchemy.orm import DeclarativeBase, relationship
from sqlalchemy.schema import Column
from sqlalchemy.types import BigInteger, Integer, String, Uuid, Float, DateTime
from uuid6 import uuid7
from datetime import datetime


class Base(DeclarativeBase):
    pass


class TraitTable(Base):
    __tablename__ = "trait"
    trait_id = Column(Integer, primary_key=True, autoincrement=False)
    name = Column(String(50), nullable=False, unique=True)
    dominant_allele = Column(String(8), nullable=False)
    recessive_allele = Column(String(8), nullable=False)


class DragonTable(Base):
    __tablename__ = "dragon"
    dragon_id = Column(Uuid, primary_key=True, default=uuid7)
    name = Column(String(100), nullable=False)
    sex = Column(String(8), nullable=False)
    hatched_at = Column(DateTime, default=datetime.now)
    rarity_score = Column(Float, nullable=False, default=0.0)

    genotype = relationship(
        "DragonTraitTable",
        primaryjoin="DragonTable.dragon_id == foreign(DragonTraitTable.dragon_id)",
        back_populates="dragon",
        cascade="all, delete",
        order_by="DragonTraitTable.trait_id",
    )


class DragonTraitTable(Base):
    __tablename__ = "dragon_trait"
    # Composite key: a second genotype write for the same dragon is rejected by the DB.
    dragon_id = Column(Uuid, primary_key=True)
    trait_id = Column(Integer, primary_key=True)
    allele_a = Column(String(8), nullable=False)
    allele_b = Column(String(8), nullable=False)

    dragon = relationship(
        "DragonTable",
        primaryjoin="foreign(DragonTraitTable.dragon_id) == DragonTable.dragon_id",
        back_populates="genotype",
    )


class BreedingRequestTable(Base):
    __tablename__ = "breeding_request"
    request_id = Column(Uuid, primary_key=True, default=uuid7)
    parent_a_id = Column(Uuid, nullable=False, index=True)
    parent_b_id = Column(Uuid, nullable=False, index=True)
    requested_at = Column(DateTime, default=datetime.now)
    status = Column(String(16), nullable=False, default="Queued", index=True)
    failure_reason = Column(String(32), nullable=True)
    offspring_dragon_id = Column(Uuid, nullable=True)
    offspring_name = Column(String(100), nullable=True)
    rng_seed = Column(BigInteger, nullable=False)
    completed_at = Column(DateTime, nullable=True)
