"""Trait catalog: definitions and the read-only registry built from them."""

from typing import Dict, FrozenSet, Iterable, Tuple

from pydantic import BaseModel, model_validator

from dragon_farm.domain.errors import UnknownTraitError


class Trait(BaseModel):
    trait_id: int
    name: str
    dominant_allele: str
    recessive_allele: str

    class Config:
        frozen = True
        from_attributes = True

    @model_validator(mode="after")
    def check_alleles(self) -> "Trait":
        if not self.dominant_allele or not self.recessive_allele:
            raise ValueError("allele symbols must be non-empty")
        if self.dominant_allele == self.recessive_allele:
            raise ValueError("dominant and recessive alleles must differ")
        return self


class TraitRegistry:
    """Immutable catalog of traits, keyed by trait id.

    Built once per process from the trait catalog source. Nothing mutates it
    after construction, so concurrent readers need no locking.
    """

    def __init__(self, traits: Iterable[Trait]):
        ordered = sorted(traits, key=lambda trait: trait.trait_id)
        by_id: Dict[int, Trait] = {}
        for trait in ordered:
            if trait.trait_id in by_id:
                raise ValueError(f"Duplicate trait id: {trait.trait_id}")
            by_id[trait.trait_id] = trait
        self._traits = by_id
        self._ordered = tuple(ordered)
        self._trait_ids = frozenset(by_id)

    def __len__(self) -> int:
        return len(self._ordered)

    def all_traits(self) -> Tuple[Trait, ...]:
        """Return every trait, ordered by trait id."""
        return self._ordered

    @property
    def trait_ids(self) -> FrozenSet[int]:
        return self._trait_ids

    def get(self, trait_id: int) -> Trait:
        """Look up a trait.

        Args:
            trait_id (int): To identify the trait

        Raises:
            UnknownTraitError: The trait id is not registered

        Returns:
            Trait: The registered trait definition
        """
        try:
            return self._traits[trait_id]
        except KeyError:
            raise UnknownTraitError(trait_id) from None

    def is_valid_allele(self, trait_id: int, symbol: str) -> bool:
        """Check that a symbol is either allele of the trait.

        Args:
            trait_id (int): To identify the trait
            symbol (str): Allele symbol to check

        Raises:
            UnknownTraitError: The trait id is not registered

        Returns:
            bool: True if the symbol is the dominant or the recessive allele
        """
        trait = self.get(trait_id)
        return symbol in (trait.dominant_allele, trait.recessive_allele)
