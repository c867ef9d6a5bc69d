"""Single-locus Mendelian inheritance.

Each trait is inherited independently: the offspring takes one allele from
each parent's pair, chosen uniformly at random. There is no linkage and no
mutation. All randomness comes from an explicit numpy Generator so that a
cross can be replayed from its seed.
"""

from enum import Enum
from typing import Dict, Tuple

import numpy as np

from dragon_farm.domain.breeding_rules import DragonSex
from dragon_farm.domain.errors import GenotypeMismatchError
from dragon_farm.domain.genotype import Genotype
from dragon_farm.domain.traits import TraitRegistry


class Expression(str, Enum):
    dominant = "dominant"
    recessive = "recessive"


def make_rng(rng_seed: int | np.random.Generator) -> np.random.Generator:
    """Return a Generator, building one from the seed if needed."""
    if isinstance(rng_seed, np.random.Generator):
        return rng_seed
    return np.random.default_rng(rng_seed)


def draw_sex(rng: np.random.Generator) -> DragonSex:
    return DragonSex.male if int(rng.integers(2)) == 0 else DragonSex.female


class BreedingEngine:
    def __init__(self, registry: TraitRegistry):
        self.registry = registry

    def breed(self, genotype_a: Genotype, genotype_b: Genotype, rng_seed: int | np.random.Generator) -> Genotype:
        """Cross two parent genotypes.

        Traits are visited in ascending id order and two draws are made per
        trait (parent A first), so the same seed always gives the same child.

        Args:
            genotype_a (Genotype): Parent A; supplies allele_a of every offspring pair
            genotype_b (Genotype): Parent B; supplies allele_b of every offspring pair
            rng_seed (int | np.random.Generator): Seed or generator for the allele draws

        Raises:
            GenotypeMismatchError: The parents do not cover the same traits

        Returns:
            Genotype: Offspring genotype
        """
        if set(genotype_a) != set(genotype_b):
            raise GenotypeMismatchError(
                f"Parent genotypes cover different traits: {sorted(genotype_a)} vs {sorted(genotype_b)}"
            )

        rng = make_rng(rng_seed)
        offspring: Genotype = {}
        for trait_id in sorted(genotype_a):
            allele_a = genotype_a[trait_id][int(rng.integers(2))]
            allele_b = genotype_b[trait_id][int(rng.integers(2))]
            offspring[trait_id] = (allele_a, allele_b)
        return offspring

    def breed_offspring(
        self, genotype_a: Genotype, genotype_b: Genotype, rng_seed: int
    ) -> Tuple[Genotype, DragonSex]:
        """Cross two parents and pick the hatchling's sex from the same generator."""
        rng = make_rng(rng_seed)
        genotype = self.breed(genotype_a, genotype_b, rng)
        return genotype, draw_sex(rng)

    def phenotype(self, genotype: Genotype) -> Dict[int, Expression]:
        """Derive the expressed form of every trait. Dominant wins if either allele is dominant."""
        expressed: Dict[int, Expression] = {}
        for trait_id in sorted(genotype):
            trait = self.registry.get(trait_id)
            if trait.dominant_allele in genotype[trait_id]:
                expressed[trait_id] = Expression.dominant
            else:
                expressed[trait_id] = Expression.recessive
        return expressed
