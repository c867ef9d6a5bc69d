"""Genotype shape and validation.

A genotype maps trait id -> (allele_a, allele_b). The pair is unordered:
(R, r) and (r, R) describe the same genotype entry.
"""

from typing import Dict, Iterable, Tuple

from dragon_farm.domain.errors import IncompleteGenotypeError, InvalidAlleleError
from dragon_farm.domain.traits import TraitRegistry

AllelePair = Tuple[str, str]
Genotype = Dict[int, AllelePair]


def genotype_from_entries(entries: Iterable) -> Genotype:
    """Build a genotype from per-trait rows.

    Args:
        entries (Iterable): Objects with trait_id, allele_a and allele_b attributes

    Raises:
        IncompleteGenotypeError: The same trait appears more than once

    Returns:
        Genotype: trait_id -> (allele_a, allele_b)
    """
    genotype: Genotype = {}
    for entry in entries:
        if entry.trait_id in genotype:
            raise IncompleteGenotypeError(f"Trait {entry.trait_id} appears more than once")
        genotype[entry.trait_id] = (entry.allele_a, entry.allele_b)
    return genotype


def validate_genotype(registry: TraitRegistry, genotype: Genotype) -> None:
    """Check that a genotype covers every registered trait exactly once with valid alleles.

    Raises:
        IncompleteGenotypeError: Traits are missing or not registered
        InvalidAlleleError: A symbol is neither allele of its trait
    """
    supplied = set(genotype)
    missing = registry.trait_ids - supplied
    unexpected = supplied - registry.trait_ids
    if missing or unexpected:
        raise IncompleteGenotypeError(
            f"Genotype must cover every trait exactly once "
            f"(missing: {sorted(missing)}, unexpected: {sorted(unexpected)})"
        )

    for trait_id in sorted(genotype):
        pair = genotype[trait_id]
        if len(pair) != 2:
            raise IncompleteGenotypeError(f"Trait {trait_id} needs exactly two alleles")
        for symbol in pair:
            if not registry.is_valid_allele(trait_id, symbol):
                raise InvalidAlleleError(trait_id, symbol)


def is_homozygous(pair: AllelePair) -> bool:
    return pair[0] == pair[1]
