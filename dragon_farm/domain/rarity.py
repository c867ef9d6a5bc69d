from dragon_farm.domain.genotype import AllelePair, Genotype
from dragon_farm.domain.traits import TraitRegistry

DEFAULT_RECESSIVE_WEIGHT = 1.0


class RarityScorer:
    def __init__(self, registry: TraitRegistry, recessive_weight: float = DEFAULT_RECESSIVE_WEIGHT):
        if recessive_weight < 0:
            raise ValueError("recessive_weight must be >= 0")
        self.registry = registry
        self.recessive_weight = float(recessive_weight)

    def trait_weight(self, trait_id: int, pair: AllelePair) -> float:
        """Weight one trait of a genotype

        Args:
            trait_id (int): To identify the trait
            pair (AllelePair): The two alleles of the trait

        Returns:
            float: recessive_weight for a recessive-homozygous pair, 0 otherwise
        """
        recessive = self.registry.get(trait_id).recessive_allele
        if pair[0] == recessive and pair[1] == recessive:
            return self.recessive_weight
        return 0.0

    def score(self, genotype: Genotype) -> float:
        """Calculate the rarity score of a genotype

        Args:
            genotype (Genotype): trait_id -> (allele_a, allele_b)

        Returns:
            float: Mean trait weight, so registries of different size give comparable scores
        """
        if not genotype:
            return 0.0
        total = sum(self.trait_weight(trait_id, genotype[trait_id]) for trait_id in sorted(genotype))
        return total / len(genotype)
