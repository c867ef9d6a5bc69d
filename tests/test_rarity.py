import pytest

from dragon_farm.domain.rarity import RarityScorer

ALL_RECESSIVE = {1: ("r", "r"), 2: ("w", "w"), 3: ("s", "s")}


class TestRarityScorer:
    def test_all_recessive_with_weight_three(self, registry):
        assert RarityScorer(registry, recessive_weight=3).score(ALL_RECESSIVE) == 3

    def test_default_weight_is_recessive_fraction(self, registry):
        scorer = RarityScorer(registry)
        assert scorer.score({1: ("r", "r"), 2: ("W", "w"), 3: ("S", "S")}) == pytest.approx(1 / 3)

    def test_heterozygous_scores_zero(self, registry):
        assert RarityScorer(registry).score({1: ("R", "r"), 2: ("w", "W"), 3: ("S", "s")}) == 0.0

    def test_pure(self, registry):
        scorer = RarityScorer(registry, recessive_weight=2.5)
        genotype = {1: ("r", "r"), 2: ("W", "w"), 3: ("s", "s")}
        assert scorer.score(genotype) == scorer.score(dict(genotype))
        assert genotype == {1: ("r", "r"), 2: ("W", "w"), 3: ("s", "s")}

    def test_empty_genotype(self, registry):
        assert RarityScorer(registry).score({}) == 0.0

    def test_returns_float(self, registry):
        assert type(RarityScorer(registry).score(ALL_RECESSIVE)) is float

    def test_rejects_negative_weight(self, registry):
        with pytest.raises(ValueError):
            RarityScorer(registry, recessive_weight=-1)
