import pytest

from dragon_farm.domain.errors import UnknownTraitError
from dragon_farm.domain.traits import Trait, TraitRegistry


class TestTrait:
    def test_rejects_equal_alleles(self):
        with pytest.raises(ValueError):
            Trait(trait_id=1, name="Color", dominant_allele="R", recessive_allele="R")

    def test_rejects_empty_allele(self):
        with pytest.raises(ValueError):
            Trait(trait_id=1, name="Color", dominant_allele="", recessive_allele="r")

    def test_is_immutable(self):
        trait = Trait(trait_id=1, name="Color", dominant_allele="R", recessive_allele="r")
        with pytest.raises(ValueError):
            trait.name = "Hue"


class TestTraitRegistry:
    def test_all_traits_ordered_by_id(self):
        registry = TraitRegistry(
            [
                Trait(trait_id=3, name="Claw", dominant_allele="S", recessive_allele="s"),
                Trait(trait_id=1, name="Color", dominant_allele="R", recessive_allele="r"),
                Trait(trait_id=2, name="WingSpan", dominant_allele="W", recessive_allele="w"),
            ]
        )
        assert [trait.trait_id for trait in registry.all_traits()] == [1, 2, 3]
        assert len(registry) == 3

    def test_rejects_duplicate_trait_ids(self):
        with pytest.raises(ValueError):
            TraitRegistry(
                [
                    Trait(trait_id=1, name="Color", dominant_allele="R", recessive_allele="r"),
                    Trait(trait_id=1, name="Hue", dominant_allele="H", recessive_allele="h"),
                ]
            )

    def test_get_unknown_trait(self, registry):
        with pytest.raises(UnknownTraitError) as exc_info:
            registry.get(99)
        assert exc_info.value.trait_id == 99

    def test_is_valid_allele(self, registry):
        assert registry.is_valid_allele(1, "R")
        assert registry.is_valid_allele(1, "r")
        assert not registry.is_valid_allele(1, "W")

    def test_is_valid_allele_unknown_trait(self, registry):
        with pytest.raises(UnknownTraitError):
            registry.is_valid_allele(42, "R")
