from typing import List

from dragon_farm.domain.genetics import BreedingEngine
from dragon_farm.domain.genotype import genotype_from_entries
from dragon_farm.domain.traits import Trait
from dragon_farm.models.dc_models import (
    BreedingStatusModel,
    DragonIntakeModel,
    DragonModel,
    GenotypeEntryModel,
    PhenotypeEntryModel,
    TraitModel,
)
from dragon_farm.models.schema_models import BreedingRequestSchema, DragonSchema


class DataConverter:
    """This class is used to convert data between different formats."""

    def convert_trait_to_trait_model(self, trait: Trait) -> TraitModel:
        return TraitModel.model_validate(trait)

    def convert_dragonschema_to_dragonmodel(self, dragon: DragonSchema) -> DragonModel:
        """Convert the DragonSchema to the DragonModel to send client

        Args:
            dragon (DragonSchema): Dragon with its genotype rows

        Returns:
            DragonModel: The dragon and is a type for transmission to the client
        """
        return DragonModel(
            dragon_id=dragon.dragon_id,
            name=dragon.name,
            sex=dragon.sex,
            hatched_at=dragon.hatched_at,
            rarity_score=dragon.rarity_score,
            genotype=[GenotypeEntryModel.model_validate(entry) for entry in dragon.genotype],
        )

    def convert_dragonschema_to_phenotype(
        self, dragon: DragonSchema, engine: BreedingEngine
    ) -> List[PhenotypeEntryModel]:
        """Derive the expressed traits of a dragon

        Args:
            dragon (DragonSchema): Dragon with its genotype rows
            engine (BreedingEngine): Holds the trait registry used for dominance

        Returns:
            List[PhenotypeEntryModel]: One entry per trait, ordered by trait id
        """
        phenotype = engine.phenotype(genotype_from_entries(dragon.genotype))
        return [
            PhenotypeEntryModel(
                trait_id=trait_id,
                trait_name=engine.registry.get(trait_id).name,
                expression=expression,
            )
            for trait_id, expression in phenotype.items()
        ]

    def convert_intake_to_genotype(self, intake: DragonIntakeModel):
        """Raises IncompleteGenotypeError if a trait is listed twice."""
        return genotype_from_entries(intake.genotype)

    def convert_request_to_status_model(self, request: BreedingRequestSchema) -> BreedingStatusModel:
        return BreedingStatusModel(
            request_id=request.request_id,
            status=request.status,
            offspring_dragon_id=request.offspring_dragon_id,
            failure_reason=request.failure_reason,
        )
