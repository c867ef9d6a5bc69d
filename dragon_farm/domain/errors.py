"""Exceptions raised by the breeding core.

DataIntegrityError subclasses mean the inputs themselves are broken
(bad seeding or a programming defect); retrying with the same inputs
reproduces them.
"""

from uuid import UUID


class DragonFarmError(Exception):
    pass


class DataIntegrityError(DragonFarmError):
    pass


class UnknownTraitError(DataIntegrityError):
    def __init__(self, trait_id: int):
        super().__init__(f"Unknown trait id: {trait_id}")
        self.trait_id = trait_id


class IncompleteGenotypeError(DataIntegrityError):
    pass


class InvalidAlleleError(DataIntegrityError):
    def __init__(self, trait_id: int, symbol: str):
        super().__init__(f"Invalid allele {symbol!r} for trait {trait_id}")
        self.trait_id = trait_id
        self.symbol = symbol


class GenotypeMismatchError(DataIntegrityError):
    pass


class DuplicateGenotypeError(DataIntegrityError):
    def __init__(self, dragon_id: UUID):
        super().__init__(f"Dragon {dragon_id} already has a genotype")
        self.dragon_id = dragon_id


class DragonNotFoundError(DragonFarmError):
    def __init__(self, dragon_id: UUID):
        super().__init__(f"Dragon {dragon_id} not found")
        self.dragon_id = dragon_id


class BreedingRequestNotFoundError(DragonFarmError):
    def __init__(self, request_id: UUID):
        super().__init__(f"Breeding request {request_id} not found")
        self.request_id = request_id


class RequestNotCancellableError(DragonFarmError):
    def __init__(self, request_id: UUID, status: str):
        super().__init__(f"Breeding request {request_id} is {status} and cannot be cancelled")
        self.request_id = request_id
        self.status = status


class InvalidTransitionError(DragonFarmError):
    pass


class BreedingValidationError(DragonFarmError):
    """A breeding request failed a business rule. Carries the failure reason code."""

    def __init__(self, reason):
        super().__init__(str(reason.value))
        self.reason = reason


class PersistenceError(DragonFarmError):
    """The storage layer failed. Possibly transient."""
