"""Breeding request rules that are independent from HTTP and DB.

Rule of thumb:
- OK: status transitions, compatibility checks, reason codes.
- Not OK: touching DB sessions, FastAPI, datetime.now(), etc.
"""

from enum import Enum

from dragon_farm.domain.errors import BreedingValidationError, InvalidTransitionError


class DragonSex(str, Enum):
    male = "Male"
    female = "Female"


class BreedingStatus(str, Enum):
    queued = "Queued"
    validating = "Validating"
    breeding = "Breeding"
    completed = "Completed"
    failed = "Failed"


class FailureReason(str, Enum):
    parent_not_found = "ParentNotFound"
    incompatible_sex = "IncompatibleSex"
    parent_busy = "ParentBusy"
    internal_error = "InternalError"
    persistence_error = "PersistenceError"
    cancelled = "Cancelled"


TERMINAL_STATUSES = frozenset({BreedingStatus.completed, BreedingStatus.failed})
IN_FLIGHT_STATUSES = frozenset({BreedingStatus.validating, BreedingStatus.breeding})

ALLOWED_TRANSITIONS = {
    BreedingStatus.queued: frozenset({BreedingStatus.validating, BreedingStatus.failed}),
    BreedingStatus.validating: frozenset({BreedingStatus.breeding, BreedingStatus.failed}),
    BreedingStatus.breeding: frozenset({BreedingStatus.completed, BreedingStatus.failed}),
    BreedingStatus.completed: frozenset(),
    BreedingStatus.failed: frozenset(),
}


def is_terminal(status: BreedingStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_cancellable(status: BreedingStatus) -> bool:
    """Only requests that nobody has picked up yet can be cancelled."""
    return status == BreedingStatus.queued


def check_transition(current: BreedingStatus, target: BreedingStatus) -> None:
    """Raise InvalidTransitionError unless current -> target is a legal move."""
    if target not in ALLOWED_TRANSITIONS[current]:
        raise InvalidTransitionError(f"Cannot move breeding request from {current.value} to {target.value}")


def check_failure_reason(status: BreedingStatus, failure_reason: FailureReason | None) -> None:
    """A Failed request must carry a reason; no other status may."""
    if (status == BreedingStatus.failed) != (failure_reason is not None):
        raise InvalidTransitionError(f"Status {status.value} does not match failure reason {failure_reason}")


def check_parent_sexes(sex_a: DragonSex, sex_b: DragonSex) -> None:
    """Parents must be one Male and one Female.

    Raises:
        BreedingValidationError: Both parents have the same sex
    """
    if DragonSex(sex_a) == DragonSex(sex_b):
        raise BreedingValidationError(FailureReason.incompatible_sex)
