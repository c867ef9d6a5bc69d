import pytest

from dragon_farm.domain.breeding_rules import (
    BreedingStatus,
    DragonSex,
    FailureReason,
    check_failure_reason,
    check_parent_sexes,
    check_transition,
    is_cancellable,
    is_terminal,
)
from dragon_farm.domain.errors import BreedingValidationError, InvalidTransitionError


@pytest.mark.parametrize(
    "current, target",
    [
        (BreedingStatus.queued, BreedingStatus.validating),
        (BreedingStatus.queued, BreedingStatus.failed),
        (BreedingStatus.validating, BreedingStatus.breeding),
        (BreedingStatus.validating, BreedingStatus.failed),
        (BreedingStatus.breeding, BreedingStatus.completed),
        (BreedingStatus.breeding, BreedingStatus.failed),
    ],
)
def test_allowed_transitions(current, target):
    check_transition(current, target)


@pytest.mark.parametrize(
    "current, target",
    [
        (BreedingStatus.queued, BreedingStatus.breeding),
        (BreedingStatus.queued, BreedingStatus.completed),
        (BreedingStatus.validating, BreedingStatus.completed),
        (BreedingStatus.completed, BreedingStatus.failed),
        (BreedingStatus.failed, BreedingStatus.queued),
    ],
)
def test_rejected_transitions(current, target):
    with pytest.raises(InvalidTransitionError):
        check_transition(current, target)


def test_terminal_statuses():
    assert is_terminal(BreedingStatus.completed)
    assert is_terminal(BreedingStatus.failed)
    assert not is_terminal(BreedingStatus.breeding)


def test_only_queued_is_cancellable():
    assert [status for status in BreedingStatus if is_cancellable(status)] == [BreedingStatus.queued]


def test_failure_reason_required_for_failed():
    check_failure_reason(BreedingStatus.failed, FailureReason.cancelled)
    with pytest.raises(InvalidTransitionError):
        check_failure_reason(BreedingStatus.failed, None)
    with pytest.raises(InvalidTransitionError):
        check_failure_reason(BreedingStatus.completed, FailureReason.parent_busy)


def test_parent_sexes():
    check_parent_sexes(DragonSex.male, DragonSex.female)
    check_parent_sexes("Female", "Male")
    with pytest.raises(BreedingValidationError) as exc_info:
        check_parent_sexes(DragonSex.male, DragonSex.male)
    assert exc_info.value.reason == FailureReason.incompatible_sex
