import itertools

import pytest

from requeen.errors import InvalidArgument, InvalidTransition
from requeen.lifecycle import (
    Action,
    ColonyStatus,
    EventType,
    IntroductionMethod,
    ensure_transition,
    is_allowed,
    parse_method,
    parse_status,
)

LEGAL = {
    (Action.INTRODUCE, ColonyStatus.PENDING, ColonyStatus.WAITING_CHECK),
    (Action.RECORD_OUTCOME, ColonyStatus.WAITING_CHECK, ColonyStatus.LAYING_OK),
    (Action.RECORD_OUTCOME, ColonyStatus.WAITING_CHECK, ColonyStatus.FAILED),
    (Action.RECORD_OUTCOME, ColonyStatus.WAITING_CHECK, ColonyStatus.QUEENLESS),
    (Action.RECORD_OUTCOME, ColonyStatus.WAITING_CHECK, ColonyStatus.DEAD),
    (Action.REINTRODUCE, ColonyStatus.FAILED, ColonyStatus.WAITING_CHECK),
    (Action.REINTRODUCE, ColonyStatus.QUEENLESS, ColonyStatus.WAITING_CHECK),
}


def test_transition_table_is_exhaustive():
    for action, current, target in itertools.product(Action, ColonyStatus, ColonyStatus):
        assert is_allowed(action, current, target) == ((action, current, target) in LEGAL)


@pytest.mark.parametrize(
    "action,current,target",
    [
        (Action.RECORD_OUTCOME, "pending", "laying_ok"),
        (Action.RECORD_OUTCOME, "waiting_check", "pending"),
        (Action.RECORD_OUTCOME, "waiting_check", "waiting_check"),
        (Action.REINTRODUCE, "laying_ok", "waiting_check"),
        (Action.REINTRODUCE, "dead", "waiting_check"),
        (Action.INTRODUCE, "failed", "waiting_check"),
    ],
)
def test_illegal_transitions_raise(action, current, target):
    with pytest.raises(InvalidTransition):
        ensure_transition(action, current, target)


def test_parse_helpers_reject_unknown_values():
    assert parse_method("virgin") is IntroductionMethod.VIRGIN
    assert parse_status("queenless") is ColonyStatus.QUEENLESS
    with pytest.raises(InvalidArgument):
        parse_method("swarm_cell")
    with pytest.raises(InvalidArgument):
        parse_status("sleeping")


def test_method_maps_to_event_type():
    assert IntroductionMethod.CELL.event_type is EventType.INTRO_CELL
    assert IntroductionMethod.MATED.event_type is EventType.INTRO_MATED
