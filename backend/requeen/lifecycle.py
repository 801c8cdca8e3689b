"""Colony status machine shared by every requeening operation."""

from __future__ import annotations

from enum import Enum

from .errors import InvalidArgument, InvalidTransition

# purpose: single source of truth for colony states, introduction methods and legal transitions
# status: active


class ColonyStatus(str, Enum):
    PENDING = "pending"
    WAITING_CHECK = "waiting_check"
    LAYING_OK = "laying_ok"
    FAILED = "failed"
    QUEENLESS = "queenless"
    DEAD = "dead"


class IntroductionMethod(str, Enum):
    CELL = "cell"
    VIRGIN = "virgin"
    MATED = "mated"

    @property
    def event_type(self) -> "EventType":
        return EventType(f"intro_{self.value}")


class EventType(str, Enum):
    SCAN_ARRIVAL = "scan_arrival"
    INTRO_CELL = "intro_cell"
    INTRO_VIRGIN = "intro_virgin"
    INTRO_MATED = "intro_mated"
    LAYING_CHECK = "laying_check"


class AlertType(str, Enum):
    CHECK_LAYING = "check_laying"


class Action(str, Enum):
    INTRODUCE = "introduce"
    RECORD_OUTCOME = "record_outcome"
    REINTRODUCE = "reintroduce"


INTRODUCTION_EVENT_TYPES = frozenset(method.event_type for method in IntroductionMethod)

OUTCOME_STATUSES = frozenset(
    {
        ColonyStatus.LAYING_OK,
        ColonyStatus.FAILED,
        ColonyStatus.QUEENLESS,
        ColonyStatus.DEAD,
    }
)
RETRYABLE_STATUSES = frozenset({ColonyStatus.FAILED, ColonyStatus.QUEENLESS})
FAILURE_STATUSES = frozenset({ColonyStatus.FAILED, ColonyStatus.QUEENLESS, ColonyStatus.DEAD})

# (action, current status) -> reachable statuses
TRANSITIONS: dict[tuple[Action, ColonyStatus], frozenset[ColonyStatus]] = {
    (Action.INTRODUCE, ColonyStatus.PENDING): frozenset({ColonyStatus.WAITING_CHECK}),
    (Action.RECORD_OUTCOME, ColonyStatus.WAITING_CHECK): OUTCOME_STATUSES,
    **{
        (Action.REINTRODUCE, status): frozenset({ColonyStatus.WAITING_CHECK})
        for status in RETRYABLE_STATUSES
    },
}


def parse_status(value: str | ColonyStatus) -> ColonyStatus:
    try:
        return ColonyStatus(value)
    except ValueError as exc:
        raise InvalidArgument(f"unknown colony status '{value}'") from exc


def parse_method(value: str | IntroductionMethod) -> IntroductionMethod:
    try:
        return IntroductionMethod(value)
    except ValueError as exc:
        allowed = ", ".join(m.value for m in IntroductionMethod)
        raise InvalidArgument(f"unknown introduction method '{value}' (expected one of: {allowed})") from exc


def is_allowed(action: Action, current: ColonyStatus, target: ColonyStatus) -> bool:
    return target in TRANSITIONS.get((action, current), frozenset())


def ensure_transition(action: Action, current: str | ColonyStatus, target: str | ColonyStatus) -> None:
    """Raise ``InvalidTransition`` unless ``action`` may move ``current`` to ``target``."""

    current_status = ColonyStatus(current)
    target_status = ColonyStatus(target)
    if not is_allowed(action, current_status, target_status):
        raise InvalidTransition(
            f"cannot {action.value.replace('_', ' ')} a colony from "
            f"'{current_status.value}' to '{target_status.value}'"
        )
