"""
Application lifecycle.

    applied -> screening -> interview -> selected -> hired

`rejected` can be reached from any open state; a candidate may `withdraw`
while the application is applied, screening or interview.
hired, rejected and withdrawn are final.
"""

from typing import Dict, Set

FINAL_STATUSES = {"hired", "rejected", "withdrawn"}

ALLOWED_TRANSITIONS: Dict[str, Set[str]] = {
    "applied": {"screening", "rejected", "withdrawn"},
    "screening": {"interview", "rejected", "withdrawn"},
    "interview": {"selected", "rejected", "withdrawn"},
    "selected": {"hired", "rejected"},
    "hired": set(),
    "rejected": set(),
    "withdrawn": set(),
}

# Applications in these states can still be booked for interviews
SCHEDULABLE_STATUSES = {"applied", "screening", "interview", "selected"}


class InvalidTransitionError(Exception):
    def __init__(self, current: str, target: str):
        super().__init__(f"Cannot change application status from '{current}' to '{target}'")
        self.current = current
        self.target = target


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


def check_transition(current: str, target: str, role: str) -> None:
    """
    Raise InvalidTransitionError unless ``role`` may move ``current`` to ``target``.
    Candidates can only withdraw, and only candidates can withdraw.
    """
    if (role == "candidate") != (target == "withdrawn"):
        raise InvalidTransitionError(current, target)
    if not can_transition(current, target):
        raise InvalidTransitionError(current, target)
