"""Delivery state machine for notifications.

    Queued -> Processing -> Sent
                         -> Retrying -> Processing
                                     -> Failed
                         -> Failed

FakeMail is a terminal status used by test deliveries. Sent, Failed and
FakeMail are terminal; a resend may move Sent or Failed back to Processing.
"""

from typing import Dict, FrozenSet

from modules.notifications.errors import InvalidStatusTransitionError
from modules.notifications.models import NotificationStatus

S = NotificationStatus

TRANSITIONS: Dict[NotificationStatus, FrozenSet[NotificationStatus]] = {
    S.QUEUED: frozenset({S.PROCESSING, S.FAKE_MAIL}),
    S.PROCESSING: frozenset({S.SENT, S.RETRYING, S.FAILED, S.FAKE_MAIL}),
    S.RETRYING: frozenset({S.PROCESSING, S.FAILED}),
    S.FAILED: frozenset(),
    S.SENT: frozenset(),
    S.FAKE_MAIL: frozenset(),
}

TERMINAL_STATUSES = frozenset({S.SENT, S.FAILED, S.FAKE_MAIL})


def is_terminal(status: NotificationStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(
    current: NotificationStatus, target: NotificationStatus, resend: bool = False
) -> bool:
    """Whether ``current`` may move to ``target``.

    Re-reporting the current status is accepted so that outcome writes are
    idempotent.
    """
    if current == target:
        return True
    if (
        resend
        and is_terminal(current)
        and current != S.FAKE_MAIL
        and target == S.PROCESSING
    ):
        return True
    return target in TRANSITIONS[current]


def validate_transition(
    current: NotificationStatus, target: NotificationStatus, resend: bool = False
) -> None:
    if not can_transition(current, target, resend=resend):
        raise InvalidStatusTransitionError(current, target)


def is_resend_eligible(status: NotificationStatus, force: bool = False) -> bool:
    """Failed notifications can be resent; ``force`` allows any real status."""
    if status == S.FAKE_MAIL:
        return False
    return force or status == S.FAILED


def status_description(status: NotificationStatus) -> str:
    return f"This notification {status.value}"
