"""
Consultation status transitions and role-gated actions.

Both checks are pure: they never touch storage and never raise. Callers
turn an invalid result into a 400 (transition) or 403 (action) response.
"""
from typing import Dict, FrozenSet, List, NamedTuple, Optional, Union

from healthconnect.core.enums import ConsultationAction, ConsultationStatus, UserRole

S = ConsultationStatus
R = UserRole

NON_TERMINAL_STATUSES = tuple(s for s in ConsultationStatus if not s.is_terminal)

# Any non-terminal consultation can be cancelled by these roles
_CANCELLERS = frozenset({R.DOCTOR, R.ADMIN})

# from_status -> to_status -> roles allowed to take that edge
TRANSITIONS: Dict[ConsultationStatus, Dict[ConsultationStatus, FrozenSet[UserRole]]] = {
    S.PENDING_ADMIN_REVIEW: {
        S.ASSIGNED: frozenset({R.ADMIN}),
        S.CANCELLED: _CANCELLERS,
    },
    S.ASSIGNED: {
        S.CONFIRMED: frozenset({R.PATIENT}),
        # Doctor accepts directly without waiting for the patient
        S.SCHEDULED: frozenset({R.DOCTOR}),
        S.CANCELLED: _CANCELLERS,
    },
    S.CONFIRMED: {
        S.SCHEDULED: frozenset({R.DOCTOR}),
        S.CANCELLED: _CANCELLERS,
    },
    S.SCHEDULED: {
        S.IN_PROGRESS: frozenset({R.DOCTOR}),
        S.CANCELLED: _CANCELLERS,
    },
    S.IN_PROGRESS: {
        S.COMPLETED: frozenset({R.DOCTOR}),
        S.CANCELLED: _CANCELLERS,
    },
    S.COMPLETED: {},
    S.CANCELLED: {},
}

# role -> status -> actions the role may perform in that status
A = ConsultationAction

_CLINICAL_ACTIONS: Dict[ConsultationStatus, FrozenSet[ConsultationAction]] = {
    S.PENDING_ADMIN_REVIEW: frozenset({A.UPDATE_NOTES}),
    S.ASSIGNED: frozenset({A.UPDATE_NOTES}),
    S.CONFIRMED: frozenset({A.UPDATE_NOTES, A.RESCHEDULE}),
    S.SCHEDULED: frozenset({A.UPDATE_NOTES, A.RESCHEDULE}),
    S.IN_PROGRESS: frozenset({A.UPDATE_NOTES, A.UPDATE_DURATION}),
    # Notes are locked once terminal; duration may still be recorded
    S.COMPLETED: frozenset({A.UPDATE_DURATION}),
    S.CANCELLED: frozenset(),
}

PERMISSIONS: Dict[UserRole, Dict[ConsultationStatus, FrozenSet[ConsultationAction]]] = {
    R.ADMIN: _CLINICAL_ACTIONS,
    R.DOCTOR: _CLINICAL_ACTIONS,
    R.PATIENT: {status: frozenset() for status in ConsultationStatus},
}


class TransitionResult(NamedTuple):
    is_valid: bool
    error: Optional[str] = None


class PermissionResult(NamedTuple):
    can_perform: bool
    error: Optional[str] = None


def _coerce_status(value: Union[ConsultationStatus, str]) -> Optional[ConsultationStatus]:
    try:
        return ConsultationStatus(value)
    except ValueError:
        return None


def _coerce_role(value: Union[UserRole, str]) -> Optional[UserRole]:
    try:
        return UserRole(value)
    except ValueError:
        return None


def _role_names(roles) -> str:
    return ", ".join(sorted(role.value for role in roles))


def validate_status_transition(
    current_status: Union[ConsultationStatus, str],
    target_status: Union[ConsultationStatus, str],
    role: UserRole,
) -> TransitionResult:
    """
    Decide whether ``role`` may move a consultation from ``current_status``
    to ``target_status``.

    Self transitions are reported as invalid; callers are expected to treat
    ``current == target`` as a no-op and skip this check entirely.
    """
    acting_role = _coerce_role(role)
    if acting_role is None:
        return TransitionResult(False, f"Unknown role: {role}")

    current = _coerce_status(current_status)
    if current is None:
        return TransitionResult(False, f"Invalid current status: {current_status}")

    target = _coerce_status(target_status)
    if target is None:
        return TransitionResult(False, f"Invalid target status: {target_status}")

    if current == target:
        return TransitionResult(
            False, f"Consultation is already {current.value}; there is nothing to transition."
        )

    allowed_roles = TRANSITIONS[current].get(target)
    if not allowed_roles:
        return TransitionResult(
            False,
            f"Invalid status transition: {current.value} → {target.value}. This transition is not allowed.",
        )

    if acting_role not in allowed_roles:
        return TransitionResult(
            False,
            f"{acting_role.value} role cannot transition consultation from {current.value} "
            f"to {target.value}. Only {_role_names(allowed_roles)} can perform this transition.",
        )

    return TransitionResult(True)


def valid_next_statuses(
    current_status: Union[ConsultationStatus, str], role: UserRole
) -> List[ConsultationStatus]:
    current = _coerce_status(current_status)
    acting_role = _coerce_role(role)
    if current is None or acting_role is None:
        return []
    return [target for target, roles in TRANSITIONS[current].items() if acting_role in roles]


def validate_role_permission(
    current_status: Union[ConsultationStatus, str],
    role: UserRole,
    action: Union[ConsultationAction, str],
) -> PermissionResult:
    current = _coerce_status(current_status)
    if current is None:
        return PermissionResult(False, f"Invalid consultation status: {current_status}")

    try:
        action = ConsultationAction(action)
    except ValueError:
        return PermissionResult(False, f"Unknown action: {action}")

    acting_role = _coerce_role(role)
    if acting_role is None:
        return PermissionResult(False, f"Unknown role: {role}")

    allowed_actions = PERMISSIONS[acting_role].get(current, frozenset())
    if action not in allowed_actions:
        return PermissionResult(
            False, f"{acting_role.value} cannot {action.value} a consultation in {current.value} status."
        )

    return PermissionResult(True)
