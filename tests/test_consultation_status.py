import itertools

import pytest

from healthconnect.core.consultation_status import (
    PERMISSIONS,
    TRANSITIONS,
    valid_next_statuses,
    validate_role_permission,
    validate_status_transition,
)
from healthconnect.core.enums import ConsultationAction, ConsultationStatus, UserRole

S = ConsultationStatus
R = UserRole
A = ConsultationAction

ALLOWED_EDGES = {
    (S.PENDING_ADMIN_REVIEW, S.ASSIGNED, R.ADMIN),
    (S.ASSIGNED, S.CONFIRMED, R.PATIENT),
    (S.ASSIGNED, S.SCHEDULED, R.DOCTOR),
    (S.CONFIRMED, S.SCHEDULED, R.DOCTOR),
    (S.SCHEDULED, S.IN_PROGRESS, R.DOCTOR),
    (S.IN_PROGRESS, S.COMPLETED, R.DOCTOR),
} | {
    (status, S.CANCELLED, role)
    for status in (S.PENDING_ADMIN_REVIEW, S.ASSIGNED, S.CONFIRMED, S.SCHEDULED, S.IN_PROGRESS)
    for role in (R.DOCTOR, R.ADMIN)
}


@pytest.mark.parametrize(
    "current,target,role", list(itertools.product(ConsultationStatus, ConsultationStatus, UserRole))
)
def test_transition_is_valid_only_for_listed_edges(current, target, role):
    result = validate_status_transition(current, target, role)

    assert result.is_valid is ((current, target, role) in ALLOWED_EDGES)
    if result.is_valid:
        assert result.error is None
    else:
        assert result.error


def test_wrong_role_message_names_permitted_role():
    result = validate_status_transition("pending_admin_review", "assigned", R.DOCTOR)

    assert not result.is_valid
    assert "Doctor role cannot transition" in result.error
    assert "Only Admin can perform this transition" in result.error


def test_wrong_role_message_lists_every_canceller():
    result = validate_status_transition("scheduled", "cancelled", R.PATIENT)

    assert "Only Admin, Doctor can perform this transition" in result.error


def test_scheduled_cannot_skip_to_completed():
    result = validate_status_transition("scheduled", "completed", R.DOCTOR)

    assert not result.is_valid
    assert "not allowed" in result.error


@pytest.mark.parametrize("status", list(ConsultationStatus))
def test_self_transition_is_never_a_valid_edge(status):
    result = validate_status_transition(status, status, R.ADMIN)

    assert not result.is_valid
    assert "nothing to transition" in result.error


@pytest.mark.parametrize("target", list(ConsultationStatus))
@pytest.mark.parametrize("terminal", [S.COMPLETED, S.CANCELLED])
def test_terminal_states_are_final(terminal, target):
    for role in UserRole:
        assert not validate_status_transition(terminal, target, role).is_valid


def test_unknown_statuses_and_roles_are_rejected_without_raising():
    assert validate_status_transition("draft", "assigned", R.ADMIN).error == "Invalid current status: draft"
    assert validate_status_transition("assigned", "archived", R.ADMIN).error == "Invalid target status: archived"
    assert validate_status_transition("assigned", "confirmed", "Nurse").error == "Unknown role: Nurse"


def test_plain_string_arguments_are_accepted():
    assert validate_status_transition("assigned", "confirmed", "Patient").is_valid


def test_valid_next_statuses():
    assert set(valid_next_statuses("assigned", R.DOCTOR)) == {S.SCHEDULED, S.CANCELLED}
    assert valid_next_statuses("assigned", R.PATIENT) == [S.CONFIRMED]
    assert valid_next_statuses("pending_admin_review", R.ADMIN) == [S.ASSIGNED, S.CANCELLED]
    assert valid_next_statuses("completed", R.ADMIN) == []
    assert valid_next_statuses("bogus", R.ADMIN) == []


def test_tables_cover_every_status_and_role():
    assert set(TRANSITIONS) == set(ConsultationStatus)
    assert set(PERMISSIONS) == set(UserRole)
    for role in UserRole:
        assert set(PERMISSIONS[role]) == set(ConsultationStatus)


NOTES_ALLOWED = {S.PENDING_ADMIN_REVIEW, S.ASSIGNED, S.CONFIRMED, S.SCHEDULED, S.IN_PROGRESS}
DURATION_ALLOWED = {S.IN_PROGRESS, S.COMPLETED}
RESCHEDULE_ALLOWED = {S.CONFIRMED, S.SCHEDULED}


@pytest.mark.parametrize("status", list(ConsultationStatus))
@pytest.mark.parametrize("role", [R.DOCTOR, R.ADMIN])
@pytest.mark.parametrize(
    "action,allowed",
    [
        (A.UPDATE_NOTES, NOTES_ALLOWED),
        (A.UPDATE_DURATION, DURATION_ALLOWED),
        (A.RESCHEDULE, RESCHEDULE_ALLOWED),
    ],
)
def test_clinical_roles_permission_boundaries(action, allowed, role, status):
    result = validate_role_permission(status, role, action)

    assert result.can_perform is (status in allowed)


@pytest.mark.parametrize("status", list(ConsultationStatus))
@pytest.mark.parametrize("action", list(ConsultationAction))
def test_patient_is_never_permitted(status, action):
    result = validate_role_permission(status, R.PATIENT, action)

    assert not result.can_perform
    assert result.error == f"Patient cannot {action.value} a consultation in {status.value} status."


def test_duration_cannot_be_set_before_the_session_starts():
    result = validate_role_permission("scheduled", R.DOCTOR, "update_duration")

    assert not result.can_perform
    assert result.error == "Doctor cannot update_duration a consultation in scheduled status."


def test_unknown_action_or_status_is_rejected():
    assert validate_role_permission("scheduled", R.DOCTOR, "delete").error == "Unknown action: delete"
    assert validate_role_permission("archived", R.DOCTOR, "update_notes").error == "Invalid consultation status: archived"
