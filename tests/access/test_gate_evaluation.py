import pytest

from src.workforce_hub.workforce_hub.access.evaluator import evaluate_gate
from src.workforce_hub.workforce_hub.access.model import Actor, Gate, ReasonCode
from src.workforce_hub.workforce_hub.access.ranking import at_least
from src.workforce_hub.workforce_hub.core.enums import Role
from src.workforce_hub.workforce_hub.core.exceptions import AmbiguousGateError, UnknownRoleError


def _actor(role, *, active=True):
    return Actor(role=role, user_id="u1", department_id="d1", is_active=active)


def test_inactive_actor_is_denied_even_on_open_gate():
    decision = evaluate_gate(_actor(Role.SUPER_ADMIN, active=False), Gate.open("dashboard"))
    assert not decision.allowed
    assert decision.reason == ReasonCode.INACTIVE


def test_required_roles_is_exact_membership():
    gate = Gate.roles("payroll", Role.HR, Role.ORG_ADMIN, Role.SUPER_ADMIN)

    assert evaluate_gate(_actor(Role.HR), gate).allowed
    denied = evaluate_gate(_actor(Role.DEPT_ADMIN), gate)
    assert not denied.allowed
    assert denied.reason == ReasonCode.ROLE_NOT_PERMITTED


@pytest.mark.parametrize("actor_role", list(Role))
@pytest.mark.parametrize("min_role", list(Role))
def test_min_role_allows_exactly_when_at_least(actor_role, min_role):
    decision = evaluate_gate(_actor(actor_role), Gate.at_least("gated", min_role))
    assert decision.allowed == at_least(actor_role, min_role)
    expected = ReasonCode.ALLOWED if decision.allowed else ReasonCode.INSUFFICIENT_RANK
    assert decision.reason == expected


def test_min_role_uses_rank():
    gate = Gate.at_least("analytics", Role.TEAM_LEAD)

    assert evaluate_gate(_actor(Role.TEAM_LEAD), gate).allowed
    assert evaluate_gate(_actor(Role.ORG_ADMIN), gate).allowed
    denied = evaluate_gate(_actor(Role.EMPLOYEE), gate)
    assert denied.reason == ReasonCode.INSUFFICIENT_RANK


def test_open_gate_allows_every_active_role():
    for role in Role:
        decision = evaluate_gate(_actor(role), Gate.open("settings"))
        assert decision.allowed
        assert decision.reason == ReasonCode.ALLOWED


def test_gate_with_both_constraints_raises():
    gate = Gate(name="broken", required_roles=frozenset({Role.HR}), min_role=Role.EMPLOYEE)
    with pytest.raises(AmbiguousGateError):
        evaluate_gate(_actor(Role.HR), gate)


def test_unknown_actor_role_raises():
    with pytest.raises(UnknownRoleError):
        evaluate_gate(_actor("WIZARD"), Gate.at_least("analytics", Role.TEAM_LEAD))


def test_evaluation_is_deterministic():
    gate = Gate.at_least("analytics", Role.TEAM_LEAD)
    actor = _actor(Role.PROJECT_MANAGER)
    assert evaluate_gate(actor, gate) == evaluate_gate(actor, gate)


def test_decision_to_dict():
    decision = evaluate_gate(_actor(Role.EMPLOYEE), Gate.at_least("analytics", Role.TEAM_LEAD))
    assert decision.to_dict() == {"allowed": False, "reasonCode": "InsufficientRank"}


@pytest.mark.parametrize(
    "gate",
    [
        Gate.open("dashboard"),
        Gate.roles("payroll", Role.HR, Role.ORG_ADMIN, Role.SUPER_ADMIN),
        Gate.roles("system-config", Role.SUPER_ADMIN),
        Gate.at_least("analytics", Role.TEAM_LEAD),
        Gate.at_least("anyone", Role.TRAINEE),
    ],
)
@pytest.mark.parametrize("role", list(Role))
def test_inactive_actor_is_denied_for_every_gate_shape(gate, role):
    decision = evaluate_gate(_actor(role, active=False), gate)
    assert not decision.allowed
    assert decision.reason == ReasonCode.INACTIVE


def test_ambiguous_gate_raises_even_for_inactive_actor():
    gate = Gate(name="broken", required_roles=frozenset({Role.HR}), min_role=Role.EMPLOYEE)
    with pytest.raises(AmbiguousGateError):
        evaluate_gate(_actor(Role.SUPER_ADMIN, active=False), gate)


@pytest.mark.parametrize("role", list(Role))
def test_required_roles_allows_only_listed_roles(role):
    listed = {Role.HR, Role.ORG_ADMIN, Role.SUPER_ADMIN}
    decision = evaluate_gate(_actor(role), Gate.roles("payroll", *listed))
    assert decision.allowed == (role in listed)
