from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from sipbot.core.errors import (
    FundNotFoundError,
    InvalidInputError,
    InvalidStateTransitionError,
    PlanNotFoundError,
    UserNotFoundError,
)
from sipbot.core.models import Frequency, PlanState
from sipbot.flows.plan import (
    calc_current_installment_amount,
    create_plan,
    get_plan,
    list_user_plans,
    modify_step_up,
    pause_plan,
    stop_plan,
    unpause_plan,
)
from sipbot.flows.user import add_user, get_user, get_user_by_email


class TestCreatePlan:
    def test_new_plan_is_active_and_due_on_start_date(self, make_plan, plan_repo):
        plan = make_plan()

        assert plan.id == "SIP_000001"
        assert plan.state == PlanState.ACTIVE
        assert plan.installment_count == 0
        assert plan.next_execution_date == plan.start_date == date(2024, 1, 15)
        assert plan_repo.get(plan.id) == plan

    def test_ids_are_unique_and_sequential(self, make_plan):
        assert [make_plan().id for _ in range(3)] == ["SIP_000001", "SIP_000002", "SIP_000003"]

    @pytest.mark.parametrize(
        "overrides",
        [
            {"amount": Decimal("0")},
            {"amount": Decimal("-100")},
            {"step_up_pct": Decimal("-5")},
            {"user_id": ""},
            {"fund_id": ""},
        ],
    )
    def test_invalid_input_rejected(self, make_plan, plan_repo, overrides):
        with pytest.raises(InvalidInputError):
            make_plan(**overrides)
        assert plan_repo.count() == 0

    def test_unknown_user(self, make_plan):
        with pytest.raises(UserNotFoundError) as exc_info:
            make_plan(user_id="USER_404")
        assert exc_info.value.entity_id == "USER_404"

    def test_unknown_fund(self, make_plan):
        with pytest.raises(FundNotFoundError):
            make_plan(fund_id="FUND_404")

    def test_plan_not_found(self, plan_repo):
        with pytest.raises(PlanNotFoundError) as exc_info:
            get_plan(plan_id="SIP_404", plan_repo=plan_repo)
        assert "SIP_404" in str(exc_info.value)


class TestLifecycle:
    def test_pause_unpause_stop(self, make_plan, plan_repo):
        plan = make_plan()

        assert pause_plan(plan_id=plan.id, plan_repo=plan_repo).state == PlanState.PAUSED
        assert unpause_plan(plan_id=plan.id, plan_repo=plan_repo).state == PlanState.ACTIVE
        assert pause_plan(plan_id=plan.id, plan_repo=plan_repo).state == PlanState.PAUSED
        assert stop_plan(plan_id=plan.id, plan_repo=plan_repo).state == PlanState.STOPPED
        assert plan_repo.get(plan.id).state == PlanState.STOPPED

    def test_stop_from_paused(self, make_plan, plan_repo):
        plan = make_plan()
        pause_plan(plan_id=plan.id, plan_repo=plan_repo)
        assert stop_plan(plan_id=plan.id, plan_repo=plan_repo).state == PlanState.STOPPED

    def test_pause_twice_rejected(self, make_plan, plan_repo):
        plan = make_plan()
        pause_plan(plan_id=plan.id, plan_repo=plan_repo)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            pause_plan(plan_id=plan.id, plan_repo=plan_repo)

        err = exc_info.value
        assert err.plan_id == plan.id
        assert err.current_state == "PAUSED"
        assert err.operation == "pause"

    def test_unpause_active_rejected(self, make_plan, plan_repo):
        plan = make_plan()
        with pytest.raises(InvalidStateTransitionError):
            unpause_plan(plan_id=plan.id, plan_repo=plan_repo)

    @pytest.mark.parametrize("operation", [pause_plan, unpause_plan, stop_plan])
    def test_stopped_is_terminal(self, make_plan, plan_repo, operation):
        plan = make_plan()
        stop_plan(plan_id=plan.id, plan_repo=plan_repo)

        with pytest.raises(InvalidStateTransitionError) as exc_info:
            operation(plan_id=plan.id, plan_repo=plan_repo)
        assert exc_info.value.current_state == "STOPPED"
        assert plan_repo.get(plan.id).state == PlanState.STOPPED

    def test_unpause_keeps_next_execution_date(self, make_plan, plan_repo):
        plan = make_plan()
        pause_plan(plan_id=plan.id, plan_repo=plan_repo)
        resumed = unpause_plan(plan_id=plan.id, plan_repo=plan_repo)
        assert resumed.next_execution_date == date(2024, 1, 15)

    def test_missing_plan(self, plan_repo):
        with pytest.raises(PlanNotFoundError):
            stop_plan(plan_id="SIP_404", plan_repo=plan_repo)


class TestStepUp:
    def test_modify_step_up_on_paused_plan(self, make_plan, plan_repo):
        plan = make_plan()
        pause_plan(plan_id=plan.id, plan_repo=plan_repo)

        updated = modify_step_up(plan_id=plan.id, step_up_pct=Decimal("5"), plan_repo=plan_repo)
        assert updated.step_up_pct == Decimal("5")
        assert plan_repo.get(plan.id).step_up_pct == Decimal("5")

    def test_modify_step_up_rejects_negative(self, make_plan, plan_repo):
        plan = make_plan(step_up_pct=Decimal("3"))
        with pytest.raises(InvalidInputError):
            modify_step_up(plan_id=plan.id, step_up_pct=Decimal("-1"), plan_repo=plan_repo)
        assert plan_repo.get(plan.id).step_up_pct == Decimal("3")

    def test_modify_step_up_on_stopped_plan(self, make_plan, plan_repo):
        plan = make_plan()
        stop_plan(plan_id=plan.id, plan_repo=plan_repo)
        with pytest.raises(InvalidStateTransitionError) as exc_info:
            modify_step_up(plan_id=plan.id, step_up_pct=Decimal("5"), plan_repo=plan_repo)
        assert exc_info.value.operation == "modify_step_up"

    def test_current_installment_amount(self, make_plan, plan_repo):
        plan = make_plan(step_up_pct=Decimal("10"))
        stored = plan_repo.get(plan.id)
        stored.installment_count = 3
        plan_repo.update(stored)

        assert calc_current_installment_amount(plan_id=plan.id, plan_repo=plan_repo) == Decimal("1331")


class TestQueries:
    def test_list_user_plans_with_state_filter(self, make_plan, plan_repo, user):
        first = make_plan()
        second = make_plan(frequency=Frequency.WEEKLY)
        pause_plan(plan_id=second.id, plan_repo=plan_repo)

        all_ids = [p.id for p in list_user_plans(user_id=user.id, plan_repo=plan_repo)]
        paused = list_user_plans(user_id=user.id, state=PlanState.PAUSED, plan_repo=plan_repo)

        assert all_ids == [first.id, second.id]
        assert [p.id for p in paused] == [second.id]


class TestUsers:
    def test_duplicate_email_rejected(self, user, user_repo, id_generator):
        with pytest.raises(InvalidInputError):
            add_user(name="Other", email="ALICE@example.com", user_repo=user_repo, id_generator=id_generator)

    def test_lookup(self, user, user_repo):
        assert get_user(user_id=user.id, user_repo=user_repo).name == "Alice"
        assert get_user_by_email(email="alice@example.com", user_repo=user_repo).id == user.id
        with pytest.raises(UserNotFoundError):
            get_user(user_id="USER_404", user_repo=user_repo)

    def test_explicit_user_id_is_validated(self, user_repo, id_generator):
        created = add_user(
            user_id="  U-42 ",
            name="Bob",
            email="bob@example.com",
            user_repo=user_repo,
            id_generator=id_generator,
        )
        assert created.id == "U-42"
        assert user_repo.exists("U-42")

        with pytest.raises(InvalidInputError):
            add_user(
                user_id="   ",
                name="Carol",
                email="carol@example.com",
                user_repo=user_repo,
                id_generator=id_generator,
            )
        assert user_repo.get_by_email("carol@example.com") is None
