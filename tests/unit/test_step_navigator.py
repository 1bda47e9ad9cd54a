from __future__ import annotations

import pytest

from sedation_chart.application.notifications import RecordingNotifier
from sedation_chart.application.services import step_navigator as navigator_module
from sedation_chart.application.services.step_navigator import StepNavigator
from sedation_chart.domain.models.iv_sedation import SedationFieldRegistry


def test_next_blocked_by_missing_fields() -> None:
    notifier = RecordingNotifier()
    navigator = StepNavigator(SedationFieldRegistry(), notifier=notifier)

    assert navigator.next() is False
    assert navigator.current_step == 1
    errors = notifier.texts("error")
    assert len(errors) == 1
    assert "Date" in errors[0]
    assert "Weight" in errors[0]


def test_next_advances_when_step_complete(complete_registry: SedationFieldRegistry) -> None:
    steps: list[int] = []
    notifier = RecordingNotifier()
    navigator = StepNavigator(complete_registry, notifier=notifier, on_step_changed=steps.append)

    assert navigator.next() is True
    assert navigator.current_step == 2
    assert steps == [2]
    assert notifier.cleared == 1


def test_next_on_last_step_requests_review(complete_registry: SedationFieldRegistry) -> None:
    requested: list[bool] = []
    navigator = StepNavigator(complete_registry, on_review_requested=lambda: requested.append(True))
    navigator.jump_to(5)

    assert navigator.next() is True
    assert navigator.current_step == 5
    assert requested == [True]


def test_previous_and_jump_never_validate(monkeypatch) -> None:
    calls: list[int] = []

    def _validate(registry, step):  # noqa: ANN001
        calls.append(step)
        return ["Date"]

    monkeypatch.setattr(navigator_module, "validate_step", _validate)
    navigator = StepNavigator(SedationFieldRegistry())

    navigator.jump_to(4)
    assert navigator.current_step == 4
    assert navigator.previous() is True
    assert navigator.current_step == 3
    assert calls == []

    assert navigator.next() is False
    assert calls == [3]


def test_previous_at_first_step_is_noop() -> None:
    steps: list[int] = []
    navigator = StepNavigator(SedationFieldRegistry(), on_step_changed=steps.append)

    assert navigator.previous() is False
    assert navigator.current_step == 1
    assert steps == []


@pytest.mark.parametrize("step", [0, 6])
def test_jump_to_rejects_invalid_step(step: int) -> None:
    navigator = StepNavigator(SedationFieldRegistry())

    with pytest.raises(ValueError, match="Step must be between"):
        navigator.jump_to(step)


def test_reset_returns_to_first_step() -> None:
    navigator = StepNavigator(SedationFieldRegistry())
    navigator.jump_to(3)

    navigator.reset()

    assert navigator.current_step == 1
    assert navigator.is_first
    assert not navigator.is_last
