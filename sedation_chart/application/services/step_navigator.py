from __future__ import annotations

from collections.abc import Callable

from sedation_chart.application.notifications import Notifier, RecordingNotifier
from sedation_chart.domain.models.iv_sedation import IV_SEDATION_STEP_COUNT, SedationFieldRegistry
from sedation_chart.domain.rules.iv_sedation_rules import format_missing_fields, validate_step


class StepNavigator:
    """Moves between the form steps.

    Only forward moves validate the step being left. Going back or jumping to
    a step through the indicator never blocks.
    """

    def __init__(
        self,
        registry: SedationFieldRegistry,
        *,
        notifier: Notifier | None = None,
        step_count: int = IV_SEDATION_STEP_COUNT,
        on_step_changed: Callable[[int], None] | None = None,
        on_review_requested: Callable[[], None] | None = None,
    ) -> None:
        self.registry = registry
        self.notifier = notifier or RecordingNotifier()
        self.step_count = step_count
        self.on_step_changed = on_step_changed
        self.on_review_requested = on_review_requested
        self.current_step = 1

    @property
    def is_first(self) -> bool:
        return self.current_step == 1

    @property
    def is_last(self) -> bool:
        return self.current_step == self.step_count

    def next(self) -> bool:
        missing = validate_step(self.registry, self.current_step)
        if missing:
            self.notifier.notify("error", format_missing_fields(missing))
            return False
        if self.is_last:
            self.notifier.clear()
            if self.on_review_requested is not None:
                self.on_review_requested()
            return True
        self._move_to(self.current_step + 1)
        return True

    def previous(self) -> bool:
        if self.is_first:
            return False
        self._move_to(self.current_step - 1)
        return True

    def jump_to(self, step: int) -> None:
        if not 1 <= step <= self.step_count:
            raise ValueError(f"Step must be between 1 and {self.step_count}, got {step}")
        self._move_to(step)

    def reset(self) -> None:
        self._move_to(1)

    def _move_to(self, step: int) -> None:
        self.current_step = step
        self.notifier.clear()
        if self.on_step_changed is not None:
            self.on_step_changed(step)
