from __future__ import annotations

import enum


class StepState(enum.Enum):
    """Per-step progress.

    NOT_STARTED -> CHECKING -> SKIPPED, or
    CHECKING -> INSTALLING -> (RETRYING -> INSTALLING)* -> SUCCEEDED | FAILED
    """

    NOT_STARTED = "not_started"
    CHECKING = "checking"
    INSTALLING = "installing"
    RETRYING = "retrying"
    SKIPPED = "skipped"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in {StepState.SKIPPED, StepState.SUCCEEDED, StepState.FAILED}
