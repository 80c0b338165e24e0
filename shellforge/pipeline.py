from __future__ import annotations

import functools
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Protocol, Sequence

from . import console
from .context import RunContext
from .errors import ProvisionError, ProvisionWarning
from .state import StepState

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single idempotent install step.

    run() performs its own existence check and returns SKIPPED when the
    target is already satisfied, SUCCEEDED after installing.
    """

    step_id: str
    title: str
    required: bool

    def run(self, ctx: RunContext) -> StepState:
        ...


@dataclass
class PipelineResult:
    states: Dict[str, StepState] = field(default_factory=dict)
    failed_steps: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    history: Dict[str, List[StepState]] = field(default_factory=dict)

    def transition(self, step_id: str, state: StepState) -> None:
        self.states[step_id] = state
        self.history.setdefault(step_id, []).append(state)
        logger.debug("Step %s -> %s", step_id, state.value)

    @property
    def ok(self) -> bool:
        return not self.failed_steps


def run_pipeline(ctx: RunContext, steps: Sequence[Step]) -> PipelineResult:
    """Run every step in order.

    Failures of required steps are collected (the run continues so the user
    gets a complete report); failures of optional steps become warnings.
    """

    result = PipelineResult()
    for step in steps:
        mark = functools.partial(result.transition, step.step_id)
        mark(StepState.NOT_STARTED)
        console.header(step.title)
        logger.info("Running step %s", step.step_id)
        mark(StepState.CHECKING)
        ctx.on_state = mark
        try:
            state = step.run(ctx)
        except (ProvisionError, ProvisionWarning, OSError) as e:
            mark(StepState.FAILED)
            logger.info("Step %s failed: %s", step.step_id, e, exc_info=True)
            if step.required:
                console.error(f"{step.title} failed: {e}")
                result.failed_steps.append(step.title)
            else:
                console.warning(f"{step.title} failed (optional): {e}")
                result.warnings.append(f"{step.title}: {e}")
        else:
            mark(state)
            logger.info("Step %s finished: %s", step.step_id, state.value)
        finally:
            ctx.on_state = None
        print()

    result.warnings[:0] = ctx.warnings
    return result
