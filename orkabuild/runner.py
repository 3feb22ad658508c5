"""Sequential step runner for orkabuild workflows."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .client import OrkaClient
from .config import RunConfig
from .contracts import RunState, StepAction
from .reporting import Reporter
from .steps import (
    AuthenticateStep,
    BuildStep,
    CreateImageStep,
    CreateVMStep,
    ProvisionStep,
    Provisioner,
)
from .store import InMemoryStore, KeyValueStore

logger = logging.getLogger(__name__)


class StepRunner:
    """Run build steps in order, then clean up in reverse.

    A step returning ``HALT`` (or raising) marks the run failed and stops the
    forward pass. Whatever the outcome, every step that was started gets its
    ``cleanup`` called, newest first.
    """

    def __init__(self, steps: Sequence[BuildStep], reporter: Reporter) -> None:
        self._steps = list(steps)
        self._ui = reporter
        self._cancel_requested = False

    @property
    def steps(self) -> List[BuildStep]:
        return list(self._steps)

    def cancel(self) -> None:
        """Stop before the next step; in-flight API calls are not interrupted."""
        self._cancel_requested = True

    def run(self, state: Optional[RunState] = None) -> RunState:
        """Run the steps once; a pending cancel from an earlier run is cleared."""
        self._cancel_requested = False
        state = state or RunState()
        started: List[BuildStep] = []

        for step in self._steps:
            if state.failed:
                break
            if self._cancel_requested:
                logger.info(f"Build cancelled before step {step.name}")
                self._ui.say("Build cancelled")
                state.cancelled = True
                break

            started.append(step)
            state.mark_step_started(step.name)
            try:
                action = step.run(state)
            except Exception as e:
                logger.exception(f"Step {step.name} raised")
                self._ui.error(f"Step {step.name} failed unexpectedly: {e}")
                state.fail(e)
                action = StepAction.HALT

            state.mark_step_completed(step.name, status=_status_for(action))
            logger.info(f"Step {step.name} finished with {action.value}")
            if action is StepAction.HALT:
                state.failed = True
                break

        for step in reversed(started):
            try:
                step.cleanup(state)
            except Exception as e:
                logger.exception(f"Cleanup of step {step.name} raised")
                self._ui.error(f"Cleanup of step {step.name} failed: {e}")

        return state


def _status_for(action: StepAction) -> str:
    return {
        StepAction.CONTINUE: "completed",
        StepAction.SKIP: "skipped",
        StepAction.HALT: "failed",
    }[action]


def build_workflow(
    config: RunConfig,
    client: OrkaClient,
    reporter: Reporter,
    store: Optional[KeyValueStore] = None,
    provisioner: Optional[Provisioner] = None,
) -> StepRunner:
    """Assemble the standard authenticate/create/provision/image workflow."""

    store = store if store is not None else InMemoryStore()
    collaborators = (config, client, reporter, store)
    steps: List[BuildStep] = [
        AuthenticateStep(*collaborators),
        CreateVMStep(*collaborators),
        ProvisionStep(*collaborators, provisioner=provisioner),
        CreateImageStep(*collaborators),
    ]
    return StepRunner(steps, reporter)
