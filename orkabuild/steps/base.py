"""Base class for build steps."""

from __future__ import annotations

import abc

from ..client import OrkaClient
from ..config import RunConfig
from ..constants import STATE_KEY_ERROR
from ..contracts import RunState, StepAction
from ..reporting import Reporter
from ..store import KeyValueStore


class BuildStep(metaclass=abc.ABCMeta):
    """One stage of the build, driven by :class:`~orkabuild.runner.StepRunner`.

    Steps receive their collaborators explicitly and share progress only
    through the ``RunState`` handed to ``run`` and ``cleanup``.
    """

    name: str = "step"

    def __init__(
        self,
        config: RunConfig,
        client: OrkaClient,
        reporter: Reporter,
        store: KeyValueStore,
    ) -> None:
        self.config = config
        self.client = client
        self.ui = reporter
        self.store = store

    @abc.abstractmethod
    def run(self, state: RunState) -> StepAction:
        """Advance the build and tell the runner how to proceed."""
        raise NotImplementedError

    def cleanup(self, state: RunState) -> None:
        """Undo or report on this step's work (no-op by default)."""
        pass

    def halt(self, state: RunState, error: object) -> StepAction:
        """Report ``error``, record it on the run and stop the build."""
        self.ui.error(str(error))
        state.fail(error)
        self.store.put(STATE_KEY_ERROR, str(error))
        return StepAction.HALT
