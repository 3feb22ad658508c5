from __future__ import annotations

import logging
from typing import Callable, Optional

from ..contracts import RunState, StepAction
from .base import BuildStep

logger = logging.getLogger(__name__)

# Called with (ssh_host, ssh_port); returns False or raises to fail the build.
Provisioner = Callable[[str, int], Optional[bool]]


class ProvisionStep(BuildStep):
    """Hand the deployed VM's SSH endpoint to the host's provisioner."""

    name = "provision"

    def __init__(self, *args, provisioner: Optional[Provisioner] = None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.provisioner = provisioner

    def run(self, state: RunState) -> StepAction:
        if self.provisioner is None:
            self.ui.say("No provisioner configured; skipping provisioning")
            return StepAction.SKIP

        self.ui.say(f"Provisioning over SSH at [{state.ssh_host}:{state.ssh_port}]")
        try:
            result = self.provisioner(state.ssh_host, state.ssh_port)
        except Exception as e:
            logger.exception("Provisioner raised")
            return self.halt(state, f"Provisioning failed: {e}")

        if result is False:
            return self.halt(state, "Provisioning failed")

        self.ui.say("Provisioning complete")
        return StepAction.CONTINUE
