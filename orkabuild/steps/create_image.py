from __future__ import annotations

import logging

from ..contracts import RunState, StepAction
from ..errors import OrkaError, ResponseError
from .base import BuildStep

logger = logging.getLogger(__name__)


class CreateImageStep(BuildStep):
    """Turn the provisioned builder VM's disk into an image.

    With pre-copy the VM already runs on the destination image, so its state
    is committed back onto it; a failed commit is reported but does not stop
    the build. Otherwise the disk is saved as a new image and a failed save
    halts the build.
    """

    name = "create_image"

    def run(self, state: RunState) -> StepAction:
        config = self.config
        if config.no_create_image:
            self.ui.say("Skipping image creation because of 'no_create_image' being set.")
            return StepAction.CONTINUE

        if not state.vm_id or not state.auth_token:
            return self.halt(state, "Image creation requires a deployed VM and a token")

        self.ui.say(f"Image creation is using VM ID [{state.vm_id}]")
        self.ui.say(f"Image name is [{config.image_name}]")
        self.ui.say("Please wait as this can take a little while...")

        if config.image_precopy:
            return self._commit(state)
        return self._save(state)

    def _commit(self, state: RunState) -> StepAction:
        self.ui.say("Committing existing image since pre-copy is being used")
        try:
            result = self.client.commit_image(state.auth_token, state.vm_id)
        except ResponseError as e:
            self.ui.error(f"Error committing image [{e.status_code} {e.reason}]")
            logger.warning(f"Commit of {state.vm_id} failed; continuing")
            return StepAction.CONTINUE
        except OrkaError as e:
            return self.halt(state, e)

        self.ui.say(f"Image committed [{self.config.image_name}] [{result.message or ''}]")
        return StepAction.CONTINUE

    def _save(self, state: RunState) -> StepAction:
        image_name = self.config.image_name
        self.ui.say(f"Saving new image [{image_name}]")
        try:
            result = self.client.save_image(state.auth_token, state.vm_id, image_name)
        except OrkaError as e:
            return self.halt(state, e)

        self.ui.say(f"Image saved [{image_name}] [{result.message or ''}]")
        return StepAction.CONTINUE

    def cleanup(self, state: RunState) -> None:
        if not state.vm_id or not state.halted:
            return
        self.ui.say("Image cleanup complete.")
