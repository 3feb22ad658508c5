from __future__ import annotations

from ..cleanup import run_compensations
from ..constants import STATE_KEY_SSH_HOST, STATE_KEY_SSH_PORT, STATE_KEY_VM_ID
from ..contracts import CompensationKind, RunState, StepAction
from ..errors import OrkaError, ParseError
from .base import BuildStep


def parse_ssh_port(raw: object) -> int:
    """Convert the deploy response's SSH port to a usable port number."""
    try:
        port = int(str(raw).strip())
    except ValueError:
        raise ParseError(
            f"Invalid SSH port in deploy response: {raw!r}", operation="vm deploy"
        ) from None
    if not 0 < port < 65536:
        raise ParseError(
            f"SSH port out of range in deploy response: {port}", operation="vm deploy"
        )
    return port


class CreateVMStep(BuildStep):
    """Create the builder VM configuration and deploy it.

    When pre-copy is enabled the source image is first cloned under the
    destination image name and the VM boots from the clone, so the image
    step can later commit onto it instead of saving a new image.
    Cleanup of this step replays the run's compensations.
    """

    name = "create_vm"

    def run(self, state: RunState) -> StepAction:
        config = self.config
        boot_image = config.source_image

        if config.image_precopy:
            if config.no_create_image:
                self.ui.say(
                    "Skipping source image pre-copy because of 'no_create_image' being set"
                )
            else:
                action = self._precopy_image(state)
                if action is StepAction.HALT:
                    return action
                boot_image = config.image_name
                self.ui.say(
                    f"Builder VM configuration will use pre-copied base image [{boot_image}]"
                )
        else:
            self.ui.say(f"Builder VM configuration will use base image [{boot_image}]")

        self.ui.say(f"Creating a Builder VM configuration [{config.vm_builder_name}]")
        try:
            self.client.create_vm_config(
                state.auth_token,
                name=config.vm_builder_name,
                image=boot_image,
                cpu_core=config.vm_cpu_core,
            )
        except OrkaError as e:
            return self.halt(state, e)
        self.ui.say(f"Created builder VM configuration [{config.vm_builder_name}]")

        return self._deploy(state)

    def _precopy_image(self, state: RunState) -> StepAction:
        config = self.config
        self.ui.say(
            f"Pre-copying source image [{config.source_image}] "
            f"to destination image [{config.image_name}]"
        )
        self.ui.say(
            "This can take awhile depending on how big the source image is - please wait..."
        )

        # A failed copy can still leave a partial destination image behind.
        state.register_compensation(
            CompensationKind.DELETE_IMAGE, config.image_name, on_failure_only=True
        )
        try:
            self.client.copy_image(
                state.auth_token, config.source_image, config.image_name
            )
        except OrkaError as e:
            state.precopy_failed = True
            return self.halt(state, e)

        self.ui.say("Image copied")
        return StepAction.CONTINUE

    def _deploy(self, state: RunState) -> StepAction:
        name = self.config.vm_builder_name
        self.ui.say(f"Creating builder VM based on [{name}] configuration")
        try:
            deployed = self.client.deploy_vm(state.auth_token, name)
        except OrkaError as e:
            return self.halt(state, e)

        if not deployed.vm_id:
            return self.halt(
                state,
                ParseError("Deploy response carried no VM ID", operation="vm deploy"),
            )

        state.vm_id = deployed.vm_id
        state.register_compensation(CompensationKind.PURGE_VM, name)
        self.store.put(STATE_KEY_VM_ID, deployed.vm_id)
        self.ui.say(f"Created VM [{deployed.vm_id}]")

        if not deployed.ip:
            return self.halt(
                state,
                ParseError("Deploy response carried no IP", operation="vm deploy"),
            )

        try:
            port = parse_ssh_port(deployed.ssh_port)
        except ParseError as e:
            return self.halt(state, e)

        state.ssh_host = deployed.ip
        state.ssh_port = port
        self.store.put(STATE_KEY_SSH_HOST, deployed.ip)
        self.store.put(STATE_KEY_SSH_PORT, port)
        self.ui.say(f"SSH server will be available at [{deployed.ip}:{port}]")
        return StepAction.CONTINUE

    def cleanup(self, state: RunState) -> None:
        run_compensations(state, self.config, self.client, self.ui)
