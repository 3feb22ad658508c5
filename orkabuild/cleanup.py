"""Compensating actions run after the build halts or completes.

Steps register compensations on the ``RunState`` as they create remote
resources. Cleanup replays them newest first, filtered by the run outcome:
failure-only compensations (the pre-copied image) run only when the build
halted, the VM purge runs whenever a VM was deployed. Every failure here is
reported and swallowed so the remaining compensations still run.
"""

from __future__ import annotations

import logging

from .client import OrkaClient
from .config import RunConfig
from .contracts import Compensation, CompensationKind, RunState
from .errors import OrkaError
from .reporting import Reporter

logger = logging.getLogger(__name__)


def _purge_vm(
    compensation: Compensation, state: RunState, client: OrkaClient, ui: Reporter
) -> bool:
    if not state.vm_id:
        logger.debug(f"No deployed VM for {compensation.target}; purge skipped")
        return True

    ui.say("Removing builder VM and its configuration...")
    try:
        client.purge_vm(state.auth_token, compensation.target)
    except OrkaError as e:
        ui.error(str(e))
        return False
    ui.say("Builder VM and configuration purged")
    return True


def _delete_image(
    compensation: Compensation, state: RunState, client: OrkaClient, ui: Reporter
) -> bool:
    ui.say(f"Pre-copy was performed: cleaning up pre-copied image {compensation.target}")
    try:
        client.delete_image(state.auth_token, compensation.target)
    except OrkaError as e:
        if e.status_code is not None:
            ui.error(f"Image could not be deleted [{e.status_code}]")
        else:
            ui.error(str(e))
        return False
    ui.say(f"Image deleted [{compensation.target}]")
    return True


_HANDLERS = {
    CompensationKind.PURGE_VM: _purge_vm,
    CompensationKind.DELETE_IMAGE: _delete_image,
}


def run_compensations(
    state: RunState, config: RunConfig, client: OrkaClient, ui: Reporter
) -> bool:
    """Undo the remote resources created by this run.

    Returns:
        ``True`` when every attempted compensation succeeded.
    """

    if config.no_delete_vm:
        ui.say(
            "Skipping the deletion of the builder VM and its configuration "
            "because of no_delete_vm being set."
        )
        if config.image_precopy and state.has_compensation(CompensationKind.DELETE_IMAGE):
            ui.say(
                f"Pre-copy was performed: image {config.image_name} will be left and not removed"
            )
        return True

    ok = True
    for compensation in state.pending_compensations():
        handler = _HANDLERS[compensation.kind]
        ok = handler(compensation, state, client, ui) and ok

    if state.halted and not state.vm_id and ok:
        ui.say(
            "Nothing to cleanup: the builder VM creation and/or deployment failed."
        )
    return ok
