"""Core run-state contracts shared by the build steps."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)


class StepAction(str, Enum):
    """Outcome of a single step, read by the runner."""

    CONTINUE = "continue"
    HALT = "halt"
    SKIP = "skip"


class CompensationKind(str, Enum):
    DELETE_IMAGE = "delete_image"
    PURGE_VM = "purge_vm"


class Compensation(BaseModel):
    """A cleanup action registered while the build moves forward."""

    kind: CompensationKind
    target: str
    on_failure_only: bool = False


class StepRecord(BaseModel):
    """Record of an individual step execution."""

    step_name: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    status: Optional[str] = None


def _now() -> datetime:
    return datetime.now(timezone.utc)


class RunState(BaseModel):
    """Mutable state of one build run, passed by reference to every step.

    ``vm_id`` is empty until the builder VM has been deployed. Once ``failed``
    is set no further forward step runs; only cleanup does.
    """

    auth_token: str = ""
    vm_id: str = ""
    ssh_host: str = ""
    ssh_port: int = 0
    failed: bool = False
    precopy_failed: bool = False
    cancelled: bool = False
    error: Optional[str] = None
    compensations: List[Compensation] = Field(default_factory=list)
    steps: List[StepRecord] = Field(default_factory=list)

    def fail(self, error: object) -> None:
        """Mark the run as failed with ``error`` as the last known cause."""
        self.failed = True
        self.error = str(error)

    @property
    def halted(self) -> bool:
        return self.failed or self.cancelled

    def register_compensation(
        self, kind: CompensationKind, target: str, on_failure_only: bool = False
    ) -> Compensation:
        """Append a compensation; they are undone newest first."""
        compensation = Compensation(
            kind=kind, target=target, on_failure_only=on_failure_only
        )
        self.compensations.append(compensation)
        logger.debug(f"Registered compensation {kind.value} for {target}")
        return compensation

    def pending_compensations(self) -> List[Compensation]:
        """Compensations to run for the current outcome, newest first."""
        return [
            c
            for c in reversed(self.compensations)
            if self.halted or not c.on_failure_only
        ]

    def has_compensation(self, kind: CompensationKind) -> bool:
        return any(c.kind == kind for c in self.compensations)

    def mark_step_started(self, step_name: str) -> StepRecord:
        record = StepRecord(step_name=step_name, started_at=_now(), status="running")
        self.steps.append(record)
        return record

    def mark_step_completed(self, step_name: str, status: str) -> None:
        for record in reversed(self.steps):
            if record.step_name == step_name and record.completed_at is None:
                record.completed_at = _now()
                record.status = status
                break
