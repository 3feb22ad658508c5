"""orkabuild: build Orka VM images through the Orka REST API."""

from .client import OrkaClient
from .config import RunConfig, load_config
from .contracts import Compensation, CompensationKind, RunState, StepAction, StepRecord
from .errors import ConfigError, OrkaError, ParseError, RequestError, ResponseError
from .reporting import ConsoleReporter, LoggingReporter, RecordingReporter, Reporter
from .runner import StepRunner, build_workflow
from .store import InMemoryStore, KeyValueStore

__version__ = "0.1.0"
__all__ = [
    "OrkaClient",
    "RunConfig",
    "load_config",
    "Compensation",
    "CompensationKind",
    "RunState",
    "StepAction",
    "StepRecord",
    "ConfigError",
    "OrkaError",
    "ParseError",
    "RequestError",
    "ResponseError",
    "ConsoleReporter",
    "LoggingReporter",
    "RecordingReporter",
    "Reporter",
    "StepRunner",
    "build_workflow",
    "InMemoryStore",
    "KeyValueStore",
]
