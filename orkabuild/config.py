from __future__ import annotations

import os
import uuid
from typing import Optional

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError, field_validator, model_validator

from .constants import (
    ALLOWED_VM_CPU_CORES,
    CONFIG_ENV_VAR,
    DEFAULT_BUILDER_NAME_PREFIX,
    DEFAULT_CONFIG_PATH,
    DEFAULT_IMAGE_TIMEOUT,
    DEFAULT_VM_CPU_CORE,
)
from .errors import ConfigError

ENV_OVERRIDES = {
    "ORKA_ENDPOINT": "endpoint",
    "ORKA_USER": "user",
    "ORKA_PASSWORD": "password",
}


def _default_builder_name() -> str:
    return f"{DEFAULT_BUILDER_NAME_PREFIX}-{uuid.uuid4().hex[:8]}"


class RunConfig(BaseModel):
    """Settings for a single image build. Immutable once loaded."""

    model_config = ConfigDict(frozen=True)

    endpoint: str
    user: str
    password: str
    source_image: str
    image_name: str = ""
    vm_builder_name: str = ""
    vm_cpu_core: int = DEFAULT_VM_CPU_CORE
    image_precopy: bool = False
    no_create_image: bool = False
    no_delete_vm: bool = False
    request_timeout: Optional[float] = None
    image_timeout: float = DEFAULT_IMAGE_TIMEOUT

    @field_validator("endpoint")
    @classmethod
    def _strip_endpoint(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value:
            raise ValueError("endpoint must not be empty")
        return value

    @field_validator("user", "password", "source_image")
    @classmethod
    def _required(cls, value: str) -> str:
        if not value:
            raise ValueError("must not be empty")
        return value

    @field_validator("vm_cpu_core")
    @classmethod
    def _check_cpu_core(cls, value: int) -> int:
        if value not in ALLOWED_VM_CPU_CORES:
            allowed = ", ".join(str(c) for c in ALLOWED_VM_CPU_CORES)
            raise ValueError(f"must be one of {allowed}")
        return value

    @model_validator(mode="before")
    @classmethod
    def _fill_builder_name(cls, data):
        if isinstance(data, dict) and not data.get("vm_builder_name"):
            data = {**data, "vm_builder_name": _default_builder_name()}
        return data

    @model_validator(mode="after")
    def _check_image_name(self) -> "RunConfig":
        if not self.no_create_image and not self.image_name:
            raise ValueError("image_name is required unless no_create_image is set")
        return self

    def redacted(self) -> dict:
        """Return settings safe for display."""
        data = self.model_dump()
        data["password"] = "********"
        return data


def load_config(path: Optional[str] = None, **overrides) -> RunConfig:
    """Load build configuration from YAML and the environment.

    Args:
        path: Optional path to a config file. Falls back to the
            ORKABUILD_CONFIG env variable or 'orkabuild.yaml' in the
            current directory. A missing file is not an error as long as
            the environment supplies the required settings.
        overrides: Values that take precedence over file and environment.

    Raises:
        ConfigError: If the file cannot be parsed or validation fails.
    """

    config_path = path or os.getenv(CONFIG_ENV_VAR, DEFAULT_CONFIG_PATH)
    data: dict = {}
    if os.path.exists(config_path):
        with open(config_path) as f:
            try:
                data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")
    elif path:
        raise ConfigError(f"Config file not found: {path}")

    for env_var, field in ENV_OVERRIDES.items():
        value = os.getenv(env_var)
        if value:
            data[field] = value

    data.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return RunConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
