"""Build steps making up the image workflow."""

from __future__ import annotations

from .authenticate import AuthenticateStep
from .base import BuildStep
from .create_image import CreateImageStep
from .create_vm import CreateVMStep, parse_ssh_port
from .provision import ProvisionStep, Provisioner

__all__ = [
    "AuthenticateStep",
    "BuildStep",
    "CreateImageStep",
    "CreateVMStep",
    "ProvisionStep",
    "Provisioner",
    "parse_ssh_port",
]
