"""Request and response payloads of the Orka REST API."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ApiModel(BaseModel):
    """Base for wire models: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class TokenLoginRequest(ApiModel):
    user: str
    password: str


class TokenLoginResponse(ApiModel):
    token: str = ""
    message: Optional[str] = None


class ImageCopyRequest(ApiModel):
    source_image: str = Field(alias="sourceImage")
    dest_image: str = Field(alias="destImage")


class VMCreateRequest(ApiModel):
    """Builder VM configuration.

    ``image`` is the image the VM boots from, ``base_image`` names the
    configuration's own image slot (the builder name).
    """

    name: str
    image: str
    base_image: str = Field(alias="baseImage")
    cpu_core: int = Field(alias="cpuCore")
    vcpu_count: int = Field(alias="vcpuCount")


class VMDeployRequest(ApiModel):
    name: str


class VMDeployResponse(ApiModel):
    vm_id: str = Field(default="", alias="vmId")
    ip: str = ""
    ssh_port: Union[str, int] = Field(default="", alias="sshPort")
    message: Optional[str] = None


class ImageCommitRequest(ApiModel):
    vm_id: str = Field(alias="vmId")


class ImageSaveRequest(ApiModel):
    vm_id: str = Field(alias="vmId")
    image_name: str = Field(alias="imageName")


class ImageDeleteRequest(ApiModel):
    image_name: str = Field(alias="imageName")


class VMPurgeRequest(ApiModel):
    name: str


class MessageResponse(ApiModel):
    """Generic response carrying an optional human readable message."""

    message: Optional[str] = None
