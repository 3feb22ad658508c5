"""Synchronous client for the Orka VM-management REST API.

Every call is a single blocking request: there is no retry and no token
refresh. Methods raise :class:`~orkabuild.errors.RequestError` when the API
cannot be reached and :class:`~orkabuild.errors.ResponseError` when it answers
with an unexpected status code.

Example::

    with OrkaClient("http://10.221.188.100") as client:
        token = client.login("ci@example.com", "secret")
        deployed = client.deploy_vm(token, "orkabuild-1a2b3c4d")
"""

from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from .config import RunConfig
from .constants import DEFAULT_IMAGE_TIMEOUT
from .errors import ParseError, RequestError, ResponseError
from .models import (
    ApiModel,
    ImageCommitRequest,
    ImageCopyRequest,
    ImageDeleteRequest,
    ImageSaveRequest,
    MessageResponse,
    TokenLoginRequest,
    TokenLoginResponse,
    VMCreateRequest,
    VMDeployRequest,
    VMDeployResponse,
    VMPurgeRequest,
)

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


def _best_effort(model: Type[ModelT], response: httpx.Response) -> ModelT:
    """Parse ``response`` into ``model``, falling back to defaults."""
    try:
        return model.model_validate(response.json())
    except (ValueError, ValidationError):
        return model()


class OrkaClient:
    """Thin wrapper over ``httpx.Client`` for the Orka endpoints we use.

    Args:
        endpoint: Base URL of the Orka API.
        request_timeout: Timeout for regular calls. ``None`` waits forever.
        image_timeout: Timeout for image save/commit calls.
        http_client: Optional preconfigured client (used by tests).
    """

    def __init__(
        self,
        endpoint: str,
        request_timeout: Optional[float] = None,
        image_timeout: float = DEFAULT_IMAGE_TIMEOUT,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        self.endpoint = endpoint.rstrip("/")
        self.image_timeout = image_timeout
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(timeout=request_timeout)

    @classmethod
    def from_config(
        cls, config: RunConfig, http_client: Optional[httpx.Client] = None
    ) -> "OrkaClient":
        return cls(
            config.endpoint,
            request_timeout=config.request_timeout,
            image_timeout=config.image_timeout,
            http_client=http_client,
        )

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> "OrkaClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    def _request(
        self,
        method: str,
        path: str,
        operation: str,
        payload: ApiModel,
        token: Optional[str] = None,
        expected: Optional[int] = 200,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send one JSON request; ``timeout`` overrides the client default."""
        headers = {"Content-Type": "application/json"}
        if token is not None:
            headers["Authorization"] = f"Bearer {token}"

        url = f"{self.endpoint}/{path}"
        extra = {"timeout": timeout} if timeout is not None else {}
        logger.debug(f"{operation}: {method} {url}")
        try:
            response = self._http.request(
                method,
                url,
                json=payload.to_wire(),
                headers=headers,
                **extra,
            )
        except httpx.HTTPError as e:
            raise RequestError(operation, str(e) or type(e).__name__) from e

        if expected is None:
            ok = response.is_success
        else:
            ok = response.status_code == expected
        if not ok:
            raise ResponseError(operation, response.status_code, response.reason_phrase)
        return response

    # ------------------------------------------------------------------
    def login(self, user: str, password: str) -> str:
        """Exchange credentials for a bearer token.

        The token is read best-effort; a body without one yields ``""``.
        """
        response = self._request(
            "POST",
            "token",
            "login",
            TokenLoginRequest(user=user, password=password),
            expected=None,
        )
        return _best_effort(TokenLoginResponse, response).token

    def copy_image(self, token: str, source_image: str, dest_image: str) -> MessageResponse:
        response = self._request(
            "POST",
            "resources/image/copy",
            "image copy",
            ImageCopyRequest(source_image=source_image, dest_image=dest_image),
            token=token,
        )
        return _best_effort(MessageResponse, response)

    def create_vm_config(
        self, token: str, name: str, image: str, cpu_core: int
    ) -> MessageResponse:
        """Create a VM configuration named ``name`` booting from ``image``."""
        response = self._request(
            "POST",
            "resources/vm/create",
            "vm create",
            VMCreateRequest(
                name=name,
                image=image,
                base_image=name,
                cpu_core=cpu_core,
                vcpu_count=cpu_core,
            ),
            token=token,
            expected=201,
        )
        return _best_effort(MessageResponse, response)

    def deploy_vm(self, token: str, name: str) -> VMDeployResponse:
        """Deploy the VM configuration ``name`` and return its coordinates.

        Raises:
            ParseError: If the response body is not a deploy payload.
        """
        response = self._request(
            "POST",
            "resources/vm/deploy",
            "vm deploy",
            VMDeployRequest(name=name),
            token=token,
        )
        try:
            return VMDeployResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            raise ParseError(
                f"Could not parse deploy response: {e}", operation="vm deploy"
            ) from e

    def commit_image(self, token: str, vm_id: str) -> MessageResponse:
        response = self._request(
            "POST",
            "resources/image/commit",
            "image commit",
            ImageCommitRequest(vm_id=vm_id),
            token=token,
            timeout=self.image_timeout,
        )
        return _best_effort(MessageResponse, response)

    def save_image(self, token: str, vm_id: str, image_name: str) -> MessageResponse:
        response = self._request(
            "POST",
            "resources/image/save",
            "image save",
            ImageSaveRequest(vm_id=vm_id, image_name=image_name),
            token=token,
            timeout=self.image_timeout,
        )
        return _best_effort(MessageResponse, response)

    def delete_image(self, token: str, image_name: str) -> MessageResponse:
        response = self._request(
            "DELETE",
            "resources/image/delete",
            "image delete",
            ImageDeleteRequest(image_name=image_name),
            token=token,
        )
        return _best_effort(MessageResponse, response)

    def purge_vm(self, token: str, name: str) -> MessageResponse:
        """Stop and remove the VM configuration ``name`` and its instances."""
        response = self._request(
            "DELETE",
            "resources/vm/purge",
            "vm purge",
            VMPurgeRequest(name=name),
            token=token,
        )
        return _best_effort(MessageResponse, response)
