"""Shared constants for orkabuild."""

DEFAULT_CONFIG_PATH = "orkabuild.yaml"
CONFIG_ENV_VAR = "ORKABUILD_CONFIG"

DEFAULT_VM_CPU_CORE = 3
ALLOWED_VM_CPU_CORES = (3, 4, 6, 8, 12, 24)
DEFAULT_BUILDER_NAME_PREFIX = "orkabuild"

# Image save/commit can take minutes on the Orka side.
DEFAULT_IMAGE_TIMEOUT = 300.0

API_REQUEST_ERROR_MESSAGE = "Error while making API request to Orka"
API_RESPONSE_ERROR_MESSAGE = "Error response from Orka API"

# Keys published to the host key/value store for the SSH provisioner.
STATE_KEY_VM_ID = "vmid"
STATE_KEY_SSH_HOST = "ssh_host"
STATE_KEY_SSH_PORT = "ssh_port"
STATE_KEY_TOKEN = "token"
STATE_KEY_ERROR = "error"
