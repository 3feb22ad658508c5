from __future__ import annotations

from ..constants import STATE_KEY_TOKEN
from ..contracts import RunState, StepAction
from ..errors import OrkaError, ParseError
from .base import BuildStep


class AuthenticateStep(BuildStep):
    """Log into the Orka API and keep the bearer token for later steps."""

    name = "authenticate"

    def run(self, state: RunState) -> StepAction:
        self.ui.say("Logging into Orka API endpoint")
        try:
            token = self.client.login(self.config.user, self.config.password)
        except OrkaError as e:
            return self.halt(state, e)

        if not token:
            return self.halt(
                state, ParseError("Login response carried no token", operation="login")
            )

        # Tokens are assumed to outlive the build; there is no refresh.
        state.auth_token = token
        self.store.put(STATE_KEY_TOKEN, token)
        self.ui.say("Logged in with token")
        return StepAction.CONTINUE
