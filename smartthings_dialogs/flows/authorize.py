"""
Authorize Flow

Collects who may use the location and how to authorize it, confirms the
choices, then delegates to the sign-in flow. Ends with an
AuthorizationResult, or with None when the user declined, chose the
unsupported personal access token method, or did not sign in.
"""

import logging

from ..domain.models import AuthorizationResult, AuthorizeDetails, PromptSpec, PromptType
from ..execution.sign_in import SIGN_IN_FLOW
from ..execution.waterfall import StepContext, WaterfallFlow
from ..execution.schemas.state_machine import StepOutcome
from ..infrastructure.oauth import TokenResponse

logger = logging.getLogger(__name__)

AUTHORIZE_FLOW = "authorize"

INSTALLATION_CHOICES = ["Everybody in this workspace", "Only full members", "Just me"]
AUTH_TYPE_CHOICES = ["Personal Access Token (all available locations)", "OAuth 2.0 (single location)"]

INSTALLATION_SUMMARY = {0: "everybody", 1: "only full members", 2: "just yourself"}
AUTH_TYPE_SUMMARY = {
    0: "a SmartThings personal access token",
    1: "a SmartThings OAuth 2.0 authorization",
}

PERSONAL_ACCESS_TOKEN = 0
OAUTH = 1

RETRY_CHOICE = "Sorry, please choose from the list."
PAT_UNSUPPORTED = (
    "Authorizing with a personal access token isn't supported yet. "
    "Please start again and choose OAuth 2.0."
)


def confirmation_message(details: AuthorizeDetails) -> str:
    install = INSTALLATION_SUMMARY.get(details.installation_context.index, "unknown")
    auth = AUTH_TYPE_SUMMARY.get(details.auth_type.index, "unknown")
    return f"Please confirm, you want to authorize a location for {install}, using {auth}. Is this correct?"


class AuthorizeFlow(WaterfallFlow):
    def __init__(self, connection_name: str, flow_id: str = AUTHORIZE_FLOW):
        super().__init__(
            flow_id,
            [
                self.installation_context_step,
                self.auth_type_step,
                self.confirm_step,
                self.authorize_step,
                self.final_step,
            ],
            options_model=AuthorizeDetails,
        )
        self.connection_name = connection_name

    async def installation_context_step(self, step: StepContext) -> StepOutcome:
        """If an installation context has not been provided, prompt for one."""
        details: AuthorizeDetails = step.options
        if details.installation_context is not None:
            return step.next(details.installation_context)
        return step.prompt(PromptSpec(
            type=PromptType.CHOICE,
            prompt="Who should be able to access this SmartThings location?",
            retry_prompt=RETRY_CHOICE,
            choices=INSTALLATION_CHOICES,
        ))

    async def auth_type_step(self, step: StepContext) -> StepOutcome:
        """If an authorization type has not been provided, prompt for one."""
        details: AuthorizeDetails = step.options
        details.installation_context = step.result
        if details.auth_type is not None:
            return step.next(details.auth_type)
        return step.prompt(PromptSpec(
            type=PromptType.CHOICE,
            prompt="How do you want to authorize your account?",
            retry_prompt=RETRY_CHOICE,
            choices=AUTH_TYPE_CHOICES,
        ))

    async def confirm_step(self, step: StepContext) -> StepOutcome:
        details: AuthorizeDetails = step.options
        details.auth_type = step.result
        return step.prompt(PromptSpec(
            type=PromptType.CONFIRM,
            prompt=confirmation_message(details),
            retry_prompt="Please answer yes or no.",
        ))

    async def authorize_step(self, step: StepContext) -> StepOutcome:
        if step.result is not True:
            return step.next(None)

        details: AuthorizeDetails = step.options
        if details.auth_type.index == OAUTH:
            logger.info("Authorizing an OAuth 2.0 connection")
            return step.begin_dialog(SIGN_IN_FLOW)

        logger.info("Personal access token authorization requested; not supported")
        step.turn.send_activity(PAT_UNSUPPORTED)
        return step.next(None)

    async def final_step(self, step: StepContext) -> StepOutcome:
        token = step.result
        if not isinstance(token, TokenResponse):
            return step.end_dialog(None)

        details: AuthorizeDetails = step.options
        return step.end_dialog(AuthorizationResult(
            token=token.token,
            connection_name=token.connection_name,
            installation_context=details.installation_context,
            auth_type=details.auth_type,
        ))
