"""
Domain Layer - Static Data Models

Defines the intents, prompt requests and typed flow options shared by
the dialog engine and the concrete flows.
"""

from smartthings_dialogs.domain.models import (
    AuthorizationResult,
    AuthorizeDetails,
    FoundChoice,
    Intent,
    MainOptions,
    PromptSpec,
    PromptType,
    QueryDetails,
)

__all__ = [
    "AuthorizationResult",
    "AuthorizeDetails",
    "FoundChoice",
    "Intent",
    "MainOptions",
    "PromptSpec",
    "PromptType",
    "QueryDetails",
]
