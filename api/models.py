"""Shared request and response models for API endpoints.

This module contains the models used by more than one router.
"""

from typing import Any

from pydantic import BaseModel, Field


class ConversationActionResponse(BaseModel):
    """Base response model for conversation action endpoints.

    This model provides a consistent structure for every command endpoint
    (add, update, remove, send, ...).

    Attributes:
        operation: The command that was applied.
        message: Human-readable message describing the result.
        entity_id: Id of the participant or message the command created or touched.
        summary: Brief summary of the conversation after the command.
    """

    operation: str
    message: str
    entity_id: str | None = None
    summary: str


class ConversationStateResponse(BaseModel):
    """Response model for conversation state endpoints.

    Attributes:
        state: The conversation in document form (camelCase keys).
        summary: Brief human-readable summary.
        issues: Consistency issues reported by validate_state().
    """

    state: dict[str, Any]
    summary: str
    issues: list[str] = Field(default_factory=list)
