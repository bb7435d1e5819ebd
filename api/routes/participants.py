"""Participant endpoints.

Provides REST API endpoints for managing who takes part in the mocked chat:
adding, renaming, removing, designating "me", and reporting broken avatars.
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import ConversationStoreDep
from api.models import ConversationActionResponse
from api.utils import apply_command, require_participant
from transcript.conversation_input import ConversationInput
from transcript.participant import Participant

router = APIRouter(
    prefix="/participants",
    tags=["participants"],
)


# ============================================================================
# Request Models
# ============================================================================


class AddParticipantRequest(BaseModel):
    """Request model for adding a participant.

    Attributes:
        name: Display name (non-empty).
        avatar: Optional image reference (URL or data URL).
    """

    name: str = Field(min_length=1, description="Display name")
    avatar: str | None = Field(default=None, description="Image reference")


class UpdateParticipantRequest(BaseModel):
    """Request model for updating a participant.

    Only the fields that are sent are changed; send "avatar": null to clear
    the avatar.

    Attributes:
        name: New display name.
        avatar: New image reference, or null to clear it.
    """

    name: str | None = Field(default=None, min_length=1, description="New display name")
    avatar: str | None = Field(default=None, description="New image reference")


# ============================================================================
# Response Models
# ============================================================================


class ParticipantListResponse(BaseModel):
    """Response model for the participant list.

    Attributes:
        participants: Participants in the order they were added.
        me_id: Id of the participant designated as me.
        count: Number of participants.
    """

    participants: list[Participant]
    me_id: str | None
    count: int


# ============================================================================
# Route Handlers
# ============================================================================


@router.get("", response_model=ParticipantListResponse)
async def list_participants(store: ConversationStoreDep) -> ParticipantListResponse:
    """List all participants.

    Args:
        store: The conversation store dependency.

    Returns:
        The participants and the current "me".
    """
    return ParticipantListResponse(
        participants=store.state.participants,
        me_id=store.state.me_id,
        count=len(store.state.participants),
    )


@router.post("", response_model=ConversationActionResponse)
async def add_participant(
    request: AddParticipantRequest, store: ConversationStoreDep
) -> ConversationActionResponse:
    """Add a participant with a fresh id.

    Args:
        request: Name and optional avatar.
        store: The conversation store dependency.

    Returns:
        Action result with the new participant id.
    """
    input_data = ConversationInput(
        operation="add_participant", name=request.name, avatar=request.avatar
    )
    apply_command(store, input_data)
    participant = store.state.participants[-1]

    return ConversationActionResponse(
        operation="add_participant",
        message=f"Added participant '{participant.name}'",
        entity_id=participant.id,
        summary=store.state.summary,
    )


@router.patch("/{participant_id}", response_model=ConversationActionResponse)
async def update_participant(
    participant_id: str, request: UpdateParticipantRequest, store: ConversationStoreDep
) -> ConversationActionResponse:
    """Update a participant's name and/or avatar.

    Args:
        participant_id: The participant to update.
        request: Fields to change.
        store: The conversation store dependency.

    Returns:
        Action result.
    """
    current = require_participant(store, participant_id)
    changes = request.model_dump(exclude_unset=True)
    if changes.get("name") is None:
        changes.pop("name", None)

    updated = Participant.model_validate({**current.model_dump(), **changes})
    apply_command(
        store, ConversationInput(operation="update_participant", participant=updated)
    )

    return ConversationActionResponse(
        operation="update_participant",
        message=f"Updated participant '{updated.name}'",
        entity_id=participant_id,
        summary=store.state.summary,
    )


@router.delete("/{participant_id}", response_model=ConversationActionResponse)
async def remove_participant(
    participant_id: str, store: ConversationStoreDep
) -> ConversationActionResponse:
    """Remove a participant. If it was "me", "me" is cleared too.

    Args:
        participant_id: The participant to remove.
        store: The conversation store dependency.

    Returns:
        Action result.
    """
    participant = require_participant(store, participant_id)
    apply_command(
        store, ConversationInput(operation="remove_participant", participant_id=participant_id)
    )

    return ConversationActionResponse(
        operation="remove_participant",
        message=f"Removed participant '{participant.name}'",
        entity_id=participant_id,
        summary=store.state.summary,
    )


@router.post("/{participant_id}/me", response_model=ConversationActionResponse)
async def set_as_me(participant_id: str, store: ConversationStoreDep) -> ConversationActionResponse:
    """Designate a participant as "me".

    With exactly two participants, the chat switches to private mode.

    Args:
        participant_id: The participant to designate.
        store: The conversation store dependency.

    Returns:
        Action result.
    """
    participant = require_participant(store, participant_id)
    apply_command(store, ConversationInput(operation="set_as_me", participant_id=participant_id))

    return ConversationActionResponse(
        operation="set_as_me",
        message=f"'{participant.name}' is now me ({store.state.chat_settings.mode} chat)",
        entity_id=participant_id,
        summary=store.state.summary,
    )


@router.post("/{participant_id}/avatar-error", response_model=ConversationActionResponse)
async def report_avatar_error(
    participant_id: str, store: ConversationStoreDep
) -> ConversationActionResponse:
    """Report that a participant's avatar failed to load, clearing it.

    Args:
        participant_id: The participant whose avatar is broken.
        store: The conversation store dependency.

    Returns:
        Action result.
    """
    require_participant(store, participant_id)
    apply_command(
        store, ConversationInput(operation="report_avatar_error", participant_id=participant_id)
    )

    return ConversationActionResponse(
        operation="report_avatar_error",
        message="Avatar cleared",
        entity_id=participant_id,
        summary=store.state.summary,
    )
