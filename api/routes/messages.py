"""Message endpoints.

Provides REST API endpoints for appending messages and date markers to the
transcript and listing what has been written so far. Messages are
append-only: there are no edit or delete endpoints.
"""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import ConversationStoreDep
from api.models import ConversationActionResponse
from api.utils import apply_command
from transcript.conversation_input import ConversationInput, MessageDraft
from transcript.message import Message

router = APIRouter(
    prefix="/messages",
    tags=["messages"],
)


# ============================================================================
# Request Models
# ============================================================================


class SendMessageRequest(BaseModel):
    """Request model for sending a message.

    Attributes:
        sender_id: Id of the sending participant.
        text: Message body.
        timestamp: Send time (defaults to now).
        type: "text", "audio" or "image".
        audio_duration: MM:SS or HH:MM:SS, required for audio.
        image_url: Image reference, required for images.
        image_caption: Optional image caption.
        reply_to_id: Id of the message being replied to.
    """

    sender_id: str = Field(min_length=1, description="Sending participant id")
    text: str = Field(default="", description="Message body")
    timestamp: datetime | None = Field(default=None, description="Send time")
    type: Literal["text", "audio", "image"] = Field(default="text")
    audio_duration: str | None = Field(default=None)
    image_url: str | None = Field(default=None)
    image_caption: str | None = Field(default=None)
    reply_to_id: str | None = Field(default=None)


class DateMarkerRequest(BaseModel):
    """Request model for inserting a date marker.

    Attributes:
        label: Header text, e.g. "Yesterday" or "Last week".
        timestamp: Marker timestamp (defaults to now).
    """

    label: str = Field(description="Header text")
    timestamp: datetime | None = Field(default=None)


# ============================================================================
# Response Models
# ============================================================================


class MessageListResponse(BaseModel):
    """Response model for the message list.

    Attributes:
        messages: Messages in authoring order.
        total_count: Number of messages, date markers included.
        marker_count: Number of date markers.
    """

    messages: list[Message]
    total_count: int
    marker_count: int


# ============================================================================
# Route Handlers
# ============================================================================


@router.get("", response_model=MessageListResponse)
async def list_messages(store: ConversationStoreDep) -> MessageListResponse:
    """List all messages in authoring order.

    Args:
        store: The conversation store dependency.

    Returns:
        Messages with counts.
    """
    messages = store.state.messages
    return MessageListResponse(
        messages=messages,
        total_count=len(messages),
        marker_count=sum(1 for m in messages if m.is_date_marker),
    )


@router.post("", response_model=ConversationActionResponse)
async def send_message(
    request: SendMessageRequest, store: ConversationStoreDep
) -> ConversationActionResponse:
    """Append a message to the end of the transcript.

    The message is appended even if its timestamp is earlier than the last one.

    Args:
        request: Message fields.
        store: The conversation store dependency.

    Returns:
        Action result with the new message id.

    Raises:
        ValueError: If a field required by the message type is missing.
    """
    draft = MessageDraft.model_validate(request.model_dump(exclude_none=True))
    apply_command(store, ConversationInput(operation="send_message", message=draft))
    message = store.state.messages[-1]

    return ConversationActionResponse(
        operation="send_message",
        message=f"Sent {message.type} message",
        entity_id=message.id,
        summary=store.state.summary,
    )


@router.post("/date-marker", response_model=ConversationActionResponse)
async def insert_date_marker(
    request: DateMarkerRequest, store: ConversationStoreDep
) -> ConversationActionResponse:
    """Append a date marker header.

    Args:
        request: Marker label and optional timestamp.
        store: The conversation store dependency.

    Returns:
        Action result with the marker id.

    Raises:
        ValueError: If the label is empty or whitespace.
    """
    fields = {"operation": "insert_date_marker", "label": request.label}
    if request.timestamp is not None:
        fields["timestamp"] = request.timestamp
    apply_command(store, ConversationInput(**fields))
    marker = store.state.messages[-1]

    return ConversationActionResponse(
        operation="insert_date_marker",
        message=f"Inserted date marker '{marker.text}'",
        entity_id=marker.id,
        summary=store.state.summary,
    )
