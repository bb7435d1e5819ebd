"""Conversation command payloads."""

from datetime import datetime, timezone
from typing import Any, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from transcript.message import SYSTEM_DATE_SENDER_ID, MessageType
from transcript.participant import Participant


ConversationOperation = Literal[
    "add_participant",
    "remove_participant",
    "update_participant",
    "report_avatar_error",
    "set_as_me",
    "send_message",
    "insert_date_marker",
    "update_chat_settings",
    "update_phone_status",
]

CHAT_SETTINGS_FIELDS = frozenset({"mode", "title", "avatar"})
PHONE_STATUS_FIELDS = frozenset({"battery_level", "custom_time"})


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class MessageDraft(BaseModel):
    """Fields supplied by the author when sending a message.

    The store assigns the id. Everything else is copied onto the new message
    as given; no reordering by timestamp ever happens.

    Args:
        sender_id: Id of the participant sending the message.
        text: Message body.
        timestamp: When the message was sent (defaults to now).
        type: "text", "audio" or "image".
        audio_duration: Required for audio messages.
        image_url: Required for image messages.
        image_caption: Optional caption for image messages.
        reply_to_id: Id of the message being replied to.
        reply_to_preview: Cached preview of the replied message.
        reply_to_type: Cached type of the replied message.
    """

    sender_id: str = Field(description="Sending participant id")
    text: str = Field(default="", description="Message body")
    timestamp: datetime = Field(default_factory=_utcnow, description="Send time")
    type: MessageType = Field(default="text", description="Message type")
    audio_duration: Optional[str] = Field(default=None)
    image_url: Optional[str] = Field(default=None)
    image_caption: Optional[str] = Field(default=None)
    reply_to_id: Optional[str] = Field(default=None)
    reply_to_preview: Optional[str] = Field(default=None)
    reply_to_type: Optional[MessageType] = Field(default=None)

    @field_validator("audio_duration")
    @classmethod
    def validate_audio_duration(cls, value: Optional[str]) -> Optional[str]:
        """Validate the duration looks like MM:SS or HH:MM:SS.

        Args:
            value: Duration string to validate.

        Returns:
            The validated duration, or None if blank.

        Raises:
            ValueError: If the duration has the wrong shape.
        """
        if value is None or not value.strip():
            return None
        parts = value.strip().split(":")
        if len(parts) not in (2, 3) or not all(part.isdigit() for part in parts):
            raise ValueError(
                f"Audio duration must be MM:SS or HH:MM:SS, got '{value}'"
            )
        return value.strip()

    def validate_draft(self) -> None:
        """Check cross-field rules for the chosen message type.

        Raises:
            ValueError: If a field required by the message type is missing.
        """
        if self.sender_id == SYSTEM_DATE_SENDER_ID:
            raise ValueError(
                f"Sender id '{SYSTEM_DATE_SENDER_ID}' is reserved for date markers"
            )
        if not self.sender_id.strip():
            raise ValueError("Message requires a sender")
        if self.type == "audio" and not self.audio_duration:
            raise ValueError("Audio messages require an audio duration")
        if self.type == "image" and not (self.image_url and self.image_url.strip()):
            raise ValueError("Image messages require an image URL or uploaded image")


class ConversationInput(BaseModel):
    """A single command against the conversation.

    Supports every conversation action through an operation discriminator.
    Different operations read different fields; validate_input() checks that
    the fields an operation needs are present and well formed.

    Args:
        operation: The command to perform.
        timestamp: When the command was issued (used for date markers).
        input_id: Unique identifier for this command.
        participant_id: Target participant (remove, set_as_me, avatar error).
        name: Display name for add_participant.
        avatar: Avatar reference for add_participant.
        participant: Full replacement record for update_participant.
        message: Draft for send_message.
        label: Header text for insert_date_marker.
        changes: Partial field values for the settings updates.
    """

    operation: ConversationOperation = Field(description="Command to perform")
    timestamp: datetime = Field(
        default_factory=_utcnow, description="When the command was issued"
    )
    input_id: str = Field(
        default_factory=lambda: str(uuid4()),
        description="Unique identifier for this command",
    )
    participant_id: Optional[str] = Field(default=None)
    name: Optional[str] = Field(default=None)
    avatar: Optional[str] = Field(default=None)
    participant: Optional[Participant] = Field(default=None)
    message: Optional[MessageDraft] = Field(default=None)
    label: Optional[str] = Field(default=None)
    changes: dict[str, Any] = Field(default_factory=dict)

    def validate_input(self) -> None:
        """Validate that the fields required by the operation are present.

        Raises:
            ValueError: If the command cannot be applied as given.
        """
        if self.operation == "add_participant":
            if self.name is None or not self.name.strip():
                raise ValueError("Operation 'add_participant' requires a non-empty 'name'")
            if self.participant_id is not None:
                raise ValueError("Participant ids are assigned by the store")
        elif self.operation in ("remove_participant", "report_avatar_error", "set_as_me"):
            if not self.participant_id:
                raise ValueError(
                    f"Operation '{self.operation}' requires 'participant_id' field"
                )
        elif self.operation == "update_participant":
            if self.participant is None:
                raise ValueError("Operation 'update_participant' requires 'participant' field")
        elif self.operation == "send_message":
            if self.message is None:
                raise ValueError("Operation 'send_message' requires 'message' field")
            self.message.validate_draft()
        elif self.operation == "insert_date_marker":
            if self.label is None or not self.label.strip():
                raise ValueError("Date marker label cannot be empty")
        elif self.operation == "update_chat_settings":
            self._validate_changes(CHAT_SETTINGS_FIELDS)
        elif self.operation == "update_phone_status":
            self._validate_changes(PHONE_STATUS_FIELDS)

    def _validate_changes(self, allowed: frozenset[str]) -> None:
        """Validate a partial update only names known fields."""
        unknown = set(self.changes) - allowed
        if unknown:
            raise ValueError(
                f"Operation '{self.operation}' got unknown fields: {sorted(unknown)}"
            )

    def get_summary(self) -> str:
        """Return human-readable one-line summary of this command.

        Returns:
            Brief description for logging.
        """
        if self.operation == "add_participant":
            return f"Add participant '{self.name}'"
        if self.operation == "update_participant" and self.participant:
            return f"Update participant {self.participant.id}"
        if self.operation == "send_message" and self.message:
            preview = self.message.text
            if len(preview) > 50:
                preview = preview[:47] + "..."
            return f"{self.message.type.capitalize()} from {self.message.sender_id}: '{preview}'"
        if self.operation == "insert_date_marker":
            return f"Date marker '{self.label}'"
        if self.operation in ("update_chat_settings", "update_phone_status"):
            return f"{self.operation}: {sorted(self.changes)}"
        return f"{self.operation} {self.participant_id}"
