"""Message model and message preview rules."""

from datetime import datetime
from typing import Literal, Optional

from pydantic import Field, model_validator

from transcript.base_record import DocumentModel


SYSTEM_DATE_SENDER_ID = "system_date"

MessageType = Literal["text", "audio", "image"]

PREVIEW_MAX_LENGTH = 50
PREVIEW_TRUNCATE_AT = 47
AUDIO_PREVIEW_LABEL = "Voice message"
IMAGE_PREVIEW_LABEL = "Photo"


class Message(DocumentModel):
    """A single entry in the transcript.

    Messages are append-only: they are created by the store and never
    modified afterwards. A message whose sender_id is "system_date" is a date
    marker and is rendered as an inline header rather than a bubble.

    Args:
        id: Opaque unique identifier.
        sender_id: Participant id, or "system_date" for date markers.
        text: Message body (or the header label for a date marker).
        timestamp: When the message was sent.
        type: "text", "audio" or "image".
        audio_duration: MM:SS or HH:MM:SS duration, audio messages only.
        image_url: Image reference, image messages only.
        image_caption: Optional caption, image messages only.
        reply_to_id: Id of the message this one replies to.
        reply_to_preview: Preview of the replied message captured at send time.
        reply_to_type: Type of the replied message captured at send time.
    """

    id: str = Field(description="Opaque unique identifier")
    sender_id: str = Field(description="Participant id or 'system_date'")
    text: str = Field(default="", description="Message body")
    timestamp: datetime = Field(description="When the message was sent")
    type: MessageType = Field(default="text", description="Message type")
    audio_duration: Optional[str] = Field(
        default=None, description="Audio duration (MM:SS or HH:MM:SS)"
    )
    image_url: Optional[str] = Field(default=None, description="Image reference")
    image_caption: Optional[str] = Field(default=None, description="Image caption")
    reply_to_id: Optional[str] = Field(
        default=None, description="Id of the message being replied to"
    )
    reply_to_preview: Optional[str] = Field(
        default=None, description="Cached preview of the replied message"
    )
    reply_to_type: Optional[MessageType] = Field(
        default=None, description="Cached type of the replied message"
    )

    @model_validator(mode="after")
    def validate_date_marker(self) -> "Message":
        """Ensure date markers are plain text entries without reply fields."""
        if self.sender_id == SYSTEM_DATE_SENDER_ID:
            if self.type != "text":
                raise ValueError("Date markers must have type 'text'")
            if self.reply_to_id is not None:
                raise ValueError("Date markers cannot reply to another message")
        return self

    @property
    def is_date_marker(self) -> bool:
        """Whether this message is a system date marker."""
        return self.sender_id == SYSTEM_DATE_SENDER_ID

    def preview(self) -> str:
        """Return the short text shown when this message is quoted in a reply.

        Returns:
            "Voice message" for audio, the caption or "Photo" for images, and
            the text for text messages (cut to 47 characters plus "..." when
            longer than 50).
        """
        return message_preview(self.type, self.text, self.image_caption)


def message_preview(
    message_type: str, text: str, image_caption: Optional[str] = None
) -> str:
    """Build a reply preview from message fields.

    Args:
        message_type: The message type.
        text: The message text.
        image_caption: Caption for image messages.

    Returns:
        Preview text for the message.
    """
    if message_type == "audio":
        return AUDIO_PREVIEW_LABEL
    if message_type == "image":
        return image_caption or IMAGE_PREVIEW_LABEL
    if len(text) > PREVIEW_MAX_LENGTH:
        return text[:PREVIEW_TRUNCATE_AT] + "..."
    return text


def is_date_marker(message: Message) -> bool:
    """Return whether a message is a system date marker."""
    return message.sender_id == SYSTEM_DATE_SENDER_ID
