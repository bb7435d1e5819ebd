"""Reply preview resolution.

Replies keep working even when the quoted message can no longer be found:
the preview captured at send time is used instead of the live message.
"""

from typing import Iterable, Optional

from pydantic import BaseModel, Field

from transcript.message import Message, MessageType
from transcript.participant import Participant


UNKNOWN_SENDER_NAME = "Unknown"
UNAVAILABLE_PREVIEW_TEXT = "Message not available"


class ReplyPreview(BaseModel):
    """The quoted block shown above a reply bubble.

    Args:
        sender_name: Name of the quoted message's sender.
        preview_text: Short text of the quoted message.
        message_type: Type of the quoted message, if known.
        is_resolved: Whether the quoted message was found in the transcript.
    """

    sender_name: str = Field(description="Name of the quoted message's sender")
    preview_text: str = Field(description="Short text of the quoted message")
    message_type: Optional[MessageType] = Field(default=None)
    is_resolved: bool = Field(default=True)


def resolve_reply(
    message: Message,
    messages: Iterable[Message],
    participants: Iterable[Participant],
) -> Optional[ReplyPreview]:
    """Resolve the quoted block for a reply.

    Args:
        message: The message that may be a reply.
        messages: Current transcript messages.
        participants: Current participants.

    Returns:
        The reply preview, or None if the message is not a reply.
    """
    if not message.reply_to_id:
        return None

    target = next((m for m in messages if m.id == message.reply_to_id), None)
    if target is None:
        return ReplyPreview(
            sender_name=UNKNOWN_SENDER_NAME,
            preview_text=message.reply_to_preview or UNAVAILABLE_PREVIEW_TEXT,
            message_type=message.reply_to_type,
            is_resolved=False,
        )

    sender = next((p for p in participants if p.id == target.sender_id), None)
    return ReplyPreview(
        sender_name=sender.name if sender else UNKNOWN_SENDER_NAME,
        preview_text=target.preview(),
        message_type=target.type,
    )


def build_reply_fields(target: Message) -> dict[str, object]:
    """Capture the reply cache fields for a message about to quote target.

    Args:
        target: The message being replied to.

    Returns:
        Draft fields reply_to_id, reply_to_preview and reply_to_type.
    """
    return {
        "reply_to_id": target.id,
        "reply_to_preview": target.preview(),
        "reply_to_type": target.type,
    }
