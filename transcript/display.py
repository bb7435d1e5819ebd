"""Labels and header data for the rendered phone screen."""

from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from transcript.participant import avatar_initial
from transcript.settings import PhoneStatusBar

if TYPE_CHECKING:
    from transcript.conversation_state import ConversationState


class ChatHeader(BaseModel):
    """Title bar of the mocked chat.

    Args:
        title: Contact name (private) or group title.
        avatar: Image reference, or None for a letter badge.
        initial: Letter for the badge.
        subtitle: Comma-joined participant names in group mode, else "".
    """

    title: str
    avatar: Optional[str] = None
    initial: str = Field(default="?")
    subtitle: str = Field(default="")


def format_clock(moment: datetime) -> str:
    """Format a time of day as HH:MM, on the UTC clock for aware datetimes."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%H:%M")


def format_message_time(timestamp: datetime, phone_status: Optional[PhoneStatusBar]) -> str:
    """Return the time printed inside a message bubble.

    A custom phone time replaces every bubble time, matching the status bar.

    Args:
        timestamp: The message timestamp.
        phone_status: Current phone status settings.

    Returns:
        The custom time if one is set, else the timestamp as HH:MM.
    """
    if phone_status is not None and phone_status.custom_time:
        return phone_status.custom_time
    return format_clock(timestamp)


def status_bar_time(phone_status: PhoneStatusBar, now: Optional[datetime] = None) -> str:
    """Return the clock shown in the phone status bar.

    Args:
        phone_status: Current phone status settings.
        now: Wall-clock time to use when no custom time is set (defaults to
            the current UTC time, the same clock message timestamps default to).

    Returns:
        The custom time if one is set, else the current time as HH:MM.
    """
    if phone_status.custom_time:
        return phone_status.custom_time
    return format_clock(now or datetime.now(timezone.utc))


def format_date_label(day: date) -> str:
    """Default date header text, e.g. "Jan 5, 2025"."""
    return f"{day:%b} {day.day}, {day.year}"


def format_audio_duration(duration: Optional[str]) -> str:
    """Normalise an audio duration for display.

    MM:SS is shown as given. HH:MM:SS is folded into total minutes, so
    "1:02:03" becomes "62:03".

    Args:
        duration: Duration string from the message.

    Returns:
        Display duration, "0:00" when missing or unparseable.
    """
    if not duration:
        return "0:00"

    parts = duration.split(":")
    if len(parts) == 2:
        return duration
    if len(parts) == 3:
        try:
            hours = int(parts[0])
            minutes = int(parts[1])
        except ValueError:
            return "0:00"
        return f"{hours * 60 + minutes}:{parts[2]}"
    return "0:00"


def chat_header(state: "ConversationState") -> ChatHeader:
    """Derive the chat title bar from the conversation.

    In private mode with a designated me, the header shows the other
    participant. Otherwise it shows the chat title and avatar, with the
    participant names as subtitle in group mode.

    Args:
        state: The ConversationState to describe.

    Returns:
        Header data for the presentation layer.
    """
    settings = state.chat_settings

    if settings.mode == "private" and state.me_id:
        other = next((p for p in state.participants if p.id != state.me_id), None)
        if other is not None:
            return ChatHeader(
                title=other.name,
                avatar=other.avatar,
                initial=other.initial,
            )

    subtitle = ""
    if settings.mode == "group":
        subtitle = ", ".join(p.name for p in state.participants)

    return ChatHeader(
        title=settings.title,
        avatar=settings.avatar,
        initial=avatar_initial(settings.title),
        subtitle=subtitle,
    )
