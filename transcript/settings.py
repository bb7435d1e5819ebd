"""Chat settings, phone status bar and UI preference records."""

from typing import Literal, Optional

from pydantic import Field, field_validator

from transcript.base_record import DocumentModel


ChatMode = Literal["private", "group"]

DEFAULT_CHAT_TITLE = "Group Chat"
DEFAULT_BATTERY_LEVEL = 100


class ChatSettings(DocumentModel):
    """Header settings of the mocked chat.

    Args:
        mode: "private" shows the other participant in the header, "group"
            shows the chat title and the participant list.
        title: Group title.
        avatar: Group image reference, or None.
    """

    mode: ChatMode = Field(default="group", description="Chat mode")
    title: str = Field(default=DEFAULT_CHAT_TITLE, description="Group title")
    avatar: Optional[str] = Field(default=None, description="Group image reference")

    @field_validator("avatar")
    @classmethod
    def normalize_avatar(cls, value: Optional[str]) -> Optional[str]:
        """Treat a blank image reference as no avatar."""
        if value is not None and not value.strip():
            return None
        return value


class PhoneStatusBar(DocumentModel):
    """Phone chrome shown above the chat.

    Args:
        battery_level: Battery percentage (1-100).
        custom_time: Fixed clock text, or None to show the wall-clock time.
    """

    battery_level: int = Field(
        default=DEFAULT_BATTERY_LEVEL, ge=1, le=100, description="Battery percentage"
    )
    custom_time: Optional[str] = Field(default=None, description="Fixed clock text")

    @field_validator("custom_time")
    @classmethod
    def normalize_custom_time(cls, value: Optional[str]) -> Optional[str]:
        """Treat a blank clock text as no custom time."""
        if value is not None and not value.strip():
            return None
        return value


class UIPreferences(DocumentModel):
    """Presentation preferences stored apart from the conversation.

    Args:
        preview_on_right: Whether the preview pane sits to the right of the editor.
        dark_mode: Whether the editor uses the dark theme.
        show_date_dividers: Whether messages are grouped under automatic date headers.
        chat_background: Background image reference ("" for the default pattern).
    """

    preview_on_right: bool = Field(default=False)
    dark_mode: bool = Field(default=False)
    show_date_dividers: bool = Field(default=True)
    chat_background: str = Field(default="")
