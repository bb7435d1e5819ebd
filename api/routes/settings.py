"""Settings endpoints.

Provides REST API endpoints for the chat header settings, the phone status
bar, and the UI preferences kept in their own persistence slots.
"""

from typing import Literal

from fastapi import APIRouter
from pydantic import BaseModel, Field

from api.dependencies import ConversationStoreDep
from api.utils import apply_command
from transcript.conversation_input import ConversationInput
from transcript.settings import ChatSettings, PhoneStatusBar, UIPreferences

router = APIRouter(
    prefix="/settings",
    tags=["settings"],
)


# ============================================================================
# Request Models
# ============================================================================


class ChatSettingsUpdateRequest(BaseModel):
    """Request model for a partial chat settings update.

    Only the fields that are sent are changed; send "avatar": null to clear
    the group image (e.g. after it failed to load).

    Attributes:
        mode: "private" or "group".
        title: Group title.
        avatar: Group image reference.
    """

    mode: Literal["private", "group"] | None = None
    title: str | None = None
    avatar: str | None = None


class PhoneStatusUpdateRequest(BaseModel):
    """Request model for a partial phone status update.

    Attributes:
        battery_level: Battery percentage (1-100).
        custom_time: Fixed clock text, or null for the wall-clock time.
    """

    battery_level: int | None = Field(default=None, ge=1, le=100)
    custom_time: str | None = None


class PreferencesUpdateRequest(BaseModel):
    """Request model for a partial UI preferences update.

    Attributes:
        preview_on_right: Preview pane position.
        dark_mode: Editor theme.
        show_date_dividers: Automatic date grouping.
        chat_background: Background image reference.
    """

    preview_on_right: bool | None = None
    dark_mode: bool | None = None
    show_date_dividers: bool | None = None
    chat_background: str | None = None


# ============================================================================
# Route Handlers
# ============================================================================


@router.patch("/chat", response_model=ChatSettings)
async def update_chat_settings(
    request: ChatSettingsUpdateRequest, store: ConversationStoreDep
) -> ChatSettings:
    """Update the chat header settings.

    Args:
        request: Fields to change.
        store: The conversation store dependency.

    Returns:
        The chat settings after the update.
    """
    changes = request.model_dump(exclude_unset=True)
    for key in ("mode", "title"):
        if key in changes and changes[key] is None:
            del changes[key]

    apply_command(store, ConversationInput(operation="update_chat_settings", changes=changes))
    return store.state.chat_settings


@router.patch("/phone-status", response_model=PhoneStatusBar)
async def update_phone_status(
    request: PhoneStatusUpdateRequest, store: ConversationStoreDep
) -> PhoneStatusBar:
    """Update the phone status bar.

    Args:
        request: Fields to change.
        store: The conversation store dependency.

    Returns:
        The phone status after the update.
    """
    changes = request.model_dump(exclude_unset=True)
    if "battery_level" in changes and changes["battery_level"] is None:
        del changes["battery_level"]

    apply_command(store, ConversationInput(operation="update_phone_status", changes=changes))
    return store.state.phone_status


@router.get("/preferences", response_model=UIPreferences)
async def get_preferences(store: ConversationStoreDep) -> UIPreferences:
    """Get the UI preferences.

    Args:
        store: The conversation store dependency.

    Returns:
        Current UI preferences.
    """
    return store.preferences


@router.patch("/preferences", response_model=UIPreferences)
async def update_preferences(
    request: PreferencesUpdateRequest, store: ConversationStoreDep
) -> UIPreferences:
    """Update the UI preferences.

    Args:
        request: Fields to change.
        store: The conversation store dependency.

    Returns:
        The preferences after the update.
    """
    changes = request.model_dump(exclude_unset=True, exclude_none=True)
    return store.update_preferences(**changes)
