"""Preview endpoints.

Provides the data the phone screen mockup is drawn from: the render groups,
the chat title bar and the status bar. The presentation layer only draws
what these endpoints return.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from api.dependencies import ConversationStoreDep
from transcript.display import ChatHeader, status_bar_time
from transcript.export import slugify, suggest_export_filename
from transcript.grouping import RenderGroup

router = APIRouter(
    prefix="/preview",
    tags=["preview"],
)


# ============================================================================
# Response Models
# ============================================================================


class StatusBarResponse(BaseModel):
    """Response model for the phone status bar.

    Attributes:
        time: Clock text (custom time or the current time).
        battery_level: Battery percentage.
    """

    time: str
    battery_level: int


class PreviewResponse(BaseModel):
    """Response model for the rendered phone screen.

    Attributes:
        header: Chat title bar.
        status_bar: Phone status bar.
        groups: Render groups in display order.
        show_date_dividers: Whether automatic date grouping is on.
        chat_background: Background image reference ("" for the default).
        dark_mode: Editor theme.
    """

    header: ChatHeader
    status_bar: StatusBarResponse
    groups: list[RenderGroup]
    show_date_dividers: bool
    chat_background: str
    dark_mode: bool


class ExportFilenameResponse(BaseModel):
    """Response model for the suggested export file name.

    Attributes:
        filename: Suggested image file name.
    """

    filename: str


# ============================================================================
# Route Handlers
# ============================================================================


@router.get("", response_model=PreviewResponse)
async def get_preview(store: ConversationStoreDep) -> PreviewResponse:
    """Get everything needed to draw the phone screen.

    Args:
        store: The conversation store dependency.

    Returns:
        Header, status bar and render groups for the current conversation.
    """
    phone_status = store.state.phone_status
    prefs = store.preferences

    return PreviewResponse(
        header=store.header(),
        status_bar=StatusBarResponse(
            time=status_bar_time(phone_status),
            battery_level=phone_status.battery_level,
        ),
        groups=list(store.render()),
        show_date_dividers=prefs.show_date_dividers,
        chat_background=prefs.chat_background,
        dark_mode=prefs.dark_mode,
    )


@router.get("/export-filename", response_model=ExportFilenameResponse)
async def get_export_filename(
    store: ConversationStoreDep, use_title: bool = False
) -> ExportFilenameResponse:
    """Suggest a file name for exporting the preview as an image.

    Args:
        store: The conversation store dependency.
        use_title: Build the name from the chat title instead of the
            default "whatsapp-chat" prefix.

    Returns:
        The suggested file name, stamped with today's date.
    """
    if use_title:
        return ExportFilenameResponse(
            filename=suggest_export_filename(slugify(store.header().title))
        )
    return ExportFilenameResponse(filename=suggest_export_filename())
