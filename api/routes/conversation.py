"""Conversation endpoints.

Provides REST API endpoints that work on the conversation as a whole:
reading the full state, resetting it, and exporting or importing it as a
JSON document.
"""

from typing import Any

from fastapi import APIRouter, Body
from fastapi.responses import Response

from api.dependencies import ConversationStoreDep
from api.models import ConversationActionResponse, ConversationStateResponse

router = APIRouter(
    prefix="/conversation",
    tags=["conversation"],
)


@router.get("/state", response_model=ConversationStateResponse)
async def get_state(store: ConversationStoreDep) -> ConversationStateResponse:
    """Get the complete conversation.

    Args:
        store: The conversation store dependency.

    Returns:
        The conversation in document form with any consistency issues.
    """
    return ConversationStateResponse(
        state=store.state.get_snapshot(),
        summary=store.state.summary,
        issues=store.state.validate_state(),
    )


@router.post("/reset", response_model=ConversationActionResponse)
async def reset_conversation(store: ConversationStoreDep) -> ConversationActionResponse:
    """Replace the conversation with the default one.

    UI preferences are kept.

    Args:
        store: The conversation store dependency.

    Returns:
        Action result.
    """
    store.reset()
    return ConversationActionResponse(
        operation="reset",
        message="Conversation reset to defaults",
        summary=store.state.summary,
    )


@router.get("/export")
async def export_conversation(store: ConversationStoreDep) -> Response:
    """Export the conversation and UI preferences as a JSON document.

    Args:
        store: The conversation store dependency.

    Returns:
        The pretty-printed document, served as a download.
    """
    return Response(
        content=store.export_document(),
        media_type="application/json",
        headers={"Content-Disposition": 'attachment; filename="whatsapp-chat.json"'},
    )


@router.post("/import", response_model=ConversationActionResponse)
async def import_conversation(
    store: ConversationStoreDep, document: Any = Body(...)
) -> ConversationActionResponse:
    """Merge an exported document over the current conversation.

    Keys missing from the document keep their current values; keys with
    invalid values are skipped.

    Args:
        store: The conversation store dependency.
        document: The decoded JSON document.

    Returns:
        Action result.

    Raises:
        DocumentFormatError: If the document is not a JSON object (400).
    """
    store.import_document(document)

    return ConversationActionResponse(
        operation="import",
        message="Conversation imported",
        summary=store.state.summary,
    )
