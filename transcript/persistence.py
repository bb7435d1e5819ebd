"""Conversation document codec.

The conversation travels as one JSON object with camelCase keys::

    {
        "participants": [{"id": ..., "name": ..., "avatar": ...}],
        "messages": [{"id": ..., "senderId": ..., "timestamp": "2025-01-05T09:30:00+00:00", ...}],
        "chatSettings": {"mode": "group", "title": "Group Chat", "avatar": null},
        "meId": null,
        "phoneStatus": {"batteryLevel": 100, "customTime": null},
        "showDateDividers": true,
        "chatBackground": ""
    }

The same shape is used for the local conversation slot and for exported and
imported files. The UI preference keys are optional.
"""

import json
import logging
from typing import Any, Optional, Union

from pydantic import TypeAdapter, ValidationError

from transcript.conversation_state import ConversationState
from transcript.message import Message
from transcript.participant import Participant
from transcript.settings import ChatSettings, PhoneStatusBar, UIPreferences
from transcript.slots import CONVERSATION_SLOT, PREFERENCE_SLOTS, SlotStore

logger = logging.getLogger(__name__)


class DocumentFormatError(ValueError):
    """Raised when an imported document is not a JSON object."""


# Document key -> (state attribute, validator) for the conversation fields
_STATE_FIELDS: dict[str, tuple[str, TypeAdapter]] = {
    "participants": ("participants", TypeAdapter(list[Participant])),
    "messages": ("messages", TypeAdapter(list[Message])),
    "chatSettings": ("chat_settings", TypeAdapter(ChatSettings)),
    "meId": ("me_id", TypeAdapter(Optional[str])),
    "phoneStatus": ("phone_status", TypeAdapter(PhoneStatusBar)),
}

# Document key -> (preference attribute, validator)
_PREFERENCE_FIELDS: dict[str, tuple[str, TypeAdapter]] = {
    slot: (attribute, TypeAdapter(UIPreferences.model_fields[attribute].annotation))
    for attribute, slot in PREFERENCE_SLOTS.items()
}


def serialize(state: ConversationState, prefs: Optional[UIPreferences] = None) -> str:
    """Encode a conversation, and optionally the UI preferences, as JSON text.

    Args:
        state: The conversation to encode.
        prefs: UI preferences to embed as top-level keys.

    Returns:
        JSON document text.
    """
    document = state.to_document()
    if prefs is not None:
        document.update(prefs.to_document())
    return json.dumps(document, ensure_ascii=False)


def deserialize(text: Optional[str]) -> tuple[ConversationState, UIPreferences]:
    """Decode a conversation document.

    Timestamps are read back from ISO-8601 strings. Missing, non-JSON or
    invalid documents give the default conversation and preferences instead
    of an error.

    Args:
        text: JSON document text, or None when nothing was stored.

    Returns:
        Tuple of (conversation state, UI preferences).
    """
    if not text or not text.strip():
        return ConversationState(), UIPreferences()

    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        logger.warning(f"Conversation document is not valid JSON, using defaults: {e}")
        return ConversationState(), UIPreferences()

    if not isinstance(document, dict):
        logger.warning("Conversation document is not a JSON object, using defaults")
        return ConversationState(), UIPreferences()

    try:
        state = ConversationState.model_validate(
            {key: document[key] for key in _STATE_FIELDS if key in document}
        )
        prefs = UIPreferences.model_validate(
            {key: document[key] for key in _PREFERENCE_FIELDS if key in document}
        )
    except ValidationError as e:
        logger.warning(
            f"Conversation document failed validation, using defaults: {e.error_count()} errors"
        )
        return ConversationState(), UIPreferences()

    _clear_dangling_me(state)
    return state, prefs


def import_document(
    state: ConversationState,
    prefs: UIPreferences,
    document: Union[str, dict[str, Any]],
) -> tuple[ConversationState, UIPreferences]:
    """Merge an externally supplied document over the current conversation.

    Keys absent from the document keep their current value. Each present key
    is validated on its own; an invalid one is skipped with a warning. An
    imported meId that names no participant is dropped.

    Args:
        state: Current conversation.
        prefs: Current UI preferences.
        document: JSON text or an already decoded dictionary.

    Returns:
        Tuple of (new conversation state, new UI preferences). The inputs are
        not modified.

    Raises:
        DocumentFormatError: If the document is not a JSON object.
    """
    if isinstance(document, str):
        try:
            document = json.loads(document)
        except json.JSONDecodeError as e:
            raise DocumentFormatError(f"Document is not valid JSON: {e}") from e

    if not isinstance(document, dict):
        raise DocumentFormatError(
            f"Document must be a JSON object, got {type(document).__name__}"
        )

    state_updates = _validated_updates(document, _STATE_FIELDS)
    pref_updates = _validated_updates(document, _PREFERENCE_FIELDS)

    new_state = state.model_copy(deep=True, update=state_updates)
    _clear_dangling_me(new_state)

    new_prefs = prefs.model_copy(update=pref_updates)
    return new_state, new_prefs


def _clear_dangling_me(state: ConversationState) -> None:
    """Drop a meId that names no participant."""
    if state.me_id is not None and state.get_participant(state.me_id) is None:
        logger.warning(f"meId {state.me_id} names no participant, clearing it")
        state.me_id = None


def _validated_updates(
    document: dict[str, Any], fields: dict[str, tuple[str, TypeAdapter]]
) -> dict[str, Any]:
    """Validate the document keys that are present, skipping invalid ones."""
    updates = {}
    for key, (attribute, adapter) in fields.items():
        if key not in document:
            continue
        try:
            updates[attribute] = adapter.validate_python(document[key])
        except ValidationError as e:
            logger.warning(f"Ignoring invalid '{key}' in imported document: {e.error_count()} errors")
    return updates


def export_document(state: ConversationState, prefs: UIPreferences) -> str:
    """Encode the conversation and preferences for an export file.

    Args:
        state: The conversation to export.
        prefs: UI preferences to include.

    Returns:
        Indented JSON document text.
    """
    return json.dumps(json.loads(serialize(state, prefs)), indent=2, ensure_ascii=False)


def load_state(slots: SlotStore) -> ConversationState:
    """Load the conversation from its slot, or the default conversation."""
    state, _ = deserialize(slots.get(CONVERSATION_SLOT))
    return state


def save_state(slots: SlotStore, state: ConversationState) -> None:
    """Write the conversation to its slot."""
    slots.set(CONVERSATION_SLOT, serialize(state))


def load_preferences(slots: SlotStore) -> UIPreferences:
    """Read each UI preference from its own slot.

    Slots that are empty or hold an invalid value fall back to the default.

    Args:
        slots: The slot store.

    Returns:
        The loaded preferences.
    """
    values = {}
    for key, (attribute, adapter) in _PREFERENCE_FIELDS.items():
        raw = slots.get_json(key)
        if raw is None:
            continue
        try:
            values[attribute] = adapter.validate_python(raw)
        except ValidationError:
            logger.warning(f"Preference slot '{key}' holds an invalid value, using default")
    return UIPreferences(**values)


def save_preferences(slots: SlotStore, prefs: UIPreferences) -> None:
    """Write each UI preference to its own slot."""
    for key, (attribute, _) in _PREFERENCE_FIELDS.items():
        slots.set_json(key, getattr(prefs, attribute))
