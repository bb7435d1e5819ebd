"""The conversation store.

ConversationStore is the single owner of the running session's
ConversationState. Every change goes through one of its named commands,
which build a ConversationInput, apply it, and write the result to the
local slots.

Commands never raise for bad input: a rejected command logs a warning,
leaves the state untouched and returns a falsy value. Callers that need to
tell the user why should run ConversationInput.validate_input() first.
"""

import logging
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import ValidationError

from transcript.conversation_input import ConversationInput, MessageDraft
from transcript.conversation_state import ConversationState
from transcript.display import ChatHeader, chat_header
from transcript.grouping import DateFormatter, RenderGroups, group_messages
from transcript.message import Message
from transcript.participant import Participant
from transcript.persistence import (
    export_document,
    import_document,
    load_preferences,
    load_state,
    save_preferences,
    save_state,
)
from transcript.settings import UIPreferences
from transcript.slots import SlotStore

logger = logging.getLogger(__name__)


class ConversationStore:
    """Owns the conversation and UI preferences of one session.

    Args:
        state: Initial conversation (defaults to an empty one).
        preferences: Initial UI preferences (defaults apply).
        slots: Slot store written after every change, or None to keep
            everything in memory only.
    """

    def __init__(
        self,
        state: Optional[ConversationState] = None,
        preferences: Optional[UIPreferences] = None,
        slots: Optional[SlotStore] = None,
    ):
        self.state = state or ConversationState()
        self.preferences = preferences or UIPreferences()
        self.slots = slots

    @classmethod
    def load(cls, slots: SlotStore) -> "ConversationStore":
        """Create a store from the persisted slots, or defaults where empty.

        Args:
            slots: Slot store to read from and write to.

        Returns:
            A store bound to the slots.
        """
        store = cls(state=load_state(slots), preferences=load_preferences(slots), slots=slots)
        logger.info(f"Loaded conversation: {store.state.summary}")
        return store

    # ------------------------------------------------------------------
    # Command application
    # ------------------------------------------------------------------

    def apply(self, input_data: ConversationInput) -> bool:
        """Apply a command and persist the result.

        Args:
            input_data: The command to apply.

        Returns:
            True if the command was applied, False if it was rejected.
        """
        try:
            self.state.apply_input(input_data)
        except ValueError as e:
            logger.warning(f"Rejected {input_data.operation}: {e}")
            return False

        logger.debug(f"Applied {input_data.get_summary()}")
        self._persist_state()
        return True

    def _apply_fields(self, operation: str, **fields: Any) -> bool:
        """Build a command from its fields and apply it.

        Fields that do not fit the command (wrong types, malformed values)
        reject it the same way a failed precondition does.
        """
        try:
            input_data = ConversationInput(operation=operation, **fields)
        except ValidationError as e:
            logger.warning(f"Rejected {operation}: {e.error_count()} invalid fields")
            return False
        return self.apply(input_data)

    def save(self) -> None:
        """Write the conversation and every preference to the slots."""
        self._persist_state()
        self._persist_preferences()

    def _persist_state(self) -> None:
        if self.slots is None:
            return
        try:
            save_state(self.slots, self.state)
        except OSError as e:
            logger.error(f"Failed to write conversation slot: {e}")

    def _persist_preferences(self) -> None:
        if self.slots is None:
            return
        try:
            save_preferences(self.slots, self.preferences)
        except OSError as e:
            logger.error(f"Failed to write preference slots: {e}")

    # ------------------------------------------------------------------
    # Participants
    # ------------------------------------------------------------------

    def add_participant(self, name: str, avatar: Optional[str] = None) -> Optional[Participant]:
        """Add a participant with a fresh id.

        Args:
            name: Display name (must be non-empty).
            avatar: Optional image reference.

        Returns:
            The new participant, or None if the name was rejected.
        """
        applied = self._apply_fields("add_participant", name=name, avatar=avatar)
        return self.state.participants[-1] if applied else None

    def remove_participant(self, participant_id: str) -> bool:
        """Remove a participant, clearing me if it was them."""
        return self._apply_fields("remove_participant", participant_id=participant_id)

    def update_participant(self, participant: Participant) -> bool:
        """Replace a participant's record (no-op for an unknown id)."""
        return self._apply_fields("update_participant", participant=participant)

    def report_avatar_error(self, participant_id: str) -> bool:
        """Clear the avatar of a participant whose image failed to load."""
        return self._apply_fields("report_avatar_error", participant_id=participant_id)

    def set_as_me(self, participant_id: str) -> bool:
        """Designate the participant whose messages render as outgoing.

        A chat with exactly two participants switches to private mode.
        """
        return self._apply_fields("set_as_me", participant_id=participant_id)

    # ------------------------------------------------------------------
    # Messages
    # ------------------------------------------------------------------

    def send_message(
        self, draft: Optional[Union[MessageDraft, dict[str, Any]]] = None, **fields: Any
    ) -> Optional[Message]:
        """Append a message to the end of the transcript.

        Args:
            draft: Message draft, or a dict of draft fields.
            **fields: Draft fields, used when no draft is given.

        Returns:
            The new message, or None if the draft was rejected.
        """
        if draft is None:
            draft = fields
        if isinstance(draft, dict):
            try:
                draft = MessageDraft.model_validate(draft)
            except ValueError as e:
                logger.warning(f"Rejected send_message: {e}")
                return None

        applied = self._apply_fields("send_message", message=draft)
        return self.state.messages[-1] if applied else None

    def insert_date_marker(
        self, label: str, timestamp: Optional[datetime] = None
    ) -> Optional[Message]:
        """Append a date marker header. Blank labels are rejected.

        Args:
            label: Header text, e.g. "Yesterday".
            timestamp: Marker timestamp (defaults to now).

        Returns:
            The marker message, or None if the label was rejected.
        """
        fields: dict[str, Any] = {"label": label}
        if timestamp is not None:
            fields["timestamp"] = timestamp
        applied = self._apply_fields("insert_date_marker", **fields)
        return self.state.messages[-1] if applied else None

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    def update_chat_settings(self, **changes: Any) -> bool:
        """Shallow-merge changes (mode, title, avatar) into the chat settings."""
        return self._apply_fields("update_chat_settings", changes=changes)

    def update_phone_status(self, **changes: Any) -> bool:
        """Shallow-merge changes (battery_level, custom_time) into the phone status."""
        return self._apply_fields("update_phone_status", changes=changes)

    def update_preferences(self, **changes: Any) -> UIPreferences:
        """Shallow-merge changes into the UI preferences and persist them.

        Args:
            **changes: Preference values keyed by attribute name.

        Returns:
            The updated preferences (unchanged if the changes were rejected).
        """
        unknown = set(changes) - set(UIPreferences.model_fields)
        if unknown:
            logger.warning(f"Rejected preference update, unknown fields: {sorted(unknown)}")
            return self.preferences
        try:
            self.preferences = UIPreferences.model_validate(
                {**self.preferences.model_dump(), **changes}
            )
        except ValueError as e:
            logger.warning(f"Rejected preference update: {e}")
            return self.preferences

        self._persist_preferences()
        return self.preferences

    # ------------------------------------------------------------------
    # Whole-document operations
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Replace the conversation with the default one."""
        self.state = ConversationState()
        logger.info("Conversation reset to defaults")
        self._persist_state()

    def import_document(self, document: Union[str, dict[str, Any]]) -> None:
        """Merge an imported document over the current conversation.

        Args:
            document: JSON text or decoded dictionary.

        Raises:
            DocumentFormatError: If the document is not a JSON object.
        """
        self.state, self.preferences = import_document(self.state, self.preferences, document)
        logger.info(f"Imported conversation: {self.state.summary}")
        self._persist_state()
        self._persist_preferences()

    def export_document(self) -> str:
        """Return the conversation and preferences as an export document."""
        return export_document(self.state, self.preferences)

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self, date_formatter: Optional[DateFormatter] = None) -> RenderGroups:
        """Group the current transcript for rendering.

        Args:
            date_formatter: Custom date header formatter.

        Returns:
            Restartable render groups for the current state.
        """
        return group_messages(
            self.state.messages,
            self.state.participants,
            show_date_dividers=self.preferences.show_date_dividers,
            date_formatter=date_formatter,
            me_id=self.state.me_id,
            mode=self.state.chat_settings.mode,
            phone_status=self.state.phone_status,
        )

    def header(self) -> ChatHeader:
        """Return the chat title bar for the current state."""
        return chat_header(self.state)
