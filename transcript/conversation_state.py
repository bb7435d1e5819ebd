"""Conversation state model."""

from __future__ import annotations

import logging
from typing import Any, Optional
from uuid import uuid4

from pydantic import Field

from transcript.base_record import DocumentModel
from transcript.conversation_input import ConversationInput
from transcript.message import SYSTEM_DATE_SENDER_ID, Message
from transcript.participant import Participant
from transcript.replies import build_reply_fields
from transcript.settings import ChatSettings, PhoneStatusBar

logger = logging.getLogger(__name__)


class ConversationState(DocumentModel):
    """The whole mocked conversation.

    Holds the participants, the append-only message list and the chat and
    phone chrome settings. The message list keeps authoring order, which is
    not necessarily timestamp order.

    States are mutable containers modified in-place by applying
    ConversationInput instances. Every handler checks its preconditions before
    touching any field, so a rejected command leaves the state unchanged.

    Args:
        participants: Participants in the order they were added.
        messages: Messages in the order they were authored.
        chat_settings: Header settings.
        me_id: Id of the participant whose messages render as outgoing.
        phone_status: Phone status bar settings.
    """

    participants: list[Participant] = Field(default_factory=list)
    messages: list[Message] = Field(default_factory=list)
    chat_settings: ChatSettings = Field(default_factory=ChatSettings)
    me_id: Optional[str] = Field(default=None)
    phone_status: PhoneStatusBar = Field(default_factory=PhoneStatusBar)

    def apply_input(self, input_data: ConversationInput) -> None:
        """Apply a ConversationInput to modify this state.

        Dispatches to operation-specific handlers based on operation type.

        Args:
            input_data: The command to apply.

        Raises:
            ValueError: If input_data is not a ConversationInput or the command
                is invalid for the current state. The state is left unchanged.
        """
        if not isinstance(input_data, ConversationInput):
            raise ValueError(
                f"ConversationState can only apply ConversationInput, got {type(input_data)}"
            )

        input_data.validate_input()

        operation_handlers = {
            "add_participant": self._handle_add_participant,
            "remove_participant": self._handle_remove_participant,
            "update_participant": self._handle_update_participant,
            "report_avatar_error": self._handle_report_avatar_error,
            "set_as_me": self._handle_set_as_me,
            "send_message": self._handle_send_message,
            "insert_date_marker": self._handle_insert_date_marker,
            "update_chat_settings": self._handle_update_chat_settings,
            "update_phone_status": self._handle_update_phone_status,
        }

        handler = operation_handlers.get(input_data.operation)
        if handler is None:
            raise ValueError(f"Unknown operation: {input_data.operation}")
        handler(input_data)

    def _handle_add_participant(self, input_data: ConversationInput) -> None:
        """Append a new participant with a fresh id.

        Ids are always generated here, so an id is never reused after removal.
        """
        self.participants.append(
            Participant(id=str(uuid4()), name=input_data.name, avatar=input_data.avatar)
        )

    def _handle_remove_participant(self, input_data: ConversationInput) -> None:
        """Remove a participant, clearing me_id in the same update.

        Note:
            Removing an unknown participant is a no-op.
        """
        participant_id = input_data.participant_id
        self.participants = [p for p in self.participants if p.id != participant_id]
        if self.me_id == participant_id:
            self.me_id = None
        self._sync_private_mode()

    def _handle_update_participant(self, input_data: ConversationInput) -> None:
        """Replace the participant with the matching id (no-op if absent)."""
        updated = input_data.participant
        for i, participant in enumerate(self.participants):
            if participant.id == updated.id:
                self.participants[i] = updated
                return

    def _handle_report_avatar_error(self, input_data: ConversationInput) -> None:
        """Clear the avatar of a participant whose image failed to load."""
        for i, participant in enumerate(self.participants):
            if participant.id == input_data.participant_id:
                self.participants[i] = participant.model_copy(update={"avatar": None})
                return

    def _handle_set_as_me(self, input_data: ConversationInput) -> None:
        """Designate the participant whose messages render as outgoing."""
        if self.get_participant(input_data.participant_id) is None:
            raise ValueError(f"Participant {input_data.participant_id} not found")
        self.me_id = input_data.participant_id
        self._sync_private_mode()

    def _handle_send_message(self, input_data: ConversationInput) -> None:
        """Append a message at the end of the list, whatever its timestamp."""
        draft = input_data.message
        if self.get_participant(draft.sender_id) is None:
            raise ValueError(f"Sender {draft.sender_id} is not a participant")

        fields = draft.model_dump()
        if draft.reply_to_id is not None and draft.reply_to_preview is None:
            target = self.get_message(draft.reply_to_id)
            if target is not None:
                fields.update(build_reply_fields(target))

        self.messages.append(Message(id=str(uuid4()), **fields))

    def _handle_insert_date_marker(self, input_data: ConversationInput) -> None:
        """Append a system date marker carrying the label."""
        self.messages.append(
            Message(
                id=str(uuid4()),
                sender_id=SYSTEM_DATE_SENDER_ID,
                text=input_data.label.strip(),
                timestamp=input_data.timestamp,
                type="text",
            )
        )

    def _handle_update_chat_settings(self, input_data: ConversationInput) -> None:
        """Shallow-merge changes into the chat settings."""
        merged = {**self.chat_settings.model_dump(), **input_data.changes}
        self.chat_settings = ChatSettings.model_validate(merged)

    def _handle_update_phone_status(self, input_data: ConversationInput) -> None:
        """Shallow-merge changes into the phone status bar."""
        merged = {**self.phone_status.model_dump(), **input_data.changes}
        self.phone_status = PhoneStatusBar.model_validate(merged)

    def _sync_private_mode(self) -> None:
        """Switch to private mode once a two-person chat has a designated me."""
        if (
            self.me_id is not None
            and len(self.participants) == 2
            and self.chat_settings.mode != "private"
        ):
            self.chat_settings = self.chat_settings.model_copy(update={"mode": "private"})
            logger.debug("Switched chat to private mode (two participants, me set)")

    def get_participant(self, participant_id: Optional[str]) -> Optional[Participant]:
        """Look up a participant by id.

        Args:
            participant_id: Id to look up.

        Returns:
            The participant, or None if there is no such participant.
        """
        for participant in self.participants:
            if participant.id == participant_id:
                return participant
        return None

    def get_message(self, message_id: Optional[str]) -> Optional[Message]:
        """Look up a message by id.

        Args:
            message_id: Id to look up.

        Returns:
            The message, or None if there is no such message.
        """
        for message in self.messages:
            if message.id == message_id:
                return message
        return None

    @property
    def me(self) -> Optional[Participant]:
        """The participant designated as me, if any."""
        return self.get_participant(self.me_id)

    def get_snapshot(self) -> dict[str, Any]:
        """Return a complete snapshot of current state for API responses.

        Returns:
            Dictionary in the persisted document shape (camelCase keys,
            ISO-8601 timestamps).
        """
        return self.to_document()

    def validate_state(self) -> list[str]:
        """Validate internal state consistency and return any issues.

        Checks for:
        - Duplicate participant or message ids
        - A me_id that does not reference a participant
        - Type-specific fields set on messages of another type
        - Private mode without exactly two participants

        Returns:
            List of validation error messages (empty list if valid).
        """
        issues = []

        participant_ids = [p.id for p in self.participants]
        if len(participant_ids) != len(set(participant_ids)):
            issues.append("Duplicate participant ids")
        if SYSTEM_DATE_SENDER_ID in participant_ids:
            issues.append(f"Participant uses reserved id '{SYSTEM_DATE_SENDER_ID}'")

        message_ids = [m.id for m in self.messages]
        if len(message_ids) != len(set(message_ids)):
            issues.append("Duplicate message ids")

        if self.me_id is not None and self.me_id not in participant_ids:
            issues.append(f"me_id {self.me_id} does not reference a participant")

        for message in self.messages:
            if message.type != "audio" and message.audio_duration is not None:
                issues.append(f"Message {message.id} has audio duration but type '{message.type}'")
            if message.type != "image" and (message.image_url or message.image_caption):
                issues.append(f"Message {message.id} has image fields but type '{message.type}'")

        if self.chat_settings.mode == "private" and len(self.participants) != 2:
            issues.append(
                f"Private mode with {len(self.participants)} participants (expected 2)"
            )

        return issues

    def clear(self) -> None:
        """Reset this state to its empty default."""
        self.participants = []
        self.messages = []
        self.chat_settings = ChatSettings()
        self.me_id = None
        self.phone_status = PhoneStatusBar()

    @property
    def summary(self) -> str:
        """Return a brief human-readable summary of the current state."""
        markers = sum(1 for m in self.messages if m.is_date_marker)
        return (
            f"{len(self.participants)} participants, "
            f"{len(self.messages) - markers} messages, {markers} date markers "
            f"({self.chat_settings.mode} chat)"
        )
