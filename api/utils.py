"""Utility functions for API route handlers.

This module contains helper functions shared by the route handlers, so
each handler only has to build its command.
"""

from api.exceptions import CommandRejectedError, ParticipantNotFoundError
from transcript.conversation_input import ConversationInput
from transcript.participant import Participant
from transcript.store import ConversationStore


def apply_command(store: ConversationStore, input_data: ConversationInput) -> None:
    """Validate and apply a command, raising on rejection.

    The store itself rejects silently, so the command is validated here
    first to give the caller a reason.

    Args:
        store: The ConversationStore instance.
        input_data: The command to apply.

    Raises:
        ValueError: If the command fails input validation (400).
        CommandRejectedError: If the store refuses the command (409).
    """
    input_data.validate_input()

    if not store.apply(input_data):
        raise CommandRejectedError(
            input_data.operation,
            f"Command '{input_data.get_summary()}' does not fit the current conversation",
        )


def require_participant(store: ConversationStore, participant_id: str) -> Participant:
    """Get a participant by id or raise a 404.

    Args:
        store: The ConversationStore instance.
        participant_id: The participant id to look up.

    Returns:
        The participant.

    Raises:
        ParticipantNotFoundError: If there is no such participant.
    """
    participant = store.state.get_participant(participant_id)
    if participant is None:
        raise ParticipantNotFoundError(
            participant_id, [p.id for p in store.state.participants]
        )
    return participant
