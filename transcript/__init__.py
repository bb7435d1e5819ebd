"""Transcript mockup core package.

This package contains the conversation data model, the command store that
owns the running conversation, the grouping and reply rules that turn the
transcript into render groups, and the persistence codec.
"""

from transcript.conversation_input import ConversationInput, MessageDraft
from transcript.conversation_state import ConversationState
from transcript.grouping import RenderGroup, RenderGroups, RenderedMessage, group_messages
from transcript.message import SYSTEM_DATE_SENDER_ID, Message
from transcript.participant import Participant
from transcript.persistence import deserialize, serialize
from transcript.replies import ReplyPreview, resolve_reply
from transcript.settings import ChatSettings, PhoneStatusBar, UIPreferences
from transcript.store import ConversationStore

__all__ = [
    "ConversationInput",
    "MessageDraft",
    "ConversationState",
    "RenderGroup",
    "RenderGroups",
    "RenderedMessage",
    "group_messages",
    "SYSTEM_DATE_SENDER_ID",
    "Message",
    "Participant",
    "deserialize",
    "serialize",
    "ReplyPreview",
    "resolve_reply",
    "ChatSettings",
    "PhoneStatusBar",
    "UIPreferences",
    "ConversationStore",
]
