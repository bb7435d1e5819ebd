"""Unit tests for ConversationState.

This test suite covers:
1. Instantiation and defaults
2. Participant commands, including the private-mode switch
3. Message and date marker commands
4. Settings updates
5. Helper methods (lookups, validate_state, clear, summary)
"""

from datetime import timedelta

import pytest

from transcript.conversation_state import ConversationState
from transcript.message import SYSTEM_DATE_SENDER_ID
from transcript.participant import Participant
from transcript.settings import ChatSettings
from tests.fixtures.conversation import (
    FIXED_TIME,
    create_draft,
    create_input,
    create_message,
    create_participant,
    create_state,
    create_two_person_state,
)


class TestConversationStateInstantiation:
    """Test ConversationState instantiation and defaults."""

    def test_instantiation_defaults(self):
        """Test a new state is empty with default settings."""
        state = ConversationState()

        assert state.participants == []
        assert state.messages == []
        assert state.me_id is None
        assert state.chat_settings.mode == "group"
        assert state.chat_settings.title == "Group Chat"
        assert state.chat_settings.avatar is None
        assert state.phone_status.battery_level == 100
        assert state.phone_status.custom_time is None

    def test_instantiation_from_document_keys(self):
        """Test a state can be built from camelCase document keys."""
        state = ConversationState.model_validate(
            {
                "participants": [{"id": "a", "name": "Alice"}],
                "meId": "a",
                "chatSettings": {"mode": "private", "title": "Chat"},
                "phoneStatus": {"batteryLevel": 42},
            }
        )

        assert state.me_id == "a"
        assert state.chat_settings.mode == "private"
        assert state.phone_status.battery_level == 42

    def test_apply_input_rejects_other_types(self):
        """Test apply_input refuses objects that are not ConversationInput."""
        state = ConversationState()

        with pytest.raises(ValueError, match="ConversationInput"):
            state.apply_input({"operation": "add_participant"})


class TestParticipantCommands:
    """Test add, update, remove and avatar-error commands."""

    def test_add_participant_assigns_fresh_ids(self):
        """Test each added participant gets a distinct id."""
        state = ConversationState()

        state.apply_input(create_input("add_participant", name="Alice"))
        state.apply_input(create_input("add_participant", name="Alice"))

        assert len(state.participants) == 2
        assert state.participants[0].id != state.participants[1].id
        assert state.participants[0].name == "Alice"

    def test_add_participant_keeps_avatar(self):
        """Test the avatar reference is stored on the new participant."""
        state = ConversationState()

        state.apply_input(
            create_input("add_participant", name="Alice", avatar="https://example.com/a.png")
        )

        assert state.participants[0].avatar == "https://example.com/a.png"

    def test_add_participant_rejects_empty_name(self):
        """Test a blank name is rejected and nothing is added."""
        state = ConversationState()

        with pytest.raises(ValueError, match="non-empty"):
            state.apply_input(create_input("add_participant", name="   "))

        assert state.participants == []

    def test_add_participant_rejects_caller_chosen_id(self):
        """Test ids are assigned by the store, never supplied by the caller."""
        state = ConversationState()

        with pytest.raises(ValueError, match="assigned by the store"):
            state.apply_input(
                create_input(
                    "add_participant", name="System", participant_id=SYSTEM_DATE_SENDER_ID
                )
            )

        assert state.participants == []

    def test_removed_participant_id_is_not_reused(self):
        """Test a participant added after a removal gets a new id."""
        state = ConversationState()
        state.apply_input(create_input("add_participant", name="Alice"))
        removed_id = state.participants[0].id

        state.apply_input(create_input("remove_participant", participant_id=removed_id))
        state.apply_input(create_input("add_participant", name="Alice"))

        assert len(state.participants) == 1
        assert state.participants[0].id != removed_id

    def test_update_participant_replaces_record(self):
        """Test update replaces the participant with the same id."""
        state = create_two_person_state()
        updated = Participant(id="alice", name="Alicia", avatar="a.png")

        state.apply_input(create_input("update_participant", participant=updated))

        assert state.get_participant("alice") == updated
        assert [p.id for p in state.participants] == ["alice", "bob"]

    def test_update_unknown_participant_is_noop(self):
        """Test updating an id that doesn't exist changes nothing."""
        state = create_two_person_state()
        before = state.model_copy(deep=True)

        state.apply_input(
            create_input("update_participant", participant=Participant(id="zed", name="Zed"))
        )

        assert state == before

    def test_remove_participant(self):
        """Test removing a participant drops it from the list."""
        state = create_two_person_state()

        state.apply_input(create_input("remove_participant", participant_id="bob"))

        assert [p.id for p in state.participants] == ["alice"]

    def test_remove_me_clears_me_id(self):
        """Test removing the participant designated as me clears me_id."""
        state = create_two_person_state(me_id="alice")

        state.apply_input(create_input("remove_participant", participant_id="alice"))

        assert state.me_id is None
        assert state.get_participant("alice") is None

    def test_remove_unknown_participant_is_noop(self):
        """Test removing an id that doesn't exist changes nothing."""
        state = create_two_person_state()

        state.apply_input(create_input("remove_participant", participant_id="zed"))

        assert len(state.participants) == 2

    def test_remove_keeps_messages_of_removed_sender(self):
        """Test messages sent by a removed participant stay in the transcript."""
        state = create_two_person_state(messages=[create_message(sender_id="bob", text="Hi")])

        state.apply_input(create_input("remove_participant", participant_id="bob"))

        assert len(state.messages) == 1
        assert state.messages[0].sender_id == "bob"

    def test_report_avatar_error_clears_avatar(self):
        """Test a broken avatar is cleared, leaving the name intact."""
        state = create_state(participants=[create_participant("Alice", avatar="broken.png")])

        state.apply_input(create_input("report_avatar_error", participant_id="alice"))

        assert state.participants[0].avatar is None
        assert state.participants[0].name == "Alice"


class TestSetAsMe:
    """Test set_as_me and the two-participant private-mode rule."""

    def test_set_as_me_with_two_participants_switches_to_private(self):
        """Test designating me in a two-person chat switches to private mode."""
        state = create_two_person_state()
        assert state.chat_settings.mode == "group"

        state.apply_input(create_input("set_as_me", participant_id="alice"))

        assert state.me_id == "alice"
        assert state.chat_settings.mode == "private"

    def test_set_as_me_with_three_participants_keeps_group(self):
        """Test the mode is untouched when there are more than two participants."""
        state = create_state(
            participants=[
                create_participant("Alice"),
                create_participant("Bob"),
                create_participant("Carol"),
            ]
        )

        state.apply_input(create_input("set_as_me", participant_id="alice"))

        assert state.me_id == "alice"
        assert state.chat_settings.mode == "group"

    def test_set_as_me_keeps_title(self):
        """Test switching to private mode keeps the other chat settings."""
        state = create_two_person_state(chat_settings=ChatSettings(title="Weekend"))

        state.apply_input(create_input("set_as_me", participant_id="bob"))

        assert state.chat_settings.title == "Weekend"

    def test_set_as_me_unknown_participant_rejected(self):
        """Test an id that names no participant is rejected without changes."""
        state = create_two_person_state()

        with pytest.raises(ValueError, match="not found"):
            state.apply_input(create_input("set_as_me", participant_id="zed"))

        assert state.me_id is None
        assert state.chat_settings.mode == "group"

    def test_remove_down_to_two_with_me_switches_to_private(self):
        """Test removing a third participant applies the private-mode rule."""
        state = create_state(
            participants=[
                create_participant("Alice"),
                create_participant("Bob"),
                create_participant("Carol"),
            ],
            me_id="alice",
        )

        state.apply_input(create_input("remove_participant", participant_id="carol"))

        assert state.chat_settings.mode == "private"

    def test_me_id_always_references_participant(self):
        """Test me_id never dangles across a sequence of commands."""
        state = create_two_person_state()
        commands = [
            create_input("set_as_me", participant_id="alice"),
            create_input("add_participant", name="Carol"),
            create_input("remove_participant", participant_id="alice"),
            create_input("set_as_me", participant_id="bob"),
            create_input("remove_participant", participant_id="bob"),
        ]

        for command in commands:
            state.apply_input(command)
            assert state.me_id is None or state.get_participant(state.me_id) is not None


class TestMessageCommands:
    """Test send_message and insert_date_marker."""

    def test_send_message_appends(self):
        """Test a sent message is appended with a fresh id."""
        state = create_two_person_state()

        state.apply_input(create_input("send_message", message=create_draft(text="Hi")))

        assert len(state.messages) == 1
        message = state.messages[0]
        assert message.text == "Hi"
        assert message.sender_id == "alice"
        assert message.timestamp == FIXED_TIME
        assert message.id

    def test_send_message_keeps_authoring_order(self):
        """Test an earlier-dated message is still appended at the end."""
        state = create_two_person_state()

        state.apply_input(create_input("send_message", message=create_draft(text="first")))
        state.apply_input(
            create_input(
                "send_message",
                message=create_draft(text="second", timestamp=FIXED_TIME - timedelta(days=3)),
            )
        )

        assert [m.text for m in state.messages] == ["first", "second"]

    def test_send_message_from_unknown_sender_rejected(self):
        """Test a sender that is not a participant is rejected."""
        state = create_two_person_state()

        with pytest.raises(ValueError, match="not a participant"):
            state.apply_input(
                create_input("send_message", message=create_draft(sender_id="zed"))
            )

        assert state.messages == []

    def test_send_audio_message(self):
        """Test an audio message keeps its duration."""
        state = create_two_person_state()

        state.apply_input(
            create_input(
                "send_message",
                message=create_draft(type="audio", text="", audio_duration="0:42"),
            )
        )

        assert state.messages[0].type == "audio"
        assert state.messages[0].audio_duration == "0:42"

    def test_send_image_without_url_rejected(self):
        """Test an image message needs an image reference."""
        state = create_two_person_state()

        with pytest.raises(ValueError, match="image"):
            state.apply_input(create_input("send_message", message=create_draft(type="image")))

        assert state.messages == []

    def test_send_reply_captures_preview(self):
        """Test replying fills the cached preview and type from the target."""
        state = create_two_person_state()
        state.apply_input(
            create_input("send_message", message=create_draft(text="See you at noon"))
        )
        target = state.messages[0]

        state.apply_input(
            create_input(
                "send_message",
                message=create_draft(sender_id="bob", text="OK", reply_to_id=target.id),
            )
        )

        reply = state.messages[1]
        assert reply.reply_to_id == target.id
        assert reply.reply_to_preview == "See you at noon"
        assert reply.reply_to_type == "text"

    def test_send_reply_keeps_supplied_preview(self):
        """Test a preview given with the draft is not overwritten."""
        state = create_two_person_state()
        state.apply_input(create_input("send_message", message=create_draft(text="Original")))
        target = state.messages[0]

        state.apply_input(
            create_input(
                "send_message",
                message=create_draft(
                    sender_id="bob",
                    reply_to_id=target.id,
                    reply_to_preview="Custom",
                    reply_to_type="text",
                ),
            )
        )

        assert state.messages[1].reply_to_preview == "Custom"

    def test_insert_date_marker(self):
        """Test a date marker is appended with the reserved sender id."""
        state = create_two_person_state()

        state.apply_input(create_input("insert_date_marker", label="  Yesterday  "))

        marker = state.messages[0]
        assert marker.sender_id == SYSTEM_DATE_SENDER_ID
        assert marker.text == "Yesterday"
        assert marker.type == "text"
        assert marker.is_date_marker

    @pytest.mark.parametrize("label", ["", "   "])
    def test_insert_blank_date_marker_rejected(self, label):
        """Test an empty or whitespace label leaves the messages unchanged."""
        state = create_two_person_state()

        with pytest.raises(ValueError, match="cannot be empty"):
            state.apply_input(create_input("insert_date_marker", label=label))

        assert state.messages == []


class TestSettingsCommands:
    """Test chat settings and phone status updates."""

    def test_update_chat_settings_merges(self):
        """Test a partial update keeps the fields not mentioned."""
        state = ConversationState()

        state.apply_input(create_input("update_chat_settings", changes={"title": "Team"}))

        assert state.chat_settings.title == "Team"
        assert state.chat_settings.mode == "group"

    def test_update_chat_settings_clears_avatar(self):
        """Test the chat avatar can be cleared after a load failure."""
        state = create_state(chat_settings=ChatSettings(avatar="group.png"))

        state.apply_input(create_input("update_chat_settings", changes={"avatar": None}))

        assert state.chat_settings.avatar is None

    def test_update_chat_settings_unknown_field_rejected(self):
        """Test a change naming an unknown field is rejected."""
        state = ConversationState()

        with pytest.raises(ValueError, match="unknown fields"):
            state.apply_input(create_input("update_chat_settings", changes={"colour": "red"}))

    def test_update_chat_settings_invalid_mode_leaves_state(self):
        """Test an invalid mode is rejected without touching the settings."""
        state = ConversationState()

        with pytest.raises(ValueError):
            state.apply_input(create_input("update_chat_settings", changes={"mode": "channel"}))

        assert state.chat_settings.mode == "group"

    def test_update_phone_status(self):
        """Test the battery level and custom time can be changed."""
        state = ConversationState()

        state.apply_input(
            create_input(
                "update_phone_status", changes={"battery_level": 15, "custom_time": "9:41"}
            )
        )

        assert state.phone_status.battery_level == 15
        assert state.phone_status.custom_time == "9:41"

    @pytest.mark.parametrize("level", [0, 101])
    def test_update_phone_status_out_of_range_rejected(self, level):
        """Test battery levels outside 1-100 are rejected."""
        state = ConversationState()

        with pytest.raises(ValueError):
            state.apply_input(
                create_input("update_phone_status", changes={"battery_level": level})
            )

        assert state.phone_status.battery_level == 100


class TestConversationStateHelpers:
    """Test lookups, snapshot, validate_state, clear and summary."""

    def test_me_property(self):
        """Test the me property resolves me_id."""
        state = create_two_person_state(me_id="bob")

        assert state.me.name == "Bob"

    def test_get_message(self):
        """Test messages can be looked up by id."""
        message = create_message(message_id="m1")
        state = create_two_person_state(messages=[message])

        assert state.get_message("m1") == message
        assert state.get_message("missing") is None

    def test_snapshot_uses_document_keys(self):
        """Test the snapshot has camelCase keys and string timestamps."""
        state = create_two_person_state(messages=[create_message()], me_id="alice")

        snapshot = state.get_snapshot()

        assert set(snapshot) == {"participants", "messages", "chatSettings", "meId", "phoneStatus"}
        assert snapshot["meId"] == "alice"
        assert snapshot["messages"][0]["senderId"] == "alice"
        assert isinstance(snapshot["messages"][0]["timestamp"], str)
        assert snapshot["phoneStatus"] == {"batteryLevel": 100, "customTime": None}

    def test_validate_state_clean(self):
        """Test a consistent state reports no issues."""
        state = create_two_person_state(messages=[create_message()])

        assert state.validate_state() == []

    def test_validate_state_reports_dangling_me(self):
        """Test a me_id without a participant is reported."""
        state = create_two_person_state(me_id="zed")

        issues = state.validate_state()

        assert any("me_id" in issue for issue in issues)

    def test_validate_state_reports_private_mode_mismatch(self):
        """Test private mode with three participants is reported."""
        state = create_state(
            participants=[
                create_participant("Alice"),
                create_participant("Bob"),
                create_participant("Carol"),
            ],
            chat_settings=ChatSettings(mode="private"),
        )

        issues = state.validate_state()

        assert any("Private mode" in issue for issue in issues)

    def test_clear(self):
        """Test clear resets every field to its default."""
        state = create_two_person_state(messages=[create_message()], me_id="alice")

        state.clear()

        assert state == ConversationState()

    def test_summary(self):
        """Test the summary counts participants, messages and markers."""
        state = create_two_person_state(
            messages=[create_message(), create_message(sender_id="bob", text="Hey")]
        )
        state.apply_input(create_input("insert_date_marker", label="Today"))

        assert state.summary == "2 participants, 2 messages, 1 date markers (group chat)"
