"""Unit tests for ConversationInput and MessageDraft."""

from datetime import timezone

import pytest
from pydantic import ValidationError

from transcript.conversation_input import ConversationInput, MessageDraft
from transcript.participant import Participant
from tests.fixtures.conversation import create_draft, create_input


class TestMessageDraft:
    """Test MessageDraft defaults and validation."""

    def test_defaults(self):
        """Test a draft only needs a sender."""
        draft = MessageDraft(sender_id="alice")

        assert draft.text == ""
        assert draft.type == "text"
        assert draft.timestamp.tzinfo == timezone.utc
        assert draft.reply_to_id is None

    @pytest.mark.parametrize("duration", ["0:42", "12:05", "1:02:03"])
    def test_audio_duration_accepts_clock_formats(self, duration):
        """Test MM:SS and HH:MM:SS durations are accepted."""
        draft = create_draft(type="audio", audio_duration=duration)

        assert draft.audio_duration == duration

    @pytest.mark.parametrize("duration", ["42", "1:2:3:4", "a:bc", "1m30s"])
    def test_audio_duration_rejects_other_shapes(self, duration):
        """Test malformed durations fail validation."""
        with pytest.raises(ValidationError):
            create_draft(type="audio", audio_duration=duration)

    def test_blank_audio_duration_becomes_none(self):
        """Test an empty duration is treated as missing."""
        draft = create_draft(audio_duration="  ")

        assert draft.audio_duration is None

    def test_validate_draft_audio_needs_duration(self):
        """Test an audio draft without a duration is rejected."""
        draft = create_draft(type="audio")

        with pytest.raises(ValueError, match="audio duration"):
            draft.validate_draft()

    def test_validate_draft_image_needs_url(self):
        """Test an image draft without a reference is rejected."""
        draft = create_draft(type="image", image_caption="Sunset")

        with pytest.raises(ValueError, match="image URL"):
            draft.validate_draft()

    def test_validate_draft_rejects_reserved_sender(self):
        """Test regular messages cannot use the date marker sender id."""
        draft = create_draft(sender_id="system_date")

        with pytest.raises(ValueError, match="reserved"):
            draft.validate_draft()

    def test_validate_draft_rejects_blank_sender(self):
        """Test a blank sender is rejected."""
        with pytest.raises(ValueError, match="sender"):
            create_draft(sender_id="  ").validate_draft()

    def test_validate_draft_accepts_image_with_url(self):
        """Test a complete image draft passes."""
        create_draft(type="image", image_url="data:image/png;base64,AAAA").validate_draft()


class TestConversationInputValidation:
    """Test ConversationInput.validate_input() per operation."""

    def test_unknown_operation_rejected_by_model(self):
        """Test operations outside the command set fail model validation."""
        with pytest.raises(ValidationError):
            ConversationInput(operation="delete_message")

    def test_add_participant_requires_name(self):
        """Test add_participant needs a non-empty name."""
        with pytest.raises(ValueError, match="name"):
            create_input("add_participant").validate_input()

    def test_add_participant_rejects_chosen_id(self):
        """Test add_participant cannot name the id of the new participant."""
        with pytest.raises(ValueError, match="assigned by the store"):
            create_input("add_participant", name="Ann", participant_id="ann").validate_input()

    @pytest.mark.parametrize(
        "operation", ["remove_participant", "report_avatar_error", "set_as_me"]
    )
    def test_participant_operations_require_id(self, operation):
        """Test commands targeting a participant need its id."""
        with pytest.raises(ValueError, match="participant_id"):
            create_input(operation).validate_input()

    def test_update_participant_requires_record(self):
        """Test update_participant needs the replacement record."""
        with pytest.raises(ValueError, match="participant"):
            create_input("update_participant").validate_input()

    def test_send_message_requires_draft(self):
        """Test send_message needs a draft."""
        with pytest.raises(ValueError, match="message"):
            create_input("send_message").validate_input()

    def test_send_message_validates_draft(self):
        """Test send_message runs the draft's own checks."""
        command = create_input("send_message", message=create_draft(type="audio"))

        with pytest.raises(ValueError, match="audio duration"):
            command.validate_input()

    @pytest.mark.parametrize("label", [None, "", "  \t"])
    def test_date_marker_requires_label(self, label):
        """Test a date marker needs a non-blank label."""
        with pytest.raises(ValueError, match="cannot be empty"):
            create_input("insert_date_marker", label=label).validate_input()

    def test_phone_status_rejects_unknown_fields(self):
        """Test phone status changes may only name its fields."""
        command = create_input("update_phone_status", changes={"wifi": 3})

        with pytest.raises(ValueError, match="wifi"):
            command.validate_input()

    def test_valid_commands_pass(self):
        """Test well-formed commands pass validation."""
        commands = [
            create_input("add_participant", name="Alice"),
            create_input("remove_participant", participant_id="a"),
            create_input("update_participant", participant=Participant(id="a", name="A")),
            create_input("send_message", message=create_draft()),
            create_input("insert_date_marker", label="Today"),
            create_input("update_chat_settings", changes={"mode": "private"}),
            create_input("update_phone_status", changes={"custom_time": "9:41"}),
        ]

        for command in commands:
            command.validate_input()


class TestConversationInputSummary:
    """Test ConversationInput.get_summary()."""

    def test_add_participant_summary(self):
        """Test the summary names the new participant."""
        assert create_input("add_participant", name="Alice").get_summary() == (
            "Add participant 'Alice'"
        )

    def test_send_message_summary_truncates(self):
        """Test long message text is shortened in the summary."""
        command = create_input("send_message", message=create_draft(text="x" * 80))

        summary = command.get_summary()

        assert summary.startswith("Text from alice: '")
        assert summary.endswith("...'")

    def test_date_marker_summary(self):
        """Test the summary quotes the marker label."""
        assert create_input("insert_date_marker", label="Today").get_summary() == (
            "Date marker 'Today'"
        )

    def test_input_ids_are_unique(self):
        """Test each command gets its own id."""
        assert create_input("set_as_me").input_id != create_input("set_as_me").input_id
