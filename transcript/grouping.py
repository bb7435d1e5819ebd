"""Grouping of transcript messages into render groups.

Turns the flat, authoring-ordered message list into the groups the phone
screen draws: automatic date sections, inline date-marker headers, or a
single flat group. Inside each group, consecutive messages from the same
sender form a run; only the first message of a run shows the sender's
avatar, name and bubble tail.

Everything here is pure and recomputed on every render.
"""

from datetime import date
from typing import Callable, Iterable, Iterator, Literal, Optional, Sequence

from pydantic import BaseModel, Field

from transcript.display import format_audio_duration, format_date_label, format_message_time
from transcript.message import Message, is_date_marker
from transcript.participant import Participant, avatar_initial
from transcript.replies import UNKNOWN_SENDER_NAME, ReplyPreview, resolve_reply
from transcript.settings import ChatMode, PhoneStatusBar


DateFormatter = Callable[[date], str]

RenderGroupKind = Literal["date", "marker", "all", "empty"]


class RenderedMessage(BaseModel):
    """A message with everything the presentation layer needs to draw it.

    Args:
        message: The underlying message.
        sender_name: Sender display name ("Unknown" for unknown senders).
        sender_avatar: Sender image reference, or None.
        sender_initial: Letter for the avatar badge.
        is_known_sender: Whether sender_id matched a participant.
        is_me: Whether the message renders as outgoing.
        is_sequential: Whether the message continues the previous run.
        show_avatar: Whether the avatar is drawn next to the bubble.
        show_tail: Whether the bubble has its directional tail.
        show_name: Whether the sender name is drawn above the bubble.
        reply: Quoted block for replies.
        time_label: Time printed in the bubble.
        audio_duration_label: Display duration for audio messages.
    """

    message: Message
    sender_name: str
    sender_avatar: Optional[str] = None
    sender_initial: str = "?"
    is_known_sender: bool = True
    is_me: bool = False
    is_sequential: bool = False
    show_avatar: bool = True
    show_tail: bool = True
    show_name: bool = False
    reply: Optional[ReplyPreview] = None
    time_label: str = ""
    audio_duration_label: Optional[str] = None


class RenderGroup(BaseModel):
    """One unit handed to the presentation layer.

    Args:
        kind: "date" for an automatic date section, "marker" for a date
            marker header (no messages), "all" for a flat run of messages
            without a header, "empty" when there is nothing to show.
        label: Header text for "date" and "marker" groups.
        day: Calendar day of a "date" group.
        items: Messages in the group, in authoring order.
    """

    kind: RenderGroupKind
    label: Optional[str] = None
    day: Optional[date] = None
    items: list[RenderedMessage] = Field(default_factory=list)


def collapse_date_markers(messages: Sequence[Message]) -> list[Message]:
    """Drop date markers that directly follow another date marker.

    The check looks at the raw predecessor, so a row of any length collapses
    to its first marker. Applying this twice gives the same result as once.

    Args:
        messages: Messages in authoring order.

    Returns:
        A new list without back-to-back date markers.
    """
    result = []
    for index, message in enumerate(messages):
        if index > 0 and is_date_marker(message) and is_date_marker(messages[index - 1]):
            continue
        result.append(message)
    return result


def bucket_by_date(messages: Iterable[Message]) -> dict[date, list[Message]]:
    """Partition messages by calendar day of their timestamp.

    Buckets come out in the order their day is first seen, not in calendar
    order, so a message dated before an existing bucket joins or opens a
    bucket without moving the others.

    Args:
        messages: Non-marker messages in authoring order.

    Returns:
        Insertion-ordered mapping of day to messages.
    """
    buckets: dict[date, list[Message]] = {}
    for message in messages:
        buckets.setdefault(message.timestamp.date(), []).append(message)
    return buckets


def is_run_start(messages: Sequence[Message], index: int) -> bool:
    """Return whether the message at index starts a new sender run.

    Args:
        messages: Messages of one render group.
        index: Position to check.

    Returns:
        True for the first message, the first message after a date marker,
        and any message whose sender differs from the previous one.
    """
    if is_date_marker(messages[index]):
        return False
    if index == 0:
        return True
    previous = messages[index - 1]
    if is_date_marker(previous):
        return True
    return messages[index].sender_id != previous.sender_id


class RenderGroups:
    """Restartable, lazily produced sequence of render groups.

    Every iteration regroups the messages it was built with, so a caller can
    walk the groups any number of times.
    """

    def __init__(
        self,
        messages: Sequence[Message],
        participants: Sequence[Participant],
        show_date_dividers: bool = True,
        date_formatter: Optional[DateFormatter] = None,
        me_id: Optional[str] = None,
        mode: ChatMode = "group",
        phone_status: Optional[PhoneStatusBar] = None,
    ):
        self.messages = list(messages)
        self.participants = list(participants)
        self.show_date_dividers = show_date_dividers
        self.date_formatter = date_formatter or format_date_label
        self.me_id = me_id
        self.mode = mode
        self.phone_status = phone_status

    def __iter__(self) -> Iterator[RenderGroup]:
        return self._generate()

    def __repr__(self) -> str:
        return (
            f"RenderGroups(messages={len(self.messages)}, "
            f"show_date_dividers={self.show_date_dividers})"
        )

    @property
    def is_empty(self) -> bool:
        """Whether there is no message to show."""
        return not self.messages

    def _generate(self) -> Iterator[RenderGroup]:
        processed = collapse_date_markers(self.messages)
        if not processed:
            yield RenderGroup(kind="empty")
            return

        has_markers = any(is_date_marker(m) for m in processed)
        if self.show_date_dividers and not has_markers:
            for day, bucket in bucket_by_date(processed).items():
                yield RenderGroup(
                    kind="date",
                    label=self.date_formatter(day),
                    day=day,
                    items=self._render_run(bucket),
                )
            return

        segment: list[Message] = []
        for message in processed:
            if is_date_marker(message):
                if segment:
                    yield RenderGroup(kind="all", items=self._render_run(segment))
                    segment = []
                yield RenderGroup(kind="marker", label=message.text)
            else:
                segment.append(message)
        if segment:
            yield RenderGroup(kind="all", items=self._render_run(segment))

    def _render_run(self, messages: Sequence[Message]) -> list[RenderedMessage]:
        participants = {p.id: p for p in self.participants}
        rendered = []
        for index, message in enumerate(messages):
            sender = participants.get(message.sender_id)
            run_start = is_run_start(messages, index)
            is_me = sender is not None and sender.id == self.me_id
            rendered.append(
                RenderedMessage(
                    message=message,
                    sender_name=sender.name if sender else UNKNOWN_SENDER_NAME,
                    sender_avatar=sender.avatar if sender else None,
                    sender_initial=sender.initial if sender else avatar_initial(None),
                    is_known_sender=sender is not None,
                    is_me=is_me,
                    is_sequential=not run_start,
                    show_avatar=run_start,
                    show_tail=run_start,
                    show_name=self.mode == "group" and not is_me and run_start,
                    reply=resolve_reply(message, self.messages, self.participants),
                    time_label=format_message_time(message.timestamp, self.phone_status),
                    audio_duration_label=(
                        format_audio_duration(message.audio_duration)
                        if message.type == "audio"
                        else None
                    ),
                )
            )
        return rendered


def group_messages(
    messages: Sequence[Message],
    participants: Sequence[Participant],
    show_date_dividers: bool = True,
    date_formatter: Optional[DateFormatter] = None,
    me_id: Optional[str] = None,
    mode: ChatMode = "group",
    phone_status: Optional[PhoneStatusBar] = None,
) -> RenderGroups:
    """Group messages for rendering.

    With date dividers on and no date markers in the transcript, messages are
    bucketed by calendar day in first-seen order. Otherwise date markers act
    as inline headers in one flat pass, and with no markers and dividers off
    all messages land in a single group.

    Args:
        messages: Messages in authoring order.
        participants: Participants used to resolve senders.
        show_date_dividers: Whether to bucket by date automatically.
        date_formatter: Custom date header formatter.
        me_id: Participant whose messages render as outgoing.
        mode: Chat mode, controls whether sender names are shown.
        phone_status: Phone status, a custom time replaces bubble times.

    Returns:
        A restartable iterable of RenderGroup.
    """
    return RenderGroups(
        messages,
        participants,
        show_date_dividers=show_date_dividers,
        date_formatter=date_formatter,
        me_id=me_id,
        mode=mode,
        phone_status=phone_status,
    )
