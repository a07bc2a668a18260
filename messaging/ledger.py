"""
================================================================================
SOCIAL DM - MESSAGE LEDGER
================================================================================

@file        ledger.py
@description Append-only message log per conversation

MODULE PURPOSE
================================================================================
Messages are appended once and never physically removed. Two deletion
semantics sit on top of the log:

1. hide_for_viewer()        - a MessageHide row removes one message from
                              one participant's view. Idempotent.
2. tombstone_for_everyone() - the sender replaces the content with a fixed
                              placeholder for everyone. Irreversible. The
                              message stays listed.

APPEND SIDE EFFECTS
================================================================================
A successful append, inside a single transaction:
    1. inserts the message
    2. advances Conversation.last_activity_at (never backwards)
    3. removes every participant's ConversationHide row

Step 3 is what brings a conversation back into an inbox that deleted it:
only new traffic restores visibility, never reading.

After the transaction commits, a notification is emitted for the
recipient. Emission is fire-and-forget.

ORDERING
================================================================================
Within a conversation messages are ordered by (created_at, id). A reply
target must already exist in the same conversation, so it is strictly
earlier than the reply and reply chains cannot form cycles.

INBOX
================================================================================
inbox() annotates the viewer's conversation list with the id of its last
visible message and its unread count, so listing costs two queries
regardless of how many conversations the viewer has.

================================================================================
"""

import logging
from functools import partial

from django.conf import settings
from django.db import transaction
from django.db.models import Count, DateTimeField, Exists, OuterRef, Q, Subquery, Value
from django.db.models.functions import Greatest
from django.utils import timezone

from . import blocks, conversations, notifications, visibility
from .exceptions import Forbidden, InvalidReply, NotFound, Unauthorized, ValidationError
from .models import MESSAGE_KIND_TEXT, MESSAGE_KINDS, Conversation, Message, MessageHide


logger = logging.getLogger(__name__)


def tombstone_placeholder():
    return settings.MESSAGING['TOMBSTONE_PLACEHOLDER']


def append(conversation_id, sender_id, content, kind=MESSAGE_KIND_TEXT, reply_to_id=None):
    """
    Append a message to a conversation.

    Content moderation and length limits are applied by the caller
    before this point; only empty content is rejected here.

    Args:
        conversation_id: Target conversation
        sender_id: Sending account, must be a participant
        content: Message text, or payload reference for media kinds
        kind: One of MESSAGE_KINDS
        reply_to_id: Optional earlier message in the same conversation

    Returns:
        Message: The persisted message

    Raises:
        ValidationError: empty content or unknown kind
        NotFound: conversation does not exist
        Unauthorized: sender is not a participant
        Forbidden: a block exists between the participants
        InvalidReply: reply target missing or in another conversation
    """
    if content is None or not str(content).strip():
        raise ValidationError("Message content is required")
    if kind not in MESSAGE_KINDS:
        raise ValidationError(f"Unsupported message kind: {kind}")

    conversation = conversations.get_by_id(conversation_id)
    if not conversation.has_participant(sender_id):
        raise Unauthorized("Not a participant of this conversation")

    recipient_id = conversation.other_participant_id(sender_id)
    if blocks.is_blocked_either_direction(sender_id, recipient_id):
        raise Forbidden()

    with transaction.atomic():
        if reply_to_id is not None:
            if not Message.objects.filter(pk=reply_to_id, conversation_id=conversation.pk).exists():
                raise InvalidReply()

        now = timezone.now()
        message = Message.objects.create(
            conversation=conversation,
            sender_id=sender_id,
            content=str(content).strip(),
            kind=kind,
            reply_to_id=reply_to_id,
            created_at=now,
        )
        Conversation.objects.filter(pk=conversation.pk).update(
            last_activity_at=Greatest('last_activity_at', Value(now, output_field=DateTimeField()))
        )
        visibility.restore_for_all(conversation.pk)

        transaction.on_commit(partial(
            notifications.emit_new_message,
            recipient_id=recipient_id,
            sender_id=sender_id,
            conversation_id=conversation.pk,
        ))

    return message


def get_message(message_id):
    try:
        return Message.objects.select_related('conversation').get(pk=message_id)
    except Message.DoesNotExist:
        raise NotFound("Message not found")


def tombstone_for_everyone(message_id, requester_id):
    """Replace the message content for every viewer. Only the sender may do this."""
    message = get_message(message_id)
    if message.sender_id != requester_id:
        raise Unauthorized("Only the sender can delete this message for everyone")

    if not message.is_tombstoned:
        message.content = tombstone_placeholder()
        message.is_tombstoned = True
        message.save(update_fields=['content', 'is_tombstoned'])
        logger.info("Message %s tombstoned by user %s", message.pk, requester_id)
    return message


def hide_for_viewer(message_id, viewer_id):
    """Hide one message from one participant's view. Hiding twice is a no-op."""
    message = get_message(message_id)
    if not message.conversation.has_participant(viewer_id):
        raise Unauthorized("Not a participant of this conversation")
    MessageHide.objects.get_or_create(message=message, viewer_id=viewer_id)
    return message


def visible_messages(conversation_id, viewer_id):
    """Queryset of the conversation's messages not hidden by the viewer."""
    hidden = MessageHide.objects.filter(message=OuterRef('pk'), viewer_id=viewer_id)
    return (
        Message.objects.filter(conversation_id=conversation_id)
        .exclude(Exists(hidden))
        .order_by('created_at', 'id')
    )


def list_visible(conversation_id, viewer_id):
    """
    Messages the viewer can see, oldest first.

    Tombstoned messages are included with their placeholder content.
    Reply targets and senders are loaded for preview rendering.
    """
    return list(
        visible_messages(conversation_id, viewer_id)
        .select_related('sender', 'reply_to', 'reply_to__sender')
    )


def inbox(viewer_id):
    """
    The viewer's conversation list with each entry's last visible message
    and unread count, loaded in two queries whatever the list length.

    Returns:
        list: (conversation, last visible message or None, unread count)
    """
    latest = (
        visible_messages(OuterRef('pk'), viewer_id)
        .order_by('-created_at', '-id')
        .values('pk')[:1]
    )
    entries = list(
        conversations.list_for_viewer(viewer_id).annotate(
            last_message_id=Subquery(latest),
            unread_count=Count(
                'messages',
                filter=Q(messages__is_read=False) & ~Q(messages__sender_id=viewer_id),
            ),
        )
    )
    last_messages = Message.objects.in_bulk(
        [entry.last_message_id for entry in entries if entry.last_message_id]
    )
    return [
        (entry, last_messages.get(entry.last_message_id), entry.unread_count)
        for entry in entries
    ]
