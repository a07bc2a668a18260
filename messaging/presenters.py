"""
================================================================================
SOCIAL DM - JSON PRESENTERS
================================================================================

@file        presenters.py
@description Shape accounts, conversations and messages for API responses

MODULE PURPOSE
================================================================================
Views hand model instances to these helpers and return the result as
JSON. Keys are camelCase to match what the web and mobile clients read.

PREVIEW TEXT
================================================================================
Last-message and reply previews show text content truncated to
MESSAGING['PREVIEW_LENGTH']. Media kinds are opaque to the server, so
their preview is a short label instead of the stored reference:

    text   -> "Hey, are you coming tonight?"
    image  -> "📷 Image"
    audio  -> "🎤 Audio"
    file   -> "📎 File"

Tombstoned messages preview as their placeholder whatever their kind.

TIMESTAMPS
================================================================================
Timestamps are ISO 8601 strings in the timezone activated for the
request (see TimezoneMiddleware).

================================================================================
"""

from django.conf import settings
from django.utils import timezone

from .models import MESSAGE_KIND_TEXT


MEDIA_PREVIEW_LABELS = {
    'image': "📷 Image",
    'audio': "🎤 Audio",
    'file': "📎 File",
}


def isoformat(value):
    if value is None:
        return None
    return timezone.localtime(value).isoformat()


def preview_text(message):
    """
    Short text describing a message for inbox and reply previews.

    Args:
        message: Message instance

    Returns:
        str: Truncated text content, or a media label
    """
    if message.kind != MESSAGE_KIND_TEXT and not message.is_tombstoned:
        return MEDIA_PREVIEW_LABELS.get(message.kind, "(media)")

    limit = settings.MESSAGING['PREVIEW_LENGTH']
    content = message.content or ""
    if len(content) > limit:
        return content[:limit - 1] + "…"
    return content


def account(user):
    return {
        "id": user.pk,
        "username": user.username,
        "email": user.email,
    }


def blocked_account(relation):
    data = account(relation.blocked)
    data["blockedAt"] = isoformat(relation.timestamp)
    return data


def conversation_detail(conversation):
    return {
        "id": conversation.pk,
        "participants": [
            account(conversation.participant_low),
            account(conversation.participant_high),
        ],
        "createdAt": isoformat(conversation.created_at),
        "lastActivityAt": isoformat(conversation.last_activity_at),
    }


def last_message(message):
    if message is None:
        return None
    return {
        "id": message.pk,
        "content": preview_text(message),
        "kind": message.kind,
        "senderId": message.sender_id,
        "createdAt": isoformat(message.created_at),
        "tombstoned": message.is_tombstoned,
    }


def conversation_summary(conversation, latest, unread_count):
    data = conversation_detail(conversation)
    data["lastMessage"] = last_message(latest)
    data["unreadCount"] = unread_count
    return data


def reply_preview(target):
    if target is None:
        return None
    return {
        "id": target.pk,
        "content": preview_text(target),
        "senderId": target.sender_id,
        "senderName": target.sender.username,
    }


def message(msg):
    data = {
        "id": msg.pk,
        "conversationId": msg.conversation_id,
        "senderId": msg.sender_id,
        "content": msg.content,
        "kind": msg.kind,
        "createdAt": isoformat(msg.created_at),
        "replyToId": msg.reply_to_id,
        "tombstoned": msg.is_tombstoned,
        "read": msg.is_read,
    }
    if msg.reply_to_id:
        data["replyTo"] = reply_preview(msg.reply_to)
    else:
        data["replyTo"] = None
    return data
