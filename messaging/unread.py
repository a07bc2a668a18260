"""
Per-viewer unread state.

A message is unread for a viewer when the other participant sent it
and it has not been marked read. mark_read() is best-effort: a failed
write is logged and picked up again by the next read of the
conversation. A message that arrives while a sweep is running may be
left for the next sweep.
"""

import logging

from django.db import DatabaseError
from django.db.models import Q

from .models import Message


logger = logging.getLogger(__name__)


def _unread_for(viewer_id):
    return Message.objects.filter(is_read=False).exclude(sender_id=viewer_id)


def count_unread(conversation_id, viewer_id):
    return _unread_for(viewer_id).filter(conversation_id=conversation_id).count()


def mark_read(conversation_id, viewer_id):
    """
    Mark every message the other participant sent as read.

    Never raises on store failure; returns the number of rows updated,
    or None when the write failed.
    """
    try:
        return _unread_for(viewer_id).filter(conversation_id=conversation_id).update(is_read=True)
    except DatabaseError:
        logger.exception(
            "Failed to mark conversation %s read for user %s", conversation_id, viewer_id
        )
        return None


def total_unread(viewer_id):
    """Unread messages across every conversation the viewer has not hidden (inbox badge)."""
    return (
        _unread_for(viewer_id)
        .filter(Q(conversation__participant_low_id=viewer_id) | Q(conversation__participant_high_id=viewer_id))
        .exclude(conversation__hides__viewer_id=viewer_id)
        .count()
    )
