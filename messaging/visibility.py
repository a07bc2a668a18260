"""
Per-viewer conversation visibility.

A conversation is Visible to a participant until that participant
deletes it (hide), and becomes Visible again only when a message is
appended to it (restore_for_all, called by the ledger). Reads never
restore.
"""

import logging

from .models import ConversationHide


logger = logging.getLogger(__name__)


def hide(conversation_id, viewer_id):
    _, created = ConversationHide.objects.get_or_create(
        conversation_id=conversation_id, viewer_id=viewer_id
    )
    if created:
        logger.info("Conversation %s hidden for user %s", conversation_id, viewer_id)


def is_hidden(conversation_id, viewer_id):
    return ConversationHide.objects.filter(
        conversation_id=conversation_id, viewer_id=viewer_id
    ).exists()


def restore(conversation_id, viewer_id):
    """Remove ``viewer_id``'s hide record. Returns True if one existed."""
    deleted, _ = ConversationHide.objects.filter(
        conversation_id=conversation_id, viewer_id=viewer_id
    ).delete()
    return bool(deleted)


def restore_for_all(conversation_id):
    """
    Make the conversation visible again to every participant.

    Only MessageLedger.append calls this, inside the append transaction.
    Hide records only ever belong to participants, so clearing all of
    them for the conversation restores exactly its participants.
    """
    hides = ConversationHide.objects.filter(conversation_id=conversation_id)
    for viewer_id in list(hides.values_list("viewer_id", flat=True)):
        logger.info(
            "Conversation %s restored for user %s after new message",
            conversation_id, viewer_id,
        )
    hides.delete()
