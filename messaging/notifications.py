"""
Notification emitter.

Writes a Notification row for the recipient of new traffic. Delivery
(push, email) is handled elsewhere. Emission runs after the append has
committed and must never fail the request that triggered it.
"""

import logging

from django.db import DatabaseError

from .models import Notification


logger = logging.getLogger(__name__)

NEW_MESSAGE_VERB = "sent you a message"


def emit_new_message(recipient_id, sender_id, conversation_id):
    try:
        Notification.objects.create(
            user_id=recipient_id,
            actor_id=sender_id,
            verb=NEW_MESSAGE_VERB,
            conversation_id=conversation_id,
        )
    except DatabaseError:
        logger.exception(
            "Failed to notify user %s of new message in conversation %s",
            recipient_id, conversation_id,
        )
