"""
================================================================================
SOCIAL DM - CONVERSATION STORE
================================================================================

@file        conversations.py
@description Canonical identity, creation and lookup of two-party conversations

MODULE PURPOSE
================================================================================
A conversation is identified by its unordered participant pair. The pair
is normalised to (lower id, higher id) before every lookup, so
get_or_create(a, b) and get_or_create(b, a) resolve to the same row.

CONCURRENCY
================================================================================
Creation relies on the unique constraint over the canonical pair rather
than on a query-then-insert check. When two requests race, the loser's
insert raises IntegrityError inside its own savepoint and is answered
with the winner's row; neither caller sees an error and no duplicate is
written. Django's QuerySet.get_or_create implements exactly this
insert-in-savepoint / fetch-on-conflict sequence.

================================================================================
"""

import logging

from django.contrib.auth import get_user_model
from django.db.models import Q

from . import blocks, visibility
from .exceptions import Forbidden, NotFound, SelfConversation, Unauthorized
from .models import Conversation


logger = logging.getLogger(__name__)


def canonical_pair(account_a_id, account_b_id):
    if account_a_id < account_b_id:
        return account_a_id, account_b_id
    return account_b_id, account_a_id


def get_or_create(account_a_id, account_b_id):
    """
    Return the conversation between two accounts, creating it on first contact.

    Args:
        account_a_id: Either participant (order does not matter)
        account_b_id: The other participant

    Returns:
        tuple: (Conversation, created)

    Raises:
        SelfConversation: both ids denote the same account
        NotFound: either account does not exist
        Forbidden: a block exists in either direction
    """
    if account_a_id == account_b_id:
        raise SelfConversation()

    existing = get_user_model().objects.filter(pk__in=[account_a_id, account_b_id]).count()
    if existing != 2:
        raise NotFound("User not found")

    if blocks.is_blocked_either_direction(account_a_id, account_b_id):
        raise Forbidden()

    low, high = canonical_pair(account_a_id, account_b_id)
    conversation, created = Conversation.objects.get_or_create(
        participant_low_id=low, participant_high_id=high
    )
    if created:
        logger.info("Conversation %s created between %s and %s", conversation.pk, low, high)
    return conversation, created


def get_by_id(conversation_id):
    try:
        return Conversation.objects.get(pk=conversation_id)
    except Conversation.DoesNotExist:
        raise NotFound("Conversation not found")


def get_for_participant(conversation_id, viewer_id):
    """
    Fetch a conversation the viewer takes part in.

    Non-participants get NotFound: the conversation is not visible to them.
    """
    conversation = get_by_id(conversation_id)
    if not conversation.has_participant(viewer_id):
        raise NotFound("Conversation not found")
    return conversation


def list_for_viewer(viewer_id):
    """Conversations the viewer takes part in and has not hidden, most recent activity first."""
    return (
        Conversation.objects.filter(Q(participant_low_id=viewer_id) | Q(participant_high_id=viewer_id))
        .exclude(hides__viewer_id=viewer_id)
        .select_related('participant_low', 'participant_high')
        .order_by('-last_activity_at', '-id')
    )


def hide_for_viewer(conversation_id, viewer_id):
    """The "delete conversation" action: hide it from the viewer's list only."""
    conversation = get_by_id(conversation_id)
    if not conversation.has_participant(viewer_id):
        raise Unauthorized("Not a participant of this conversation")
    visibility.hide(conversation.pk, viewer_id)
    return conversation
