"""
================================================================================
SOCIAL DM - BLOCK REGISTRY
================================================================================

@file        blocks.py
@description Directed block relations with symmetric enforcement

MODULE PURPOSE
================================================================================
Blocks are stored one way (blocker -> blocked) but enforced both ways.
is_blocked_either_direction() is the single predicate every conversation
and message mutation consults before touching the store.

Only the original blocker can lift a block. The blocked account cannot
see or act on the relation; it only observes Forbidden errors, which do
not reveal which side blocked.

================================================================================
"""

import logging

from django.contrib.auth import get_user_model
from django.db import IntegrityError, transaction
from django.db.models import Q

from .exceptions import AlreadyBlocked, NotFound, ProtectedAccount, SelfBlock
from .models import Block


logger = logging.getLogger(__name__)


def block(blocker_id, blocked_id):
    """
    Create the directed relation ``blocker_id -> blocked_id``.

    Raises:
        SelfBlock: blocker and blocked are the same account
        NotFound: the blocked account does not exist
        ProtectedAccount: the blocked account is a reserved system account
        AlreadyBlocked: the relation already exists in this direction
    """
    if blocker_id == blocked_id:
        raise SelfBlock()

    User = get_user_model()
    try:
        target = User.objects.get(pk=blocked_id)
    except User.DoesNotExist:
        raise NotFound("User not found")

    if target.is_protected:
        raise ProtectedAccount()

    try:
        with transaction.atomic():
            relation = Block.objects.create(blocker_id=blocker_id, blocked_id=blocked_id)
    except IntegrityError:
        raise AlreadyBlocked()

    logger.info("User %s blocked user %s", blocker_id, blocked_id)
    return relation


def unblock(blocker_id, blocked_id):
    """Remove the relation created by ``blocker_id``. The blocked side cannot lift it."""
    deleted, _ = Block.objects.filter(blocker_id=blocker_id, blocked_id=blocked_id).delete()
    if not deleted:
        raise NotFound("User is not blocked")
    logger.info("User %s unblocked user %s", blocker_id, blocked_id)


def is_blocked_either_direction(user_a_id, user_b_id):
    return Block.objects.filter(
        Q(blocker_id=user_a_id, blocked_id=user_b_id) |
        Q(blocker_id=user_b_id, blocked_id=user_a_id)
    ).exists()


def list_blocked_by(viewer_id):
    """Block relations created by ``viewer_id``, newest first, with the blocked account loaded."""
    return (
        Block.objects.filter(blocker_id=viewer_id)
        .select_related('blocked')
        .order_by('-timestamp', '-id')
    )
