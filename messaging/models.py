"""
================================================================================
SOCIAL DM - DATABASE MODELS
================================================================================

@file        models.py
@description Django ORM models for direct conversations, messages and blocks
@version     1.0.0

MODULE PURPOSE
================================================================================
This module defines the relational schema behind direct messaging:
- User model (extended from AbstractUser)
- Block relations between accounts
- Two-party conversations keyed by a canonical participant pair
- Messages with reply pointers and global tombstones
- Per-viewer hide records for conversations and messages
- Notifications emitted on new traffic

DATABASE STRUCTURE
================================================================================
1. User & Authentication
   - User (AbstractUser extension)

2. Social Relationships
   - Block (directed, enforced in both directions)

3. Messaging System
   - Conversation (exactly two participants, stored low id first)
   - ConversationHide (conversation hidden for one viewer)
   - Message (append-only ledger entry)
   - MessageHide (message hidden for one viewer)

4. Notifications
   - Notification (activity alerts)

MODEL RELATIONSHIPS
================================================================================
User (1) ──────> (N) Block (as blocker / as blocked)
User (2) <─────> (1) Conversation (participant_low, participant_high)
Conversation (1) ──────> (N) Message
Message (1) ──────> (N) Message (replies)
Conversation (1) ──────> (N) ConversationHide
Message (1) ──────> (N) MessageHide

ACCOUNT DELETION
================================================================================
Every foreign key to User cascades, so removing an account removes its
conversations, messages, hide records and block relations.

================================================================================
"""

import pytz
from django.conf import settings
from django.contrib.auth.models import AbstractUser
from django.db import models
from django.utils import timezone as dj_timezone


# ============================================================================
# CONSTANTS & CHOICES
# ============================================================================

"""
Timezone choices for user preference selection.
Uses all available timezones from pytz library.
"""
TIMEZONE_CHOICES = [(tz, tz) for tz in pytz.all_timezones]

"""
Message payload kinds. Anything other than text is an opaque payload
(a media URL or upload reference) as far as the ledger is concerned.
"""
MESSAGE_KIND_TEXT = 'text'
MESSAGE_KIND_CHOICES = [
    (MESSAGE_KIND_TEXT, 'Text'),
    ('image', 'Image'),
    ('audio', 'Audio'),
    ('file', 'File'),
]
MESSAGE_KINDS = frozenset(kind for kind, _ in MESSAGE_KIND_CHOICES)


# ============================================================================
# SECTION 1: USER & AUTHENTICATION MODELS
# ============================================================================

class User(AbstractUser):
    """
    Account referenced by the messaging core.

    Accounts are owned by the account service; the messaging core only
    reads their identity, display fields and timezone preference.

    Attributes:
        timezone (CharField): User's preferred timezone

    Properties:
        is_protected: True for reserved system accounts that cannot be blocked

    Related Names:
        blocks: QuerySet of Block objects (users blocked by this user)
        blocked_by: QuerySet of Block objects (users who blocked this user)
        sent_messages: QuerySet of sent Message objects
        notifications: QuerySet of Notification objects
    """

    timezone = models.CharField(
        max_length=100,
        choices=TIMEZONE_CHOICES,
        default='UTC',
        help_text="User's preferred timezone for display"
    )

    @property
    def is_protected(self):
        """
        Determine if this is a reserved system account.

        Superusers and any account whose email is listed in
        MESSAGING['PROTECTED_ACCOUNT_EMAILS'] are protected.

        Returns:
            bool: True if the account cannot be blocked
        """
        if self.is_superuser:
            return True
        protected = settings.MESSAGING.get('PROTECTED_ACCOUNT_EMAILS', ())
        return bool(self.email) and self.email.lower() in protected


# ============================================================================
# SECTION 2: SOCIAL RELATIONSHIP MODELS
# ============================================================================

class Block(models.Model):
    """
    User blocking relationship.

    Stored as a one-way relation (blocker -> blocked) but enforced in
    both directions: while either direction exists, neither account may
    open a conversation with or message the other. Only the blocker can
    remove the relation.

    Attributes:
        blocker (ForeignKey): User who initiated the block
        blocked (ForeignKey): User who is blocked
        timestamp (DateTimeField): When block was created

    Meta:
        unique_together: Prevents duplicate blocks in the same direction

    Example:
        # User A blocks User B
        Block.objects.create(blocker=user_a, blocked=user_b)
    """

    blocker = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='blocks',
        help_text="User who initiated the block"
    )
    blocked = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='blocked_by',
        help_text="User who is blocked"
    )
    timestamp = models.DateTimeField(
        auto_now_add=True,
        help_text="Block creation timestamp"
    )

    class Meta:
        unique_together = ('blocker', 'blocked')

    def __str__(self):
        return f"{self.blocker} blocks {self.blocked}"


# ============================================================================
# SECTION 3: MESSAGING SYSTEM MODELS
# ============================================================================

class Conversation(models.Model):
    """
    Two-party direct conversation.

    The participant pair is stored in canonical order (lower account id
    first), which makes the pair the natural key of the conversation:
    the unique constraint guarantees at most one conversation per
    unordered pair, and concurrent creators collide on it.

    Attributes:
        participant_low (ForeignKey): Participant with the lower account id
        participant_high (ForeignKey): Participant with the higher account id
        created_at (DateTimeField): Creation timestamp
        last_activity_at (DateTimeField): Time of the latest message append

    Related Names:
        messages: QuerySet of Message objects
        hides: QuerySet of ConversationHide objects

    Example:
        low, high = sorted([user_a.pk, user_b.pk])
        Conversation.objects.create(participant_low_id=low, participant_high_id=high)
    """

    participant_low = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='conversations_as_low',
        help_text="Participant with the lower account id"
    )
    participant_high = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='conversations_as_high',
        help_text="Participant with the higher account id"
    )
    created_at = models.DateTimeField(
        default=dj_timezone.now,
        help_text="Creation timestamp"
    )
    last_activity_at = models.DateTimeField(
        default=dj_timezone.now,
        db_index=True,
        help_text="Latest message append (never moves backwards)"
    )

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['participant_low', 'participant_high'],
                name='unique_conversation_pair',
            ),
            models.CheckConstraint(
                condition=models.Q(participant_low__lt=models.F('participant_high')),
                name='conversation_pair_ordered',
            ),
        ]

    def __str__(self):
        return f"DM #{self.pk}"

    @property
    def participant_ids(self):
        return (self.participant_low_id, self.participant_high_id)

    def has_participant(self, account_id):
        return account_id in self.participant_ids

    def other_participant_id(self, account_id):
        """
        Return the id of the participant who is not ``account_id``.

        Raises:
            ValueError: if ``account_id`` is not a participant
        """
        if account_id == self.participant_low_id:
            return self.participant_high_id
        if account_id == self.participant_high_id:
            return self.participant_low_id
        raise ValueError(f"{account_id} is not a participant of {self}")


class ConversationHide(models.Model):
    """
    Conversation hidden from one viewer's inbox.

    Present means hidden, absent means visible. Rows are created by an
    explicit delete-conversation action and removed when new traffic is
    appended to the conversation.

    Attributes:
        conversation (ForeignKey): Hidden conversation
        viewer (ForeignKey): User the conversation is hidden from
        hidden_at (DateTimeField): When the conversation was hidden
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='hides',
        help_text="Hidden conversation"
    )
    viewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='hidden_conversations',
        help_text="User the conversation is hidden from"
    )
    hidden_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the conversation was hidden"
    )

    class Meta:
        unique_together = ('conversation', 'viewer')


class Message(models.Model):
    """
    Chat message in a two-party conversation.

    Messages are appended once and never physically removed. The sender
    may tombstone a message, which replaces its content for everyone but
    keeps it in the conversation. Either participant may hide a message
    from their own view.

    Attributes:
        conversation (ForeignKey): Conversation this message belongs to
        sender (ForeignKey): User who sent the message
        content (TextField): Message text, or the payload reference for media kinds
        kind (CharField): Payload kind (text, image, audio, file)
        reply_to (ForeignKey): Earlier message in the same conversation
        created_at (DateTimeField): Creation timestamp
        is_tombstoned (BooleanField): Content replaced for everyone
        is_read (BooleanField): Seen by the non-sender participant

    Meta:
        ordering: Oldest first, id as tie-break

    Example:
        message = Message.objects.create(
            conversation=conversation,
            sender=request.user,
            content="Hello!"
        )
    """

    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.CASCADE,
        related_name='messages',
        help_text="Conversation this message belongs to"
    )
    sender = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='sent_messages',
        help_text="User who sent this message"
    )
    content = models.TextField(
        help_text="Message text content or media reference"
    )
    kind = models.CharField(
        max_length=10,
        choices=MESSAGE_KIND_CHOICES,
        default=MESSAGE_KIND_TEXT,
        help_text="Type of message payload"
    )
    reply_to = models.ForeignKey(
        'self',
        null=True,
        blank=True,
        on_delete=models.SET_NULL,
        related_name='replies',
        help_text="Earlier message in the same conversation this one replies to"
    )
    created_at = models.DateTimeField(
        default=dj_timezone.now,
        db_index=True,
        help_text="Message creation timestamp"
    )
    is_tombstoned = models.BooleanField(
        default=False,
        help_text="Content replaced for everyone by the sender"
    )
    is_read = models.BooleanField(
        default=False,
        help_text="Seen by the participant who did not send it"
    )

    class Meta:
        ordering = ['created_at', 'id']

    def __str__(self):
        return f"[DM {self.conversation_id}] {self.sender}: {self.content[:30]}"


class MessageHide(models.Model):
    """
    Message hidden from one viewer's conversation view.

    Independent of the sender's tombstone: a message can be both hidden
    for one viewer and tombstoned for everyone.
    """

    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name='hides',
        help_text="Hidden message"
    )
    viewer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='hidden_messages',
        help_text="User the message is hidden from"
    )
    hidden_at = models.DateTimeField(
        auto_now_add=True,
        help_text="When the message was hidden"
    )

    class Meta:
        unique_together = ('message', 'viewer')


# ============================================================================
# SECTION 4: NOTIFICATION MODELS
# ============================================================================

class Notification(models.Model):
    """
    User activity notification.

    Written by the notification emitter after a message is appended.
    Delivery (push, email) happens outside this service.

    Attributes:
        user (ForeignKey): User receiving the notification
        actor (ForeignKey): User who performed the action
        verb (CharField): Action description (e.g., "sent you a message")
        conversation (ForeignKey): Associated conversation (if applicable)
        is_read (BooleanField): Read status
        created_at (DateTimeField): Creation timestamp

    Meta:
        ordering: Newest first (descending created_at)
    """

    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='notifications',
        help_text="User receiving this notification"
    )
    actor = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        related_name='+',
        help_text="User who performed the action"
    )
    verb = models.CharField(
        max_length=50,
        help_text="Action description (e.g., 'sent you a message')"
    )
    conversation = models.ForeignKey(
        Conversation,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        help_text="Associated conversation (if applicable)"
    )
    is_read = models.BooleanField(
        default=False,
        help_text="Whether notification has been read"
    )
    created_at = models.DateTimeField(
        auto_now_add=True,
        help_text="Notification creation timestamp"
    )

    class Meta:
        ordering = ['-created_at']
