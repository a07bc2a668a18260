"""
================================================================================
SOCIAL DM - URL CONFIGURATION
================================================================================

@file        urls.py
@description JSON API routes for conversations, messages and blocks

URL STRUCTURE OVERVIEW
================================================================================
Mounted under /api/ by the project URLconf.

1. Conversations (list, create, detail, hide)
2. Messages (list, send, hide for me, delete for everyone)
3. Blocking (block, unblock, blocked list, interaction check)
4. Badge & Health

URL PARAMETER TYPES
================================================================================
- <int:conversation_id>: Conversation primary key
- <int:message_id>: Message primary key
- <int:user_id>: User primary key

SECURITY CONSIDERATIONS
================================================================================
- Every route except health requires an authenticated session
- Participant and sender checks happen in the messaging core
- Block relations verified before conversation creation and sends

================================================================================
"""

from django.urls import path

from . import views


app_name = 'messaging'

urlpatterns = [

    # ========================================================================
    # SECTION 1: CONVERSATIONS
    # ========================================================================

    path(
        "conversations",
        views.conversation_list,
        name="conversation_list"
    ),  # GET inbox, POST get-or-create with participantId

    path(
        "conversations/<int:conversation_id>",
        views.conversation_detail,
        name="conversation_detail"
    ),  # GET detail, DELETE hides for caller

    path(
        "conversations/<int:conversation_id>/messages",
        views.conversation_messages,
        name="conversation_messages"
    ),  # GET visible messages (marks read), POST send


    # ========================================================================
    # SECTION 2: MESSAGES
    # ========================================================================

    path(
        "messages/<int:message_id>/for-me",
        views.delete_message_for_me,
        name="delete_message_for_me"
    ),  # DELETE hides one message for caller

    path(
        "messages/<int:message_id>",
        views.delete_message,
        name="delete_message"
    ),  # DELETE tombstones for everyone (sender only)


    # ========================================================================
    # SECTION 3: BLOCKING
    # ========================================================================

    path(
        "users/<int:user_id>/block",
        views.user_block,
        name="user_block"
    ),  # POST block, DELETE unblock

    path(
        "users/<int:user_id>/interaction",
        views.check_interaction,
        name="check_interaction"
    ),  # Check if interaction allowed (not blocked)

    path(
        "blocked-users",
        views.blocked_users,
        name="blocked_users"
    ),  # Accounts blocked by caller


    # ========================================================================
    # SECTION 4: BADGE & HEALTH
    # ========================================================================

    path(
        "message-badge",
        views.api_message_badge,
        name="api_message_badge"
    ),  # Unread message count for inbox badge

    path(
        "health",
        views.health,
        name="health"
    ),  # Liveness probe (no authentication)
]
