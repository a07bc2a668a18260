import json
import logging
from functools import wraps

from django.db import DatabaseError
from django.http import JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods

from . import blocks, conversations, ledger, presenters, unread
from .exceptions import Internal, MessagingError, ValidationError
from .models import MESSAGE_KIND_TEXT


API_VERSION = "1.0.0"

# Logger
logger = logging.getLogger(__name__)


# ==================== HELPERS ====================

def api_view(view):
    """
    JSON API wrapper: session authentication, CSRF exemption, and
    translation of messaging errors into JSON error responses.
    """
    @csrf_exempt
    @wraps(view)
    def wrapper(request, *args, **kwargs):
        if not request.user.is_authenticated:
            return JsonResponse(
                {"error": "Authentication required", "code": "unauthenticated"}, status=401
            )
        try:
            return view(request, *args, **kwargs)
        except MessagingError as exc:
            return JsonResponse(exc.as_dict(), status=exc.status_code)
        except DatabaseError:
            logger.exception(
                "Store failure in %s for user %s (%s %s)",
                view.__name__, request.user.pk, request.method, request.path,
            )
            exc = Internal()
            return JsonResponse(exc.as_dict(), status=exc.status_code)
    return wrapper


def read_json(request):
    if not request.body:
        return {}
    try:
        data = json.loads(request.body)
    except (ValueError, UnicodeDecodeError):
        raise ValidationError("Request body must be valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def parse_id(value, field):
    # Floats and bools are rejected rather than truncated
    if isinstance(value, int) and not isinstance(value, bool):
        parsed = value
    elif isinstance(value, str) and value.isascii() and value.isdigit():
        parsed = int(value)
    else:
        raise ValidationError(f"{field} must be an integer")
    if parsed <= 0:
        raise ValidationError(f"{field} must be positive")
    return parsed


# ==================== CONVERSATIONS ====================

@api_view
@require_http_methods(["GET", "POST"])
def conversation_list(request):
    if request.method == "POST":
        data = read_json(request)
        if data.get('participantId') is None:
            raise ValidationError("participantId is required")
        participant_id = parse_id(data['participantId'], 'participantId')

        conversation, created = conversations.get_or_create(request.user.pk, participant_id)
        return JsonResponse(
            {"conversationId": conversation.pk, "id": conversation.pk, "created": created},
            status=201 if created else 200,
        )

    results = [
        presenters.conversation_summary(conversation, latest, unread_count)
        for conversation, latest, unread_count in ledger.inbox(request.user.pk)
    ]
    return JsonResponse(results, safe=False)


@api_view
@require_http_methods(["GET", "DELETE"])
def conversation_detail(request, conversation_id):
    if request.method == "DELETE":
        conversations.hide_for_viewer(conversation_id, request.user.pk)
        return JsonResponse({"success": True})

    conversation = conversations.get_for_participant(conversation_id, request.user.pk)
    return JsonResponse(presenters.conversation_detail(conversation))


@api_view
@require_http_methods(["GET", "POST"])
def conversation_messages(request, conversation_id):
    if request.method == "POST":
        data = read_json(request)
        reply_to_id = data.get('replyToId')
        if reply_to_id is not None:
            reply_to_id = parse_id(reply_to_id, 'replyToId')
        content = data.get('content')
        if content is not None and not isinstance(content, str):
            raise ValidationError("content must be a string")
        kind = data.get('kind') or MESSAGE_KIND_TEXT
        if not isinstance(kind, str):
            raise ValidationError("kind must be a string")

        message = ledger.append(
            conversation_id,
            request.user.pk,
            content,
            kind=kind,
            reply_to_id=reply_to_id,
        )
        return JsonResponse(presenters.message(message), status=201)

    conversation = conversations.get_for_participant(conversation_id, request.user.pk)
    unread.mark_read(conversation.pk, request.user.pk)

    messages = ledger.list_visible(conversation.pk, request.user.pk)
    response = JsonResponse([presenters.message(m) for m in messages], safe=False)
    response['Cache-Control'] = 'no-cache, no-store, must-revalidate'
    return response


# ==================== MESSAGES ====================

@api_view
@require_http_methods(["DELETE"])
def delete_message_for_me(request, message_id):
    ledger.hide_for_viewer(message_id, request.user.pk)
    return JsonResponse({"success": True})


@api_view
@require_http_methods(["DELETE"])
def delete_message(request, message_id):
    message = ledger.tombstone_for_everyone(message_id, request.user.pk)
    return JsonResponse({"success": True, "message": presenters.message(message)})


# ==================== BLOCKING ====================

@api_view
@require_http_methods(["POST", "DELETE"])
def user_block(request, user_id):
    if request.method == "DELETE":
        blocks.unblock(request.user.pk, user_id)
        return JsonResponse({"success": True})

    relation = blocks.block(request.user.pk, user_id)
    return JsonResponse({
        "blockerId": relation.blocker_id,
        "blockedId": relation.blocked_id,
        "createdAt": presenters.isoformat(relation.timestamp),
    }, status=201)


@api_view
@require_GET
def blocked_users(request):
    relations = blocks.list_blocked_by(request.user.pk)
    return JsonResponse([presenters.blocked_account(r) for r in relations], safe=False)


@api_view
@require_GET
def check_interaction(request, user_id):
    can_interact = not blocks.is_blocked_either_direction(request.user.pk, user_id)
    return JsonResponse({
        'canInteract': can_interact,
        'message': '' if can_interact else 'Cannot interact with this user due to block settings.',
    })


# ==================== BADGE & HEALTH ====================

@api_view
@require_GET
def api_message_badge(request):
    return JsonResponse({"unreadCount": unread.total_unread(request.user.pk)})


@require_GET
def health(request):
    return JsonResponse({
        "status": "OK",
        "timestamp": timezone.now().isoformat(),
        "version": API_VERSION,
    })
