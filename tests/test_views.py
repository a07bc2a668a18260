import json

import pytest
from django.db import DatabaseError
from django.test import Client

from messaging import blocks, conversations, ledger, visibility
from messaging.models import Conversation, Message


pytestmark = pytest.mark.django_db


def post_json(client, url, payload):
    return client.post(url, data=json.dumps(payload), content_type="application/json")


@pytest.fixture
def alice_client(alice, client_for):
    return client_for(alice)


@pytest.fixture
def bob_client(bob, client_for):
    return client_for(bob)


@pytest.fixture
def conversation(alice, bob):
    conversation, _ = conversations.get_or_create(alice.pk, bob.pk)
    return conversation


# ==================== AUTHENTICATION ====================

def test_anonymous_requests_are_rejected():
    response = Client().get("/api/conversations")
    assert response.status_code == 401
    assert response.json()["code"] == "unauthenticated"


def test_health_needs_no_session():
    response = Client().get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "OK"


# ==================== CONVERSATIONS ====================

def test_create_conversation_then_reuse_it(alice_client, bob_client, alice, bob):
    created = post_json(alice_client, "/api/conversations", {"participantId": bob.pk})
    assert created.status_code == 201
    conversation_id = created.json()["conversationId"]

    reused = post_json(bob_client, "/api/conversations", {"participantId": alice.pk})
    assert reused.status_code == 200
    assert reused.json()["conversationId"] == conversation_id


@pytest.mark.parametrize("payload", [
    {},
    {"participantId": "abc"},
    {"participantId": True},
    {"participantId": -4},
    {"participantId": "-4"},
    {"participantId": 2.0},
])
def test_create_conversation_validates_participant(alice_client, payload):
    response = post_json(alice_client, "/api/conversations", payload)
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"


def test_create_conversation_rejects_fractional_participant(alice_client, bob):
    response = post_json(alice_client, "/api/conversations", {"participantId": bob.pk + 0.9})
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert Conversation.objects.count() == 0


def test_create_conversation_accepts_numeric_string(alice_client, bob):
    response = post_json(alice_client, "/api/conversations", {"participantId": str(bob.pk)})
    assert response.status_code == 201


def test_create_conversation_rejects_bad_json(alice_client):
    response = alice_client.post("/api/conversations", data="{nope", content_type="application/json")
    assert response.status_code == 400


def test_create_conversation_with_self(alice_client, alice):
    response = post_json(alice_client, "/api/conversations", {"participantId": alice.pk})
    assert response.status_code == 409
    assert response.json()["code"] == "self_conversation"


def test_create_conversation_with_unknown_user(alice_client):
    response = post_json(alice_client, "/api/conversations", {"participantId": 55555})
    assert response.status_code == 404


def test_create_conversation_when_blocked(alice_client, alice, bob):
    blocks.block(bob.pk, alice.pk)
    response = post_json(alice_client, "/api/conversations", {"participantId": bob.pk})
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_list_conversations(alice_client, conversation, alice, bob):
    ledger.append(conversation.pk, bob.pk, "first")
    ledger.append(conversation.pk, bob.pk, "second")

    response = alice_client.get("/api/conversations")

    assert response.status_code == 200
    [entry] = response.json()
    assert entry["id"] == conversation.pk
    assert {p["id"] for p in entry["participants"]} == {alice.pk, bob.pk}
    assert entry["lastMessage"]["content"] == "second"
    assert entry["lastMessage"]["senderId"] == bob.pk
    assert entry["unreadCount"] == 2


def test_list_conversations_empty_last_message(alice_client, conversation):
    [entry] = alice_client.get("/api/conversations").json()
    assert entry["lastMessage"] is None
    assert entry["unreadCount"] == 0


def test_conversation_detail(alice_client, conversation, alice, bob):
    response = alice_client.get(f"/api/conversations/{conversation.pk}")
    assert response.status_code == 200
    body = response.json()
    assert body["id"] == conversation.pk
    assert [p["username"] for p in body["participants"]] == [
        u.username for u in sorted([alice, bob], key=lambda u: u.pk)
    ]


def test_conversation_detail_hidden_from_outsiders(conversation, carol, client_for):
    response = client_for(carol).get(f"/api/conversations/{conversation.pk}")
    assert response.status_code == 404


def test_delete_conversation_hides_for_caller_only(alice_client, bob_client, conversation):
    response = alice_client.delete(f"/api/conversations/{conversation.pk}")
    assert response.status_code == 200

    assert alice_client.get("/api/conversations").json() == []
    assert [c["id"] for c in bob_client.get("/api/conversations").json()] == [conversation.pk]


def test_delete_conversation_by_outsider(conversation, carol, client_for):
    response = client_for(carol).delete(f"/api/conversations/{conversation.pk}")
    assert response.status_code == 403
    assert response.json()["code"] == "unauthorized"


# ==================== MESSAGES ====================

def test_send_message(alice_client, conversation, alice):
    response = post_json(alice_client, f"/api/conversations/{conversation.pk}/messages", {"content": "Hello"})

    assert response.status_code == 201
    body = response.json()
    assert body["content"] == "Hello"
    assert body["kind"] == "text"
    assert body["senderId"] == alice.pk
    assert body["replyTo"] is None


def test_send_message_restores_hidden_conversation(alice_client, bob_client, conversation, bob):
    visibility.hide(conversation.pk, bob.pk)
    assert bob_client.get("/api/conversations").json() == []

    post_json(alice_client, f"/api/conversations/{conversation.pk}/messages", {"content": "Are you there?"})

    [entry] = bob_client.get("/api/conversations").json()
    assert entry["id"] == conversation.pk
    assert entry["unreadCount"] == 1


def test_send_empty_message(alice_client, conversation):
    response = post_json(alice_client, f"/api/conversations/{conversation.pk}/messages", {"content": "  "})
    assert response.status_code == 400


def test_send_message_with_invalid_reply(alice_client, conversation):
    response = post_json(
        alice_client,
        f"/api/conversations/{conversation.pk}/messages",
        {"content": "re", "replyToId": 999999},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_reply"


def test_send_message_with_fractional_reply_id(alice_client, conversation, alice):
    first = ledger.append(conversation.pk, alice.pk, "a")
    response = post_json(
        alice_client,
        f"/api/conversations/{conversation.pk}/messages",
        {"content": "b", "replyToId": first.pk + 0.5},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "validation_error"
    assert Message.objects.count() == 1


def test_send_message_when_blocked(alice_client, conversation, alice, bob):
    blocks.block(bob.pk, alice.pk)
    response = post_json(alice_client, f"/api/conversations/{conversation.pk}/messages", {"content": "hi"})
    assert response.status_code == 403
    assert response.json()["code"] == "forbidden"


def test_send_message_as_outsider(conversation, carol, client_for):
    response = post_json(client_for(carol), f"/api/conversations/{conversation.pk}/messages", {"content": "hi"})
    assert response.status_code == 403
    assert response.json()["code"] == "unauthorized"


def test_list_messages_marks_read_and_previews_replies(alice_client, bob_client, conversation, alice, bob):
    question = ledger.append(conversation.pk, alice.pk, "Lunch?")
    ledger.append(conversation.pk, bob.pk, "Sure", reply_to_id=question.pk)

    response = alice_client.get(f"/api/conversations/{conversation.pk}/messages")

    assert response.status_code == 200
    assert response["Cache-Control"] == "no-cache, no-store, must-revalidate"
    first, second = response.json()
    assert first["replyTo"] is None
    assert second["replyTo"] == {
        "id": question.pk,
        "content": "Lunch?",
        "senderId": alice.pk,
        "senderName": alice.username,
    }
    assert Message.objects.get(sender=bob).is_read is True
    assert Message.objects.get(sender=alice).is_read is False


def test_list_messages_survives_mark_read_failure(alice_client, conversation, bob, monkeypatch):
    ledger.append(conversation.pk, bob.pk, "hi")

    def broken_update(self, **kwargs):
        raise DatabaseError("read replica lag")

    monkeypatch.setattr("django.db.models.query.QuerySet.update", broken_update)

    response = alice_client.get(f"/api/conversations/{conversation.pk}/messages")
    assert response.status_code == 200
    assert len(response.json()) == 1


def test_list_messages_of_unknown_conversation(alice_client):
    assert alice_client.get("/api/conversations/424242/messages").status_code == 404


def test_delete_message_for_me(alice_client, bob_client, conversation, alice):
    message = ledger.append(conversation.pk, alice.pk, "typo")

    response = bob_client.delete(f"/api/messages/{message.pk}/for-me")
    assert response.status_code == 200

    assert bob_client.get(f"/api/conversations/{conversation.pk}/messages").json() == []
    assert len(alice_client.get(f"/api/conversations/{conversation.pk}/messages").json()) == 1


def test_delete_message_for_everyone(alice_client, bob_client, conversation, alice):
    message = ledger.append(conversation.pk, alice.pk, "regret")

    response = alice_client.delete(f"/api/messages/{message.pk}")
    assert response.status_code == 200

    [listed] = bob_client.get(f"/api/conversations/{conversation.pk}/messages").json()
    assert listed["tombstoned"] is True
    assert listed["content"] == "This message was deleted"


def test_recipient_cannot_delete_for_everyone(bob_client, conversation, alice):
    message = ledger.append(conversation.pk, alice.pk, "mine")
    response = bob_client.delete(f"/api/messages/{message.pk}")
    assert response.status_code == 403
    assert response.json()["code"] == "unauthorized"


def test_delete_unknown_message(alice_client):
    assert alice_client.delete("/api/messages/777777").status_code == 404


def test_wrong_method_is_rejected(alice_client, conversation):
    assert alice_client.put(f"/api/conversations/{conversation.pk}").status_code == 405


# ==================== BLOCKING ====================

def test_block_unblock_roundtrip(alice_client, bob):
    blocked = alice_client.post(f"/api/users/{bob.pk}/block")
    assert blocked.status_code == 201
    assert blocked.json()["blockedId"] == bob.pk

    again = alice_client.post(f"/api/users/{bob.pk}/block")
    assert again.status_code == 409
    assert again.json()["code"] == "already_blocked"

    [entry] = alice_client.get("/api/blocked-users").json()
    assert entry["id"] == bob.pk
    assert entry["username"] == bob.username
    assert "blockedAt" in entry

    assert alice_client.delete(f"/api/users/{bob.pk}/block").status_code == 200
    assert alice_client.get("/api/blocked-users").json() == []


def test_block_self(alice_client, alice):
    response = alice_client.post(f"/api/users/{alice.pk}/block")
    assert response.status_code == 409
    assert response.json()["code"] == "self_block"


def test_blocked_party_cannot_unblock(alice_client, bob_client, alice, bob):
    alice_client.post(f"/api/users/{bob.pk}/block")
    response = bob_client.delete(f"/api/users/{alice.pk}/block")
    assert response.status_code == 404


def test_check_interaction(alice_client, bob_client, alice, bob):
    assert alice_client.get(f"/api/users/{bob.pk}/interaction").json()["canInteract"] is True

    alice_client.post(f"/api/users/{bob.pk}/block")

    body = bob_client.get(f"/api/users/{alice.pk}/interaction").json()
    assert body["canInteract"] is False
    assert body["message"]


# ==================== BADGE & ERRORS ====================

def test_message_badge(alice_client, conversation, bob):
    ledger.append(conversation.pk, bob.pk, "one")
    ledger.append(conversation.pk, bob.pk, "two")
    assert alice_client.get("/api/message-badge").json() == {"unreadCount": 2}


def test_store_failure_is_reported_as_internal(alice_client, monkeypatch):
    def unavailable(viewer_id):
        raise DatabaseError("could not connect to server")

    monkeypatch.setattr("messaging.conversations.list_for_viewer", unavailable)

    response = alice_client.get("/api/conversations")
    assert response.status_code == 500
    assert response.json() == {"error": "Internal error", "code": "internal_error"}


def test_timestamps_follow_user_timezone(make_user, client_for, bob):
    tokyo = make_user("kenji", timezone="Asia/Tokyo")
    conversation, _ = conversations.get_or_create(tokyo.pk, bob.pk)
    ledger.append(conversation.pk, bob.pk, "konbanwa")

    [listed] = client_for(tokyo).get(f"/api/conversations/{conversation.pk}/messages").json()
    assert listed["createdAt"].endswith("+09:00")
