from datetime import timedelta

import pytest
from django.db.models.query import QuerySet
from django.utils import timezone

from messaging import blocks, conversations, ledger, visibility
from messaging.exceptions import Forbidden, NotFound, SelfConversation, Unauthorized
from messaging.models import Conversation


pytestmark = pytest.mark.django_db


def test_pair_order_does_not_matter(alice, bob):
    first, created = conversations.get_or_create(alice.pk, bob.pk)
    second, created_again = conversations.get_or_create(bob.pk, alice.pk)

    assert created is True
    assert created_again is False
    assert first.pk == second.pk
    assert Conversation.objects.count() == 1


def test_pair_is_stored_in_canonical_order(alice, bob):
    conversation, _ = conversations.get_or_create(bob.pk, alice.pk)
    low, high = sorted([alice.pk, bob.pk])
    assert (conversation.participant_low_id, conversation.participant_high_id) == (low, high)


def test_new_conversation_is_visible_to_both(alice, bob):
    conversation, _ = conversations.get_or_create(alice.pk, bob.pk)
    assert not visibility.is_hidden(conversation.pk, alice.pk)
    assert not visibility.is_hidden(conversation.pk, bob.pk)
    assert conversation.last_activity_at >= conversation.created_at


def test_self_conversation_is_rejected(alice):
    with pytest.raises(SelfConversation):
        conversations.get_or_create(alice.pk, alice.pk)


def test_unknown_participant(alice):
    with pytest.raises(NotFound):
        conversations.get_or_create(alice.pk, 424242)


@pytest.mark.parametrize("blocker", ["alice", "bob"])
def test_block_in_either_direction_forbids_creation(alice, bob, blocker):
    if blocker == "alice":
        blocks.block(alice.pk, bob.pk)
    else:
        blocks.block(bob.pk, alice.pk)

    with pytest.raises(Forbidden):
        conversations.get_or_create(alice.pk, bob.pk)
    with pytest.raises(Forbidden):
        conversations.get_or_create(bob.pk, alice.pk)
    assert Conversation.objects.count() == 0


def test_losing_concurrent_insert_resolves_to_winner(alice, bob, monkeypatch):
    winner, _ = conversations.get_or_create(alice.pk, bob.pk)

    # A concurrent caller that looked before the winner committed: its
    # first lookup misses, so its insert hits the unique constraint.
    original_get = QuerySet.get
    misses = {"remaining": 1}

    def stale_get(self, *args, **kwargs):
        if self.model is Conversation and misses["remaining"]:
            misses["remaining"] -= 1
            raise Conversation.DoesNotExist
        return original_get(self, *args, **kwargs)

    monkeypatch.setattr(QuerySet, "get", stale_get)

    loser, created = conversations.get_or_create(bob.pk, alice.pk)

    assert misses["remaining"] == 0
    assert created is False
    assert loser.pk == winner.pk
    assert Conversation.objects.count() == 1


def test_repeated_get_or_create_yields_one_row(alice, bob):
    ids = {conversations.get_or_create(*pair)[0].pk for pair in [(alice.pk, bob.pk), (bob.pk, alice.pk)] * 10}
    assert len(ids) == 1
    assert Conversation.objects.count() == 1


def test_get_by_id(alice, bob):
    conversation, _ = conversations.get_or_create(alice.pk, bob.pk)
    assert conversations.get_by_id(conversation.pk) == conversation
    with pytest.raises(NotFound):
        conversations.get_by_id(conversation.pk + 100)


def test_get_for_participant_hides_from_outsiders(alice, bob, carol):
    conversation, _ = conversations.get_or_create(alice.pk, bob.pk)
    assert conversations.get_for_participant(conversation.pk, bob.pk) == conversation
    with pytest.raises(NotFound):
        conversations.get_for_participant(conversation.pk, carol.pk)


def test_list_for_viewer_orders_by_recent_activity(alice, bob, carol):
    with_bob, _ = conversations.get_or_create(alice.pk, bob.pk)
    with_carol, _ = conversations.get_or_create(alice.pk, carol.pk)
    ledger.append(with_bob.pk, bob.pk, "latest")
    Conversation.objects.filter(pk=with_carol.pk).update(
        last_activity_at=timezone.now() - timedelta(days=1)
    )

    assert list(conversations.list_for_viewer(alice.pk)) == [with_bob, with_carol]
    assert list(conversations.list_for_viewer(carol.pk)) == [with_carol]


def test_list_for_viewer_ties_broken_by_id(alice, bob, carol):
    first, _ = conversations.get_or_create(alice.pk, bob.pk)
    second, _ = conversations.get_or_create(alice.pk, carol.pk)
    same = timezone.now()
    Conversation.objects.update(last_activity_at=same)

    assert list(conversations.list_for_viewer(alice.pk)) == [second, first]


def test_hide_only_affects_the_viewer(alice, bob):
    conversation, _ = conversations.get_or_create(alice.pk, bob.pk)

    conversations.hide_for_viewer(conversation.pk, bob.pk)

    assert list(conversations.list_for_viewer(bob.pk)) == []
    assert list(conversations.list_for_viewer(alice.pk)) == [conversation]


def test_outsider_cannot_hide(alice, bob, carol):
    conversation, _ = conversations.get_or_create(alice.pk, bob.pk)
    with pytest.raises(Unauthorized):
        conversations.hide_for_viewer(conversation.pk, carol.pk)


def test_account_deletion_cascades(alice, bob):
    conversation, _ = conversations.get_or_create(alice.pk, bob.pk)
    ledger.append(conversation.pk, alice.pk, "hi")
    blocks.block(bob.pk, alice.pk)

    alice.delete()

    assert not Conversation.objects.filter(pk=conversation.pk).exists()
    assert not bob.blocks.exists()
