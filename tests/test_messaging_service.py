from datetime import timedelta

import pytest

from tests.conftest import add_listing
from tijara_server.exception import AuthorizationError, NotFoundError, ValidationError


@pytest.fixture
def messaging(services):
    return services.messaging


def test_first_message_creates_conversation(messaging, marketplace):
    result = messaging.send_message('u1', 'u2', 'l1', 'Is this available?')

    assert result['created'] is True
    conversation = result['conversation']
    assert sorted(conversation['participants']) == ['u1', 'u2']
    assert conversation['listingId'] == 'l1'
    assert conversation['lastMessage'] == 'Is this available?'

    message = result['message']
    assert message['content'] == 'Is this available?'
    assert message['read'] is False
    assert message['senderId'] == 'u1'
    assert message['recipientId'] == 'u2'
    assert message['sender'] == {'id': 'u1', 'username': 'buyer', 'profilePicture': None}


def test_second_message_reuses_conversation(messaging, marketplace, services):
    first = messaging.send_message('u1', 'u2', 'l1', 'Is this available?')
    second = messaging.send_message('u1', 'u2', 'l1', 'Any discount?')

    assert second['created'] is False
    assert second['conversation']['id'] == first['conversation']['id']
    assert second['conversation']['lastMessage'] == 'Any discount?'
    assert services.conversation_repo.count({}) == 1


def test_reply_uses_same_conversation_in_either_direction(messaging, marketplace, services):
    first = messaging.send_message('u1', 'u2', 'l1', 'Hi')
    reply = messaging.send_message('u2', 'u1', 'l1', 'Hello')

    assert reply['conversation']['id'] == first['conversation']['id']
    assert services.conversation_repo.count({}) == 1


def test_different_listing_gets_its_own_conversation(messaging, marketplace, services):
    add_listing(services, 'l2', 'u2', title='Sofa')

    a = messaging.send_message('u1', 'u2', 'l1', 'Hi')
    b = messaging.send_message('u1', 'u2', 'l2', 'Hi')

    assert a['conversation']['id'] != b['conversation']['id']


def test_last_message_at_never_moves_backwards(messaging, marketplace, services):
    stamps = []
    for i in range(5):
        result = messaging.send_message('u1', 'u2', 'l1', f'message {i}')
        stamps.append(result['conversation']['lastMessageAt'])

    assert stamps == sorted(stamps)
    conversation = services.conversation_repo.find_by_pair('u1', 'u2', 'l1')
    assert conversation.last_message == 'message 4'


def test_stale_summary_update_is_ignored(messaging, marketplace, services):
    result = messaging.send_message('u1', 'u2', 'l1', 'newest')
    conversation = services.conversation_repo.find_by_id(result['conversation']['id'])
    older = conversation.last_message_at - timedelta(seconds=5)

    modified = services.conversation_repo.update_summary(conversation.conversation_id, 'older', older)

    assert modified == 0
    assert services.conversation_repo.find_by_id(conversation.conversation_id).last_message == 'newest'


def test_duplicate_insert_falls_back_to_existing_conversation(marketplace, services, monkeypatch):
    repo = services.conversation_repo
    original, created = repo.get_or_create('u1', 'u2', 'l1')
    assert created is True

    # Simulate losing the race: the first lookup misses, the insert then hits the unique index
    real_find = repo.find_by_pair
    lookups = []

    def find_missing_once(*args, **kwargs):
        lookups.append(args)
        if len(lookups) == 1:
            return None
        return real_find(*args, **kwargs)

    monkeypatch.setattr(repo, 'find_by_pair', find_missing_once)
    again, created = repo.get_or_create('u2', 'u1', 'l1')

    assert created is False
    assert again.conversation_id == original.conversation_id
    assert services.conversation_repo.count({}) == 1


@pytest.mark.parametrize('content', ['', '   ', None, 42])
def test_send_rejects_empty_content(messaging, marketplace, services, content):
    with pytest.raises(ValidationError):
        messaging.send_message('u1', 'u2', 'l1', content)
    assert services.message_repo.count({}) == 0
    assert services.conversation_repo.count({}) == 0


def test_send_rejects_missing_recipient_or_listing(messaging, marketplace):
    with pytest.raises(ValidationError):
        messaging.send_message('u1', None, 'l1', 'hi')
    with pytest.raises(ValidationError):
        messaging.send_message('u1', 'u2', '', 'hi')


def test_send_to_self_rejected(messaging, marketplace):
    with pytest.raises(ValidationError):
        messaging.send_message('u1', 'u1', 'l1', 'hi')


def test_send_to_unknown_recipient_or_listing(messaging, marketplace, services):
    with pytest.raises(NotFoundError):
        messaging.send_message('u1', 'ghost', 'l1', 'hi')
    with pytest.raises(NotFoundError):
        messaging.send_message('u1', 'u2', 'nope', 'hi')
    assert services.conversation_repo.count({}) == 0


def test_recipient_fetch_marks_messages_read(messaging, marketplace):
    first = messaging.send_message('u1', 'u2', 'l1', 'Is this available?')
    messaging.send_message('u1', 'u2', 'l1', 'Any discount?')
    conversation_id = first['conversation']['id']

    page = messaging.get_messages(conversation_id, 'u2')

    assert [m['content'] for m in page['messages']] == ['Is this available?', 'Any discount?']
    assert all(m['read'] for m in page['messages'])
    assert page['markedRead'] == 2
    assert page['total'] == 2

    again = messaging.get_messages(conversation_id, 'u2')
    assert again['markedRead'] == 0
    assert [m['read'] for m in again['messages']] == [True, True]


def test_sender_fetch_does_not_mark_own_messages(messaging, marketplace):
    result = messaging.send_message('u1', 'u2', 'l1', 'Hi')

    page = messaging.get_messages(result['conversation']['id'], 'u1')

    assert page['markedRead'] == 0
    assert page['messages'][0]['read'] is False


def test_messages_paginate_newest_window_oldest_first(messaging, marketplace):
    conversation_id = None
    for i in range(5):
        conversation_id = messaging.send_message('u1', 'u2', 'l1', f'm{i}')['conversation']['id']

    first_page = messaging.get_messages(conversation_id, 'u2', page=1, page_size=2)
    second_page = messaging.get_messages(conversation_id, 'u2', page=2, page_size=2)
    last_page = messaging.get_messages(conversation_id, 'u2', page=3, page_size=2)

    assert [m['content'] for m in first_page['messages']] == ['m3', 'm4']
    assert [m['content'] for m in second_page['messages']] == ['m1', 'm2']
    assert [m['content'] for m in last_page['messages']] == ['m0']
    assert first_page['total'] == 5


def test_outsider_sees_no_messages(messaging, marketplace):
    result = messaging.send_message('u1', 'u2', 'l1', 'Hi')

    page = messaging.get_messages(result['conversation']['id'], 'u3')

    assert page['messages'] == []
    assert page['total'] == 0


def test_get_messages_validation(messaging, marketplace):
    result = messaging.send_message('u1', 'u2', 'l1', 'Hi')
    conversation_id = result['conversation']['id']

    with pytest.raises(ValidationError):
        messaging.get_messages(conversation_id, 'u2', page=0)
    with pytest.raises(ValidationError):
        messaging.get_messages(conversation_id, 'u2', page_size=0)
    with pytest.raises(ValidationError):
        messaging.get_messages(conversation_id, 'u2', page_size=101)
    with pytest.raises(NotFoundError):
        messaging.get_messages('missing', 'u2')


def test_only_sender_can_delete(messaging, marketplace, services):
    result = messaging.send_message('u1', 'u2', 'l1', 'Hi')
    message_id = result['message']['id']

    with pytest.raises(AuthorizationError):
        messaging.delete_message(message_id, 'u2')
    assert services.message_repo.find_by_id(message_id) is not None

    messaging.delete_message(message_id, 'u1')
    assert services.message_repo.find_by_id(message_id) is None

    with pytest.raises(NotFoundError):
        messaging.delete_message(message_id, 'u1')


def test_conversations_ordered_by_latest_activity(messaging, marketplace, services):
    add_listing(services, 'l2', 'u3', title='Lamp')

    older = messaging.send_message('u1', 'u2', 'l1', 'about the bike')
    newer = messaging.send_message('u1', 'u3', 'l2', 'about the lamp')

    conversations = messaging.get_conversations('u1')

    assert [c['id'] for c in conversations] == [newer['conversation']['id'], older['conversation']['id']]
    assert conversations[0]['latestMessage']['content'] == 'about the lamp'
    assert messaging.get_conversations('u2')[0]['latestMessage']['content'] == 'about the bike'
    assert messaging.get_conversations('nobody') == []


@pytest.mark.parametrize('recipient_id, listing_id', [
    ({'$ne': 'u1'}, 'l1'),
    ('u2', {'$gt': ''}),
    (5, 'l1'),
    ('u2', 5),
])
def test_send_rejects_non_string_ids(messaging, marketplace, services, recipient_id, listing_id):
    with pytest.raises(ValidationError):
        messaging.send_message('u1', recipient_id, listing_id, 'hi')
    assert services.conversation_repo.count({}) == 0


def test_lookups_ignore_operator_ids(marketplace, services):
    assert services.listing_repo.find_by_id({'$gt': ''}) is None
    assert services.users.find_by_id({'$ne': 'u1'}) is None
    assert services.conversation_repo.find_by_id({'$exists': True}) is None
