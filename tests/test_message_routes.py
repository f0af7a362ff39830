import pytest

from tests.conftest import auth_headers, make_settings, add_user, add_listing
from server import create_app


def send(client, sender, content, recipient='u2', listing='l1', **extra):
    body = {'recipientId': recipient, 'listingId': listing, 'content': content}
    body.update(extra)
    return client.post('/api/messages', json=body, headers=auth_headers(sender))


def test_send_and_reuse_conversation(client, marketplace):
    first = send(client, 'u1', 'Is this available?')
    assert first.status_code == 201
    data = first.get_json()
    assert data['success'] is True
    assert sorted(data['conversation']['participants']) == ['u1', 'u2']
    assert data['conversation']['listingId'] == 'l1'
    assert data['message']['content'] == 'Is this available?'
    assert data['message']['read'] is False

    second = send(client, 'u1', 'Any discount?').get_json()
    assert second['conversation']['id'] == data['conversation']['id']
    assert second['conversation']['lastMessage'] == 'Any discount?'


def test_receiver_id_alias_accepted(client, marketplace):
    resp = client.post('/api/messages', json={
        'receiverId': 'u2', 'listingId': 'l1', 'content': 'hi'
    }, headers=auth_headers('u1'))
    assert resp.status_code == 201


def test_recipient_reads_and_marks_read(client, marketplace):
    conversation_id = send(client, 'u1', 'Is this available?').get_json()['conversation']['id']
    send(client, 'u1', 'Any discount?')

    resp = client.get(f'/api/messages/{conversation_id}', headers=auth_headers('u2'))

    assert resp.status_code == 200
    body = resp.get_json()
    assert [m['content'] for m in body['messages']] == ['Is this available?', 'Any discount?']
    assert all(m['read'] is True for m in body['messages'])
    assert body['messages'][0]['sender']['username'] == 'buyer'
    assert body['page'] == 1 and body['limit'] == 20 and body['total'] == 2

    again = client.get(f'/api/messages/{conversation_id}', headers=auth_headers('u2'))
    assert again.status_code == 200
    assert again.get_json()['markedRead'] == 0


def test_get_messages_bad_paging(client, marketplace):
    conversation_id = send(client, 'u1', 'hi').get_json()['conversation']['id']
    headers = auth_headers('u2')

    assert client.get(f'/api/messages/{conversation_id}?page=0', headers=headers).status_code == 400
    assert client.get(f'/api/messages/{conversation_id}?limit=500', headers=headers).status_code == 400
    assert client.get(f'/api/messages/{conversation_id}?page=abc', headers=headers).status_code == 400
    assert client.get('/api/messages/unknown', headers=headers).status_code == 404


def test_conversations_listing(client, marketplace):
    send(client, 'u1', 'first')
    send(client, 'u2', 'reply', recipient='u1')

    resp = client.get('/api/messages/conversations', headers=auth_headers('u1'))

    conversations = resp.get_json()['conversations']
    assert len(conversations) == 1
    assert conversations[0]['lastMessage'] == 'reply'
    assert conversations[0]['latestMessage']['senderId'] == 'u2'


def test_only_sender_deletes(client, marketplace):
    message_id = send(client, 'u1', 'hi').get_json()['message']['id']

    forbidden = client.delete(f'/api/messages/{message_id}', headers=auth_headers('u2'))
    assert forbidden.status_code == 403
    assert forbidden.get_json() == {'success': False, 'error': 'Not authorized to delete this message'}

    assert client.delete(f'/api/messages/{message_id}', headers=auth_headers('u1')).status_code == 200
    assert client.delete(f'/api/messages/{message_id}', headers=auth_headers('u1')).status_code == 404


def test_send_validation_and_lookup_errors(client, marketplace):
    assert send(client, 'u1', '').status_code == 400
    assert send(client, 'u1', 'hi', recipient='u1').status_code == 400
    assert send(client, 'u1', 'hi', recipient='ghost').status_code == 404
    assert send(client, 'u1', 'hi', listing='ghost').status_code == 404


def test_requires_authentication(client, marketplace):
    assert client.get('/api/messages/conversations').status_code == 401
    bad = client.get('/api/messages/conversations', headers={'Authorization': 'Bearer nope'})
    assert bad.status_code == 401
    assert bad.get_json()['success'] is False
    # Valid token, but the user no longer exists
    assert client.get('/api/messages/conversations', headers=auth_headers('deleted-user')).status_code == 401


def test_send_creates_new_message_notification(client, marketplace, services):
    conversation_id = send(client, 'u1', 'hi').get_json()['conversation']['id']

    items = services.notifications.get_notifications('u2')['notifications']

    assert len(items) == 1
    assert items[0]['type'] == 'NEW_MESSAGE'
    assert items[0]['relatedId'] == conversation_id
    assert items[0]['content'] == 'New message from buyer'


def test_recipient_notification_can_be_disabled(database):
    settings = make_settings(messaging={'notify_recipient': False})
    app = create_app(settings, database=database)
    services = app.extensions['tijara']
    add_user(services, 'u1')
    add_user(services, 'u2')
    add_listing(services, 'l1', 'u2')

    resp = app.test_client().post('/api/messages', json={
        'recipientId': 'u2', 'listingId': 'l1', 'content': 'hi'
    }, headers=auth_headers('u1'))

    assert resp.status_code == 201
    assert services.notification_repo.count({}) == 0


def test_notification_failure_does_not_fail_send(client, marketplace, services, monkeypatch):
    def broken(*args, **kwargs):
        raise RuntimeError('notifications down')

    monkeypatch.setattr(services.notifications, 'create_notification', broken)

    resp = send(client, 'u1', 'still delivered')

    assert resp.status_code == 201
    assert services.message_repo.count({}) == 1


def test_health(client):
    resp = client.get('/api/health')
    body = resp.get_json()
    assert resp.status_code == 200
    assert body['status'] == 'ok'
    assert body['version'] == '1.0.0'
    assert body['timestamp'].endswith('Z')


@pytest.mark.parametrize('field, value', [
    ('recipientId', {'$ne': 'u1'}),
    ('recipientId', 42),
    ('recipientId', ['u2']),
    ('listingId', {'$gt': ''}),
    ('listingId', 7),
])
def test_non_string_ids_are_rejected_without_writes(client, services, marketplace, field, value):
    body = {'recipientId': 'u2', 'listingId': 'l1', 'content': 'hi', field: value}

    resp = client.post('/api/messages', json=body, headers=auth_headers('u1'))

    assert resp.status_code == 400
    assert resp.get_json()['success'] is False
    assert services.conversation_repo.count({}) == 0
    assert services.message_repo.count({}) == 0


def test_send_rejects_non_object_body(client, services, marketplace):
    resp = client.post('/api/messages', json=['u2', 'l1', 'hi'], headers=auth_headers('u1'))

    assert resp.status_code == 400
    assert services.message_repo.count({}) == 0
