import threading

import pytest

from tests.conftest import auth_headers, token_for
from tijara_server.websocket.hub import WebSocketHub


def events_named(client, name):
    return [e['args'][0] for e in client.get_received() if e['name'] == name]


@pytest.fixture
def connect(app, socketio):
    clients = []

    def _connect(user_id=None, **kwargs):
        if user_id is not None:
            kwargs.setdefault('auth', {'token': token_for(user_id)})
        c = socketio.test_client(app, **kwargs)
        clients.append(c)
        return c

    yield _connect
    for c in clients:
        if c.is_connected():
            c.disconnect()


def test_connect_requires_valid_token(connect):
    assert not connect(auth={'token': 'not-a-jwt'}).is_connected()
    assert not connect().is_connected()
    assert connect('u1').is_connected()


def test_connect_with_header_or_query_token(connect):
    assert connect(headers=auth_headers('u1')).is_connected()
    assert connect(query_string=f'token={token_for("u1")}').is_connected()


def test_join_own_channel(connect):
    client = connect('u1')
    client.get_received()

    client.emit('join', 'u1')

    assert events_named(client, 'joined') == [{'userId': 'u1'}]


def test_join_accepts_object_payload(connect):
    client = connect('u1')
    client.get_received()

    client.emit('join', {'userId': 'u1'})

    assert events_named(client, 'joined') == [{'userId': 'u1'}]


def test_cannot_join_someone_elses_channel(connect, services):
    client = connect('u1')
    client.get_received()

    client.emit('join', 'u2')

    errors = events_named(client, 'error')
    assert errors and errors[0]['code'] == 'FORBIDDEN'
    assert services.hub.publish('u2', 'notification', {'x': 1}) is False


def test_notification_reaches_every_joined_socket(connect, services, marketplace):
    phone = connect('u2')
    laptop = connect('u2')
    other = connect('u1')
    phone.emit('join', 'u2')
    laptop.emit('join', 'u2')
    other.emit('join', 'u1')
    for c in (phone, laptop, other):
        c.get_received()

    created = services.notifications.create_notification('u2', 'SYSTEM_NOTICE', content='hello')

    assert events_named(phone, 'notification') == [created]
    assert events_named(laptop, 'notification') == [created]
    assert events_named(other, 'notification') == []


def test_publish_without_subscribers_is_dropped(services, marketplace):
    created = services.notifications.create_notification('u2', 'SYSTEM_NOTICE', content='nobody home')

    assert services.notification_repo.find_by_id(created['id']) is not None
    assert services.hub.publish('u2', 'notification', created) is False


def test_leave_stops_delivery(connect, services, marketplace):
    client = connect('u2')
    client.emit('join', 'u2')
    client.emit('leave', 'u2')
    received = client.get_received()
    assert [e['args'][0] for e in received if e['name'] == 'left'] == [{'userId': 'u2'}]

    services.notifications.create_notification('u2', 'SYSTEM_NOTICE', content='after leave')

    assert events_named(client, 'notification') == []
    assert not services.hub.has_subscribers('u2')


def test_disconnect_forgets_socket(connect, services):
    client = connect('u2')
    client.emit('join', 'u2')
    assert services.hub.has_subscribers('u2')

    client.disconnect()

    assert not services.hub.has_subscribers('u2')
    assert services.hub.connected_users == {}


def test_message_send_pushes_new_message_notification(connect, client, marketplace):
    seller = connect('u2')
    seller.emit('join', 'u2')
    seller.get_received()

    resp = client.post('/api/messages', json={
        'recipientId': 'u2', 'listingId': 'l1', 'content': 'Is this available?'
    }, headers=auth_headers('u1'))
    assert resp.status_code == 201

    pushed = events_named(seller, 'notification')
    assert len(pushed) == 1
    assert pushed[0]['type'] == 'NEW_MESSAGE'
    assert pushed[0]['relatedId'] == resp.get_json()['conversation']['id']
    assert pushed[0]['relatedKind'] == 'conversation'


def test_room_bookkeeping_tolerates_repeated_cleanup():
    hub = WebSocketHub()
    hub._add_to_room('u1', 'sid-a')
    hub._add_to_room('u1', 'sid-b')

    hub._remove_from_room('u1', 'sid-a')
    hub._remove_from_room('u1', 'sid-a')
    hub._remove_from_room('u9', 'sid-a')
    assert hub.has_subscribers('u1')

    hub._remove_from_room('u1', 'sid-b')
    hub._forget_socket('sid-b')
    assert not hub.has_subscribers('u1')
    assert hub.user_rooms == {}


def test_room_bookkeeping_under_concurrent_joins_and_disconnects():
    hub = WebSocketHub()

    def churn(worker):
        for i in range(200):
            sid = f'sid-{worker}-{i}'
            hub._add_to_room(f'u{i % 3}', sid)
            hub._forget_socket(sid)

    threads = [threading.Thread(target=churn, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert hub.user_rooms == {}
