def _events(sio_client, name):
    return [pkt for pkt in sio_client.get_received('/ws') if pkt['name'] == name]


def test_socket_connect(sio_client):
    # Ensure we are connected to /ws
    if not sio_client.is_connected('/ws'):
        sio_client.connect(namespace='/ws')
    assert sio_client.is_connected('/ws')
    received = sio_client.get_received('/ws')
    assert any(pkt['name'] == 'connected' for pkt in received)


def test_subscribe_and_unsubscribe(sio_client):
    sio_client.get_received('/ws')  # flush

    sio_client.emit('subscribe_leaderboard', {'mode': 'time', 'time_limit': '60'}, namespace='/ws')
    [ack] = _events(sio_client, 'subscribed')
    assert ack['args'][0] == {'room': 'leaderboard:time:60'}

    sio_client.emit('unsubscribe_leaderboard', {'mode': 'time', 'time_limit': 60}, namespace='/ws')
    [ack] = _events(sio_client, 'unsubscribed')
    assert ack['args'][0] == {'room': 'leaderboard:time:60'}


def test_subscribe_rejects_unknown_mode(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('subscribe_leaderboard', {'mode': 'marathon'}, namespace='/ws')
    received = sio_client.get_received('/ws')
    assert [pkt['name'] for pkt in received] == ['error']


def test_recorded_test_notifies_board_subscribers(sio_client, client):
    sio_client.emit('subscribe_leaderboard', {'mode': 'time', 'time_limit': 30}, namespace='/ws')
    sio_client.get_received('/ws')

    res = client.post('/api/tests', json={
        'firebase_uid': 'uid-carol',
        'user_email': 'carol@example.com',
        'wpm': 88,
        'accuracy': 97,
        'actual_duration': 30,
        'time_limit': 30,
    })
    assert res.status_code == 201

    [update] = _events(sio_client, 'leaderboard_update')
    payload = update['args'][0]
    assert payload['test_mode'] == 'time'
    assert payload['time_limit'] == 30
    assert payload['test_id'] == res.get_json()['data']['id']


def test_other_boards_are_not_notified(sio_client, client):
    sio_client.emit('subscribe_leaderboard', {'mode': 'words'}, namespace='/ws')
    sio_client.get_received('/ws')
    client.post('/api/tests', json={
        'firebase_uid': 'uid-carol',
        'user_email': 'carol@example.com',
        'wpm': 88,
        'accuracy': 97,
        'actual_duration': 30,
        'time_limit': 30,
    })
    assert _events(sio_client, 'leaderboard_update') == []


def test_ping(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('ping', {'t': 1}, namespace='/ws')
    [pong] = _events(sio_client, 'pong')
    assert pong['args'][0] == {'t': 1}


def test_default_time_board_matches_http_default(sio_client, client):
    sio_client.get_received('/ws')
    sio_client.emit('subscribe_leaderboard', {'mode': 'time'}, namespace='/ws')
    [ack] = _events(sio_client, 'subscribed')
    assert ack['args'][0] == {'room': 'leaderboard:time:30'}

    res = client.post('/api/tests', json={
        'firebase_uid': 'uid-carol',
        'user_email': 'carol@example.com',
        'wpm': 70,
        'accuracy': 95,
        'actual_duration': 30,
        'time_limit': 30,
    })
    assert res.status_code == 201
    [update] = _events(sio_client, 'leaderboard_update')
    assert update['args'][0]['test_id'] == res.get_json()['data']['id']


def test_all_limits_board_hears_every_time_test(sio_client, client):
    sio_client.get_received('/ws')
    sio_client.emit('subscribe_leaderboard', {'mode': 'time', 'time_limit': 'all'}, namespace='/ws')
    [ack] = _events(sio_client, 'subscribed')
    assert ack['args'][0] == {'room': 'leaderboard:time'}

    client.post('/api/tests', json={
        'firebase_uid': 'uid-carol',
        'user_email': 'carol@example.com',
        'wpm': 70,
        'accuracy': 95,
        'actual_duration': 60,
        'time_limit': 60,
    })
    [update] = _events(sio_client, 'leaderboard_update')
    assert update['args'][0]['time_limit'] == 60


def test_subscribe_rejects_bad_time_limit(sio_client):
    sio_client.get_received('/ws')
    sio_client.emit('subscribe_leaderboard', {'mode': 'time', 'time_limit': 'soon'}, namespace='/ws')
    assert [pkt['name'] for pkt in sio_client.get_received('/ws')] == ['error']
