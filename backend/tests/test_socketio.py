def _events(client, name):
    return [pkt['args'][0] if pkt['args'] else None for pkt in client.get_received() if pkt['name'] == name]


def _by_name(received):
    out = {}
    for pkt in received:
        out.setdefault(pkt['name'], []).append(pkt['args'][0] if pkt['args'] else None)
    return out


def _join_two(sio_factory):
    alice = sio_factory()
    bob = sio_factory()
    assert alice.emit('lobby:join', {'name': 'Alice'}, callback=True) == {'ok': True}
    assert bob.emit('lobby:join', {'name': 'Bob'}, callback=True) == {'ok': True}

    alice.get_received()
    alice.emit('room:create', {'name': 'Sketchers'}, callback=True)
    (joined,) = _events(alice, 'room:joined')
    room_id = joined['room']['id']

    bob.get_received()
    assert bob.emit('room:join', {'roomId': room_id}, callback=True) == {'ok': True}
    (snapshot,) = _events(bob, 'room:joined')
    assert [p['name'] for p in snapshot['room']['players']] == ['Alice', 'Bob']
    return alice, bob, room_id, snapshot['room']['players']


def test_lobby_join_returns_room_list(sio_factory):
    client = sio_factory()
    ack = client.emit('lobby:join', {'name': 'Alice'}, callback=True)
    assert ack == {'ok': True}
    received = _by_name(client.get_received())
    assert received['lobby:data'] == [{'rooms': []}]


def test_rejections_go_to_sender_only(sio_factory):
    alice = sio_factory()
    bob = sio_factory()
    alice.emit('lobby:join', {'name': 'Alice'})
    bob.emit('lobby:join', {'name': 'Bob'})
    alice.get_received()
    bob.get_received()

    ack = alice.emit('room:join', {'roomId': 'missing'}, callback=True)
    assert ack == {'ok': False, 'error': 'room_not_found'}
    assert _events(alice, 'room:error') == [{'error': 'room_not_found'}]
    assert bob.get_received() == []

    ack = alice.emit('room:join', 'not-an-object', callback=True)
    assert ack == {'ok': False, 'error': 'invalid_payload'}


def test_create_room_before_lobby_is_rejected(sio_factory):
    client = sio_factory()
    ack = client.emit('room:create', {'name': 'Nope'}, callback=True)
    assert ack == {'ok': False, 'error': 'not_registered'}


def test_game_flow_hides_word_from_guesser(sio_factory):
    alice, bob, room_id, players = _join_two(sio_factory)
    alice_id = players[0]['id']
    alice.get_received()

    assert alice.emit('game:start', {'roomId': room_id}, callback=True) == {'ok': True}

    (alice_started,) = _events(alice, 'game:started')
    assert alice_started['word'] == 'cat'
    assert alice_started['drawerId'] == alice_id

    (bob_started,) = _events(bob, 'game:started')
    assert 'word' not in bob_started
    assert bob_started['wordHint'] == '___'


def test_correct_guess_reaches_room(sio_factory):
    alice, bob, room_id, _ = _join_two(sio_factory)
    alice.emit('game:start', {'roomId': room_id})
    alice.get_received()
    bob.get_received()

    bob.emit('chat:send', {'roomId': room_id, 'text': 'CAT'})
    received = _by_name(alice.get_received())
    assert received['chat:message'][0]['isCorrect'] is True
    assert received['guess:correct'][0]['playerName'] == 'Bob'
    scores = {p['name']: p['score'] for p in received['room:players'][-1]['players']}
    assert scores == {'Alice': 50, 'Bob': 100}


def test_strokes_relay_to_guessers_only_from_drawer(sio_factory):
    alice, bob, room_id, _ = _join_two(sio_factory)
    alice.emit('game:start', {'roomId': room_id})
    alice.get_received()
    bob.get_received()

    ack = bob.emit('draw:stroke', {'roomId': room_id, 'stroke': {'x': 1}}, callback=True)
    assert ack == {'ok': False, 'error': 'not_drawer'}
    assert _events(bob, 'game:error') == [{'error': 'not_drawer'}]
    assert alice.get_received() == []

    alice.emit('draw:stroke', {'roomId': room_id, 'stroke': {'x': 2}})
    assert _events(bob, 'draw:stroke') == [{'x': 2}]
    assert alice.get_received() == []


def test_drawer_disconnect_hands_turn_to_next_player(sio_factory, flask_app):
    alice, bob, room_id, players = _join_two(sio_factory)
    bob_id = players[1]['id']
    alice.emit('game:start', {'roomId': room_id})
    bob.get_received()

    alice.disconnect()
    received = _by_name(bob.get_received())
    assert received['room:player_left'][0]['playerId'] == players[0]['id']
    assert received['game:turn'][0]['drawerId'] == bob_id
    assert received['game:turn'][0]['word'] == 'cat'

    gateway = flask_app.extensions['doodle']
    assert gateway.players.get(players[0]['id']) is None
    assert gateway.rooms.get(room_id).member_ids == [bob_id]


def test_leave_room_returns_lobby_data(sio_factory, flask_app):
    alice, bob, room_id, _ = _join_two(sio_factory)
    bob.get_received()

    assert bob.emit('room:leave', {'roomId': room_id}, callback=True) == {'ok': True}
    (lobby,) = _events(bob, 'lobby:data')
    assert lobby['rooms'][0]['memberCount'] == 1

    alice.emit('room:leave', {'roomId': room_id})
    assert flask_app.extensions['doodle'].rooms.get(room_id) is None
