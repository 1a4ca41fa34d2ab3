import pytest

from conftest import NAMESPACE
from cardbattle import socketio


def test_index_and_health(client):
    res = client.get('/')
    assert res.status_code == 200
    assert res.get_json()['endpoints']['socket'] == '/ws'
    assert client.get('/api/health').get_json() == {'status': 'ok'}


def test_register_logs_in(client):
    res = client.post('/register', json={'username': 'green', 'password': 'secret'})
    assert res.status_code == 201
    assert res.get_json()['user']['username'] == 'green'
    me = client.get('/me')
    assert me.status_code == 200
    assert me.get_json()['username'] == 'green'


def test_register_rejects_duplicates_and_missing_fields(client):
    assert client.post('/register', json={'username': 'red', 'password': 'x'}).status_code == 400
    assert client.post('/register', json={'username': 'only-name'}).status_code == 400
    assert client.post('/register').status_code == 400


def test_login_with_bad_password(client):
    res = client.post('/login', json={'username': 'red', 'password': 'nope'})
    assert res.status_code == 401
    assert 'error' in res.get_json()


def test_login_and_logout(client):
    res = client.post('/login', json={'username': 'red', 'password': 'password123'})
    assert res.status_code == 200
    assert client.get('/me').get_json()['username'] == 'red'
    assert client.post('/logout').status_code == 200
    assert client.get('/me').status_code == 401


def test_rooms_requires_login(client):
    assert client.get('/api/rooms').status_code == 401


def test_rooms_list_follows_lobby(logged_in_client, connect_player, deck_id_for):
    http = logged_in_client('blue')
    assert http.get('/api/rooms').get_json() == []

    deck_id = deck_id_for('red')
    host = connect_player('red')
    host.emit('createRoom', {'deckId': deck_id}, namespace='/ws')

    rooms = http.get('/api/rooms').get_json()
    assert rooms == [{'id': 1, 'hostUsername': 'red', 'deckId': deck_id}]


def _catalog_ids(http):
    return [card['id'] for card in http.get('/api/cards').get_json()]


def test_cards_catalog(client, logged_in_client):
    assert client.get('/api/cards').status_code == 401

    catalog = logged_in_client('red').get('/api/cards').get_json()
    assert len(catalog) == 20
    indexes = [card['catalogIndex'] for card in catalog]
    assert indexes == sorted(indexes)
    assert set(catalog[0]) == {'id', 'name', 'hp', 'attack', 'element', 'catalogIndex', 'imageUrl'}
    assert catalog[0]['name'] == 'Bulbasaur'
    assert catalog[0]['element'] == 'Grass'


def test_create_deck(logged_in_client):
    http = logged_in_client('red')
    ids = _catalog_ids(http)[:10]
    res = http.post('/api/decks', json={'name': 'Fire and Water', 'cards': ids})
    assert res.status_code == 201
    deck = res.get_json()
    assert deck['name'] == 'Fire and Water'
    assert [card['id'] for card in deck['cards']] == ids

    mine = http.get('/api/decks/mine').get_json()
    assert [d['id'] for d in mine][-1] == deck['id']
    assert len(mine) == 2


@pytest.mark.parametrize('body', [
    {'cards': list(range(1, 11))},
    {'name': '   ', 'cards': list(range(1, 11))},
    {'name': 'Short', 'cards': list(range(1, 10))},
    {'name': 'Long', 'cards': list(range(1, 12))},
    {'name': 'Unknown', 'cards': list(range(1, 10)) + [999]},
    {'name': 'Repeats', 'cards': [1] * 10},
    {'name': 'Junk', 'cards': ['a'] * 10},
    {'name': 'NoList', 'cards': 'nope'},
])
def test_create_deck_rejects_bad_bodies(logged_in_client, body):
    http = logged_in_client('red')
    res = http.post('/api/decks', json=body)
    assert res.status_code == 400
    assert 'error' in res.get_json()
    assert len(http.get('/api/decks/mine').get_json()) == 1


def test_deck_routes_are_owner_only(logged_in_client, deck_id_for):
    blue_deck = deck_id_for('blue')
    red = logged_in_client('red')
    assert red.get(f'/api/decks/{blue_deck}').status_code == 403
    assert red.patch(f'/api/decks/{blue_deck}', json={'name': 'Mine now'}).status_code == 403
    assert red.delete(f'/api/decks/{blue_deck}').status_code == 403
    assert red.get('/api/decks/4242').status_code == 404
    assert red.get('/api/decks/abc').status_code == 400

    blue = logged_in_client('blue')
    assert blue.get(f'/api/decks/{blue_deck}').get_json()['name'] == 'Starter Deck'


def test_update_deck(logged_in_client, deck_id_for):
    http = logged_in_client('red')
    deck_id = deck_id_for('red')
    ids = _catalog_ids(http)[10:]

    res = http.patch(f'/api/decks/{deck_id}', json={'name': 'Renamed', 'cards': ids})
    assert res.status_code == 200
    assert res.get_json()['name'] == 'Renamed'
    assert [card['id'] for card in res.get_json()['cards']] == ids

    res = http.patch(f'/api/decks/{deck_id}', json={'name': 'Broken', 'cards': ids[:9]})
    assert res.status_code == 400
    deck = http.get(f'/api/decks/{deck_id}').get_json()
    assert deck['name'] == 'Renamed'
    assert len(deck['cards']) == 10


def test_delete_deck(logged_in_client, deck_id_for):
    http = logged_in_client('red')
    deck_id = deck_id_for('red')
    assert http.delete(f'/api/decks/{deck_id}').status_code == 200
    assert http.get(f'/api/decks/{deck_id}').status_code == 404
    assert http.get('/api/decks/mine').get_json() == []


def test_registered_user_builds_a_deck_and_hosts_a_room(flask_app, client, store):
    assert client.post('/register', json={'username': 'green', 'password': 'secret'}).status_code == 201
    assert client.get('/api/decks/mine').get_json() == []

    deck = client.post('/api/decks', json={'name': 'First', 'cards': _catalog_ids(client)[:10]}).get_json()

    sio = socketio.test_client(flask_app, flask_test_client=client, namespace=NAMESPACE)
    try:
        sio.emit('createRoom', {'deckId': deck['id']}, namespace=NAMESPACE)
        created = [p['args'][0] for p in sio.get_received(NAMESPACE) if p['name'] == 'roomCreated']
        assert created == [{'id': 1, 'hostUsername': 'green', 'deckId': deck['id']}]
        assert store.rooms.get_rooms_list() == created
    finally:
        sio.disconnect(namespace=NAMESPACE)
