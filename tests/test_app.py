"""
Tests for the Flask application factory and the status API.
"""

import json

import pytest
from src.unscramble.app import create_app


@pytest.fixture
def client(game_server):
    app = create_app(game_server, {'TESTING': True})
    return app.test_client()


def test_create_app():
    """Test that the app factory creates a valid Flask app."""
    app = create_app(config={'TESTING': True})
    assert app is not None
    assert app.config['TESTING'] is True


def test_health_without_game_server():
    """Test that the API reports when no game server is attached."""
    client = create_app(None, {'TESTING': True}).test_client()
    response = client.get('/api/health')
    assert response.status_code == 503
    assert json.loads(response.data)['success'] is False


def test_health(client, join):
    """Test the health endpoint counts."""
    join("Alice")
    join("Bob")
    join("Carol")

    response = client.get('/api/health')
    assert response.status_code == 200
    data = json.loads(response.data)
    assert data['success'] is True
    assert data['data'] == {'status': 'ok', 'sessions': 3, 'rooms': 2}


def test_rooms(client, join):
    """Test listing rooms."""
    join("Alice")
    join("Bob")

    response = client.get('/api/rooms')
    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data['total_rooms'] == 1
    assert data['max_rooms'] == 3
    room = data['rooms'][0]
    assert room['state'] == 'active'
    assert room['members'] == ['Alice', 'Bob']
    assert room['scrambled_word'] == 'nohtyp'


def test_sessions(client, join, game_server):
    """Test listing sessions with their remaining guesses."""
    alice, _ = join("Alice")
    join("Bob")
    game_server.handle_line(alice, "nope")

    response = client.get('/api/sessions')
    data = json.loads(response.data)['data']
    assert data['total_sessions'] == 2
    by_label = {s['label']: s['remaining_guesses'] for s in data['sessions']}
    assert by_label == {'Alice': 4, 'Bob': 5}


def test_health_after_shutdown(client, game_server):
    """Test that the health endpoint reflects a requested shutdown."""
    game_server.shutdown()
    data = json.loads(client.get('/api/health').data)['data']
    assert data['status'] == 'shutting_down'


def test_cors_header(client):
    """Test that cross-origin requests are allowed."""
    response = client.get('/api/health', headers={'Origin': 'http://example.com'})
    assert response.headers.get('Access-Control-Allow-Origin') == '*'
