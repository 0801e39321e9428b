"""
WebSocket endpoint and health check tests
"""
from fastapi.testclient import TestClient

from app.container import Container
from app.main import app
from app.store import MemoryDocumentStore


def test_websocket_ping_and_disconnect():
    container = Container(MemoryDocumentStore())
    app.state.container = container
    try:
        client = TestClient(app)
        with client.websocket_connect('/ws') as websocket:
            websocket.send_text('ping')
            assert websocket.receive_text() == 'pong'
            assert container.hub.subscriber_count == 1
        health = client.get('/api/health')
        assert health.status_code == 200
        assert health.json()['status'] == 'healthy'
    finally:
        app.state.container = None


async def test_health_reports_subscribers(client, subscriber):
    response = await client.get('/api/health')
    assert response.json()['subscribers'] == 1
    assert response.headers['X-Request-ID']
