"""
CampusHub - Test Configuration and Fixtures
"""
import os
from datetime import timedelta
from typing import AsyncGenerator, List, Tuple

import pytest
from httpx import AsyncClient, ASGITransport

# Set testing environment
os.environ['STORE_BACKEND'] = 'memory'
os.environ['EMAIL_NOTIFICATIONS_ENABLED'] = 'false'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing'
os.environ['LOG_LEVEL'] = 'WARNING'

from app.main import app
from app.auth import Actor, Role, create_access_token, hash_password
from app.container import Container
from app.models.user import User
from app.notifications import BroadcastHub, FanoutPublisher
from app.store import Collection, MemoryDocumentStore
from app.utils import utcnow

TEST_PASSWORD = 'password123'

# One bcrypt hash shared by every seeded user keeps the suite fast
_PASSWORD_HASH = hash_password(TEST_PASSWORD)


class RecordingPublisher(FanoutPublisher):
    """Publisher that also remembers what was published"""

    def __init__(self, hub=None):
        super().__init__(hub)
        self.published: List[Tuple[str, dict]] = []

    def publish(self, event, payload) -> None:
        self.published.append((event.value, payload))
        super().publish(event, payload)

    def events(self) -> List[str]:
        return [name for name, _ in self.published]


class FakeWebSocket:
    """Stands in for a connected browser"""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.accepted = False
        self.closed = False
        self.messages: List[dict] = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.fail:
            raise RuntimeError('socket is gone')
        self.messages.append(message)

    async def close(self):
        self.closed = True


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def publisher() -> RecordingPublisher:
    return RecordingPublisher(BroadcastHub())


@pytest.fixture
async def container(store, publisher) -> AsyncGenerator[Container, None]:
    container = Container(store, publisher)
    yield container
    await publisher.drain(timeout=5)


@pytest.fixture
async def client(container: Container) -> AsyncGenerator[AsyncClient, None]:
    """Test client wired to a fresh in-memory container"""
    app.state.container = container

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.state.container = None


@pytest.fixture
async def subscriber(container: Container) -> FakeWebSocket:
    """A live real-time subscriber on the container's hub"""
    websocket = FakeWebSocket()
    await container.hub.connect(websocket, user_id=None)
    return websocket


@pytest.fixture
def make_user(store: MemoryDocumentStore):
    """Factory inserting an active user straight into the store"""
    counter = {'n': 0}

    async def _make_user(role: Role = Role.STUDENT, **fields) -> User:
        counter['n'] += 1
        n = counter['n']
        doc = {
            'email': f'{role.value}{n}@uni.edu',
            'password_hash': _PASSWORD_HASH,
            'first_name': role.value.capitalize(),
            'last_name': f'User{n}',
            'role': role.value,
            'department': 'CS',
            'student_id': f'S-{n}' if role == Role.STUDENT else None,
            'employee_id': f'E-{n}' if role != Role.STUDENT else None,
            'is_active': True,
            'is_verified': True,
            'clubs': [],
        }
        doc.update(fields)
        return User.model_validate(await store.insert(Collection.USERS, doc))

    return _make_user


@pytest.fixture
async def student(make_user) -> User:
    return await make_user(Role.STUDENT)


@pytest.fixture
async def other_student(make_user) -> User:
    return await make_user(Role.STUDENT)


@pytest.fixture
async def faculty(make_user) -> User:
    return await make_user(Role.FACULTY)


@pytest.fixture
async def admin(make_user) -> User:
    return await make_user(Role.ADMIN)


def actor_for(user: User) -> Actor:
    return Actor(id=user.id, role=user.role, email=user.email, name=user.full_name)


def auth_headers(user: User) -> dict:
    """Generate authentication headers for a user"""
    token = create_access_token({'user_id': user.id, 'email': user.email, 'role': user.role.value})
    return {'Authorization': f'Bearer {token}'}


def event_payload(**overrides) -> dict:
    start = utcnow() + timedelta(days=7)
    payload = {
        'title': 'Intro to Robotics',
        'description': 'Hands-on session with the robotics lab',
        'category': 'workshop',
        'start_date': start.isoformat(),
        'end_date': (start + timedelta(hours=2)).isoformat(),
        'start_time': '14:00',
        'end_time': '16:00',
        'location': 'Engineering Block',
        'venue': 'Lab 3',
    }
    payload.update(overrides)
    return payload


def club_payload(**overrides) -> dict:
    payload = {
        'name': 'Robotics',
        'description': 'Build and race robots',
        'category': 'technical',
    }
    payload.update(overrides)
    return payload
