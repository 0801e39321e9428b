"""
Document store adapter tests
"""
import asyncio
from datetime import timedelta

import pytest

from app.auth import Actor, Role
from app.database import create_database, create_tables
from app.errors import InvalidTransition
from app.models.event import Event
from app.store import Collection, MemoryDocumentStore, SQLDocumentStore
from app.utils import utcnow
from app.workflow import membership


@pytest.fixture
async def sql_store(tmp_path):
    url = f"sqlite:///{tmp_path / 'campushub-test.db'}"
    create_tables(url)
    store = SQLDocumentStore(create_database(url), timeout=5.0)
    await store.connect()
    yield store
    await store.disconnect()


@pytest.fixture(params=['memory', 'sql'])
async def any_store(request, sql_store):
    if request.param == 'memory':
        return MemoryDocumentStore()
    return sql_store


async def test_insert_stamps_bookkeeping_fields(any_store):
    doc = await any_store.insert(Collection.CLUBS, {'name': 'Chess'})
    assert doc['id']
    assert doc['version'] == 1
    assert doc['created_at'] == doc['updated_at']

    fetched = await any_store.find_by_id(Collection.CLUBS, doc['id'])
    assert fetched == doc


async def test_conditional_update(any_store):
    doc = await any_store.insert(Collection.CLUBS, {'name': 'Chess', 'members': []})

    updated = await any_store.update_by_id(
        Collection.CLUBS, doc['id'], {'members': ['u1']}, condition={'version': 1}
    )
    assert updated['members'] == ['u1']
    assert updated['version'] == 2

    # Stale version: nothing written
    stale = await any_store.update_by_id(
        Collection.CLUBS, doc['id'], {'members': ['u2']}, condition={'version': 1}
    )
    assert stale is None
    current = await any_store.find_by_id(Collection.CLUBS, doc['id'])
    assert current['members'] == ['u1']


async def test_update_missing_document_returns_none(any_store):
    assert await any_store.update_by_id(Collection.CLUBS, 'nope', {'name': 'x'}) is None


async def test_patch_cannot_touch_identity(any_store):
    doc = await any_store.insert(Collection.CLUBS, {'name': 'Chess'})
    updated = await any_store.update_by_id(Collection.CLUBS, doc['id'], {'id': 'other', 'version': 99})
    assert updated['id'] == doc['id']
    assert updated['version'] == 2


async def test_find_count_and_delete(any_store):
    for name, category in (('Chess', 'academic'), ('Drama', 'cultural'), ('Debate', 'academic')):
        await any_store.insert(Collection.CLUBS, {'name': name, 'category': category})
    await any_store.insert(Collection.EVENTS, {'name': 'Not a club'})

    academic = await any_store.find(Collection.CLUBS, {'category': 'academic'}, sort=[('name', 1)])
    assert [d['name'] for d in academic] == ['Chess', 'Debate']
    assert await any_store.count(Collection.CLUBS) == 3
    assert await any_store.count(Collection.CLUBS, {'name': {'$regex': 'd'}}) == 2

    page = await any_store.find(Collection.CLUBS, sort=[('name', 1)], page=2, limit=2)
    assert [d['name'] for d in page] == ['Drama']

    assert await any_store.delete_by_id(Collection.CLUBS, academic[0]['id']) is True
    assert await any_store.delete_by_id(Collection.CLUBS, academic[0]['id']) is False
    assert await any_store.count(Collection.CLUBS) == 2


async def test_find_one(any_store):
    await any_store.insert(Collection.USERS, {'email': 'ada@uni.edu'})
    assert (await any_store.find_one(Collection.USERS, {'email': 'ada@uni.edu'}))['email'] == 'ada@uni.edu'
    assert await any_store.find_one(Collection.USERS, {'email': 'bob@uni.edu'}) is None


async def test_memory_transaction_rolls_back():
    store = MemoryDocumentStore()
    kept = await store.insert(Collection.CLUBS, {'name': 'Chess'})

    with pytest.raises(RuntimeError):
        async with store.transaction():
            await store.insert(Collection.CLUBS, {'name': 'Drama'})
            await store.update_by_id(Collection.CLUBS, kept['id'], {'name': 'Checkers'})
            await store.delete_by_id(Collection.CLUBS, kept['id'])
            raise RuntimeError('boom')

    docs = await store.find(Collection.CLUBS)
    assert [d['name'] for d in docs] == ['Chess']
    assert docs[0]['version'] == 1


async def test_memory_transaction_commits():
    store = MemoryDocumentStore()
    async with store.transaction():
        await store.insert(Collection.CLUBS, {'name': 'Chess'})
    assert await store.count(Collection.CLUBS) == 1


def _titles(docs):
    return sorted(d['title'] for d in docs)


@pytest.mark.parametrize('query, expected', [
    ({'tags': 'board'}, ['Chess']),
    ({'is_active': True}, ['Chess', 'Debate']),
    ({'is_active': {'$ne': False}}, ['Chess', 'Debate']),
    ({'seats': {'$gte': 20}}, ['Drama']),
    ({'seats': {'$exists': False}}, ['Debate']),
    ({'title': {'$in': ['Chess', 'Drama']}}, ['Chess', 'Drama']),
    ({'title': {'$nin': ['Chess']}, 'is_active': True}, ['Debate']),
    ({'$or': [{'closes_at': None}, {'closes_at': {'$gt': 'NOW'}}]}, ['Chess', 'Debate']),
    ({'starts_at': {'$gt': 'NOW'}}, ['Chess', 'Debate']),
    ({'$and': [{'is_active': True}, {'title': {'$regex': 'ch'}}]}, ['Chess']),
])
async def test_filters_agree_across_adapters(any_store, query, expected):
    now = utcnow()
    await any_store.insert(Collection.CLUBS, {
        'title': 'Chess', 'tags': ['board', 'strategy'], 'is_active': True, 'seats': 10,
        'closes_at': None, 'starts_at': now + timedelta(days=1),
    })
    await any_store.insert(Collection.CLUBS, {
        'title': 'Drama', 'tags': ['stage'], 'is_active': False, 'seats': 30,
        'closes_at': now - timedelta(days=1), 'starts_at': now - timedelta(days=1),
    })
    await any_store.insert(Collection.CLUBS, {
        'title': 'Debate', 'tags': [], 'is_active': True, 'starts_at': now + timedelta(days=2),
    })

    def with_now(value):
        if value == 'NOW':
            return now
        if isinstance(value, dict):
            return {k: with_now(v) for k, v in value.items()}
        if isinstance(value, list):
            return [with_now(v) for v in value]
        return value

    query = with_now(query)
    assert _titles(await any_store.find(Collection.CLUBS, query)) == expected
    assert await any_store.count(Collection.CLUBS, query) == len(expected)


async def test_created_at_ordering_and_paging(any_store):
    now = utcnow()
    for title, age in (('oldest', 3), ('middle', 2), ('newest', 1)):
        await any_store.insert(Collection.EVENTS, {'title': title, 'kind': 'talk', 'created_at': now - timedelta(hours=age)})
    await any_store.insert(Collection.EVENTS, {'title': 'other', 'kind': 'party'})

    newest_first = await any_store.find(Collection.EVENTS, {'kind': 'talk'}, sort=[('created_at', -1)])
    assert [d['title'] for d in newest_first] == ['newest', 'middle', 'oldest']

    second = await any_store.find(Collection.EVENTS, {'kind': 'talk'}, sort=[('created_at', -1)], page=2, limit=1)
    assert [d['title'] for d in second] == ['middle']

    oldest_first = await any_store.find(Collection.EVENTS, {'kind': 'talk'}, sort=[('created_at', 1)], limit=2)
    assert [d['title'] for d in oldest_first] == ['oldest', 'middle']


async def test_concurrent_registrations_against_sql(sql_store):
    start = utcnow() + timedelta(days=3)
    doc = await sql_store.insert(Collection.EVENTS, {
        'title': 'Hackathon', 'description': '24h build', 'category': 'academic',
        'start_date': start, 'end_date': start + timedelta(hours=24),
        'start_time': '09:00', 'end_time': '09:00', 'location': 'Main Hall', 'venue': 'Hall A',
        'organizer': 'f1', 'is_active': True, 'is_approved': True, 'attendees': [], 'max_attendees': 2,
    })
    actors = [Actor(id=f'u{i}', role=Role.STUDENT) for i in range(5)]

    results = await asyncio.gather(
        *[membership.register_for_event(sql_store, actor, doc['id']) for actor in actors],
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, InvalidTransition)]
    assert sum(1 for r in results if isinstance(r, Event)) == 2
    assert len(failures) == 3
    assert all(f.reason == 'full' for f in failures)

    stored = Event.model_validate(await sql_store.find_by_id(Collection.EVENTS, doc['id']))
    assert len(stored.attendees) == 2
    assert stored.version == 3
