"""
Announcement endpoint tests
"""
from datetime import timedelta

from httpx import AsyncClient

from app.utils import utcnow

from conftest import actor_for, auth_headers


def announcement_payload(**overrides) -> dict:
    payload = {
        'title': 'Library hours extended',
        'content': 'The library stays open until midnight during exams.',
        'category': 'academic',
    }
    payload.update(overrides)
    return payload


async def post(client, user, **overrides) -> dict:
    response = await client.post(
        '/api/announcements', json=announcement_payload(**overrides), headers=auth_headers(user)
    )
    assert response.status_code == 201, response.text
    return response.json()['announcement']


class TestPosting:
    async def test_students_cannot_post(self, client: AsyncClient, student):
        response = await client.post('/api/announcements', json=announcement_payload(), headers=auth_headers(student))
        assert response.status_code == 403

    async def test_faculty_post_is_live(self, client: AsyncClient, faculty, publisher):
        announcement = await post(client, faculty)
        assert announcement['posted_by'] == faculty.id
        assert announcement['is_approved'] is True
        assert announcement['views'] == 0
        assert 'new-announcement' in publisher.events()

    async def test_department_audience_needs_department(self, client: AsyncClient, faculty):
        response = await client.post(
            '/api/announcements',
            json=announcement_payload(target_audience='specific-department'),
            headers=auth_headers(faculty),
        )
        assert response.status_code == 400

        ok = await post(client, faculty, target_audience='specific-department', target_department='CS')
        assert ok['target_department'] == 'CS'


class TestReading:
    async def test_read_receipt_recorded_once(self, client: AsyncClient, faculty, student):
        announcement = await post(client, faculty)
        url = f"/api/announcements/{announcement['id']}"

        first = (await client.get(url, headers=auth_headers(student))).json()['announcement']
        assert first['views'] == 1
        assert [r['user'] for r in first['read_by']] == [student.id]

        second = (await client.get(url, headers=auth_headers(student))).json()['announcement']
        assert second['views'] == 1

        explicit = await client.post(f'{url}/read', headers=auth_headers(student))
        assert explicit.status_code == 200
        assert (await client.get(url)).json()['announcement']['views'] == 1

    async def test_anonymous_read_leaves_no_receipt(self, client: AsyncClient, faculty):
        announcement = await post(client, faculty)
        fetched = (await client.get(f"/api/announcements/{announcement['id']}")).json()['announcement']
        assert fetched['views'] == 0

    async def test_expired_announcements_are_hidden(self, client: AsyncClient, faculty, student):
        live = await post(client, faculty, expires_at=(utcnow() + timedelta(days=1)).isoformat())
        expired = await post(client, faculty, title='Old news', expires_at=(utcnow() - timedelta(days=1)).isoformat())

        listing = (await client.get('/api/announcements')).json()
        assert [a['id'] for a in listing['announcements']] == [live['id']]

        response = await client.get(f"/api/announcements/{expired['id']}", headers=auth_headers(student))
        assert response.status_code == 404

    async def test_search_combines_with_expiry(self, client: AsyncClient, faculty):
        await post(client, faculty, title='Exam timetable')
        await post(client, faculty, title='Exam results', expires_at=(utcnow() - timedelta(hours=1)).isoformat())
        await post(client, faculty, title='Cafeteria menu', content='New dishes')

        listing = (await client.get('/api/announcements', params={'search': 'exam'})).json()
        assert [a['title'] for a in listing['announcements']] == ['Exam timetable']


class TestEditing:
    async def test_poster_or_admin_edits(self, client: AsyncClient, faculty, make_user, admin, container):
        announcement = await post(client, faculty)
        url = f"/api/announcements/{announcement['id']}"
        colleague = await make_user(faculty.role)

        assert (await client.put(url, json={'title': 'Changed'}, headers=auth_headers(colleague))).status_code == 403
        assert (await client.put(url, json={'priority': 'urgent'}, headers=auth_headers(admin))).status_code == 200

        updated = await container.announcements.get_announcement(actor_for(faculty), announcement['id'])
        assert updated.priority.value == 'urgent'

    async def test_update_keeps_audience_consistent(self, client: AsyncClient, faculty):
        announcement = await post(client, faculty)
        response = await client.put(
            f"/api/announcements/{announcement['id']}",
            json={'target_audience': 'specific-year'},
            headers=auth_headers(faculty),
        )
        assert response.status_code == 400

    async def test_null_content_is_rejected(self, client: AsyncClient, faculty):
        announcement = await post(client, faculty)
        url = f"/api/announcements/{announcement['id']}"

        response = await client.put(url, json={'content': None}, headers=auth_headers(faculty))
        assert response.status_code == 400
        assert (await client.get(url)).json()['announcement']['content'] == announcement['content']

    async def test_delete(self, client: AsyncClient, faculty, publisher):
        announcement = await post(client, faculty)
        url = f"/api/announcements/{announcement['id']}"
        assert (await client.delete(url, headers=auth_headers(faculty))).status_code == 200
        assert (await client.get(url)).status_code == 404
        assert ('announcement-deleted', {'resource_id': announcement['id']}) in publisher.published
