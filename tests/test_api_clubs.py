"""
Club endpoint tests
"""
from httpx import AsyncClient

from app.auth import Role

from conftest import auth_headers, club_payload


async def create_club(client, user, **overrides) -> dict:
    response = await client.post('/api/clubs', json=club_payload(**overrides), headers=auth_headers(user))
    assert response.status_code == 201, response.text
    return response.json()['club']


async def approved_club(client, faculty, admin, **overrides) -> dict:
    club = await create_club(client, faculty, **overrides)
    response = await client.post(f"/api/clubs/{club['id']}/approve", headers=auth_headers(admin))
    assert response.status_code == 200
    return response.json()['club']


class TestApproval:
    async def test_robotics_scenario(self, client: AsyncClient, faculty, admin, publisher, subscriber):
        club = await create_club(client, faculty, name='Robotics')
        assert club['is_approved'] is False
        assert club['advisor'] == faculty.id

        approved = await client.post(f"/api/clubs/{club['id']}/approve", headers=auth_headers(admin))
        assert approved.status_code == 200
        await publisher.drain(timeout=5)

        messages = [m for m in subscriber.messages if m['event'] == 'club-approved']
        assert len(messages) == 1
        assert messages[0]['data']['id'] == club['id']
        assert messages[0]['data']['is_approved'] is True

        again = await client.post(f"/api/clubs/{club['id']}/approve", headers=auth_headers(admin))
        assert again.status_code == 400
        assert again.json() == {'message': 'Club is already approved', 'reason': 'already_approved'}

    async def test_admin_club_is_live_immediately(self, client: AsyncClient, admin):
        club = await create_club(client, admin)
        assert club['is_approved'] is True

    async def test_pending_clubs_hidden_from_students(self, client: AsyncClient, faculty, student):
        club = await create_club(client, faculty)
        listing = (await client.get('/api/clubs', headers=auth_headers(student))).json()
        assert listing['total'] == 0

        forced = (await client.get('/api/clubs', params={'status': 'pending'}, headers=auth_headers(student))).json()
        assert forced['total'] == 0

        staff_view = (await client.get('/api/clubs', params={'status': 'pending'}, headers=auth_headers(faculty))).json()
        assert [c['id'] for c in staff_view['clubs']] == [club['id']]

        assert (await client.get(f"/api/clubs/{club['id']}")).status_code == 404

    async def test_reject(self, client: AsyncClient, faculty, admin):
        club = await create_club(client, faculty)
        response = await client.post(f"/api/clubs/{club['id']}/reject", headers=auth_headers(admin))
        assert response.status_code == 200
        assert (await client.get(f"/api/clubs/{club['id']}", headers=auth_headers(admin))).status_code == 404

    async def test_pending_list_requires_staff(self, client: AsyncClient, student, faculty):
        await create_club(client, faculty)
        assert (await client.get('/api/clubs/pending', headers=auth_headers(student))).status_code == 403
        assert (await client.get('/api/clubs/pending', headers=auth_headers(faculty))).json()['total'] == 1


class TestNames:
    async def test_duplicate_name_is_case_insensitive(self, client: AsyncClient, faculty):
        await create_club(client, faculty, name='Robotics')
        response = await client.post('/api/clubs', json=club_payload(name='robotics'), headers=auth_headers(faculty))
        assert response.status_code == 409

    async def test_rename_to_taken_name(self, client: AsyncClient, faculty):
        await create_club(client, faculty, name='Robotics')
        other = await create_club(client, faculty, name='Chess')
        response = await client.put(
            f"/api/clubs/{other['id']}", json={'name': 'ROBOTICS'}, headers=auth_headers(faculty)
        )
        assert response.status_code == 409


class TestMembership:
    async def test_join_and_leave_keep_user_in_sync(self, client: AsyncClient, faculty, admin, student, publisher):
        club = await approved_club(client, faculty, admin)
        url = f"/api/clubs/{club['id']}/join"

        joined = await client.post(url, headers=auth_headers(student))
        assert joined.status_code == 200
        assert joined.json()['club']['member_count'] == 1

        me = (await client.get('/api/auth/me', headers=auth_headers(student))).json()['user']
        assert me['clubs'] == [club['id']]

        mine = (await client.get('/api/clubs/user/clubs', headers=auth_headers(student))).json()
        assert [c['id'] for c in mine['clubs']] == [club['id']]

        again = await client.post(url, headers=auth_headers(student))
        assert again.json()['reason'] == 'already_joined'

        left = await client.delete(url, headers=auth_headers(student))
        assert left.status_code == 200
        me = (await client.get('/api/auth/me', headers=auth_headers(student))).json()['user']
        assert me['clubs'] == []

        assert ('club-member-joined', {'club_id': club['id'], 'user_id': student.id}) in publisher.published
        assert ('club-member-left', {'club_id': club['id'], 'user_id': student.id}) in publisher.published

    async def test_leave_without_membership(self, client: AsyncClient, faculty, admin, student):
        club = await approved_club(client, faculty, admin)
        response = await client.delete(f"/api/clubs/{club['id']}/join", headers=auth_headers(student))
        assert response.status_code == 400
        assert response.json()['reason'] == 'not_a_member'

    async def test_join_pending_club(self, client: AsyncClient, faculty, student):
        club = await create_club(client, faculty)
        response = await client.post(f"/api/clubs/{club['id']}/join", headers=auth_headers(student))
        assert response.status_code == 400
        assert response.json()['reason'] == 'not_approved'

    async def test_full_club(self, client: AsyncClient, faculty, admin, student, other_student):
        club = await approved_club(client, faculty, admin, max_members=1)
        assert (await client.post(f"/api/clubs/{club['id']}/join", headers=auth_headers(student))).status_code == 200

        response = await client.post(f"/api/clubs/{club['id']}/join", headers=auth_headers(other_student))
        assert response.status_code == 400
        assert response.json()['reason'] == 'full'

    async def test_capacity_cannot_drop_below_member_count(
        self, client: AsyncClient, faculty, admin, student, other_student, make_user
    ):
        club = await approved_club(client, faculty, admin, max_members=3)
        third = await make_user(Role.STUDENT)
        for user in (student, other_student, third):
            assert (await client.post(f"/api/clubs/{club['id']}/join", headers=auth_headers(user))).status_code == 200

        url = f"/api/clubs/{club['id']}"
        shrink = await client.put(url, json={'max_members': 1}, headers=auth_headers(faculty))
        assert shrink.status_code == 400

        current = (await client.get(url)).json()['club']
        assert current['max_members'] == 3
        assert current['member_count'] == 3

    async def test_null_name_is_rejected(self, client: AsyncClient, faculty, admin):
        club = await approved_club(client, faculty, admin)
        url = f"/api/clubs/{club['id']}"

        response = await client.put(url, json={'name': None}, headers=auth_headers(faculty))
        assert response.status_code == 400
        assert (await client.get(url)).json()['club']['name'] == 'Robotics'

    async def test_member_roles(self, client: AsyncClient, faculty, admin, student, other_student):
        club = await approved_club(client, faculty, admin)
        await client.post(f"/api/clubs/{club['id']}/join", headers=auth_headers(student))
        url = f"/api/clubs/{club['id']}/members/{student.id}"

        denied = await client.put(url, json={'role': 'treasurer'}, headers=auth_headers(other_student))
        assert denied.status_code == 403

        response = await client.put(url, json={'role': 'treasurer'}, headers=auth_headers(faculty))
        assert response.status_code == 200
        members = response.json()['club']['members']
        assert members[0]['role'] == 'treasurer'

        missing = await client.put(
            f"/api/clubs/{club['id']}/members/{other_student.id}", json={'role': 'secretary'},
            headers=auth_headers(faculty),
        )
        assert missing.status_code == 400
        assert missing.json()['reason'] == 'member_not_found'

    async def test_delete_unlinks_members(self, client: AsyncClient, faculty, admin, student):
        club = await approved_club(client, faculty, admin)
        await client.post(f"/api/clubs/{club['id']}/join", headers=auth_headers(student))

        assert (await client.delete(f"/api/clubs/{club['id']}", headers=auth_headers(student))).status_code == 403
        assert (await client.delete(f"/api/clubs/{club['id']}", headers=auth_headers(faculty))).status_code == 200

        me = (await client.get('/api/auth/me', headers=auth_headers(student))).json()['user']
        assert me['clubs'] == []
