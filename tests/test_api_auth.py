"""
Authentication endpoint tests
"""
from httpx import AsyncClient

from app.auth import Role

from conftest import TEST_PASSWORD, auth_headers


def registration(**overrides) -> dict:
    payload = {
        'email': 'Ada@uni.edu',
        'password': 's3cret-pass',
        'first_name': 'Ada',
        'last_name': 'Lovelace',
        'role': 'student',
        'department': 'CS',
        'student_id': 'CS-001',
    }
    payload.update(overrides)
    return payload


class TestRegister:
    async def test_register_student(self, client: AsyncClient):
        response = await client.post('/api/auth/register', json=registration())
        assert response.status_code == 201
        data = response.json()
        assert data['token']
        assert data['user']['email'] == 'ada@uni.edu'
        assert data['user']['full_name'] == 'Ada Lovelace'
        assert 'password_hash' not in data['user']

    async def test_duplicate_email(self, client: AsyncClient):
        await client.post('/api/auth/register', json=registration())
        response = await client.post('/api/auth/register', json=registration(student_id='CS-002'))
        assert response.status_code == 409
        assert response.json() == {'message': 'User already exists'}

    async def test_duplicate_student_id(self, client: AsyncClient):
        await client.post('/api/auth/register', json=registration())
        response = await client.post('/api/auth/register', json=registration(email='bob@uni.edu'))
        assert response.status_code == 409

    async def test_student_needs_student_id(self, client: AsyncClient):
        response = await client.post('/api/auth/register', json=registration(student_id=None))
        assert response.status_code == 400

    async def test_faculty_needs_employee_id(self, client: AsyncClient):
        response = await client.post('/api/auth/register', json=registration(role='faculty', student_id=None))
        assert response.status_code == 400

    async def test_admin_cannot_self_register(self, client: AsyncClient):
        response = await client.post(
            '/api/auth/register', json=registration(role='admin', student_id=None, employee_id='E-1')
        )
        assert response.status_code == 403

    async def test_malformed_body(self, client: AsyncClient):
        response = await client.post('/api/auth/register', json=registration(email='not-an-email'))
        assert response.status_code == 400
        body = response.json()
        assert body['message'] == 'Validation error'
        assert body['errors'][0]['field'] == 'email'


class TestLogin:
    async def test_login(self, client: AsyncClient, student):
        response = await client.post('/api/auth/login', json={'email': student.email, 'password': TEST_PASSWORD})
        assert response.status_code == 200
        assert response.json()['user']['id'] == student.id

    async def test_login_records_last_login(self, client: AsyncClient, student, container):
        await client.post('/api/auth/login', json={'email': student.email, 'password': TEST_PASSWORD})
        stored = await container.users.get(student.id)
        assert stored.last_login is not None
        assert stored.password_hash == student.password_hash

    async def test_wrong_password(self, client: AsyncClient, student):
        response = await client.post('/api/auth/login', json={'email': student.email, 'password': 'wrong-one'})
        assert response.status_code == 401
        assert response.json() == {'message': 'Invalid credentials'}

    async def test_deactivated_account(self, client: AsyncClient, make_user):
        user = await make_user(Role.STUDENT, is_active=False)
        response = await client.post('/api/auth/login', json={'email': user.email, 'password': TEST_PASSWORD})
        assert response.status_code == 401


class TestProfile:
    async def test_me_requires_token(self, client: AsyncClient):
        response = await client.get('/api/auth/me')
        assert response.status_code == 401
        assert response.json() == {'message': 'No token, authorization denied'}

    async def test_bad_token(self, client: AsyncClient):
        response = await client.get('/api/auth/me', headers={'Authorization': 'Bearer not-a-jwt'})
        assert response.status_code == 401

    async def test_me(self, client: AsyncClient, student):
        response = await client.get('/api/auth/me', headers=auth_headers(student))
        assert response.status_code == 200
        assert response.json()['user']['email'] == student.email

    async def test_update_profile(self, client: AsyncClient, student):
        response = await client.put(
            '/api/auth/profile', json={'phone': '555-0100', 'year': '3'}, headers=auth_headers(student)
        )
        assert response.status_code == 200
        assert response.json()['user']['phone'] == '555-0100'

    async def test_change_password(self, client: AsyncClient, student):
        headers = auth_headers(student)
        wrong = await client.put(
            '/api/auth/change-password',
            json={'current_password': 'nope-nope', 'new_password': 'brand-new-pass'},
            headers=headers,
        )
        assert wrong.status_code == 400

        ok = await client.put(
            '/api/auth/change-password',
            json={'current_password': TEST_PASSWORD, 'new_password': 'brand-new-pass'},
            headers=headers,
        )
        assert ok.status_code == 200
        login = await client.post('/api/auth/login', json={'email': student.email, 'password': 'brand-new-pass'})
        assert login.status_code == 200


class TestUserManagement:
    async def test_list_users_is_admin_only(self, client: AsyncClient, student, admin):
        assert (await client.get('/api/auth/users', headers=auth_headers(student))).status_code == 403

        response = await client.get('/api/auth/users', params={'role': 'student'}, headers=auth_headers(admin))
        assert response.status_code == 200
        data = response.json()
        assert data['total'] == 1
        assert data['users'][0]['id'] == student.id
        assert data['current_page'] == 1

    async def test_deactivated_user_loses_access(self, client: AsyncClient, student, admin):
        response = await client.put(
            f'/api/auth/users/{student.id}/status', json={'is_active': False}, headers=auth_headers(admin)
        )
        assert response.status_code == 200
        assert response.json()['user']['is_active'] is False

        me = await client.get('/api/auth/me', headers=auth_headers(student))
        assert me.status_code == 403

    async def test_admin_cannot_deactivate_self(self, client: AsyncClient, admin):
        response = await client.put(
            f'/api/auth/users/{admin.id}/status', json={'is_active': False}, headers=auth_headers(admin)
        )
        assert response.status_code == 400

    async def test_delete_user(self, client: AsyncClient, student, admin):
        response = await client.delete(f'/api/auth/users/{student.id}', headers=auth_headers(admin))
        assert response.status_code == 200
        missing = await client.get(f'/api/auth/users/{student.id}', headers=auth_headers(admin))
        assert missing.status_code == 404
