"""
Authentication and user management tests.
"""

from tests.conftest import API, TEST_USERS, login


class TestRegistration:
    """First-user registration"""

    def test_first_user_becomes_admin(self, client):
        response = client.post(f"{API}/auth/register", json=TEST_USERS['admin'])
        assert response.status_code == 201
        data = response.json()
        assert data['username'] == 'admin'
        assert data['role'] == 'admin'
        assert data['user_id'].startswith('ADM-')

    def test_second_registration_is_forbidden(self, client, auth_headers):
        response = client.post(f"{API}/auth/register", json=TEST_USERS['clerk'])
        assert response.status_code == 403
        assert response.json()['success'] is False

    def test_short_password_rejected(self, client):
        response = client.post(
            f"{API}/auth/register",
            json={'username': 'x', 'password': '12', 'name': 'X'},
        )
        assert response.status_code == 422


class TestLogin:
    """Login and token endpoints"""

    def test_login_returns_token_and_user(self, client, auth_headers):
        response = client.post(
            f"{API}/auth/login",
            json={'username': 'ADMIN', 'password': 'admin123'},
        )
        assert response.status_code == 200
        data = response.json()
        assert data['token_type'] == 'bearer'
        assert data['access_token']
        assert data['user']['username'] == 'admin'

    def test_wrong_password(self, client, auth_headers):
        response = client.post(
            f"{API}/auth/login",
            json={'username': 'admin', 'password': 'wrong-password'},
        )
        assert response.status_code == 401
        assert response.json()['message'] == 'Incorrect username or password'

    def test_unknown_user(self, client, auth_headers):
        response = client.post(
            f"{API}/auth/login",
            json={'username': 'ghost', 'password': 'whatever'},
        )
        assert response.status_code == 401

    def test_oauth2_token_form(self, client, auth_headers):
        response = client.post(
            f"{API}/auth/token",
            data={'username': 'admin', 'password': 'admin123'},
        )
        assert response.status_code == 200
        assert response.json()['access_token']


class TestProtectedRoutes:
    """Bearer token checks"""

    def test_missing_token(self, client):
        response = client.get(f"{API}/vehicles")
        assert response.status_code in (401, 403)

    def test_invalid_token(self, client, auth_headers):
        response = client.get(
            f"{API}/vehicles",
            headers={'Authorization': 'Bearer not-a-real-token'},
        )
        assert response.status_code == 401

    def test_me(self, client, auth_headers):
        response = client.get(f"{API}/users/me", headers=auth_headers)
        assert response.status_code == 200
        assert response.json()['name'] == 'Administrator'


class TestUserManagement:
    """Admin-only user routes"""

    def test_admin_creates_user(self, client, auth_headers):
        response = client.post(f"{API}/users", json=TEST_USERS['clerk'], headers=auth_headers)
        assert response.status_code == 201
        assert response.json()['role'] == 'user'

        listing = client.get(f"{API}/users", headers=auth_headers).json()
        assert listing['total'] == 2

    def test_duplicate_username(self, client, auth_headers):
        client.post(f"{API}/users", json=TEST_USERS['clerk'], headers=auth_headers)
        response = client.post(f"{API}/users", json=TEST_USERS['clerk'], headers=auth_headers)
        assert response.status_code == 400
        assert response.json()['message'] == 'Username already exists'

    def test_regular_user_cannot_create_users(self, client, auth_headers):
        client.post(f"{API}/users", json=TEST_USERS['clerk'], headers=auth_headers)
        clerk_headers = login(client, 'clerk', 'clerk123')

        response = client.post(
            f"{API}/users",
            json={'username': 'other', 'password': 'other123', 'name': 'Other'},
            headers=clerk_headers,
        )
        assert response.status_code == 403

    def test_admin_cannot_delete_self(self, client, auth_headers):
        me = client.get(f"{API}/users/me", headers=auth_headers).json()
        response = client.delete(f"{API}/users/{me['id']}", headers=auth_headers)
        assert response.status_code == 400

    def test_delete_user(self, client, auth_headers):
        clerk = client.post(f"{API}/users", json=TEST_USERS['clerk'], headers=auth_headers).json()
        response = client.delete(f"{API}/users/{clerk['id']}", headers=auth_headers)
        assert response.status_code == 200

        response = client.delete(f"{API}/users/{clerk['id']}", headers=auth_headers)
        assert response.status_code == 404
