from unittest import mock

from django.contrib.auth.models import User

from tracker.models import Profile
from tests.helpers import ApiTestCase

REGISTRATION = {
    'firstName': 'Lin-Manuel',
    'lastName': 'Miranda',
    'email': 'Lin@Example.com',
    'password': 'wait-for-it',
}


class RegistrationTests(ApiTestCase):
    def test_register(self):
        response = self.api_post('/user', REGISTRATION)
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['email'], 'Lin@Example.com')
        self.assertEqual(body['role'], 'user')
        self.assertNotIn('password', body)

        user = User.objects.get(id=body['id'])
        self.assertEqual(user.username, 'lin@example.com')
        self.assertTrue(user.check_password('wait-for-it'))

    def test_field_rules(self):
        response = self.api_post('/user', {'firstName': 'Al', 'lastName': 'Bo', 'email': 'nope', 'password': 'short'})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'], {
            'firstName': 'must be at least 3 characters',
            'lastName': 'must be at least 3 characters',
            'email': 'must be a valid email address',
            'password': 'must be at least 8 characters',
        })

    def test_missing_fields(self):
        response = self.api_post('/user', {})
        self.assertEqual(set(response.json()['errors']), {'firstName', 'lastName', 'email', 'password'})

    def test_email_is_unique_ignoring_case(self):
        self.api_post('/user', REGISTRATION)
        response = self.api_post('/user', {**REGISTRATION, 'email': 'lin@example.COM'})
        self.assertEqual(response.status_code, 409)

    def test_registered_account_matches_payload(self):
        user_id = self.api_post('/user', REGISTRATION).json()['id']
        token = self.api_post('/user/login', {'email': REGISTRATION['email'], 'password': 'wait-for-it'}).json()['token']

        me = self.client.get('/v2/user/me', HTTP_AUTHORIZATION=f'Bearer {token}').json()
        self.assertEqual(me['id'], user_id)
        for key in ('firstName', 'lastName', 'email'):
            self.assertEqual(me[key], REGISTRATION[key])

    def test_email_longer_than_username_limit(self):
        email = 'a' * 140 + '@example.com'
        response = self.api_post('/user', {**REGISTRATION, 'email': email})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'], {'email': 'must be at most 150 characters'})
        self.assertFalse(User.objects.exists())

    def test_concurrent_registration_conflict(self):
        self.create_user('lin@example.com')
        with mock.patch('musical_tracker.api_modules.users.email_taken', return_value=False):
            response = self.api_post('/user', REGISTRATION)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(User.objects.count(), 1)


class LoginTests(ApiTestCase):
    def setUp(self):
        self.user = self.create_user('lin@example.com', password='wait-for-it')

    def test_login_returns_working_token(self):
        response = self.api_post('/user/login', {'email': 'LIN@example.com', 'password': 'wait-for-it'})
        self.assertEqual(response.status_code, 200)
        token = response.json()['token']
        self.assertEqual(response.json()['user']['id'], self.user.id)

        me = self.client.get('/v2/user/me', HTTP_AUTHORIZATION=f'Bearer {token}')
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()['email'], 'lin@example.com')
        self.assertIsNotNone(me.json()['lastLogin'])

    def test_wrong_password(self):
        response = self.api_post('/user/login', {'email': 'lin@example.com', 'password': 'nope-nope'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'message': 'Invalid email or password'})

    def test_unknown_email(self):
        response = self.api_post('/user/login', {'email': 'burr@example.com', 'password': 'wait-for-it'})
        self.assertEqual(response.status_code, 401)

    def test_missing_credentials(self):
        response = self.api_post('/user/login', {})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()['errors']), {'email', 'password'})

    def test_refresh_token(self):
        response = self.api_post('/user/refresh-token', user=self.user)
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()['token'])
        self.assertEqual(self.api_post('/user/refresh-token').status_code, 401)


class SelfServiceTests(ApiTestCase):
    def setUp(self):
        self.user = self.create_user('lin@example.com')

    def test_update_me(self):
        response = self.api_put('/user/me', {'firstName': 'Lin', 'email': 'lmm@example.com'}, user=self.user)
        self.assertEqual(response.status_code, 200)
        self.user.refresh_from_db()
        self.assertEqual(self.user.first_name, 'Lin')
        self.assertEqual(self.user.username, 'lmm@example.com')

    def test_user_cannot_change_own_role(self):
        response = self.api_put('/user/me', {'role': 'admin'}, user=self.user)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(Profile.objects.get(user=self.user).role, 'user')

    def test_email_taken(self):
        self.create_user('burr@example.com')
        response = self.api_put('/user/me', {'email': 'BURR@example.com'}, user=self.user)
        self.assertEqual(response.status_code, 409)

    def test_username_conflict_on_update(self):
        self.create_user('burr@example.com')
        with mock.patch('musical_tracker.api_modules.users.email_taken', return_value=False):
            response = self.api_put('/user/me', {'email': 'Burr@example.com'}, user=self.user)
        self.assertEqual(response.status_code, 409)
        self.user.refresh_from_db()
        self.assertEqual(self.user.email, 'lin@example.com')

    def test_update_keeps_email_as_sent(self):
        response = self.api_put('/user/me', {'email': 'Lin@Example.com'}, user=self.user)
        self.assertEqual(response.json()['email'], 'Lin@Example.com')
        self.assertEqual(self.api_get('/user/me', user=self.user).json()['email'], 'Lin@Example.com')

    def test_delete_me(self):
        self.assertEqual(self.api_delete('/user/me', user=self.user).status_code, 200)
        self.assertFalse(User.objects.filter(id=self.user.id).exists())


class AdminUserManagementTests(ApiTestCase):
    def setUp(self):
        self.admin = self.create_admin()
        self.user = self.create_user('lin@example.com')

    def test_list_requires_admin(self):
        self.assertEqual(self.api_get('/user', user=self.user).status_code, 403)
        self.assertEqual(self.api_get('/user').status_code, 401)

    def test_list_and_filters(self):
        body = self.api_get('/user', user=self.admin).json()
        self.assertEqual(body['pagination']['total'], 2)
        body = self.api_get('/user', {'role': 'admin'}, user=self.admin).json()
        self.assertEqual([u['id'] for u in body['data']], [self.admin.id])
        body = self.api_get('/user', {'search': 'lin@'}, user=self.admin).json()
        self.assertEqual([u['id'] for u in body['data']], [self.user.id])

    def test_admin_promotes_user(self):
        response = self.api_put(f'/user/{self.user.id}', {'role': 'admin'}, user=self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['role'], 'admin')

        response = self.api_put(f'/user/{self.user.id}', {'role': 'superuser'}, user=self.admin)
        self.assertEqual(response.status_code, 400)

    def test_get_and_delete(self):
        self.assertEqual(self.api_get(f'/user/{self.user.id}', user=self.admin).status_code, 200)
        self.assertEqual(self.api_get(f'/user/{self.admin.id}', user=self.user).status_code, 403)
        self.assertEqual(self.api_delete(f'/user/{self.user.id}', user=self.admin).status_code, 200)
        self.assertEqual(self.api_get(f'/user/{self.user.id}', user=self.admin).status_code, 404)
        self.assertEqual(self.api_delete(f'/user/{self.user.id}', user=self.admin).status_code, 404)
