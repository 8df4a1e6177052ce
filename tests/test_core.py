from tests.helpers import ApiTestCase


class CoreEndpointTests(ApiTestCase):
    def test_index(self):
        response = self.api_get('/')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'ok')
        self.assertEqual(response.json()['version'], '2.0.0')

    def test_health(self):
        response = self.api_get('/health')
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['status'], 'healthy')


class PermissionsEndpointTests(ApiTestCase):
    def test_anonymous(self):
        body = self.api_get('/permissions').json()
        self.assertFalse(body['authenticated'])
        self.assertIsNone(body['user_id'])
        self.assertFalse(body['permissions']['can_submit'])
        self.assertIn('musicals', body['sections'])
        self.assertNotIn('profile', body['sections'])
        self.assertEqual(body['active_section'], 'home')

    def test_user_asking_for_admin_section(self):
        user = self.create_user()
        body = self.api_get('/permissions', {'section': 'admin'}, user=user).json()
        self.assertTrue(body['authenticated'])
        self.assertEqual(body['role'], 'user')
        self.assertTrue(body['permissions']['can_submit'])
        self.assertFalse(body['permissions']['can_moderate'])
        self.assertIn('profile', body['sections'])
        self.assertNotIn('admin', body['sections'])
        self.assertEqual(body['active_section'], 'access_denied')

    def test_admin(self):
        admin = self.create_admin()
        body = self.api_get('/permissions', {'section': 'pending'}, user=admin).json()
        self.assertTrue(body['permissions']['can_moderate'])
        self.assertIn('pending', body['sections'])
        self.assertEqual(body['active_section'], 'pending')

    def test_unknown_section_falls_back_to_home(self):
        body = self.api_get('/permissions', {'section': 'backstage'}).json()
        self.assertEqual(body['active_section'], 'home')


class ErrorShapeTests(ApiTestCase):
    def test_malformed_json_body(self):
        user = self.create_user()
        response = self.client.post('/v2/musical', 'not json', content_type='application/json',
                                    **self.headers(user))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()), {'errors'})
        self.assertIn('body', response.json()['errors'])

    def test_missing_token(self):
        response = self.api_post('/musical', {'name': 'Hamilton'})
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {'message': 'Authentication required'})
