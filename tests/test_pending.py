from tests.helpers import ApiTestCase


class PendingTests(ApiTestCase):
    def setUp(self):
        self.admin = self.create_admin()
        self.user = self.create_user()
        self.create_musical('Hamilton')
        self.create_musical('Hadestown', approved=False)
        self.create_actor('Approved Actor')
        self.create_actor('New Actor', approved=False)
        self.create_actor('Another New Actor', approved=False)
        self.create_theater(verified=False)

    def test_counts(self):
        response = self.api_get('/pending', user=self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {'musicals': 1, 'actors': 2, 'theaters': 1, 'total': 4})

    def test_lists(self):
        body = self.api_get('/pending/musicals', user=self.admin).json()
        self.assertEqual([m['name'] for m in body['data']], ['Hadestown'])

        body = self.api_get('/pending/actors', {'limit': 1}, user=self.admin).json()
        self.assertEqual(body['pagination'], {'page': 1, 'limit': 1, 'total': 2, 'totalPages': 2})

        body = self.api_get('/pending/theaters', user=self.admin).json()
        self.assertFalse(body['data'][0]['verified'])

    def test_admin_only(self):
        for path in ('/pending', '/pending/musicals', '/pending/actors', '/pending/theaters'):
            self.assertEqual(self.api_get(path, user=self.user).status_code, 403)
            self.assertEqual(self.api_get(path).status_code, 401)
