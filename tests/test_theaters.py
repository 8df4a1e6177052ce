from tracker.models import Theater
from tests.helpers import ApiTestCase


class TheaterTests(ApiTestCase):
    def setUp(self):
        self.user = self.create_user()
        self.admin = self.create_admin()

    def test_submit_theater(self):
        response = self.api_post('/theater', {
            'name': 'Gershwin Theatre', 'city': 'New York', 'state': 'NY', 'zipCode': '10019', 'capacity': 1933,
        }, user=self.user)
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['zipCode'], '10019')
        self.assertEqual(body['address'], '')
        self.assertFalse(body['verified'])

    def test_required_fields_and_capacity(self):
        response = self.api_post('/theater', {'capacity': 0}, user=self.user)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'], {
            'name': 'is required',
            'city': 'is required',
            'capacity': 'must be a positive number',
        })

    def test_user_cannot_verify(self):
        response = self.api_post('/theater', {'name': 'X', 'city': 'Y', 'verified': True}, user=self.user)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.api_post('/theater/1/verify', user=self.user).status_code, 403)

    def test_unverified_theaters_hidden(self):
        theater = self.create_theater(verified=False)
        self.assertEqual(self.api_get(f'/theater/{theater.id}').status_code, 404)

        response = self.api_post(f'/theater/{theater.id}/verify', user=self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(self.api_get(f'/theater/{theater.id}').status_code, 200)

    def test_city_and_state_filters(self):
        self.create_theater('Gershwin Theatre')
        self.create_theater('Pantages Theatre', city='Los Angeles', state='CA')
        self.assertEqual(self.api_get('/theater', {'city': 'los angeles'}).json()['data'][0]['name'], 'Pantages Theatre')
        self.assertEqual(self.api_get('/theater', {'state': 'NY'}).json()['pagination']['total'], 1)

    def test_delete_theater_with_performances(self):
        theater = self.create_theater()
        self.create_performance(self.create_musical(), theater)
        self.assertEqual(self.api_delete(f'/theater/{theater.id}', user=self.admin).status_code, 409)
        self.assertTrue(Theater.objects.filter(id=theater.id).exists())

    def test_update_and_delete_require_admin(self):
        theater = self.create_theater()
        response = self.api_put(f'/theater/{theater.id}', {'city': 'Boston'}, user=self.user)
        self.assertEqual(response.status_code, 403)
        theater.refresh_from_db()
        self.assertEqual(theater.city, 'New York')

        self.assertEqual(self.api_delete(f'/theater/{theater.id}', user=self.user).status_code, 403)
        self.assertTrue(Theater.objects.filter(id=theater.id).exists())
