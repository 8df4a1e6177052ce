from tracker.models import Casting
from tests.helpers import ApiTestCase


class CastingTests(ApiTestCase):
    def setUp(self):
        self.owner = self.create_user('owner@example.com')
        self.other = self.create_user('other@example.com')
        self.admin = self.create_admin()

        self.hamilton = self.create_musical('Hamilton')
        self.wicked = self.create_musical('Wicked', composer='Stephen Schwartz', lyricist='Stephen Schwartz')
        theater = self.create_theater()

        self.angelica = self.create_role(self.hamilton, 'Angelica Schuyler')
        self.elphaba = self.create_role(self.wicked, 'Elphaba')
        self.actor = self.create_actor()
        self.performance = self.create_performance(self.hamilton, theater, created_by=self.owner)
        self.wicked_performance = self.create_performance(self.wicked, theater, created_by=self.owner)

    def casting(self, role=None, performance=None):
        return {
            'actorId': self.actor.id,
            'roleId': (role or self.angelica).id,
            'performanceId': (performance or self.performance).id,
        }

    def test_create_casting(self):
        response = self.api_post('/casting', self.casting(), user=self.owner)
        self.assertEqual(response.status_code, 201)
        body = response.json()
        self.assertEqual(body['roleName'], 'Angelica Schuyler')
        self.assertEqual(body['musicalId'], self.hamilton.id)
        self.assertEqual(body['performanceDate'], '2024-05-01')

    def test_role_must_belong_to_performed_musical(self):
        response = self.api_post('/casting', self.casting(role=self.elphaba), user=self.owner)
        self.assertEqual(response.status_code, 400)
        self.assertIn('roleId', response.json()['errors'])
        self.assertFalse(Casting.objects.exists())

    def test_duplicate_casting(self):
        self.assertEqual(self.api_post('/casting', self.casting(), user=self.owner).status_code, 201)
        response = self.api_post('/casting', self.casting(), user=self.owner)
        self.assertEqual(response.status_code, 409)
        self.assertEqual(Casting.objects.count(), 1)

    def test_missing_references(self):
        response = self.api_post('/casting', {'actorId': 999}, user=self.owner)
        self.assertEqual(response.json()['errors'], {
            'actorId': 'does not exist',
            'roleId': 'is required',
            'performanceId': 'is required',
        })

    def test_only_performance_owner_may_cast(self):
        self.assertEqual(self.api_post('/casting', self.casting(), user=self.other).status_code, 403)
        self.assertEqual(self.api_post('/casting', self.casting(), user=self.admin).status_code, 201)

    def test_update_checks_merged_row(self):
        casting_id = self.api_post('/casting', self.casting(), user=self.owner).json()['id']

        response = self.api_put(f'/casting/{casting_id}', {'performanceId': self.wicked_performance.id},
                                user=self.owner)
        self.assertEqual(response.status_code, 400)
        self.assertIn('roleId', response.json()['errors'])

        response = self.api_put(f'/casting/{casting_id}', {
            'performanceId': self.wicked_performance.id, 'roleId': self.elphaba.id,
        }, user=self.owner)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['musicalId'], self.wicked.id)

    def test_update_and_delete_permissions(self):
        casting_id = self.api_post('/casting', self.casting(), user=self.owner).json()['id']

        self.assertEqual(self.api_put(f'/casting/{casting_id}', {'actorId': self.actor.id}, user=self.other).status_code,
                         403)
        self.assertEqual(self.api_delete(f'/casting/{casting_id}', user=self.other).status_code, 403)
        self.assertEqual(self.api_delete(f'/casting/{casting_id}', user=self.owner).status_code, 200)
        self.assertEqual(self.api_delete(f'/casting/{casting_id}', user=self.owner).status_code, 404)

    def test_list_filters(self):
        self.api_post('/casting', self.casting(), user=self.owner)
        self.api_post('/casting', self.casting(role=self.elphaba, performance=self.wicked_performance), user=self.owner)

        self.assertEqual(self.api_get('/casting').json()['pagination']['total'], 2)
        body = self.api_get('/casting', {'performanceId': self.wicked_performance.id}).json()
        self.assertEqual([c['roleName'] for c in body['data']], ['Elphaba'])
        self.assertEqual(self.api_get('/casting', {'roleId': self.angelica.id}).json()['pagination']['total'], 1)
        self.assertEqual(self.api_get('/casting', {'actorId': self.actor.id}).json()['pagination']['total'], 2)
