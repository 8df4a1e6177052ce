from tracker.models import Casting, Role
from tests.helpers import ApiTestCase


class RoleTests(ApiTestCase):
    def setUp(self):
        self.user = self.create_user()
        self.admin = self.create_admin()
        self.hamilton = self.create_musical('Hamilton')
        self.wicked = self.create_musical('Wicked', composer='Stephen Schwartz', lyricist='Stephen Schwartz')

    def test_create_role(self):
        response = self.api_post('/role', {'name': 'Eliza Hamilton', 'musicalId': self.hamilton.id}, user=self.user)
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()['musicalName'], 'Hamilton')

    def test_create_role_validation(self):
        response = self.api_post('/role', {}, user=self.user)
        self.assertEqual(response.json()['errors'], {'name': 'is required', 'musicalId': 'is required'})

        response = self.api_post('/role', {'name': 'Eliza', 'musicalId': 999}, user=self.user)
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()['errors'], {'musicalId': 'does not exist'})

    def test_roles_of_unapproved_musicals_hidden(self):
        hidden = self.create_musical('Hadestown', approved=False)
        self.create_role(hidden, 'Orpheus')
        self.create_role(self.hamilton, 'Aaron Burr')

        self.assertEqual([r['name'] for r in self.api_get('/role').json()['data']], ['Aaron Burr'])
        self.assertEqual(self.api_get('/role', user=self.admin).json()['pagination']['total'], 2)
        self.assertEqual(self.api_get('/role', {'musicalId': hidden.id}).json()['data'], [])

    def test_cannot_move_cast_role_to_other_musical(self):
        role = self.create_role(self.hamilton, 'Eliza Hamilton')
        performance = self.create_performance(self.hamilton, self.create_theater(), created_by=self.user)
        Casting.objects.create(actor=self.create_actor(), role=role, performance=performance)

        response = self.api_put(f'/role/{role.id}', {'musicalId': self.wicked.id}, user=self.admin)
        self.assertEqual(response.status_code, 400)
        self.assertIn('musicalId', response.json()['errors'])

        self.assertEqual(self.api_delete(f'/role/{role.id}', user=self.admin).status_code, 409)

    def test_update_and_delete_uncast_role(self):
        role = self.create_role(self.hamilton, 'Eliza')
        response = self.api_put(f'/role/{role.id}', {'musicalId': self.wicked.id, 'name': 'Glinda'}, user=self.admin)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()['musicalId'], self.wicked.id)

        self.assertEqual(self.api_put(f'/role/{role.id}', {'name': 'Nessarose'}, user=self.user).status_code, 403)
        role.refresh_from_db()
        self.assertEqual(role.name, 'Glinda')
        self.assertEqual(self.api_delete(f'/role/{role.id}', user=self.user).status_code, 403)
        self.assertTrue(Role.objects.filter(id=role.id).exists())
        self.assertEqual(self.api_delete(f'/role/{role.id}', user=self.admin).status_code, 200)
        self.assertFalse(Role.objects.exists())
