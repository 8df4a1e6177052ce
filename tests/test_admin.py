import datetime

from django.contrib.auth.models import User
from django.core.exceptions import ValidationError

from tracker.models import Casting, Production
from tests.helpers import ApiTestCase


class AdminFormTests(ApiTestCase):
    def setUp(self):
        self.superuser = User.objects.create_superuser('root', 'root@example.com', 'password123')
        self.client.force_login(self.superuser)

        self.hamilton = self.create_musical('Hamilton')
        self.wicked = self.create_musical('Wicked', composer='Stephen Schwartz', lyricist='Stephen Schwartz')
        self.theater = self.create_theater()
        self.actor = self.create_actor()
        self.angelica = self.create_role(self.hamilton)
        self.elphaba = self.create_role(self.wicked, 'Elphaba')
        self.performance = self.create_performance(self.hamilton, self.theater)

    def test_casting_add_rejects_role_of_other_musical(self):
        response = self.client.post('/admin/tracker/casting/add/', {
            'actor': self.actor.id,
            'role': self.elphaba.id,
            'performance': self.performance.id,
        })
        self.assertEqual(response.status_code, 200)
        self.assertIn('role', response.context['adminform'].form.errors)
        self.assertFalse(Casting.objects.exists())

    def test_casting_add_accepts_matching_role(self):
        response = self.client.post('/admin/tracker/casting/add/', {
            'actor': self.actor.id,
            'role': self.angelica.id,
            'performance': self.performance.id,
        })
        self.assertEqual(response.status_code, 302)
        self.assertEqual(Casting.objects.get().role, self.angelica)

    def test_production_add_rejects_reversed_dates(self):
        response = self.client.post('/admin/tracker/production/add/', {
            'musical': self.hamilton.id,
            'start_date': '2024-06-01',
            'end_date': '2024-05-01',
            'poster_url': '',
        })
        self.assertEqual(response.status_code, 200)
        self.assertIn('end_date', response.context['adminform'].form.errors)
        self.assertFalse(Production.objects.exists())


class ModelCleanTests(ApiTestCase):
    def test_casting_clean(self):
        hamilton = self.create_musical('Hamilton')
        wicked = self.create_musical('Wicked')
        performance = self.create_performance(hamilton, self.create_theater())
        casting = Casting(actor=self.create_actor(), role=self.create_role(wicked, 'Elphaba'),
                          performance=performance)

        with self.assertRaises(ValidationError) as ctx:
            casting.full_clean()
        self.assertIn('role', ctx.exception.message_dict)

    def test_production_clean(self):
        production = Production(musical=self.create_musical(), start_date=datetime.date(2024, 6, 1),
                                end_date=datetime.date(2024, 5, 1))

        with self.assertRaises(ValidationError) as ctx:
            production.full_clean()
        self.assertIn('end_date', ctx.exception.message_dict)

        production.end_date = datetime.date(2024, 6, 1)
        production.full_clean()
