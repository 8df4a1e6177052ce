import tablib
from django.test import TestCase

from tracker.models import Actor, Casting, Musical, Performance, Production, Role, Theater
from tracker.resources import CastingResource, MusicalResource, ProductionResource, RoleResource


def load_csv(text):
    return tablib.Dataset().load(text, format='csv', headers=True)


class ResourceTests(TestCase):
    def setUp(self):
        self.hamilton = Musical.objects.create(name='Hamilton', composer='Lin-Manuel Miranda',
                                               lyricist='Lin-Manuel Miranda', approved=True)
        self.wicked = Musical.objects.create(name='Wicked', composer='Stephen Schwartz',
                                             lyricist='Stephen Schwartz', approved=True)

    def test_musical_export(self):
        dataset = MusicalResource().export()
        self.assertEqual(dataset.headers, ['id', 'name', 'composer', 'lyricist', 'approved', 'synopsis'])
        self.assertEqual(len(dataset), 2)
        self.assertEqual(dataset[0][1], 'Hamilton')

    def test_role_import_by_musical_name(self):
        dataset = load_csv('id,name,musical_name,description\n,Elphaba,Wicked,The witch of the west\n')
        result = RoleResource().import_data(dataset, dry_run=False)

        self.assertFalse(result.has_errors())
        role = Role.objects.get(name='Elphaba')
        self.assertEqual(role.musical, self.wicked)

    def test_casting_import_rejects_mismatched_role(self):
        theater = Theater.objects.create(name='Gershwin Theatre', city='New York')
        performance = Performance.objects.create(date='2024-05-01', musical=self.hamilton, theater=theater)
        elphaba = Role.objects.create(name='Elphaba', musical=self.wicked)
        actor = Actor.objects.create(name='Idina Menzel', email='idina@example.com')

        dataset = load_csv(f'id,actor,role,performance\n,{actor.id},{elphaba.id},{performance.id}\n')
        result = CastingResource().import_data(dataset, dry_run=False)

        self.assertTrue(result.has_errors())
        self.assertFalse(Casting.objects.exists())

    def test_production_import_rejects_reversed_dates(self):
        dataset = load_csv('id,musical_name,theater_name,start_date,end_date,poster_url\n'
                           ',Hamilton,,2016-01-01,2015-01-01,\n')
        result = ProductionResource().import_data(dataset, dry_run=False)

        self.assertTrue(result.has_errors())
        self.assertFalse(Production.objects.exists())
