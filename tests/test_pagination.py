from tracker.models import Musical
from tests.helpers import ApiTestCase


class PaginationTests(ApiTestCase):
    def setUp(self):
        Musical.objects.bulk_create([
            Musical(name=f'Musical {i:02d}', composer='Composer', lyricist='Lyricist', approved=True)
            for i in range(45)
        ])

    def test_total_pages_rounds_up(self):
        body = self.api_get('/musical', {'limit': 20}).json()
        self.assertEqual(body['pagination'], {'page': 1, 'limit': 20, 'total': 45, 'totalPages': 3})
        self.assertEqual(len(body['data']), 20)

        last = self.api_get('/musical', {'limit': 20, 'page': 3}).json()
        self.assertEqual(len(last['data']), 5)

    def test_pages_concatenate_to_full_list(self):
        seen = []
        for page in range(1, 4):
            seen += [m['id'] for m in self.api_get('/musical', {'limit': 20, 'page': page}).json()['data']]

        self.assertEqual(seen, list(Musical.objects.order_by('id').values_list('id', flat=True)))

    def test_page_past_the_end_is_empty(self):
        body = self.api_get('/musical', {'page': 10}).json()
        self.assertEqual(body['data'], [])
        self.assertEqual(body['pagination']['total'], 45)

    def test_huge_page_number(self):
        response = self.api_get('/musical', {'page': 10 ** 19})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body['data'], [])
        self.assertEqual(body['pagination']['page'], 10 ** 19)
        self.assertEqual(body['pagination']['totalPages'], 3)

    def test_invalid_parameters(self):
        response = self.api_get('/musical', {'page': 0, 'limit': 101})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(set(response.json()['errors']), {'page', 'limit'})

    def test_empty_result_has_zero_pages(self):
        body = self.api_get('/musical', {'search': 'nothing matches'}).json()
        self.assertEqual(body['pagination'], {'page': 1, 'limit': 20, 'total': 0, 'totalPages': 0})
