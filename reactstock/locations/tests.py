from django.test import TestCase
from rest_framework import status
from reactstock.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from reactstock.locations.models import Location, Shelf


class LocationAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_list_is_public(self):
        TestDataFactory.create_location(name='Basement')
        response = self.client.get('/api/v1/locations/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data[0]['name'], 'Basement')

    def test_create_requires_auth(self):
        response = self.client.post('/api/v1/locations/', {'name': 'Attic'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_create_update_delete(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/locations/', {'name': 'Attic', 'color': '#00ff00'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        location_id = response.data['id']

        response = self.client.patch(f'/api/v1/locations/{location_id}/', {'color': '#0000ff'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['color'], '#0000ff')

        response = self.client.delete(f'/api/v1/locations/{location_id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(Location.objects.filter(pk=location_id).exists())

    def test_missing_location(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/locations/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class ShelfAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.location = TestDataFactory.create_location(name='Garage')

    def test_filter_by_location(self):
        TestDataFactory.create_shelf(name='A1', location=self.location)
        TestDataFactory.create_shelf(name='Loose')
        response = self.client.get('/api/v1/shelves/', {'location_id': self.location.id})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([s['name'] for s in response.data], ['A1'])
        self.assertEqual(response.data[0]['location_name'], 'Garage')

    def test_invalid_location_filter(self):
        response = self.client.get('/api/v1/shelves/', {'location_id': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_empty_location_id_means_null(self):
        response = self.client.post('/api/v1/shelves/', {'name': 'B2', 'location_id': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertIsNone(Shelf.objects.get(name='B2').location_id)

    def test_deleting_location_keeps_shelves(self):
        shelf = TestDataFactory.create_shelf(location=self.location)
        self.location.delete()
        shelf.refresh_from_db()
        self.assertIsNone(shelf.location_id)


class ColorAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_create_and_list(self):
        response = self.client.post('/api/v1/colors/', {'name': 'Red', 'value': '#ff0000'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        response = self.client.get('/api/v1/colors/')
        self.assertEqual(len(response.data), 1)

    def test_value_required(self):
        response = self.client.post('/api/v1/colors/', {'name': 'Red'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
