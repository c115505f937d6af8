"""
Tests for boxes, box history, public box pages and labels
"""
from datetime import timedelta

from django.test import TestCase, SimpleTestCase
from django.utils import timezone
from rest_framework import status
from reactstock.boxes.label_generator import render_box_label, render_box_label_for
from reactstock.boxes.models import Box, BoxTransaction, generate_reference_id
from reactstock.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ReferenceIdTests(SimpleTestCase):

    def test_format(self):
        self.assertEqual(generate_reference_id('7', timestamp=1712345678), 'BOX-0007-345678')

    def test_long_box_number_not_truncated(self):
        self.assertEqual(generate_reference_id('12345', timestamp=1000000), 'BOX-12345-000000')

    def test_label_is_png(self):
        png = render_box_label(box_number='12', reference_id='BOX-0012-123456', location_name='Garage')
        self.assertTrue(png.startswith(b'\x89PNG'))

    def test_label_for_unsaved_box(self):
        box = Box(box_number='7', reference_id='', description='Spare fuses')
        self.assertTrue(render_box_label_for(box).startswith(b'\x89PNG'))


class BoxAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user(username='keeper')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.location = TestDataFactory.create_location(name='Garage', color='#123456')
        self.shelf = TestDataFactory.create_shelf(name='Top', location=self.location)

    def test_create_box_records_history(self):
        response = self.client.post('/api/v1/boxes/', {
            'box_number': '12',
            'description': 'Cables',
            'location_id': self.location.id,
            'shelf_id': '',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(response.data['reference_id'].startswith('BOX-0012-'))
        self.assertEqual(response.data['created_by'], 'keeper')
        self.assertIsNone(response.data['shelf_id'])
        self.assertEqual(response.data['location_name'], 'Garage')

        entry = BoxTransaction.objects.get(box_id=response.data['id'])
        self.assertEqual(entry.transaction_type, 'CREATE')
        self.assertEqual(entry.notes, 'Initial box creation')
        self.assertEqual(entry.user, self.user)

    def test_list_newest_first(self):
        older = TestDataFactory.create_box(box_number='1')
        Box.objects.filter(pk=older.pk).update(created_at=timezone.now() - timedelta(days=1))
        newer = TestDataFactory.create_box(box_number='2')
        response = self.client.get('/api/v1/boxes/')
        self.assertEqual([b['id'] for b in response.data], [newer.id, older.id])

    def test_update_records_history(self):
        box = TestDataFactory.create_box(box_number='3')
        response = self.client.patch(f'/api/v1/boxes/{box.id}/', {'shelf_id': self.shelf.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['shelf_name'], 'Top')
        self.assertTrue(BoxTransaction.objects.filter(box=box, transaction_type='UPDATE').exists())

    def test_reference_id_not_writable(self):
        box = TestDataFactory.create_box(box_number='3')
        original = box.reference_id
        self.client.patch(f'/api/v1/boxes/{box.id}/', {'reference_id': 'HACKED'}, format='json')
        box.refresh_from_db()
        self.assertEqual(box.reference_id, original)

    def test_detail_includes_transactions(self):
        box = TestDataFactory.create_box(box_number='4')
        item = TestDataFactory.create_item(name='Drill', box=box)
        BoxTransaction.objects.create(box=box, item=item, user=self.user, transaction_type='ADD_ITEM', created_by='keeper')
        response = self.client.get(f'/api/v1/boxes/{box.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['transactions'][0]['item_name'], 'Drill')
        self.assertEqual(response.data['transactions'][0]['user_username'], 'keeper')

    def test_detail_new_is_bad_request(self):
        response = self.client.get('/api/v1/boxes/new/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Invalid box ID')

    def test_detail_missing(self):
        response = self.client.get('/api/v1/boxes/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_delete_keeps_items(self):
        box = TestDataFactory.create_box()
        item = TestDataFactory.create_item(box=box)
        response = self.client.delete(f'/api/v1/boxes/{box.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertIsNone(item.box_id)

    def test_box_transactions_endpoint(self):
        box = TestDataFactory.create_box()
        BoxTransaction.objects.create(box=box, transaction_type='UPDATE', created_by='keeper')
        response = self.client.get(f'/api/v1/boxes/{box.id}/transactions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)

    def test_label_data_url(self):
        box = TestDataFactory.create_box(box_number='5', location=self.location)
        response = self.client.get(f'/api/v1/boxes/{box.id}/label/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['label'].startswith('data:image/png;base64,'))
        self.assertEqual(response.data['reference_id'], box.reference_id)

    def test_label_download(self):
        box = TestDataFactory.create_box(box_number='5')
        response = self.client.get(f'/api/v1/boxes/{box.id}/label/', {'download': 'true'})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response['Content-Type'], 'image/png')
        self.assertTrue(response.content.startswith(b'\x89PNG'))
        self.assertIn('attachment', response['Content-Disposition'])


class PublicBoxTests(TestCase):

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.location = TestDataFactory.create_location(name='Garage')
        self.box = TestDataFactory.create_box(box_number='9', location=self.location)

    def test_items_without_login(self):
        TestDataFactory.create_item(name='Zeta', box=self.box)
        TestDataFactory.create_item(name='Alpha', box=self.box)
        TestDataFactory.create_item(name='Gone', box=self.box, deleted=True)
        response = self.client.get(f'/api/v1/boxes/public/{self.box.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([i['name'] for i in response.data], ['Alpha', 'Zeta'])
        self.assertEqual(response.data[0]['location_name'], 'Garage')

    def test_invalid_ids(self):
        for raw in ('null', 'undefined', 'new'):
            response = self.client.get(f'/api/v1/boxes/public/{raw}/')
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, raw)

    def test_details(self):
        response = self.client.get(f'/api/v1/boxes/public/{self.box.id}/details/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['box_number'], '9')
        self.assertEqual(response.data['location_name'], 'Garage')
        self.assertNotIn('created_by', response.data)

    def test_details_missing(self):
        response = self.client.get('/api/v1/boxes/public/999999/details/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class BoxTransactionListTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.box_a = TestDataFactory.create_box()
        self.box_b = TestDataFactory.create_box()
        for _ in range(3):
            BoxTransaction.objects.create(box=self.box_a, transaction_type='UPDATE')
        BoxTransaction.objects.create(box=self.box_b, transaction_type='CREATE')

    def test_filters(self):
        response = self.client.get('/api/v1/transactions/', {'box_id': self.box_b.id})
        self.assertEqual(len(response.data), 1)
        response = self.client.get('/api/v1/transactions/', {'transaction_type': 'update'})
        self.assertEqual(len(response.data), 3)

    def test_limit(self):
        response = self.client.get('/api/v1/transactions/', {'limit': 2})
        self.assertEqual(len(response.data), 2)

    def test_bad_limit(self):
        response = self.client.get('/api/v1/transactions/', {'limit': 'many'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
