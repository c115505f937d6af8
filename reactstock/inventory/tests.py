"""
Tests for item transaction recording, filtering and customer summaries
"""
from datetime import timedelta

from django.test import TestCase, SimpleTestCase
from django.utils import timezone
from rest_framework import status
from reactstock.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from reactstock.inventory import constants
from reactstock.inventory.models import ItemTransaction


class TransactionCategoryTests(SimpleTestCase):

    def test_deletion_wins(self):
        self.assertEqual(constants.transaction_category('STOCK_IN', is_deletion=True), 'delete')
        self.assertEqual(constants.transaction_category('SOFT_DELETE'), 'delete')
        self.assertEqual(constants.transaction_category('bulk_soft_delete'), 'delete')

    def test_known_types(self):
        self.assertEqual(constants.transaction_category('STOCK_IN'), 'in')
        self.assertEqual(constants.transaction_category('NEW_ITEM'), 'in')
        self.assertEqual(constants.transaction_category('STOCK_OUT'), 'out')
        self.assertEqual(constants.transaction_category('TRANSFER_IN'), 'transfer')
        self.assertEqual(constants.transaction_category('BULK_TRANSFER'), 'transfer')
        self.assertEqual(constants.transaction_category('UPDATE'), 'update')
        self.assertEqual(constants.transaction_category('RESTORE'), 'restore')
        self.assertEqual(constants.transaction_category('SOMETHING_ELSE'), 'unknown')
        self.assertEqual(constants.transaction_category(None), 'unknown')

    def test_quantity_update_direction(self):
        self.assertEqual(constants.transaction_category('QUANTITY_UPDATE', details='Quantity increased by 3'), 'in')
        self.assertEqual(constants.transaction_category('QUANTITY_UPDATE', details='Quantity decreased by 3'), 'out')

    def test_types_for_category(self):
        self.assertEqual(constants.types_for_category('in'), ['STOCK_IN', 'NEW_ITEM'])
        self.assertEqual(constants.types_for_category('custom'), ['CUSTOM'])
        self.assertEqual(constants.types_for_category(''), [])

    def test_matches_category(self):
        self.assertTrue(constants.matches_category('DELETE', False, 'delete'))
        self.assertTrue(constants.matches_category('STOCK_IN', True, 'delete'))
        self.assertFalse(constants.matches_category('STOCK_IN', True, 'in'))
        self.assertTrue(constants.matches_category('stock_in', False, 'in'))


class RecordTransactionTests(TestCase):
    """POST /items/transactions/"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='stocker')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.item = TestDataFactory.create_item(name='Widget', quantity=5)

    def test_requires_type(self):
        response = self.client.post('/api/v1/items/transactions/', {
            'item_id': self.item.id, 'item_name': 'Widget', 'quantity': 1,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['error'], 'Missing transaction type')

    def test_accepts_type_alias(self):
        response = self.client.post('/api/v1/items/transactions/', {
            'item_id': self.item.id, 'item_name': 'Widget', 'type': 'STOCK_IN', 'quantity': 3,
            'previous_quantity': 5, 'new_quantity': 8,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['transaction_type'], 'STOCK_IN')
        self.assertEqual(response.data['type'], 'in')
        self.assertEqual(response.data['created_by'], 'stocker')
        self.assertFalse(response.data['is_deletion'])

    def test_box_id_strings(self):
        box = TestDataFactory.create_box(box_number='42')
        response = self.client.post('/api/v1/items/transactions/', {
            'item_id': str(self.item.id), 'item_name': 'Widget', 'transaction_type': 'TRANSFER',
            'box_id': str(box.id), 'previous_box_id': 'null', 'new_box_id': '',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['box_id'], box.id)
        self.assertIsNone(response.data['previous_box_id'])
        self.assertIsNone(response.data['new_box_id'])
        entry = ItemTransaction.objects.get(pk=response.data['id'])
        self.assertEqual(entry.box_id, box.id)

    def test_invalid_box_id(self):
        response = self.client.post('/api/v1/items/transactions/', {
            'item_name': 'Widget', 'transaction_type': 'TRANSFER', 'box_id': 'shelf-3',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn('box_id', response.data)

    def test_deletion_type_forces_flag(self):
        response = self.client.post('/api/v1/items/transactions/', {
            'item_id': self.item.id, 'item_name': 'Widget', 'transaction_type': 'SOFT_DELETE',
            'is_deletion': False,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertTrue(ItemTransaction.objects.get(pk=response.data['id']).is_deletion)
        self.assertEqual(response.data['type'], 'delete')

    def test_client_timestamp_kept(self):
        when = timezone.now() - timedelta(days=3)
        response = self.client.post('/api/v1/items/transactions/', {
            'item_name': 'Widget', 'transaction_type': 'STOCK_OUT', 'created_at': when.isoformat(),
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        entry = ItemTransaction.objects.get(pk=response.data['id'])
        self.assertEqual(entry.created_at, when)
        self.assertEqual(entry.quantity, 0)

    def test_item_name_required(self):
        response = self.client.post('/api/v1/items/transactions/', {
            'transaction_type': 'STOCK_IN',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)


class TransactionListTests(TestCase):
    """GET /items/transactions/ filters"""

    def setUp(self):
        self.user = TestDataFactory.create_user(username='viewer')
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.box = TestDataFactory.create_box(box_number='8')
        self.customer = TestDataFactory.create_customer(name='ACME')
        self.item = TestDataFactory.create_item(name='Bolt')
        now = timezone.now()
        self.stock_in = TestDataFactory.create_item_transaction(
            self.item, 'STOCK_IN', 10, user=self.user, box_id=self.box.id, created_at=now - timedelta(days=5))
        self.new_item = TestDataFactory.create_item_transaction(
            self.item, 'NEW_ITEM', 1, created_at=now - timedelta(days=4))
        self.stock_out = TestDataFactory.create_item_transaction(
            self.item, 'STOCK_OUT', 2, customer_id=self.customer.id, created_at=now - timedelta(days=2))
        self.transfer = TestDataFactory.create_item_transaction(
            self.item, 'TRANSFER', 1, created_at=now - timedelta(days=1))
        self.deleted = TestDataFactory.create_item_transaction(
            self.item, 'SOFT_DELETE', 0, created_at=now)
        self.flagged = TestDataFactory.create_item_transaction(
            self.item, 'UPDATE', 0, is_deletion=True, created_at=now - timedelta(hours=1))

    def _ids(self, params=None):
        response = self.client.get('/api/v1/items/transactions/', params or {})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return [row['id'] for row in response.data]

    def test_newest_first(self):
        ids = self._ids()
        self.assertEqual(ids[0], self.deleted.id)
        self.assertEqual(ids[-1], self.stock_in.id)

    def test_category_filters(self):
        self.assertEqual(self._ids({'type': 'in'}), [self.new_item.id, self.stock_in.id])
        self.assertEqual(self._ids({'type': 'out'}), [self.stock_out.id])
        self.assertEqual(self._ids({'type': 'transfer'}), [self.transfer.id])
        self.assertEqual(self._ids({'type': 'delete'}), [self.deleted.id, self.flagged.id])
        # Flagged deletions never show up as updates
        self.assertEqual(self._ids({'type': 'update'}), [])

    def test_transaction_type_list(self):
        response = self.client.get('/api/v1/items/transactions/?transaction_type=STOCK_IN&transaction_type=STOCK_OUT')
        self.assertEqual([row['id'] for row in response.data], [self.stock_out.id, self.stock_in.id])
        self.assertEqual(self._ids({'transaction_type': 'transfer'}), [self.transfer.id])

    def test_is_deletion_filter(self):
        self.assertEqual(self._ids({'is_deletion': 'true'}), [self.deleted.id, self.flagged.id])
        self.assertEqual(len(self._ids({'is_deletion': 'false'})), 4)

    def test_box_and_customer(self):
        self.assertEqual(self._ids({'box_id': self.box.id}), [self.stock_in.id])
        self.assertEqual(self._ids({'customer_id': self.customer.id}), [self.stock_out.id])

    def test_date_range(self):
        start = (timezone.now() - timedelta(days=4, hours=1)).isoformat()
        end = (timezone.now() - timedelta(days=1, hours=12)).isoformat()
        self.assertEqual(self._ids({'start_date': start, 'end_date': end}), [self.stock_out.id, self.new_item.id])

    def test_limit_offset(self):
        self.assertEqual(self._ids({'limit': 2}), [self.deleted.id, self.flagged.id])
        self.assertEqual(self._ids({'limit': 1, 'offset': 2}), [self.transfer.id])

    def test_bad_limit(self):
        response = self.client.get('/api/v1/items/transactions/', {'limit': 'ten'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_joined_names_and_category(self):
        response = self.client.get('/api/v1/items/transactions/', {'box_id': self.box.id})
        row = response.data[0]
        self.assertEqual(row['box_number'], '8')
        self.assertEqual(row['user_name'], 'viewer')
        self.assertEqual(row['type'], 'in')
        response = self.client.get('/api/v1/items/transactions/', {'customer_id': self.customer.id})
        self.assertEqual(response.data[0]['customer_name'], 'ACME')

    def test_normalized_deletion_flag(self):
        response = self.client.get('/api/v1/items/transactions/', {'type': 'delete'})
        self.assertTrue(all(row['is_deletion'] for row in response.data))
        self.assertTrue(all(row['type'] == 'delete' for row in response.data))

    def test_per_item_endpoints(self):
        other = TestDataFactory.create_item()
        TestDataFactory.create_item_transaction(other, 'STOCK_IN', 1)
        response = self.client.get(f'/api/v1/items/transactions/item/{self.item.id}/')
        self.assertEqual(len(response.data), 6)
        response = self.client.get(f'/api/v1/items/{other.id}/transactions/')
        self.assertEqual(len(response.data), 1)

    def test_history_survives_item_deletion(self):
        self.item.delete()
        response = self.client.get('/api/v1/items/transactions/', {'item_id': self.stock_in.item_id})
        self.assertEqual(len(response.data), 6)
        self.assertEqual(response.data[0]['item_name'], 'Bolt')


class CustomerSummaryTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.customer = TestDataFactory.create_customer(name='Workshop')
        self.paper = TestDataFactory.create_item(name='Paper')
        self.ink = TestDataFactory.create_item(name='Ink')
        for quantity in (3, 4):
            TestDataFactory.create_item_transaction(self.paper, 'STOCK_OUT', quantity, customer_id=self.customer.id)
        TestDataFactory.create_item_transaction(self.ink, 'STOCK_OUT', 5, customer_id=self.customer.id)
        TestDataFactory.create_item_transaction(self.ink, 'STOCK_OUT', 50)

    def test_summary(self):
        response = self.client.get(f'/api/v1/items/transactions/customer/{self.customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        summary = response.data['summary']
        self.assertEqual(summary['totalItems'], 3)
        self.assertEqual(summary['totalQuantity'], 12)
        self.assertEqual(summary['uniqueItems'], 2)
        self.assertEqual(summary['mostConsumedItem'], {
            'id': self.paper.id, 'name': 'Paper', 'quantity': 7, 'count': 2,
        })

    def test_empty_summary(self):
        other = TestDataFactory.create_customer()
        response = self.client.get(f'/api/v1/customers/{other.id}/transactions/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['transactions'], [])
        self.assertIsNone(response.data['summary']['mostConsumedItem'])
        self.assertEqual(response.data['summary']['totalQuantity'], 0)
