"""
Test suite for the catalog module
Tests: item listing and search, duplicate names, caching, item writes and
box history, soft delete/restore, transfers, properties, groups and the
materialized view refresh
"""
from io import StringIO

from django.core.cache import cache
from django.core.management import call_command
from django.db import transaction
from django.test import TestCase, SimpleTestCase, TransactionTestCase
from rest_framework import status
from reactstock.boxes.models import BoxTransaction
from reactstock.catalog.filters import build_search_q
from reactstock.catalog.models import Item, ItemProperties
from reactstock.catalog.services import normalize_sort, process_duplicate_item_names, soft_delete_items
from reactstock.core.cache_utils import get_cache_version, ITEMS_LIST_NAMESPACE
from reactstock.core.models import AuditLog
from reactstock.core.test_utils import TestDataFactory, AuthenticatedAPIClient


class ItemHelperTests(SimpleTestCase):

    def test_search_id_prefix(self):
        self.assertIsNone(build_search_q('id:abc'))
        self.assertIsNone(build_search_q('id:' + '9' * 30))
        self.assertIsNotNone(build_search_q('id:12'))

    def test_search_ref_prefix_requires_value(self):
        self.assertIsNone(build_search_q('ref:'))

    def test_normalize_sort(self):
        self.assertEqual(normalize_sort('name', 'DESC'), ('name', 'desc'))
        self.assertEqual(normalize_sort('password', 'sideways'), ('id', 'asc'))

    def test_duplicate_names(self):
        rows = [
            {'id': 3, 'name': 'Cable', 'box_id': 1, 'box_number': '7'},
            {'id': 1, 'name': 'Cable', 'box_id': None, 'box_number': None},
            {'id': 2, 'name': 'Cable', 'box_id': None, 'box_number': None},
            {'id': 4, 'name': 'Drill', 'box_id': None, 'box_number': None},
        ]
        process_duplicate_item_names(rows)
        by_id = {row['id']: row for row in rows}
        self.assertEqual(by_id[1]['display_name'], 'Cable')
        self.assertEqual(by_id[2]['display_name'], 'Cable (ID: 2)')
        self.assertEqual(by_id[3]['display_name'], 'Cable (Box 7)')
        self.assertNotIn('display_name', by_id[4])


class ItemListTests(TestCase):
    """GET /items/ filters, search grammar, sorting and caching"""

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.location = TestDataFactory.create_location(name='Lab', color='#abcdef')
        self.box = TestDataFactory.create_box(box_number='11', location=self.location)
        self.resistor = TestDataFactory.create_item(name='Resistor 10k', quantity=100, box=self.box,
                                                    serial_number='SN-1', type='component')
        self.scope = TestDataFactory.create_item(name='Oscilloscope', quantity=1, description='Bench scope 4711',
                                                 ean_code='4006381333931', supplier='Rigol')
        self.deleted = TestDataFactory.create_item(name='Broken fan', deleted=True)

    def _names(self, params=None):
        response = self.client.get('/api/v1/items/', params or {})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        return [row['name'] for row in response.data]

    def test_requires_auth(self):
        self.client.logout()
        response = self.client.get('/api/v1/items/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_excludes_deleted_by_default(self):
        self.assertEqual(self._names(), ['Resistor 10k', 'Oscilloscope'])
        self.assertIn('Broken fan', self._names({'include_deleted': 'true'}))

    def test_joined_columns(self):
        response = self.client.get('/api/v1/items/', {'box_id': self.box.id})
        row = response.data[0]
        self.assertEqual(row['box_number'], '11')
        self.assertEqual(row['location_name'], 'Lab')
        self.assertEqual(row['location_color'], '#abcdef')

    def test_text_search(self):
        self.assertEqual(self._names({'search': 'rigol'}), ['Oscilloscope'])
        self.assertEqual(self._names({'search': 'COMPONENT'}), ['Resistor 10k'])

    def test_numeric_search_matches_description_and_codes(self):
        self.assertEqual(self._names({'search': '4711'}), ['Oscilloscope'])
        self.assertEqual(self._names({'search': '4006381333931'}), ['Oscilloscope'])

    def test_id_and_ref_search(self):
        self.assertEqual(self._names({'search': f'id:{self.scope.id}'}), ['Oscilloscope'])
        self.assertEqual(self._names({'search': 'ref:SN-1'}), ['Resistor 10k'])
        self.assertEqual(self._names({'search': 'id:abc'}), [])

    def test_sorting(self):
        self.assertEqual(self._names({'sort': 'quantity', 'sort_direction': 'desc'}),
                         ['Resistor 10k', 'Oscilloscope'])
        self.assertEqual(self._names({'sort': 'name'}), ['Oscilloscope', 'Resistor 10k'])
        # Unknown columns fall back to id
        self.assertEqual(self._names({'sort': 'drop table'}), ['Resistor 10k', 'Oscilloscope'])

    def test_invalid_filter_value(self):
        response = self.client.get('/api/v1/items/', {'box_id': 'abc'})
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_pagination(self):
        response = self.client.get('/api/v1/items/', {'page': 2, 'page_size': 1})
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(response.data['total_pages'], 2)
        self.assertEqual(response.data['results'][0]['name'], 'Oscilloscope')

    def test_duplicate_display_names(self):
        TestDataFactory.create_item(name='Oscilloscope', box=self.box)
        response = self.client.get('/api/v1/items/', {'search': 'Oscilloscope'})
        display = sorted(row['display_name'] for row in response.data)
        self.assertEqual(display, ['Oscilloscope', 'Oscilloscope (Box 11)'])

    def test_cache_invalidated_by_writes(self):
        self.assertEqual(len(self._names()), 2)
        with self.captureOnCommitCallbacks(execute=True):
            TestDataFactory.create_item(name='Capacitor')
        self.assertEqual(len(self._names()), 3)
        Item.objects.filter(pk=self.scope.pk).update(name='Renamed')
        # Queryset updates bypass signals; the bulk endpoints bump explicitly
        with self.captureOnCommitCallbacks(execute=True):
            self.client.post('/api/v1/items/bulk-delete/', {'item_ids': [self.resistor.id]}, format='json')
        self.assertNotIn('Resistor 10k', self._names())


class ItemWriteTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user(username='writer')
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.box_a = TestDataFactory.create_box(box_number='1')
        self.box_b = TestDataFactory.create_box(box_number='2')

    def test_create_item_with_box(self):
        response = self.client.post('/api/v1/items/', {
            'name': 'Multimeter',
            'quantity': 2,
            'box_id': self.box_a.id,
            'serial_number': '',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['last_transaction_type'], 'CREATE')
        self.assertIsNone(response.data['serial_number'])
        entry = BoxTransaction.objects.get(box=self.box_a)
        self.assertEqual(entry.transaction_type, 'ADD_ITEM')
        self.assertEqual(entry.created_by, 'writer')
        self.assertTrue(AuditLog.objects.filter(model_name='Item', action='create').exists())

    def test_create_requires_name(self):
        response = self.client.post('/api/v1/items/', {'quantity': 1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_negative_quantity_rejected(self):
        response = self.client.post('/api/v1/items/', {'name': 'X', 'quantity': -1}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_empty_quantity_is_zero(self):
        response = self.client.post('/api/v1/items/', {'name': 'X', 'quantity': ''}, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['quantity'], 0)

    def test_update_moves_between_boxes(self):
        item = TestDataFactory.create_item(name='Saw', box=self.box_a)
        response = self.client.put(f'/api/v1/items/{item.id}/', {'box_id': self.box_b.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(BoxTransaction.objects.filter(box=self.box_a, transaction_type='REMOVE_ITEM').exists())
        self.assertTrue(BoxTransaction.objects.filter(box=self.box_b, transaction_type='ADD_ITEM').exists())

    def test_item_cannot_be_own_parent(self):
        item = TestDataFactory.create_item()
        response = self.client.patch(f'/api/v1/items/{item.id}/', {'parent_item_id': item.id}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_detail_includes_box_and_properties(self):
        item = TestDataFactory.create_item(box=self.box_a)
        TestDataFactory.create_item_properties(item, type='tool')
        response = self.client.get(f'/api/v1/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['box']['box_number'], '1')
        self.assertEqual(response.data['properties']['type'], 'tool')

    def test_soft_delete_and_restore(self):
        item = TestDataFactory.create_item()
        response = self.client.delete(f'/api/v1/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertTrue(item.is_deleted)
        self.assertEqual(item.last_transaction_type, 'DELETE')

        response = self.client.delete(f'/api/v1/items/{item.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

        response = self.client.get('/api/v1/items/deleted/')
        self.assertEqual([row['id'] for row in response.data], [item.id])

        response = self.client.post(f'/api/v1/items/{item.id}/restore/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        item.refresh_from_db()
        self.assertFalse(item.is_deleted)
        self.assertEqual(item.last_transaction_type, 'RESTORE')

    def test_restore_active_item_not_found(self):
        item = TestDataFactory.create_item()
        response = self.client.post(f'/api/v1/items/{item.id}/restore/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_bulk_delete_validation(self):
        response = self.client.post('/api/v1/items/bulk-delete/', {'item_ids': []}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        response = self.client.post('/api/v1/items/bulk-delete/', {'item_ids': ['x']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_delete(self):
        items = [TestDataFactory.create_item() for _ in range(3)]
        response = self.client.post('/api/v1/items/bulk-delete/', {
            'item_ids': [items[0].id, items[1].id],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(Item.objects.active().count(), 1)

    def test_bulk_delete_bumps_cache_only_on_commit(self):
        item = TestDataFactory.create_item()
        before = get_cache_version(ITEMS_LIST_NAMESPACE)
        with self.captureOnCommitCallbacks() as callbacks:
            soft_delete_items([item.id])
        self.assertEqual(get_cache_version(ITEMS_LIST_NAMESPACE), before)
        for callback in callbacks:
            callback()
        self.assertGreater(get_cache_version(ITEMS_LIST_NAMESPACE), before)

    def test_permanent_delete_admin_only(self):
        item = TestDataFactory.create_item()
        TestDataFactory.create_item_properties(item)
        response = self.client.delete(f'/api/v1/items/{item.id}/permanent/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/items/{item.id}/permanent/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Item.objects.filter(pk=item.id).exists())
        self.assertFalse(ItemProperties.objects.filter(item_id=item.id).exists())

    def test_bulk_permanent_delete(self):
        items = [TestDataFactory.create_item(deleted=True) for _ in range(2)]
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/items/bulk-permanent-delete/', {
            'item_ids': [i.id for i in items],
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(Item.objects.count(), 0)


class ItemTransferTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.source = TestDataFactory.create_box(box_number='1')
        self.destination = TestDataFactory.create_box(box_number='2')
        self.item = TestDataFactory.create_item(name='Hammer', box=self.source)

    def test_transfer(self):
        response = self.client.post(f'/api/v1/items/{self.item.id}/transfer/', {
            'destination_box_id': self.destination.id,
            'notes': 'Reorganised',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.item.refresh_from_db()
        self.assertEqual(self.item.box_id, self.destination.id)
        self.assertEqual(self.item.last_transaction_type, 'TRANSFER')
        out = BoxTransaction.objects.get(box=self.source)
        self.assertEqual(out.transaction_type, 'TRANSFER_OUT')
        self.assertEqual(out.notes, 'Reorganised')
        self.assertTrue(BoxTransaction.objects.filter(box=self.destination, transaction_type='TRANSFER_IN').exists())

    def test_transfer_unboxed_item_only_records_in(self):
        item = TestDataFactory.create_item()
        self.client.post(f'/api/v1/items/{item.id}/transfer/', {
            'destination_box_id': self.destination.id,
        }, format='json')
        self.assertFalse(BoxTransaction.objects.filter(transaction_type='TRANSFER_OUT').exists())

    def test_missing_destination(self):
        response = self.client.post(f'/api/v1/items/{self.item.id}/transfer/', {
            'destination_box_id': 999999,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.post(f'/api/v1/items/{self.item.id}/transfer/', {
            'destination_box_id': 'null',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_bulk_transfer(self):
        other = TestDataFactory.create_item(box=self.source)
        response = self.client.post('/api/v1/items/bulk-transfer/', {
            'item_ids': [self.item.id, other.id],
            'destination_box_id': self.destination.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['count'], 2)
        self.assertEqual(Item.objects.filter(box=self.destination).count(), 2)


class ItemPropertiesTests(TestCase):

    def setUp(self):
        cache.clear()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)
        self.item = TestDataFactory.create_item()

    def test_defaults_when_missing(self):
        response = self.client.get(f'/api/v1/items/{self.item.id}/properties/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['item_id'], self.item.id)
        self.assertEqual(response.data['additional_data'], {})

    def test_upsert_mirrors_onto_item(self):
        response = self.client.post(f'/api/v1/items/{self.item.id}/properties/', {
            'type': 'laptop',
            'serial_number': 'ABC123',
            'additional_data': {'ram': '16GB'},
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.item.refresh_from_db()
        self.assertEqual(self.item.type, 'laptop')
        self.assertEqual(self.item.serial_number, 'ABC123')

        self.client.post(f'/api/v1/items/{self.item.id}/properties/', {'ean_code': '123'}, format='json')
        properties = ItemProperties.objects.get(item=self.item)
        self.assertEqual(properties.type, 'laptop')
        self.assertEqual(properties.ean_code, '123')
        self.assertEqual(properties.additional_data, {'ram': '16GB'})


class ItemGroupTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_item_count_and_delete_guard(self):
        group = TestDataFactory.create_group(name='Kit')
        TestDataFactory.create_item(group=group)
        response = self.client.get('/api/v1/groups/')
        self.assertEqual(response.data[0]['item_count'], 1)
        response = self.client.delete(f'/api/v1/groups/{group.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_delete_empty_group(self):
        group = TestDataFactory.create_group()
        response = self.client.delete(f'/api/v1/groups/{group.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class RefreshViewTests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.admin = TestDataFactory.create_admin()
        self.client = AuthenticatedAPIClient()
        TestDataFactory.create_item()
        TestDataFactory.create_item(deleted=True)

    def test_admin_only(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/database/refresh-view/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_refresh_reports_item_count(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/database/refresh-view/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response.data['success'])
        self.assertEqual(response.data['itemCount'], 1)
        self.assertTrue(response.data['refreshTime'].endswith('ms'))

    def test_management_command(self):
        out = StringIO()
        call_command('refresh_items_view', stdout=out)
        self.assertIn('1 active items', out.getvalue())


class ItemCacheCommitTests(TransactionTestCase):
    """The item list cache version only moves once a write has committed"""
    serialized_rollback = True

    def setUp(self):
        cache.clear()

    def test_version_bumped_after_commit(self):
        before = get_cache_version(ITEMS_LIST_NAMESPACE)
        with transaction.atomic():
            TestDataFactory.create_item(name='Fuse')
            self.assertEqual(get_cache_version(ITEMS_LIST_NAMESPACE), before)
        self.assertGreater(get_cache_version(ITEMS_LIST_NAMESPACE), before)

    def test_rollback_keeps_version(self):
        before = get_cache_version(ITEMS_LIST_NAMESPACE)
        with self.assertRaises(RuntimeError):
            with transaction.atomic():
                TestDataFactory.create_item(name='Fuse')
                raise RuntimeError('abort')
        self.assertEqual(get_cache_version(ITEMS_LIST_NAMESPACE), before)
