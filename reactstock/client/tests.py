"""
Tests for the API client, the local store, the transaction dual-write and
stock history reconciliation. The API is mocked; no server is needed.
"""
import importlib
import tempfile
from pathlib import Path
from unittest import mock

import requests
from django.test import SimpleTestCase

from reactstock.inventory.constants import LOCAL_TRANSACTIONS_KEY
from reactstock.client import history, stock
from reactstock.client.api import ApiClient, ApiError
from reactstock.client.local_store import LocalStorage
from reactstock.client.recorder import TransactionRecorder


def _response(status_code=200, payload=None):
    response = mock.Mock()
    response.status_code = status_code
    response.content = b'{}' if payload is not None else b''
    response.json.return_value = payload
    response.text = str(payload)
    return response


class ClientTestCase(SimpleTestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.store = LocalStorage(Path(tmp.name) / 'store.json')
        self.api = mock.MagicMock(spec=ApiClient)
        self.api.record_transaction.return_value = {'id': 100}
        self.recorder = TransactionRecorder(self.api, self.store)

    def recorded(self):
        return self.api.record_transaction.call_args[0][0]


class ApiClientTests(SimpleTestCase):

    def setUp(self):
        self.session = mock.MagicMock()
        self.session.headers = {}
        self.client = ApiClient(base_url='http://api.test/api/v1/', session=self.session)

    def test_url_has_trailing_slash(self):
        self.assertEqual(self.client.url('items/5'), 'http://api.test/api/v1/items/5/')

    def test_login_sets_bearer_token(self):
        self.session.request.return_value = _response(200, {'access': 'abc', 'refresh': 'def'})
        self.client.login('alice', 'secret')
        self.assertEqual(self.session.headers['Authorization'], 'Bearer abc')

    def test_timeout_always_sent(self):
        self.session.request.return_value = _response(200, [])
        self.client.get_items()
        self.assertEqual(self.session.request.call_args[1]['timeout'], self.client.timeout)

    def test_error_status_raises(self):
        self.session.request.return_value = _response(404, {'error': 'Item not found'})
        with self.assertRaises(ApiError) as ctx:
            self.client.get_item(5)
        self.assertEqual(ctx.exception.status, 404)
        self.assertEqual(str(ctx.exception), 'Item not found')
        self.assertFalse(ctx.exception.is_network_error)

    def test_network_error_raises(self):
        self.session.request.side_effect = requests.ConnectionError('refused')
        with self.assertRaises(ApiError) as ctx:
            self.client.get_items()
        self.assertTrue(ctx.exception.is_network_error)

    def test_no_content(self):
        self.session.request.return_value = _response(204)
        self.assertIsNone(self.client.delete('groups/1'))


class LocalStorageTests(SimpleTestCase):

    def setUp(self):
        tmp = tempfile.TemporaryDirectory()
        self.addCleanup(tmp.cleanup)
        self.path = Path(tmp.name) / 'nested' / 'store.json'
        self.store = LocalStorage(self.path)

    def test_set_get_remove(self):
        self.assertIsNone(self.store.get_item('missing'))
        self.store.set_item('a', [1, 2])
        self.assertEqual(LocalStorage(self.path).get_item('a'), [1, 2])
        self.store.remove_item('a')
        self.store.remove_item('a')
        self.assertEqual(self.store.keys(), [])

    def test_corrupt_file_reads_empty(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text('{not json', encoding='utf-8')
        self.assertEqual(self.store.keys(), [])
        self.store.set_item('a', 1)
        self.assertEqual(self.store.get_item('a'), 1)


class TransactionRecorderTests(ClientTestCase):

    def test_server_write(self):
        saved, source = self.recorder.record({'item_id': 3, 'transaction_type': 'STOCK_IN', 'quantity': 2})
        self.assertEqual((saved, source), ({'id': 100}, 'server'))
        payload = self.recorded()
        self.assertFalse(payload['is_deletion'])
        self.assertEqual(payload['type'], 'in')
        self.assertTrue(payload['created_at'].endswith('Z'))
        self.assertEqual(self.recorder.pending(), [])

    def test_deletion_flag_from_type(self):
        self.recorder.record({'item_id': 3, 'type': 'soft-delete'})
        payload = self.recorded()
        self.assertTrue(payload['is_deletion'])
        self.assertEqual(payload['transaction_type'], 'soft-delete')
        self.assertEqual(payload['type'], 'delete')

    def test_local_fallback(self):
        self.api.record_transaction.side_effect = ApiError('down')
        record, source = self.recorder.record({'item_id': 3, 'transaction_type': 'STOCK_OUT', 'quantity': 1})
        self.assertEqual(source, 'local')
        self.assertRegex(record['id'], r'^trans-\d+-[0-9a-z]{8}$')
        self.assertEqual(self.store.get_item(LOCAL_TRANSACTIONS_KEY), [record])

    def test_sync_keeps_failures(self):
        self.store.set_item(LOCAL_TRANSACTIONS_KEY, [
            {'id': 'trans-1-aaaaaaaa', 'item_id': 1, 'transaction_type': 'STOCK_IN'},
            {'id': 'trans-2-bbbbbbbb', 'item_id': 2, 'transaction_type': 'STOCK_OUT'},
        ])
        self.api.record_transaction.side_effect = [{'id': 1}, ApiError('down')]
        self.assertEqual(self.recorder.sync_pending(), {'synced': 1, 'failed': 1})
        self.assertNotIn('id', self.api.record_transaction.call_args_list[0][0][0])
        self.assertEqual([r['id'] for r in self.recorder.pending()], ['trans-2-bbbbbbbb'])

    def test_sync_clears_store(self):
        self.store.set_item(LOCAL_TRANSACTIONS_KEY, [{'id': 'trans-1-aaaaaaaa', 'transaction_type': 'RESTORE'}])
        self.assertEqual(self.recorder.sync_pending(), {'synced': 1, 'failed': 0})
        self.assertIsNone(self.store.get_item(LOCAL_TRANSACTIONS_KEY))


class StockOperationTests(ClientTestCase):

    def setUp(self):
        super().setUp()
        self.item = {'id': 3, 'name': 'Bolt', 'quantity': 5, 'box_id': 1, 'type': 'hardware'}
        self.api.get_item.return_value = dict(self.item)

    def test_stock_in_existing_item(self):
        self.api.update_item.return_value = dict(self.item, quantity=8)
        result = stock.stock_in(self.api, self.recorder, 3, item_id=3, supplier='Acme')
        self.api.update_item.assert_called_once_with(3, {'quantity': 8})
        payload = self.recorded()
        self.assertEqual(payload['transaction_type'], 'STOCK_IN')
        self.assertEqual((payload['previous_quantity'], payload['new_quantity']), (5, 8))
        self.assertEqual(payload['details'], 'Stock added from supplier: Acme')
        self.assertEqual(result['source'], 'server')

    def test_stock_in_new_item(self):
        self.api.create_item.return_value = {'id': 4, 'name': 'Nut', 'quantity': 2, 'box_id': None}
        stock.stock_in(self.api, self.recorder, 2, item_name='Nut')
        payload = self.recorded()
        self.assertEqual(payload['transaction_type'], 'NEW_ITEM')
        self.assertEqual(payload['type'], 'in')
        self.assertEqual(payload['previous_quantity'], 0)
        self.assertEqual(payload['details'], 'Initial item stock')

    def test_stock_in_validation(self):
        with self.assertRaises(ValueError):
            stock.stock_in(self.api, self.recorder, 0, item_id=3)
        with self.assertRaises(ValueError):
            stock.stock_in(self.api, self.recorder, 1)

    def test_stock_out_floors_at_zero(self):
        stock.stock_out(self.api, self.recorder, 3, 9, reason='CONSUMED', customer_id=9,
                        customer_info={'id': 9, 'name': 'Lab 3 (Research)'})
        self.api.update_item.assert_called_once_with(3, {'quantity': 0})
        payload = self.recorded()
        self.assertEqual(payload['type'], 'out')
        self.assertEqual(payload['new_quantity'], 0)
        self.assertEqual(payload['details'], 'Removed due to: CONSUMED by Lab 3')

    def test_stock_out_reason_by_id(self):
        self.api.get_removal_reasons.return_value = [{'id': 7, 'name': 'SOLD'}]
        stock.stock_out(self.api, self.recorder, 3, 1, reason=7, customer_info={'contact_person': 'Dr. Who'})
        payload = self.recorded()
        self.assertEqual(payload['reason'], 'SOLD')
        self.assertEqual(payload['details'], 'Removed due to: SOLD to Dr. Who')

    def test_stock_out_details(self):
        self.assertEqual(stock.stock_out_details('DAMAGED'), 'Removed due to: DAMAGED')
        self.assertEqual(stock.stock_out_details(), 'Stock removed from inventory')
        self.assertEqual(stock.stock_out_details('SOLD', {'name': 'Shop'}, notes='Paid cash'), 'Paid cash')

    def test_stock_out_offline_is_kept_locally(self):
        self.api.record_transaction.side_effect = ApiError('down')
        result = stock.stock_out(self.api, self.recorder, 3, 1)
        self.assertEqual(result['source'], 'local')
        self.assertEqual(len(self.recorder.pending()), 1)

    def test_transfer(self):
        self.api.transfer_item.return_value = {'item': dict(self.item, box_id=4)}
        result = stock.transfer_item(self.api, self.recorder, 3, 4)
        self.api.transfer_item.assert_called_once_with(3, 4, source_box_id=1, notes=None)
        payload = self.recorded()
        self.assertEqual((payload['previous_box_id'], payload['new_box_id'], payload['box_id']), (1, 4, 4))
        self.assertEqual(payload['details'], 'Item transferred from Box 1 to Box 4')
        self.assertEqual(payload['type'], 'transfer')
        self.assertEqual(result['item']['box_id'], 4)

    def test_bulk_transfer_records_moved_items(self):
        self.api.get_items.return_value = [
            {'id': 1, 'name': 'A', 'quantity': 1, 'box_id': 1},
            {'id': 2, 'name': 'B', 'quantity': 1, 'box_id': 2},
            {'id': 3, 'name': 'C', 'quantity': 1, 'box_id': 2},
        ]
        self.api.bulk_transfer_items.return_value = {'transferred_ids': [1, 2], 'count': 2}
        result = stock.bulk_transfer(self.api, self.recorder, ['1', '2'], 5)
        self.assertEqual(len(result['transactions']), 2)
        self.assertEqual({c[0][0]['transaction_type'] for c in self.api.record_transaction.call_args_list},
                         {'BULK_TRANSFER'})

    def test_delete_records_soft_delete(self):
        self.api.delete_item.return_value = {'message': 'Item deleted successfully', 'id': 3}
        stock.delete_item(self.api, self.recorder, 3)
        payload = self.recorded()
        self.assertEqual(payload['transaction_type'], 'SOFT_DELETE')
        self.assertTrue(payload['is_deletion'])
        self.assertEqual(payload['metadata']['item_type'], 'hardware')

    def test_delete_unreadable_item_skips_history(self):
        self.api.get_item.side_effect = ApiError('Item not found', status=404)
        result = stock.delete_item(self.api, self.recorder, 3)
        self.assertIsNone(result['transaction'])
        self.api.record_transaction.assert_not_called()

    def test_bulk_delete_records_deleted_only(self):
        self.api.get_items.return_value = [{'id': 1, 'name': 'A'}, {'id': 2, 'name': 'B'}]
        self.api.bulk_delete_items.return_value = {'deleted_ids': [2], 'count': 1}
        result = stock.bulk_delete(self.api, self.recorder, [1, 2])
        self.assertEqual(len(result['transactions']), 1)
        self.assertEqual(self.recorded()['transaction_type'], 'BULK_SOFT_DELETE')
        self.assertEqual(self.recorded()['item_id'], 2)

    def test_restore_and_permanent_delete(self):
        stock.restore_item(self.api, self.recorder, 3)
        self.assertEqual(self.recorded()['type'], 'restore')
        stock.permanently_delete_item(self.api, self.recorder, 3)
        payload = self.recorded()
        self.assertEqual(payload['transaction_type'], 'PERMANENT_DELETE')
        self.assertTrue(payload['is_deletion'])
        self.assertIn('deleted_at', payload['metadata'])


class StockHistoryTests(ClientTestCase):

    def setUp(self):
        super().setUp()
        self.server_record = {
            'id': 1, 'item_id': 3, 'transaction_type': 'STOCK_IN', 'type': 'in',
            'is_deletion': False, 'created_at': '2024-03-02T10:00:00Z',
        }
        self.api.get_transactions.return_value = [self.server_record]

    def test_server_params(self):
        params = history.server_params(item_id=3, category='in', start_date='2024-03-01', end_date='2024-03-05')
        self.assertEqual(params['transaction_type'], ['STOCK_IN', 'NEW_ITEM'])
        self.assertEqual(params['start_date'], '2024-03-01T00:00:00.000Z')
        self.assertEqual(params['end_date'], '2024-03-05T23:59:59.999Z')

        params = history.server_params(category='delete')
        self.assertEqual(params['is_deletion'], 'true')
        self.assertNotIn('transaction_type', params)

    def test_server_only(self):
        result = history.get_stock_history(self.api, self.recorder, item_id=3)
        self.assertEqual(result['source'], 'server')
        self.assertEqual(result['count'], 1)

    def test_merges_unsynced_local_records(self):
        self.store.set_item(LOCAL_TRANSACTIONS_KEY, [{
            'id': 'trans-1-abcdefgh', 'item_id': 3, 'transaction_type': 'STOCK_OUT',
            'is_deletion': False, 'type': 'out', 'created_at': '2024-03-03T10:00:00Z',
        }])
        result = history.get_stock_history(self.api, self.recorder, item_id=3)
        self.assertEqual(result['source'], 'merged')
        self.assertEqual([r['id'] for r in result['results']], ['trans-1-abcdefgh', 1])

        result = history.get_stock_history(self.api, self.recorder, item_id=3, type='in')
        self.assertEqual(result['source'], 'server')

    def test_delete_retry_with_flag_only(self):
        deletion = {'id': 9, 'transaction_type': 'SOFT_DELETE', 'is_deletion': True,
                    'created_at': '2024-03-02T10:00:00Z'}
        self.api.get_transactions.side_effect = [[], [deletion]]
        result = history.get_stock_history(self.api, self.recorder, item_id=3, type='delete')
        self.assertEqual(result['count'], 1)
        self.assertEqual(self.api.get_transactions.call_args_list[1][0][0],
                         {'is_deletion': 'true', 'limit': history.SERVER_FETCH_LIMIT})

    def test_local_reconstruction(self):
        self.api.get_transactions.side_effect = ApiError('down')
        self.api.get_current_user.side_effect = ApiError('down')
        self.api.get_items.return_value = [
            {'id': 3, 'name': 'Bolt', 'quantity': 4, 'box_id': 1, 'created_at': '2024-01-01T00:00:00Z'},
            {'id': 4, 'name': 'Nut', 'quantity': 0, 'box_id': None, 'created_at': '2024-01-02T00:00:00Z'},
        ]
        self.store.set_item(LOCAL_TRANSACTIONS_KEY, [
            {'id': 'trans-a', 'item_id': 3, 'transaction_type': 'STOCK_IN', 'quantity': 2,
             'created_at': '2024-02-01T00:00:00Z'},
        ])
        result = history.get_stock_history(self.api, self.recorder)
        self.assertEqual(result['source'], 'local')
        self.assertEqual([r['id'] for r in result['results']], ['trans-a', 'stock-in-4'])

        local, initial = result['results']
        self.assertEqual(local['type'], 'in')
        self.assertEqual(local['item_name'], 'Bolt')
        self.assertEqual(local['notes'], 'No details provided')
        self.assertEqual(local['created_by'], 'Unknown User')
        self.assertEqual(initial['quantity'], 1)
        self.assertEqual(initial['notes'], 'Initial stock')

    def test_local_filters(self):
        self.api.get_transactions.side_effect = ApiError('down')
        self.api.get_current_user.return_value = {'username': 'alice'}
        self.api.get_items.return_value = []
        self.store.set_item(LOCAL_TRANSACTIONS_KEY, [
            {'id': 'trans-a', 'item_id': 3, 'transaction_type': 'STOCK_OUT', 'type': 'out',
             'customer_info': {'id': 9}, 'created_at': '2024-03-05T18:00:00Z'},
            {'id': 'trans-b', 'item_id': 3, 'transaction_type': 'STOCK_IN', 'type': 'in',
             'created_at': '2024-03-01T08:00:00Z'},
        ])
        result = history.get_stock_history(self.api, self.recorder, customer_id='9')
        self.assertEqual([r['id'] for r in result['results']], ['trans-a'])
        self.assertEqual(result['results'][0]['created_by'], 'alice')

        result = history.get_stock_history(self.api, self.recorder, item_id='3', end_date='2024-03-05')
        self.assertEqual(result['count'], 2)
        result = history.get_stock_history(self.api, self.recorder, start_date='2024-03-02')
        self.assertEqual([r['id'] for r in result['results']], ['trans-a'])
        result = history.get_stock_history(self.api, self.recorder, type='in')
        self.assertEqual([r['id'] for r in result['results']], ['trans-b'])

    def test_pagination_clamps_page(self):
        records = [{'id': i, 'created_at': f'2024-01-{i:02d}T00:00:00Z'} for i in range(1, 26)]
        page = history.paginate_records(records, page=5, per_page=10)
        self.assertEqual((page['page'], page['total_pages'], len(page['results'])), (3, 3, 5))
        self.assertEqual(page['results'][0]['id'], 5)

        page = history.paginate_records([], page=1)
        self.assertEqual((page['page'], page['total_pages'], page['count']), (1, 1, 0))

        page = history.paginate_records(records)
        self.assertEqual((page['page_size'], page['total_pages']), (25, 1))

    def test_customer_history_fallback(self):
        self.api.get_customer_transactions.side_effect = ApiError('down')
        result = history.get_customer_item_history(self.api, 9)
        self.assertEqual(result['transactions'], [])
        self.assertIsNone(result['summary']['mostConsumedItem'])


class RemovalReasonTests(ClientTestCase):

    def test_server_list_is_cached(self):
        self.api.get_removal_reasons.return_value = [{'id': 1, 'name': 'CONSUMED'}]
        self.assertEqual(history.get_removal_reasons(self.api, self.store), [{'id': 1, 'name': 'CONSUMED'}])
        self.api.get_removal_reasons.side_effect = ApiError('down')
        self.assertEqual(history.get_removal_reasons(self.api, self.store), [{'id': 1, 'name': 'CONSUMED'}])

    def test_defaults_when_nothing_cached(self):
        self.api.get_removal_reasons.side_effect = ApiError('down')
        reasons = history.get_removal_reasons(self.api, self.store)
        self.assertEqual(len(reasons), 7)
        self.assertEqual({r['name']: r['id'] for r in reasons}['SOLD'], 7)
        self.assertEqual(self.store.get_item(history.REMOVAL_REASONS_KEY), reasons)

    def test_defaults_follow_server_seed_order(self):
        seed = importlib.import_module('reactstock.parties.migrations.0002_default_removal_reasons')
        expected = [
            {'id': index, 'name': name, 'description': description}
            for index, (name, description) in enumerate(seed.DEFAULT_REASONS, start=1)
        ]
        self.assertEqual(history.DEFAULT_REMOVAL_REASONS, expected)

    def test_offline_reason_ids_resolve_like_the_server(self):
        self.api.get_removal_reasons.side_effect = ApiError('down')
        self.assertEqual(stock.resolve_reason(self.api, self.recorder, 4), 'LOST')
        self.assertEqual(stock.resolve_reason(self.api, self.recorder, '6'), 'OTHER')
        self.assertEqual(stock.resolve_reason(self.api, self.recorder, 7), 'SOLD')
