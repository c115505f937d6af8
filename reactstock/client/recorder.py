"""
Dual-write of item transactions: server first, local store as fallback.
"""
import logging
import random
import string
import time
from datetime import datetime, timezone

from reactstock.inventory.constants import LOCAL_TRANSACTIONS_KEY, is_deletion_type, transaction_category
from .api import ApiError

logger = logging.getLogger('reactstock.client')

SOURCE_SERVER = 'server'
SOURCE_LOCAL = 'local'


def utc_now_iso():
    return datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z')


def local_transaction_id():
    """trans-<epoch ms>-<8 random base36 chars>"""
    suffix = ''.join(random.choices(string.digits + string.ascii_lowercase, k=8))
    return f"trans-{int(time.time() * 1000)}-{suffix}"


class TransactionRecorder:

    def __init__(self, api, store):
        self.api = api
        self.store = store

    def prepare(self, transaction):
        """Copy of transaction with deletion flag, category and timestamp filled in"""
        record = dict(transaction)
        transaction_type = record.get('transaction_type') or record.get('type')
        record['is_deletion'] = (
            bool(record.get('is_deletion'))
            or is_deletion_type(record.get('type'))
            or is_deletion_type(record.get('transaction_type'))
        )
        if transaction_type:
            record['transaction_type'] = transaction_type
        record.setdefault('created_at', utc_now_iso())
        record['type'] = transaction_category(transaction_type, record['is_deletion'], record.get('details'))
        return record

    def record(self, transaction):
        """
        Record a transaction. Returns (record, source) where source is
        "server" or "local". API failures never propagate.
        """
        record = self.prepare(transaction)
        try:
            saved = self.api.record_transaction(record)
            return saved, SOURCE_SERVER
        except ApiError as e:
            logger.warning(f"Could not record {record.get('transaction_type')} for item "
                           f"{record.get('item_id')} on the server, keeping it locally: {str(e)}")

        record['id'] = local_transaction_id()
        pending = self.pending()
        pending.append(record)
        self.store.set_item(LOCAL_TRANSACTIONS_KEY, pending)
        return record, SOURCE_LOCAL

    def pending(self):
        pending = self.store.get_item(LOCAL_TRANSACTIONS_KEY)
        return pending if isinstance(pending, list) else []

    def sync_pending(self):
        """
        Replay locally stored transactions to the server in order. Records
        that were accepted are removed from the local store.
        """
        remaining = []
        synced = 0
        for record in self.pending():
            payload = {key: value for key, value in record.items() if key != 'id'}
            try:
                self.api.record_transaction(payload)
                synced += 1
            except ApiError as e:
                logger.warning(f"Sync of local transaction {record.get('id')} failed: {str(e)}")
                remaining.append(record)

        if remaining:
            self.store.set_item(LOCAL_TRANSACTIONS_KEY, remaining)
        else:
            self.store.remove_item(LOCAL_TRANSACTIONS_KEY)
        logger.info(f"Synced {synced} local transactions, {len(remaining)} still pending")
        return {'synced': synced, 'failed': len(remaining)}
