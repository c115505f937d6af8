"""
Stock operations: each changes the item through the API and records the
matching item transaction through a TransactionRecorder.
"""
import logging

from reactstock.inventory import constants
from .api import ApiError
from .history import get_removal_reasons
from .recorder import utc_now_iso

logger = logging.getLogger('reactstock.client')

CONSUMED = 'CONSUMED'
SOLD = 'SOLD'


def _positive_quantity(quantity):
    quantity = int(quantity)
    if quantity <= 0:
        raise ValueError('quantity must be a positive integer')
    return quantity


def _item_metadata(item, **extra):
    metadata = {
        'item_type': item.get('type') or '',
        'serial_number': item.get('serial_number') or '',
        'parent_item_id': item.get('parent_item_id'),
    }
    metadata.update(extra)
    return metadata


def _fetch_item(api, item_id):
    """The item, or None when it cannot be read (history is then skipped)"""
    try:
        return api.get_item(item_id)
    except ApiError as e:
        logger.warning(f"Could not read item {item_id} before changing it: {str(e)}")
        return None


def resolve_reason(api, recorder, reason):
    """Removal reason name for a reason given by id; names pass through unchanged"""
    if isinstance(reason, int) or (isinstance(reason, str) and reason.isdigit()):
        for entry in get_removal_reasons(api, recorder.store):
            if str(entry.get('id')) == str(reason):
                return entry.get('name')
    return reason


def stock_out_details(reason=None, customer_info=None, notes=None):
    """
    Human readable details of a stock out. Consumption and sales name the
    customer's contact person (or the customer name without any
    parenthesised suffix).
    """
    if notes:
        return notes
    if not reason:
        return 'Stock removed from inventory'
    if customer_info and (reason in (CONSUMED, SOLD)):
        contact = customer_info.get('contact_person') or (customer_info.get('name') or '').split('(')[0].strip()
        verb = 'CONSUMED by' if reason == CONSUMED else 'SOLD to'
        return f"Removed due to: {verb} {contact}"
    return f"Removed due to: {reason}"


def stock_in(api, recorder, quantity, item_id=None, item_name=None, box_id=None,
             supplier=None, notes=None, **item_fields):
    """
    Add stock. With item_id the existing item's quantity is raised and a
    STOCK_IN is recorded; otherwise a new item named item_name is created
    and recorded as NEW_ITEM.
    """
    quantity = _positive_quantity(quantity)

    if item_id is not None:
        item = api.get_item(item_id)
        previous_quantity = item.get('quantity') or 0
        new_quantity = previous_quantity + quantity
        item = api.update_item(item_id, {'quantity': new_quantity})
        details = notes or (f"Stock added from supplier: {supplier}" if supplier else 'Stock added to inventory')
        transaction_type = constants.STOCK_IN
    else:
        if not item_name:
            raise ValueError('item_name is required to stock in a new item')
        payload = dict(item_fields, name=item_name, quantity=quantity, box_id=box_id, supplier=supplier)
        if notes:
            payload['notes'] = notes
        item = api.create_item(payload)
        previous_quantity = 0
        new_quantity = quantity
        details = notes or (f"Initial stock from supplier: {supplier}" if supplier else 'Initial item stock')
        transaction_type = constants.NEW_ITEM

    record, source = recorder.record({
        'item_id': item['id'],
        'item_name': item.get('name') or item_name,
        'transaction_type': transaction_type,
        'quantity': quantity,
        'previous_quantity': previous_quantity,
        'new_quantity': new_quantity,
        'box_id': item.get('box_id'),
        'supplier': supplier,
        'details': details,
        'notes': notes,
    })
    return {'item': item, 'transaction': record, 'source': source}


def stock_out(api, recorder, item_id, quantity, reason=None, customer_id=None,
              customer_info=None, notes=None):
    """Remove stock; the quantity never drops below zero"""
    quantity = _positive_quantity(quantity)
    item = api.get_item(item_id)
    reason = resolve_reason(api, recorder, reason)
    previous_quantity = item.get('quantity') or 0
    new_quantity = max(0, previous_quantity - quantity)
    update = {'quantity': new_quantity}
    if notes:
        update['notes'] = notes
    updated = api.update_item(item_id, update)

    record, source = recorder.record({
        'item_id': item['id'],
        'item_name': item.get('name'),
        'transaction_type': constants.STOCK_OUT,
        'quantity': quantity,
        'previous_quantity': previous_quantity,
        'new_quantity': new_quantity,
        'box_id': item.get('box_id'),
        'reason': reason,
        'customer_id': customer_id,
        'customer_info': customer_info,
        'details': stock_out_details(reason, customer_info, notes),
        'notes': notes,
    })
    return {'item': updated, 'transaction': record, 'source': source}


def _transfer_record(item, destination_box_id, transaction_type, details):
    return {
        'item_id': item['id'],
        'item_name': item.get('name'),
        'transaction_type': transaction_type,
        'quantity': item.get('quantity') or 0,
        'previous_quantity': item.get('quantity'),
        'new_quantity': item.get('quantity'),
        'previous_box_id': item.get('box_id'),
        'new_box_id': destination_box_id,
        'box_id': destination_box_id,
        'details': details,
    }


def transfer_item(api, recorder, item_id, destination_box_id, notes=None):
    item = api.get_item(item_id)
    source_box_id = item.get('box_id')
    result = api.transfer_item(item_id, destination_box_id, source_box_id=source_box_id, notes=notes)
    details = notes or f"Item transferred from Box {source_box_id} to Box {destination_box_id}"
    record, source = recorder.record(_transfer_record(item, destination_box_id, constants.TRANSFER, details))
    return {'item': (result or {}).get('item', item), 'transaction': record, 'source': source}


def bulk_transfer(api, recorder, item_ids, destination_box_id, notes=None):
    """Transfer several items; one BULK_TRANSFER is recorded per moved item"""
    item_ids = [int(item_id) for item_id in item_ids]
    items = {item['id']: item for item in api.get_items() if item['id'] in item_ids}
    result = api.bulk_transfer_items(item_ids, destination_box_id, notes=notes)
    moved = result.get('transferred_ids', list(items)) if isinstance(result, dict) else list(items)

    transactions = []
    for item_id in moved:
        item = items.get(item_id)
        if item is None:
            continue
        details = notes or (f"Item transferred from Box {item.get('box_id')} to Box "
                            f"{destination_box_id} in bulk operation")
        record, _ = recorder.record(_transfer_record(item, destination_box_id, constants.BULK_TRANSFER, details))
        transactions.append(record)
    return {'result': result, 'transactions': transactions}


def delete_item(api, recorder, item_id):
    """Soft-delete an item, recording SOFT_DELETE when the item could be read first"""
    item = _fetch_item(api, item_id)
    result = api.delete_item(item_id)
    record = source = None
    if item:
        record, source = recorder.record({
            'item_id': item_id,
            'item_name': item.get('name'),
            'transaction_type': constants.SOFT_DELETE,
            'quantity': item.get('quantity') or 0,
            'box_id': item.get('box_id'),
            'details': 'Item soft-deleted (moved to trash)',
            'metadata': _item_metadata(item),
        })
    return {'result': result, 'transaction': record, 'source': source}


def bulk_delete(api, recorder, item_ids):
    item_ids = [int(item_id) for item_id in item_ids]
    try:
        items = [item for item in api.get_items() if item['id'] in item_ids]
    except ApiError as e:
        logger.warning(f"Could not read items before bulk delete: {str(e)}")
        items = []
    result = api.bulk_delete_items(item_ids)
    deleted_ids = set(result.get('deleted_ids', item_ids)) if isinstance(result, dict) else set(item_ids)

    transactions = []
    for item in items:
        if item['id'] not in deleted_ids:
            continue
        record, _ = recorder.record({
            'item_id': item['id'],
            'item_name': item.get('name'),
            'transaction_type': constants.BULK_SOFT_DELETE,
            'quantity': item.get('quantity') or 0,
            'box_id': item.get('box_id'),
            'details': 'Item soft-deleted in bulk operation (moved to trash)',
            'metadata': _item_metadata(item, bulk_operation=True),
        })
        transactions.append(record)
    return {'result': result, 'transactions': transactions}


def restore_item(api, recorder, item_id):
    item = _fetch_item(api, item_id)
    result = api.restore_item(item_id)
    record = source = None
    if item:
        record, source = recorder.record({
            'item_id': item_id,
            'item_name': item.get('name'),
            'transaction_type': constants.RESTORE,
            'quantity': item.get('quantity') or 0,
            'box_id': item.get('box_id'),
            'details': 'Item restored from trash',
        })
    return {'result': result, 'transaction': record, 'source': source}


def permanently_delete_item(api, recorder, item_id):
    item = _fetch_item(api, item_id)
    result = api.permanently_delete_item(item_id)
    record = source = None
    if item:
        record, source = recorder.record({
            'item_id': item_id,
            'item_name': item.get('name'),
            'transaction_type': constants.PERMANENT_DELETE,
            'quantity': item.get('quantity') or 0,
            'box_id': item.get('box_id'),
            'details': 'Item permanently deleted from system',
            'metadata': _item_metadata(item, deleted_at=utc_now_iso()),
        })
    return {'result': result, 'transaction': record, 'source': source}
