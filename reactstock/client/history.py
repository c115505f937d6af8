"""
Stock history queries over the server with the local store as fallback.

Server results are merged with local transactions that have not been synced
yet. When the server cannot be reached the history is rebuilt from the local
store and the current item list.
"""
import logging
import math
from datetime import date, datetime, time, timezone

from reactstock.inventory import constants
from .api import ApiError

logger = logging.getLogger('reactstock.client')

SOURCE_SERVER = 'server'
SOURCE_MERGED = 'merged'
SOURCE_LOCAL = 'local'

DEFAULT_PER_PAGE = 10
SERVER_FETCH_LIMIT = 1000
REMOVAL_REASONS_KEY = 'removalReasons'

DEFAULT_REMOVAL_REASONS = [
    {'id': 1, 'name': 'CONSUMED', 'description': 'Item was consumed or used up'},
    {'id': 2, 'name': 'DAMAGED', 'description': 'Item was damaged and cannot be used'},
    {'id': 3, 'name': 'EXPIRED', 'description': 'Item has expired'},
    {'id': 4, 'name': 'LOST', 'description': 'Item was lost'},
    {'id': 5, 'name': 'RETURNED', 'description': 'Item was returned to supplier'},
    {'id': 6, 'name': 'OTHER', 'description': 'Other reason'},
    {'id': 7, 'name': 'SOLD', 'description': 'Item was sold to a customer'},
]

EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def parse_timestamp(value):
    """Aware UTC datetime from a datetime, date or ISO string; naive values are taken as UTC"""
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime.combine(value, time.min)
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def end_of_day(value):
    parsed = parse_timestamp(value)
    if parsed is None:
        return None
    return parsed.replace(hour=23, minute=59, second=59, microsecond=999000)


def _iso(value):
    return value.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def _sort_key(record):
    try:
        return parse_timestamp(record.get('created_at')) or EPOCH
    except ValueError:
        return EPOCH


def server_params(item_id=None, category=None, start_date=None, end_date=None, customer_id=None):
    """Query parameters for items/transactions/"""
    params = {'limit': SERVER_FETCH_LIMIT}
    if item_id:
        params['item_id'] = item_id
    if category == constants.CATEGORY_DELETE:
        params['is_deletion'] = 'true'
    elif category:
        params['transaction_type'] = constants.types_for_category(category)
    if start_date:
        params['start_date'] = _iso(parse_timestamp(start_date))
    if end_date:
        params['end_date'] = _iso(end_of_day(end_date))
    if customer_id:
        params['customer_id'] = customer_id
    return params


def filter_records(records, item_id=None, category=None, start_date=None, end_date=None, customer_id=None):
    """Apply history filters to transaction dicts (server shaped or local)"""
    start = parse_timestamp(start_date) if start_date else None
    end = end_of_day(end_date) if end_date else None
    results = []
    for record in records:
        if item_id and str(record.get('item_id')) != str(item_id):
            continue
        if category and not constants.matches_category(
                record.get('transaction_type'), record.get('is_deletion'), category):
            continue
        if start or end:
            created_at = _sort_key(record)
            if start and created_at < start:
                continue
            if end and created_at > end:
                continue
        if customer_id:
            info = record.get('customer_info') or {}
            if str(customer_id) not in (str(record.get('customer_id')), str(info.get('id'))):
                continue
        results.append(record)
    return results


def paginate_records(records, page=None, per_page=DEFAULT_PER_PAGE):
    """
    Newest-first page of records. Without a page everything is returned as a
    single page; otherwise the page is clamped to the valid range.
    """
    records = sorted(records, key=_sort_key, reverse=True)
    count = len(records)
    if page is None:
        return {'results': records, 'count': count, 'page': 1, 'page_size': count, 'total_pages': 1}

    per_page = max(int(per_page or DEFAULT_PER_PAGE), 1)
    total_pages = max(math.ceil(count / per_page), 1)
    page = min(max(int(page), 1), total_pages)
    start = (page - 1) * per_page
    return {
        'results': records[start:start + per_page],
        'count': count,
        'page': page,
        'page_size': per_page,
        'total_pages': total_pages,
    }


def _format_local(transaction, items_by_id, username):
    item = items_by_id.get(transaction.get('item_id')) or {}
    transaction_type = transaction.get('transaction_type') or 'UNKNOWN'
    category = transaction.get('type')
    if not category:
        if transaction_type == constants.QUANTITY_UPDATE:
            category = constants.transaction_category(transaction_type, details=transaction.get('details'))
        else:
            category = constants.CATEGORY_IN
    return {
        'id': transaction.get('id'),
        'type': category,
        'item_id': transaction.get('item_id'),
        'item_name': transaction.get('item_name') or item.get('name') or 'Unknown Item',
        'quantity': transaction.get('quantity') or 0,
        'previous_quantity': transaction.get('previous_quantity'),
        'new_quantity': transaction.get('new_quantity'),
        'box_id': transaction.get('box_id') or item.get('box_id'),
        'notes': transaction.get('details') or 'No details provided',
        'created_at': transaction.get('created_at'),
        'created_by': username,
        'transaction_type': transaction_type,
        'is_deletion': bool(transaction.get('is_deletion')),
        'previous_box_id': transaction.get('previous_box_id'),
        'new_box_id': transaction.get('new_box_id'),
        'reason': transaction.get('reason'),
        'customer_id': transaction.get('customer_id'),
        'customer_info': transaction.get('customer_info'),
    }


def local_history(api, recorder):
    """
    Rebuild history from the local store. Items without a recorded NEW_ITEM
    or STOCK_IN get a synthetic initial stock entry.
    """
    try:
        user = api.get_current_user() or {}
    except ApiError:
        user = {}
    username = user.get('username') or user.get('name') or user.get('email') or 'Unknown User'

    try:
        items = api.get_items() or []
    except ApiError as e:
        logger.warning(f"Could not load items for local history: {str(e)}")
        items = []
    items_by_id = {item['id']: item for item in items}

    stored = recorder.pending()
    stocked = {
        t.get('item_id') for t in stored
        if t.get('transaction_type') in (constants.NEW_ITEM, constants.STOCK_IN)
    }

    history = []
    for item in items:
        if item['id'] in stocked:
            continue
        quantity = item.get('quantity') or 1
        history.append({
            'id': f"stock-in-{item['id']}",
            'type': constants.CATEGORY_IN,
            'item_id': item['id'],
            'item_name': item.get('name'),
            'quantity': quantity,
            'previous_quantity': 0,
            'new_quantity': quantity,
            'box_id': item.get('box_id'),
            'notes': 'Initial stock',
            'created_at': item.get('created_at') or _iso(datetime.now(timezone.utc)),
            'created_by': username,
            'transaction_type': constants.STOCK_IN,
            'is_deletion': False,
        })
    history.extend(_format_local(t, items_by_id, username) for t in stored)
    return history


def _fetch_server(api, params, category):
    records = api.get_transactions(params) or []
    if category == constants.CATEGORY_DELETE and not records:
        logger.info("No deletions matched, retrying with the deletion flag only")
        try:
            records = api.get_transactions({'is_deletion': 'true', 'limit': SERVER_FETCH_LIMIT}) or []
        except ApiError as e:
            logger.warning(f"Deletion retry failed: {str(e)}")
    return records


def get_stock_history(api, recorder, item_id=None, type=None, start_date=None, end_date=None,
                      customer_id=None, page=None, per_page=DEFAULT_PER_PAGE):
    """
    Stock transaction history, newest first.

    ``type`` is a category (in, out, transfer, delete, update, create,
    restore, or a raw transaction type). Returns a dict with results,
    count, page, page_size, total_pages and source (server, merged or local).
    """
    filters = {
        'item_id': item_id,
        'category': type,
        'start_date': start_date,
        'end_date': end_date,
        'customer_id': customer_id,
    }
    try:
        records = _fetch_server(api, server_params(**filters), type)
    except ApiError as e:
        logger.warning(f"Stock history unavailable from the server, using local records: {str(e)}")
        records = filter_records(local_history(api, recorder), **filters)
        source = SOURCE_LOCAL
    else:
        source = SOURCE_SERVER
        seen = {str(record.get('id')) for record in records}
        unsynced = [
            record for record in filter_records(recorder.pending(), **filters)
            if str(record.get('id')) not in seen
        ]
        if unsynced:
            records = list(records) + unsynced
            source = SOURCE_MERGED

    result = paginate_records(records, page, per_page)
    result['source'] = source
    return result


def get_customer_item_history(api, customer_id):
    """Customer transactions with summary; an empty summary when the server fails"""
    try:
        return api.get_customer_transactions(customer_id)
    except ApiError as e:
        logger.warning(f"Could not load transactions of customer {customer_id}: {str(e)}")
        return {
            'transactions': [],
            'summary': {'totalItems': 0, 'totalQuantity': 0, 'uniqueItems': 0, 'mostConsumedItem': None},
        }


def get_removal_reasons(api, store):
    """Removal reasons from the server, else the cached list, else the defaults"""
    try:
        reasons = api.get_removal_reasons()
    except ApiError as e:
        logger.warning(f"Could not load removal reasons from the server: {str(e)}")
    else:
        store.set_item(REMOVAL_REASONS_KEY, reasons)
        return reasons

    cached = store.get_item(REMOVAL_REASONS_KEY)
    if cached:
        return cached
    store.set_item(REMOVAL_REASONS_KEY, DEFAULT_REMOVAL_REASONS)
    return list(DEFAULT_REMOVAL_REASONS)
