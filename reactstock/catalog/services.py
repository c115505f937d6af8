"""
Item services: reading item rows (materialized view first, joined table
query as fallback), duplicate name handling, materialized view refresh and
the write operations that keep box history in step with item changes.
"""
import logging
import time
from collections import defaultdict

from django.db import connection, transaction, DatabaseError
from django.db.models import F
from django.utils import timezone

from reactstock.boxes.models import Box
from reactstock.boxes.services import record_box_transaction
from reactstock.core.cache_utils import bump_cache_version, bump_cache_version_on_commit, ITEMS_LIST_NAMESPACE
from .filters import ItemFilter
from .matview_sql import ITEMS_VIEW_NAME, CREATE_ITEMS_VIEW_SQL, DROP_ITEMS_VIEW_SQL
from .models import Item, ItemCompleteView, ItemProperties

logger = logging.getLogger('reactstock.catalog')

ITEM_ROW_FIELDS = [
    'id', 'name', 'description', 'quantity', 'box_id', 'parent_item_id', 'group_id',
    'supplier', 'type', 'serial_number', 'ean_code', 'qr_code', 'notes', 'additional_data',
    'last_transaction_at', 'last_transaction_type', 'deleted_at', 'created_at', 'updated_at',
    'box_number', 'box_description', 'location_name', 'location_color', 'shelf_name', 'parent_name',
]

SORT_FIELDS = (
    'id', 'name', 'created_at', 'quantity', 'box_id', 'type',
    'ean_code', 'serial_number', 'supplier', 'description',
)


class ItemFilterError(Exception):
    def __init__(self, errors):
        super().__init__(str(errors))
        self.errors = errors


def normalize_sort(sort, direction):
    """Whitelist the sort column and direction; unknown values fall back to id/asc"""
    sort = sort if sort in SORT_FIELDS else 'id'
    direction = (direction or 'asc').lower()
    if direction not in ('asc', 'desc'):
        direction = 'asc'
    return sort, direction


def apply_sort(queryset, sort, direction):
    sort, direction = normalize_sort(sort, direction)
    column = F(sort).desc(nulls_last=True) if direction == 'desc' else F(sort).asc(nulls_last=True)
    if sort == 'id':
        return queryset.order_by(column)
    return queryset.order_by(column, 'id')


def joined_items_queryset(include_deleted=False):
    """Items joined with box, location, shelf and parent names (same keys as the view)"""
    queryset = Item.objects.all() if include_deleted else Item.objects.active()
    return queryset.annotate(
        box_number=F('box__box_number'),
        box_description=F('box__description'),
        location_name=F('box__location__name'),
        location_color=F('box__location__color'),
        shelf_name=F('box__shelf__name'),
        parent_name=F('parent_item__name'),
    )


def items_view_available():
    if connection.vendor != 'postgresql':
        return False
    with connection.cursor() as cursor:
        cursor.execute('SELECT to_regclass(%s)', [ITEMS_VIEW_NAME])
        return cursor.fetchone()[0] is not None


def process_duplicate_item_names(rows):
    """
    Give items that share a name a distinguishing display_name.

    The first item of each name (lowest id) keeps its name. Later ones get
    " (Box <number>)" when boxed, otherwise " (ID: <id>)". Items with a
    unique name get no display_name key. Rows are modified in place.
    """
    by_name = defaultdict(list)
    for row in rows:
        if row.get('name'):
            by_name[row['name']].append(row)

    for name, duplicates in by_name.items():
        if len(duplicates) < 2:
            continue
        duplicates.sort(key=lambda r: r['id'])
        for index, row in enumerate(duplicates):
            if index == 0:
                row['display_name'] = name
            elif row.get('box_id') and row.get('box_number'):
                row['display_name'] = f"{name} (Box {row['box_number']})"
            else:
                row['display_name'] = f"{name} (ID: {row['id']})"
    return rows


def _filtered_rows(queryset, params, sort, direction):
    filterset = ItemFilter(params, queryset=queryset)
    if not filterset.is_valid():
        raise ItemFilterError(filterset.errors)
    return list(apply_sort(filterset.qs, sort, direction).values(*ITEM_ROW_FIELDS))


def fetch_item_rows(params, include_deleted=False):
    """
    Return (rows, source) for the item list.

    The materialized view is used when present and deleted items are not
    requested. Any database error reading it falls back to the joined query.
    """
    sort = params.get('sort', 'id')
    direction = params.get('sort_direction', 'asc')

    if not include_deleted and items_view_available():
        try:
            with transaction.atomic():
                rows = _filtered_rows(ItemCompleteView.objects.all(), params, sort, direction)
            return process_duplicate_item_names(rows), 'view'
        except DatabaseError as e:
            logger.warning(f"Error using {ITEMS_VIEW_NAME}, falling back to direct query: {str(e)}")

    rows = _filtered_rows(joined_items_queryset(include_deleted), params, sort, direction)
    return process_duplicate_item_names(rows), 'table'


def refresh_items_view(force_rebuild=False):
    """
    Refresh items_complete_view.

    Tries a concurrent refresh first, then a plain refresh. If both fail (or
    force_rebuild is set) the view is dropped and recreated. Returns a dict
    with the item count and timing; on non-PostgreSQL databases nothing is
    refreshed and the count comes from the items table.
    """
    started = time.monotonic()

    if connection.vendor != 'postgresql':
        logger.debug(f"Skipping {ITEMS_VIEW_NAME} refresh on {connection.vendor}")
        return {
            'refreshed': False,
            'rebuilt': False,
            'item_count': Item.objects.active().count(),
            'refresh_time_ms': int((time.monotonic() - started) * 1000),
        }

    refreshed = False
    rebuilt = False
    if not force_rebuild:
        for statement in (f'REFRESH MATERIALIZED VIEW CONCURRENTLY {ITEMS_VIEW_NAME}',
                          f'REFRESH MATERIALIZED VIEW {ITEMS_VIEW_NAME}'):
            try:
                with transaction.atomic(), connection.cursor() as cursor:
                    cursor.execute(statement)
                refreshed = True
                break
            except DatabaseError as e:
                logger.warning(f"'{statement}' failed: {str(e)}")

    if not refreshed:
        logger.info(f"Rebuilding {ITEMS_VIEW_NAME}")
        with transaction.atomic(), connection.cursor() as cursor:
            cursor.execute(DROP_ITEMS_VIEW_SQL)
            for statement in CREATE_ITEMS_VIEW_SQL:
                cursor.execute(statement)
        refreshed = True
        rebuilt = True

    with connection.cursor() as cursor:
        cursor.execute(f'SELECT COUNT(*) FROM {ITEMS_VIEW_NAME}')
        item_count = cursor.fetchone()[0]

    elapsed = int((time.monotonic() - started) * 1000)
    logger.info(f"{ITEMS_VIEW_NAME} refreshed ({item_count} items, {elapsed}ms, rebuilt={rebuilt})")
    return {
        'refreshed': refreshed,
        'rebuilt': rebuilt,
        'item_count': item_count,
        'refresh_time_ms': elapsed,
    }


def schedule_view_refresh():
    """Refresh the view once the surrounding transaction commits"""
    def _refresh():
        try:
            refresh_items_view()
        except DatabaseError as e:
            logger.error(f"Deferred refresh of {ITEMS_VIEW_NAME} failed: {str(e)}", exc_info=True)
            return
        # Lists cached while the view was still stale are dropped
        bump_cache_version(ITEMS_LIST_NAMESPACE)
    transaction.on_commit(_refresh)


@transaction.atomic
def create_item(serializer, user):
    item = serializer.save(
        last_transaction_type='CREATE',
        last_transaction_at=timezone.now(),
    )
    if item.box_id:
        record_box_transaction(item.box_id, 'ADD_ITEM', user=user, item=item,
                               notes=f"Item '{item.name}' added to box")
    logger.info(f"Item {item.id} '{item.name}' created by {getattr(user, 'username', 'system')}")
    schedule_view_refresh()
    return item


@transaction.atomic
def update_item(serializer, user):
    """Save a validated ItemSerializer; box moves are written to both boxes' history"""
    item = serializer.instance
    old_box_id = item.box_id
    item = serializer.save(
        last_transaction_type='UPDATE',
        last_transaction_at=timezone.now(),
    )
    if old_box_id != item.box_id:
        if old_box_id:
            record_box_transaction(old_box_id, 'REMOVE_ITEM', user=user, item=item,
                                   notes=f"Item '{item.name}' removed from box")
        if item.box_id:
            record_box_transaction(item.box_id, 'ADD_ITEM', user=user, item=item,
                                   notes=f"Item '{item.name}' added to box")
    schedule_view_refresh()
    return item


@transaction.atomic
def soft_delete_items(item_ids):
    """Mark active items as deleted. Returns the ids that were deleted."""
    items = Item.objects.active().select_for_update().filter(id__in=item_ids)
    deleted_ids = list(items.values_list('id', flat=True))
    now = timezone.now()
    Item.objects.filter(id__in=deleted_ids).update(
        deleted_at=now,
        last_transaction_type='DELETE',
        last_transaction_at=now,
    )
    bump_cache_version_on_commit(ITEMS_LIST_NAMESPACE)
    schedule_view_refresh()
    return deleted_ids


@transaction.atomic
def permanently_delete_items(item_ids):
    """Remove items and their properties for good. Returns the ids removed."""
    items = Item.objects.filter(id__in=item_ids)
    deleted_ids = list(items.values_list('id', flat=True))
    ItemProperties.objects.filter(item_id__in=deleted_ids).delete()
    items.delete()
    bump_cache_version_on_commit(ITEMS_LIST_NAMESPACE)
    schedule_view_refresh()
    return deleted_ids


@transaction.atomic
def restore_item(item):
    item.deleted_at = None
    item.mark_transaction('RESTORE')
    item.save(update_fields=['deleted_at', 'last_transaction_type', 'last_transaction_at', 'updated_at'])
    schedule_view_refresh()
    return item


@transaction.atomic
def transfer_item(item, destination_box, user, source_box_id=None, notes=None):
    """
    Move an item to another box, writing TRANSFER_OUT on the source box
    (when there is one) and TRANSFER_IN on the destination.
    """
    source_box_id = source_box_id or item.box_id
    if source_box_id and not Box.objects.filter(pk=source_box_id).exists():
        source_box_id = None

    item.box = destination_box
    item.mark_transaction('TRANSFER')
    item.save(update_fields=['box', 'last_transaction_type', 'last_transaction_at', 'updated_at'])

    if source_box_id:
        record_box_transaction(source_box_id, 'TRANSFER_OUT', user=user, item=item,
                               notes=notes or f"Item '{item.name}' transferred out")
    record_box_transaction(destination_box.pk, 'TRANSFER_IN', user=user, item=item,
                           notes=notes or f"Item '{item.name}' transferred in")
    logger.info(f"Item {item.id} transferred from box {source_box_id} to box {destination_box.pk}")
    schedule_view_refresh()
    return item


@transaction.atomic
def save_item_properties(item, data):
    """
    Upsert an item's properties and mirror type, EAN and serial number onto
    the item row so list queries see them without the join.
    """
    properties, _ = ItemProperties.objects.select_for_update().get_or_create(item=item)
    for field in ('type', 'ean_code', 'serial_number', 'additional_data'):
        if field in data:
            setattr(properties, field, data[field])
    if properties.additional_data is None:
        properties.additional_data = {}
    properties.save()

    item.type = properties.type
    item.ean_code = properties.ean_code
    item.serial_number = properties.serial_number
    item.save(update_fields=['type', 'ean_code', 'serial_number', 'updated_at'])
    schedule_view_refresh()
    return properties
