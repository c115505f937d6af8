import logging
from django.conf import settings
from django.core.cache import cache
from django.db import DatabaseError
from django.db.models import Count
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from reactstock.boxes.models import Box
from reactstock.core.cache_utils import versioned_cache_key, bump_cache_version, ITEMS_LIST_NAMESPACE
from reactstock.core.pagination import paginate
from reactstock.core.permissions import IsAdminRole
from reactstock.core.utils import create_audit_log, parse_bool, parse_optional_int
from reactstock.inventory.services import item_transactions_queryset, serialize_transactions
from .models import Item, ItemGroup, ItemProperties
from .serializers import ItemSerializer, ItemDetailSerializer, ItemGroupSerializer, ItemPropertiesSerializer
from . import services

logger = logging.getLogger('reactstock.catalog')


def _item_ids_from_request(request):
    """Validate the item_ids list of bulk endpoints. Returns (ids, error_response)."""
    item_ids = request.data.get('item_ids')
    if not isinstance(item_ids, list) or not item_ids:
        return None, Response({'error': 'item_ids must be a non-empty array'}, status=status.HTTP_400_BAD_REQUEST)
    try:
        return [int(item_id) for item_id in item_ids], None
    except (TypeError, ValueError):
        return None, Response({'error': 'item_ids must contain only integers'}, status=status.HTTP_400_BAD_REQUEST)


def _items_queryset():
    return Item.objects.select_related('box__location', 'box__shelf', 'parent_item')


# Item views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def item_list_create(request):
    """
    List items or create a new item.

    GET params: search, box_id, parent_id, group_id, qr_code, ean_code,
    serial_number, type, include_deleted, sort, sort_direction, and
    optionally page/page_size for a paginated response.
    """
    if request.method == 'POST':
        serializer = ItemSerializer(data=request.data)
        if serializer.is_valid():
            item = services.create_item(serializer, request.user)
            create_audit_log(request, 'create', 'Item', item.id, {'quantity': item.quantity, 'box_id': item.box_id}, object_name=item.name)
            return Response(ItemSerializer(item).data, status=status.HTTP_201_CREATED)
        logger.warning(f"Item creation validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    params = request.query_params
    include_deleted = parse_bool(params.get('include_deleted'))
    cache_key = versioned_cache_key(ITEMS_LIST_NAMESPACE, {k: params.getlist(k) for k in params.keys()})

    rows = cache.get(cache_key)
    if rows is None:
        try:
            rows, source = services.fetch_item_rows(params, include_deleted=include_deleted)
        except services.ItemFilterError as e:
            return Response(e.errors, status=status.HTTP_400_BAD_REQUEST)
        logger.debug(f"Item list served from {source} ({len(rows)} rows)")
        cache.set(cache_key, rows, settings.ITEMS_LIST_CACHE_TTL)

    if 'page' in params:
        try:
            page = max(int(params.get('page', 1)), 1)
            page_size = min(max(int(params.get('page_size', 50)), 1), 500)
        except ValueError:
            return Response({'error': 'page and page_size must be integers'}, status=status.HTTP_400_BAD_REQUEST)
        return Response(paginate(rows, page, page_size))
    return Response(rows)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def item_detail(request, pk):
    """Retrieve, update or soft-delete an item"""
    item = get_object_or_404(_items_queryset(), pk=pk)

    if request.method == 'GET':
        return Response(ItemDetailSerializer(item).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = ItemSerializer(item, data=request.data, partial=True)
        if serializer.is_valid():
            old_values = {'quantity': item.quantity, 'box_id': item.box_id}
            item = services.update_item(serializer, request.user)
            create_audit_log(request, 'update', 'Item', item.id, {
                'before': old_values,
                'after': {'quantity': item.quantity, 'box_id': item.box_id},
            }, object_name=item.name)
            return Response(ItemSerializer(item).data)
        logger.warning(f"Item {pk} update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    # DELETE is a soft delete
    if item.is_deleted:
        return Response({'error': 'Item is already deleted'}, status=status.HTTP_400_BAD_REQUEST)
    services.soft_delete_items([item.id])
    create_audit_log(request, 'soft_delete', 'Item', item.id, object_name=item.name)
    logger.info(f"Item {pk} soft-deleted by {request.user.username}")
    return Response({'message': 'Item deleted successfully', 'id': item.id})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def item_deleted_list(request):
    """Soft-deleted items, most recently deleted first"""
    items = services.joined_items_queryset(include_deleted=True).filter(
        deleted_at__isnull=False
    ).order_by('-deleted_at', 'id')
    return Response(list(items.values(*services.ITEM_ROW_FIELDS)))


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def item_bulk_delete(request):
    item_ids, error = _item_ids_from_request(request)
    if error:
        return error
    deleted_ids = services.soft_delete_items(item_ids)
    for item_id in deleted_ids:
        create_audit_log(request, 'soft_delete', 'Item', item_id, {'bulk': True})
    logger.info(f"User {request.user.username} soft-deleted {len(deleted_ids)} items")
    return Response({
        'message': f'{len(deleted_ids)} items deleted successfully',
        'deleted_ids': deleted_ids,
        'count': len(deleted_ids),
    })


@api_view(['DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def item_permanent_delete(request, pk):
    item = get_object_or_404(Item, pk=pk)
    services.permanently_delete_items([item.id])
    create_audit_log(request, 'permanent_delete', 'Item', pk, object_name=item.name)
    logger.info(f"Item {pk} permanently deleted by {request.user.username}")
    return Response({'message': 'Item permanently deleted', 'id': pk})


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def item_bulk_permanent_delete(request):
    item_ids, error = _item_ids_from_request(request)
    if error:
        return error
    deleted_ids = services.permanently_delete_items(item_ids)
    for item_id in deleted_ids:
        create_audit_log(request, 'permanent_delete', 'Item', item_id, {'bulk': True})
    return Response({
        'message': f'{len(deleted_ids)} items permanently deleted',
        'deleted_ids': deleted_ids,
        'count': len(deleted_ids),
    })


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def item_restore(request, pk):
    item = Item.objects.deleted().filter(pk=pk).first()
    if item is None:
        return Response({'error': 'Deleted item not found'}, status=status.HTTP_404_NOT_FOUND)
    services.restore_item(item)
    create_audit_log(request, 'restore', 'Item', item.id, object_name=item.name)
    return Response({'message': 'Item restored successfully', 'item': ItemSerializer(item).data})


def _resolve_destination_box(request):
    try:
        destination_box_id = parse_optional_int(request.data.get('destination_box_id'))
        source_box_id = parse_optional_int(request.data.get('source_box_id'))
    except ValueError:
        return None, None, Response({'error': 'Box ids must be integers'}, status=status.HTTP_400_BAD_REQUEST)
    if destination_box_id is None:
        return None, None, Response({'error': 'destination_box_id is required'}, status=status.HTTP_400_BAD_REQUEST)
    destination = Box.objects.filter(pk=destination_box_id).first()
    if destination is None:
        return None, None, Response({'error': 'Destination box not found'}, status=status.HTTP_404_NOT_FOUND)
    return destination, source_box_id, None


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def item_transfer(request, pk):
    """Move an item to another box"""
    item = get_object_or_404(Item.objects.active(), pk=pk)
    destination, source_box_id, error = _resolve_destination_box(request)
    if error:
        return error
    previous_box_id = item.box_id
    item = services.transfer_item(item, destination, request.user,
                                  source_box_id=source_box_id, notes=request.data.get('notes'))
    create_audit_log(request, 'transfer', 'Item', item.id, {
        'from_box_id': source_box_id or previous_box_id,
        'to_box_id': destination.pk,
    }, object_name=item.name)
    return Response({'message': 'Item transferred successfully', 'item': ItemSerializer(item).data})


@api_view(['POST'])
@permission_classes([IsAuthenticated])
def item_bulk_transfer(request):
    item_ids, error = _item_ids_from_request(request)
    if error:
        return error
    destination, _, error = _resolve_destination_box(request)
    if error:
        return error
    transferred = []
    for item in Item.objects.active().filter(id__in=item_ids):
        services.transfer_item(item, destination, request.user, notes=request.data.get('notes'))
        create_audit_log(request, 'transfer', 'Item', item.id, {'to_box_id': destination.pk, 'bulk': True}, object_name=item.name)
        transferred.append(item.id)
    return Response({
        'message': f'{len(transferred)} items transferred successfully',
        'transferred_ids': transferred,
        'count': len(transferred),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def item_transaction_history(request, pk):
    """Stock transaction history of one item, newest first"""
    queryset = item_transactions_queryset().filter(item_id=pk).order_by('-created_at', '-id')
    return Response(serialize_transactions(queryset))


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def item_properties(request, pk):
    item = get_object_or_404(Item, pk=pk)

    if request.method == 'GET':
        properties = ItemProperties.objects.filter(item=item).first()
        if properties is None:
            return Response({
                'item_id': item.id,
                'type': None,
                'ean_code': None,
                'serial_number': None,
                'additional_data': {},
            })
        return Response(ItemPropertiesSerializer(properties).data)

    serializer = ItemPropertiesSerializer(data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    properties = services.save_item_properties(item, serializer.validated_data)
    create_audit_log(request, 'update', 'ItemProperties', item.id, request.data, object_name=item.name)
    return Response(ItemPropertiesSerializer(properties).data)


# Item group views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def group_list_create(request):
    if request.method == 'GET':
        groups = ItemGroup.objects.annotate(item_count=Count('items'))
        return Response(ItemGroupSerializer(groups, many=True).data)

    serializer = ItemGroupSerializer(data=request.data)
    if serializer.is_valid():
        group = serializer.save()
        create_audit_log(request, 'create', 'ItemGroup', group.id, object_name=group.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def group_detail(request, pk):
    group = get_object_or_404(ItemGroup.objects.annotate(item_count=Count('items')), pk=pk)

    if request.method == 'GET':
        return Response(ItemGroupSerializer(group).data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = ItemGroupSerializer(group, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'ItemGroup', group.id, request.data, object_name=group.name)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    if group.item_count > 0:
        return Response(
            {'error': f'Cannot delete group: {group.item_count} item(s) still belong to it'},
            status=status.HTTP_400_BAD_REQUEST
        )
    create_audit_log(request, 'delete', 'ItemGroup', group.id, object_name=group.name)
    group.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def refresh_view(request):
    """Refresh items_complete_view (admin only)"""
    force = parse_bool(request.data.get('force'))
    try:
        result = services.refresh_items_view(force_rebuild=force)
    except DatabaseError as e:
        logger.error(f"Error refreshing materialized view: {str(e)}", exc_info=True)
        return Response({'error': 'Failed to refresh materialized view', 'details': str(e)},
                        status=status.HTTP_500_INTERNAL_SERVER_ERROR)
    bump_cache_version(ITEMS_LIST_NAMESPACE)
    create_audit_log(request, 'refresh_view', 'ItemCompleteView', 'items_complete_view', result)
    return Response({
        'success': True,
        'message': 'Materialized view rebuilt successfully' if result['rebuilt'] else 'Materialized view refreshed successfully',
        'itemCount': result['item_count'],
        'refreshTime': f"{result['refresh_time_ms']}ms",
        'rebuilt': result['rebuilt'],
    })
