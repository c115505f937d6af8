import logging
from django.db import transaction
from django.http import HttpResponse
from django.shortcuts import get_object_or_404
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response

from reactstock.core.utils import create_audit_log, parse_bool, parse_optional_int
from .filters import BoxTransactionFilter
from .label_generator import render_box_label_for, render_box_label_data_url
from .models import Box, BoxTransaction
from .serializers import BoxSerializer, BoxDetailSerializer, BoxTransactionSerializer
from .services import record_box_transaction

logger = logging.getLogger('reactstock.boxes')

INVALID_BOX_IDS = ('null', 'undefined', 'new')


def _parse_box_id(raw_id):
    """Return the integer box id, or None for ids browser clients send by mistake"""
    if raw_id in INVALID_BOX_IDS:
        return None
    try:
        return parse_optional_int(raw_id)
    except ValueError:
        return None


def _boxes_queryset():
    return Box.objects.select_related('location', 'shelf')


def _transactions_queryset():
    return BoxTransaction.objects.select_related('user', 'item')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def box_list_create(request):
    """List boxes newest first, or create a box"""
    if request.method == 'GET':
        return Response(BoxSerializer(_boxes_queryset(), many=True).data)

    serializer = BoxSerializer(data=request.data)
    if serializer.is_valid():
        with transaction.atomic():
            box = serializer.save(created_by=request.data.get('created_by') or request.user.username)
            record_box_transaction(box.id, 'CREATE', user=request.user, notes='Initial box creation')
        create_audit_log(request, 'create', 'Box', box.id, request.data, object_name=f"Box {box.box_number}")
        logger.info(f"Box {box.box_number} ({box.reference_id}) created by {request.user.username}")
        return Response(BoxSerializer(box).data, status=status.HTTP_201_CREATED)
    logger.warning(f"Box creation validation failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def box_detail(request, pk):
    """Retrieve (with history), update or delete a box"""
    box_id = _parse_box_id(pk)
    if box_id is None:
        return Response({'error': 'Invalid box ID'}, status=status.HTTP_400_BAD_REQUEST)
    box = _boxes_queryset().filter(pk=box_id).first()
    if box is None:
        return Response({'error': 'Box not found'}, status=status.HTTP_404_NOT_FOUND)

    if request.method == 'GET':
        box = _boxes_queryset().prefetch_related('transactions__user', 'transactions__item').get(pk=box_id)
        return Response(BoxDetailSerializer(box).data)

    if request.method in ('PUT', 'PATCH'):
        serializer = BoxSerializer(box, data=request.data, partial=True)
        if serializer.is_valid():
            with transaction.atomic():
                box = serializer.save()
                record_box_transaction(box.id, 'UPDATE', user=request.user, notes='Box information updated')
            create_audit_log(request, 'update', 'Box', box.id, request.data, object_name=f"Box {box.box_number}")
            return Response(BoxSerializer(box).data)
        logger.warning(f"Box {box_id} update validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    logger.info(f"User {request.user.username} deleting box {box_id} ({box.box_number})")
    create_audit_log(request, 'delete', 'Box', box.id, object_name=f"Box {box.box_number}")
    box.delete()
    return Response({'message': 'Box deleted successfully'})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def box_transactions(request, pk):
    get_object_or_404(Box, pk=pk)
    entries = _transactions_queryset().filter(box_id=pk).order_by('-created_at', '-id')
    return Response(BoxTransactionSerializer(entries, many=True).data)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_box_items(request, box_id):
    """Items stored in a box, for the QR code landing page (no login)"""
    from reactstock.catalog.services import joined_items_queryset, ITEM_ROW_FIELDS

    parsed_id = _parse_box_id(box_id)
    if parsed_id is None:
        return Response({'error': 'Invalid box ID'}, status=status.HTTP_400_BAD_REQUEST)
    items = joined_items_queryset().filter(box_id=parsed_id).order_by('name', 'id')
    rows = list(items.values(*ITEM_ROW_FIELDS))
    logger.debug(f"Found {len(rows)} items for box {parsed_id} (public endpoint)")
    return Response(rows)


@api_view(['GET'])
@permission_classes([AllowAny])
def public_box_details(request, box_id):
    parsed_id = _parse_box_id(box_id)
    if parsed_id is None:
        return Response({'error': 'Invalid box ID'}, status=status.HTTP_400_BAD_REQUEST)
    box = _boxes_queryset().filter(pk=parsed_id).first()
    if box is None:
        return Response({'error': 'Box not found'}, status=status.HTTP_404_NOT_FOUND)
    data = BoxSerializer(box).data
    return Response({key: data[key] for key in (
        'id', 'box_number', 'description', 'serial_number', 'reference_id', 'created_at',
        'location_name', 'location_color', 'shelf_name',
    )})


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def box_label(request, pk):
    """
    Printable label for a box.

    Returns JSON with a base64 PNG data URL; with ?download=true the raw
    PNG is sent as an attachment instead.
    """
    box = get_object_or_404(_boxes_queryset(), pk=pk)
    if parse_bool(request.query_params.get('download')):
        response = HttpResponse(render_box_label_for(box), content_type='image/png')
        response['Content-Disposition'] = f'attachment; filename="box-{box.box_number}-label.png"'
        return response
    return Response({
        'box_id': box.id,
        'box_number': box.box_number,
        'reference_id': box.reference_id,
        'label': render_box_label_data_url(box),
    })


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def transaction_list(request):
    """
    Box transactions across all boxes, newest first.

    Filters: item_id, transaction_type, box_id, start_date, end_date, limit (default 100).
    """
    filterset = BoxTransactionFilter(request.query_params, queryset=_transactions_queryset())
    if not filterset.is_valid():
        return Response(filterset.errors, status=status.HTTP_400_BAD_REQUEST)
    try:
        limit = min(max(int(request.query_params.get('limit') or 100), 1), 1000)
    except ValueError:
        return Response({'error': 'limit must be an integer'}, status=status.HTTP_400_BAD_REQUEST)
    entries = filterset.qs.order_by('-created_at', '-id')[:limit]
    return Response(BoxTransactionSerializer(entries, many=True).data)
