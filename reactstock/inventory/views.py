import logging
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from .serializers import ItemTransactionSerializer
from . import services

logger = logging.getLogger('reactstock.inventory')


@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def transaction_list_create(request):
    """
    List item transactions or record a new one.

    GET params: item_id, type (category), transaction_type (repeatable),
    box_id, customer_id, start_date, end_date, is_deletion, limit, offset.
    POST accepts either ``transaction_type`` or ``type`` for the type.
    """
    if request.method == 'POST':
        data = request.data.copy() if hasattr(request.data, 'copy') else dict(request.data)
        transaction_type = data.get('transaction_type') or data.get('type')
        if not transaction_type:
            return Response({
                'error': 'Missing transaction type',
                'details': 'Either "type" or "transaction_type" field is required',
            }, status=status.HTTP_400_BAD_REQUEST)
        data['transaction_type'] = transaction_type

        serializer = ItemTransactionSerializer(data=data)
        if serializer.is_valid():
            entry = services.record_transaction(serializer, request.user)
            return Response(ItemTransactionSerializer(entry).data, status=status.HTTP_201_CREATED)
        logger.warning(f"Item transaction validation failed: {serializer.errors}")
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        transactions = services.filter_transactions(request.query_params)
    except services.TransactionFilterError as e:
        return Response(e.errors, status=status.HTTP_400_BAD_REQUEST)
    except ValueError:
        return Response({'error': 'limit and offset must be integers'}, status=status.HTTP_400_BAD_REQUEST)
    return Response(services.serialize_transactions(transactions))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def item_transactions(request, item_id):
    queryset = services.item_transactions_queryset().filter(item_id=item_id).order_by('-created_at', '-id')
    return Response(services.serialize_transactions(queryset))


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def customer_transactions(request, customer_id):
    """A customer's transactions with consumption totals"""
    return Response(services.customer_summary(customer_id))
