"""Item transaction history: recording, joined reads and customer summaries"""
import logging

from django.db.models import F, OuterRef, Subquery

from reactstock.boxes.models import Box
from reactstock.parties.models import Customer
from .filters import ItemTransactionFilter
from .models import ItemTransaction
from .serializers import ItemTransactionSerializer

logger = logging.getLogger('reactstock.inventory')

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


class TransactionFilterError(Exception):
    def __init__(self, errors):
        super().__init__(str(errors))
        self.errors = errors


def record_transaction(serializer, user):
    """Save a validated ItemTransactionSerializer on behalf of user"""
    authenticated = user is not None and user.is_authenticated
    entry = serializer.save(
        user=user if authenticated else None,
        created_by=user.username if authenticated else 'system',
    )
    logger.info(f"Item transaction {entry.transaction_type} recorded for item {entry.item_id} "
                f"(qty {entry.quantity}) by {entry.created_by}")
    return entry


def _box_number(column):
    return Subquery(Box.objects.filter(pk=OuterRef(column)).values('box_number')[:1])


def item_transactions_queryset():
    """Transactions annotated with user, box and customer names"""
    return ItemTransaction.objects.annotate(
        user_name=F('user__username'),
        box_number=_box_number('box_id'),
        previous_box_number=_box_number('previous_box_id'),
        new_box_number=_box_number('new_box_id'),
        customer_name=Subquery(Customer.objects.filter(pk=OuterRef('customer_id')).values('name')[:1]),
    )


def serialize_transactions(queryset):
    return ItemTransactionSerializer(queryset, many=True).data


def parse_window(params):
    """limit/offset from query params. Raises ValueError on non-integers."""
    limit = int(params.get('limit') or DEFAULT_LIMIT)
    offset = int(params.get('offset') or 0)
    return min(max(limit, 1), MAX_LIMIT), max(offset, 0)


def filter_transactions(params):
    """Filtered transactions, newest first, windowed by limit and offset"""
    filterset = ItemTransactionFilter(params, queryset=item_transactions_queryset())
    if not filterset.is_valid():
        raise TransactionFilterError(filterset.errors)
    limit, offset = parse_window(params)
    return filterset.qs.order_by('-created_at', '-id')[offset:offset + limit]


def customer_summary(customer_id):
    """
    A customer's transactions plus totals.

    mostConsumedItem is the item with the highest summed quantity across
    the customer's transactions, or None when there are none.
    """
    transactions = serialize_transactions(
        item_transactions_queryset().filter(customer_id=customer_id).order_by('-created_at', '-id')
    )

    per_item = {}
    total_quantity = 0
    for entry in transactions:
        quantity = entry['quantity'] or 0
        total_quantity += quantity
        if entry['item_id'] is None:
            continue
        stats = per_item.setdefault(entry['item_id'], {
            'id': entry['item_id'],
            'name': entry['item_name'],
            'quantity': 0,
            'count': 0,
        })
        stats['quantity'] += quantity
        stats['count'] += 1

    most_consumed = None
    for stats in per_item.values():
        if most_consumed is None or stats['quantity'] > most_consumed['quantity']:
            most_consumed = stats

    return {
        'transactions': transactions,
        'summary': {
            'totalItems': len(transactions),
            'totalQuantity': total_quantity,
            'uniqueItems': len(per_item),
            'mostConsumedItem': most_consumed,
        },
    }
