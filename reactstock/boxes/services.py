"""Box transaction bookkeeping shared by the box and item endpoints"""
import logging

from .models import BoxTransaction

logger = logging.getLogger('reactstock.boxes')


def record_box_transaction(box_id, transaction_type, user=None, item=None, notes=None):
    """Append an entry to a box's history. Returns the BoxTransaction."""
    username = user.username if user is not None and user.is_authenticated else 'system'
    entry = BoxTransaction.objects.create(
        box_id=box_id,
        item=item,
        user=user if user is not None and user.is_authenticated else None,
        transaction_type=transaction_type,
        notes=notes,
        created_by=username,
    )
    logger.debug(f"Box {box_id}: {transaction_type} recorded by {username}")
    return entry
