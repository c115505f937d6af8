from django.conf import settings
from django.db import models
from django.utils import timezone


class ItemTransaction(models.Model):
    """
    One stock movement of an item (stock in/out, transfer, deletion, ...).

    Item, box and customer references are plain integers so the history
    survives deletion of the rows they point to.
    """
    item_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    item_name = models.CharField(max_length=255)
    transaction_type = models.CharField(max_length=50, db_index=True)
    quantity = models.IntegerField(default=0)
    previous_quantity = models.IntegerField(null=True, blank=True)
    new_quantity = models.IntegerField(null=True, blank=True)
    details = models.TextField(blank=True, null=True)
    reason = models.CharField(max_length=100, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    box_id = models.BigIntegerField(null=True, blank=True)
    previous_box_id = models.BigIntegerField(null=True, blank=True)
    new_box_id = models.BigIntegerField(null=True, blank=True)
    customer_id = models.BigIntegerField(null=True, blank=True, db_index=True)
    customer_info = models.JSONField(null=True, blank=True)
    supplier = models.CharField(max_length=255, blank=True, null=True)
    related_item_id = models.BigIntegerField(null=True, blank=True)
    related_item_name = models.CharField(max_length=255, blank=True, null=True)
    metadata = models.JSONField(null=True, blank=True)
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='item_transactions')
    created_by = models.CharField(max_length=150, default='system')
    created_at = models.DateTimeField(default=timezone.now)
    is_deletion = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.transaction_type} {self.item_name} ({self.quantity})"

    class Meta:
        db_table = 'item_transactions'
        ordering = ['-created_at', '-id']
        indexes = [
            models.Index(fields=['-created_at'], name='item_trans_created_2d7e41_idx'),
            models.Index(fields=['item_id', '-created_at'], name='item_trans_item_id_9a0c53_idx'),
        ]
