import time

from django.conf import settings
from django.db import models


def generate_reference_id(box_number, timestamp=None):
    """
    Build the printable box reference: BOX-<number padded to 4>-<last 6 digits of unix time>
    """
    if timestamp is None:
        timestamp = int(time.time())
    suffix = str(int(timestamp))[-6:]
    return f"BOX-{str(box_number).zfill(4)}-{suffix}"


class Box(models.Model):
    """A physical container holding items, placed on a shelf in a location"""
    box_number = models.CharField(max_length=50)
    description = models.TextField(blank=True, null=True)
    serial_number = models.CharField(max_length=255, blank=True, null=True)
    reference_id = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    location = models.ForeignKey('locations.Location', on_delete=models.SET_NULL, null=True, blank=True, related_name='boxes')
    shelf = models.ForeignKey('locations.Shelf', on_delete=models.SET_NULL, null=True, blank=True, related_name='boxes')
    created_by = models.CharField(max_length=150, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Box {self.box_number}"

    def save(self, *args, **kwargs):
        if not self.reference_id and self.box_number:
            self.reference_id = generate_reference_id(self.box_number)
        super().save(*args, **kwargs)

    class Meta:
        db_table = 'boxes'
        ordering = ['-created_at']
        verbose_name_plural = 'boxes'


class BoxTransaction(models.Model):
    """History of changes to a box and of items moving in and out of it"""
    TRANSACTION_TYPE_CHOICES = [
        ('CREATE', 'Create'),
        ('UPDATE', 'Update'),
        ('ADD_ITEM', 'Add Item'),
        ('REMOVE_ITEM', 'Remove Item'),
        ('TRANSFER_IN', 'Transfer In'),
        ('TRANSFER_OUT', 'Transfer Out'),
    ]

    box = models.ForeignKey(Box, on_delete=models.CASCADE, related_name='transactions')
    item = models.ForeignKey('catalog.Item', on_delete=models.SET_NULL, null=True, blank=True, related_name='box_transactions')
    user = models.ForeignKey(settings.AUTH_USER_MODEL, on_delete=models.SET_NULL, null=True, blank=True, related_name='box_transactions')
    transaction_type = models.CharField(max_length=50, choices=TRANSACTION_TYPE_CHOICES)
    notes = models.TextField(blank=True, null=True)
    created_by = models.CharField(max_length=150, blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.transaction_type} box {self.box_id}"

    class Meta:
        db_table = 'transactions'
        ordering = ['-created_at', '-id']
