from django.core.validators import MinValueValidator
from django.db import models
from django.utils import timezone


class ItemGroup(models.Model):
    """Free-form grouping of items (e.g. a kit or a project)"""
    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'groups'
        ordering = ['name']


class ItemQuerySet(models.QuerySet):
    def active(self):
        return self.filter(deleted_at__isnull=True)

    def deleted(self):
        return self.filter(deleted_at__isnull=False)


class Item(models.Model):
    """An inventory unit, usually stored in a box"""
    TRANSACTION_TYPE_CHOICES = [
        ('CREATE', 'Create'),
        ('UPDATE', 'Update'),
        ('TRANSFER', 'Transfer'),
        ('DELETE', 'Delete'),
        ('RESTORE', 'Restore'),
    ]

    name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    quantity = models.IntegerField(default=1, validators=[MinValueValidator(0)])
    box = models.ForeignKey('boxes.Box', on_delete=models.SET_NULL, null=True, blank=True, related_name='items')
    parent_item = models.ForeignKey('self', on_delete=models.SET_NULL, null=True, blank=True, related_name='children')
    group = models.ForeignKey(ItemGroup, on_delete=models.PROTECT, null=True, blank=True, related_name='items')
    supplier = models.CharField(max_length=255, blank=True, null=True)
    type = models.CharField(max_length=100, blank=True, null=True)
    serial_number = models.CharField(max_length=255, blank=True, null=True, db_index=True)
    ean_code = models.CharField(max_length=100, blank=True, null=True, db_index=True)
    qr_code = models.CharField(max_length=255, blank=True, null=True, db_index=True)
    notes = models.TextField(blank=True, null=True)
    additional_data = models.JSONField(default=dict, blank=True)
    last_transaction_at = models.DateTimeField(null=True, blank=True)
    last_transaction_type = models.CharField(max_length=50, choices=TRANSACTION_TYPE_CHOICES, blank=True, null=True)
    deleted_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ItemQuerySet.as_manager()

    def __str__(self):
        return self.name

    @property
    def is_deleted(self):
        return self.deleted_at is not None

    def mark_transaction(self, transaction_type):
        self.last_transaction_type = transaction_type
        self.last_transaction_at = timezone.now()

    class Meta:
        db_table = 'items'
        ordering = ['id']


class ItemProperties(models.Model):
    """Type-specific identifiers of an item"""
    item = models.OneToOneField(Item, on_delete=models.CASCADE, related_name='properties')
    type = models.CharField(max_length=100, blank=True, null=True)
    ean_code = models.CharField(max_length=100, blank=True, null=True)
    serial_number = models.CharField(max_length=255, blank=True, null=True)
    additional_data = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return f"Properties of {self.item_id}"

    class Meta:
        db_table = 'item_properties'
        verbose_name_plural = 'item properties'


class ItemCompleteView(models.Model):
    """
    Read-only mapping of the items_complete_view materialized view
    (PostgreSQL only). Soft-deleted items are not part of the view.
    """
    id = models.BigIntegerField(primary_key=True)
    name = models.CharField(max_length=255)
    description = models.TextField(null=True)
    quantity = models.IntegerField()
    box_id = models.BigIntegerField(null=True)
    parent_item_id = models.BigIntegerField(null=True)
    group_id = models.BigIntegerField(null=True)
    supplier = models.CharField(max_length=255, null=True)
    type = models.CharField(max_length=100, null=True)
    serial_number = models.CharField(max_length=255, null=True)
    ean_code = models.CharField(max_length=100, null=True)
    qr_code = models.CharField(max_length=255, null=True)
    notes = models.TextField(null=True)
    additional_data = models.JSONField(null=True)
    last_transaction_at = models.DateTimeField(null=True)
    last_transaction_type = models.CharField(max_length=50, null=True)
    deleted_at = models.DateTimeField(null=True)
    created_at = models.DateTimeField()
    updated_at = models.DateTimeField()
    box_number = models.CharField(max_length=50, null=True)
    box_description = models.TextField(null=True)
    location_name = models.CharField(max_length=255, null=True)
    location_color = models.CharField(max_length=50, null=True)
    shelf_name = models.CharField(max_length=255, null=True)
    parent_name = models.CharField(max_length=255, null=True)

    class Meta:
        managed = False
        db_table = 'items_complete_view'
