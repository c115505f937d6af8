from django.contrib import admin
from .models import ItemTransaction


@admin.register(ItemTransaction)
class ItemTransactionAdmin(admin.ModelAdmin):
    list_display = ['transaction_type', 'item_name', 'quantity', 'box_id', 'customer_id', 'created_by', 'created_at', 'is_deletion']
    list_filter = ['transaction_type', 'is_deletion']
    search_fields = ['item_name', 'details', 'notes']
    date_hierarchy = 'created_at'
