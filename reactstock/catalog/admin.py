from django.contrib import admin
from .models import Item, ItemGroup, ItemProperties


@admin.register(ItemGroup)
class ItemGroupAdmin(admin.ModelAdmin):
    list_display = ['name', 'description', 'created_at']
    search_fields = ['name']
    ordering = ['name']


class ItemPropertiesInline(admin.StackedInline):
    model = ItemProperties
    extra = 0


@admin.register(Item)
class ItemAdmin(admin.ModelAdmin):
    list_display = ['id', 'name', 'quantity', 'box', 'type', 'serial_number', 'ean_code', 'deleted_at']
    list_filter = ['type', 'last_transaction_type']
    search_fields = ['name', 'serial_number', 'ean_code', 'qr_code', 'supplier']
    raw_id_fields = ['box', 'parent_item']
    inlines = [ItemPropertiesInline]
