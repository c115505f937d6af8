from django.contrib import admin
from .models import Box, BoxTransaction


class BoxTransactionInline(admin.TabularInline):
    model = BoxTransaction
    extra = 0
    fields = ['transaction_type', 'item', 'user', 'notes', 'created_at']
    readonly_fields = ['created_at']


@admin.register(Box)
class BoxAdmin(admin.ModelAdmin):
    list_display = ['box_number', 'reference_id', 'location', 'shelf', 'created_by', 'created_at']
    list_filter = ['location']
    search_fields = ['box_number', 'reference_id', 'serial_number', 'description']
    readonly_fields = ['reference_id', 'created_at', 'updated_at']
    inlines = [BoxTransactionInline]


@admin.register(BoxTransaction)
class BoxTransactionAdmin(admin.ModelAdmin):
    list_display = ['transaction_type', 'box', 'item', 'created_by', 'created_at']
    list_filter = ['transaction_type']
    search_fields = ['notes', 'created_by']
