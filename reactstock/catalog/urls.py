from django.urls import path
from .views import (
    item_list_create, item_detail, item_deleted_list,
    item_bulk_delete, item_permanent_delete, item_bulk_permanent_delete,
    item_restore, item_transfer, item_bulk_transfer,
    item_transaction_history, item_properties,
    group_list_create, group_detail,
    refresh_view,
)

urlpatterns = [
    path('items/', item_list_create, name='item-list-create'),
    path('items/deleted/', item_deleted_list, name='item-deleted-list'),
    path('items/bulk-delete/', item_bulk_delete, name='item-bulk-delete'),
    path('items/bulk-permanent-delete/', item_bulk_permanent_delete, name='item-bulk-permanent-delete'),
    path('items/bulk-transfer/', item_bulk_transfer, name='item-bulk-transfer'),
    path('items/<int:pk>/', item_detail, name='item-detail'),
    path('items/<int:pk>/permanent/', item_permanent_delete, name='item-permanent-delete'),
    path('items/<int:pk>/restore/', item_restore, name='item-restore'),
    path('items/<int:pk>/transfer/', item_transfer, name='item-transfer'),
    path('items/<int:pk>/transactions/', item_transaction_history, name='item-transaction-history'),
    path('items/<int:pk>/properties/', item_properties, name='item-properties'),

    path('groups/', group_list_create, name='group-list-create'),
    path('groups/<int:pk>/', group_detail, name='group-detail'),

    path('database/refresh-view/', refresh_view, name='refresh-view'),
]
