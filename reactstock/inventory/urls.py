from django.urls import path
from .views import transaction_list_create, item_transactions, customer_transactions

urlpatterns = [
    path('items/transactions/', transaction_list_create, name='item-transaction-list-create'),
    path('items/transactions/item/<int:item_id>/', item_transactions, name='item-transaction-item'),
    path('items/transactions/customer/<int:customer_id>/', customer_transactions, name='item-transaction-customer'),
]
