from django.urls import path
from .views import (
    box_list_create, box_detail, box_transactions, box_label,
    public_box_items, public_box_details, transaction_list,
)

urlpatterns = [
    path('boxes/', box_list_create, name='box-list-create'),
    path('boxes/public/<str:box_id>/', public_box_items, name='box-public-items'),
    path('boxes/public/<str:box_id>/details/', public_box_details, name='box-public-details'),
    path('boxes/<int:pk>/transactions/', box_transactions, name='box-transactions'),
    path('boxes/<int:pk>/label/', box_label, name='box-label'),
    path('boxes/<str:pk>/', box_detail, name='box-detail'),
    path('transactions/', transaction_list, name='box-transaction-list'),
]
