from django.urls import path
from .views import (
    customer_list_create, customer_detail, customer_transactions,
    removal_reason_list_create, removal_reason_detail,
)

urlpatterns = [
    path('customers/', customer_list_create, name='customer-list-create'),
    path('customers/<int:pk>/', customer_detail, name='customer-detail'),
    path('customers/<int:pk>/transactions/', customer_transactions, name='customer-transactions'),
    path('removal-reasons/', removal_reason_list_create, name='removal-reason-list-create'),
    path('removal-reasons/<int:pk>/', removal_reason_detail, name='removal-reason-detail'),
]
