from django.urls import path
from .views import (
    location_list_create, location_detail,
    shelf_list_create, shelf_detail,
    color_list_create, color_detail,
)

urlpatterns = [
    path('locations/', location_list_create, name='location-list-create'),
    path('locations/<int:pk>/', location_detail, name='location-detail'),
    path('shelves/', shelf_list_create, name='shelf-list-create'),
    path('shelves/<int:pk>/', shelf_detail, name='shelf-detail'),
    path('colors/', color_list_create, name='color-list-create'),
    path('colors/<int:pk>/', color_detail, name='color-detail'),
]
