"""
URL configuration for the reactstock project.

Every app mounts its routes under api/v1/.
"""
from django.contrib import admin
from django.urls import path, include

admin.site.site_header = "ReactStock Admin Panel"
admin.site.site_title = "ReactStock Admin Portal"
admin.site.index_title = "Warehouse inventory administration"

handler404 = 'reactstock.core.exceptions.json_not_found'
handler500 = 'reactstock.core.exceptions.json_server_error'

urlpatterns = [
    path('admin/', admin.site.urls),
    path('api/v1/', include('reactstock.core.urls')),
    path('api/v1/', include('reactstock.locations.urls')),
    path('api/v1/', include('reactstock.boxes.urls')),
    path('api/v1/', include('reactstock.catalog.urls')),
    path('api/v1/', include('reactstock.parties.urls')),
    path('api/v1/', include('reactstock.inventory.urls')),
]
