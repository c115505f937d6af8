from django.contrib import admin
from .models import Customer, RemovalReason


@admin.register(Customer)
class CustomerAdmin(admin.ModelAdmin):
    list_display = ['name', 'contact_person', 'email', 'phone', 'group_name', 'role']
    list_filter = ['group_name', 'role']
    search_fields = ['name', 'contact_person', 'email']


@admin.register(RemovalReason)
class RemovalReasonAdmin(admin.ModelAdmin):
    list_display = ['name', 'description']
    search_fields = ['name']
