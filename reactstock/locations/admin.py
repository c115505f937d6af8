from django.contrib import admin
from .models import Location, Shelf, Color


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ['name', 'color', 'created_at']
    search_fields = ['name', 'description']
    ordering = ['name']


@admin.register(Shelf)
class ShelfAdmin(admin.ModelAdmin):
    list_display = ['name', 'location', 'created_at']
    list_filter = ['location']
    search_fields = ['name', 'description']
    ordering = ['name']


@admin.register(Color)
class ColorAdmin(admin.ModelAdmin):
    list_display = ['name', 'value', 'created_at']
    search_fields = ['name', 'value']
    ordering = ['name']
