from rest_framework import serializers
from .models import Location, Shelf, Color


class LocationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Location
        fields = ['id', 'name', 'description', 'color', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ShelfSerializer(serializers.ModelSerializer):
    location_id = serializers.PrimaryKeyRelatedField(
        source='location', queryset=Location.objects.all(), allow_null=True, required=False
    )
    location_name = serializers.CharField(source='location.name', read_only=True, default=None)

    class Meta:
        model = Shelf
        fields = ['id', 'name', 'description', 'location_id', 'location_name', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ColorSerializer(serializers.ModelSerializer):
    class Meta:
        model = Color
        fields = ['id', 'name', 'value', 'description', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
