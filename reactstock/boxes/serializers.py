from rest_framework import serializers
from reactstock.locations.models import Location, Shelf
from .models import Box, BoxTransaction


class BoxTransactionSerializer(serializers.ModelSerializer):
    user_username = serializers.CharField(source='user.username', read_only=True, default=None)
    user_full_name = serializers.CharField(source='user.full_name', read_only=True, default=None)
    item_name = serializers.CharField(source='item.name', read_only=True, default=None)

    class Meta:
        model = BoxTransaction
        fields = ['id', 'box_id', 'item_id', 'item_name', 'user_id', 'user_username', 'user_full_name',
                  'transaction_type', 'notes', 'created_by', 'created_at']


class BoxSerializer(serializers.ModelSerializer):
    location_id = serializers.PrimaryKeyRelatedField(
        source='location', queryset=Location.objects.all(), allow_null=True, required=False
    )
    shelf_id = serializers.PrimaryKeyRelatedField(
        source='shelf', queryset=Shelf.objects.all(), allow_null=True, required=False
    )
    location_name = serializers.CharField(source='location.name', read_only=True, default=None)
    location_color = serializers.CharField(source='location.color', read_only=True, default=None)
    shelf_name = serializers.CharField(source='shelf.name', read_only=True, default=None)

    class Meta:
        model = Box
        fields = ['id', 'box_number', 'description', 'serial_number', 'reference_id',
                  'location_id', 'location_name', 'location_color', 'shelf_id', 'shelf_name',
                  'created_by', 'created_at', 'updated_at']
        read_only_fields = ['reference_id', 'created_at', 'updated_at']


class BoxDetailSerializer(BoxSerializer):
    transactions = BoxTransactionSerializer(many=True, read_only=True)

    class Meta(BoxSerializer.Meta):
        fields = BoxSerializer.Meta.fields + ['transactions']
