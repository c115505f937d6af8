from rest_framework import serializers
from reactstock.boxes.models import Box
from reactstock.boxes.serializers import BoxSerializer
from .models import Item, ItemGroup, ItemProperties

# Nullable fields where browsers send '' to clear the value
BLANK_TO_NULL_FIELDS = (
    'description', 'supplier', 'type', 'serial_number', 'ean_code', 'qr_code', 'notes',
    'box_id', 'parent_item_id', 'group_id',
)


class ItemGroupSerializer(serializers.ModelSerializer):
    item_count = serializers.IntegerField(read_only=True, default=0)

    class Meta:
        model = ItemGroup
        fields = ['id', 'name', 'description', 'item_count', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ItemSerializer(serializers.ModelSerializer):
    box_id = serializers.PrimaryKeyRelatedField(
        source='box', queryset=Box.objects.all(), allow_null=True, required=False
    )
    parent_item_id = serializers.PrimaryKeyRelatedField(
        source='parent_item', queryset=Item.objects.all(), allow_null=True, required=False
    )
    group_id = serializers.PrimaryKeyRelatedField(
        source='group', queryset=ItemGroup.objects.all(), allow_null=True, required=False
    )
    box_number = serializers.CharField(source='box.box_number', read_only=True, default=None)
    box_description = serializers.CharField(source='box.description', read_only=True, default=None)
    location_name = serializers.CharField(source='box.location.name', read_only=True, default=None)
    location_color = serializers.CharField(source='box.location.color', read_only=True, default=None)
    shelf_name = serializers.CharField(source='box.shelf.name', read_only=True, default=None)
    parent_name = serializers.CharField(source='parent_item.name', read_only=True, default=None)
    additional_data = serializers.JSONField(required=False)

    class Meta:
        model = Item
        fields = [
            'id', 'name', 'description', 'quantity', 'box_id', 'parent_item_id', 'group_id',
            'supplier', 'type', 'serial_number', 'ean_code', 'qr_code', 'notes', 'additional_data',
            'last_transaction_at', 'last_transaction_type', 'deleted_at', 'created_at', 'updated_at',
            'box_number', 'box_description', 'location_name', 'location_color', 'shelf_name', 'parent_name',
        ]
        read_only_fields = ['last_transaction_at', 'last_transaction_type', 'deleted_at', 'created_at', 'updated_at']

    def to_internal_value(self, data):
        if hasattr(data, 'items'):
            data = {
                key: (None if key in BLANK_TO_NULL_FIELDS and value == '' else value)
                for key, value in data.items()
            }
            if data.get('quantity') in ('', None) and 'quantity' in data:
                data['quantity'] = 0
            if data.get('additional_data') is None and 'additional_data' in data:
                data['additional_data'] = {}
        return super().to_internal_value(data)

    def validate(self, attrs):
        parent = attrs.get('parent_item')
        if parent is not None and self.instance is not None and parent.pk == self.instance.pk:
            raise serializers.ValidationError({'parent_item_id': 'An item cannot be its own parent'})
        return attrs


class ItemPropertiesSerializer(serializers.ModelSerializer):
    item_id = serializers.IntegerField(read_only=True)
    additional_data = serializers.JSONField(required=False)

    class Meta:
        model = ItemProperties
        fields = ['id', 'item_id', 'type', 'ean_code', 'serial_number', 'additional_data', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']


class ItemDetailSerializer(ItemSerializer):
    box = BoxSerializer(read_only=True)
    properties = serializers.SerializerMethodField()

    class Meta(ItemSerializer.Meta):
        fields = ItemSerializer.Meta.fields + ['box', 'properties']

    def get_properties(self, obj):
        properties = ItemProperties.objects.filter(item=obj).first()
        return ItemPropertiesSerializer(properties).data if properties else None
