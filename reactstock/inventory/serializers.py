from rest_framework import serializers

from reactstock.core.utils import parse_optional_int
from .constants import is_deletion_type, transaction_category
from .models import ItemTransaction


class LooseIntegerField(serializers.Field):
    """
    Integer id that also accepts numeric strings and treats '', 'null' and
    'undefined' as null (browser clients send box ids as strings).
    """
    default_error_messages = {
        'invalid': 'A valid integer is required.',
    }

    def __init__(self, **kwargs):
        kwargs.setdefault('allow_null', True)
        kwargs.setdefault('required', False)
        super().__init__(**kwargs)

    def validate_empty_values(self, data):
        if data == '':
            return (True, None)
        return super().validate_empty_values(data)

    def to_internal_value(self, data):
        try:
            return parse_optional_int(data)
        except (TypeError, ValueError):
            self.fail('invalid')

    def to_representation(self, value):
        return value


class ItemTransactionSerializer(serializers.ModelSerializer):
    item_id = LooseIntegerField()
    box_id = LooseIntegerField()
    previous_box_id = LooseIntegerField()
    new_box_id = LooseIntegerField()
    customer_id = LooseIntegerField()
    related_item_id = LooseIntegerField()
    quantity = serializers.IntegerField(required=False, allow_null=True)
    reason = serializers.CharField(required=False, allow_null=True, allow_blank=True, max_length=100)
    customer_info = serializers.JSONField(required=False, allow_null=True)
    metadata = serializers.JSONField(required=False, allow_null=True)
    created_at = serializers.DateTimeField(required=False)
    type = serializers.SerializerMethodField()
    user_name = serializers.CharField(read_only=True, default=None)
    box_number = serializers.CharField(read_only=True, default=None)
    previous_box_number = serializers.CharField(read_only=True, default=None)
    new_box_number = serializers.CharField(read_only=True, default=None)
    customer_name = serializers.CharField(read_only=True, default=None)

    class Meta:
        model = ItemTransaction
        fields = [
            'id', 'item_id', 'item_name', 'transaction_type', 'type', 'quantity',
            'previous_quantity', 'new_quantity', 'details', 'reason', 'notes',
            'box_id', 'box_number', 'previous_box_id', 'previous_box_number', 'new_box_id', 'new_box_number',
            'customer_id', 'customer_name', 'customer_info', 'supplier',
            'related_item_id', 'related_item_name', 'metadata',
            'user_id', 'user_name', 'created_by', 'created_at', 'is_deletion',
        ]
        read_only_fields = ['created_by']

    def get_type(self, obj):
        return transaction_category(obj.transaction_type, obj.is_deletion, obj.details)

    def validate_quantity(self, value):
        return 0 if value is None else value

    def validate(self, attrs):
        if is_deletion_type(attrs.get('transaction_type')):
            attrs['is_deletion'] = True
        return attrs

    def to_representation(self, instance):
        data = super().to_representation(instance)
        data['is_deletion'] = bool(instance.is_deletion) or is_deletion_type(instance.transaction_type)
        return data
