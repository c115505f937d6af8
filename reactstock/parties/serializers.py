from rest_framework import serializers
from reactstock.core.models import Role
from .models import Customer, RemovalReason


class CustomerSerializer(serializers.ModelSerializer):
    role_id = serializers.PrimaryKeyRelatedField(
        source='role', queryset=Role.objects.all(), allow_null=True, required=False
    )
    role_name = serializers.CharField(source='role.name', read_only=True, default=None)

    class Meta:
        model = Customer
        fields = ['id', 'name', 'contact_person', 'email', 'phone', 'address', 'notes',
                  'group_name', 'role_id', 'role_name', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']

    def validate_email(self, value):
        return value or None


class RemovalReasonSerializer(serializers.ModelSerializer):
    class Meta:
        model = RemovalReason
        fields = ['id', 'name', 'description', 'created_at', 'updated_at']
        read_only_fields = ['created_at', 'updated_at']
