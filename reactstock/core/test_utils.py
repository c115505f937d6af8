"""
Test utilities and factories for creating test data
"""
from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework.test import APIClient
from rest_framework_simplejwt.tokens import RefreshToken
from reactstock.core.models import Role
from reactstock.locations.models import Location, Shelf, Color
from reactstock.boxes.models import Box
from reactstock.catalog.models import Item, ItemGroup, ItemProperties
from reactstock.parties.models import Customer, RemovalReason
from reactstock.inventory.models import ItemTransaction
import random
import string

User = get_user_model()


class TestDataFactory:
    """Factory class for creating test data"""

    @staticmethod
    def random_string(length=10):
        """Generate a random string"""
        return ''.join(random.choices(string.ascii_letters + string.digits, k=length))

    @staticmethod
    def create_user(username=None, email=None, password='testpass123', role='user', is_staff=False, is_superuser=False):
        """Create a test user"""
        if not username:
            username = f'testuser_{TestDataFactory.random_string(6)}'
        if not email:
            email = f'{username}@test.com'
        return User.objects.create_user(
            username=username,
            email=email,
            password=password,
            role=role,
            full_name=f'Test {username}',
            is_staff=is_staff,
            is_superuser=is_superuser
        )

    @staticmethod
    def create_admin(username=None, password='testpass123'):
        """Create a user with the admin role"""
        return TestDataFactory.create_user(username=username, password=password, role='admin')

    @staticmethod
    def create_role(name=None, description=None, permissions=None):
        if not name:
            name = f'role_{TestDataFactory.random_string(6).lower()}'
        return Role.objects.create(name=name, description=description, permissions=permissions or {})

    @staticmethod
    def create_location(name=None, color='#3366ff'):
        """Create a test location"""
        if not name:
            name = f'Location_{TestDataFactory.random_string(6)}'
        return Location.objects.create(name=name, description=f'Test location {name}', color=color)

    @staticmethod
    def create_shelf(name=None, location=None):
        """Create a test shelf"""
        if not name:
            name = f'Shelf_{TestDataFactory.random_string(6)}'
        return Shelf.objects.create(name=name, location=location)

    @staticmethod
    def create_color(name=None, value='#ff0000'):
        if not name:
            name = f'Color_{TestDataFactory.random_string(6)}'
        return Color.objects.create(name=name, value=value)

    @staticmethod
    def create_box(box_number=None, location=None, shelf=None, description=None, created_by='testuser'):
        """Create a test box"""
        if box_number is None:
            box_number = str(random.randint(1, 9999))
        return Box.objects.create(
            box_number=str(box_number),
            description=description or f'Test box {box_number}',
            location=location,
            shelf=shelf,
            created_by=created_by
        )

    @staticmethod
    def create_group(name=None):
        if not name:
            name = f'Group_{TestDataFactory.random_string(6)}'
        return ItemGroup.objects.create(name=name)

    @staticmethod
    def create_item(name=None, quantity=1, box=None, parent_item=None, group=None, deleted=False, **fields):
        """Create a test item (soft-deleted when deleted=True)"""
        if not name:
            name = f'Item_{TestDataFactory.random_string(6)}'
        return Item.objects.create(
            name=name,
            quantity=quantity,
            box=box,
            parent_item=parent_item,
            group=group,
            deleted_at=timezone.now() if deleted else None,
            **fields
        )

    @staticmethod
    def create_item_properties(item, type=None, ean_code=None, serial_number=None, additional_data=None):
        return ItemProperties.objects.create(
            item=item,
            type=type,
            ean_code=ean_code,
            serial_number=serial_number,
            additional_data=additional_data or {}
        )

    @staticmethod
    def create_customer(name=None, contact_person=None, email=None, role=None):
        """Create a test customer"""
        if not name:
            name = f'Customer_{TestDataFactory.random_string(6)}'
        return Customer.objects.create(
            name=name,
            contact_person=contact_person,
            email=email or f'{name.lower()}@test.com',
            role=role
        )

    @staticmethod
    def create_removal_reason(name=None, description=None):
        if not name:
            name = f'REASON_{TestDataFactory.random_string(6).upper()}'
        return RemovalReason.objects.create(name=name, description=description)

    @staticmethod
    def create_item_transaction(item=None, transaction_type='STOCK_IN', quantity=1, user=None, **fields):
        """Create a test item transaction; item_name defaults to the item's name"""
        fields.setdefault('item_name', item.name if item else f'Item_{TestDataFactory.random_string(6)}')
        if item is not None:
            fields['item_id'] = item.id
        return ItemTransaction.objects.create(
            transaction_type=transaction_type,
            quantity=quantity,
            user=user,
            created_by=user.username if user else 'system',
            **fields
        )


class AuthenticatedAPIClient(APIClient):
    """APIClient with authentication helper"""

    def authenticate_user(self, user):
        """Authenticate the client with a user"""
        refresh = RefreshToken.for_user(user)
        self.credentials(HTTP_AUTHORIZATION=f'Bearer {refresh.access_token}')
        return self

    def logout(self):
        """Remove authentication"""
        self.credentials()
