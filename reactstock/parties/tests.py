from django.test import TestCase
from rest_framework import status
from reactstock.core.models import Role
from reactstock.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from reactstock.parties.models import Customer, RemovalReason


class CustomerAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()
        self.client.authenticate_user(self.user)

    def test_list_ordered_by_name(self):
        TestDataFactory.create_customer(name='Zed')
        TestDataFactory.create_customer(name='Amy')
        response = self.client.get('/api/v1/customers/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual([c['name'] for c in response.data], ['Amy', 'Zed'])

    def test_search(self):
        TestDataFactory.create_customer(name='Garden Centre')
        TestDataFactory.create_customer(name='Hardware')
        response = self.client.get('/api/v1/customers/', {'search': 'garden'})
        self.assertEqual(len(response.data), 1)

    def test_create_with_role(self):
        role = Role.objects.get(name='manager')
        response = self.client.post('/api/v1/customers/', {
            'name': 'Lab 3',
            'contact_person': 'Dr. Who',
            'email': '',
            'group_name': 'Research',
            'role_id': role.id,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['role_name'], 'manager')
        self.assertIsNone(Customer.objects.get(name='Lab 3').email)

    def test_name_required(self):
        response = self.client.post('/api/v1/customers/', {'contact_person': 'Nobody'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_update_and_delete(self):
        customer = TestDataFactory.create_customer(name='Old')
        response = self.client.put(f'/api/v1/customers/{customer.id}/', {'name': 'New'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['name'], 'New')
        response = self.client.delete(f'/api/v1/customers/{customer.id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(Customer.objects.filter(pk=customer.id).exists())

    def test_missing_customer(self):
        response = self.client.get('/api/v1/customers/999999/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        response = self.client.get('/api/v1/customers/999999/transactions/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class RemovalReasonAPITests(TestCase):

    def setUp(self):
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_defaults_seeded_and_public(self):
        response = self.client.get('/api/v1/removal-reasons/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        names = {r['name'] for r in response.data}
        self.assertTrue({'CONSUMED', 'DAMAGED', 'EXPIRED', 'LOST', 'RETURNED', 'OTHER', 'SOLD'} <= names)

    def test_write_requires_auth(self):
        response = self.client.post('/api/v1/removal-reasons/', {'name': 'RECYCLED'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_crud(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/removal-reasons/', {
            'name': 'RECYCLED', 'description': 'Sent to recycling',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        reason_id = response.data['id']
        response = self.client.patch(f'/api/v1/removal-reasons/{reason_id}/', {'description': 'Recycled'}, format='json')
        self.assertEqual(response.data['description'], 'Recycled')
        response = self.client.delete(f'/api/v1/removal-reasons/{reason_id}/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertFalse(RemovalReason.objects.filter(pk=reason_id).exists())
