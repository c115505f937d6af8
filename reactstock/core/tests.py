"""
Tests for authentication, users, roles, audit logs and shared helpers
"""
from datetime import timedelta

from django.core.cache import cache
from django.test import TestCase, SimpleTestCase
from django.utils import timezone
from rest_framework import status
from rest_framework_simplejwt.tokens import AccessToken
from reactstock.core.cache_utils import bump_cache_version, get_cache_version, versioned_cache_key
from reactstock.core.middleware import redact_body
from reactstock.core.models import AuditLog, Role, User
from reactstock.core.test_utils import TestDataFactory, AuthenticatedAPIClient
from reactstock.core.utils import create_audit_log, parse_bool, parse_optional_int


class ParsingHelperTests(SimpleTestCase):

    def test_parse_optional_int_null_strings(self):
        for value in (None, '', 'null', 'undefined', 'None', '  '):
            self.assertIsNone(parse_optional_int(value))

    def test_parse_optional_int_numbers(self):
        self.assertEqual(parse_optional_int('42'), 42)
        self.assertEqual(parse_optional_int(7), 7)

    def test_parse_optional_int_rejects_garbage(self):
        with self.assertRaises(ValueError):
            parse_optional_int('abc')
        with self.assertRaises(ValueError):
            parse_optional_int(True)

    def test_parse_bool(self):
        self.assertTrue(parse_bool('true'))
        self.assertTrue(parse_bool('1'))
        self.assertTrue(parse_bool(True))
        self.assertFalse(parse_bool('false'))
        self.assertFalse(parse_bool(None))

    def test_redact_body_masks_nested_credentials(self):
        body = {'username': 'bob', 'password': 'secret', 'nested': [{'token': 'abc', 'keep': 1}]}
        redacted = redact_body(body)
        self.assertEqual(redacted['username'], 'bob')
        self.assertEqual(redacted['password'], '[REDACTED]')
        self.assertEqual(redacted['nested'][0]['token'], '[REDACTED]')
        self.assertEqual(redacted['nested'][0]['keep'], 1)
        # Original payload untouched
        self.assertEqual(body['password'], 'secret')


class CacheVersionTests(SimpleTestCase):

    def setUp(self):
        cache.clear()

    def test_bump_changes_key(self):
        before = versioned_cache_key('things', {'search': ['a']})
        bump_cache_version('things')
        after = versioned_cache_key('things', {'search': ['a']})
        self.assertNotEqual(before, after)
        self.assertEqual(get_cache_version('things'), 2)

    def test_params_named_like_arguments_do_not_collide(self):
        key = versioned_cache_key('things', {'namespace': ['x'], 'prefix': ['y']})
        self.assertTrue(key.startswith('things:'))


class AuthTests(TestCase):
    """Registration, login and the current user endpoint"""

    def setUp(self):
        self.client = AuthenticatedAPIClient()
        self.user = TestDataFactory.create_user(username='alice', password='testpass123')

    def test_register_forces_user_role(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newbie',
            'email': 'newbie@test.com',
            'password': 'secret123',
            'role': 'admin',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data['user']['role'], 'user')
        self.assertIn('access', response.data)
        self.assertIn('refresh', response.data)

    def test_register_short_password(self):
        response = self.client.post('/api/v1/auth/register/', {
            'username': 'newbie', 'password': '123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_login_returns_tokens_and_user(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'alice', 'password': 'testpass123',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['user']['username'], 'alice')
        token = AccessToken(response.data['access'])
        self.assertEqual(token['username'], 'alice')
        self.assertEqual(token['role'], 'user')

    def test_login_remember_me_extends_lifetime(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'alice', 'password': 'testpass123', 'remember_me': True,
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        token = AccessToken(response.data['access'])
        lifetime_days = (token['exp'] - token['iat']) / 86400
        self.assertGreater(lifetime_days, 7)

    def test_login_wrong_password(self):
        response = self.client.post('/api/v1/auth/login/', {
            'username': 'alice', 'password': 'nope',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me_requires_auth(self):
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_401_UNAUTHORIZED)

    def test_me(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/auth/me/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['username'], 'alice')
        self.assertFalse(response.data['is_admin'])

    def test_health_check_is_public(self):
        response = self.client.get('/api/v1/health-check/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['status'], 'ok')

    def test_unknown_route_returns_json_404(self):
        response = self.client.get('/api/v1/does-not-exist/')
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)


class UserAdminTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin(username='boss')
        self.user = TestDataFactory.create_user(username='worker')
        self.client = AuthenticatedAPIClient()

    def test_non_admin_cannot_list_users(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/users/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_user(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/users/', {
            'username': 'clerk', 'password': 'secret123', 'role': 'manager',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(User.objects.get(username='clerk').role, 'manager')
        self.assertTrue(AuditLog.objects.filter(action='create', model_name='User').exists())

    def test_unknown_role_rejected(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/users/', {
            'username': 'clerk', 'password': 'secret123', 'role': 'wizard',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_cannot_delete_self(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.admin.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_admin_deletes_user(self):
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/users/{self.user.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)
        self.assertFalse(User.objects.filter(pk=self.user.id).exists())

    def test_reset_password(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post(f'/api/v1/users/{self.user.id}/reset-password/', {
            'password': 'brandnew1',
        }, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.user.refresh_from_db()
        self.assertTrue(self.user.check_password('brandnew1'))


class RoleTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.client = AuthenticatedAPIClient()

    def test_default_roles_seeded(self):
        self.assertTrue(Role.objects.filter(name__in=['admin', 'manager', 'user']).count() == 3)

    def test_non_admin_cannot_create_role(self):
        self.client.authenticate_user(self.user)
        response = self.client.post('/api/v1/roles/', {'name': 'auditor'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_permissions_must_be_object(self):
        self.client.authenticate_user(self.admin)
        response = self.client.post('/api/v1/roles/', {'name': 'auditor', 'permissions': ['read']}, format='json')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)

    def test_rename_updates_users(self):
        role = TestDataFactory.create_role(name='picker')
        picker = TestDataFactory.create_user(role='picker')
        self.client.authenticate_user(self.admin)
        response = self.client.patch(f'/api/v1/roles/{role.id}/', {'name': 'packer'}, format='json')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        picker.refresh_from_db()
        self.assertEqual(picker.role, 'packer')

    def test_delete_role_in_use_blocked(self):
        role = Role.objects.get(name='user')
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/roles/{role.id}/')
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertEqual(response.data['user_count'], 1)

    def test_delete_unused_role(self):
        role = TestDataFactory.create_role()
        self.client.authenticate_user(self.admin)
        response = self.client.delete(f'/api/v1/roles/{role.id}/')
        self.assertEqual(response.status_code, status.HTTP_204_NO_CONTENT)


class AuditLogTests(TestCase):

    def setUp(self):
        self.admin = TestDataFactory.create_admin()
        self.user = TestDataFactory.create_user()
        self.other = TestDataFactory.create_user()
        create_audit_log(action='create', model_name='Box', object_id=1, user=self.user)
        create_audit_log(action='create', model_name='Box', object_id=2, user=self.other)
        self.client = AuthenticatedAPIClient()

    def test_missing_fields_skip_entry(self):
        self.assertIsNone(create_audit_log(action='create', model_name=None, object_id=1))

    def test_non_admin_sees_own_entries(self):
        self.client.authenticate_user(self.user)
        response = self.client.get('/api/v1/audit-logs/')
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(len(response.data), 1)
        self.assertEqual(response.data[0]['username'], self.user.username)

    def test_admin_sees_all_and_filters(self):
        self.client.authenticate_user(self.admin)
        response = self.client.get('/api/v1/audit-logs/', {'model': 'Box'})
        self.assertEqual(len(response.data), 2)

    def test_non_admin_cannot_read_other_entry(self):
        entry = AuditLog.objects.get(user=self.other)
        self.client.authenticate_user(self.user)
        response = self.client.get(f'/api/v1/audit-logs/{entry.id}/')
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)

    def test_date_filters_accept_dates_and_datetimes(self):
        self.client.authenticate_user(self.admin)
        today = timezone.localdate()
        response = self.client.get('/api/v1/audit-logs/', {'date_to': today.isoformat()})
        self.assertEqual(len(response.data), 2)
        response = self.client.get('/api/v1/audit-logs/', {'date_from': (today + timedelta(days=1)).isoformat()})
        self.assertEqual(len(response.data), 0)
        response = self.client.get('/api/v1/audit-logs/', {
            'date_from': (timezone.now() - timedelta(hours=1)).isoformat(),
        })
        self.assertEqual(len(response.data), 2)

    def test_malformed_dates_are_rejected(self):
        self.client.authenticate_user(self.admin)
        for params in ({'date_from': 'yesterday'}, {'date_to': '2024-13-45'}):
            response = self.client.get('/api/v1/audit-logs/', params)
            self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST, params)
