import logging
from datetime import datetime, time, timedelta

from django.conf import settings
from django.contrib.auth import get_user_model
from django.core.exceptions import ObjectDoesNotExist
from django.db import transaction
from django.shortcuts import get_object_or_404
from django.utils import timezone
from django.utils.dateparse import parse_date, parse_datetime
from rest_framework import serializers, status
from rest_framework.decorators import api_view, permission_classes, authentication_classes
from rest_framework.permissions import IsAuthenticated, AllowAny
from rest_framework.response import Response
from rest_framework_simplejwt.exceptions import InvalidToken, TokenError, AuthenticationFailed
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView

from .models import Role, AuditLog
from .permissions import IsAdminRole, is_admin_user
from .serializers import (
    UserSerializer, UserCreateSerializer, PasswordResetSerializer,
    RoleSerializer, AuditLogSerializer
)
from .utils import create_audit_log

logger = logging.getLogger('reactstock.core')

User = get_user_model()


class CustomTokenObtainPairSerializer(TokenObtainPairSerializer):
    remember_me = serializers.BooleanField(required=False, default=False)

    def validate(self, attrs):
        remember_me = attrs.pop('remember_me', False)
        data = super().validate(attrs)
        if not self.user.is_active:
            raise AuthenticationFailed('User account is disabled.')

        if remember_me:
            lifetime = timedelta(days=settings.JWT_REMEMBER_ME_LIFETIME_DAYS)
            refresh = self.get_token(self.user)
            refresh.set_exp(lifetime=lifetime)
            access = refresh.access_token
            access.set_exp(lifetime=lifetime)
            data['refresh'] = str(refresh)
            data['access'] = str(access)

        data['user'] = UserSerializer(self.user).data
        logger.info(f"User {self.user.username} logged in (remember_me={remember_me})")
        return data

    @classmethod
    def get_token(cls, user):
        token = super().get_token(user)
        token['username'] = user.username
        token['role'] = user.role
        return token


class CustomTokenObtainPairView(TokenObtainPairView):
    serializer_class = CustomTokenObtainPairSerializer


class CustomTokenRefreshSerializer(TokenRefreshSerializer):
    """Token refresh that reports deleted users as an invalid token"""
    def validate(self, attrs):
        try:
            return super().validate(attrs)
        except (InvalidToken, TokenError):
            raise InvalidToken('Token is invalid or expired.')
        except (ObjectDoesNotExist, User.DoesNotExist):
            raise InvalidToken('Token is invalid. User no longer exists.')


class CustomTokenRefreshView(TokenRefreshView):
    serializer_class = CustomTokenRefreshSerializer


@api_view(['POST'])
@permission_classes([AllowAny])
def register(request):
    """User registration endpoint. New accounts always get the 'user' role."""
    data = request.data.copy()
    data['role'] = 'user'
    serializer = UserCreateSerializer(data=data)
    if serializer.is_valid():
        user = serializer.save()
        token = CustomTokenObtainPairSerializer.get_token(user)
        logger.info(f"User {user.username} registered")
        return Response({
            'user': UserSerializer(user).data,
            'access': str(token.access_token),
            'refresh': str(token),
        }, status=status.HTTP_201_CREATED)
    logger.warning(f"Registration failed: {serializer.errors}")
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def user_me(request):
    """Get the current user"""
    return Response(UserSerializer(request.user).data)


@api_view(['GET'])
@authentication_classes([])
@permission_classes([AllowAny])
def health_check(request):
    now = timezone.now()
    return Response({
        'status': 'ok',
        'timestamp': now.isoformat(),
        'server_time': timezone.localtime(now).strftime('%Y-%m-%d %H:%M:%S %Z'),
    })


# User views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_list_create(request):
    """List all users or create a new user (admin only)"""
    if request.method == 'GET':
        users = User.objects.all().order_by('username')
        serializer = UserSerializer(users, many=True)
        return Response(serializer.data)

    serializer = UserCreateSerializer(data=request.data)
    if serializer.is_valid():
        user = serializer.save()
        create_audit_log(request, 'create', 'User', user.id, {'role': user.role}, object_name=user.username)
        logger.info(f"User {user.username} created by {request.user.username}")
        return Response(UserSerializer(user).data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_detail(request, pk):
    """Retrieve, update or delete a user (admin only)"""
    user = get_object_or_404(User, pk=pk)

    if request.method == 'GET':
        serializer = UserSerializer(user)
        return Response(serializer.data)
    elif request.method in ('PUT', 'PATCH'):
        serializer = UserSerializer(user, data=request.data, partial=True)
        if serializer.is_valid():
            serializer.save()
            create_audit_log(request, 'update', 'User', user.id, dict(serializer.validated_data), object_name=user.username)
            return Response(serializer.data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    else:  # DELETE
        if user.pk == request.user.pk:
            return Response({'error': 'You cannot delete your own account'}, status=status.HTTP_400_BAD_REQUEST)
        logger.info(f"User {request.user.username} deleting user {user.username}")
        create_audit_log(request, 'delete', 'User', user.id, object_name=user.username)
        user.delete()
        return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(['POST'])
@permission_classes([IsAuthenticated, IsAdminRole])
def user_reset_password(request, pk):
    """Set a new password for a user (admin only)"""
    user = get_object_or_404(User, pk=pk)
    serializer = PasswordResetSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)
    user.set_password(serializer.validated_data['password'])
    user.save(update_fields=['password', 'updated_at'])
    create_audit_log(request, 'password_reset', 'User', user.id, object_name=user.username)
    logger.info(f"Password reset for user {user.username} by {request.user.username}")
    return Response({'message': 'Password reset successfully'})


# Role views
@api_view(['GET', 'POST'])
@permission_classes([IsAuthenticated])
def role_list_create(request):
    """List roles or create a role (create requires admin)"""
    if request.method == 'GET':
        serializer = RoleSerializer(Role.objects.all(), many=True)
        return Response(serializer.data)

    if not is_admin_user(request.user):
        logger.warning(f"User {request.user.username} attempted to create role without admin privileges")
        return Response({'error': 'Only administrators can create roles'}, status=status.HTTP_403_FORBIDDEN)

    serializer = RoleSerializer(data=request.data)
    if serializer.is_valid():
        role = serializer.save()
        create_audit_log(request, 'create', 'Role', role.id, object_name=role.name)
        return Response(serializer.data, status=status.HTTP_201_CREATED)
    return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)


@api_view(['GET', 'PUT', 'PATCH', 'DELETE'])
@permission_classes([IsAuthenticated])
def role_detail(request, pk):
    """Retrieve, update or delete a role (update/delete requires admin)"""
    role = get_object_or_404(Role, pk=pk)

    if request.method == 'GET':
        return Response(RoleSerializer(role).data)

    if not is_admin_user(request.user):
        logger.warning(f"User {request.user.username} attempted to modify role {pk} without admin privileges")
        return Response({'error': 'Only administrators can modify roles'}, status=status.HTTP_403_FORBIDDEN)

    if request.method in ('PUT', 'PATCH'):
        old_name = role.name
        serializer = RoleSerializer(role, data=request.data, partial=True)
        if serializer.is_valid():
            with transaction.atomic():
                role = serializer.save()
                if role.name != old_name:
                    # Users reference roles by name
                    User.objects.filter(role=old_name).update(role=role.name)
            create_audit_log(request, 'update', 'Role', role.id, dict(serializer.validated_data), object_name=role.name)
            return Response(RoleSerializer(role).data)
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    user_count = User.objects.filter(role=role.name).count()
    if user_count > 0:
        return Response(
            {'error': f'Cannot delete role: it is assigned to {user_count} user(s)', 'user_count': user_count},
            status=status.HTTP_400_BAD_REQUEST
        )
    create_audit_log(request, 'delete', 'Role', role.id, object_name=role.name)
    role.delete()
    return Response(status=status.HTTP_204_NO_CONTENT)


def _parse_date_param(value, end_of_day=False):
    """
    Aware datetime from an ISO datetime or a plain date (start or end of
    that day). None when the value cannot be parsed.
    """
    try:
        parsed = parse_datetime(value)
        if parsed is None:
            day = parse_date(value)
            if day is None:
                return None
            parsed = datetime.combine(day, time.max if end_of_day else time.min)
    except ValueError:
        return None
    if timezone.is_naive(parsed):
        parsed = timezone.make_aware(parsed)
    return parsed


# AuditLog views (read-only)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_list(request):
    """List audit logs with filtering"""
    queryset = AuditLog.objects.select_related('user')

    if not is_admin_user(request.user):
        queryset = queryset.filter(user=request.user)

    action_filter = request.query_params.get('action', None)
    if action_filter:
        queryset = queryset.filter(action=action_filter)

    model_filter = request.query_params.get('model', None)
    if model_filter:
        queryset = queryset.filter(model_name=model_filter)

    date_from = request.query_params.get('date_from', None)
    date_to = request.query_params.get('date_to', None)
    if date_from:
        parsed = _parse_date_param(date_from)
        if parsed is None:
            return Response({'error': 'Invalid date_from'}, status=status.HTTP_400_BAD_REQUEST)
        queryset = queryset.filter(created_at__gte=parsed)
    if date_to:
        parsed = _parse_date_param(date_to, end_of_day=True)
        if parsed is None:
            return Response({'error': 'Invalid date_to'}, status=status.HTTP_400_BAD_REQUEST)
        queryset = queryset.filter(created_at__lte=parsed)

    queryset = queryset.order_by('-created_at')[:500]
    serializer = AuditLogSerializer(queryset, many=True)
    return Response(serializer.data)


@api_view(['GET'])
@permission_classes([IsAuthenticated])
def audit_log_detail(request, pk):
    audit_log = get_object_or_404(AuditLog, pk=pk)

    if not is_admin_user(request.user) and audit_log.user != request.user:
        return Response({'error': 'Permission denied'}, status=status.HTTP_403_FORBIDDEN)

    serializer = AuditLogSerializer(audit_log)
    return Response(serializer.data)
