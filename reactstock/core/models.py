from django.contrib.auth.models import AbstractUser
from django.db import models


class User(AbstractUser):
    """Application user with a role name used for authorization"""
    full_name = models.CharField(max_length=255, blank=True, null=True)
    role = models.CharField(max_length=50, default='user')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'users'

    @property
    def is_admin(self):
        return self.role == 'admin' or self.is_staff or self.is_superuser


class Role(models.Model):
    """Named permission set assigned to users by name"""
    name = models.CharField(max_length=50, unique=True)
    description = models.TextField(blank=True, null=True)
    permissions = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        db_table = 'roles'
        ordering = ['name']


class AuditLog(models.Model):
    """Audit log for write operations"""
    ACTION_CHOICES = [
        ('create', 'Create'),
        ('update', 'Update'),
        ('delete', 'Delete'),
        ('soft_delete', 'Soft Delete'),
        ('permanent_delete', 'Permanent Delete'),
        ('restore', 'Restore'),
        ('transfer', 'Transfer'),
        ('login', 'Login'),
        ('password_reset', 'Password Reset'),
        ('refresh_view', 'Refresh View'),
    ]

    user = models.ForeignKey(User, on_delete=models.SET_NULL, null=True, related_name='audit_logs')
    action = models.CharField(max_length=50, choices=ACTION_CHOICES)
    model_name = models.CharField(max_length=100)
    object_id = models.CharField(max_length=100)
    object_name = models.CharField(max_length=255, blank=True, null=True, help_text="Human-readable name of the object")
    changes = models.JSONField(default=dict, blank=True)
    ip_address = models.GenericIPAddressField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.action} {self.model_name}#{self.object_id}"

    class Meta:
        db_table = 'audit_logs'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['-created_at'], name='audit_logs_created_f6a1c0_idx'),
            models.Index(fields=['action'], name='audit_logs_action_4b2e9d_idx'),
            models.Index(fields=['model_name'], name='audit_logs_model_n_8c3f1a_idx'),
        ]
