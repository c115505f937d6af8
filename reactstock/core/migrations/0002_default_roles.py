from django.db import migrations

DEFAULT_ROLES = [
    ('admin', 'Administrator with full access', {'all': True}),
    ('manager', 'Manager with access to boxes, items and users', {'boxes': True, 'items': True, 'users': True}),
    ('user', 'Standard user with read access', {'boxes': {'read': True}, 'items': {'read': True}}),
]


def seed_roles(apps, schema_editor):
    Role = apps.get_model('core', 'Role')
    for name, description, permissions in DEFAULT_ROLES:
        Role.objects.get_or_create(
            name=name,
            defaults={'description': description, 'permissions': permissions},
        )


def remove_roles(apps, schema_editor):
    Role = apps.get_model('core', 'Role')
    Role.objects.filter(name__in=[name for name, _, _ in DEFAULT_ROLES]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('core', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_roles, remove_roles),
    ]
