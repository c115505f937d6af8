from django.db import migrations

DEFAULT_REASONS = [
    ('CONSUMED', 'Item was consumed or used up'),
    ('DAMAGED', 'Item was damaged and cannot be used'),
    ('EXPIRED', 'Item has expired'),
    ('LOST', 'Item was lost'),
    ('RETURNED', 'Item was returned to supplier'),
    ('OTHER', 'Other reason'),
    ('SOLD', 'Item was sold to a customer'),
]


def seed_reasons(apps, schema_editor):
    RemovalReason = apps.get_model('parties', 'RemovalReason')
    for name, description in DEFAULT_REASONS:
        RemovalReason.objects.get_or_create(name=name, defaults={'description': description})


def remove_reasons(apps, schema_editor):
    RemovalReason = apps.get_model('parties', 'RemovalReason')
    RemovalReason.objects.filter(name__in=[name for name, _ in DEFAULT_REASONS]).delete()


class Migration(migrations.Migration):

    dependencies = [
        ('parties', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(seed_reasons, remove_reasons),
    ]
