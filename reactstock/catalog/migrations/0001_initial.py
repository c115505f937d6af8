import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('boxes', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='ItemGroup',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'db_table': 'groups',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='Item',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(blank=True, null=True)),
                ('quantity', models.IntegerField(default=1, validators=[django.core.validators.MinValueValidator(0)])),
                ('supplier', models.CharField(blank=True, max_length=255, null=True)),
                ('type', models.CharField(blank=True, max_length=100, null=True)),
                ('serial_number', models.CharField(blank=True, db_index=True, max_length=255, null=True)),
                ('ean_code', models.CharField(blank=True, db_index=True, max_length=100, null=True)),
                ('qr_code', models.CharField(blank=True, db_index=True, max_length=255, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('additional_data', models.JSONField(blank=True, default=dict)),
                ('last_transaction_at', models.DateTimeField(blank=True, null=True)),
                ('last_transaction_type', models.CharField(blank=True, choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('TRANSFER', 'Transfer'), ('DELETE', 'Delete'), ('RESTORE', 'Restore')], max_length=50, null=True)),
                ('deleted_at', models.DateTimeField(blank=True, db_index=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('box', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='items', to='boxes.box')),
                ('group', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='items', to='catalog.itemgroup')),
                ('parent_item', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='children', to='catalog.item')),
            ],
            options={
                'db_table': 'items',
                'ordering': ['id'],
            },
        ),
        migrations.CreateModel(
            name='ItemProperties',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(blank=True, max_length=100, null=True)),
                ('ean_code', models.CharField(blank=True, max_length=100, null=True)),
                ('serial_number', models.CharField(blank=True, max_length=255, null=True)),
                ('additional_data', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('item', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='properties', to='catalog.item')),
            ],
            options={
                'db_table': 'item_properties',
                'verbose_name_plural': 'item properties',
            },
        ),
        migrations.CreateModel(
            name='ItemCompleteView',
            fields=[
                ('id', models.BigIntegerField(primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=255)),
                ('description', models.TextField(null=True)),
                ('quantity', models.IntegerField()),
                ('box_id', models.BigIntegerField(null=True)),
                ('parent_item_id', models.BigIntegerField(null=True)),
                ('group_id', models.BigIntegerField(null=True)),
                ('supplier', models.CharField(max_length=255, null=True)),
                ('type', models.CharField(max_length=100, null=True)),
                ('serial_number', models.CharField(max_length=255, null=True)),
                ('ean_code', models.CharField(max_length=100, null=True)),
                ('qr_code', models.CharField(max_length=255, null=True)),
                ('notes', models.TextField(null=True)),
                ('additional_data', models.JSONField(null=True)),
                ('last_transaction_at', models.DateTimeField(null=True)),
                ('last_transaction_type', models.CharField(max_length=50, null=True)),
                ('deleted_at', models.DateTimeField(null=True)),
                ('created_at', models.DateTimeField()),
                ('updated_at', models.DateTimeField()),
                ('box_number', models.CharField(max_length=50, null=True)),
                ('box_description', models.TextField(null=True)),
                ('location_name', models.CharField(max_length=255, null=True)),
                ('location_color', models.CharField(max_length=50, null=True)),
                ('shelf_name', models.CharField(max_length=255, null=True)),
                ('parent_name', models.CharField(max_length=255, null=True)),
            ],
            options={
                'db_table': 'items_complete_view',
                'managed': False,
            },
        ),
    ]
