import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='ItemTransaction',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('item_id', models.BigIntegerField(blank=True, db_index=True, null=True)),
                ('item_name', models.CharField(max_length=255)),
                ('transaction_type', models.CharField(db_index=True, max_length=50)),
                ('quantity', models.IntegerField(default=0)),
                ('previous_quantity', models.IntegerField(blank=True, null=True)),
                ('new_quantity', models.IntegerField(blank=True, null=True)),
                ('details', models.TextField(blank=True, null=True)),
                ('reason', models.CharField(blank=True, max_length=100, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('box_id', models.BigIntegerField(blank=True, null=True)),
                ('previous_box_id', models.BigIntegerField(blank=True, null=True)),
                ('new_box_id', models.BigIntegerField(blank=True, null=True)),
                ('customer_id', models.BigIntegerField(blank=True, db_index=True, null=True)),
                ('customer_info', models.JSONField(blank=True, null=True)),
                ('supplier', models.CharField(blank=True, max_length=255, null=True)),
                ('related_item_id', models.BigIntegerField(blank=True, null=True)),
                ('related_item_name', models.CharField(blank=True, max_length=255, null=True)),
                ('metadata', models.JSONField(blank=True, null=True)),
                ('created_by', models.CharField(default='system', max_length=150)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now)),
                ('is_deletion', models.BooleanField(default=False)),
                ('user', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='item_transactions', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'item_transactions',
                'ordering': ['-created_at', '-id'],
                'indexes': [
                    models.Index(fields=['-created_at'], name='item_trans_created_2d7e41_idx'),
                    models.Index(fields=['item_id', '-created_at'], name='item_trans_item_id_9a0c53_idx'),
                ],
            },
        ),
    ]
