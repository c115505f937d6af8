"""
Create the items_complete_view materialized view on PostgreSQL.
Other databases skip it and the item list falls back to a joined query.
"""
from django.db import migrations

from reactstock.catalog.matview_sql import CREATE_ITEMS_VIEW_SQL, DROP_ITEMS_VIEW_SQL


def create_view(apps, schema_editor):
    if schema_editor.connection.vendor != 'postgresql':
        return
    for statement in CREATE_ITEMS_VIEW_SQL:
        schema_editor.execute(statement)


def drop_view(apps, schema_editor):
    if schema_editor.connection.vendor != 'postgresql':
        return
    schema_editor.execute(DROP_ITEMS_VIEW_SQL)


class Migration(migrations.Migration):

    dependencies = [
        ('catalog', '0001_initial'),
        ('locations', '0001_initial'),
    ]

    operations = [
        migrations.RunPython(create_view, drop_view),
    ]
