from django.core.management.base import BaseCommand, CommandError
from django.db import DatabaseError
from reactstock.catalog.services import refresh_items_view
from reactstock.core.cache_utils import bump_cache_version, ITEMS_LIST_NAMESPACE


class Command(BaseCommand):
    help = 'Refresh the items_complete_view materialized view (rebuilding it if refresh fails)'

    def add_arguments(self, parser):
        parser.add_argument(
            '--rebuild',
            action='store_true',
            help='Drop and recreate the view instead of refreshing it',
        )

    def handle(self, *args, **options):
        try:
            result = refresh_items_view(force_rebuild=options['rebuild'])
        except DatabaseError as e:
            raise CommandError(f'Failed to refresh materialized view: {e}')

        bump_cache_version(ITEMS_LIST_NAMESPACE)

        if not result['refreshed']:
            self.stdout.write(self.style.WARNING(
                f"No materialized view on this database; {result['item_count']} active items"
            ))
            return

        action = 'rebuilt' if result['rebuilt'] else 'refreshed'
        self.stdout.write(self.style.SUCCESS(
            f"items_complete_view {action}: {result['item_count']} items in {result['refresh_time_ms']}ms"
        ))
