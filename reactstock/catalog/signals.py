"""
Cache invalidation signals
Any change to items, their properties or boxes invalidates cached item lists.
"""
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from reactstock.boxes.models import Box
from reactstock.core.cache_utils import bump_cache_version_on_commit, ITEMS_LIST_NAMESPACE
from .models import Item, ItemProperties

logger = logging.getLogger(__name__)


@receiver(post_save, sender=Item)
@receiver(post_delete, sender=Item)
@receiver(post_save, sender=ItemProperties)
@receiver(post_delete, sender=ItemProperties)
@receiver(post_save, sender=Box)
@receiver(post_delete, sender=Box)
def invalidate_items_list_cache(sender, instance, **kwargs):
    bump_cache_version_on_commit(ITEMS_LIST_NAMESPACE)
    logger.debug(f"Items list cache invalidation queued by {sender.__name__} {instance.pk}")
