"""
Cache invalidation signals
Automatically invalidate cache when sweets change
"""
from django.db import transaction
from django.db.models.signals import post_save, post_delete
from django.dispatch import receiver
import logging

from backend.inventory.models import Sweet
from .cache_utils import invalidate_sweets_cache

logger = logging.getLogger(__name__)


@receiver([post_save, post_delete], sender=Sweet)
def invalidate_sweets_list_cache(sender, instance, **kwargs):
    """Invalidate the sweets list cache when a sweet is saved or deleted"""
    invalidate_sweets_cache()
    # Again once committed rows are visible to other connections
    transaction.on_commit(invalidate_sweets_cache)
