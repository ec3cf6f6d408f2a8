"""Django signals for cache invalidation."""

import logging

from django.core.cache import cache
from django.db.models.signals import post_delete, post_save
from django.dispatch import receiver

from festival.models import Event

logger = logging.getLogger(__name__)

EVENT_LIST_CACHE_KEY = "events:list"


@receiver([post_save, post_delete], sender=Event)
def invalidate_event_cache(sender, instance, **kwargs):
    """Invalidate the event list when an event is saved or deleted.

    Registration writes patch their events, so they invalidate it too.
    """
    cache.delete(EVENT_LIST_CACHE_KEY)
    logger.debug("Invalidated %s after change to event %s", EVENT_LIST_CACHE_KEY, instance.pk)
