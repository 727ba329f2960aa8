import logging

from django.db import DatabaseError, transaction

from .models import AnalyticsEvent

logger = logging.getLogger(__name__)


def track_event(event_type, user=None, metadata=None):
    """
    Records an analytics event. A failure here is logged and never
    propagates into the request that triggered it.
    """
    if user is not None and not getattr(user, 'is_authenticated', False):
        user = None
    try:
        # Savepoint so a failed insert leaves an enclosing transaction usable
        with transaction.atomic():
            return AnalyticsEvent.objects.create(event_type=event_type, user=user, metadata=metadata)
    except DatabaseError:
        logger.exception("Error tracking %s event", event_type)
        return None
