import logging

from django.utils import timezone

from .entities import Activity

logger = logging.getLogger(__name__)


def log_activity(activities, action_type, instance, description=None):
    """Record an activity entry at the front of the ``activities`` deque.

    By default a generic description is generated.  Callers may supply a
    custom ``description`` to override it, e.g. when a sale moves to another
    customer and both names are useful context.
    """
    if description is None:
        description = f"{instance.__class__.__name__} {instance} was {action_type}."

    activity = Activity(
        action_type=action_type,
        entity=instance.__class__.__name__,
        object_id=instance.id,
        description=description,
        timestamp=timezone.now(),
    )
    activities.appendleft(activity)
    logger.debug("Activity recorded: %s", description)
    return activity
