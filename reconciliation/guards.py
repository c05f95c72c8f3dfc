"""Write primitives shared by the ledger and the dispatcher.

Every lifecycle transition is a single conditional UPDATE on the row's
status, so concurrent writers (other workers, other server instances,
duplicate webhook deliveries) race inside the database and exactly one of
them wins.
"""
from django.db import IntegrityError, transaction

from .models import ProcessedEvent


def compare_and_set(model, pk, expected, **changes) -> bool:
    """Apply ``changes`` only if the row's status is still one of ``expected``.

    Returns False when the row is missing or already moved on.
    """
    if isinstance(expected, str):
        expected = (expected,)
    updated = model.objects.filter(pk=pk, status__in=tuple(expected)).update(**changes)
    return updated == 1


def remember_event(event_id: str) -> bool:
    """Record ``event_id`` as seen. False if it was already recorded.

    Meant to run inside the caller's transaction so the marker commits or
    rolls back together with the effect it guards.
    """
    try:
        with transaction.atomic():
            ProcessedEvent.objects.create(event_id=event_id)
    except IntegrityError:
        return False
    return True
