"""Outbound events, sent once the surrounding transaction commits.

Receivers are fire-and-forget: a failing receiver is logged and never
reaches the caller of the service that emitted the event.

    job_status_changed(sender=Job, job, from_status, to_status, actor)
    prefield_checklist_captured(sender=Job, job, checklist, actor)
"""

import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

job_status_changed = Signal()
prefield_checklist_captured = Signal()


def send_after_commit(signal: Signal, sender, **kwargs) -> None:
    """Schedule ``signal`` to be sent robustly after commit."""

    def _send():
        for receiver, result in signal.send_robust(sender=sender, **kwargs):
            if isinstance(result, Exception):
                logger.error(
                    "Receiver %r failed for %s: %s",
                    receiver,
                    sender.__name__,
                    result,
                    exc_info=result,
                )

    transaction.on_commit(_send)
