"""
Post-booking notifications.

Delivery is owned by an external notifier; this module only dispatches the
calls in the background once a booking has completed and logs failures.
"""

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from typing import List, Optional, Protocol

from ..scheduling.types import TenantSettings
from ..utils.log_sanitizer import sanitize_for_logging
from .types import BookingRecord

logger = logging.getLogger(__name__)


class Notifier(Protocol):
    def notify_owner(self, settings: TenantSettings, record: BookingRecord) -> None:
        ...

    def notify_booker(self, settings: TenantSettings, record: BookingRecord) -> None:
        ...


class NotificationDispatcher:
    """
    Runs owner and booker notifications as fire-and-forget tasks.

    Args:
        notifier: Object that actually delivers the messages.
        executor: Executor to run on; a small thread pool when omitted.
    """

    def __init__(self, notifier: Notifier, executor: Optional[Executor] = None):
        self._notifier = notifier
        self._executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="bookme-notify")

    def _run(self, kind: str, send, settings: TenantSettings, record: BookingRecord) -> bool:
        try:
            send(settings, record)
        except Exception:
            logger.exception("%s notification failed for booking event %s", kind,
                             sanitize_for_logging(event_id=record.event_id)['event_id'])
            return False
        logger.info("%s notification sent to %s", kind,
                    sanitize_for_logging(email=self._recipient(kind, settings, record))['email'])
        return True

    @staticmethod
    def _recipient(kind: str, settings: TenantSettings, record: BookingRecord) -> str:
        return settings.owner_email if kind == "Owner" else record.email

    def dispatch(self, settings: TenantSettings, record: BookingRecord) -> List[Future]:
        """
        Submit notifications for a completed booking.

        The owner is notified only when an owner email is configured. The
        returned futures resolve to True or False and never raise.
        """
        futures = []
        if settings.owner_email:
            futures.append(self._executor.submit(
                self._run, "Owner", self._notifier.notify_owner, settings, record))
        futures.append(self._executor.submit(
            self._run, "Booker", self._notifier.notify_booker, settings, record))
        return futures

    def shutdown(self, wait: bool = True) -> None:
        self._executor.shutdown(wait=wait)
