"""
Background email sender - Fire-and-forget wrapper for any EmailSender.

Delivery runs on a bounded thread pool so request handlers return as
soon as the message is queued. Failures are logged, never raised into
the operation that requested the message.
"""

import logging
from concurrent.futures import Future, ThreadPoolExecutor

from src.domain.ports import EmailSender

logger = logging.getLogger(__name__)


class BackgroundEmailSender:
    """Queues messages for delivery by a wrapped sender."""

    def __init__(self, sender: EmailSender, max_workers: int = 2) -> None:
        self._sender = sender
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="email"
        )

    def send(self, recipient: str, subject: str, body: str) -> Future[None]:
        future = self._executor.submit(self._sender.send, recipient, subject, body)
        future.add_done_callback(
            lambda done: self._log_failure(done, recipient, subject)
        )
        return future

    def shutdown(self, wait: bool = True) -> None:
        """Stop accepting messages; optionally wait for queued deliveries."""
        self._executor.shutdown(wait=wait)

    @staticmethod
    def _log_failure(future: Future[None], recipient: str, subject: str) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Email delivery failed: %s to %s - %s", subject, recipient, exc
            )
