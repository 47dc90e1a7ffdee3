"""
Unit tests for BackgroundEmailSender.

Delivery happens off the calling thread; failures are logged and never
propagate to the caller.
"""

import logging
import threading
from unittest.mock import Mock

import pytest

from src.adapters.smtp.background import BackgroundEmailSender


@pytest.fixture
def inner() -> Mock:
    return Mock()


@pytest.fixture
def background(inner: Mock):
    sender = BackgroundEmailSender(inner, max_workers=1)
    yield sender
    sender.shutdown(wait=True)


class TestBackgroundEmailSender:
    """Tests for queued delivery."""

    def test_delivers_through_wrapped_sender(self, background, inner) -> None:
        background.send("jane@x.com", "Subject", "<p>body</p>").result(timeout=5)
        inner.send.assert_called_once_with("jane@x.com", "Subject", "<p>body</p>")

    def test_send_returns_before_delivery(self, inner) -> None:
        release = threading.Event()
        inner.send.side_effect = lambda *args: release.wait(5)
        sender = BackgroundEmailSender(inner, max_workers=1)

        future = sender.send("jane@x.com", "Subject", "body")

        assert not future.done()
        release.set()
        future.result(timeout=5)
        sender.shutdown(wait=True)

    def test_failure_is_logged_not_raised(
        self, background, inner, caplog: pytest.LogCaptureFixture
    ) -> None:
        inner.send.side_effect = ConnectionError("smtp down")

        with caplog.at_level(logging.ERROR):
            future = background.send("jane@x.com", "Reset your password", "body")
            with pytest.raises(ConnectionError):
                future.result(timeout=5)
            background.shutdown(wait=True)

        assert "Email delivery failed" in caplog.text
        assert "jane@x.com" in caplog.text

    def test_shutdown_drains_queue(self, inner) -> None:
        sender = BackgroundEmailSender(inner, max_workers=1)
        for i in range(5):
            sender.send(f"user{i}@x.com", "Subject", "body")

        sender.shutdown(wait=True)

        assert inner.send.call_count == 5
