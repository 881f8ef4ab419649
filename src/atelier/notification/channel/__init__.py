"""Email channel registry.

Holds the process-wide email adapter. ``EMAIL_ADAPTER`` selects it on first
use; only the in-memory ``fake`` adapter ships with the project, real
delivery is plugged in with ``set_email_channel``.
"""

import os

from atelier.notification.channel.email_port import EmailPort

_email_channel: EmailPort | None = None


def get_email_channel() -> EmailPort:
    """Return the configured email adapter (singleton)."""
    global _email_channel
    if _email_channel is None:
        adapter = os.getenv("EMAIL_ADAPTER", "fake").lower()
        if adapter == "fake":
            from atelier.notification.channel.fake_email import FakeEmailAdapter

            _email_channel = FakeEmailAdapter()
        else:
            raise ValueError(f"Unknown email adapter: {adapter}")
    return _email_channel


def set_email_channel(channel: EmailPort) -> None:
    global _email_channel
    _email_channel = channel


def reset_channels() -> None:
    """Drop the current adapter (useful for testing)."""
    global _email_channel
    _email_channel = None
