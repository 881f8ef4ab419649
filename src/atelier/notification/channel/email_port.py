"""Email channel port: abstract interface for email delivery."""

from abc import ABC, abstractmethod


class EmailPort(ABC):
    """Abstract interface for email delivery adapters."""

    @abstractmethod
    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        """Send an email message.

        Returns:
            dict with keys: message_id, status ("sent" or "failed"), error (optional)
        """
        ...
