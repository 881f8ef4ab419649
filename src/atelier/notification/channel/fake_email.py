"""Fake email adapter: keeps messages in memory instead of delivering them."""

from uuid import uuid4

from atelier.notification.channel.email_port import EmailPort


class FakeEmailAdapter(EmailPort):
    def __init__(self):
        self.sent_emails: list[dict] = []
        self.should_succeed = True
        self.failure_reason = "Email delivery failed"
        self.failing_recipients: set[str] = set()

    def configure(
        self,
        should_succeed: bool = True,
        failure_reason: str = "Email delivery failed",
        failing_recipients: set[str] | None = None,
    ):
        """Make every send fail, or only sends to ``failing_recipients``."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason
        self.failing_recipients = set(failing_recipients or ())

    def send(
        self,
        to: str,
        subject: str,
        body: str,
        html_body: str | None = None,
    ) -> dict:
        if not self.should_succeed or to in self.failing_recipients:
            return {
                "message_id": None,
                "status": "failed",
                "error": self.failure_reason,
            }

        message_id = f"email-{uuid4().hex[:12]}"
        self.sent_emails.append(
            {
                "message_id": message_id,
                "to": to,
                "subject": subject,
                "body": body,
                "html_body": html_body,
            }
        )
        return {"message_id": message_id, "status": "sent"}

    def sent_to(self, recipient: str) -> list[dict]:
        return [email for email in self.sent_emails if email["to"] == recipient]

    def reset(self):
        self.sent_emails.clear()
        self.configure()
