"""
SMTP email sender adapter - Implements EmailSender protocol over smtplib.

Every connection carries a socket timeout so a stalled mail server can
never hold a worker indefinitely.
"""

import logging
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import make_msgid

logger = logging.getLogger(__name__)


class SmtpEmailSender:
    """Delivers HTML messages through an SMTP relay with STARTTLS."""

    def __init__(
        self,
        host: str,
        port: int,
        sender: str,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 10.0,
        use_tls: bool = True,
    ) -> None:
        self._host = host
        self._port = port
        self._sender = sender
        self._username = username
        self._password = password
        self._timeout = timeout
        self._use_tls = use_tls

    def send(self, recipient: str, subject: str, body: str) -> None:
        message = self._compose(recipient, subject, body)
        with smtplib.SMTP(self._host, self._port, timeout=self._timeout) as smtp:
            if self._use_tls:
                smtp.starttls(context=ssl.create_default_context())
            if self._username and self._password:
                smtp.login(self._username, self._password)
            smtp.send_message(message)
        logger.info("Email sent: %s (%s)", message["Message-ID"], subject)

    def _compose(self, recipient: str, subject: str, body: str) -> EmailMessage:
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = recipient
        message["Subject"] = subject
        message["Message-ID"] = make_msgid()
        message.set_content("This message requires an HTML-capable mail client.")
        message.add_alternative(body, subtype="html")
        return message
