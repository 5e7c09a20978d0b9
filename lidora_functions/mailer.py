import smtplib
import ssl
from email.message import EmailMessage

import structlog

logger = structlog.get_logger(__name__)


class Mailer:
    """SMTP sender. One connection per message; sends are fire-and-forget."""

    def __init__(self, host: str, port: int, user: str, password: str, timeout: float = 10.0):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.timeout = timeout

    def send(self, *, to_email: str, subject: str, body: str) -> None:
        message = EmailMessage()
        message["From"] = self.user
        message["To"] = to_email
        message["Subject"] = subject
        message.set_content(body)

        context = ssl.create_default_context()
        with smtplib.SMTP_SSL(
            self.host, self.port, timeout=self.timeout, context=context
        ) as server:
            server.login(self.user, self.password)
            server.send_message(message)

        logger.info("email_sent", to=to_email, subject=subject)
