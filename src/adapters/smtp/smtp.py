"""
SMTP notification sender adapter - Implements NotificationSender protocol.

Sends plain-text mail with smtplib. Port 465 uses implicit TLS, any other
port upgrades with STARTTLS. Every send opens its own connection with a
bounded timeout, so a slow mail server only delays the request that
triggered it.
"""

import logging
import smtplib
import ssl
from email.mime.text import MIMEText

from src.domain.exceptions import NotificationError

logger = logging.getLogger(__name__)


class SmtpNotificationSender:
    """
    Implements NotificationSender protocol via SMTP.

    Uses structural subtyping - no explicit inheritance from Protocol.
    Built once at startup from settings and shared by all requests.
    """

    def __init__(
        self,
        host: str,
        port: int,
        username: str,
        password: str,
        from_address: str,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address or username
        self.timeout = timeout

    def send(self, to_address: str, subject: str, body: str) -> None:
        """
        Deliver one message.

        Raises:
            NotificationError: connection, authentication or delivery failed,
                or the server did not answer within the timeout
        """
        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.from_address
        msg["To"] = to_address

        context = ssl.create_default_context()
        try:
            with self._connect(context) as server:
                if self.port != 465:
                    server.ehlo()
                    server.starttls(context=context)
                if self.username:
                    server.login(self.username, self.password)
                server.sendmail(self.from_address, [to_address], msg.as_string())
        except (smtplib.SMTPException, OSError) as e:
            logger.error("SMTP delivery to %s failed: %s", to_address, e)
            raise NotificationError(f"Failed to send mail to {to_address}") from e

        logger.info("Mail sent to %s", to_address)

    def _connect(self, context: ssl.SSLContext) -> smtplib.SMTP:
        if self.port == 465:
            return smtplib.SMTP_SSL(self.host, self.port, timeout=self.timeout, context=context)
        return smtplib.SMTP(self.host, self.port, timeout=self.timeout)
