"""
SMTP Transport Module

Delivers rendered messages to an SMTP relay with the standard library
`smtplib`, as an alternative to Amazon SES.

Usage:
    from integrations.smtp_transport import SmtpTransport

    transport = SmtpTransport.from_environment()
    delivered = transport.send(
        "b@example.com",
        "Hi",
        "Hello",
        "X-Mailer: MailQueue 0.1\\r\\nFrom: a@example.com"
    )
"""

import logging
import os
import smtplib
from typing import Optional

from domain.exceptions import ConfigurationError
from services.raw_message import build_raw_message, envelope_recipients, envelope_sender

logger = logging.getLogger(__name__)

DEFAULT_SMTP_PORT = 25
DEFAULT_SMTP_TIMEOUT = 30


def _env_flag(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).strip().lower() in ('1', 'true', 'yes', 'on')


class SmtpTransport:
    """
    Transport that opens one SMTP session per delivery.

    Attributes:
        host: SMTP relay host
        port: SMTP relay port
        username: Login user (login skipped when empty)
        password: Login password
        use_tls: Issue STARTTLS before login
        timeout: Socket timeout in seconds
    """

    def __init__(
        self,
        host: str,
        port: int = DEFAULT_SMTP_PORT,
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = False,
        timeout: float = DEFAULT_SMTP_TIMEOUT
    ):
        if not host:
            raise ConfigurationError("SMTP host is required but not set")
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_environment(cls) -> "SmtpTransport":
        """
        Build a transport from SMTP_* environment variables.

        Raises:
            ConfigurationError: If SMTP_HOST is missing or SMTP_PORT is not a number
        """
        host = os.environ.get('SMTP_HOST', '')
        if not host:
            raise ConfigurationError(
                "SMTP_HOST environment variable is required when MAIL_TRANSPORT=smtp"
            )

        try:
            port = int(os.environ.get('SMTP_PORT', DEFAULT_SMTP_PORT))
            timeout = float(os.environ.get('SMTP_TIMEOUT', DEFAULT_SMTP_TIMEOUT))
        except ValueError as e:
            raise ConfigurationError(f"Invalid SMTP port or timeout: {e}")

        return cls(
            host=host,
            port=port,
            username=os.environ.get('SMTP_USERNAME') or None,
            password=os.environ.get('SMTP_PASSWORD') or None,
            use_tls=_env_flag('SMTP_USE_TLS'),
            timeout=timeout
        )

    def _login(self, client: smtplib.SMTP) -> None:
        if self.username and self.password:
            client.login(self.username, self.password)

    def send(self, recipient_line: str, subject: str, body: str, headers: str) -> bool:
        """
        Deliver one message over SMTP.

        The Bcc line is removed from the transmitted text; Bcc addresses
        only appear in the envelope.

        Returns:
            bool: True if the relay accepted at least one recipient
        """
        sender = envelope_sender(headers)
        if not sender:
            logger.warning("Header block has no From address, cannot build SMTP envelope")
            return False

        recipients = envelope_recipients(recipient_line, headers)
        if not recipients:
            logger.warning("No envelope recipients, skipping SMTP send")
            return False

        try:
            raw_message = build_raw_message(recipient_line, subject, body, headers, include_bcc=False)
        except ValueError as e:
            logger.error(f"Refusing to send over SMTP: {e}")
            return False

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as client:
                if self.use_tls:
                    client.starttls()
                self._login(client)
                refused = client.sendmail(sender, recipients, raw_message.encode('utf-8'))

            if refused:
                logger.warning(f"SMTP relay refused some recipients: {sorted(refused)}")
            logger.info(f"SMTP relay accepted message: to={recipient_line}")
            return True

        except smtplib.SMTPException as e:
            logger.error(f"SMTP delivery failed: to={recipient_line}, error={e}")
            return False

        except OSError as e:
            logger.error(f"SMTP connection to {self.host}:{self.port} failed: {e}")
            return False
