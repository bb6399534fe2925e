"""
Amazon SES transport.

This module delivers rendered messages through SES `SendRawEmail`. SES reads
the recipients (including Bcc) from the raw message headers.
"""

import logging
import os

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from services.raw_message import build_raw_message

logger = logging.getLogger(__name__)

# Configure SES client with timeouts; MailMessage attempts each delivery once
ses_config = Config(
    retries={
        'max_attempts': 1,  # 1 attempt total (no retries)
        'mode': 'standard'
    },
    connect_timeout=10,  # 10 seconds to establish connection
    read_timeout=30      # 30 seconds max for reading response
)

# SES is regional, unlike S3
AWS_REGION = os.environ.get('AWS_REGION', os.environ.get('AWS_DEFAULT_REGION', 'us-west-2'))
SES_CONFIGURATION_SET = os.environ.get('SES_CONFIGURATION_SET', '')

# Initialize SES client at module level (thread-safe, reused across invocations)
ses_client = boto3.client('ses', region_name=AWS_REGION, config=ses_config)
logger.info(f"SES client initialized: region={AWS_REGION}, connect=10s, read=30s, max_attempts=1")


def send_mail(recipient_line: str, subject: str, body: str, headers: str) -> bool:
    """
    Send one message through SES.

    Args:
        recipient_line: To: header value (e.g., "Bee <b@example.com>, c@example.com")
        subject: Subject line
        body: Message body
        headers: CRLF-joined header block (From, Cc, Bcc, X-Mailer, ...)

    Returns:
        bool: True if SES accepted the message, False otherwise

    Note:
        - Failures are logged and reported as False, never raised

    Example:
        >>> send_mail(
        ...     "b@example.com",
        ...     "Hi",
        ...     "Hello",
        ...     "X-Mailer: MailQueue 0.1\\r\\nFrom: a@example.com"
        ... )
        True
    """
    if not recipient_line:
        logger.warning("No recipients given, skipping SES send")
        return False

    try:
        raw_message = build_raw_message(recipient_line, subject, body, headers)
    except ValueError as e:
        logger.error(f"Refusing to send through SES: {e}")
        return False

    request = {'RawMessage': {'Data': raw_message.encode('utf-8')}}
    if SES_CONFIGURATION_SET:
        request['ConfigurationSetName'] = SES_CONFIGURATION_SET

    try:
        response = ses_client.send_raw_email(**request)
        logger.info(
            f"SES accepted message: to={recipient_line}, "
            f"message_id={response.get('MessageId', 'UNKNOWN')}"
        )
        return True

    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        error_message = e.response.get('Error', {}).get('Message', str(e))

        logger.error(
            f"SES rejected message: to={recipient_line}, "
            f"error_code={error_code}, error_message={error_message}"
        )
        return False

    except BotoCoreError as e:
        logger.error(f"SES request failed: to={recipient_line}, error={e}")
        return False


class SesTransport:
    """Transport that delivers through Amazon SES."""

    def send(self, recipient_line: str, subject: str, body: str, headers: str) -> bool:
        return send_mail(recipient_line, subject, body, headers)
