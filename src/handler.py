"""
AWS Lambda handler for composing and sending mail messages.

Thin orchestration layer: builds a MailMessage from the event payload and
sends it through the configured transport (SES by default, SMTP optional).
"""

import json
import logging
import os
from typing import Any, Dict, Optional

from domain.address import DomainResolver
from domain.message import Transport
from domain.message_builder import build_message

# Configure logging
LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()
logger = logging.getLogger()
logger.setLevel(LOG_LEVEL)

# Add console handler for local testing (AWS Lambda provides handlers automatically)
if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setLevel(LOG_LEVEL)
    formatter = logging.Formatter('%(levelname)s - %(name)s - %(message)s')
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

# Environment variables
ENVIRONMENT = os.environ.get('ENVIRONMENT', 'dev')
MAIL_TRANSPORT = os.environ.get('MAIL_TRANSPORT', 'ses').lower()
MAIL_CHECK_DNS = os.environ.get('MAIL_CHECK_DNS', 'false').lower() in ('1', 'true', 'yes')


def _select_transport(name: str) -> Transport:
    """
    Create the transport named by MAIL_TRANSPORT.

    Raises:
        ValueError: If the name is not a known transport
        ConfigurationError: If the transport's settings are missing
    """
    if name == 'ses':
        from services.ses import SesTransport
        return SesTransport()
    if name == 'smtp':
        from integrations.smtp_transport import SmtpTransport
        return SmtpTransport.from_environment()
    raise ValueError(f"Unknown MAIL_TRANSPORT '{name}', expected 'ses' or 'smtp'")


def _select_resolver(enabled: bool) -> Optional[DomainResolver]:
    if not enabled:
        return None
    from integrations.dns_resolver import DnsDomainResolver
    return DnsDomainResolver()


# Initialize once at module level (reused across invocations)
transport = _select_transport(MAIL_TRANSPORT)
resolver = _select_resolver(MAIL_CHECK_DNS)
logger.info(f"Mail handler initialized: transport={MAIL_TRANSPORT}, dns_check={MAIL_CHECK_DNS}")


def _response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': {
            'Content-Type': 'application/json'
        },
        'body': json.dumps(body)
    }


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler to compose and send one mail message.

    Expected event format:
    {
        "from": "sender@example.com",
        "to": ["a@example.com", {"name": "Bee", "address": "b@example.com"}],
        "cc": ["c@example.com"],
        "bcc": ["d@example.com"],
        "reply_to": "replies@example.com",
        "headers": {"X-Campaign": "spring"},
        "subject": "Hello",
        "body": "Message body",
        "batch": false
    }

    Returns:
        200 when every delivery succeeded, 207 when some failed,
        400 for an invalid payload, 500 for unexpected errors
    """
    request_id = getattr(context, 'request_id', 'UNKNOWN')
    logger.info(f"Environment: {ENVIRONMENT}, request: {request_id}")

    try:
        message = build_message(event, transport=transport, resolver=resolver)
        batch = bool(event.get('batch', False))

        logger.info(
            f"Sending '{message.subject}' to {len(message.to)} recipient(s), "
            f"mode={'batch' if batch else 'serial'}"
        )
        failures = message.send(batch=batch)

        result = {
            'failures': failures,
            'errors': message.errors,
            'recipients': message.to.addresses(),
            'batch': batch
        }

        if failures:
            logger.warning(f"Request {request_id} finished with {failures} failure(s)")
            return _response(207, result)

        logger.info(f"Successfully sent message for request {request_id}")
        return _response(200, result)

    except ValueError as ve:
        logger.error(f"Validation error: {str(ve)}")
        return _response(400, {'error': str(ve)})

    except Exception as e:
        logger.error(f"Error sending message: {str(e)}", exc_info=True)
        return _response(500, {
            'error': 'Internal server error',
            'message': str(e)
        })


def health_check(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Simple health check endpoint for monitoring.
    """
    return _response(200, {
        'status': 'healthy',
        'environment': ENVIRONMENT,
        'transport': MAIL_TRANSPORT,
        'dnsCheck': MAIL_CHECK_DNS
    })
