"""
Build a MailMessage from an event payload.

Payload format:
{
    "from": "sender@example.com",
    "to": ["a@example.com", {"name": "Bee", "address": "b@example.com"}],
    "cc": [...],                   # optional
    "bcc": [...],                  # optional
    "reply_to": "...",             # optional
    "headers": {"X-Tag": "..."},   # optional
    "subject": "...",
    "body": "...",
    "batch": false                 # optional
}

Recipient fields accept a single entry or a list of entries; each entry is
an address string or a {"name", "address"} object.
"""

import logging
from typing import Any, Dict, List, Optional

from .address import DomainResolver
from .exceptions import InvalidAddressError
from .message import MailMessage, Transport
from .recipients import Recipient, RecipientList

logger = logging.getLogger(__name__)


def _normalize_entries(value: Any, field_name: str) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (str, dict)):
        return [value]
    if isinstance(value, list):
        return value
    raise ValueError(f"'{field_name}' must be a string, an object or a list")


def _require_string(payload: Dict[str, Any], field_name: str) -> str:
    """Optional text field; absent means empty, anything but a string is rejected."""
    value = payload.get(field_name, "")
    if not isinstance(value, str):
        raise ValueError(f"'{field_name}' must be a string")
    return value


def parse_recipient(entry: Any, resolver: Optional[DomainResolver] = None) -> Recipient:
    """
    Parse one recipient entry.

    Raises:
        InvalidAddressError: If the address fails validation
        ValueError: If the entry has the wrong shape
    """
    if isinstance(entry, str):
        return Recipient.create(entry, resolver=resolver)
    if isinstance(entry, dict):
        if "address" not in entry:
            raise ValueError("Recipient object is missing 'address'")
        return Recipient.create(entry["address"], entry.get("name"), resolver)
    raise ValueError(f"Unsupported recipient entry: {type(entry).__name__}")


def parse_recipient_list(
    value: Any,
    field_name: str,
    resolver: Optional[DomainResolver] = None
) -> RecipientList:
    """Parse a recipient field; duplicate addresses are dropped with a log line."""
    recipients = RecipientList()
    for entry in _normalize_entries(value, field_name):
        recipient = parse_recipient(entry, resolver)
        if not recipients.add(recipient):
            logger.info(f"Ignoring duplicate {field_name} recipient: {recipient.address}")
    return recipients


def build_message(
    payload: Dict[str, Any],
    transport: Optional[Transport] = None,
    resolver: Optional[DomainResolver] = None
) -> MailMessage:
    """
    Build a MailMessage from a payload dict.

    Args:
        payload: Message description (see module docstring)
        transport: Transport the message will send through
        resolver: Optional DNS check applied to every address

    Returns:
        MailMessage: Ready to send

    Raises:
        ValueError: If a required field is missing or malformed, or "headers"
            names a header that has its own payload field (From, Cc, ...)
        InvalidAddressError: If any address fails validation
    """
    sender = payload.get("from")
    if not sender:
        raise ValueError("'from' is required")

    to = parse_recipient_list(payload.get("to"), "to", resolver)
    if len(to) == 0:
        raise ValueError("At least one 'to' recipient is required")

    subject = _require_string(payload, "subject")
    body = _require_string(payload, "body")

    message = MailMessage(
        transport=transport,
        resolver=resolver,
        subject=subject,
        body=body
    )

    result = message.set_from(sender)
    if not result:
        raise InvalidAddressError(sender)

    message.to = to

    if payload.get("cc"):
        message.set_cc(parse_recipient_list(payload["cc"], "cc", resolver))
    if payload.get("bcc"):
        message.set_bcc(parse_recipient_list(payload["bcc"], "bcc", resolver))
    reply_to = _require_string(payload, "reply_to")
    if reply_to:
        message.set_reply_to(reply_to)

    extra_headers = payload.get("headers") or {}
    if not isinstance(extra_headers, dict):
        raise ValueError("'headers' must be an object")
    for type_name, content in extra_headers.items():
        if not message.add_header(type_name, str(content)):
            logger.warning(f"Ignoring duplicate header: {type_name}")

    logger.info(
        f"Built message: from={sender}, to={len(message.to)}, "
        f"cc={message.cc is not None}, bcc={message.bcc is not None}"
    )
    return message
