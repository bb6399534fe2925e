"""
Raw message assembly for transports.

Transports receive a message as four strings (recipient line, subject, body,
header block). This module joins them into the raw text a mail service
accepts and pulls envelope addresses back out of the header block.
"""

import logging
from email.utils import getaddresses, parseaddr
from typing import List, Optional, Tuple

from domain.address import contains_line_break

logger = logging.getLogger(__name__)

CRLF = "\r\n"


def parse_header_block(headers: str) -> List[Tuple[str, str]]:
    """
    Split a CRLF-joined header block into (name, value) pairs.

    Lines without a colon are skipped.

    Example:
        >>> parse_header_block("X-Mailer: MailQueue 0.1\\r\\nFrom: a@example.com")
        [('X-Mailer', 'MailQueue 0.1'), ('From', 'a@example.com')]
    """
    pairs = []
    for line in headers.splitlines():
        name, sep, value = line.partition(":")
        if not sep:
            if line.strip():
                logger.warning(f"Skipping malformed header line: {line!r}")
            continue
        pairs.append((name.strip(), value.strip()))
    return pairs


def build_raw_message(
    recipient_line: str,
    subject: str,
    body: str,
    headers: str,
    include_bcc: bool = True
) -> str:
    """
    Assemble raw message text with CRLF line endings.

    Args:
        recipient_line: Value of the To: header
        subject: Subject line
        body: Message body
        headers: CRLF-joined header block
        include_bcc: False drops the Bcc line (SMTP hides Bcc recipients)

    Returns:
        str: To and Subject lines, the header block, a blank line, then the body

    Raises:
        ValueError: If recipient_line or subject contains a line break
    """
    for field_name, value in (("recipient line", recipient_line), ("subject", subject)):
        if contains_line_break(value):
            raise ValueError(f"Message {field_name} must not contain line breaks: {value!r}")

    lines = [f"To: {recipient_line}", f"Subject: {subject}"]
    for name, value in parse_header_block(headers):
        if not include_bcc and name.lower() == "bcc":
            continue
        lines.append(f"{name}: {value}")

    normalized_body = CRLF.join(body.splitlines())
    return CRLF.join(lines) + CRLF + CRLF + normalized_body


def envelope_sender(headers: str) -> Optional[str]:
    """Bare address of the From header, or None if there is none."""
    for name, value in parse_header_block(headers):
        if name.lower() == "from":
            return parseaddr(value)[1] or None
    return None


def envelope_recipients(recipient_line: str, headers: str) -> List[str]:
    """
    Bare addresses from To, Cc and Bcc, in that order, without duplicates.
    """
    fields = [recipient_line]
    fields.extend(
        value for name, value in parse_header_block(headers)
        if name.lower() in ("cc", "bcc")
    )

    addresses = []
    for _, address in getaddresses(fields):
        if address and address not in addresses:
            addresses.append(address)
    return addresses
