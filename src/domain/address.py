"""
Email address validation.

Syntax rules for the local part and domain follow RFC 5321/5322 loosely:
length limits, dot placement, the domain character set, and either an
unquoted atom or a quoted string for the local part.

The DNS check is opt-in: pass a DomainResolver to also require an MX or A
record for the domain. Without one, validation is a pure function.
"""

import logging
import re
from typing import Optional, Protocol

logger = logging.getLogger(__name__)

MAX_LOCAL_LENGTH = 64
MAX_DOMAIN_LENGTH = 255

DOMAIN_PATTERN = re.compile(r"[A-Za-z0-9.-]+")

# Each character optionally backslash-escaped
UNQUOTED_LOCAL_PATTERN = re.compile(r"(\\.|[A-Za-z0-9!#%&`_=/$'*+?^{}|~.-])+")

QUOTED_LOCAL_PATTERN = re.compile(r'"(\\"|[^"])+"')


class DomainResolver(Protocol):
    """Answers whether a domain can receive mail."""

    def has_mx_or_a(self, domain: str) -> bool:
        ...


def split_address(address: str):
    """
    Split an address on its last '@'.

    Returns:
        (local, domain) tuple, or None if there is no '@'
    """
    at_index = address.rfind("@")
    if at_index < 0:
        return None
    return address[:at_index], address[at_index + 1:]


def contains_line_break(value: str) -> bool:
    """True if value would span more than one line (CR, LF or any other str.splitlines boundary)."""
    return bool(value) and value.splitlines() != [value]


def _local_part_is_valid(local: str) -> bool:
    unescaped = local.replace("\\\\", "")
    if UNQUOTED_LOCAL_PATTERN.fullmatch(unescaped):
        return True
    return QUOTED_LOCAL_PATTERN.fullmatch(unescaped) is not None


def validate_address(address: str, resolver: Optional[DomainResolver] = None) -> bool:
    """
    Check an email address against the syntax rules.

    Never raises for malformed input; anything that is not a well-formed
    address string yields False.

    Args:
        address: Address to check (e.g., "john.doe@example.com")
        resolver: Optional DNS capability; when given, the domain must
                  have an MX or A record

    Returns:
        bool: True only if every check passes

    Example:
        >>> validate_address("john.doe@example.com")
        True
        >>> validate_address("double..dot@example.com")
        False
    """
    if not isinstance(address, str):
        return False

    # Addresses end up in header lines
    if contains_line_break(address):
        return False

    parts = split_address(address)
    if parts is None:
        return False
    local, domain = parts

    if not 1 <= len(local) <= MAX_LOCAL_LENGTH:
        return False
    if not 1 <= len(domain) <= MAX_DOMAIN_LENGTH:
        return False
    if local.startswith(".") or local.endswith("."):
        return False
    if ".." in local:
        return False
    if not DOMAIN_PATTERN.fullmatch(domain):
        return False
    if ".." in domain:
        return False
    if not _local_part_is_valid(local):
        return False

    if resolver is not None and not resolver.has_mx_or_a(domain):
        logger.info(f"Domain has no MX or A record: {domain}")
        return False

    return True
