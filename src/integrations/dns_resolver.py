"""
DNS domain resolver.

Implements the DomainResolver capability with dnspython: a domain can
receive mail if it has an MX record or, failing that, an A record.

Usage:
    from integrations.dns_resolver import DnsDomainResolver

    resolver = DnsDomainResolver(timeout=5.0)
    message = MailMessage(transport=SesTransport(), resolver=resolver)
"""

import logging
import os
from typing import Optional

import dns.exception
import dns.resolver

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = float(os.environ.get('DNS_TIMEOUT', '5'))

LOOKUP_RECORD_TYPES = ('MX', 'A')


class DnsDomainResolver:
    """
    Checks for MX or A records with dnspython.

    Lookup errors (NXDOMAIN, no answer, no nameservers, timeouts) all count
    as "no record"; the resolver never raises.
    """

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        resolver: Optional[dns.resolver.Resolver] = None
    ):
        self.timeout = timeout
        self._resolver = resolver or dns.resolver.Resolver()
        self._resolver.lifetime = timeout

    def has_record(self, domain: str, record_type: str) -> bool:
        try:
            answer = self._resolver.resolve(domain, record_type)
        except dns.exception.DNSException as e:
            logger.info(f"DNS {record_type} lookup failed for {domain}: {type(e).__name__}")
            return False
        return len(answer) > 0

    def has_mx_or_a(self, domain: str) -> bool:
        """
        Check whether domain has an MX or A record.

        Args:
            domain: Domain part of an address (e.g., "example.com")

        Returns:
            bool: True if either record type resolves
        """
        for record_type in LOOKUP_RECORD_TYPES:
            if self.has_record(domain, record_type):
                logger.info(f"Domain {domain} has {record_type} record")
                return True
        return False
