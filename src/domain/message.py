"""
Mail message composition and dispatch.

A MailMessage aggregates a subject, a body, the To: recipients and a header
list, renders itself to text, and hands itself to a Transport either as one
batch call or as one call per recipient.

Delivery failures never abort a send: each one is recorded in `errors`
and reflected in the returned failure count.
"""

import logging
from typing import List, Optional, Protocol

from .address import DomainResolver
from .exceptions import ConfigurationError, InvalidAddressError
from .headers import Header, HeaderList, is_reserved_type_name
from .models import FailureKind, OperationResult
from .recipients import Recipient, RecipientList

logger = logging.getLogger(__name__)

MAILER_NAME = "MailQueue"
MAILER_VERSION = "0.1"

RESERVED_HEADER_SETTERS = {
    "from": "set_from()",
    "reply-to": "set_reply_to()",
    "cc": "set_cc()",
    "bcc": "set_bcc()",
    "to": "add_recipient() or the to property",
    "subject": "the subject attribute",
}


class Transport(Protocol):
    """Delivers one rendered message; returns False if delivery failed."""

    def send(self, recipient_line: str, subject: str, body: str, headers: str) -> bool:
        ...


def default_headers() -> HeaderList:
    headers = HeaderList()
    headers.add(Header.generic("X-Mailer", f"{MAILER_NAME} {MAILER_VERSION}"))
    return headers


class MailMessage:
    """
    An email message with To:, Cc: and Bcc: recipients, a From: sender,
    additional headers, and batch or serial sending.

    Example:
        >>> message = MailMessage(transport=SesTransport())
        >>> message.subject = "Hi"
        >>> message.body = "Hello"
        >>> message.set_from("a@example.com")
        >>> message.add_recipient("b@example.com", name="Bee")
        >>> message.send()
        0
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        resolver: Optional[DomainResolver] = None,
        subject: str = "",
        body: str = ""
    ):
        self.transport = transport
        self.resolver = resolver
        self.reset()
        self.subject = subject
        self.body = body

    def reset(self) -> None:
        """Return to an empty message carrying only the default X-Mailer header."""
        self.subject = ""
        self.body = ""
        self._to = RecipientList()
        self._headers = default_headers()
        self._errors: List[str] = []

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def to(self) -> RecipientList:
        return self._to

    @to.setter
    def to(self, recipients: RecipientList) -> None:
        if not isinstance(recipients, RecipientList):
            raise TypeError(
                f"MailMessage.to requires a RecipientList; "
                f"{type(recipients).__name__} encountered"
            )
        self._to = recipients

    @property
    def headers(self) -> HeaderList:
        return self._headers

    @property
    def from_header(self) -> Optional[Header]:
        return self._headers.lookup("From")

    @property
    def cc(self) -> Optional[Header]:
        return self._headers.lookup("Cc")

    @property
    def bcc(self) -> Optional[Header]:
        return self._headers.lookup("Bcc")

    @property
    def errors(self) -> List[str]:
        """Error messages from the last send() call."""
        return list(self._errors)

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------

    def set_from(self, address: str) -> OperationResult:
        try:
            header = Header.from_sender(address, self.resolver)
        except InvalidAddressError as e:
            return OperationResult.fail(FailureKind.INVALID_ADDRESS, str(e))
        return self._headers.add(header)

    def set_reply_to(self, address: str) -> OperationResult:
        """
        Raises:
            ValueError: If address spans more than one line
        """
        return self._headers.add(Header.reply_to(address))

    def set_cc(self, recipients: RecipientList) -> OperationResult:
        """
        Raises:
            TypeError: If recipients is not a RecipientList
        """
        return self._headers.add(Header.cc(self._require_recipient_list("set_cc", recipients)))

    def set_bcc(self, recipients: RecipientList) -> OperationResult:
        """
        Raises:
            TypeError: If recipients is not a RecipientList
        """
        return self._headers.add(Header.bcc(self._require_recipient_list("set_bcc", recipients)))

    def add_header(self, type_name: str, content: str) -> OperationResult:
        """
        Add a generic header such as X-Campaign.

        Returns:
            OperationResult: DUPLICATE_ENTRY if a header of this type exists

        Raises:
            ValueError: If type_name is one with a typed setter (From, Reply-To,
                Cc, Bcc), is written by the transport (To, Subject), or the
                header is malformed
        """
        if is_reserved_type_name(type_name):
            raise ValueError(
                f"{type_name} cannot be added as a generic header; "
                f"use {RESERVED_HEADER_SETTERS.get(type_name.lower(), 'the message fields')} instead"
            )
        return self._headers.add(Header.generic(type_name, content))

    def add_recipient(self, address: str, name: Optional[str] = None) -> OperationResult:
        """
        Add a To: recipient.

        Returns:
            OperationResult: INVALID_ADDRESS if the address fails validation,
            DUPLICATE_ENTRY if it is already a recipient
        """
        try:
            recipient = Recipient.create(address, name, self.resolver)
        except InvalidAddressError as e:
            logger.info(f"Rejected recipient: {e}")
            return OperationResult.fail(FailureKind.INVALID_ADDRESS, str(e))
        return self.add_mail_recipient(recipient)

    def add_mail_recipient(self, recipient: Recipient) -> OperationResult:
        return self._to.add(recipient)

    @staticmethod
    def _require_recipient_list(method: str, recipients: RecipientList) -> RecipientList:
        if not isinstance(recipients, RecipientList):
            raise TypeError(
                f"MailMessage.{method} requires a RecipientList; "
                f"{type(recipients).__name__} encountered"
            )
        return recipients

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def render(self) -> str:
        """
        Render the message as text.

        From, To, Cc (when set) and Bcc (when set) lines, then the body
        followed by two newlines. The From line is empty when no sender is
        set. X-Mailer and other headers only travel in the header block
        handed to the transport.
        """
        from_header = self.from_header
        lines = [from_header.render() if from_header is not None else ""]
        lines.append(f"To: {self._to.render()}")
        for header in (self.cc, self.bcc):
            if header is not None:
                lines.append(header.render())

        return "\n".join(lines) + "\n" + self.body + "\n\n"

    def __str__(self) -> str:
        return self.render()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def send(self, batch: bool = False) -> int:
        """
        Send the message to every To: recipient.

        Args:
            batch: True sends one message with all recipients on one To: line;
                   False (default) sends one message per recipient, in order

        Returns:
            int: Number of failed deliveries (0 or 1 in batch mode)

        Raises:
            ConfigurationError: If no transport is configured
        """
        if self.transport is None:
            raise ConfigurationError("MailMessage has no transport configured")

        self._errors = []
        headers = self._headers.render()

        if batch:
            recipient_line = self._to.render()
            logger.info(f"Sending batch message to {len(self._to)} recipient(s)")
            if not self.transport.send(recipient_line, self.subject, self.body, headers):
                self._record_failure(recipient_line)
            return len(self._errors)

        logger.info(f"Sending message serially to {len(self._to)} recipient(s)")
        for recipient in self._to:
            if not self.transport.send(str(recipient), self.subject, self.body, headers):
                self._record_failure(str(recipient))

        if self._errors:
            logger.warning(f"Send finished with {len(self._errors)} failure(s)")
        return len(self._errors)

    def batch_send(self) -> int:
        return self.send(batch=True)

    def _record_failure(self, recipient_line: str) -> None:
        message = f"Unable to send to {recipient_line}"
        logger.warning(message)
        self._errors.append(message)
