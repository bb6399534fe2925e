"""
Message headers and ordered, type-unique header lists.

A Header is a single tagged type: `kind` selects the payload. GENERIC, FROM
and REPLY_TO carry string content; CC and BCC own a RecipientList.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Optional

from .address import DomainResolver, contains_line_break, validate_address
from .exceptions import InvalidAddressError
from .models import FailureKind, OperationResult
from .recipients import Recipient, RecipientList

CRLF = "\r\n"

# Printable ASCII except ':' (RFC 5322 field-name)
HEADER_NAME_PATTERN = re.compile(r"[!-9;-~]+")


class HeaderKind(Enum):
    GENERIC = "generic"
    FROM = "from"
    REPLY_TO = "reply_to"
    CC = "cc"
    BCC = "bcc"


HEADER_TYPE_NAMES = {
    HeaderKind.FROM: "From",
    HeaderKind.REPLY_TO: "Reply-To",
    HeaderKind.CC: "Cc",
    HeaderKind.BCC: "Bcc",
}

RECIPIENT_KINDS = (HeaderKind.CC, HeaderKind.BCC)

# Written by transports from the recipient line and subject
TRANSPORT_FIELD_NAMES = ("To", "Subject")

RESERVED_TYPE_NAMES = frozenset(
    name.lower() for name in (*HEADER_TYPE_NAMES.values(), *TRANSPORT_FIELD_NAMES)
)


def is_reserved_type_name(type_name: str) -> bool:
    """True for names only a typed header (or the transport) may use; case-insensitive."""
    return type_name.lower() in RESERVED_TYPE_NAMES


@dataclass(frozen=True)
class Header:
    """
    A single named header field.

    The factory classmethods are the usual way in. Direct construction is
    checked the same way: fixed kinds must carry their fixed type name,
    CC/BCC must own a RecipientList, From content must be a valid address,
    and generic headers may not take a reserved name.

    Attributes:
        kind: Variant discriminant
        type_name: Header field name (e.g., "From", "X-Mailer")
        content: Field value for non-recipient kinds
        recipients: Owned recipient list for CC/BCC, None otherwise

    Raises:
        ValueError: If type_name or content break the rules for kind
        TypeError: If recipients does not match kind
        InvalidAddressError: If a From header's content is not a valid address
    """
    kind: HeaderKind
    type_name: str
    content: str = ""
    recipients: Optional[RecipientList] = field(default=None, repr=False)

    def __post_init__(self) -> None:
        if not isinstance(self.kind, HeaderKind):
            raise TypeError(f"Header kind must be a HeaderKind; {type(self.kind).__name__} encountered")

        if self.kind is HeaderKind.GENERIC:
            if not isinstance(self.type_name, str) or not HEADER_NAME_PATTERN.fullmatch(self.type_name):
                raise ValueError(f"{self.type_name!r} is not a valid header name")
            if is_reserved_type_name(self.type_name):
                raise ValueError(
                    f"{self.type_name} cannot be set as a generic header; use its typed header"
                )
        elif self.type_name != HEADER_TYPE_NAMES[self.kind]:
            raise ValueError(
                f"{self.kind.name} header must be named {HEADER_TYPE_NAMES[self.kind]!r}; "
                f"{self.type_name!r} encountered"
            )

        if self.kind in RECIPIENT_KINDS:
            if not isinstance(self.recipients, RecipientList):
                raise TypeError(
                    f"{self.type_name} header requires a RecipientList; "
                    f"{type(self.recipients).__name__} encountered"
                )
        elif self.recipients is not None:
            raise TypeError(f"{self.type_name} header does not hold recipients")

        if not isinstance(self.content, str):
            raise TypeError(f"{self.type_name} header content must be a string")
        if contains_line_break(self.content):
            raise ValueError(f"{self.type_name} header content must not contain line breaks")

        if self.kind is HeaderKind.FROM and not validate_address(self.content):
            raise InvalidAddressError(self.content)

    @classmethod
    def generic(cls, type_name: str, content: str) -> "Header":
        """
        Raises:
            ValueError: If type_name is malformed or reserved (From, Reply-To,
                Cc, Bcc, To, Subject), or content spans lines
        """
        return cls(kind=HeaderKind.GENERIC, type_name=type_name, content=content)

    @classmethod
    def from_sender(cls, address: str, resolver: Optional[DomainResolver] = None) -> "Header":
        """
        Build a From header.

        Raises:
            InvalidAddressError: If address fails validation
        """
        if not validate_address(address, resolver):
            raise InvalidAddressError(address)
        return cls(kind=HeaderKind.FROM, type_name=HEADER_TYPE_NAMES[HeaderKind.FROM], content=address)

    @classmethod
    def reply_to(cls, address: str) -> "Header":
        return cls(kind=HeaderKind.REPLY_TO, type_name=HEADER_TYPE_NAMES[HeaderKind.REPLY_TO], content=address)

    @classmethod
    def cc(cls, recipients: Optional[RecipientList] = None) -> "Header":
        return cls._with_recipient_list(HeaderKind.CC, recipients)

    @classmethod
    def bcc(cls, recipients: Optional[RecipientList] = None) -> "Header":
        return cls._with_recipient_list(HeaderKind.BCC, recipients)

    @classmethod
    def _with_recipient_list(cls, kind: HeaderKind, recipients: Optional[RecipientList]) -> "Header":
        if recipients is not None and not isinstance(recipients, RecipientList):
            raise TypeError(
                f"{HEADER_TYPE_NAMES[kind]} header requires a RecipientList; "
                f"{type(recipients).__name__} encountered"
            )

        # Private copy; the caller's list stays independent
        owned = RecipientList()
        for recipient in recipients or []:
            owned.add(recipient)

        return cls(kind=kind, type_name=HEADER_TYPE_NAMES[kind], recipients=owned)

    @property
    def holds_recipients(self) -> bool:
        return self.kind in RECIPIENT_KINDS

    def add_recipient(self, recipient: Recipient) -> OperationResult:
        """
        Add a recipient to a CC/BCC header.

        Raises:
            TypeError: If this header does not hold recipients
        """
        if not self.holds_recipients:
            raise TypeError(f"{self.type_name} header does not hold recipients")
        return self.recipients.add(recipient)

    def add_recipient_by_address(
        self,
        address: str,
        name: Optional[str] = None,
        resolver: Optional[DomainResolver] = None
    ) -> OperationResult:
        """
        Raises:
            InvalidAddressError: If address fails validation
            TypeError: If this header does not hold recipients
        """
        return self.add_recipient(Recipient.create(address, name, resolver))

    def render(self) -> str:
        if self.holds_recipients:
            return f"{self.type_name}: {self.recipients.render()}"
        return f"{self.type_name}: {self.content}"

    def __str__(self) -> str:
        return self.render()


class HeaderList:
    """
    Ordered collection of Headers, unique by type name.

    add() enforces uniqueness; index assignment and deletion are a raw
    escape hatch. Use remove() or replace() to change an existing header.
    """

    def __init__(self, headers: Optional[List[Header]] = None):
        self._headers: List[Header] = []
        for header in headers or []:
            self.add(header)

    def add(self, header: Header) -> OperationResult:
        """
        Append a header unless one of the same type already exists.

        Returns:
            OperationResult: success, or DUPLICATE_ENTRY failure (list unchanged)

        Raises:
            TypeError: If header is not a Header
        """
        if not isinstance(header, Header):
            raise TypeError(
                f"HeaderList.add requires a Header; {type(header).__name__} encountered"
            )

        if header.type_name in self:
            return OperationResult.fail(
                FailureKind.DUPLICATE_ENTRY,
                f"A {header.type_name} header is already present"
            )

        self._headers.append(header)
        return OperationResult.ok(header)

    def lookup(self, type_name: str) -> Optional[Header]:
        """Return the header with this type name, or None."""
        for header in self._headers:
            if header.type_name == type_name:
                return header
        return None

    def remove(self, type_name: str) -> bool:
        """Remove the header with this type name; False if absent."""
        for index, header in enumerate(self._headers):
            if header.type_name == type_name:
                del self._headers[index]
                return True
        return False

    def replace(self, header: Header) -> None:
        """Put header in place of any existing one of the same type, keeping its position."""
        for index, existing in enumerate(self._headers):
            if existing.type_name == header.type_name:
                self._headers[index] = header
                return
        self._headers.append(header)

    def reset(self) -> None:
        self._headers = []

    def render(self) -> str:
        """Render the header block: CRLF-joined lines, no trailing CRLF."""
        return CRLF.join(h.render() for h in self._headers)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"HeaderList({self._headers!r})"

    def __len__(self) -> int:
        return len(self._headers)

    def __iter__(self) -> Iterator[Header]:
        return iter(list(self._headers))

    def __getitem__(self, index: int) -> Header:
        return self._headers[index]

    def __setitem__(self, index: int, header: Header) -> None:
        self._headers[index] = header

    def __delitem__(self, index: int) -> None:
        del self._headers[index]

    def __contains__(self, type_name: str) -> bool:
        return self.lookup(type_name) is not None
