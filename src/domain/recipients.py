"""
Recipients and ordered, address-unique recipient lists.
"""

import json
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional, Union

from .address import DomainResolver, contains_line_break, validate_address
from .exceptions import InvalidAddressError
from .models import FailureKind, OperationResult


@dataclass(frozen=True)
class Recipient:
    """
    A validated, optionally named email address.

    Attributes:
        address: Email address (validated on construction)
        name: Display name, or None for a bare address

    Raises:
        InvalidAddressError: If address fails syntax validation
        ValueError: If name contains a line break

    Example:
        >>> str(Recipient("john.doe@example.com", "John Doe"))
        'John Doe <john.doe@example.com>'
    """
    address: str
    name: Optional[str] = None

    def __post_init__(self) -> None:
        if not validate_address(self.address):
            raise InvalidAddressError(self.address)
        if self.name is not None and contains_line_break(self.name):
            raise ValueError(f"Recipient name for {self.address} must not contain line breaks")

    @classmethod
    def create(
        cls,
        address: str,
        name: Optional[str] = None,
        resolver: Optional[DomainResolver] = None
    ) -> "Recipient":
        """
        Build a Recipient, also checking DNS when a resolver is supplied.

        Raises:
            InvalidAddressError: If address fails validation
        """
        if resolver is not None and not validate_address(address, resolver):
            raise InvalidAddressError(address)
        return cls(address=address, name=name)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Recipient":
        """Build from a {"address": ..., "name": ...} mapping."""
        return cls(address=data.get("address", ""), name=data.get("name"))

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"name": self.name, "address": self.address}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def __str__(self) -> str:
        if self.name is not None:
            return f"{self.name} <{self.address}>"
        return self.address


class RecipientList:
    """
    Ordered collection of Recipients, unique by address.

    add() is the deduplicating mutator. Index assignment and deletion are
    available as a raw escape hatch and do not check for duplicates.
    """

    def __init__(self, recipients: Optional[List[Recipient]] = None):
        self._recipients: List[Recipient] = []
        for recipient in recipients or []:
            self.add(recipient)

    def add(self, recipient: Recipient) -> OperationResult:
        """
        Append a recipient unless its address is already present.

        Returns:
            OperationResult: success, or DUPLICATE_ENTRY failure (list unchanged)

        Raises:
            TypeError: If recipient is not a Recipient
        """
        if not isinstance(recipient, Recipient):
            raise TypeError(
                f"RecipientList.add requires a Recipient; "
                f"{type(recipient).__name__} encountered"
            )

        if recipient.address in self:
            return OperationResult.fail(
                FailureKind.DUPLICATE_ENTRY,
                f"{recipient.address} is already a recipient"
            )

        self._recipients.append(recipient)
        return OperationResult.ok(recipient)

    def addresses(self) -> List[str]:
        return [r.address for r in self._recipients]

    def reset(self) -> None:
        self._recipients = []

    def render(self) -> str:
        """Render as a comma-separated address line (empty list -> "")."""
        return ", ".join(str(r) for r in self._recipients)

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"RecipientList({self._recipients!r})"

    def __len__(self) -> int:
        return len(self._recipients)

    def __iter__(self) -> Iterator[Recipient]:
        return iter(list(self._recipients))

    def __getitem__(self, index: int) -> Recipient:
        return self._recipients[index]

    def __setitem__(self, index: int, recipient: Recipient) -> None:
        self._recipients[index] = recipient

    def __delitem__(self, index: int) -> None:
        del self._recipients[index]

    def __contains__(self, item: Union[str, Recipient]) -> bool:
        address = item.address if isinstance(item, Recipient) else item
        return any(r.address == address for r in self._recipients)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RecipientList):
            return NotImplemented
        return self._recipients == other._recipients
