"""
Tests for recipients and recipient lists.
"""

import json
import pytest
from unittest.mock import Mock
import sys
import os

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '../src'))

from domain.exceptions import InvalidAddressError
from domain.models import FailureKind
from domain.recipients import Recipient, RecipientList


class TestRecipient:
    """Test Recipient construction and rendering."""

    def test_bare_address(self):
        """Test a recipient without a name renders as the address."""
        recipient = Recipient("john.doe@example.com")

        assert recipient.address == "john.doe@example.com"
        assert recipient.name is None
        assert str(recipient) == "john.doe@example.com"

    def test_named_address(self):
        """Test a named recipient renders as 'name <address>'."""
        recipient = Recipient("john.doe@example.com", "John Doe")

        assert str(recipient) == "John Doe <john.doe@example.com>"

    def test_invalid_address_raises(self):
        """Test construction fails for an invalid address."""
        with pytest.raises(InvalidAddressError, match="bad@ is not a valid email address"):
            Recipient("bad@")

    def test_invalid_address_is_value_error(self):
        """Test InvalidAddressError can be caught as ValueError."""
        with pytest.raises(ValueError):
            Recipient("@nodomain")

    def test_immutable(self):
        """Test a recipient cannot be changed after construction."""
        recipient = Recipient("john.doe@example.com")

        with pytest.raises(AttributeError):
            recipient.address = "bad@"

    def test_create_with_resolver(self):
        """Test create() also applies the DNS check."""
        resolver = Mock()
        resolver.has_mx_or_a.return_value = False

        with pytest.raises(InvalidAddressError):
            Recipient.create("john@nowhere.invalid", resolver=resolver)

    def test_create_without_resolver(self):
        """Test create() without a resolver only checks syntax."""
        recipient = Recipient.create("john@example.com", "John")

        assert recipient == Recipient("john@example.com", "John")

    def test_to_json(self):
        """Test JSON serialization carries name and address."""
        recipient = Recipient("john@example.com", "John")

        assert json.loads(recipient.to_json()) == {"name": "John", "address": "john@example.com"}
        assert json.loads(Recipient("a@x.com").to_json()) == {"name": None, "address": "a@x.com"}

    def test_from_dict(self):
        """Test building a recipient from a mapping."""
        recipient = Recipient.from_dict({"name": "Bee", "address": "b@x.com"})

        assert recipient == Recipient("b@x.com", "Bee")
        assert Recipient.from_dict(recipient.to_dict()) == recipient

    def test_from_dict_missing_address(self):
        """Test a mapping without an address is rejected."""
        with pytest.raises(InvalidAddressError):
            Recipient.from_dict({"name": "Nobody"})


    def test_name_with_line_break_rejected(self):
        """Test a display name cannot start a second header line."""
        with pytest.raises(ValueError, match="must not contain line breaks"):
            Recipient("john@example.com", "John\r\nBcc: evil@evil.com")


class TestRecipientList:
    """Test RecipientList ordering and uniqueness."""

    def test_empty_list(self):
        """Test a new list is empty and renders as an empty string."""
        recipients = RecipientList()

        assert len(recipients) == 0
        assert recipients.render() == ""
        assert str(recipients) == ""

    def test_add_and_render(self):
        """Test recipients render comma-separated in insertion order."""
        recipients = RecipientList()
        recipients.add(Recipient("a@x.com"))
        recipients.add(Recipient("b@x.com"))

        assert recipients.render() == "a@x.com, b@x.com"

    def test_render_with_names(self):
        """Test named and bare recipients render together."""
        recipients = RecipientList([
            Recipient("a@x.com", "Ay"),
            Recipient("b@x.com"),
        ])

        assert recipients.render() == "Ay <a@x.com>, b@x.com"

    def test_duplicate_address_rejected(self):
        """Test adding the same address twice keeps one entry."""
        recipients = RecipientList()

        first = recipients.add(Recipient("a@x.com"))
        second = recipients.add(Recipient("a@x.com", "Other Name"))

        assert first.success is True
        assert first.value == Recipient("a@x.com")
        assert second.success is False
        assert not second
        assert second.failure is FailureKind.DUPLICATE_ENTRY
        assert len(recipients) == 1
        assert recipients[0].name is None

    def test_duplicate_check_is_case_sensitive(self):
        """Test addresses differing only in case are distinct."""
        recipients = RecipientList()

        assert recipients.add(Recipient("a@x.com"))
        assert recipients.add(Recipient("A@x.com"))
        assert len(recipients) == 2

    def test_add_rejects_wrong_type(self):
        """Test adding a non-Recipient is a programmer error."""
        with pytest.raises(TypeError, match="requires a Recipient; str encountered"):
            RecipientList().add("a@x.com")

    def test_constructor_deduplicates(self):
        """Test the constructor goes through add()."""
        recipients = RecipientList([Recipient("a@x.com"), Recipient("a@x.com")])

        assert len(recipients) == 1

    def test_index_and_iteration(self):
        """Test index access and restartable iteration."""
        recipients = RecipientList([Recipient("a@x.com"), Recipient("b@x.com")])

        assert recipients[1].address == "b@x.com"
        assert [r.address for r in recipients] == ["a@x.com", "b@x.com"]
        assert [r.address for r in recipients] == ["a@x.com", "b@x.com"]

    def test_contains(self):
        """Test membership by address string or Recipient."""
        recipients = RecipientList([Recipient("a@x.com")])

        assert "a@x.com" in recipients
        assert Recipient("a@x.com", "Ay") in recipients
        assert "b@x.com" not in recipients

    def test_index_assignment_bypasses_deduplication(self):
        """Test raw index assignment is an escape hatch without dedup."""
        recipients = RecipientList([Recipient("a@x.com"), Recipient("b@x.com")])

        recipients[1] = Recipient("a@x.com")

        assert recipients.addresses() == ["a@x.com", "a@x.com"]

    def test_delete_and_reset(self):
        """Test deletion by index and reset()."""
        recipients = RecipientList([Recipient("a@x.com"), Recipient("b@x.com")])

        del recipients[0]
        assert recipients.addresses() == ["b@x.com"]

        recipients.reset()
        assert len(recipients) == 0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
