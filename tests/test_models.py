"""Unit tests for the canonical statement model (models.py).

These tests verify the pydantic models every codec reads into and
writes from:

    Statement → Balance (opening/closing) + Entry* → Counterparty?

Values stay text; the models only check that amounts look like numbers.
"""

import pytest
from pydantic import ValidationError

from statement_converter.models import (
    UNKNOWN_CURRENCY,
    Balance,
    Counterparty,
    DebitCredit,
    Entry,
    Statement,
)


# =============================================================================
# Entry Tests
# =============================================================================


class TestEntry:
    """Tests for Entry - one transaction line."""

    def test_fields_are_kept_as_text(self, credit_entry):
        """Dates and amounts are not converted to date or number types."""
        assert credit_entry.booking_date == "2025-10-01"
        assert credit_entry.amount == "100.00"
        assert isinstance(credit_entry.amount, str)

    def test_optional_fields_default_to_none(self, credit_entry):
        """Reference, type code and counterparty are optional."""
        assert credit_entry.type_code is None
        assert credit_entry.counterparty is None

    def test_currency_defaults_to_unknown_marker(self):
        """Without a currency the XXX marker is used."""
        entry = Entry(booking_date="251001", value_date="251001", amount="1,00", kind=DebitCredit.DEBIT)
        assert entry.currency == UNKNOWN_CURRENCY == "XXX"

    def test_empty_currency_rejected(self):
        """An empty currency is not a currency."""
        with pytest.raises(ValidationError):
            Entry(
                booking_date="251001", value_date="251001", amount="1",
                currency="", kind=DebitCredit.DEBIT,
            )

    @pytest.mark.parametrize("amount", ["100", "100,00", "100.00", "1.000,50", "0,5"])
    def test_accepts_decimal_text(self, amount):
        """Either separator, with or without grouping, is accepted."""
        entry = Entry(booking_date="d", value_date="d", amount=amount, kind=DebitCredit.CREDIT)
        assert entry.amount == amount

    @pytest.mark.parametrize("amount", ["", "abc", "1e5", "-", ",,"])
    def test_rejects_non_numeric_amount(self, amount):
        """Text that is not a decimal number is rejected."""
        with pytest.raises(ValidationError):
            Entry(booking_date="d", value_date="d", amount=amount, kind=DebitCredit.CREDIT)

    def test_entries_are_immutable(self, credit_entry):
        """Entries are frozen."""
        with pytest.raises(ValidationError):
            credit_entry.amount = "1.00"

    def test_copy_with_changes(self, credit_entry):
        """model_copy is the way to derive a changed entry."""
        changed = credit_entry.model_copy(update={"description": "Bonus"})
        assert changed.description == "Bonus"
        assert credit_entry.description == "Salary October"


# =============================================================================
# Balance and Counterparty Tests
# =============================================================================


class TestBalance:
    def test_equality_by_value(self):
        """Balances compare by value."""
        a = Balance(kind=DebitCredit.CREDIT, date_yyyymmdd="251001", currency="EUR", amount="1,00")
        b = Balance(kind=DebitCredit.CREDIT, date_yyyymmdd="251001", currency="EUR", amount="1,00")
        assert a == b

    def test_rejects_bad_amount(self):
        """Balance amounts are validated like entry amounts."""
        with pytest.raises(ValidationError):
            Balance(kind=DebitCredit.DEBIT, date_yyyymmdd="251001", currency="EUR", amount="EUR")


class TestCounterparty:
    def test_empty_counterparty(self):
        """A counterparty with no fields is empty."""
        assert Counterparty().is_empty()

    def test_partial_counterparty_is_not_empty(self):
        """One known field makes a counterparty non-empty."""
        assert not Counterparty(bank_code="044525225").is_empty()


# =============================================================================
# Statement Tests
# =============================================================================


class TestStatement:
    def test_entries_keep_order(self, statement, credit_entry, debit_entry):
        """Entries stay in the order given."""
        assert statement.entries == (credit_entry, debit_entry)

    def test_balances_are_optional(self):
        """Only id and account are required."""
        statement = Statement(id="S", account_id="A")
        assert statement.opening_balance is None
        assert statement.closing_balance is None
        assert statement.entries == ()

    def test_entries_list_becomes_tuple(self, credit_entry):
        """A list of entries is stored as a tuple."""
        statement = Statement(id="S", account_id="A", entries=[credit_entry])
        assert statement.entries == (credit_entry,)

    def test_statement_equality(self, statement):
        """Statements compare by value."""
        assert statement == statement.model_copy()

    def test_debit_credit_values(self):
        """DebitCredit values are the capitalized words."""
        assert DebitCredit("Debit") is DebitCredit.DEBIT
        assert DebitCredit("Credit") is DebitCredit.CREDIT
