"""Canonical statement model shared by every format codec.

All values are kept as text exactly as a reader saw them. Codecs reshape
dates and amounts only at their own boundary, so nothing here is ever
converted to a float or a structured date.
"""

import re
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Sentinels used by readers when the source format omits a value
UNKNOWN_CURRENCY = "XXX"
UNKNOWN_ID = "none"
UNDEFINED = "undefined"

_AMOUNT_RE = re.compile(r"^[\d.,]*\d[\d.,]*$")


class DebitCredit(str, Enum):
    """Direction of a booking or balance."""
    DEBIT = "Debit"
    CREDIT = "Credit"


class Counterparty(BaseModel):
    """The other side of a transaction, as far as the source knows it."""
    model_config = ConfigDict(frozen=True)

    account: str | None = None
    tax_id: str | None = None
    name: str | None = None
    bank_code: str | None = None
    bank_name: str | None = None

    def is_empty(self) -> bool:
        return not any(self.model_dump().values())


class Entry(BaseModel):
    """One transaction line of a statement."""
    model_config = ConfigDict(frozen=True)

    booking_date: str
    value_date: str
    amount: str
    currency: str = Field(default=UNKNOWN_CURRENCY, min_length=1)
    kind: DebitCredit
    description: str = ""
    reference: str | None = None
    type_code: str | None = None
    counterparty: Counterparty | None = None

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        """Amounts are unsigned decimal text with either separator."""
        if not _AMOUNT_RE.match(v):
            raise ValueError(f"not a decimal amount: {v!r}")
        return v


class Balance(BaseModel):
    """Opening or closing balance snapshot."""
    model_config = ConfigDict(frozen=True)

    kind: DebitCredit
    date_yyyymmdd: str
    currency: str = Field(default=UNKNOWN_CURRENCY, min_length=1)
    amount: str

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: str) -> str:
        if not _AMOUNT_RE.match(v):
            raise ValueError(f"not a decimal amount: {v!r}")
        return v


class Statement(BaseModel):
    """Root aggregate produced by every reader and consumed by every writer.

    ``entries`` keeps source order, which is booking order.
    """
    model_config = ConfigDict(frozen=True)

    id: str
    account_id: str
    opening_balance: Balance | None = None
    entries: tuple[Entry, ...] = ()
    closing_balance: Balance | None = None
