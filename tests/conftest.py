"""Shared pytest fixtures for statement-converter tests.

The fixtures follow one statement through every format: the same
salary payment as MT940 text, as camt.053 XML, as a generic CSV table
and as a raw bank export.
"""

import pytest

from statement_converter.config import BankExportLayout
from statement_converter.models import Balance, Counterparty, DebitCredit, Entry, Statement
from tests.helpers import bank_export, bank_row


# =============================================================================
# MT940 Fixtures
# =============================================================================


MT940_SAMPLE = """\
:20:STATEMENT1
:25:DE0012345678
:60F:C251001EUR1000,00
:61:2510011001C100,00NTRFNONREF
:86:Salary October
:62F:C251031EUR1100,00
"""


@pytest.fixture
def mt940_bytes() -> bytes:
    """Minimal MT940 statement with one credit booking."""
    return MT940_SAMPLE.encode()


@pytest.fixture
def mt940_multi_bytes() -> bytes:
    """MT940 statement with a debit, a credit and a wrapped description."""
    return (
        "{1:F01BANKDEFFXXXX0000000000}{4:\n"
        ":20:STMT-2025-10\n"
        ":25:DE89370400440532013000\n"
        ":28C:00001/001\n"
        ":60F:D251001EUR250,00\n"
        ":61:2510021002D75,50NMSCREF-1\n"
        ":86:Groceries\n"
        "Market Street 5\n"
        ":61:2510051005C1200,00NTRFINV//2025/10\n"
        ":86:Invoice 2025/10\n"
        ":62F:C251031EUR874,50\n"
        "-}\n"
    ).encode()


# =============================================================================
# camt.053 Fixtures
# =============================================================================


CAMT_SAMPLE = """
<?xml version="1.0" encoding="UTF-8"?>
<Document xmlns="urn:iso:std:iso:20022:tech:xsd:camt.053.001.02">
  <BkToCstmrStmt>
    <Stmt>
      <Id>STATEMENT1</Id>
      <Acct><Id><IBAN>DE0012345678</IBAN></Id></Acct>
      <Bal>
        <Tp><CdOrPrtry><Cd>OPBD</Cd></CdOrPrtry></Tp>
        <Amt Ccy="EUR">1000.00</Amt>
        <Dt><Dt>2025-10-01</Dt></Dt>
      </Bal>
      <Ntry>
        <Amt Ccy="EUR">100.00</Amt>
        <CdtDbtInd>CRDT</CdtDbtInd>
        <ValDt><Dt>2025-10-01</Dt></ValDt>
        <BookgDt><Dt>2025-10-01</Dt></BookgDt>
        <AddtlNtryInf>Salary October</AddtlNtryInf>
      </Ntry>
      <Bal>
        <Tp><CdOrPrtry><Cd>CLBD</Cd></CdOrPrtry></Tp>
        <Amt Ccy="EUR">1100.00</Amt>
        <Dt><Dt>2025-10-31</Dt></Dt>
      </Bal>
    </Stmt>
  </BkToCstmrStmt>
</Document>
"""


@pytest.fixture
def camt_bytes() -> bytes:
    """camt.053 document with opening/closing balance and one entry.

    Starts with a newline ahead of the XML declaration, as pasted documents often do.
    """
    return CAMT_SAMPLE.encode()


# =============================================================================
# Bank Export CSV Fixtures
# =============================================================================


@pytest.fixture
def layout() -> BankExportLayout:
    return BankExportLayout()


@pytest.fixture
def bank_export_bytes(layout) -> bytes:
    """Bank export with one outgoing and one incoming payment plus a totals row."""
    outgoing = bank_row(
        layout,
        date="01.10.2025",
        debit_block="40702810900000000001\nИНН 7701234567\nООО \"Ромашка\"",
        credit_block="40702810500000000002\n7709876543\nИП Иванов\nИван Иванович",
        debit_amount="12 500,00",
        document="118",
        operation_code="01",
        bank_info="БИК 044525225 ПАО СБЕРБАНК\nг. Москва",
        purpose="Оплата по счёту 42\nНДС не облагается",
    )
    incoming = bank_row(
        layout,
        date="03.10.2025",
        debit_block="40702810100000000003\n7705555555\nАО Поставщик",
        credit_block="40702810900000000001\n7701234567\nООО \"Ромашка\"",
        credit_amount="3000",
        document="7",
        operation_code="01",
        bank_info="АО АЛЬФА-БАНК",
        purpose="Возврат",
    )
    totals = ["", "", "", "", "", "", "", "", "", "12 500,00", "", "", "", "3000"]
    return bank_export(layout, outgoing, incoming, footer=[totals])


# =============================================================================
# Model Fixtures
# =============================================================================


@pytest.fixture
def credit_entry() -> Entry:
    return Entry(
        booking_date="2025-10-01",
        value_date="2025-10-01",
        amount="100.00",
        currency="EUR",
        kind=DebitCredit.CREDIT,
        description="Salary October",
        reference="PAY-1",
    )


@pytest.fixture
def debit_entry() -> Entry:
    return Entry(
        booking_date="2025-10-02",
        value_date="2025-10-03",
        amount="75.50",
        currency="EUR",
        kind=DebitCredit.DEBIT,
        description="Groceries & more <cash>",
        counterparty=Counterparty(name="Market GmbH", bank_code="044525225"),
    )


@pytest.fixture
def statement(credit_entry, debit_entry) -> Statement:
    """A statement as any reader could produce it."""
    return Statement(
        id="STATEMENT1",
        account_id="DE0012345678",
        opening_balance=Balance(
            kind=DebitCredit.CREDIT, date_yyyymmdd="2025-10-01", currency="EUR", amount="1000.00"
        ),
        entries=(credit_entry, debit_entry),
        closing_balance=Balance(
            kind=DebitCredit.CREDIT, date_yyyymmdd="2025-10-31", currency="EUR", amount="1024.50"
        ),
    )
