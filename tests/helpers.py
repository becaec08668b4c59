"""Builders for test documents."""

import csv
import io

from statement_converter.config import BankExportLayout


def camt_document(stmt_body: str) -> bytes:
    """Wrap the content of a ``<Stmt>`` element into a full document."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<Document xmlns="urn:iso:std:iso:20022:tech:xsd:camt.053.001.08">'
        f"<BkToCstmrStmt><Stmt>{stmt_body}</Stmt></BkToCstmrStmt></Document>"
    ).encode()


def camt_entry(amount="10.00", indicator="DBIT", extra="") -> str:
    return (
        f'<Ntry><Amt Ccy="EUR">{amount}</Amt><CdtDbtInd>{indicator}</CdtDbtInd>'
        f"<BookgDt><Dt>2025-10-02</Dt></BookgDt><ValDt><Dt>2025-10-03</Dt></ValDt>{extra}</Ntry>"
    )


ACCOUNT = "<Acct><Id><IBAN>DE0012345678</IBAN></Id></Acct>"


def bank_row(layout: BankExportLayout, **cells) -> list[str]:
    """Build a bank-export row.

    Keyword names are layout column attributes without the ``_column``
    suffix, e.g. ``bank_row(layout, date="01.10.2025")``.
    """
    row = [""] * layout.width
    for name, value in cells.items():
        row[getattr(layout, f"{name}_column")] = value
    return row


def bank_export(layout: BankExportLayout, *rows: list[str], footer=(), encoding="utf-8") -> bytes:
    """Render a bank export: boilerplate rows, transactions, then footer rows."""
    boilerplate = [["Выписка по счёту"], ["за период 01.10.2025 - 31.10.2025"]]
    boilerplate += [[] for _ in range(layout.start_row - 1 - len(boilerplate))]
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerows([*boilerplate, *rows, *footer])
    return buffer.getvalue().encode(encoding)
