"""CSV readers and writers.

Two unrelated grammars live here:

- ``CsvCodec``: a generic table with a header row and one entry per row.
- ``BankExportCsvCodec``: the raw export of a bank client, without header,
  with report boilerplate on top, fixed column positions and multi-line
  counterparty cells (``account / tax id / name``).
"""

import csv
import io
import re
from typing import BinaryIO, Iterator

from statement_converter.base import StatementCodec, build, emit
from statement_converter.config import BankExportLayout, CsvConfig
from statement_converter.errors import ParseError, WriteError
from statement_converter.fields import normalize_amount, split_date, to_iso_date
from statement_converter.logging_setup import get_logger
from statement_converter.models import (
    UNDEFINED,
    UNKNOWN_CURRENCY,
    UNKNOWN_ID,
    Counterparty,
    DebitCredit,
    Entry,
    Statement,
)

logger = get_logger(__name__)

CSV_COLUMNS = (
    "statement_id",
    "account_id",
    "booking_date",
    "value_date",
    "debit",
    "credit",
    "currency",
    "type_code",
    "reference",
    "description",
    "counterparty_account",
    "counterparty_tax_id",
    "counterparty_name",
    "counterparty_bank_code",
    "counterparty_bank_name",
)
REQUIRED_COLUMNS = ("booking_date", "debit", "credit")
COUNTERPARTY_COLUMNS = {
    "counterparty_account": "account",
    "counterparty_tax_id": "tax_id",
    "counterparty_name": "name",
    "counterparty_bank_code": "bank_code",
    "counterparty_bank_name": "bank_name",
}

# "БИК 044525225 ПАО СБЕРБАНК г. Москва": registry number, then bank name
BIK_RE = re.compile(r"БИК\s*:?\s*(?P<code>\d{9})[\s,;]*(?P<name>.*)", re.DOTALL | re.IGNORECASE)
TAX_ID_LABEL_RE = re.compile(r"^ИНН\s*:?\s*", re.IGNORECASE)
BANK_AMOUNT_RE = re.compile(r"^\d+(?:[.,]\d+)?$")


def read_rows(stream: BinaryIO, encoding: str, delimiter: str) -> Iterator[tuple[int, list[str]]]:
    """Decode a CSV document and yield ``(row number, cells)`` pairs.

    Row numbers are 1-based and count records, so a quoted multi-line
    cell does not shift them.
    """
    data = stream.read()
    try:
        text = data.decode(encoding)
    except UnicodeDecodeError as e:
        line = data[:e.start].count(b"\n") + 1
        raise ParseError(f"cannot decode as {encoding}: {e.reason}", line=line) from e

    reader = csv.reader(io.StringIO(text.lstrip("\ufeff"), newline=""), delimiter=delimiter)
    number = 0
    while True:
        try:
            row = next(reader)
        except StopIteration:
            return
        except csv.Error as e:
            raise ParseError(f"malformed CSV: {e}", line=number + 1) from e
        number += 1
        yield number, row


def write_rows(stream: BinaryIO, rows, encoding: str, delimiter: str) -> None:
    buffer = io.StringIO()
    writer = csv.writer(buffer, delimiter=delimiter, lineterminator="\n")
    writer.writerows(rows)
    try:
        payload = buffer.getvalue().encode(encoding)
    except UnicodeEncodeError as e:
        raise WriteError(f"cannot encode CSV as {encoding}: {e.reason}") from e
    emit(stream, payload)


def _present(value: str | None) -> str | None:
    """Cell value, or None for empty and ``undefined`` cells."""
    if value is None:
        return None
    value = value.strip()
    if not value or value == UNDEFINED:
        return None
    return value


def _counterparty(**fields) -> Counterparty | None:
    counterparty = Counterparty(**fields)
    return None if counterparty.is_empty() else counterparty


class CsvCodec(StatementCodec):
    """Generic CSV table, one entry per row, with header."""

    name = "csv"

    def __init__(self, config: CsvConfig | None = None):
        self.config = config or CsvConfig()

    def read_from(self, stream: BinaryIO) -> Statement:
        rows = read_rows(stream, self.config.encoding, self.config.delimiter)
        first = next(rows, None)
        if first is None:
            raise ParseError("empty CSV, header row expected", line=1)
        header = [name.strip() for name in first[1]]
        missing = [name for name in REQUIRED_COLUMNS if name not in header]
        if missing:
            raise ParseError(f"header lacks columns: {', '.join(missing)}", line=1)

        statement_id = account_id = None
        entries = []
        for number, row in rows:
            if not row:
                continue
            if len(row) != len(header):
                raise ParseError(
                    f"expected {len(header)} columns, found {len(row)}", line=number
                )
            record = {name: _present(cell) for name, cell in zip(header, row)}

            booking_date = record.get("booking_date") or record.get("value_date")
            debit, credit = record.get("debit"), record.get("credit")
            if not booking_date or not (debit or credit):
                logger.debug("Skipping row %d without date or amount", number)
                continue
            if debit and credit:
                raise ParseError(f"both debit {debit!r} and credit {credit!r} set", line=number)

            statement_id = statement_id or record.get("statement_id")
            account_id = account_id or record.get("account_id")
            entries.append(build(
                Entry,
                line=number,
                booking_date=booking_date,
                value_date=record.get("value_date") or booking_date,
                amount=debit or credit,
                currency=record.get("currency") or UNKNOWN_CURRENCY,
                kind=DebitCredit.DEBIT if debit else DebitCredit.CREDIT,
                description=record.get("description") or "",
                reference=record.get("reference"),
                type_code=record.get("type_code"),
                counterparty=_counterparty(**{
                    field: record.get(column) for column, field in COUNTERPARTY_COLUMNS.items()
                }),
            ))

        return Statement(
            id=statement_id or UNKNOWN_ID,
            account_id=account_id or UNKNOWN_ID,
            entries=tuple(entries),
        )

    def write_to(self, stream: BinaryIO, statement: Statement) -> None:
        if statement.opening_balance or statement.closing_balance:
            logger.info("CSV has no balance columns, balances of %s are not written", statement.id)

        rows = [CSV_COLUMNS]
        for entry in statement.entries:
            amount = normalize_amount(entry.amount)
            counterparty = entry.counterparty or Counterparty()
            is_debit = entry.kind == DebitCredit.DEBIT
            rows.append((
                statement.id,
                statement.account_id,
                to_iso_date(entry.booking_date),
                to_iso_date(entry.value_date),
                amount if is_debit else "",
                "" if is_debit else amount,
                entry.currency,
                entry.type_code or "",
                entry.reference or "",
                entry.description,
                *(getattr(counterparty, field) or UNDEFINED for field in COUNTERPARTY_COLUMNS.values()),
            ))
        write_rows(stream, rows, self.config.encoding, self.config.delimiter)


def parse_counterparty_block(cell: str | None) -> tuple[str | None, str | None, str | None]:
    """Split an ``account / tax id / name`` cell into its parts.

    Names may wrap over several lines; they are joined with spaces.
    """
    lines = [line.strip() for line in (cell or "").splitlines() if line.strip()]
    account = _present(lines[0]) if lines else None
    tax_id = _present(TAX_ID_LABEL_RE.sub("", lines[1])) if len(lines) > 1 else None
    name = _present(" ".join(lines[2:]))
    return account, tax_id, name


def parse_bank_info(cell: str | None) -> tuple[str | None, str | None]:
    """Extract the bank registry code (BIK) and bank name from free text."""
    text = _present(cell)
    if text is None:
        return None, None
    match = BIK_RE.search(text)
    if not match:
        return None, " ".join(text.split())
    return match.group("code"), _present(" ".join(match.group("name").split()))


def parse_bank_amount(raw: str, line: int) -> str:
    """Drop grouping spaces from an amount and check it is a number."""
    amount = "".join(raw.split())
    if not BANK_AMOUNT_RE.match(amount):
        raise ParseError(f"invalid amount {raw!r}", line=line)
    return amount


def to_bank_date(text: str) -> str:
    parts = split_date(text)
    if parts is None:
        return text
    year, month, day = parts
    return f"{day}.{month}.{year}"


class BankExportCsvCodec(StatementCodec):
    """Raw bank-export CSV with fixed column positions."""

    name = "bank-csv"

    def __init__(self, layout: BankExportLayout | None = None):
        self.layout = layout or BankExportLayout()

    def _cell(self, row: list[str], index: int) -> str | None:
        return _present(row[index]) if index < len(row) else None

    def read_from(self, stream: BinaryIO) -> Statement:
        layout = self.layout
        account_id = None
        entries = []

        for number, row in read_rows(stream, layout.encoding, layout.delimiter):
            if number < layout.start_row:
                continue
            date = self._cell(row, layout.date_column)
            debit = self._cell(row, layout.debit_amount_column)
            credit = self._cell(row, layout.credit_amount_column)
            if not date or not (debit or credit):
                logger.debug("Skipping non-transactional row %d", number)
                continue
            if len(row) < layout.width:
                raise ParseError(
                    f"expected at least {layout.width} columns, found {len(row)}", line=number
                )
            if debit and credit:
                raise ParseError(f"both debit {debit!r} and credit {credit!r} set", line=number)

            kind = DebitCredit.DEBIT if debit else DebitCredit.CREDIT
            debit_side = parse_counterparty_block(row[layout.debit_block_column])
            credit_side = parse_counterparty_block(row[layout.credit_block_column])
            owner, other = (debit_side, credit_side) if debit else (credit_side, debit_side)
            account_id = account_id or owner[0]

            bank_code, bank_name = parse_bank_info(row[layout.bank_info_column])
            purpose = self._cell(row, layout.purpose_column) or ""
            entries.append(build(
                Entry,
                line=number,
                booking_date=date,
                value_date=date,
                amount=parse_bank_amount(debit or credit, number),
                currency=layout.currency,
                kind=kind,
                description=" ".join(purpose.split()),
                reference=self._cell(row, layout.document_column),
                type_code=self._cell(row, layout.operation_code_column),
                counterparty=_counterparty(
                    account=other[0],
                    tax_id=other[1],
                    name=other[2],
                    bank_code=bank_code,
                    bank_name=bank_name,
                ),
            ))

        logger.debug("Read bank export with %d entries", len(entries))
        return Statement(id=UNKNOWN_ID, account_id=account_id or UNKNOWN_ID, entries=tuple(entries))

    def write_to(self, stream: BinaryIO, statement: Statement) -> None:
        layout = self.layout
        if statement.opening_balance or statement.closing_balance:
            logger.info("Bank export has no balance columns, balances of %s are not written", statement.id)
        rows: list[list[str]] = [[] for _ in range(layout.start_row - 1)]

        for entry in statement.entries:
            counterparty = entry.counterparty or Counterparty()
            counterparty_block = "\n".join(
                value or UNDEFINED
                for value in (counterparty.account, counterparty.tax_id, counterparty.name)
            )
            if counterparty.bank_code:
                bank_info = f"БИК {counterparty.bank_code} {counterparty.bank_name or ''}".strip()
            else:
                bank_info = counterparty.bank_name or UNDEFINED

            is_debit = entry.kind == DebitCredit.DEBIT
            amount = normalize_amount(entry.amount, ",")
            row = [""] * layout.width
            row[layout.date_column] = to_bank_date(entry.booking_date)
            row[layout.debit_block_column] = statement.account_id if is_debit else counterparty_block
            row[layout.credit_block_column] = counterparty_block if is_debit else statement.account_id
            row[layout.debit_amount_column] = amount if is_debit else ""
            row[layout.credit_amount_column] = "" if is_debit else amount
            row[layout.document_column] = entry.reference or ""
            row[layout.operation_code_column] = entry.type_code or ""
            row[layout.bank_info_column] = bank_info
            row[layout.purpose_column] = entry.description
            rows.append(row)

        write_rows(stream, rows, layout.encoding, layout.delimiter)
