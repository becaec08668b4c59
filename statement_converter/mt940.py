"""MT940 reader and writer.

Only the tags needed for a single statement are understood::

    :20:   statement reference
    :25:   account identification
    :60F:  opening balance   C251001EUR1000,00
    :61:   statement line    2510011001C100,00NTRFNONREF
    :86:   information to account owner (describes the preceding :61:)
    :62F:  closing balance

Everything else (block headers, other tags, trailers) is ignored. A file
holding more than one statement is rejected.
"""

import re
from dataclasses import dataclass
from typing import BinaryIO

from statement_converter.base import StatementCodec, build, emit
from statement_converter.config import Mt940Config
from statement_converter.errors import ParseError, WriteError
from statement_converter.fields import normalize_amount, to_mmdd, to_yymmdd
from statement_converter.logging_setup import get_logger
from statement_converter.models import Balance, DebitCredit, Entry, Statement

logger = get_logger(__name__)

# Tags
TAG_REFERENCE = ":20:"
TAG_ACCOUNT = ":25:"
TAG_OPENING_BALANCE = ":60F:"
TAG_STATEMENT_LINE = ":61:"
TAG_INFORMATION = ":86:"
TAG_CLOSING_BALANCE = ":62F:"

SIGNS = {"C": DebitCredit.CREDIT, "D": DebitCredit.DEBIT}
SIGN_CODES = {kind: sign for sign, kind in SIGNS.items()}

# <sign:1><date:6><currency:3>, amount follows
BALANCE_HEAD_LENGTH = 1 + 6 + 3
# <date:6><sign:1><amount:1+>, entry date is optional
STATEMENT_LINE_MIN_LENGTH = 6 + 1 + 1

_AMOUNT_SCAN = re.compile(r"[\d,.]*")
_TYPE_CODE_SCAN = re.compile(r"[A-Za-z]*")
_AMOUNT_RE = re.compile(r"^[\d,.]*\d[\d,.]*$")
_TYPE_CODE_RE = re.compile(r"^[A-Za-z]+$")
# Tag lines and block headers never continue an :86: description
_NON_CONTINUATION_PREFIXES = (":", "{")
# Block trailers, "-" on its own or "-}"
_TRAILER_RE = re.compile(r"^-(\}.*)?$")


@dataclass
class StatementLine:
    """A parsed ``:61:`` line plus the text of its ``:86:``."""
    value_date: str
    entry_mmdd: str | None
    kind: DebitCredit
    amount: str
    type_code: str
    reference: str | None
    description: str = ""

    @property
    def booking_date(self) -> str:
        """Booking date in YYMMDD form.

        The entry date carries no year, so it is borrowed from the value
        date. Bookings that cross a year end come out one year early.
        """
        if self.entry_mmdd is None:
            return self.value_date
        return self.value_date[:2] + self.entry_mmdd

    def describe(self, text: str) -> None:
        text = text.strip()
        if not text:
            return
        self.description = f"{self.description} {text}" if self.description else text


def parse_balance(field: str, line: int | None = None) -> Balance:
    """Parse the value of a ``:60F:`` or ``:62F:`` tag.

    Args:
        field: Text after the tag, e.g. ``C251001EUR1000,00``.
        line: Line number used in error messages.
    Returns:
        A Balance with the date kept as YYMMDD.
    """
    field = field.strip()
    if len(field) <= BALANCE_HEAD_LENGTH:
        raise ParseError(f"balance too short: {field!r}", line=line)

    sign = field[0]
    if sign not in SIGNS:
        raise ParseError(f"unknown balance sign {sign!r} in {field!r}", line=line)

    date = field[1:7]
    if not date.isdigit():
        raise ParseError(f"bad balance date {date!r} in {field!r}", line=line)

    amount = field[BALANCE_HEAD_LENGTH:]
    if not _AMOUNT_RE.match(amount):
        raise ParseError(f"bad balance amount {amount!r} in {field!r}", line=line)

    return build(
        Balance,
        line=line,
        kind=SIGNS[sign],
        date_yyyymmdd=date,
        currency=field[7:BALANCE_HEAD_LENGTH],
        amount=amount,
    )


def parse_statement_line(field: str, line: int | None = None) -> StatementLine:
    """Parse the value of a ``:61:`` tag.

    Layout: ``<value date:6>[<entry date MMDD:4>]<C|D><amount><type code><reference>``.
    The amount is the longest run of digits, commas and dots, the type code
    the longest run of letters after it; whatever is left is the reference.
    """
    field = field.strip()
    if len(field) < STATEMENT_LINE_MIN_LENGTH:
        raise ParseError(f":61: too short: {field!r}", line=line)

    value_date = field[:6]
    if not value_date.isdigit():
        raise ParseError(f":61: bad value date {value_date!r} in {field!r}", line=line)

    pos = 6
    entry_mmdd = None
    if field[6:10].isdigit() and len(field) > 10:
        entry_mmdd = field[6:10]
        pos = 10

    sign = field[pos:pos + 1]
    if sign not in SIGNS:
        raise ParseError(f":61: bad sign {sign!r} in {field!r}", line=line)
    pos += 1

    amount = _AMOUNT_SCAN.match(field, pos).group()
    if not amount:
        raise ParseError(f":61: amount missing in {field!r}", line=line)
    pos += len(amount)

    type_code = _TYPE_CODE_SCAN.match(field, pos).group()
    if not type_code:
        raise ParseError(f":61: type code missing in {field!r}", line=line)
    pos += len(type_code)

    return StatementLine(
        value_date=value_date,
        entry_mmdd=entry_mmdd,
        kind=SIGNS[sign],
        amount=amount,
        type_code=type_code,
        reference=field[pos:].strip() or None,
    )


class Mt940Codec(StatementCodec):
    """MT940 statement format."""

    name = "mt940"

    def __init__(self, config: Mt940Config | None = None):
        self.config = config or Mt940Config()

    def read_from(self, stream: BinaryIO) -> Statement:
        reference = ""
        account_id = ""
        opening: Balance | None = None
        closing: Balance | None = None
        lines: list[StatementLine] = []
        awaiting_description = False
        continuing: StatementLine | None = None

        for lineno, raw in enumerate(stream, 1):
            try:
                text = raw.decode(self.config.encoding).strip()
            except UnicodeDecodeError as e:
                raise ParseError(f"cannot decode {raw!r}: {e.reason}", line=lineno) from e
            if not text:
                continue

            if (
                continuing is not None
                and not text.startswith(_NON_CONTINUATION_PREFIXES)
                and not _TRAILER_RE.match(text)
            ):
                continuing.describe(text)
                continue
            continuing = None

            if text.startswith(TAG_REFERENCE):
                self._check_single(TAG_REFERENCE, reference, lineno)
                reference = text[len(TAG_REFERENCE):].strip()
            elif text.startswith(TAG_ACCOUNT):
                account_id = text[len(TAG_ACCOUNT):].strip()
            elif text.startswith(TAG_OPENING_BALANCE):
                self._check_single(TAG_OPENING_BALANCE, opening, lineno)
                opening = parse_balance(text[len(TAG_OPENING_BALANCE):], line=lineno)
            elif text.startswith(TAG_STATEMENT_LINE):
                lines.append(parse_statement_line(text[len(TAG_STATEMENT_LINE):], line=lineno))
                awaiting_description = True
            elif text.startswith(TAG_INFORMATION):
                if awaiting_description:
                    lines[-1].describe(text[len(TAG_INFORMATION):])
                    continuing = lines[-1]
                    awaiting_description = False
                else:
                    logger.debug("Ignoring :86: without a statement line at line %d", lineno)
            elif text.startswith(TAG_CLOSING_BALANCE):
                self._check_single(TAG_CLOSING_BALANCE, closing, lineno)
                closing = parse_balance(text[len(TAG_CLOSING_BALANCE):], line=lineno)
            else:
                logger.debug("Ignoring line %d: %r", lineno, text)

        if opening is None:
            raise ParseError("missing :60F: opening balance")
        if closing is None:
            raise ParseError("missing :62F: closing balance")
        if not reference:
            raise ParseError("missing :20: reference")
        if not account_id:
            raise ParseError("missing :25: account id")

        entries = tuple(
            build(
                Entry,
                booking_date=stmt_line.booking_date,
                value_date=stmt_line.value_date,
                amount=stmt_line.amount,
                currency=opening.currency,
                kind=stmt_line.kind,
                description=stmt_line.description,
                reference=stmt_line.reference,
                type_code=stmt_line.type_code,
            )
            for stmt_line in lines
        )
        logger.debug("Read MT940 statement %s with %d entries", reference, len(entries))
        return Statement(
            id=reference,
            account_id=account_id,
            opening_balance=opening,
            entries=entries,
            closing_balance=closing,
        )

    @staticmethod
    def _check_single(tag: str, seen, lineno: int) -> None:
        """A second statement in one file would overwrite the first one."""
        if seen:
            raise ParseError(f"repeated {tag}, only one statement per file is supported", line=lineno)

    def write_to(self, stream: BinaryIO, statement: Statement) -> None:
        out = [f"{TAG_REFERENCE}{statement.id}", f"{TAG_ACCOUNT}{statement.account_id}"]

        if statement.opening_balance is not None:
            out.append(TAG_OPENING_BALANCE + self.format_balance(statement.opening_balance))
        else:
            logger.warning("Statement %s has no opening balance, :60F: omitted", statement.id)

        for entry in statement.entries:
            out.append(TAG_STATEMENT_LINE + self.format_statement_line(entry))
            out.append(TAG_INFORMATION + " ".join(entry.description.split()))

        if statement.closing_balance is not None:
            out.append(TAG_CLOSING_BALANCE + self.format_balance(statement.closing_balance))
        else:
            logger.warning("Statement %s has no closing balance, :62F: omitted", statement.id)

        try:
            payload = "\n".join(out).encode(self.config.encoding) + b"\n"
        except UnicodeEncodeError as e:
            raise WriteError(f"cannot encode MT940 as {self.config.encoding}: {e.reason}") from e
        emit(stream, payload)

    def format_balance(self, balance: Balance) -> str:
        date = to_yymmdd(balance.date_yyyymmdd)
        if date is None:
            raise WriteError(f"balance date {balance.date_yyyymmdd!r} cannot be written as YYMMDD")
        amount = normalize_amount(balance.amount, ",", 2)
        return f"{SIGN_CODES[balance.kind]}{date}{balance.currency}{amount}"

    def format_statement_line(self, entry: Entry) -> str:
        value_date = to_yymmdd(entry.value_date) or to_yymmdd(entry.booking_date)
        if value_date is None:
            raise WriteError(
                f"entry dates {entry.value_date!r}/{entry.booking_date!r} cannot be written as YYMMDD"
            )
        entry_mmdd = to_mmdd(entry.booking_date) or ""
        type_code = entry.type_code if entry.type_code and _TYPE_CODE_RE.match(entry.type_code) else None
        return "".join((
            value_date,
            entry_mmdd,
            SIGN_CODES[entry.kind],
            normalize_amount(entry.amount, ",", 2),
            type_code or self.config.default_type_code,
            entry.reference or "",
        ))
