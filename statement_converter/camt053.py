"""camt.053 (ISO 20022 bank-to-customer statement) reader and writer.

Reading walks the document with ``lxml.etree.iterparse`` instead of
mapping it to objects: entries are assembled while their elements stream
past, so optional and nested elements are handled as they show up.
Namespaces are ignored on read, which lets any camt.053 version through.
"""

import io
import re
from typing import BinaryIO

from lxml import etree

from statement_converter.base import StatementCodec, build, emit
from statement_converter.config import CamtConfig
from statement_converter.errors import ParseError, WriteError
from statement_converter.fields import to_iso_date
from statement_converter.logging_setup import get_logger
from statement_converter.models import (
    UNDEFINED,
    UNKNOWN_CURRENCY,
    UNKNOWN_ID,
    Balance,
    DebitCredit,
    Entry,
    Statement,
)

logger = get_logger(__name__)

INDICATORS = {"CRDT": DebitCredit.CREDIT, "DBIT": DebitCredit.DEBIT}
INDICATOR_CODES = {kind: code for code, kind in INDICATORS.items()}

OPENING_CODES = ("OPBD", "PRCD")
CLOSING_CODES = ("CLBD",)
CURRENCY_ATTRIBUTES = ("Ccy", "ccy")
# Country code, check digits, then up to 30 alphanumerics (ISO 13616)
IBAN_RE = re.compile(r"^[A-Z]{2}\d{2}[A-Z0-9]{1,30}$")


def local_name(tag) -> str:
    """Element name without its namespace."""
    return etree.QName(tag).localname


def child(elem, *names):
    """Follow a path of child element names, ignoring namespaces."""
    for name in names:
        elem = next((c for c in elem if isinstance(c.tag, str) and local_name(c.tag) == name), None)
        if elem is None:
            return None
    return elem


def child_text(elem, *names) -> str | None:
    found = child(elem, *names)
    if found is None or found.text is None:
        return None
    return found.text.strip() or None


def parse_indicator(text: str, line: int | None = None) -> DebitCredit:
    """Map a ``CdtDbtInd`` value to DebitCredit."""
    try:
        return INDICATORS[text]
    except KeyError:
        raise ParseError(f"unknown <CdtDbtInd> value {text!r}", line=line) from None


def parse_balance_element(elem) -> tuple[str | None, Balance | None]:
    """Read a complete ``<Bal>`` element.

    Returns:
        The balance type code and the Balance, or None for the balance when
        the element carries no amount.
    """
    code = child_text(elem, "Tp", "CdOrPrtry", "Cd")
    amount_elem = child(elem, "Amt")
    amount = (amount_elem.text or "").strip() if amount_elem is not None else ""
    if not amount:
        return code, None

    indicator = child_text(elem, "CdtDbtInd")
    kind = parse_indicator(indicator, elem.sourceline) if indicator else DebitCredit.CREDIT
    date = child_text(elem, "Dt", "Dt") or child_text(elem, "Dt", "DtTm") or UNDEFINED
    currency = next(
        (amount_elem.get(a) for a in CURRENCY_ATTRIBUTES if amount_elem.get(a)), UNKNOWN_CURRENCY
    )
    return code, build(
        Balance, line=elem.sourceline, kind=kind, date_yyyymmdd=date, currency=currency, amount=amount
    )


class CamtCursor:
    """State of one pass over a camt.053 document.

    The current context is the stack of open element names; handlers are
    looked up by the innermost two to four names, so ``Stmt/Id`` and
    ``Acct/Id`` never get mixed up.
    """

    def __init__(self):
        self.path: list[str] = []
        self.statement_id: str | None = None
        self.iban: str | None = None
        self.other_account: str | None = None
        self.opening: Balance | None = None
        self.closing: Balance | None = None
        self.entries: list[Entry] = []
        self.statements = 0
        self.pending: dict | None = None
        self.remittance: list[str] = []
        self.handlers = {
            ("Stmt", "Id"): self.on_statement_id,
            ("Acct", "Id", "IBAN"): self.on_iban,
            ("Acct", "Id", "Othr", "Id"): self.on_other_account,
            ("Stmt", "Bal"): self.on_balance,
            ("Ntry", "NtryRef"): self.on_reference,
            ("Ntry", "Amt"): self.on_amount,
            ("Ntry", "CdtDbtInd"): self.on_indicator,
            ("Ntry", "BookgDt", "Dt"): self.on_booking_date,
            ("Ntry", "BookgDt", "DtTm"): self.on_booking_date,
            ("Ntry", "ValDt", "Dt"): self.on_value_date,
            ("Ntry", "ValDt", "DtTm"): self.on_value_date,
            ("Ntry", "AddtlNtryInf"): self.on_description,
            ("RmtInf", "Ustrd"): self.on_remittance,
            ("Stmt", "Ntry"): self.on_entry_end,
        }

    def start(self, elem) -> None:
        name = local_name(elem.tag)
        if not self.path and name != "Document":
            raise ParseError(f"unexpected root element <{name}>", line=elem.sourceline)
        self.path.append(name)

        if name == "Stmt":
            self.statements += 1
            if self.statements > 1:
                raise ParseError("more than one <Stmt> in document", line=elem.sourceline)
        elif name == "Ntry":
            self.pending = {"currency": UNKNOWN_CURRENCY, "kind": DebitCredit.CREDIT}
            self.remittance = []

    def end(self, elem) -> None:
        for depth in (4, 3, 2):
            handler = self.handlers.get(tuple(self.path[-depth:]))
            if handler is not None:
                handler(elem, (elem.text or "").strip())
                break
        self.path.pop()

    # Statement level

    def on_statement_id(self, elem, text):
        if self.statement_id is None and text:
            self.statement_id = text

    def on_iban(self, elem, text):
        if self.iban is None and text:
            self.iban = text

    def on_other_account(self, elem, text):
        if self.other_account is None and text:
            self.other_account = text

    def on_balance(self, elem, text):
        code, balance = parse_balance_element(elem)
        if balance is None:
            logger.debug("Skipping <Bal> %s without amount at line %s", code, elem.sourceline)
        elif code in OPENING_CODES and self.opening is None:
            self.opening = balance
        elif code in CLOSING_CODES and self.closing is None:
            self.closing = balance
        else:
            logger.debug("Ignoring <Bal> with type code %s", code)

    # Entry level

    def on_reference(self, elem, text):
        self.pending["reference"] = text or None

    def on_amount(self, elem, text):
        if not text:
            raise ParseError("empty <Amt> in <Ntry>", line=elem.sourceline)
        self.pending["amount"] = text
        for attribute in CURRENCY_ATTRIBUTES:
            if elem.get(attribute):
                self.pending["currency"] = elem.get(attribute)
                break

    def on_indicator(self, elem, text):
        self.pending["kind"] = parse_indicator(text, elem.sourceline)

    def on_booking_date(self, elem, text):
        self.pending["booking_date"] = text

    def on_value_date(self, elem, text):
        self.pending["value_date"] = text

    def on_description(self, elem, text):
        self.pending["description"] = text

    def on_remittance(self, elem, text):
        if self.pending is not None and text:
            self.remittance.append(text)

    def on_entry_end(self, elem, text):
        pending = self.pending
        if "amount" not in pending:
            raise ParseError("<Ntry> without <Amt>", line=elem.sourceline)
        booking_date = pending.get("booking_date") or pending.get("value_date") or UNDEFINED
        value_date = pending.get("value_date") or booking_date
        description = pending.get("description")
        if description is None:
            description = " ".join(self.remittance)

        self.entries.append(build(
            Entry,
            line=elem.sourceline,
            booking_date=booking_date,
            value_date=value_date,
            amount=pending["amount"],
            currency=pending["currency"],
            kind=pending["kind"],
            description=description,
            reference=pending.get("reference"),
        ))
        self.pending = None
        elem.clear()

    def statement(self) -> Statement:
        if self.statements == 0:
            raise ParseError("no <Stmt> element in document")
        account_id = self.iban or self.other_account
        if account_id is None:
            raise ParseError("missing account <Acct><Id>")
        if self.statement_id is None:
            logger.warning("Statement has no <Id>, using %r", UNKNOWN_ID)
        return Statement(
            id=self.statement_id or UNKNOWN_ID,
            account_id=account_id,
            opening_balance=self.opening,
            entries=tuple(self.entries),
            closing_balance=self.closing,
        )


class Camt053Codec(StatementCodec):
    """ISO 20022 camt.053 statement format."""

    name = "camt053"

    def __init__(self, config: CamtConfig | None = None):
        self.config = config or CamtConfig()

    def read_from(self, stream: BinaryIO) -> Statement:
        # Whitespace ahead of the XML declaration is a common copy/paste artifact
        data = stream.read().lstrip()
        if not data:
            raise ParseError("empty document")
        cursor = CamtCursor()
        try:
            for event, elem in etree.iterparse(io.BytesIO(data), events=("start", "end")):
                if event == "start":
                    cursor.start(elem)
                else:
                    cursor.end(elem)
        except etree.XMLSyntaxError as e:
            raise ParseError(f"malformed XML: {e.msg}", line=e.lineno) from e

        statement = cursor.statement()
        logger.debug("Read camt.053 statement %s with %d entries", statement.id, len(statement.entries))
        return statement

    def write_to(self, stream: BinaryIO, statement: Statement) -> None:
        try:
            root = self.build_document(statement)
        except ValueError as e:
            raise WriteError(f"cannot express statement {statement.id} as XML: {e}") from e
        emit(stream, etree.tostring(root, pretty_print=True, xml_declaration=True, encoding="UTF-8"))

    def build_document(self, statement: Statement):
        """Build the ``Document`` element tree for a statement."""
        root = etree.Element(self._tag("Document"), nsmap={None: self.config.namespace})
        stmt = self._sub(self._sub(root, "BkToCstmrStmt"), "Stmt")
        self._sub(stmt, "Id", statement.id)
        account = self._sub(self._sub(stmt, "Acct"), "Id")
        if IBAN_RE.match(statement.account_id):
            self._sub(account, "IBAN", statement.account_id)
        else:
            self._sub(self._sub(account, "Othr"), "Id", statement.account_id)

        if statement.opening_balance is not None:
            self._add_balance(stmt, "OPBD", statement.opening_balance)
        if statement.closing_balance is not None:
            self._add_balance(stmt, "CLBD", statement.closing_balance)

        for entry in statement.entries:
            ntry = self._sub(stmt, "Ntry")
            if entry.reference:
                self._sub(ntry, "NtryRef", entry.reference)
            self._sub(ntry, "Amt", entry.amount, Ccy=entry.currency)
            self._sub(ntry, "CdtDbtInd", INDICATOR_CODES[entry.kind])
            self._sub(self._sub(ntry, "ValDt"), "Dt", to_iso_date(entry.value_date))
            self._sub(self._sub(ntry, "BookgDt"), "Dt", to_iso_date(entry.booking_date))
            self._sub(ntry, "AddtlNtryInf", entry.description)
        return root

    def _add_balance(self, stmt, code: str, balance: Balance) -> None:
        bal = self._sub(stmt, "Bal")
        self._sub(self._sub(self._sub(bal, "Tp"), "CdOrPrtry"), "Cd", code)
        self._sub(bal, "Amt", balance.amount, Ccy=balance.currency)
        self._sub(bal, "CdtDbtInd", INDICATOR_CODES[balance.kind])
        self._sub(self._sub(bal, "Dt"), "Dt", to_iso_date(balance.date_yyyymmdd))

    def _tag(self, name: str) -> str:
        return f"{{{self.config.namespace}}}{name}"

    def _sub(self, parent, name: str, text: str | None = None, **attrib):
        elem = etree.SubElement(parent, self._tag(name), **attrib)
        if text is not None:
            elem.text = text
        return elem
