"""Configuration objects for the format codecs."""

from dataclasses import dataclass

from statement_converter.models import UNKNOWN_CURRENCY

CAMT053_NAMESPACE = "urn:iso:std:iso:20022:tech:xsd:camt.053.001.02"


@dataclass(frozen=True)
class Mt940Config:
    """Options for MT940 files.

    Attributes:
        encoding: Text encoding of the file. SWIFT files are usually plain
                  ASCII, but bank downloads are often latin-1.
        default_type_code: Transaction type written on ``:61:`` lines for
                  entries that carry no alphabetic type code.
    """
    encoding: str = "utf-8"
    default_type_code: str = "NTRF"


@dataclass(frozen=True)
class CamtConfig:
    """Options for camt.053 documents.

    Attributes:
        namespace: Default namespace written on the root ``Document``
                   element. Reading ignores namespaces altogether.
    """
    namespace: str = CAMT053_NAMESPACE


@dataclass(frozen=True)
class CsvConfig:
    """Options for the generic header-based CSV table."""
    encoding: str = "utf-8"
    delimiter: str = ","


@dataclass(frozen=True)
class BankExportLayout:
    """Column layout of a raw bank-export CSV.

    Column indices are 0-based. Rows before ``start_row`` (1-based) are
    report boilerplate and are skipped.

    Attributes:
        start_row: First row that may hold a transaction.
        date_column: Posting date.
        debit_block_column: Debit-side counterparty block (account, tax id, name).
        credit_block_column: Credit-side counterparty block.
        debit_amount_column: Amount for money leaving the account.
        credit_amount_column: Amount for money arriving on the account.
        document_column: Payment document number, used as the reference.
        operation_code_column: Bank operation code.
        bank_info_column: Free text naming the counterparty's bank.
        purpose_column: Payment purpose, used as the description.
        currency: Currency assigned to every entry, since the export has none.
        encoding: Text encoding of the file.
        delimiter: Field separator.
    """
    start_row: int = 12
    date_column: int = 1
    debit_block_column: int = 4
    credit_block_column: int = 8
    debit_amount_column: int = 9
    credit_amount_column: int = 13
    document_column: int = 14
    operation_code_column: int = 16
    bank_info_column: int = 17
    purpose_column: int = 20
    currency: str = UNKNOWN_CURRENCY
    encoding: str = "utf-8"
    delimiter: str = ","

    @property
    def width(self) -> int:
        """Number of columns a transactional row must have."""
        return 1 + max(
            self.date_column,
            self.debit_block_column,
            self.credit_block_column,
            self.debit_amount_column,
            self.credit_amount_column,
            self.document_column,
            self.operation_code_column,
            self.bank_info_column,
            self.purpose_column,
        )
