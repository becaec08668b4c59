from .convert import (  # noqa: F401
    Format,
    convert,
    convert_bytes,
    get_codec,
    read_statement,
    write_statement,
)

# Format codecs
from .base import StatementCodec
from .camt053 import Camt053Codec
from .csv_codec import BankExportCsvCodec, CsvCodec
from .mt940 import Mt940Codec

# Configuration
from .config import BankExportLayout, CamtConfig, CsvConfig, Mt940Config

# Canonical statement model
from .models import Balance, Counterparty, DebitCredit, Entry, Statement

from .errors import ParseError, StatementError, UnknownFormatError, WriteError

__all__ = [
    # Conversion facade
    "Format",
    "convert",          # convert(src, dst, "mt940", "camt053")
    "convert_bytes",    # convert_bytes(data, "camt053", "csv") -> bytes
    "get_codec",
    "read_statement",
    "write_statement",
    # Codecs
    "StatementCodec",
    "BankExportCsvCodec",
    "Camt053Codec",
    "CsvCodec",
    "Mt940Codec",
    # Configuration
    "BankExportLayout",
    "CamtConfig",
    "CsvConfig",
    "Mt940Config",
    # Model
    "Balance",
    "Counterparty",
    "DebitCredit",
    "Entry",
    "Statement",
    # Errors
    "ParseError",
    "StatementError",
    "UnknownFormatError",
    "WriteError",
]
