"""Conversion between statement formats.

Each format tag maps to one codec; a conversion is the input codec's
``read_from`` followed by the output codec's ``write_to``. Any error
aborts the whole conversion.
"""

import io
from enum import Enum
from typing import BinaryIO

from statement_converter.base import StatementCodec
from statement_converter.camt053 import Camt053Codec
from statement_converter.csv_codec import BankExportCsvCodec, CsvCodec
from statement_converter.errors import UnknownFormatError
from statement_converter.logging_setup import get_logger
from statement_converter.models import Statement
from statement_converter.mt940 import Mt940Codec

logger = get_logger(__name__)


class Format(str, Enum):
    """Supported format tags."""
    CSV = "csv"
    BANK_CSV = "bank-csv"
    MT940 = "mt940"
    CAMT053 = "camt053"


def default_codecs() -> dict[Format, StatementCodec]:
    """One codec per format, with default configuration."""
    return {
        Format.CSV: CsvCodec(),
        Format.BANK_CSV: BankExportCsvCodec(),
        Format.MT940: Mt940Codec(),
        Format.CAMT053: Camt053Codec(),
    }


CODECS = default_codecs()


def get_codec(tag: Format | str, codecs: dict[Format, StatementCodec] | None = None) -> StatementCodec:
    """Look up the codec for a format tag.

    Args:
        tag: A Format or its string value, e.g. ``"mt940"``.
        codecs: Registry to use instead of the default one, for codecs
                with non-default configuration.
    Raises:
        UnknownFormatError: No codec is registered for ``tag``.
    """
    try:
        fmt = Format(tag)
    except ValueError:
        raise UnknownFormatError(str(tag)) from None
    registry = CODECS if codecs is None else codecs
    if fmt not in registry:
        raise UnknownFormatError(fmt.value)
    return registry[fmt]


def read_statement(stream: BinaryIO, fmt: Format | str, codecs=None) -> Statement:
    return get_codec(fmt, codecs).read_from(stream)


def write_statement(stream: BinaryIO, statement: Statement, fmt: Format | str, codecs=None) -> None:
    get_codec(fmt, codecs).write_to(stream, statement)


def convert(
    source: BinaryIO,
    sink: BinaryIO,
    in_format: Format | str,
    out_format: Format | str,
    codecs: dict[Format, StatementCodec] | None = None,
) -> Statement:
    """Read a statement from ``source`` and write it to ``sink``.

    Both format tags are resolved before anything is read, so an unknown
    output format fails without consuming the input.

    Returns:
        The intermediate Statement.
    """
    reader = get_codec(in_format, codecs)
    writer = get_codec(out_format, codecs)
    statement = reader.read_from(source)
    logger.info(
        "Converting statement %s (%d entries) from %s to %s",
        statement.id, len(statement.entries), reader.name, writer.name,
    )
    writer.write_to(sink, statement)
    return statement


def convert_bytes(data: bytes, in_format: Format | str, out_format: Format | str, codecs=None) -> bytes:
    """Convert an in-memory document."""
    sink = io.BytesIO()
    convert(io.BytesIO(data), sink, in_format, out_format, codecs)
    return sink.getvalue()
