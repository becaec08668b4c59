"""Common interface of the format codecs."""

import abc
from typing import BinaryIO

from pydantic import ValidationError

from statement_converter.errors import ParseError, WriteError
from statement_converter.models import Statement


class StatementCodec(abc.ABC):
    """Reads and writes one statement format.

    Codecs work on binary streams and own text decoding themselves, since
    the encoding is a property of the format (XML declares its own).
    """

    #: Format tag the codec is registered under.
    name: str = ""

    @abc.abstractmethod
    def read_from(self, stream: BinaryIO) -> Statement:
        """Parse a whole document into a Statement.

        Raises:
            ParseError: The input is malformed or cannot be decoded.
        """

    @abc.abstractmethod
    def write_to(self, stream: BinaryIO, statement: Statement) -> None:
        """Serialize a Statement.

        Raises:
            WriteError: The statement cannot be expressed or the sink failed.
        """


def build(model, line: int | None = None, **values):
    """Construct a model, reporting validation failures as a ParseError."""
    try:
        return model(**values)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise ParseError(f"invalid {model.__name__}: {problems}", line=line) from e


def emit(stream: BinaryIO, payload: bytes) -> None:
    """Write bytes to the sink, reporting I/O failures as a WriteError."""
    try:
        stream.write(payload)
        stream.flush()
    except OSError as e:
        raise WriteError(f"cannot write output: {e}") from e
