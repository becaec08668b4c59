"""Text reshaping of dates and amounts between format conventions.

Dates are only rearranged, never parsed into ``datetime`` objects, so a
value that is not recognized is passed through (or rejected) untouched.
"""

import re

_DATE_PATTERNS = (
    # YYMMDD, the SWIFT short form
    (re.compile(r"^(\d{2})(\d{2})(\d{2})$"), ("yy", "mm", "dd")),
    # YYYYMMDD
    (re.compile(r"^(\d{4})(\d{2})(\d{2})$"), ("yyyy", "mm", "dd")),
    # YYYY-MM-DD, optionally followed by a time part
    (re.compile(r"^(\d{4})-(\d{2})-(\d{2})(?:T.*)?$"), ("yyyy", "mm", "dd")),
    # DD.MM.YYYY as used in bank exports
    (re.compile(r"^(\d{2})\.(\d{2})\.(\d{4})$"), ("dd", "mm", "yyyy")),
)

CENTURY = "20"


def split_date(text: str) -> tuple[str, str, str] | None:
    """Split a date into (YYYY, MM, DD) text parts.

    Two-digit years are placed in the current century.

    Args:
        text: A date in one of the recognized layouts.
    Returns:
        The three parts, or None if the layout is not recognized.
    """
    text = text.strip()
    for pattern, names in _DATE_PATTERNS:
        match = pattern.match(text)
        if not match:
            continue
        parts = dict(zip(names, match.groups()))
        year = parts.get("yyyy") or CENTURY + parts["yy"]
        return year, parts["mm"], parts["dd"]
    return None


def to_iso_date(text: str) -> str:
    """Reshape a recognized date to YYYY-MM-DD, else return it unchanged."""
    parts = split_date(text)
    if parts is None:
        return text
    return "-".join(parts)


def to_yymmdd(text: str) -> str | None:
    """Reshape a recognized date to the 6-digit SWIFT form."""
    parts = split_date(text)
    if parts is None:
        return None
    year, month, day = parts
    return f"{year[2:]}{month}{day}"


def to_mmdd(text: str) -> str | None:
    parts = split_date(text)
    if parts is None:
        return None
    return parts[1] + parts[2]


def normalize_amount(text: str, separator: str = ".", min_places: int = 0) -> str:
    """Rewrite the decimal separator of an amount and pad its fraction.

    The last ``.`` or ``,`` is taken as the decimal separator; any earlier
    one is treated as a grouping mark and dropped. No rounding happens:
    fractions longer than ``min_places`` are kept as they are.

    For example ``"1.000,5"`` with separator ``","`` and two places
    becomes ``"1000,50"``.
    """
    text = "".join(text.split())
    cut = max(text.rfind("."), text.rfind(","))
    if cut < 0:
        whole, fraction = text, ""
    else:
        whole, fraction = text[:cut], text[cut + 1:]
    whole = whole.replace(".", "").replace(",", "") or "0"
    fraction = fraction.ljust(min_places, "0")
    return f"{whole}{separator}{fraction}" if fraction else whole
