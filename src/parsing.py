"""Birthday parsing for free-text date entry."""

from datetime import date
import re


# Month name mappings (handle abbreviations and full names)
MONTH_MAP = {
    "JAN": 1,
    "JANUARY": 1,
    "FEB": 2,
    "FEBRUARY": 2,
    "MAR": 3,
    "MARCH": 3,
    "APR": 4,
    "APRIL": 4,
    "MAY": 5,
    "JUN": 6,
    "JUNE": 6,
    "JUL": 7,
    "JULY": 7,
    "AUG": 8,
    "AUGUST": 8,
    "SEP": 9,
    "SEPT": 9,
    "SEPTEMBER": 9,
    "OCT": 10,
    "OCTOBER": 10,
    "NOV": 11,
    "NOVEMBER": 11,
    "DEC": 12,
    "DECEMBER": 12,
}


def _make_date(year: int, month: int | None, day: int) -> date | None:
    if not month:
        return None
    try:
        return date(year, month, day)
    except ValueError:
        return None


def parse_birthday(value: str | date | None) -> date | None:
    """
    Normalize a birthday entered as text into a date.
    Returns None if the text cannot be parsed (or is blank).

    Handles formats like:
    - "1954-11-25"
    - "25 NOV 1954"
    - "NOV 1954" / "November, 1954"
    - "1954"
    - "11/25/1954" or "11-25-1954"
    - "November 25, 1954" / "Nov.25,1954"
    - "ABOUT 1954" / "(circa 1954)"
    """
    if value is None or isinstance(value, date):
        return value

    s = value.strip().strip("()").rstrip("?").strip()
    # Remove qualifiers (ABT, ABOUT, CIRCA, AROUND, etc.) - with optional colon
    s = re.sub(
        r"^(ABT\.?|ABOUT|EST\.?|CAL\.?|CIRCA|CA\.?|AROUND):?\s*",
        "",
        s,
        flags=re.IGNORECASE,
    ).strip()

    if not s:
        return None

    # ISO format "1954-11-25"
    match = re.match(r"^(\d{4})-(\d{1,2})-(\d{1,2})$", s)
    if match:
        return _make_date(int(match.group(1)), int(match.group(2)), int(match.group(3)))

    # "25 NOV 1954" or "25 Nov. 1954" (day month year)
    match = re.match(r"^(\d{1,2})\s+([A-Za-z]+)\.?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(2).upper())
        return _make_date(int(match.group(3)), month, int(match.group(1)))

    # "NOV 1954" or "May, 1837" (month year, optional comma)
    match = re.match(r"^([A-Za-z]+)\.?,?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        return _make_date(int(match.group(2)), month, 1)

    # "1954" (year only)
    match = re.match(r"^(\d{4})$", s)
    if match:
        return _make_date(int(match.group(1)), 1, 1)

    # "11-25-1954" or "11/25/1954" (MM-DD-YYYY or MM/DD/YYYY)
    match = re.match(r"^(\d{1,2})[-/](\d{1,2})[-/](\d{4})$", s)
    if match:
        return _make_date(int(match.group(3)), int(match.group(1)), int(match.group(2)))

    # "November 25, 1954" or "SEPT. 17,1910" (Month DD, YYYY - various spacing)
    match = re.match(r"^([A-Za-z]+)\.?\s*(\d{1,2}),?\s*(\d{4})$", s)
    if match:
        month = MONTH_MAP.get(match.group(1).upper())
        return _make_date(int(match.group(3)), month, int(match.group(2)))

    return None
