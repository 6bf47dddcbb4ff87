from datetime import date

import pytest

from parsing import parse_birthday


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1954-11-25", date(1954, 11, 25)),
        ("25 NOV 1954", date(1954, 11, 25)),
        ("25 Nov. 1954", date(1954, 11, 25)),
        ("NOV 1954", date(1954, 11, 1)),
        ("May, 1837", date(1837, 5, 1)),
        ("1698", date(1698, 1, 1)),
        ("11/25/1954", date(1954, 11, 25)),
        ("November 25, 1954", date(1954, 11, 25)),
        ("SEPT. 17,1910", date(1910, 9, 17)),
        ("ABOUT 1905", date(1905, 1, 1)),
        ("(circa 1855)", date(1855, 1, 1)),
    ],
)
def test_parse_birthday(text, expected):
    assert parse_birthday(text) == expected


@pytest.mark.parametrize("text", ["", "   ", "tomorrow", "31 FEB 1990", "13/40/1990", "Smarch 1990"])
def test_parse_birthday_rejects(text):
    assert parse_birthday(text) is None


def test_parse_birthday_passes_dates_through():
    assert parse_birthday(date(2001, 2, 3)) == date(2001, 2, 3)
    assert parse_birthday(None) is None
