"""Tests for Forest Client number formatting."""

import pytest

from wastesearch.domain.client_numbers import (
    canonical_client_number,
    normalize_client_number,
)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12797", "00012797"),
        ("00012797", "00012797"),
        (" 42 ", "00000042"),
        ("", "00000000"),
        (None, "00000000"),
        ("ABC", "00000000"),
        ("12-3", "00000000"),
        ("123456789", "00000000"),
    ],
)
def test_normalize_client_number(raw: str | None, expected: str) -> None:
    assert normalize_client_number(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("10004", "00010004"),
        (" 00010004 ", "00010004"),
        ("ABC", "ABC"),
        ("123456789", "123456789"),
    ],
)
def test_canonical_client_number_keeps_non_numeric(raw: str, expected: str) -> None:
    assert canonical_client_number(raw) == expected
