"""Tests for sweetness and HoneyDew certification."""

from decimal import Decimal

import pytest

from bittermelon.models import Certification
from bittermelon.services.certification import HONEYDEW_THRESHOLD, certify, sweetness_pct


@pytest.mark.parametrize(
    "positive, total, expected",
    [
        (1, 1, "100.00"),
        (1, 2, "50.00"),
        (0, 2, "0.00"),
        (1, 3, "33.33"),
        (2, 3, "66.67"),
        (1, 800, "0.13"),  # 0.125 rounds half up
        (0, 0, "0.00"),
    ],
)
def test_sweetness_pct(positive, total, expected):
    assert sweetness_pct(positive, total) == Decimal(expected)


def test_sweetness_has_two_decimals():
    assert sweetness_pct(1, 3).as_tuple().exponent == -2


@pytest.mark.parametrize(
    "sweetness, expected",
    [
        ("100.00", Certification.HONEYDEW),
        ("60.00", Certification.HONEYDEW),
        ("59.99", Certification.HONEYDONT),
        ("0.00", Certification.HONEYDONT),
    ],
)
def test_certify(sweetness, expected):
    assert certify(Decimal(sweetness)) == expected


def test_threshold():
    assert HONEYDEW_THRESHOLD == Decimal("60")


def test_certification_values():
    """Stored values use the legacy spelling."""
    assert Certification.HONEYDEW.value == "HoneyDew"
    assert Certification.HONEYDONT.value == "HoneyDont"
