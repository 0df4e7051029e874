import re

import pytest

from smtp2sms.outcomes import NormalizationFailure
from smtp2sms.phone import normalize

E164 = re.compile(r"^\+\d+$")


@pytest.mark.parametrize(
    "raw,region,expected",
    [
        ("16502530000", "US", "+16502530000"),
        ("6502530000", "US", "+16502530000"),
        ("(650) 253-0000", "US", "+16502530000"),
        ("+442070313000", "US", "+442070313000"),
        ("02070313000", "GB", "+442070313000"),
    ],
)
def test_normalize_valid_numbers(raw, region, expected):
    result = normalize(raw, region)
    assert result == expected
    assert E164.match(result)


def test_normalize_is_idempotent():
    canonical = normalize("6502530000", "US")
    assert normalize(canonical, "US") == canonical
    # An explicit country code wins over the default region
    assert normalize(canonical, "GB") == canonical


@pytest.mark.parametrize("raw", ["not-a-number", "", "123", "+999123456", "hello"])
def test_normalize_rejects_non_numbers(raw):
    result = normalize(raw, "US")
    assert isinstance(result, NormalizationFailure)
    assert result.raw == raw
    assert result.detail
    assert result.reason == "invalid phone number in recipient"


def test_normalize_rejects_numbering_plan_invalid_number():
    # Structurally a NANP number, but 555 is not an assigned area code
    result = normalize("15551234567", "US")
    assert isinstance(result, NormalizationFailure)
    assert "valid" in result.detail


def test_normalize_with_unknown_region_fails():
    result = normalize("6502530000", "ZZ")
    assert isinstance(result, NormalizationFailure)


def test_normalize_logs_raw_input(log_capture):
    normalize("not-a-number", "US")
    assert any("not-a-number" in m for m in log_capture.messages())
