"""Tests for human-readable request id generation and parsing."""
import re
from datetime import datetime

import pytest

from travel_portal.services.request_ids import (
    UNIQUE_ID_CHARS,
    generate_request_id,
    generate_unique_id,
    parse_request_id,
    validate_context,
)

WHEN = datetime(2025, 7, 2, 14, 23)


def test_unique_id_uses_unambiguous_alphabet():
    value = generate_unique_id(200)
    assert len(value) == 200
    assert set(value) <= set(UNIQUE_ID_CHARS)
    assert not set(value) & set("01IO")


@pytest.mark.parametrize(
    "raw, expected",
    [("New York", "NEWYO"), ("usa", "USA"), ("K.L.", "KL"), ("", ""), ("a-b_c!d", "ABCD")],
)
def test_validate_context(raw, expected):
    assert validate_context(raw) == expected


def test_generate_standard_id():
    request_id = generate_request_id("TSR", "nyc", WHEN)
    assert re.fullmatch(r"TSR-20250702-1423-NYC-[A-Z2-9]{4}", request_id)


def test_generate_claim_id_ignores_context():
    request_id = generate_request_id("CLM", "Medical", WHEN)
    assert re.fullmatch(r"CLM-20250702-1423-[A-Z2-9]{5}-[A-Z2-9]{4}", request_id)


def test_empty_context_falls_back_to_gen():
    assert generate_request_id("TRN", "  ", WHEN).startswith("TRN-20250702-1423-GEN-")


def test_unknown_type_raises():
    with pytest.raises(ValueError):
        generate_request_id("XYZ", "ABC", WHEN)


def test_parse_standard_id():
    parsed = parse_request_id("VIS-20250702-1423-USA-5X9R")
    assert parsed.type == "VIS"
    assert parsed.context == "USA"
    assert parsed.unique_id == "5X9R"
    assert parsed.timestamp == "20250702-1423"
    assert parsed.date == WHEN


def test_parse_claim_id():
    parsed = parse_request_id("CLM-20250702-1423-QWSDF-P4Z5")
    assert parsed.context == "CLAIM"
    assert parsed.unique_id == "QWSDF-P4Z5"


@pytest.mark.parametrize(
    "value",
    ["", "TSR-20250702-1423-NYC", "ABC-20250702-1423-NYC-AAAA", "TSR-2025xx02-1423-NYC-AAAA"],
)
def test_parse_rejects_malformed_ids(value):
    assert parse_request_id(value) is None
