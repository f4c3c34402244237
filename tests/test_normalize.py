import pytest

from address_recon.normalize import (
    AddressNormalizer,
    extract_secondary_unit,
    normalize_address,
    process_highways,
)

SAMPLES = [
    "123 Main Street, Springfield, IL 62701",
    "123 Main St, Springfield, IL",
    "100 North Main Street Suite 200, Chicago, IL 60601-1234",
    "100 N. Main St. Ste. 5, Chicago, IL 60601",
    "1200 U.S. Highway 1, Jupiter, FL 33477",
    "77 Old US Highway 40",
    "500 State Route 9, Albany, NY",
    "42 Wallaby Way Apt #3B, Sydney",
    "10 Floral Ave.",
    "PO Box 12345 62701",
    "",
    "   ",
    "#5",
]


def test_example_street_and_zip():
    a = normalize_address("123 Main Street, Springfield, IL 62701")
    assert a == "123 MAIN ST SPRINGFIELD IL"
    assert a == normalize_address("123 Main St, Springfield, IL")


@pytest.mark.parametrize("raw", SAMPLES)
def test_normalize_is_idempotent(raw):
    once = normalize_address(raw)
    assert normalize_address(once) == once


def test_empty_and_none():
    assert normalize_address("") == ""
    assert normalize_address(None) == ""


def test_unit_removed_and_directions_abbreviated():
    out = normalize_address("100 North Main Street Suite 200, Chicago, IL 60601-1234")
    assert out == "100 N MAIN ST CHICAGO IL"


def test_unit_with_punctuated_designator():
    assert normalize_address("100 N. Main St. Ste. 5, Chicago, IL 60601") == "100 N MAIN ST CHICAGO IL"


def test_designator_inside_word_is_kept():
    assert normalize_address("10 Floral Ave.") == "10 FLORAL AVE"


def test_only_trailing_zip_is_removed():
    assert normalize_address("12345 Main St, Springfield, IL 62701") == "12345 MAIN ST SPRINGFIELD IL"


def test_highway_idioms():
    assert normalize_address("1200 U.S. Highway 1, Jupiter, FL 33477") == "1200 US HWY 1 JUPITER FL"
    assert normalize_address("77 Old US Highway 40") == "77 OLD US HWY 40"
    assert normalize_address("500 State Route 9") == "500 STATE HWY 9"
    assert process_highways("ST RD 7") == "STATE HWY 7"


def test_direction_and_suffix_tokens():
    assert normalize_address("200 Northeast 3rd Avenue") == "200 NE 3RD AVE"
    assert normalize_address("9 Lakeshore Boulevard West") == "9 LAKESHORE BLVD W"


def test_extract_secondary_unit():
    assert extract_secondary_unit("100 MAIN ST STE #4B, DALLAS") == "STE #4B"
    assert extract_secondary_unit("42 WALLABY WAY APT 3B") == "APT 3B"
    assert extract_secondary_unit("100 MAIN ST") is None


def test_extra_street_aliases():
    norm = AddressNormalizer({"TRL": ["TRAIL"]})
    assert norm.normalize("5 Pine Trail") == "5 PINE TRL"
    assert normalize_address("5 Pine Trail") == "5 PINE TRAIL"
    # built-in table still applies
    assert norm("5 Pine Street") == "5 PINE ST"


def test_stacked_trailing_zips_all_go():
    # leaving "12345" behind would change again on a second pass
    once = normalize_address("1 Main St 12345 67890")
    assert once == "1 MAIN ST"
    assert normalize_address(once) == once
