import pytest

from ssd_web.domain.errors import InvalidIdentifier
from ssd_web.services.identifier_normalization import PmcIdentifierNormalizer, cap_batch, split_identifiers


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("PMC1234567", "PMC1234567"),
        ("1234567", "PMC1234567"),
        ("pmc1234567", "PMC1234567"),
        ("Pmc1234567", "PMC1234567"),
        ("  123  ", "PMC123"),                  # whitespace trimmed
        ("\tPMC42\n", "PMC42"),
    ],
)
def test_normalize_valid(raw, expected):
    assert PmcIdentifierNormalizer().normalize(raw) == expected


@pytest.mark.parametrize(
    "raw",
    [
        "",
        "   ",
        "PMC",                  # nothing left after the prefix
        "abc123",
        "PMC12a4",
        "PMC 123",              # inner whitespace is not stripped
        "12.5",
        "PMCPMC123",
        None,
    ],
)
def test_normalize_invalid(raw):
    with pytest.raises(InvalidIdentifier):
        PmcIdentifierNormalizer().normalize(raw)


def test_all_spellings_share_one_canonical_form():
    norm = PmcIdentifierNormalizer()
    assert norm.normalize("PMC1234567") == norm.normalize("1234567") == norm.normalize("pmc1234567")


def test_invalid_identifier_keeps_raw_input():
    with pytest.raises(InvalidIdentifier) as exc_info:
        PmcIdentifierNormalizer().normalize(" bad id ")
    assert exc_info.value.raw == " bad id "


def test_custom_prefix():
    norm = PmcIdentifierNormalizer(prefix="PMID")
    assert norm.normalize("pmid99") == "PMID99"
    assert norm.normalize("99") == "PMID99"


def test_split_identifiers_handles_commas_newlines_and_blanks():
    raw = "PMC1, PMC2\n\nPMC3;PMC4\r\n  ,PMC2 "
    assert split_identifiers(raw) == ["PMC1", "PMC2", "PMC3", "PMC4"]


def test_split_identifiers_empty():
    assert split_identifiers("") == []
    assert split_identifiers(" , \n ") == []
    assert split_identifiers(None) == []


def test_cap_batch():
    ids = [f"PMC{i}" for i in range(25)]

    capped, truncated = cap_batch(ids, 20)
    assert truncated is True
    assert capped == ids[:20]

    capped, truncated = cap_batch(ids[:20], 20)
    assert truncated is False
    assert capped == ids[:20]
