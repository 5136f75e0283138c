import pytest

from app.services.presentation import (
    google_search_uri,
    opencorporates_officers_search_uri,
    partial_date_format,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        ("1975", "1975"),
        ("1975-3", "1975-03"),
        ("1975-03-09", "1975-03-09"),
        ("2019-07-01T12:30:00Z", "2019-07-01"),
        (None, None),
        ("", None),
    ],
)
def test_partial_date_format(value, expected):
    assert partial_date_format(value) == expected


@pytest.mark.parametrize("value", ["yesterday", "1975-03-09-01", "19x5"])
def test_partial_date_format_rejects_garbage(value):
    with pytest.raises(ValueError):
        partial_date_format(value)


def test_search_uris():
    assert google_search_uri({"q": "Firma s.r.o."}) == "https://www.google.com/search?q=Firma+s.r.o."
    assert (
        opencorporates_officers_search_uri({"q": "Ján Novák", "jurisdiction_code": "sk"})
        == "https://opencorporates.com/officers?q=J%C3%A1n+Nov%C3%A1k&jurisdiction_code=sk"
    )
