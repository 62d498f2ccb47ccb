import pytest

from services.view_errors import InvalidIdentifier, MissingIdentifier
from services.view_identifiers import validate_view_identifiers


QR_ID = "11111111-1111-1111-1111-111111111111"
AD_ID = "ABCDEF12-3456-7890-abcd-ef1234567890"


def test_accepts_uuid_in_either_case_and_normalizes():
    identifiers = validate_view_identifiers(QR_ID, AD_ID)

    assert identifiers.qr_id == QR_ID
    assert identifiers.ad_id == AD_ID.lower()


def test_single_identifier_is_enough():
    assert validate_view_identifiers(None, AD_ID).qr_id is None
    assert validate_view_identifiers(f"  {QR_ID} ", "").ad_id is None


@pytest.mark.parametrize(
    "qr,ad,param",
    [
        ("not-a-uuid", None, "qr"),
        (None, "1234", "ad"),
        (QR_ID, "11111111-1111-1111-1111-11111111111g", "ad"),
        ("111111111111-1111-1111-1111-11111111", None, "qr"),
        ("{11111111-1111-1111-1111-111111111111}", None, "qr"),
    ],
)
def test_rejects_malformed_identifiers(qr, ad, param):
    with pytest.raises(InvalidIdentifier) as excinfo:
        validate_view_identifiers(qr, ad)
    assert excinfo.value.param == param


@pytest.mark.parametrize("qr,ad", [(None, None), ("", ""), ("   ", None)])
def test_requires_at_least_one_identifier(qr, ad):
    with pytest.raises(MissingIdentifier):
        validate_view_identifiers(qr, ad)
