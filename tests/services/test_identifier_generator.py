import re
from unittest.mock import patch

import pytest

from app.services.identifier_generator import IdentifierGenerator, to_base36


CERTIFICATE_ID_PATTERN = re.compile(r"^CERT-[0-9A-Z]+-[0-9A-F]{8}$")
VERIFICATION_CODE_PATTERN = re.compile(r"^[0-9A-F]{32}$")


@pytest.mark.parametrize(
    "value, expected",
    [(0, "0"), (9, "9"), (10, "a"), (35, "z"), (36, "10"), (1_700_000_000_000, "loyw3v28")],
)
def test_to_base36(value, expected):
    assert to_base36(value) == expected


def test_to_base36_rejects_negative():
    with pytest.raises(ValueError):
        to_base36(-1)


def test_certificate_id_format():
    certificate_id = IdentifierGenerator().new_certificate_id()

    assert CERTIFICATE_ID_PATTERN.match(certificate_id)


def test_certificate_id_embeds_millisecond_timestamp():
    generator = IdentifierGenerator()

    with patch.object(generator, "current_millis", return_value=1_700_000_000_000):
        certificate_id = generator.new_certificate_id()

    assert certificate_id.startswith("CERT-LOYW3V28-")


def test_verification_code_format():
    code = IdentifierGenerator().new_verification_code()

    assert VERIFICATION_CODE_PATTERN.match(code)


def test_generated_identifiers_do_not_repeat():
    generator = IdentifierGenerator()

    codes = {generator.new_verification_code() for _ in range(200)}
    certificate_ids = {generator.new_certificate_id() for _ in range(200)}

    assert len(codes) == 200
    assert len(certificate_ids) == 200
