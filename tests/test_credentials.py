import base64

import pytest

from app.services.credentials import (
    MIN_TOKEN_LENGTH,
    TOKEN_ALPHABET,
    credential_url,
    generate_token,
    qr_data_url,
    qr_png_bytes,
)


def test_generated_tokens_use_alphanumeric_alphabet_and_default_length():
    token = generate_token()
    assert len(token) == 24
    assert all(ch in TOKEN_ALPHABET for ch in token)


def test_generated_tokens_do_not_repeat():
    tokens = {generate_token() for _ in range(500)}
    assert len(tokens) == 500


def test_short_tokens_are_refused():
    with pytest.raises(ValueError):
        generate_token(MIN_TOKEN_LENGTH - 1)


def test_credential_url_points_at_pass_page():
    assert credential_url("abc123") == "https://fairpass.test/r/abc123"


def test_qr_data_url_is_png():
    data_url = qr_data_url(generate_token())
    prefix = "data:image/png;base64,"
    assert data_url.startswith(prefix)
    assert base64.b64decode(data_url[len(prefix):]).startswith(b"\x89PNG")


def test_qr_png_bytes_is_png():
    assert qr_png_bytes(generate_token()).startswith(b"\x89PNG")
