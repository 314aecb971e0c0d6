import pytest

from core.errors import EncodingFailure
from core.storage.encoding import decode_base64, encode_image, is_valid_base64


def test_encode_image_returns_padded_base64():
    assert encode_image(b"abc") == "YWJj"
    assert encode_image(bytearray(b"ab")) == "YWI="


@pytest.mark.parametrize("buffer", [b"", bytearray()])
def test_encode_image_rejects_empty_buffers(buffer):
    with pytest.raises(EncodingFailure):
        encode_image(buffer)


def test_encode_image_rejects_non_binary_input():
    with pytest.raises(EncodingFailure):
        encode_image("not bytes")


@pytest.mark.parametrize(
    "text, expected",
    [
        ("YWJj", True),
        ("YWI=", True),
        ("", False),
        ("YWJ", False),
        ("YW J", False),
        ("Y===", False),
        ("YWJj!", False),
    ],
)
def test_is_valid_base64(text, expected):
    assert is_valid_base64(text) is expected


def test_decode_base64_accepts_text_and_ascii_bytes():
    assert decode_base64("YWJj") == b"abc"
    assert decode_base64(b"YWJj\n") == b"abc"


def test_decode_base64_rejects_malformed_payloads():
    with pytest.raises(EncodingFailure):
        decode_base64("not base64!")
    with pytest.raises(EncodingFailure):
        decode_base64(b"\xff\xfe")
