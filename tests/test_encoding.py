"""Tests for ciphertext transit encoding."""

import pytest
from pairlink.encoding import encode_ciphertext, decode_ciphertext
from pairlink.types import MAX_MESSAGE_SIZE, DecodingError
from .test_vectors import TEST_MESSAGES


class TestRoundTrip:
    """Encoding then decoding returns the original bytes."""

    @pytest.mark.parametrize("message_key,message", TEST_MESSAGES.items())
    def test_round_trip(self, message_key, message) -> None:
        """Every test message survives encode then decode."""
        assert decode_ciphertext(encode_ciphertext(message)) == message

    def test_maximal_length(self) -> None:
        """The largest allowed ciphertext survives a round trip."""
        data = bytes(range(256)) * (MAX_MESSAGE_SIZE // 256 + 1)
        assert decode_ciphertext(encode_ciphertext(data)) == data

    def test_empty(self) -> None:
        """Empty ciphertexts encode to empty text and back."""
        assert encode_ciphertext(b"") == ""
        assert decode_ciphertext("") == b""


class TestEncoding:
    """Test the wire format."""

    def test_standard_alphabet_with_padding(self) -> None:
        """Encoding uses the standard alphabet with padding."""
        assert encode_ciphertext(b"\xfb\xff") == "+/8="

    def test_accepts_bytes_input(self) -> None:
        """Entries may arrive as bytes as well as text."""
        assert decode_ciphertext(b"aGVsbG8=") == b"hello"

    @pytest.mark.parametrize(
        "entry",
        [
            "not base64!",
            "aGVsbG8",
            "-_8=",
            "aGVs bG8=",
            "ünïcode",
        ],
    )
    def test_invalid_entries_rejected(self, entry) -> None:
        """Malformed entries raise DecodingError."""
        with pytest.raises(DecodingError):
            decode_ciphertext(entry)
