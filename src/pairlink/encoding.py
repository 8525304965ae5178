"""Transit encoding of ciphertexts crossing the queue and push boundary."""

import base64
import binascii

from .types import DecodingError


def encode_ciphertext(ciphertext: bytes) -> str:
    """
    Encode a ciphertext as standard base64 text.

    Args:
        ciphertext: Opaque ciphertext bytes

    Returns:
        Padded base64 string
    """
    return base64.b64encode(ciphertext).decode("ascii")


def decode_ciphertext(text: str | bytes) -> bytes:
    """
    Decode a standard base64 entry back into ciphertext bytes.

    Characters outside the base64 alphabet and bad padding are rejected
    rather than skipped.

    Args:
        text: Base64 text as received from the queue

    Returns:
        Decoded ciphertext bytes

    Raises:
        DecodingError: If the entry is not valid base64
    """
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError, TypeError) as e:
        raise DecodingError(f"Invalid base64 ciphertext: {e}") from e
