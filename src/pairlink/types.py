"""Type definitions for pairlink."""

from dataclasses import dataclass, field
import sys


# Key derivation constants
KEY_DERIVATION_SALT = b"pairlink-v1-pairing"
KEY_DERIVATION_INFO = b"x25519-key"

# Channel key derivation
CHANNEL_KEY_SALT = b"pairlink-v1-channel"
CHANNEL_KEY_INFO_PREFIX = b"pairlinkV1"

# Encryption constants
NONCE_SIZE = 12
TAG_SIZE = 16
PUBLIC_KEY_SIZE = 32

# Largest plaintext whose base64 transit form still fits a 256 KiB queue message
MAX_MESSAGE_SIZE = 190_000

# Queue naming
RESPONDER_QUEUE_SUFFIX = "-responder"

# Receive batch limit of the queue service
MAX_RECEIVE_BATCH = 10

# Backend error text that means a request signature was rejected for clock skew
SIGNATURE_EXPIRED_MARKER = "Signature expired"
CLOCK_SKEW_MARKERS: tuple[str, ...] = (SIGNATURE_EXPIRED_MARKER,)


def default_clock_sync_command() -> str:
    """Clock resynchronization command suited to the current platform."""
    if sys.platform == "darwin":
        return "sudo sntp -sS time.apple.com"
    return "sudo ntpdate -s pool.ntp.org"


@dataclass
class TransportConfig:
    """Configuration for a transport."""

    push_enabled: bool = True
    """Whether sends also notify the peer's push endpoint."""

    clock_sync_command: str = field(default_factory=default_clock_sync_command)
    """Command suggested to the user when clock skew is detected."""

    diagnostic_prefix: str = "pairlink ▶"
    """Prefix of user-facing diagnostics."""

    clock_skew_markers: tuple[str, ...] = CLOCK_SKEW_MARKERS
    """Substrings of backend errors that indicate clock skew."""

    @classmethod
    def silent(cls) -> "TransportConfig":
        """Creates a configuration that never sends push notifications."""
        return cls(push_enabled=False)


# Exception types
class PairLinkError(Exception):
    """Base exception for pairlink errors."""
    pass


class InvalidPublicKeyError(PairLinkError):
    """Invalid public key format or length."""
    pass


class ProvisioningError(PairLinkError):
    """Queue creation failed."""
    pass


class EncryptionError(PairLinkError):
    """Encryption failed."""
    pass


class DecryptionError(PairLinkError):
    """Decryption failed."""
    pass


class DeliveryError(PairLinkError):
    """Durable enqueue failed."""
    pass


class PushNotificationError(PairLinkError):
    """Push notification attempt failed."""
    pass


class BackendReceiveError(PairLinkError):
    """Receive-and-delete against the queue backend failed."""
    pass


class DecodingError(PairLinkError):
    """A received entry was not valid transit-encoded data."""
    pass
