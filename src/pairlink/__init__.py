"""
pairlink - Encrypted message transport between paired peers

Durable queue delivery through an untrusted cloud relay, with best-effort
push notifications to wake the receiving peer.
"""

from .types import (
    MAX_MESSAGE_SIZE,
    SIGNATURE_EXPIRED_MARKER,
    TransportConfig,
    PairLinkError,
    InvalidPublicKeyError,
    ProvisioningError,
    EncryptionError,
    DecryptionError,
    DeliveryError,
    PushNotificationError,
    BackendReceiveError,
    DecodingError,
)
from .pairing import (
    PairingRole,
    PairingContext,
    derive_keys_from_seed,
    generate_keypair,
)
from .encoding import encode_ciphertext, decode_ciphertext
from .backends import (
    QueueBackend,
    InMemoryQueueBackend,
    PushBackend,
    PushRecord,
    InMemoryPushBackend,
)
from .notifier import Notifier, StreamNotifier, CollectingNotifier
from .skew import (
    is_clock_skew_error,
    clock_skew_message,
    notify_if_clock_skew,
)
from .transport import (
    Transport,
    QueueTransport,
    LoopbackTransport,
)

__version__ = "0.1.0"

__all__ = [
    # Keys
    "derive_keys_from_seed",
    "generate_keypair",
    # Pairing
    "PairingRole",
    "PairingContext",
    # Encoding
    "encode_ciphertext",
    "decode_ciphertext",
    # Backends
    "QueueBackend",
    "InMemoryQueueBackend",
    "PushBackend",
    "PushRecord",
    "InMemoryPushBackend",
    # Notifier
    "Notifier",
    "StreamNotifier",
    "CollectingNotifier",
    # Skew
    "SIGNATURE_EXPIRED_MARKER",
    "is_clock_skew_error",
    "clock_skew_message",
    "notify_if_clock_skew",
    # Transport
    "TransportConfig",
    "Transport",
    "QueueTransport",
    "LoopbackTransport",
    # Errors
    "PairLinkError",
    "InvalidPublicKeyError",
    "ProvisioningError",
    "EncryptionError",
    "DecryptionError",
    "DeliveryError",
    "PushNotificationError",
    "BackendReceiveError",
    "DecodingError",
    # Constants
    "MAX_MESSAGE_SIZE",
]
