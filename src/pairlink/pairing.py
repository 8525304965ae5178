"""
Pairing context shared by two paired peers.

A pairing binds a workstation and a phone through their X25519 keys. Both
peers derive the same pairing identifier and the same pair of queue names,
with send and receive swapped between the two roles, and the same symmetric
channel key for message encryption.
"""

from enum import Enum
from typing import Optional
import hashlib
import os
import threading

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.hashes import SHA256
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.asymmetric.x25519 import X25519PrivateKey, X25519PublicKey
from cryptography.hazmat.primitives.serialization import Encoding, PublicFormat

from .types import (
    KEY_DERIVATION_SALT,
    KEY_DERIVATION_INFO,
    CHANNEL_KEY_SALT,
    CHANNEL_KEY_INFO_PREFIX,
    MAX_MESSAGE_SIZE,
    NONCE_SIZE,
    PUBLIC_KEY_SIZE,
    TAG_SIZE,
    RESPONDER_QUEUE_SUFFIX,
    EncryptionError,
    DecryptionError,
    InvalidPublicKeyError,
)


def derive_keys_from_seed(seed: bytes) -> tuple[X25519PrivateKey, bytes]:
    """
    Derive a pairing key pair from a 32-byte seed using HKDF-SHA256.

    Args:
        seed: 32-byte pairing secret stored by the host

    Returns:
        Tuple of (private_key, raw 32-byte public key)
    """
    if len(seed) != 32:
        raise ValueError(f"Seed must be 32 bytes, got {len(seed)}")

    hkdf = HKDF(algorithm=SHA256(), length=32, salt=KEY_DERIVATION_SALT, info=KEY_DERIVATION_INFO)
    private_key = X25519PrivateKey.from_private_bytes(hkdf.derive(seed))
    return private_key, _raw_public_key(private_key.public_key())


def generate_keypair() -> tuple[X25519PrivateKey, bytes]:
    """Generate a random pairing key pair, returning (private_key, raw public key)."""
    private_key = X25519PrivateKey.generate()
    return private_key, _raw_public_key(private_key.public_key())


def _raw_public_key(public_key: X25519PublicKey) -> bytes:
    return public_key.public_bytes(Encoding.Raw, PublicFormat.Raw)


def _load_public_key(data: bytes) -> X25519PublicKey:
    if len(data) != PUBLIC_KEY_SIZE:
        raise InvalidPublicKeyError(
            f"Public key must be {PUBLIC_KEY_SIZE} bytes, got {len(data)}"
        )
    return X25519PublicKey.from_public_bytes(data)


class PairingRole(Enum):
    """Which side of the pairing the local process is."""
    WORKSTATION = "workstation"
    PHONE = "phone"

    @property
    def peer(self) -> "PairingRole":
        """The role of the other side."""
        if self is PairingRole.WORKSTATION:
            return PairingRole.PHONE
        return PairingRole.WORKSTATION


class PairingContext:
    """
    Identity and capability bundle for one pairing.

    Provides queue naming, message encryption and a lock-guarded push
    endpoint reference. The endpoint is registered by the pairing subsystem
    and read by the transport through copy-out snapshots.

    Example usage:
        ```python
        workstation = PairingContext.from_seed(seed, phone_public_key)
        phone = PairingContext(phone_private, workstation.public_key, PairingRole.PHONE)

        assert workstation.send_queue_name == phone.recv_queue_name
        ```
    """

    def __init__(
        self,
        private_key: X25519PrivateKey,
        peer_public_key: X25519PublicKey | bytes,
        role: PairingRole = PairingRole.WORKSTATION,
        push_endpoint: Optional[str] = None,
    ) -> None:
        """
        Initialize a pairing context.

        Args:
            private_key: Our X25519 private key.
            peer_public_key: The other peer's X25519 public key (object or 32 raw bytes).
            role: Our side of the pairing.
            push_endpoint: Push endpoint handle of the peer, if already registered.
        """
        if isinstance(peer_public_key, (bytes, bytearray)):
            peer_public_key = _load_public_key(bytes(peer_public_key))

        self.role = role
        self._private_key = private_key
        self._public_key_bytes = _raw_public_key(private_key.public_key())
        self._peer_public_key_bytes = _raw_public_key(peer_public_key)

        self._channel_key = self._derive_channel_key(private_key, peer_public_key)
        self._pairing_id = hashlib.sha256(self.workstation_public_key).hexdigest()

        self._lock = threading.Lock()
        self._push_endpoint = push_endpoint

    @classmethod
    def from_seed(
        cls,
        seed: bytes,
        peer_public_key: X25519PublicKey | bytes,
        role: PairingRole = PairingRole.WORKSTATION,
    ) -> "PairingContext":
        """Creates a context whose key pair is derived from a 32-byte seed."""
        private_key, _ = derive_keys_from_seed(seed)
        return cls(private_key, peer_public_key, role)

    @classmethod
    def generate(
        cls,
        peer_public_key: X25519PublicKey | bytes,
        role: PairingRole = PairingRole.WORKSTATION,
    ) -> "PairingContext":
        """Creates a context with a fresh random key pair."""
        private_key, _ = generate_keypair()
        return cls(private_key, peer_public_key, role)

    # MARK: - Identity

    @property
    def public_key(self) -> bytes:
        """Our X25519 public key (32 bytes)."""
        return self._public_key_bytes

    @property
    def peer_public_key(self) -> bytes:
        """The peer's X25519 public key (32 bytes)."""
        return self._peer_public_key_bytes

    @property
    def workstation_public_key(self) -> bytes:
        """Public key of the workstation side, whichever side we are."""
        if self.role is PairingRole.WORKSTATION:
            return self._public_key_bytes
        return self._peer_public_key_bytes

    @property
    def phone_public_key(self) -> bytes:
        """Public key of the phone side, whichever side we are."""
        if self.role is PairingRole.PHONE:
            return self._public_key_bytes
        return self._peer_public_key_bytes

    @property
    def pairing_id(self) -> str:
        """Hex SHA-256 of the workstation public key, shared by both peers."""
        return self._pairing_id

    # MARK: - Queue naming

    @property
    def send_queue_name(self) -> str:
        """Queue this side writes to."""
        if self.role is PairingRole.WORKSTATION:
            return self._pairing_id
        return self._pairing_id + RESPONDER_QUEUE_SUFFIX

    @property
    def recv_queue_name(self) -> str:
        """Queue this side reads from."""
        if self.role is PairingRole.WORKSTATION:
            return self._pairing_id + RESPONDER_QUEUE_SUFFIX
        return self._pairing_id

    # MARK: - Encryption

    def encrypt(self, plaintext: bytes) -> bytes:
        """
        Encrypt a message for the peer.

        The send queue name is bound as associated data, so a ciphertext only
        opens on the queue it was sent on.

        Args:
            plaintext: Message bytes

        Returns:
            nonce || ciphertext || tag

        Raises:
            EncryptionError: If the message is not bytes or is too large.
        """
        if not isinstance(plaintext, (bytes, bytearray, memoryview)):
            raise EncryptionError(f"Message must be bytes, got {type(plaintext).__name__}")

        plaintext = bytes(plaintext)
        if len(plaintext) > MAX_MESSAGE_SIZE:
            raise EncryptionError(
                f"Message too large: {len(plaintext)} bytes (max {MAX_MESSAGE_SIZE})"
            )

        nonce = os.urandom(NONCE_SIZE)
        cipher = ChaCha20Poly1305(self._channel_key)
        try:
            ciphertext = cipher.encrypt(nonce, plaintext, self.send_queue_name.encode("utf-8"))
        except (OverflowError, ValueError) as e:
            raise EncryptionError(str(e)) from e

        return nonce + ciphertext

    def decrypt(self, data: bytes) -> bytes:
        """
        Decrypt a message received from the peer.

        Raises:
            DecryptionError: If the data is truncated or fails authentication.
        """
        if len(data) < NONCE_SIZE + TAG_SIZE:
            raise DecryptionError(
                f"Data too short: {len(data)} bytes (minimum {NONCE_SIZE + TAG_SIZE})"
            )

        nonce, ciphertext = data[:NONCE_SIZE], data[NONCE_SIZE:]
        cipher = ChaCha20Poly1305(self._channel_key)
        try:
            return cipher.decrypt(nonce, ciphertext, self.recv_queue_name.encode("utf-8"))
        except InvalidTag as e:
            raise DecryptionError("Message authentication failed") from e

    # MARK: - Push endpoint

    @property
    def lock(self) -> threading.Lock:
        """Lock guarding the push endpoint reference."""
        return self._lock

    def set_push_endpoint(self, endpoint: Optional[str]) -> None:
        """Registers (or clears, with None) the peer's push endpoint."""
        with self._lock:
            self._push_endpoint = endpoint

    def current_push_endpoint(self) -> Optional[str]:
        """Returns a copy of the push endpoint taken under the lock."""
        with self._lock:
            return self._push_endpoint

    def _derive_channel_key(
        self,
        private_key: X25519PrivateKey,
        peer_public_key: X25519PublicKey,
    ) -> bytes:
        """Derive the symmetric key both peers share for this pairing."""
        shared_secret = private_key.exchange(peer_public_key)
        info = CHANNEL_KEY_INFO_PREFIX + self.workstation_public_key + self.phone_public_key

        hkdf = HKDF(algorithm=SHA256(), length=32, salt=CHANNEL_KEY_SALT, info=info)
        return hkdf.derive(shared_secret)

    def __repr__(self) -> str:
        return f"PairingContext(pairing_id={self._pairing_id[:12]}..., role={self.role.value})"
