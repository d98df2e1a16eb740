"""
Key material handed to the signature engine.

Keys are one of four variants so that every sign/verify path can check it
got the kind of key it needs:

- ``NoKey``        - only legal for ``alg=none``
- ``SymmetricKey`` - HMAC secret bytes
- ``PrivateKey``   - Ed25519 or RSA private key object (signing)
- ``PublicKey``    - Ed25519 or RSA public key object (verification)
"""
from typing import Any, Optional, Union

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)

from .encoding import b64url_decode, b64url_encode
from .exceptions import InvalidKeyError, MalformedTokenError

ED25519_KEY_SIZE = 32

PRIVATE_KEY_TYPES = (Ed25519PrivateKey, rsa.RSAPrivateKey)
PUBLIC_KEY_TYPES = (Ed25519PublicKey, rsa.RSAPublicKey)


class Key:
    """Base class of the key variants."""

    __slots__ = ()


class NoKey(Key):
    """Absence of a key."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "NO_KEY"


NO_KEY = NoKey()


class SymmetricKey(Key):
    """Shared secret for the HMAC family."""

    __slots__ = ("secret",)

    def __init__(self, secret: Union[str, bytes]):
        if isinstance(secret, str):
            secret = secret.encode("utf-8")
        self.secret = bytes(secret)

    @classmethod
    def from_b64(cls, value: str) -> "SymmetricKey":
        """Build a secret from its base64url encoding."""
        return cls(_decode_key_b64(value))

    def __eq__(self, other: Any) -> bool:
        return isinstance(other, SymmetricKey) and other.secret == self.secret

    def __hash__(self) -> int:
        return hash(self.secret)

    def __repr__(self) -> str:
        return "SymmetricKey(<redacted>)"


class PrivateKey(Key):
    """Private (signing) half of an asymmetric key pair."""

    __slots__ = ("key",)

    def __init__(self, key: Any):
        if not isinstance(key, PRIVATE_KEY_TYPES):
            raise InvalidKeyError(f"Unsupported private key type: {type(key).__name__}")
        self.key = key

    @classmethod
    def from_ed25519_seed(cls, seed: bytes) -> "PrivateKey":
        """
        Load a raw Ed25519 private key.

        Args:
            seed: The 32 byte Ed25519 seed

        Raises:
            InvalidKeyError: If the seed is not 32 bytes
        """
        if len(seed) != ED25519_KEY_SIZE:
            raise InvalidKeyError("Ed25519 raw private key must be 32 bytes")
        return cls(Ed25519PrivateKey.from_private_bytes(seed))

    @classmethod
    def from_pem(cls, pem: Union[str, bytes], password: Optional[bytes] = None) -> "PrivateKey":
        """Load a PEM encoded (PKCS#1 or PKCS#8) private key."""
        if isinstance(pem, str):
            pem = pem.encode("utf-8")
        try:
            key = serialization.load_pem_private_key(pem, password=password)
        except (ValueError, TypeError) as e:
            raise InvalidKeyError("Could not parse the private key") from e
        return cls(key)

    def public_key(self) -> "PublicKey":
        return PublicKey(self.key.public_key())

    def __repr__(self) -> str:
        return f"PrivateKey({type(self.key).__name__})"


class PublicKey(Key):
    """Public (verification) half of an asymmetric key pair."""

    __slots__ = ("key",)

    def __init__(self, key: Any):
        if not isinstance(key, PUBLIC_KEY_TYPES):
            raise InvalidKeyError(f"Unsupported public key type: {type(key).__name__}")
        self.key = key

    @classmethod
    def from_ed25519_bytes(cls, raw: bytes) -> "PublicKey":
        """Load a raw 32 byte Ed25519 public key."""
        if len(raw) != ED25519_KEY_SIZE:
            raise InvalidKeyError("Ed25519 raw public key must be 32 bytes")
        return cls(Ed25519PublicKey.from_public_bytes(raw))

    @classmethod
    def from_ed25519_b64(cls, value: str) -> "PublicKey":
        """Load an Ed25519 public key from its base64url encoding (a 'kid')."""
        return cls.from_ed25519_bytes(_decode_key_b64(value))

    @classmethod
    def from_pem(cls, pem: Union[str, bytes]) -> "PublicKey":
        """Load a PEM encoded public key."""
        if isinstance(pem, str):
            pem = pem.encode("utf-8")
        try:
            key = serialization.load_pem_public_key(pem)
        except (ValueError, TypeError) as e:
            raise InvalidKeyError("Could not parse the public key") from e
        return cls(key)

    def __repr__(self) -> str:
        return f"PublicKey({type(self.key).__name__})"


def _decode_key_b64(value: str) -> bytes:
    try:
        return b64url_decode(value)
    except MalformedTokenError as e:
        raise InvalidKeyError("Key is not valid base64url") from e


def as_key(value: Any) -> Key:
    """
    Coerce caller supplied key material into a Key variant.

    Args:
        value: None, a Key, str/bytes secret, or a cryptography key object

    Returns:
        The matching Key variant

    Raises:
        InvalidKeyError: If the value cannot be used as a key
    """
    if value is None:
        return NO_KEY
    if isinstance(value, Key):
        return value
    if isinstance(value, (str, bytes, bytearray)):
        return SymmetricKey(value)
    if isinstance(value, PRIVATE_KEY_TYPES):
        return PrivateKey(value)
    if isinstance(value, PUBLIC_KEY_TYPES):
        return PublicKey(value)
    raise InvalidKeyError(f"Unsupported key material: {type(value).__name__}")


def ed25519_kid(public_key: Union[PublicKey, Ed25519PublicKey]) -> str:
    """
    Return the 'kid' for an Ed25519 public key.

    The kid is the base64url encoding of the raw 32 byte public key, so a
    verifier can recover the key from the token header.
    """
    if isinstance(public_key, PublicKey):
        public_key = public_key.key
    if not isinstance(public_key, Ed25519PublicKey):
        raise InvalidKeyError("kid can only be derived from an Ed25519 public key")
    raw = public_key.public_bytes(
        encoding=serialization.Encoding.Raw,
        format=serialization.PublicFormat.Raw,
    )
    return b64url_encode(raw)
