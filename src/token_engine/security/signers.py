"""
Signature engine: dispatch from an algorithm identifier to sign/verify.

An engine is an ordered tuple of algorithm families. For a given 'alg' the
first family that owns it handles signing, verification and any extra claim
checks. New families are added with ``SignatureEngine.extend`` without
touching the existing ones:

    BASE_ENGINE     = none, HMAC (HS*), RSA (RS*/PS*)
    ED25519_ENGINE  = Ed25519, then everything in BASE_ENGINE

The cryptographic primitives are PyJWT's algorithm objects, which sit on
``cryptography``.
"""
import hmac
import logging
from typing import Any, Dict, FrozenSet, Iterable, Optional

from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import (
    Ed25519PrivateKey,
    Ed25519PublicKey,
)
from jwt import exceptions as jwt_exceptions
from jwt.algorithms import get_default_algorithms

from .algorithms import ED25519, HMAC_ALGORITHMS, NONE, RSA_ALGORITHMS
from .claims import validate_ed25519_claims
from .encoding import b64url_decode, b64url_encode
from .exceptions import (
    InvalidKeyError,
    MalformedTokenError,
    UnsupportedAlgorithmError,
)
from .keys import (
    NO_KEY,
    Key,
    NoKey,
    PrivateKey,
    PublicKey,
    SymmetricKey,
    as_key,
)

logger = logging.getLogger(__name__)

_PRIMITIVES = get_default_algorithms()


class AlgorithmFamily:
    """
    One family of signature algorithms.

    Subclasses set ``algorithms`` and implement ``sign`` and ``verify``;
    ``check_claims`` and ``key_from_b64`` have usable defaults.
    """

    name = "family"
    algorithms: FrozenSet[str] = frozenset()

    def owns(self, algorithm: Optional[str]) -> bool:
        return algorithm in self.algorithms

    def sign(self, message: bytes, algorithm: str, key: Key) -> str:
        """
        Sign ``message`` and return the base64url encoded signature.

        Raises:
            InvalidKeyError: If ``key`` is not the variant this family signs with
        """
        raise NotImplementedError

    def verify(
        self,
        message: bytes,
        signature: str,
        algorithm: str,
        key: Key,
        header: Dict[str, Any],
    ) -> bool:
        """Return True if ``signature`` is valid for ``message``."""
        raise NotImplementedError

    def check_claims(self, header: Dict[str, Any], payload: Dict[str, Any]) -> None:
        """Family specific content checks; none by default."""

    def key_from_b64(self, value: str) -> Key:
        """Interpret a base64url key string for this family."""
        raise InvalidKeyError(f"{self.name} keys cannot be given as base64url strings")

    def __repr__(self) -> str:
        return f"{type(self).__name__}({sorted(self.algorithms)})"


class NoneFamily(AlgorithmFamily):
    """The unsigned 'none' algorithm: empty signature and no key."""

    name = "none"
    algorithms = frozenset({NONE})

    def sign(self, message: bytes, algorithm: str, key: Key) -> str:
        if not isinstance(key, NoKey):
            raise InvalidKeyError("Algorithm 'none' must not be used with a key")
        return ""

    def verify(self, message, signature, algorithm, key, header) -> bool:
        # a key means the caller expected a signed token
        return signature == "" and isinstance(key, NoKey)

    def key_from_b64(self, value: str) -> Key:
        return SymmetricKey.from_b64(value)


class HMACFamily(AlgorithmFamily):
    """HS256, HS384 and HS512 over a shared secret."""

    name = "hmac"
    algorithms = HMAC_ALGORITHMS

    def _secret(self, algorithm: str, key: Key) -> bytes:
        if not isinstance(key, SymmetricKey):
            raise InvalidKeyError(f"{algorithm} requires a symmetric key, got {key!r}")
        try:
            # refuses PEM/SSH material, i.e. a public key reused as HMAC secret
            return _PRIMITIVES[algorithm].prepare_key(key.secret)
        except jwt_exceptions.InvalidKeyError as e:
            raise InvalidKeyError(str(e)) from e

    def sign(self, message: bytes, algorithm: str, key: Key) -> str:
        secret = self._secret(algorithm, key)
        return b64url_encode(_PRIMITIVES[algorithm].sign(message, secret))

    def verify(self, message, signature, algorithm, key, header) -> bool:
        try:
            expected = self.sign(message, algorithm, key)
        except InvalidKeyError:
            return False
        return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))

    def key_from_b64(self, value: str) -> Key:
        return SymmetricKey.from_b64(value)


class RSAFamily(AlgorithmFamily):
    """RS256/384/512 (PKCS#1 v1.5) and PS256/384/512 (PSS, MGF1)."""

    name = "rsa"
    algorithms = RSA_ALGORITHMS

    def sign(self, message: bytes, algorithm: str, key: Key) -> str:
        if not (isinstance(key, PrivateKey) and isinstance(key.key, rsa.RSAPrivateKey)):
            raise InvalidKeyError(f"{algorithm} requires an RSA private key, got {key!r}")
        try:
            signature = _PRIMITIVES[algorithm].sign(message, key.key)
        except ValueError as e:
            raise InvalidKeyError(f"RSA key cannot sign with {algorithm}: {e}") from e
        return b64url_encode(signature)

    def verify(self, message, signature, algorithm, key, header) -> bool:
        if not (isinstance(key, PublicKey) and isinstance(key.key, rsa.RSAPublicKey)):
            return False
        try:
            raw = b64url_decode(signature)
        except MalformedTokenError:
            return False
        return _PRIMITIVES[algorithm].verify(message, key.key, raw)


class Ed25519Family(AlgorithmFamily):
    """
    Ed25519 signatures.

    Verification uses the explicit public key when one is given; otherwise
    the public key is taken from the header 'kid' (base64url raw key).
    """

    name = "ed25519"
    algorithms = frozenset({ED25519})

    def __init__(self):
        self._primitive = _PRIMITIVES["EdDSA"]

    def sign(self, message: bytes, algorithm: str, key: Key) -> str:
        if not (isinstance(key, PrivateKey) and isinstance(key.key, Ed25519PrivateKey)):
            raise InvalidKeyError(f"{algorithm} requires an Ed25519 private key, got {key!r}")
        return b64url_encode(self._primitive.sign(message, key.key))

    def _public_key(self, key: Key, header: Dict[str, Any]) -> Optional[Ed25519PublicKey]:
        if isinstance(key, PublicKey) and isinstance(key.key, Ed25519PublicKey):
            return key.key
        if isinstance(key, NoKey):
            kid = header.get("kid")
            if not isinstance(kid, str):
                return None
            try:
                return PublicKey.from_ed25519_b64(kid).key
            except InvalidKeyError:
                return None
        return None

    def verify(self, message, signature, algorithm, key, header) -> bool:
        public_key = self._public_key(key, header)
        if public_key is None:
            return False
        try:
            raw = b64url_decode(signature)
        except MalformedTokenError:
            return False
        return self._primitive.verify(message, public_key, raw)

    def check_claims(self, header: Dict[str, Any], payload: Dict[str, Any]) -> None:
        validate_ed25519_claims(header, payload)

    def key_from_b64(self, value: str) -> Key:
        return PublicKey.from_ed25519_b64(value)


class SignatureEngine:
    """
    Ordered set of algorithm families.

    The implemented set is fixed when the engine is built; which algorithms a
    token accepts is decided by the engine object it holds, never by
    process-wide state.
    """

    def __init__(self, families: Iterable[AlgorithmFamily], name: str = "engine"):
        self.name = name
        self.families = tuple(families)
        self.algorithms: FrozenSet[str] = frozenset().union(
            *(family.algorithms for family in self.families)
        )

    def extend(self, family: AlgorithmFamily, name: Optional[str] = None) -> "SignatureEngine":
        """
        Return a new engine where ``family`` is tried before this engine's families.
        """
        return SignatureEngine((family,) + self.families, name or f"{family.name}+{self.name}")

    def family_for(self, algorithm: Optional[str]) -> Optional[AlgorithmFamily]:
        """First family owning ``algorithm``, or None."""
        for family in self.families:
            if family.owns(algorithm):
                return family
        return None

    def implemented(self, algorithm: Optional[str]) -> bool:
        return algorithm in self.algorithms

    def sign(self, message: bytes, algorithm: str, key: Any = NO_KEY) -> str:
        """
        Compute the signature part of a token.

        Args:
            message: Bytes of ``b64(header) "." b64(payload)``
            algorithm: Algorithm identifier from the header
            key: Key variant or raw key material (see ``as_key``)

        Returns:
            base64url encoded signature ('' for alg=none)

        Raises:
            UnsupportedAlgorithmError: If no family owns the algorithm
            InvalidKeyError: If the key does not fit the algorithm
        """
        family = self.family_for(algorithm)
        if family is None:
            raise UnsupportedAlgorithmError(algorithm)
        return family.sign(message, algorithm, as_key(key))

    def verify(
        self,
        message: bytes,
        signature: str,
        algorithm: str,
        key: Any = NO_KEY,
        header: Optional[Dict[str, Any]] = None,
    ) -> bool:
        """
        Verify the signature part of a token.

        Unknown algorithms and unusable keys verify as False.
        """
        family = self.family_for(algorithm)
        if family is None:
            logger.debug(f"No family in engine {self.name!r} implements {algorithm!r}")
            return False
        try:
            key = as_key(key)
        except InvalidKeyError:
            return False
        return family.verify(message, signature, algorithm, key, header or {})

    def check_claims(self, header: Dict[str, Any], payload: Dict[str, Any]) -> None:
        """Run the content checks of the family owning the header 'alg'."""
        family = self.family_for(header.get("alg"))
        if family is not None:
            family.check_claims(header, payload)

    def key_from_b64(self, algorithm: str, value: str) -> Key:
        """
        Decode a base64url key string for the family owning ``algorithm``.

        Raises:
            UnsupportedAlgorithmError: If no family owns the algorithm
            InvalidKeyError: If the string is not a usable key
        """
        family = self.family_for(algorithm)
        if family is None:
            raise UnsupportedAlgorithmError(algorithm)
        return family.key_from_b64(value)

    def __repr__(self) -> str:
        return f"SignatureEngine({self.name!r}, families={[f.name for f in self.families]})"


BASE_ENGINE = SignatureEngine([NoneFamily(), HMACFamily(), RSAFamily()], name="base")
ED25519_ENGINE = BASE_ENGINE.extend(Ed25519Family(), name="ed25519")
