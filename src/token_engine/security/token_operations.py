"""
Token facade: load (string -> validated state) and dump (state -> string).
"""
import logging
import secrets
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Tuple

from token_engine.config.engine_config import EngineConfig, get_engine_config

from .algorithms import NONE, AlgorithmRegistry
from .claims import TOKEN_TYPE, ClaimsValidator, check_mandatory_claims
from .encoding import b64url_encode, decode_segment, encode_segment
from .exceptions import (
    EncodingError,
    InvalidKeyError,
    InvalidSignatureError,
    MalformedTokenError,
    TokenError,
)
from .keys import as_key
from .signers import BASE_ENGINE, ED25519_ENGINE, SignatureEngine

logger = logging.getLogger(__name__)

DEFAULT_JTI_LENGTH = 16


class TokenState(str, Enum):
    """Where a Token instance stands."""
    EMPTY = "empty"
    UNVERIFIED = "unverified"
    VERIFIED = "verified"


def normalize_header(header: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Return a copy of ``header`` that is guaranteed to carry a string 'alg'.

    A missing, empty or non-string 'alg' becomes "none". Applied wherever the
    header is replaced as a whole.
    """
    result = dict(header or {})
    alg = result.get("alg")
    if not isinstance(alg, str) or not alg:
        result["alg"] = NONE
    return result


def generate_nonce(length: int = DEFAULT_JTI_LENGTH) -> str:
    """
    Generate a 'jti' nonce: base64url of ``length`` random bytes.

    Raises:
        EncodingError: If the system cannot provide random bytes
    """
    try:
        return b64url_encode(secrets.token_bytes(length))
    except (OSError, NotImplementedError) as e:
        raise EncodingError("Could not generate random nonce") from e


class Token:
    """
    One header and one payload, loaded from or dumped to the compact wire format.

    The allow-list (``algorithms``) is fixed at construction. Both ``load``
    and ``dump`` check the header 'alg' against it before any key is used,
    and ``load`` checks it even when signature verification is disabled.

    A failed ``load`` leaves the token empty: payload ``{}`` and header
    ``{"alg": "none"}``. Instances are not safe for concurrent use; use one
    Token per in-flight operation or guard ``load``/``dump`` with a lock.

    Example:
        token = Token(["HS256"], header={"alg": "HS256"}, payload={"sub": "alice"})
        s = token.dump("secret")

        reader = Token(["HS256"])
        reader.load(s, key="secret", mandatory=["sub"])
        reader.payload["sub"]
    """

    def __init__(
        self,
        algorithms: Optional[Iterable[str]] = None,
        header: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
        engine: SignatureEngine = BASE_ENGINE,
        validator: Optional[ClaimsValidator] = None,
        jti_length: int = DEFAULT_JTI_LENGTH,
    ):
        """
        Initialize a token.

        Args:
            algorithms: Algorithms to accept on load and emit on dump; only the
                ones the engine implements are kept. Defaults to the header 'alg'.
            header: Initial header; gets 'alg' "none" and 'typ' "JWT" if absent
            payload: Initial payload (claims)
            engine: Signature engine (BASE_ENGINE or ED25519_ENGINE)
            validator: Claims validator (default: typ required, no leeway)
            jti_length: Random bytes in a generated 'jti' (0 disables it)
        """
        if header is None:
            self._header = {"alg": NONE, "typ": TOKEN_TYPE}
        else:
            self._header = normalize_header(header)
            self._header.setdefault("typ", TOKEN_TYPE)
        self._payload: Dict[str, Any] = dict(payload or {})

        self.engine = engine
        self.validator = validator or ClaimsValidator()
        self.jti_length = jti_length

        if algorithms is None:
            algorithms = [self._header["alg"]]
        self.registry = AlgorithmRegistry(engine, algorithms)

        has_content = header is not None or bool(self._payload)
        self.state = TokenState.UNVERIFIED if has_content else TokenState.EMPTY

    @classmethod
    def from_config(
        cls,
        config: Optional[EngineConfig] = None,
        header: Optional[Dict[str, Any]] = None,
        payload: Optional[Dict[str, Any]] = None,
    ) -> "Token":
        """
        Build a token from an EngineConfig (default: the cached environment config).
        """
        if config is None:
            config = get_engine_config()
        return cls(
            config.allowed_algorithms,
            header=header,
            payload=payload,
            engine=ED25519_ENGINE if config.ed25519 else BASE_ENGINE,
            validator=ClaimsValidator(require_typ=config.require_typ, leeway=config.leeway),
            jti_length=config.jti_length,
        )

    @property
    def header(self) -> Dict[str, Any]:
        return self._header

    @header.setter
    def header(self, value: Dict[str, Any]) -> None:
        self._header = normalize_header(value)
        self.state = TokenState.UNVERIFIED

    @property
    def payload(self) -> Dict[str, Any]:
        return self._payload

    @payload.setter
    def payload(self, value: Dict[str, Any]) -> None:
        self._payload = dict(value or {})
        self.state = TokenState.UNVERIFIED

    @property
    def algorithms(self) -> Tuple[str, ...]:
        """The allow-list of this token."""
        return self.registry.allowed

    @property
    def is_empty(self) -> bool:
        return self.state is TokenState.EMPTY

    def _reset(self) -> None:
        self._header = normalize_header({})
        self._payload = {}
        self.state = TokenState.EMPTY

    def set_nonce(self, length: Optional[int] = None) -> str:
        """
        Put a fresh random 'jti' into the payload.

        Args:
            length: Number of random bytes (default: ``jti_length``)

        Returns:
            The new nonce
        """
        nonce = generate_nonce(self.jti_length if length is None else length)
        self._payload["jti"] = nonce
        return nonce

    def dump(self, key: Any = None, jti_len: Optional[int] = None) -> str:
        """
        Serialize and sign this token.

        If the payload has no 'jti' and ``jti_len`` > 0, a random one is added
        to the dumped copy; the payload of this instance is not changed.

        Args:
            key: Signing key (str/bytes secret, cryptography private key or Key);
                None only for alg "none"
            jti_len: Random bytes in a generated 'jti' (default: ``jti_length``)

        Returns:
            ``b64(header) "." b64(payload) "." signature``

        Raises:
            AlgorithmNotAllowedError: If header 'alg' is not on the allow-list
            EncodingError: If header or payload cannot be JSON encoded
            InvalidKeyError: If the key does not fit the algorithm
            UnsupportedAlgorithmError: If the engine cannot sign with 'alg'
        """
        if jti_len is None:
            jti_len = self.jti_length

        header = normalize_header(self._header)
        algorithm = header["alg"]
        try:
            self.registry.check_allowed(algorithm)

            payload = dict(self._payload)
            if "jti" not in payload and jti_len > 0:
                payload["jti"] = generate_nonce(jti_len)

            signing_input = f"{encode_segment(header)}.{encode_segment(payload)}"
            signature = self.engine.sign(signing_input.encode("ascii"), algorithm, key)
        except TokenError as e:
            logger.debug(f"Token dump failed ({e.error_code}) for alg={algorithm!r}")
            raise

        return f"{signing_input}.{signature}"

    def _decode(
        self,
        token: str,
        mandatory: Iterable[str],
    ) -> Tuple[Dict[str, Any], Dict[str, Any], bytes, str]:
        if not isinstance(token, str):
            raise MalformedTokenError("Token must be a string")

        parts = token.split(".")
        if len(parts) == 2:
            signature = ""
        elif len(parts) == 3:
            signature = parts[2]
        else:
            raise MalformedTokenError(f"Token must have 2 or 3 parts, got {len(parts)}")

        header = decode_segment(parts[0])
        # before the payload is even decoded, and regardless of verify
        self.registry.check_allowed(header.get("alg"))

        payload = decode_segment(parts[1])
        check_mandatory_claims(header, payload, mandatory)

        signing_input = f"{parts[0]}.{parts[1]}".encode("ascii")
        return header, payload, signing_input, signature

    def load(
        self,
        token: str,
        key: Any = None,
        verify: bool = True,
        mandatory: Iterable[str] = (),
        b64key: Optional[str] = None,
        now: Optional[int] = None,
    ) -> None:
        """
        Load a token string into this instance.

        Header and payload are replaced, never merged. On any failure they are
        reset to empty before the error propagates.

        Args:
            token: Token string (2 parts unsigned, 3 parts signed)
            key: Verification key (str/bytes secret, public key or Key). With
                None, Ed25519 tokens are verified against their 'kid' header.
            verify: Whether to verify the signature and the claims
            mandatory: Claim names that must appear in header or payload
            b64key: Key as base64url string, interpreted by the algorithm family
            now: Epoch seconds for temporal checks (default: current time)

        Raises:
            MalformedTokenError: If the token is not 2 or 3 parts of base64url JSON objects
            AlgorithmNotAllowedError: If header 'alg' is not on the allow-list
            MissingClaimError: If a mandatory claim is missing
            InvalidKeyError: If the key material is unusable
            InvalidSignatureError: If the signature does not verify
            TokenExpiredError: If 'exp' has passed
            TokenNotYetValidError: If 'nbf' is in the future
            TokenIssuedInFutureError: If 'iat' is in the future
            InvalidClaimError: If 'typ', 'kid', 'sub' or a temporal claim is malformed
        """
        if isinstance(mandatory, str):
            mandatory = [mandatory]
        mandatory = list(mandatory)
        self._reset()

        try:
            header, payload, signing_input, signature = self._decode(token, mandatory)
        except TokenError as e:
            logger.debug(f"Token rejected before verification ({e.error_code})")
            raise

        self._header = header
        self._payload = payload
        self.state = TokenState.UNVERIFIED
        if not verify:
            return

        algorithm = header["alg"]
        try:
            if b64key is not None:
                if key is not None:
                    raise InvalidKeyError("Pass either key or b64key, not both")
                key = self.engine.key_from_b64(algorithm, b64key)
            key = as_key(key)

            if not self.engine.verify(signing_input, signature, algorithm, key, header):
                raise InvalidSignatureError()

            self.validator.validate_content(
                header, payload, now=now, mandatory=mandatory, engine=self.engine
            )
        except TokenError as e:
            self._reset()
            logger.debug(f"Token rejected for alg={algorithm!r} ({e.error_code})")
            raise

        self.state = TokenState.VERIFIED

    def __repr__(self) -> str:
        return (
            f"Token(state={self.state.value}, alg={self._header.get('alg')!r}, "
            f"algorithms={list(self.registry.allowed)})"
        )
