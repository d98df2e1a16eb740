"""
Signed token engine: compact header.payload.signature tokens.

Supports alg "none", HS256/384/512, RS256/384/512, PS256/384/512 and, with
ED25519_ENGINE, Ed25519. Every token instance carries an allow-list and
rejects any other 'alg' on load and dump.

Example usage:
    from token_engine.security import Token, TokenExpiredError

    token = Token(["HS256"], header={"alg": "HS256"}, payload={"sub": "user123"})
    s = token.dump("secret")

    reader = Token(["HS256"])
    try:
        reader.load(s, key="secret", mandatory=["sub"])
        print(f"User ID: {reader.payload['sub']}")
    except TokenExpiredError:
        print("Token has expired")
"""

from .algorithms import AlgorithmRegistry
from .claims import ClaimsValidator
from .exceptions import (
    TokenError,
    MalformedTokenError,
    AlgorithmNotAllowedError,
    InvalidSignatureError,
    MissingClaimError,
    TokenExpiredError,
    TokenNotYetValidError,
    TokenIssuedInFutureError,
    InvalidClaimError,
    InvalidTypError,
    InvalidKidError,
    InvalidSubError,
    EncodingError,
    UnsupportedAlgorithmError,
    InvalidKeyError,
)
from .keys import NO_KEY, Key, NoKey, SymmetricKey, PrivateKey, PublicKey, as_key, ed25519_kid
from .signers import (
    AlgorithmFamily,
    SignatureEngine,
    BASE_ENGINE,
    ED25519_ENGINE,
)
from .token_operations import Token, TokenState, normalize_header

__all__ = [
    "AlgorithmRegistry",
    "ClaimsValidator",
    "TokenError",
    "MalformedTokenError",
    "AlgorithmNotAllowedError",
    "InvalidSignatureError",
    "MissingClaimError",
    "TokenExpiredError",
    "TokenNotYetValidError",
    "TokenIssuedInFutureError",
    "InvalidClaimError",
    "InvalidTypError",
    "InvalidKidError",
    "InvalidSubError",
    "EncodingError",
    "UnsupportedAlgorithmError",
    "InvalidKeyError",
    "NO_KEY",
    "Key",
    "NoKey",
    "SymmetricKey",
    "PrivateKey",
    "PublicKey",
    "as_key",
    "ed25519_kid",
    "AlgorithmFamily",
    "SignatureEngine",
    "BASE_ENGINE",
    "ED25519_ENGINE",
    "Token",
    "TokenState",
    "normalize_header",
]
