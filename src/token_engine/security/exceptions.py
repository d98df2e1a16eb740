"""
Custom exceptions for token loading, dumping and validation.

Every failure kind has its own class and ``error_code`` so callers can tell
an expired token from a malformed one or from a missing mandatory claim.
"""
from typing import Optional


class TokenError(Exception):
    """Base exception for token-related errors."""
    def __init__(self, message: str, error_code: str):
        self.message = message
        self.error_code = error_code
        super().__init__(self.message)


class MalformedTokenError(TokenError):
    """Token has the wrong number of parts, bad base64url or bad JSON."""
    def __init__(self, message: str = "Token is malformed."):
        super().__init__(message, "STRUCTURALLY_INVALID")


class AlgorithmNotAllowedError(TokenError):
    """Header 'alg' is not on the allow-list of this token instance."""
    def __init__(self, algorithm: Optional[str] = None, message: Optional[str] = None):
        self.algorithm = algorithm
        super().__init__(
            message or f"Algorithm {algorithm!r} is not allowed.",
            "ALGORITHM_NOT_ALLOWED",
        )


class InvalidSignatureError(TokenError):
    """Token signature is invalid."""
    def __init__(self, message: str = "Token signature verification failed."):
        super().__init__(message, "SIGNATURE_INVALID")


class MissingClaimError(TokenError):
    """A mandatory claim is in neither the header nor the payload."""
    def __init__(self, claim: str, message: Optional[str] = None):
        self.claim = claim
        super().__init__(
            message or f"Mandatory claim {claim!r} is missing.",
            "MANDATORY_CLAIM_MISSING",
        )


class TokenExpiredError(TokenError):
    """Token has expired ('exp' is in the past)."""
    def __init__(self, message: str = "Token has expired."):
        super().__init__(message, "CLAIM_EXPIRED")


class TokenNotYetValidError(TokenError):
    """Token is not valid yet ('nbf' is in the future)."""
    def __init__(self, message: str = "Token is not yet valid."):
        super().__init__(message, "CLAIM_NOT_YET_VALID")


class TokenIssuedInFutureError(TokenError):
    """Token claims to be issued in the future ('iat')."""
    def __init__(self, message: str = "Token was issued in the future."):
        super().__init__(message, "CLAIM_ISSUED_IN_FUTURE")


class InvalidClaimError(TokenError):
    """A structural claim has the wrong type or shape."""
    def __init__(self, claim: str, message: Optional[str] = None):
        self.claim = claim
        super().__init__(
            message or f"Claim {claim!r} is invalid.",
            "STRUCTURAL_CLAIM_INVALID",
        )


class InvalidTypError(InvalidClaimError):
    """Header 'typ' is missing or is not 'JWT'."""
    def __init__(self, message: str = "Header 'typ' must be 'JWT'."):
        super().__init__("typ", message)


class InvalidKidError(InvalidClaimError):
    """Header 'kid' is missing or is not a base64url encoded 32 byte key."""
    def __init__(self, message: str = "Header 'kid' must be a base64url encoded 32 byte public key."):
        super().__init__("kid", message)


class InvalidSubError(InvalidClaimError):
    """Payload 'sub' is not a base64url encoded 32 byte identity."""
    def __init__(self, message: str = "Claim 'sub' must be a base64url encoded 32 byte identity."):
        super().__init__("sub", message)


class EncodingError(TokenError):
    """Token could not be dumped (JSON encoding or random bytes failed)."""
    def __init__(self, message: str = "Token could not be encoded."):
        super().__init__(message, "ENCODING_FAILED")


class UnsupportedAlgorithmError(TokenError):
    """The signature engine does not implement the algorithm."""
    def __init__(self, algorithm: Optional[str] = None, message: Optional[str] = None):
        self.algorithm = algorithm
        super().__init__(
            message or f"Algorithm {algorithm!r} is not supported.",
            "UNSUPPORTED_ALGORITHM",
        )


class InvalidKeyError(TokenError):
    """Key material does not fit the algorithm it is used with."""
    def __init__(self, message: str = "Key is not valid for this algorithm."):
        super().__init__(message, "INVALID_KEY")
