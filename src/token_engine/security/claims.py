"""
Structural and temporal validation of a decoded header and payload.
"""
import math
import time
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from .encoding import b64url_decode
from .exceptions import (
    InvalidClaimError,
    InvalidKidError,
    InvalidSubError,
    InvalidTypError,
    MalformedTokenError,
    MissingClaimError,
    TokenExpiredError,
    TokenIssuedInFutureError,
    TokenNotYetValidError,
)
from .keys import ED25519_KEY_SIZE

if TYPE_CHECKING:
    from .signers import SignatureEngine

TOKEN_TYPE = "JWT"


def current_timestamp() -> int:
    """Current time as integer epoch seconds."""
    return int(time.time())


def check_mandatory_claims(
    header: Dict[str, Any],
    payload: Dict[str, Any],
    mandatory: Iterable[str],
) -> None:
    """
    Check that every mandatory claim is in the header or the payload.

    Raises:
        MissingClaimError: For the first claim found in neither
    """
    for claim in mandatory:
        if claim not in header and claim not in payload:
            raise MissingClaimError(claim)


def _numeric_claim(payload: Dict[str, Any], name: str) -> Optional[float]:
    if name not in payload:
        return None
    value = payload[name]
    # bool is an int subclass but never a timestamp
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidClaimError(name, f"Claim {name!r} must be a number of epoch seconds.")
    if isinstance(value, float) and not math.isfinite(value):
        raise InvalidClaimError(name, f"Claim {name!r} must be a finite number.")
    return value


def _decodes_to_key_size(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    try:
        return len(b64url_decode(value)) == ED25519_KEY_SIZE
    except MalformedTokenError:
        return False


def validate_ed25519_claims(header: Dict[str, Any], payload: Dict[str, Any]) -> None:
    """
    Claims required when a token is signed with Ed25519.

    The 'kid' header carries the raw public key, so it is mandatory and must
    decode to exactly 32 bytes. A 'sub' claim, when present, binds the token
    to an identity key and must decode to 32 bytes as well.

    Raises:
        InvalidKidError: If 'kid' is missing or malformed
        InvalidSubError: If 'sub' is present and malformed
    """
    if not _decodes_to_key_size(header.get("kid")):
        raise InvalidKidError()
    if "sub" in payload and not _decodes_to_key_size(payload["sub"]):
        raise InvalidSubError()


class ClaimsValidator:
    """
    Validates token content after the signature has been checked.

    Checks run in a fixed order and stop at the first failure:

    1. header 'typ' equals "JWT" (when ``require_typ``)
    2. 'exp' is not in the past
    3. 'nbf' is not in the future
    4. 'iat' is not in the future
    5. checks of the algorithm family that signed the token
    6. caller supplied mandatory claims are present
    """

    def __init__(self, require_typ: bool = True, leeway: int = 0):
        """
        Args:
            require_typ: Whether header 'typ' must be present and equal "JWT"
            leeway: Leeway in seconds for clock skew (default: 0)
        """
        self.require_typ = require_typ
        self.leeway = leeway

    def validate_content(
        self,
        header: Dict[str, Any],
        payload: Dict[str, Any],
        now: Optional[int] = None,
        mandatory: Iterable[str] = (),
        engine: Optional["SignatureEngine"] = None,
    ) -> None:
        """
        Validate header and payload.

        Args:
            header: Decoded token header
            payload: Decoded token payload
            now: Epoch seconds to validate against (default: current time)
            mandatory: Claim names that must appear in header or payload
            engine: Signature engine whose family checks apply (optional)

        Raises:
            InvalidTypError: If 'typ' is required and not "JWT"
            TokenExpiredError: If 'exp' has passed
            TokenNotYetValidError: If 'nbf' is in the future
            TokenIssuedInFutureError: If 'iat' is in the future
            InvalidClaimError: If a temporal or family claim is malformed
            MissingClaimError: If a mandatory claim is missing
        """
        if now is None:
            now = current_timestamp()

        if self.require_typ and header.get("typ") != TOKEN_TYPE:
            raise InvalidTypError()

        exp = _numeric_claim(payload, "exp")
        if exp is not None and now - self.leeway > exp:
            raise TokenExpiredError()

        nbf = _numeric_claim(payload, "nbf")
        if nbf is not None and now + self.leeway < nbf:
            raise TokenNotYetValidError()

        iat = _numeric_claim(payload, "iat")
        if iat is not None and now + self.leeway < iat:
            raise TokenIssuedInFutureError()

        if engine is not None:
            engine.check_claims(header, payload)

        check_mandatory_claims(header, payload, mandatory)

    def __repr__(self) -> str:
        return f"ClaimsValidator(require_typ={self.require_typ}, leeway={self.leeway})"
