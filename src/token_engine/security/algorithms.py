"""
Algorithm identifiers and the per-token allow-list.

An engine *implements* a fixed set of identifiers. A token instance only
*allows* the subset of those the caller asked for; load and dump both check
the header 'alg' against that allow-list before any key is touched.
"""
import logging
from typing import TYPE_CHECKING, Iterable, List, Optional

from .exceptions import AlgorithmNotAllowedError

if TYPE_CHECKING:
    from .signers import SignatureEngine

logger = logging.getLogger(__name__)

NONE = "none"

HS256 = "HS256"
HS384 = "HS384"
HS512 = "HS512"

RS256 = "RS256"
RS384 = "RS384"
RS512 = "RS512"

PS256 = "PS256"
PS384 = "PS384"
PS512 = "PS512"

ED25519 = "Ed25519"

HMAC_ALGORITHMS = frozenset({HS256, HS384, HS512})
RSA_PKCS1_ALGORITHMS = frozenset({RS256, RS384, RS512})
RSA_PSS_ALGORITHMS = frozenset({PS256, PS384, PS512})
RSA_ALGORITHMS = RSA_PKCS1_ALGORITHMS | RSA_PSS_ALGORITHMS


class AlgorithmRegistry:
    """
    Allow-list of algorithms for one token instance.

    The allow-list is computed once, at construction, as the requested
    identifiers that the engine actually implements. It never contains an
    identifier the engine cannot execute.
    """

    def __init__(self, engine: "SignatureEngine", requested: Iterable[str]):
        """
        Args:
            engine: Signature engine whose implemented set bounds the allow-list
            requested: Algorithm identifiers the caller is willing to accept
        """
        if isinstance(requested, str):
            requested = [requested]
        self.engine = engine
        self.allowed = tuple(self.filter_implemented(requested))

    def implemented(self, algorithm: Optional[str]) -> bool:
        """Static capability test: does the engine implement ``algorithm``?"""
        return self.engine.implemented(algorithm)

    def filter_implemented(self, algorithms: Iterable[str]) -> List[str]:
        """Keep the implemented identifiers, in order, without duplicates."""
        result: List[str] = []
        for alg in algorithms:
            if alg in result:
                continue
            if self.implemented(alg):
                result.append(alg)
            else:
                logger.debug(f"Dropping unimplemented algorithm {alg!r} from allow-list")
        return result

    def is_allowed(self, algorithm: Optional[str]) -> bool:
        """Check membership of ``algorithm`` in the allow-list."""
        return isinstance(algorithm, str) and algorithm in self.allowed

    def check_allowed(self, algorithm: Optional[str]) -> str:
        """
        Assert that ``algorithm`` is allowed.

        Returns:
            The algorithm identifier

        Raises:
            AlgorithmNotAllowedError: If the algorithm is not on the allow-list
        """
        if not self.is_allowed(algorithm):
            raise AlgorithmNotAllowedError(
                algorithm if isinstance(algorithm, str) else None,
                f"Algorithm {algorithm!r} is not allowed. Allowed: {list(self.allowed)}",
            )
        return algorithm

    def __contains__(self, algorithm: object) -> bool:
        return isinstance(algorithm, str) and algorithm in self.allowed

    def __repr__(self) -> str:
        return f"AlgorithmRegistry(allowed={list(self.allowed)})"
