"""Signed, claims-bearing token engine."""
from token_engine.security import Token, TokenState, BASE_ENGINE, ED25519_ENGINE

__version__ = "0.1.0"

__all__ = ["Token", "TokenState", "BASE_ENGINE", "ED25519_ENGINE"]
