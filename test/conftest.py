"""
Pytest configuration and fixtures for testing.
"""
import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric.ed25519 import Ed25519PrivateKey

from token_engine.security.encoding import b64url_decode
from token_engine.security.keys import PrivateKey, PublicKey

# Ed25519 key pair whose seed/public key are base64url encoded raw bytes
ED25519_SEED_B64 = "YHWUUc0P6SY46WaDdnssE8NpFsQQxJrvmdOrpU9X0wU"
ED25519_PUBLIC_B64 = "XN7VpEX1uCxxhvwUuacYhuU9t6uxgLahRiLeSEHENik"

# Signed with the key pair above: header {"alg":"Ed25519","typ":"JWT","kid":<public>}, payload {"foo":"bar"}
ED25519_TOKEN = (
    "eyJhbGciOiJFZDI1NTE5IiwidHlwIjoiSldUIiwia2lkIjoiWE43VnBFWDF1Q3h4aHZ3VXVhY1lodVU5dDZ1eGdMYWhSaUxlU0VIRU5payJ9"
    ".eyJmb28iOiJiYXIifQ"
    ".a2dDcKXByKxiouOLnXUm7YUKHMGOU3yn_g91C90e8YmKjlF1_9ylAKukfMm6Y6WS3dZp2ysaglzzTnVxnRYyDQ"
)

# HS256 with key "secret"; header carries a 32 byte 'kid', payload a matching 'sub'
HS256_TOKEN = (
    "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCIsImtpZCI6ImFCR293UEhjSXRwb3ZlVnpyclFzU25rNjVjX3FoS3ZmamQtNHd5UFVmVVEifQ"
    ".eyJwaG9uZV9udW1iZXIiOiIrMzA2OTQ3ODk4NjA1Iiwic2NvcGUiOiJwaG9uZSIsImF1ZCI6Imh0dHBzOi8vNS1kb3QtYXV0aGVudGlxaW8uYXBwc3BvdC5jb20iLCJzdWIiOiJhQkdvd1BIY0l0cG92ZVZ6cnJRc1NuazY1Y19xaEt2ZmpkLTR3eVBVZlVRIiwidHlwZSI6Im1vYmlsZSJ9"
    ".qrq-939iZydNFdNsTosbSteghjc2VcK9EZVklxfQgiU"
)

# header {"alg":"none","typ":"JWT"} followed by a (bogus) signature part
NONE_WITH_SIGNATURE_TOKEN = (
    "eyJhbGciOiJub25lIiwidHlwIjoiSldUIn0"
    ".eyJzdWIiOiIxMjM0NTY3ODkwIiwibmFtZSI6IkpvaG4gRG9lIiwiYWRtaW4iOnRydWV9"
    ".qrq-939iZydNFdNsTosbSteghjc2VcK9EZVklxfQgiU"
)

NOW = 1_700_000_000


@pytest.fixture
def now():
    """Fixed 'current time' for temporal checks."""
    return NOW


@pytest.fixture
def known_ed25519_private():
    """Private key of the fixed Ed25519 test vector."""
    return PrivateKey.from_ed25519_seed(b64url_decode(ED25519_SEED_B64))


@pytest.fixture
def known_ed25519_public():
    """Public key of the fixed Ed25519 test vector."""
    return PublicKey.from_ed25519_b64(ED25519_PUBLIC_B64)


@pytest.fixture
def ed25519_keys():
    """Generate two unrelated Ed25519 key pairs."""
    first = Ed25519PrivateKey.generate()
    second = Ed25519PrivateKey.generate()
    return {
        "key1": {"private": first, "public": first.public_key()},
        "key2": {"private": second, "public": second.public_key()},
    }


@pytest.fixture(scope="session")
def rsa_keys():
    """Generate an RSA key pair (session scoped, generation is slow)."""
    private_key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    public_key = private_key.public_key()

    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    ).decode('utf-8')

    public_pem = public_key.public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo
    ).decode('utf-8')

    return {
        "private": private_key,
        "public": public_key,
        "private_pem": private_pem,
        "public_pem": public_pem,
    }
