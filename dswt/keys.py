"""
DSWT Key Management - Symmetric signing key generation and loading.

Keys are 256-bit secrets drawn from the OS random source via jwcrypto and
can be exported as JWK ``oct`` keys so they can be stored by the caller.
Nothing here reads or writes process environment.
"""

import json
from dataclasses import dataclass

from jwcrypto import jwk
from jwcrypto.common import base64url_decode, base64url_encode

# Size of generated keys in bits
KEY_SIZE_BITS = 256


@dataclass
class SecretKey:
    """
    A freshly generated signing key.

    Attributes:
        key: Raw key bytes, as passed to TokenManager.
        jwk: JWK JSON (kty=oct) of the same key, for storage.
    """

    key: bytes
    jwk: str

    @property
    def key_id(self) -> str:
        return key_id(self.key)


def generate_secret() -> SecretKey:
    """
    Generate a new random 256-bit signing key.

    The key is returned to the caller only; storing it is the caller's job.
    """
    key = jwk.JWK.generate(kty="oct", size=KEY_SIZE_BITS)
    exported = key.export_symmetric()
    raw = base64url_decode(json.loads(exported)["k"])
    return SecretKey(key=raw, jwk=exported)


def load_secret(jwk_json: str) -> bytes:
    """
    Load raw key bytes from a JWK JSON string.

    Raises:
        ValueError: If the JSON is not a symmetric (oct) JWK.
    """
    try:
        key = jwk.JWK.from_json(jwk_json)
    except (jwk.InvalidJWKType, jwk.InvalidJWKValue, TypeError) as e:
        raise ValueError(f"Invalid symmetric JWK: {e}") from e
    if key.get("kty") != "oct":
        raise ValueError("Key must be a symmetric JWK (kty=oct)")
    return base64url_decode(json.loads(key.export_symmetric())["k"])


def key_id(key: bytes) -> str:
    """
    Return the RFC 7638 thumbprint of a symmetric key.

    Safe to log: it identifies the key without revealing it.
    """
    return jwk.JWK(kty="oct", k=base64url_encode(key)).thumbprint()
