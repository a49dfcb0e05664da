"""Paillier cryptosystem over Python integers."""

from paillier_bigint.errors import (
    GeneratorVariantError,
    MissingFactorizationError,
    NoInverseError,
    PaillierError,
)
from paillier_bigint.paillier import (
    DEFAULT_BITLENGTH,
    KeyPair,
    L,
    PrivateKey,
    PublicKey,
    generate_random_keys,
    generate_random_keys_sync,
    get_generator,
)

__version__ = "0.1.0"

__all__ = [
    "DEFAULT_BITLENGTH",
    "GeneratorVariantError",
    "KeyPair",
    "L",
    "MissingFactorizationError",
    "NoInverseError",
    "PaillierError",
    "PrivateKey",
    "PublicKey",
    "generate_random_keys",
    "generate_random_keys_sync",
    "get_generator",
]
