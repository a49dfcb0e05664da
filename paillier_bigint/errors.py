"""Exceptions raised by the Paillier core.

Plain ``ValueError`` is used for out-of-domain arguments (non-positive
modulus, empty random range, too small bit lengths). The classes below cover
the failures callers are expected to tell apart.
"""


class PaillierError(Exception):
    """Base class for the library's own errors."""


class NoInverseError(PaillierError, ArithmeticError):
    """``value`` has no multiplicative inverse modulo ``modulus``."""

    def __init__(self, value: int, modulus: int):
        self.value = value
        self.modulus = modulus
        super().__init__(
            f"no inverse exists: gcd({value} mod n, n) != 1 "
            f"for a modulus of {modulus.bit_length()} bits"
        )


class GeneratorVariantError(PaillierError, ValueError):
    """The key was not generated with the simple variant (g = n + 1)."""

    def __init__(self, operation: str, bit_length: int):
        self.operation = operation
        self.bit_length = bit_length
        super().__init__(
            f"{operation}: cannot recover the random factor if publicKey.g != publicKey.n + 1 "
            f"({bit_length}-bit key). Generate the keys with the simple variant, "
            "e.g. generate_random_keys(3072, simple_variant=True)"
        )


class MissingFactorizationError(PaillierError):
    """The private key does not hold the prime factors p and q."""

    def __init__(self, operation: str, bit_length: int):
        self.operation = operation
        self.bit_length = bit_length
        super().__init__(
            f"{operation}: cannot get the random factor without knowing p and q "
            f"({bit_length}-bit key)"
        )
