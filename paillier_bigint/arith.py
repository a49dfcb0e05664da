"""
Modular arithmetic over Python integers: inverses, CRT-assisted modular
exponentiation, secure random integers and probable-prime generation.
"""

import math
import os
import secrets
from typing import Mapping, Optional, Sequence

from anyio import to_thread

from paillier_bigint.errors import NoInverseError


# ── Configuration ──────────────────────────────────
PRIME_ITERATIONS = int(os.getenv("PAILLIER_PRIME_ITERATIONS", "16"))


def _sieve(limit: int) -> list[int]:
    flags = bytearray([1]) * (limit + 1)
    flags[0] = flags[1] = 0
    for i in range(2, math.isqrt(limit) + 1):
        if flags[i]:
            flags[i * i :: i] = bytearray(len(flags[i * i :: i]))
    return [i for i, is_prime in enumerate(flags) if is_prime]


_SMALL_PRIMES = _sieve(2000)


def bit_length(a: int) -> int:
    return abs(a).bit_length()


def gcd(a: int, b: int) -> int:
    return math.gcd(a, b)


def lcm(a: int, b: int) -> int:
    if a == 0 or b == 0:
        return 0
    return abs(a * b) // math.gcd(a, b)


def mod_inv(a: int, n: int) -> int:
    """Return x such that a·x ≡ 1 (mod n)."""
    if n <= 0:
        raise ValueError("modulus must be > 0")
    try:
        return pow(a, -1, n)
    except ValueError as exc:
        raise NoInverseError(a, n) from exc


def crt(remainders: Sequence[int], moduli: Sequence[int]) -> int:
    """Combine x ≡ r_i (mod m_i) for pairwise coprime m_i into x mod ∏m_i."""
    if len(remainders) != len(moduli):
        raise ValueError("remainders and moduli must have the same length")
    prod = math.prod(moduli)
    x = 0
    for r, m in zip(remainders, moduli):
        partial = prod // m
        x += r * partial * mod_inv(partial, m)
    return x % prod


def mod_pow(base: int, exponent: int, modulus: int, factors: Optional[Mapping[int, int]] = None) -> int:
    """
    Compute base^exponent mod modulus.

    Negative exponents are supported by inverting the result. When the
    factorization of the modulus is known, pass it as ``{prime: power}`` and
    the exponentiation is done modulo each prime power and recombined with CRT.
    """
    if modulus <= 0:
        raise ValueError("modulus must be > 0")
    if modulus == 1:
        return 0
    base %= modulus
    if exponent < 0:
        return mod_inv(mod_pow(base, -exponent, modulus, factors), modulus)
    if not factors:
        return pow(base, exponent, modulus)

    if math.prod(p**k for p, k in factors.items()) != modulus:
        raise ValueError("factors do not multiply to the modulus")

    remainders = []
    moduli = []
    for prime, power in factors.items():
        m = prime**power
        b = base % m
        e = exponent
        if b % prime:
            # Euler: b^phi(m) ≡ 1 (mod m) for b coprime with m
            e = exponent % ((prime - 1) * prime ** (power - 1))
        remainders.append(pow(b, e, m))
        moduli.append(m)
    return crt(remainders, moduli)


def rand_between(high: int, low: int = 1) -> int:
    """Cryptographically secure uniform integer in [low, high]."""
    if high <= low:
        raise ValueError("high must be > low")
    return low + secrets.randbelow(high - low + 1)


def rand_bits(bits: int, force_length: bool = False) -> int:
    if bits < 1:
        raise ValueError("bits must be >= 1")
    value = secrets.randbits(bits)
    if force_length:
        value |= 1 << (bits - 1)
    return value


def _miller_rabin(w: int, iterations: int) -> bool:
    # FIPS 186-4 C.3.1: w - 1 = 2^a · m with m odd
    m = w - 1
    a = 0
    while m % 2 == 0:
        m //= 2
        a += 1

    for _ in range(iterations):
        b = rand_between(w - 2, 2)
        z = pow(b, m, w)
        if z == 1 or z == w - 1:
            continue
        for _ in range(a - 1):
            z = pow(z, 2, w)
            if z == w - 1:
                break
            if z == 1:
                return False
        else:
            return False
    return True


def is_probably_prime(w: int, iterations: int = PRIME_ITERATIONS) -> bool:
    if w < 2:
        return False
    for p in _SMALL_PRIMES:
        if w == p:
            return True
        if w % p == 0:
            return False
    return _miller_rabin(w, iterations)


def prime_sync(bits: int, iterations: int = PRIME_ITERATIONS) -> int:
    """Return a probable prime of exactly ``bits`` bits (blocking)."""
    if bits < 2:
        raise ValueError("bits must be >= 2")
    while True:
        candidate = rand_bits(bits, force_length=True) | 1
        if is_probably_prime(candidate, iterations):
            return candidate


async def prime(bits: int, iterations: int = PRIME_ITERATIONS) -> int:
    """Return a probable prime of exactly ``bits`` bits, searched off the event loop."""
    return await to_thread.run_sync(prime_sync, bits, iterations)
