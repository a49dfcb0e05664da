"""
Paillier cryptosystem: public/private keys and key-pair generation.

Ciphertexts and plaintexts are plain Python integers. Both key types are
immutable and can be shared between threads.
"""

import logging
import operator
from dataclasses import dataclass, field
from typing import Awaitable, Callable, NamedTuple, Optional, Tuple

import anyio

from paillier_bigint import arith
from paillier_bigint.errors import GeneratorVariantError, MissingFactorizationError

logger = logging.getLogger(__name__)

DEFAULT_BITLENGTH = 3072


def L(a: int, n: int) -> int:
    return (a - 1) // n


@dataclass(frozen=True)
class PublicKey:
    n: int
    g: int
    n2: int = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "n", operator.index(self.n))
        object.__setattr__(self, "g", operator.index(self.g))
        object.__setattr__(self, "n2", self.n * self.n)  # cache n^2

    @property
    def bit_length(self) -> int:
        return arith.bit_length(self.n)

    def encrypt(self, m: int, r: Optional[int] = None) -> int:
        """
        Paillier public-key encryption of ``m``.

        ``r`` is the random factor; by default a random integer in (1, n)
        coprime with n, so encrypting the same ``m`` twice gives two different
        ciphertexts.
        """
        if r is None:
            r = arith.rand_between(self.n)
            while arith.gcd(r, self.n) != 1:
                r = arith.rand_between(self.n)
        return (arith.mod_pow(self.g, m, self.n2) * arith.mod_pow(r, self.n, self.n2)) % self.n2

    def addition(self, *ciphertexts: int) -> int:
        """Homomorphic addition: encryption of m_1 + ... + m_k for E(m_1), ..., E(m_k)."""
        total = 1
        for c in ciphertexts:
            total = total * c % self.n2
        return total

    def plaintext_addition(self, ciphertext: int, *plaintexts: int) -> int:
        """Add clear plaintexts to an encrypted one without encrypting them first."""
        total = ciphertext
        for m in plaintexts:
            total = total * arith.mod_pow(self.g, m, self.n2) % self.n2
        return total

    def multiply(self, c: int, k: int) -> int:
        """Pseudo-homomorphic multiplication: encryption of k·m for c = E(m)."""
        return arith.mod_pow(c, k, self.n2)


@dataclass(frozen=True)
class PrivateKey:
    lam: int
    mu: int
    public_key: PublicKey
    p: Optional[int] = None
    q: Optional[int] = None

    def __post_init__(self):
        if (self.p is None) != (self.q is None):
            raise ValueError("p and q must be given together")
        object.__setattr__(self, "lam", operator.index(self.lam))
        object.__setattr__(self, "mu", operator.index(self.mu))
        if self.p is not None:
            object.__setattr__(self, "p", operator.index(self.p))
            object.__setattr__(self, "q", operator.index(self.q))

    @property
    def factors(self) -> Optional[Tuple[int, int]]:
        """(p, q) when the factorization of n is known, None otherwise."""
        if self.p is None:
            return None
        return self.p, self.q

    @property
    def bit_length(self) -> int:
        return self.public_key.bit_length

    @property
    def n(self) -> int:
        return self.public_key.n

    def decrypt(self, c: int) -> int:
        n = self.public_key.n
        crt_factors = None
        if self.factors is not None:
            p, q = self.factors
            crt_factors = {p: 2, q: 2}
        u = arith.mod_pow(c, self.lam, self.public_key.n2, crt_factors)
        return (L(u, n) * self.mu) % n

    def get_random_factor(self, c: int) -> int:
        """
        Recover the random factor r used to encrypt ``c``.

        Only possible with keys generated with the simple variant (g = n + 1)
        and when p and q are known.
        """
        if self.public_key.g != self.n + 1:
            raise GeneratorVariantError("get_random_factor", self.bit_length)
        if self.factors is None:
            raise MissingFactorizationError("get_random_factor", self.bit_length)
        p, q = self.factors
        m = self.decrypt(c)
        phi = (p - 1) * (q - 1)
        n_inv_mod_phi = arith.mod_inv(self.n, phi)
        c1 = c * (1 - m * self.n) % self.public_key.n2
        return arith.mod_pow(c1, n_inv_mod_phi, self.n, {p: 1, q: 1})


class KeyPair(NamedTuple):
    public_key: PublicKey
    private_key: PrivateKey


def get_generator(n: int, n2: int) -> int:
    # alpha, beta coprime with n so that L(g^lambda mod n2) is invertible mod n
    alpha = arith.rand_between(n)
    while arith.gcd(alpha, n) != 1:
        alpha = arith.rand_between(n)
    beta = arith.rand_between(n)
    while arith.gcd(beta, n) != 1:
        beta = arith.rand_between(n)
    return ((alpha * n + 1) * arith.mod_pow(beta, n, n2)) % n2


def _check_bitlength(bitlength: int) -> None:
    if bitlength < 8:
        raise ValueError("bitlength must be >= 8")


def _accept_primes(p: int, q: int, bitlength: int, attempt: int) -> bool:
    # p has bitlength // 2 + 1 bits, q has bitlength // 2 -> 2**(bitlength - 1) <= n < 2**(bitlength + 1)
    n = p * q
    if p != q and arith.bit_length(n) == bitlength and arith.gcd(n, (p - 1) * (q - 1)) == 1:
        return True
    logger.debug(
        "Discarding prime pair (attempt %d): n is not %d bits, p == q or gcd(n, phi(n)) != 1",
        attempt,
        bitlength,
    )
    return False


def _build_key_pair(p: int, q: int, simple_variant: bool) -> KeyPair:
    n = p * q
    if simple_variant:
        # p, q of similar length: g=n+1, lambda=(p-1)(q-1), mu=lambda^-1 mod n
        g = n + 1
        lam = (p - 1) * (q - 1)
        mu = arith.mod_inv(lam, n)
    else:
        n2 = n * n
        g = get_generator(n, n2)
        lam = arith.lcm(p - 1, q - 1)
        mu = arith.mod_inv(L(arith.mod_pow(g, lam, n2), n), n)

    public_key = PublicKey(n, g)
    private_key = PrivateKey(lam, mu, public_key, p, q)
    logger.info(
        "Generated %d-bit Paillier key pair (%s variant)",
        public_key.bit_length,
        "simple" if simple_variant else "full",
    )
    return KeyPair(public_key, private_key)


async def generate_random_keys(
    bitlength: int = DEFAULT_BITLENGTH,
    simple_variant: bool = False,
    *,
    prime: Optional[Callable[[int], Awaitable[int]]] = None,
) -> KeyPair:
    """
    Generate a Paillier key pair whose public modulus has exactly ``bitlength`` bits.

    ``simple_variant`` sets g = n + 1, which is REQUIRED to later recover the
    random factor of a ciphertext (see ``PrivateKey.get_random_factor``).
    The two primes are searched concurrently; ``prime`` replaces the default
    async probable-prime source ``arith.prime``.
    """
    _check_bitlength(bitlength)
    if prime is None:
        prime = arith.prime

    found = {}

    async def search(name: str, bits: int) -> None:
        found[name] = await prime(bits)

    attempt = 0
    while True:
        attempt += 1
        async with anyio.create_task_group() as tg:
            tg.start_soon(search, "p", bitlength // 2 + 1)
            tg.start_soon(search, "q", bitlength // 2)
        if _accept_primes(found["p"], found["q"], bitlength, attempt):
            break

    return _build_key_pair(found["p"], found["q"], simple_variant)


def generate_random_keys_sync(
    bitlength: int = DEFAULT_BITLENGTH,
    simple_variant: bool = False,
    *,
    prime: Optional[Callable[[int], int]] = None,
) -> KeyPair:
    """Blocking counterpart of ``generate_random_keys``; the primes are searched one after the other."""
    _check_bitlength(bitlength)
    if prime is None:
        prime = arith.prime_sync

    attempt = 0
    while True:
        attempt += 1
        p = prime(bitlength // 2 + 1)
        q = prime(bitlength // 2)
        if _accept_primes(p, q, bitlength, attempt):
            break

    return _build_key_pair(p, q, simple_variant)
