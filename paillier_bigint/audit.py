"""Vérifie qu'une paire de clés Paillier respecte les invariants du schéma.

Usage: paillier-audit --bits 1024 --simple
"""

import argparse
import logging
import sys

from paillier_bigint import arith
from paillier_bigint.errors import PaillierError
from paillier_bigint.paillier import KeyPair, generate_random_keys_sync


def check_keypair(key_pair: KeyPair, trials: int = 8) -> dict:
    if trials < 1:
        raise ValueError("trials must be >= 1")
    pub, priv = key_pair
    n = pub.n
    simple_variant = pub.g == n + 1
    violations = []

    if priv.factors is not None:
        p, q = priv.factors
        if p * q != n:
            violations.append("p·q != n")
        if p == q:
            violations.append("p == q")

    try:
        numbers = [arith.rand_between(n - 1, 0) for _ in range(trials)]
        ciphertexts = [pub.encrypt(m) for m in numbers]

        for m, c in zip(numbers, ciphertexts):
            if priv.decrypt(c) != m:
                violations.append(f"D(E(m)) != m for a {m.bit_length()}-bit plaintext")
                break

        if priv.decrypt(pub.addition(*ciphertexts)) != sum(numbers) % n:
            violations.append("homomorphic addition")

        if priv.decrypt(pub.plaintext_addition(ciphertexts[0], *numbers[1:])) != sum(numbers) % n:
            violations.append("plaintext addition")

        k = arith.rand_between(n - 1)
        if priv.decrypt(pub.multiply(ciphertexts[0], k)) != k * numbers[0] % n:
            violations.append("scalar multiplication")

        if simple_variant and priv.factors is not None:
            r = arith.rand_between(n - 1)
            if priv.get_random_factor(pub.encrypt(numbers[0], r)) != r:
                violations.append("random factor recovery")
    except (PaillierError, ValueError) as exc:
        violations.append(f"{type(exc).__name__}: {exc}")

    return {
        "check": "paillier_keypair",
        "bit_length": pub.bit_length,
        "simple_variant": simple_variant,
        "violations": violations,
        "passed": len(violations) == 0,
    }


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Generate a Paillier key pair and audit it.")
    parser.add_argument("--bits", type=int, default=2048, help="bit length of the public modulus")
    parser.add_argument("--simple", action="store_true", help="use the simple variant (g = n + 1)")
    parser.add_argument("--trials", type=int, default=8, help="number of random plaintexts to test")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format="%(levelname)s: %(message)s")

    result = check_keypair(generate_random_keys_sync(args.bits, args.simple), trials=args.trials)
    status = "✅ PASS" if result["passed"] else "❌ FAIL"
    variant = "simple" if result["simple_variant"] else "full"
    print(f"{status} – Paillier {result['bit_length']} bits ({variant}), {len(result['violations'])} violation(s)")
    for v in result["violations"]:
        print(f"  ⚠️  {v}")
    return 0 if result["passed"] else 1


if __name__ == "__main__":
    sys.exit(main())
