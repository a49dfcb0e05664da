import functools

import pytest

from paillier_bigint import (
    GeneratorVariantError,
    MissingFactorizationError,
    PaillierError,
    PrivateKey,
    PublicKey,
    generate_random_keys_sync,
)
from paillier_bigint import arith

TESTS = 16


@functools.lru_cache(maxsize=None)
def _keys(bits: int, simple_variant: bool):
    return generate_random_keys_sync(bits, simple_variant)


KEY_PARAMS = [
    pytest.param(1024, False, id="1024-full"),
    pytest.param(1024, True, id="1024-simple"),
    pytest.param(2048, False, id="2048-full", marks=pytest.mark.slow),
    pytest.param(2048, True, id="2048-simple", marks=pytest.mark.slow),
    pytest.param(3072, False, id="3072-full", marks=pytest.mark.slow),
    pytest.param(3072, True, id="3072-simple", marks=pytest.mark.slow),
]


@pytest.mark.parametrize("bits, simple_variant", KEY_PARAMS)
def test_encrypt_decrypt_roundtrip(bits, simple_variant):
    pub, priv = _keys(bits, simple_variant)
    assert pub.bit_length == bits
    for msg in [0, 1, 5, 42, pub.n - 1]:
        assert priv.decrypt(pub.encrypt(msg)) == msg
    for _ in range(TESTS):
        msg = arith.rand_between(pub.n - 1, 0)
        c = pub.encrypt(msg)
        assert 0 <= c < pub.n2
        assert priv.decrypt(c) == msg


@pytest.mark.parametrize("bits, simple_variant", KEY_PARAMS)
def test_homomorphic_addition(bits, simple_variant):
    pub, priv = _keys(bits, simple_variant)
    numbers = [arith.rand_between(pub.n - 1, 0) for _ in range(TESTS)]
    ciphertexts = [pub.encrypt(m) for m in numbers]
    enc_sum = pub.addition(*ciphertexts)
    assert priv.decrypt(enc_sum) == sum(numbers) % pub.n


def test_addition_of_two_small_votes(full_keys):
    pub, priv = full_keys
    agg = pub.addition(pub.encrypt(1), pub.encrypt(1))
    assert priv.decrypt(agg) == 2


def test_addition_of_a_single_ciphertext_is_identity(full_keys):
    pub, priv = full_keys
    c = pub.encrypt(7)
    assert pub.addition(c) == c
    assert pub.addition() == 1
    assert priv.decrypt(pub.addition()) == 0


def test_plaintext_addition(full_keys):
    pub, priv = full_keys
    base = pub.encrypt(3)
    assert priv.decrypt(pub.plaintext_addition(base, 4)) == 7

    m = arith.rand_between(pub.n - 1, 0)
    plaintexts = [arith.rand_between(pub.n - 1, 0) for _ in range(5)]
    agg = pub.plaintext_addition(pub.encrypt(m), *plaintexts)
    assert priv.decrypt(agg) == (m + sum(plaintexts)) % pub.n


@pytest.mark.parametrize("bits, simple_variant", KEY_PARAMS)
def test_scalar_multiplication(bits, simple_variant):
    pub, priv = _keys(bits, simple_variant)
    for _ in range(4):
        m = arith.rand_between(pub.n - 1, 0)
        c = pub.encrypt(m)
        assert priv.decrypt(pub.multiply(c, m)) == pow(m, 2, pub.n)
        k = arith.rand_between(pub.n - 1, 0)
        assert priv.decrypt(pub.multiply(c, k)) == k * m % pub.n


def test_multiply_by_negative_scalar(simple_keys):
    pub, priv = simple_keys
    c = pub.encrypt(10)
    assert priv.decrypt(pub.multiply(c, -1)) == pub.n - 10


def test_encryption_is_not_deterministic(full_keys):
    pub, priv = full_keys
    c1 = pub.encrypt(42)
    c2 = pub.encrypt(42)
    assert c1 != c2
    assert priv.decrypt(c1) == priv.decrypt(c2) == 42


def test_encryption_with_fixed_random_factor_is_deterministic(full_keys):
    pub, _ = full_keys
    r = arith.rand_between(pub.n - 1)
    assert pub.encrypt(42, r) == pub.encrypt(42, r)


def test_simple_variant_generator(simple_keys):
    pub, priv = simple_keys
    assert pub.g == pub.n + 1
    p, q = priv.factors
    assert priv.lam == (p - 1) * (q - 1)


def test_recover_random_factor():
    pub, priv = generate_random_keys_sync(512, simple_variant=True)
    for _ in range(50):
        m = arith.rand_between(pub.n - 1)
        r = arith.rand_between(pub.n - 1)
        c = pub.encrypt(m, r)
        assert priv.get_random_factor(c) == r


def test_recover_random_factor_requires_simple_variant():
    pub, priv = generate_random_keys_sync(512)
    c = pub.encrypt(arith.rand_between(pub.n - 1), arith.rand_between(pub.n - 1))
    with pytest.raises(GeneratorVariantError) as excinfo:
        priv.get_random_factor(c)
    assert excinfo.value.operation == "get_random_factor"
    assert excinfo.value.bit_length == 512
    assert isinstance(excinfo.value, ValueError)
    assert not isinstance(excinfo.value, MissingFactorizationError)


def test_recover_random_factor_requires_p_and_q():
    pub, priv = generate_random_keys_sync(512, simple_variant=True)
    priv_without_factors = PrivateKey(priv.lam, priv.mu, pub)
    c = pub.encrypt(arith.rand_between(pub.n - 1), arith.rand_between(pub.n - 1))
    with pytest.raises(MissingFactorizationError) as excinfo:
        priv_without_factors.get_random_factor(c)
    assert excinfo.value.bit_length == 512
    assert isinstance(excinfo.value, PaillierError)
    assert not isinstance(excinfo.value, GeneratorVariantError)


@pytest.mark.parametrize("simple_variant", [False, True])
def test_private_key_from_known_parameters(simple_variant):
    pub, priv = _keys(1024, simple_variant)
    rebuilt = PrivateKey(priv.lam, priv.mu, pub)
    assert rebuilt.factors is None
    assert rebuilt.bit_length == 1024
    assert rebuilt.n == pub.n
    for _ in range(TESTS):
        c = pub.encrypt(arith.rand_between(pub.n - 1, 0))
        assert rebuilt.decrypt(c) == priv.decrypt(c)


def test_public_key_from_known_parameters(full_keys):
    pub, priv = full_keys
    rebuilt = PublicKey(pub.n, pub.g)
    assert rebuilt == pub
    assert rebuilt.n2 == pub.n * pub.n
    assert priv.decrypt(rebuilt.encrypt(1234)) == 1234


def test_private_key_needs_both_factors(simple_keys):
    pub, priv = simple_keys
    p, _ = priv.factors
    with pytest.raises(ValueError):
        PrivateKey(priv.lam, priv.mu, pub, p=p)


def test_keys_reject_non_integers():
    with pytest.raises(TypeError):
        PublicKey(15.0, 16)


def test_keys_are_immutable(full_keys):
    pub, priv = full_keys
    with pytest.raises(AttributeError):
        pub.n = 15
    with pytest.raises(AttributeError):
        priv.mu = 1
