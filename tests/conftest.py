"""
Poseidon-EdDSA Test Fixtures
"""

import hashlib

import pytest

from poseidon_eddsa.curves import (
    BN254Fr,
    BLS12381Fr,
    ED_ON_BN254_TWIST,
)
from poseidon_eddsa.keys import SigningKey
from poseidon_eddsa.poseidon import poseidon_config
from poseidon_eddsa.protocol import EdDSAScheme


FIXTURE_MESSAGE = b"xxx yyy <<< zzz >>> bunny"


def counter_rng(start: int = 0):
    """Deterministic stand-in for ``secrets.token_bytes``."""
    state = {"n": start}

    def draw(n: int) -> bytes:
        state["n"] += 1
        return hashlib.sha256(state["n"].to_bytes(8, "little")).digest()[:n].ljust(n, b"\x00")

    return draw


@pytest.fixture(scope="session")
def bn254_poseidon():
    """Poseidon (rate 4, R_F 8, R_P 60) over the BN254 scalar field."""
    return poseidon_config(BN254Fr, 4, 8, 60)


@pytest.fixture(scope="session")
def bls_poseidon():
    """Poseidon (rate 4, R_F 8, R_P 60) over the BLS12-381 scalar field."""
    return poseidon_config(BLS12381Fr, 4, 8, 60)


@pytest.fixture(scope="session")
def scheme() -> EdDSAScheme:
    """Default scheme: Baby-JubJub twist, Blake2b, (4, 8, 60)."""
    return EdDSAScheme.setup()


@pytest.fixture
def zero_key() -> SigningKey:
    """Signing key from the all-zero seed on the Baby-JubJub twist."""
    return SigningKey.from_bytes(bytes(32), ED_ON_BN254_TWIST, hashlib.blake2b)


@pytest.fixture
def fixture_message():
    """The fixture message as a single base-field element."""
    return BN254Fr.from_le_bytes_mod_order(FIXTURE_MESSAGE)
