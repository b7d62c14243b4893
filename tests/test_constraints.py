"""
Circuit verification gadget tests.

Each test synthesises a full verification circuit, so the set is kept
small: one valid run per base field plus the corruption cases.
"""

import hashlib

import pytest

from poseidon_eddsa.constraints import alloc_verification_inputs, verify
from poseidon_eddsa.curve_var import AffineVar
from poseidon_eddsa.curves import (
    BANDERSNATCH,
    BN254Fr,
    ED_ON_BN254,
    ED_ON_BN254_TWIST,
)
from poseidon_eddsa.keys import SigningKey
from poseidon_eddsa.nonnative import NonNativeFieldVar
from poseidon_eddsa.poseidon import poseidon_config
from poseidon_eddsa.r1cs import TRUE, ConstraintSystem, FpVar
from poseidon_eddsa.signature import Signature
from poseidon_eddsa.signing import verify_signature

from .conftest import FIXTURE_MESSAGE, counter_rng


def run_gadget(config, public_key, signature, message):
    cs = ConstraintSystem(public_key.curve.base_field)
    pk_var, sig_var, msg_vars = alloc_verification_inputs(cs, public_key, signature, message)
    result = verify(cs, config, pk_var, sig_var, msg_vars)
    return cs, result


class TestGadgetVerify:
    """Native and in-circuit verification agree."""

    def test_fixture_vector(self, zero_key, fixture_message, bn254_poseidon):
        sig = zero_key.sign(bn254_poseidon, fixture_message)
        zero_key.public_key.verify(bn254_poseidon, fixture_message, sig)

        cs, res = run_gadget(bn254_poseidon, zero_key.public_key, sig, fixture_message)
        res.enforce_equal(TRUE)
        assert res.value
        assert cs.is_satisfied()
        assert cs.num_constraints > 0

    def test_single_variable_message(self, zero_key, fixture_message, bn254_poseidon):
        sig = zero_key.sign(bn254_poseidon, fixture_message)
        cs = ConstraintSystem(BN254Fr)
        pk_var, sig_var, _ = alloc_verification_inputs(cs, zero_key.public_key, sig, [])
        msg_var = FpVar.new_witness(cs, fixture_message)
        assert verify(cs, bn254_poseidon, pk_var, sig_var, msg_var).value
        assert cs.is_satisfied()

    def test_corrupted_s(self, zero_key, bn254_poseidon):
        sig = zero_key.sign(bn254_poseidon, FIXTURE_MESSAGE)
        bad = Signature(R=sig.R, S=sig.S + 1)
        assert not verify_signature(zero_key.public_key, bn254_poseidon, FIXTURE_MESSAGE, bad)

        cs, res = run_gadget(bn254_poseidon, zero_key.public_key, bad, FIXTURE_MESSAGE)
        assert res.value is False
        assert cs.is_satisfied()

        res.enforce_equal(TRUE)
        assert not cs.is_satisfied()

    def test_corrupted_r(self, zero_key, bn254_poseidon):
        sig = zero_key.sign(bn254_poseidon, FIXTURE_MESSAGE)
        bad = Signature(R=sig.R + ED_ON_BN254_TWIST.generator, S=sig.S)
        native = verify_signature(zero_key.public_key, bn254_poseidon, FIXTURE_MESSAGE, bad)

        cs, res = run_gadget(bn254_poseidon, zero_key.public_key, bad, FIXTURE_MESSAGE)
        assert res.value is False
        assert res.value == native
        assert cs.is_satisfied()

    def test_corrupted_message(self, zero_key, bn254_poseidon):
        sig = zero_key.sign(bn254_poseidon, [1, 2, 3])
        cs, res = run_gadget(bn254_poseidon, zero_key.public_key, sig, [1, 2, 4])
        assert res.value is False
        assert cs.is_satisfied()

    def test_wrong_public_key(self, zero_key, bn254_poseidon):
        other = SigningKey.generate(ED_ON_BN254_TWIST, rng=counter_rng(3))
        sig = zero_key.sign(bn254_poseidon, 5)
        cs, res = run_gadget(bn254_poseidon, other.public_key, sig, 5)
        assert res.value is False
        assert cs.is_satisfied()

    def test_poseidon_mismatch(self, zero_key, bn254_poseidon):
        sig = zero_key.sign(bn254_poseidon, 5)
        other = poseidon_config(BN254Fr, 4, 8, 57)
        cs, res = run_gadget(other, zero_key.public_key, sig, 5)
        assert res.value is False

    def test_bls_base_field(self, bls_poseidon):
        key = SigningKey.generate(BANDERSNATCH, hashlib.sha512, counter_rng(4))
        sig = key.sign(bls_poseidon, b"bandersnatch")
        cs, res = run_gadget(bls_poseidon, key.public_key, sig, b"bandersnatch")
        res.enforce_equal(TRUE)
        assert cs.is_satisfied()

    def test_field_mismatch(self, zero_key, bls_poseidon, bn254_poseidon):
        sig = zero_key.sign(bn254_poseidon, 5)
        cs = ConstraintSystem(BN254Fr)
        pk_var, sig_var, msg_vars = alloc_verification_inputs(cs, zero_key.public_key, sig, 5)
        with pytest.raises(ValueError):
            verify(cs, bls_poseidon, pk_var, sig_var, msg_vars)

    def test_scalar_field_mismatch(self, bn254_poseidon):
        cs = ConstraintSystem(BN254Fr)
        pk = AffineVar.new_constant(ED_ON_BN254, ED_ON_BN254.generator)
        s = NonNativeFieldVar.new_constant(BN254Fr, BN254Fr(1))
        with pytest.raises(ValueError):
            verify(cs, bn254_poseidon, pk, (pk, s), [])
