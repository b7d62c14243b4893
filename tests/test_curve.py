"""
Field and twisted-Edwards curve tests.
"""

import pytest

from poseidon_eddsa.curve import Point
from poseidon_eddsa.curves import (
    BANDERSNATCH,
    BN254Fr,
    CURVES,
    ED_ON_BLS12_381,
    ED_ON_BN254,
    ED_ON_BN254_TWIST,
    get_curve,
    twist,
    untwist,
)
from poseidon_eddsa.errors import InvalidData
from poseidon_eddsa.field import prime_field, sqrt_mod


ALL_CURVES = [ED_ON_BN254, ED_ON_BN254_TWIST, ED_ON_BLS12_381, BANDERSNATCH]


# =============================================================================
# Fields
# =============================================================================

class TestPrimeField:
    """Tests for PrimeField specialisations."""

    def test_prime_field_is_memoised(self):
        assert prime_field(BN254Fr.field_modulus) is BN254Fr

    def test_sizes(self):
        assert BN254Fr.bit_size == 254
        assert BN254Fr.byte_size == 32

    def test_bytes_roundtrip(self):
        x = BN254Fr(0x1234567890ABCDEF)
        data = x.to_bytes()
        assert len(data) == 32
        assert data[0] == 0xEF
        assert BN254Fr.from_bytes(data) == x

    def test_from_bytes_rejects_modulus(self):
        data = BN254Fr.field_modulus.to_bytes(32, "little")
        with pytest.raises(InvalidData):
            BN254Fr.from_bytes(data)

    def test_from_bytes_rejects_wrong_length(self):
        with pytest.raises(InvalidData):
            BN254Fr.from_bytes(bytes(31))

    def test_from_le_bytes_mod_order_reduces(self):
        p = BN254Fr.field_modulus
        data = (p + 5).to_bytes(33, "little")
        assert BN254Fr.from_le_bytes_mod_order(data) == BN254Fr(5)

    def test_sqrt(self):
        x = BN254Fr(123456789)
        r = (x * x).sqrt()
        assert r in (x, -x)

    def test_sqrt_of_non_residue(self):
        p = 13
        assert sqrt_mod(5, p) is None
        assert sqrt_mod(4, p) in (2, 11)

    def test_lexicographically_largest(self):
        assert not BN254Fr(1).lexicographically_largest()
        assert BN254Fr(-1).lexicographically_largest()

    def test_random_in_range(self):
        x = BN254Fr.random()
        assert 0 <= x.n < BN254Fr.field_modulus

    def test_inverse_of_zero(self):
        with pytest.raises(ZeroDivisionError):
            BN254Fr(0).inv()


# =============================================================================
# Curves
# =============================================================================

class TestCurveParameters:
    """Tests for curve constants."""

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_generator_has_prime_order(self, curve):
        G = curve.generator
        assert G.is_on_curve()
        assert not G.is_identity()
        assert (G * curve.order).is_identity()

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_cofactor_inverse(self, curve):
        assert (curve.cofactor * curve.cofactor_inv).n == 1

    def test_registry(self):
        assert set(CURVES) == {
            "ed_on_bn254", "ed_on_bn254_twist", "ed_on_bls12_381", "bandersnatch",
        }
        assert get_curve("bandersnatch") is BANDERSNATCH

    def test_unknown_curve(self):
        with pytest.raises(ValueError, match="unknown curve"):
            get_curve("secp256k1")


class TestPoint:
    """Tests for affine point arithmetic."""

    def test_identity_laws(self):
        G = ED_ON_BN254.generator
        O = ED_ON_BN254.identity
        assert G + O == G
        assert (G - G).is_identity()
        assert (G * 0).is_identity()

    def test_scalar_mul_distributes(self):
        G = ED_ON_BLS12_381.generator
        assert G * 5 + G * 7 == G * 12
        assert G.double() == G * 2

    def test_scalar_mul_le_matches_int(self):
        G = BANDERSNATCH.generator
        bits = [bool((29 >> i) & 1) for i in range(5)]
        assert G.scalar_mul_le(bits) == G * 29

    def test_scalar_field_element(self):
        G = ED_ON_BN254.generator
        s = ED_ON_BN254.scalar_field(99)
        assert G * s == G * 99 == 99 * G

    @pytest.mark.parametrize("curve", ALL_CURVES, ids=lambda c: c.name)
    def test_compressed_roundtrip(self, curve):
        for k in (1, 2, 12345):
            P = curve.generator * k
            data = P.to_bytes_compressed()
            assert len(data) == curve.compressed_point_size
            assert Point.from_bytes_compressed(curve, data) == P
            assert Point.from_bytes_compressed(curve, (-P).to_bytes_compressed()) == -P

    def test_uncompressed_roundtrip(self):
        P = ED_ON_BN254_TWIST.generator * 77
        data = P.to_bytes_uncompressed()
        assert len(data) == 64
        assert Point.from_bytes_uncompressed(ED_ON_BN254_TWIST, data) == P

    def test_rejects_off_curve(self):
        with pytest.raises(InvalidData, match="not on the curve"):
            Point.from_xy(ED_ON_BN254, 1, 1)

    def test_rejects_low_order_point(self):
        p = ED_ON_BN254.base_field.field_modulus
        # (0, -1) has order 2
        with pytest.raises(InvalidData, match="subgroup"):
            Point.from_xy(ED_ON_BN254, 0, p - 1)

    def test_rejects_non_canonical_y(self):
        data = b"\xff" * 31 + b"\x7f"
        with pytest.raises(InvalidData):
            Point.from_bytes_compressed(ED_ON_BN254, data)

    def test_rejects_wrong_length(self):
        with pytest.raises(InvalidData):
            Point.from_bytes_compressed(ED_ON_BN254, bytes(31))
        with pytest.raises(InvalidData):
            Point.from_bytes_uncompressed(ED_ON_BN254, bytes(32))

    def test_points_on_different_curves_differ(self):
        a = ED_ON_BN254.identity
        b = ED_ON_BN254_TWIST.identity
        assert a != b


class TestTwist:
    """Tests for the Baby-JubJub twist isomorphism."""

    def test_untwist_lands_on_curve(self):
        P = untwist(ED_ON_BN254_TWIST.generator)
        assert P.curve is ED_ON_BN254
        assert P.is_on_curve()
        assert P.is_in_prime_subgroup()

    def test_untwist_is_homomorphic(self):
        G = ED_ON_BN254_TWIST.generator
        assert untwist(G * 31) == untwist(G) * 31
        assert untwist(G * 3 + G * 4) == untwist(G * 3) + untwist(G * 4)

    def test_twist_inverts_untwist(self):
        P = ED_ON_BN254_TWIST.generator * 5
        assert twist(untwist(P)) == P

    def test_wrong_curve(self):
        with pytest.raises(ValueError):
            twist(ED_ON_BN254_TWIST.generator)
        with pytest.raises(ValueError):
            untwist(ED_ON_BN254.generator)
