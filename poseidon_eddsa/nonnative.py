"""
Nonnative field variables.

The signature scalar *S* lives in the curve's scalar field  Z_r, while
the circuit is built over the base field  Z_p.  ``NonNativeFieldVar``
emulates an element of  Z_r  as little-endian limbs of ``limb_bits``
bits each, every limb an allocated native variable with its own range
check (bit decomposition), plus one canonicity check over the whole bit
string (value ≤ r − 1) so the representation is unique.

Only what the verification gadget needs is provided: allocation, the
canonical bit view, and equality.
"""

from __future__ import annotations

from typing import List, Sequence, Type

from .errors import SynthesisError
from .field import PrimeField
from .r1cs import ONE, Boolean, ConstraintSystem, FpVar, _lc_add

DEFAULT_LIMB_BITS = 64


class NonNativeFieldVar:
    """Element of *target_field* emulated over the circuit's native field."""

    __slots__ = ("target_field", "limbs", "_bits", "limb_bits")

    def __init__(
        self,
        target_field: Type[PrimeField],
        limbs: Sequence[FpVar],
        bits: Sequence[Boolean],
        limb_bits: int,
    ) -> None:
        self.target_field = target_field
        self.limbs = list(limbs)
        self._bits = list(bits)
        self.limb_bits = limb_bits

    # constructors -----------------------------------------------------------
    @classmethod
    def new_witness(
        cls,
        cs: ConstraintSystem,
        value: PrimeField,
        limb_bits: int = DEFAULT_LIMB_BITS,
    ) -> NonNativeFieldVar:
        target = type(value)
        if limb_bits >= cs.field.bit_size - 1:
            raise SynthesisError("limbs must fit the native field")
        p = cs.field.field_modulus

        all_bits: List[Boolean] = []
        limbs: List[FpVar] = []
        for start in range(0, target.bit_size, limb_bits):
            width = min(limb_bits, target.bit_size - start)
            limb_value = (value.n >> start) & ((1 << width) - 1)
            limb = FpVar.new_witness(cs, limb_value)
            bits = [
                Boolean.new_witness(cs, bool((limb_value >> i) & 1))
                for i in range(width)
            ]
            # range check:  limb = Σ bits[i]·2^i
            packed = {}
            for i, b in enumerate(bits):
                packed = _lc_add(packed, b.lc, 1 << i, p)
            cs.enforce(packed, {ONE: 1}, limb.lc, "nonnative/limb_range")
            limbs.append(limb)
            all_bits.extend(bits)

        Boolean.enforce_smaller_or_equal_than_le(all_bits, target.field_modulus - 1)
        return cls(target, limbs, all_bits, limb_bits)

    @classmethod
    def new_constant(
        cls,
        native_field: Type[PrimeField],
        value: PrimeField,
        limb_bits: int = DEFAULT_LIMB_BITS,
    ) -> NonNativeFieldVar:
        target = type(value)
        bits = [Boolean.constant(b) for b in value.bits_le()]
        limbs = [
            FpVar.constant(native_field, (value.n >> start) & ((1 << limb_bits) - 1))
            for start in range(0, target.bit_size, limb_bits)
        ]
        return cls(target, limbs, bits, limb_bits)

    # accessors --------------------------------------------------------------
    @property
    def value(self) -> PrimeField:
        v = 0
        for i, limb in enumerate(self.limbs):
            v |= limb.value.n << (i * self.limb_bits)
        return self.target_field(v)

    def to_bits_le(self) -> List[Boolean]:
        return list(self._bits)

    # comparisons ------------------------------------------------------------
    def _check_compatible(self, other: NonNativeFieldVar) -> None:
        if other.target_field is not self.target_field or other.limb_bits != self.limb_bits:
            raise SynthesisError("nonnative variables have different layouts")

    def is_eq(self, other: NonNativeFieldVar) -> Boolean:
        """Limbs are canonical, so limb-wise equality is value equality."""
        self._check_compatible(other)
        return Boolean.kary_and([a.is_eq(b) for a, b in zip(self.limbs, other.limbs)])

    def enforce_equal(self, other: NonNativeFieldVar) -> None:
        self._check_compatible(other)
        for a, b in zip(self.limbs, other.limbs):
            a.enforce_equal(b)

    def __repr__(self) -> str:
        return f"NonNativeFieldVar({self.value!r}, limbs={len(self.limbs)})"
