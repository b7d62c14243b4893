"""
Rank-1 constraint system and its basic variable types.

A constraint is a triple of linear combinations  (A, B, C)  over the
allocated variables, satisfied when  ⟨A,z⟩ · ⟨B,z⟩ = ⟨C,z⟩  for the
assignment *z*.  Variable 0 is the constant one.

Witness values are computed eagerly alongside the constraints, so a
gadget can be both *synthesised* (constraints recorded) and *checked*
(``is_satisfied``) without a separate proving backend.

Types
-----
``FpVar``    native field variable: a linear combination plus its value.
             Linear operations are free; only variable × variable
             products and divisions allocate a constraint.
``Boolean``  0/1 variable, or a compile-time constant.

Operands that are plain ``int`` or ``PrimeField`` values are lifted to
constants, so code written against field elements (the Poseidon
permutation, for instance) runs unchanged over ``FpVar``.
"""

from __future__ import annotations

import logging
from functools import reduce
from typing import Dict, List, Optional, Sequence, Tuple, Type, Union

from .errors import SynthesisError
from .field import PrimeField

logger = logging.getLogger(__name__)

ONE = 0

LinearCombination = Dict[int, int]


def _lc_add(a: LinearCombination, b: LinearCombination, scale: int, p: int) -> LinearCombination:
    """a + scale·b  (mod p), dropping zero coefficients."""
    out = dict(a)
    for k, v in b.items():
        nv = (out.get(k, 0) + scale * v) % p
        if nv:
            out[k] = nv
        else:
            out.pop(k, None)
    return out


def _lc_scale(a: LinearCombination, s: int, p: int) -> LinearCombination:
    s %= p
    if s == 0:
        return {}
    return {k: v * s % p for k, v in a.items()}


# ── constraint system ───────────────────────────────────────────────────
class ConstraintSystem:
    """Constraint system over the prime field *field*."""

    def __init__(self, field: Type[PrimeField]) -> None:
        self.field = field
        self._values: List[int] = [1]
        self._public: List[bool] = [True]
        self._constraints: List[
            Tuple[LinearCombination, LinearCombination, LinearCombination, Optional[str]]
        ] = []

    # allocation -------------------------------------------------------------
    def alloc(self, value: Union[int, PrimeField], public: bool = False) -> int:
        self._values.append(int(value) % self.field.field_modulus)
        self._public.append(public)
        return len(self._values) - 1

    def new_witness(self, value: Union[int, PrimeField]) -> FpVar:
        return FpVar.new_witness(self, value)

    def new_input(self, value: Union[int, PrimeField]) -> FpVar:
        return FpVar.new_input(self, value)

    def enforce(
        self,
        a: LinearCombination,
        b: LinearCombination,
        c: LinearCombination,
        label: Optional[str] = None,
    ) -> None:
        """Record  a · b = c."""
        self._constraints.append((a, b, c, label))

    # evaluation -------------------------------------------------------------
    def evaluate(self, lc: LinearCombination) -> int:
        p = self.field.field_modulus
        return sum(coeff * self._values[idx] for idx, coeff in lc.items()) % p

    def which_is_unsatisfied(self) -> Optional[str]:
        """Label (or index) of the first violated constraint, else None."""
        p = self.field.field_modulus
        for i, (a, b, c, label) in enumerate(self._constraints):
            if self.evaluate(a) * self.evaluate(b) % p != self.evaluate(c):
                return label or f"constraint #{i}"
        return None

    def is_satisfied(self) -> bool:
        failing = self.which_is_unsatisfied()
        if failing is not None:
            logger.debug("constraint system unsatisfied at %s", failing)
            return False
        return True

    # counters ---------------------------------------------------------------
    @property
    def num_constraints(self) -> int:
        return len(self._constraints)

    @property
    def num_instance_variables(self) -> int:
        return sum(self._public)

    @property
    def num_witness_variables(self) -> int:
        return len(self._public) - self.num_instance_variables

    def __repr__(self) -> str:
        return (
            f"ConstraintSystem({self.field.__name__}, "
            f"constraints={self.num_constraints}, "
            f"witnesses={self.num_witness_variables})"
        )


def _join(a: Optional[ConstraintSystem], b: Optional[ConstraintSystem]) -> Optional[ConstraintSystem]:
    if a is None:
        return b
    if b is None or a is b:
        return a
    raise SynthesisError("variables belong to different constraint systems")


# ── FpVar  (native field variable) ──────────────────────────────────────
Operand = Union["FpVar", int, PrimeField]


class FpVar:
    """
    Field variable: linear combination ``lc`` with its current value.

    ``cs is None`` marks a constant; constants never allocate.
    """

    __slots__ = ("field", "cs", "lc", "_value")

    def __init__(
        self,
        field: Type[PrimeField],
        lc: LinearCombination,
        value: int,
        cs: Optional[ConstraintSystem] = None,
    ) -> None:
        self.field = field
        self.cs = cs
        self.lc = lc
        self._value = value

    # constructors -----------------------------------------------------------
    @classmethod
    def constant(cls, field: Type[PrimeField], value: Union[int, PrimeField]) -> FpVar:
        v = int(value) % field.field_modulus
        return cls(field, {ONE: v} if v else {}, v)

    @classmethod
    def new_witness(cls, cs: ConstraintSystem, value: Union[int, PrimeField]) -> FpVar:
        idx = cs.alloc(value)
        return cls(cs.field, {idx: 1}, int(value) % cs.field.field_modulus, cs)

    @classmethod
    def new_input(cls, cs: ConstraintSystem, value: Union[int, PrimeField]) -> FpVar:
        idx = cs.alloc(value, public=True)
        return cls(cs.field, {idx: 1}, int(value) % cs.field.field_modulus, cs)

    # accessors --------------------------------------------------------------
    @property
    def value(self) -> PrimeField:
        return self.field(self._value)

    @property
    def is_constant(self) -> bool:
        return self.cs is None

    def _lift(self, other: Operand) -> FpVar:
        if isinstance(other, FpVar):
            if other.field is not self.field:
                raise SynthesisError("variables live in different fields")
            return other
        if isinstance(other, (int, PrimeField)):
            return FpVar.constant(self.field, other)
        return NotImplemented

    @property
    def _p(self) -> int:
        return self.field.field_modulus

    # linear operations ------------------------------------------------------
    def __add__(self, other: Operand) -> FpVar:
        o = self._lift(other)
        if o is NotImplemented:
            return NotImplemented
        p = self._p
        return FpVar(
            self.field,
            _lc_add(self.lc, o.lc, 1, p),
            (self._value + o._value) % p,
            _join(self.cs, o.cs),
        )

    __radd__ = __add__

    def __neg__(self) -> FpVar:
        p = self._p
        return FpVar(self.field, _lc_scale(self.lc, -1, p), (-self._value) % p, self.cs)

    def __sub__(self, other: Operand) -> FpVar:
        o = self._lift(other)
        if o is NotImplemented:
            return NotImplemented
        p = self._p
        return FpVar(
            self.field,
            _lc_add(self.lc, o.lc, -1, p),
            (self._value - o._value) % p,
            _join(self.cs, o.cs),
        )

    def __rsub__(self, other: Operand) -> FpVar:
        o = self._lift(other)
        if o is NotImplemented:
            return NotImplemented
        return o - self

    # multiplicative operations ----------------------------------------------
    def __mul__(self, other: Operand) -> FpVar:
        o = self._lift(other)
        if o is NotImplemented:
            return NotImplemented
        p = self._p
        value = self._value * o._value % p
        if o.is_constant:
            return FpVar(self.field, _lc_scale(self.lc, o._value, p), value, self.cs)
        if self.is_constant:
            return FpVar(self.field, _lc_scale(o.lc, self._value, p), value, o.cs)
        cs = _join(self.cs, o.cs)
        idx = cs.alloc(value)
        cs.enforce(self.lc, o.lc, {idx: 1})
        return FpVar(self.field, {idx: 1}, value, cs)

    __rmul__ = __mul__

    def square(self) -> FpVar:
        return self * self

    def __truediv__(self, other: Operand) -> FpVar:
        """
        Quotient  q  with  q · other = self.

        A zero variable divisor yields q = 0 in the witness and leaves the
        constraint unsatisfied (unless the dividend is zero too).
        """
        o = self._lift(other)
        if o is NotImplemented:
            return NotImplemented
        p = self._p
        if o.is_constant:
            if o._value == 0:
                raise ZeroDivisionError("division by constant zero")
            return self * pow(o._value, -1, p)
        inv = pow(o._value, -1, p) if o._value else 0
        value = self._value * inv % p
        cs = _join(self.cs, o.cs)
        idx = cs.alloc(value)
        cs.enforce({idx: 1}, o.lc, self.lc)
        return FpVar(self.field, {idx: 1}, value, cs)

    def __rtruediv__(self, other: Operand) -> FpVar:
        o = self._lift(other)
        if o is NotImplemented:
            return NotImplemented
        return o / self

    def inverse(self) -> FpVar:
        return FpVar.constant(self.field, 1) / self

    # comparisons ------------------------------------------------------------
    def is_eq(self, other: Operand) -> Boolean:
        diff = self - self._lift(other)
        if diff.is_constant:
            return Boolean.constant(diff._value == 0)
        cs, p = diff.cs, self._p
        eq = diff._value == 0
        eq_var = FpVar.new_witness(cs, int(eq))
        inv = FpVar.new_witness(cs, 0 if eq else pow(diff._value, -1, p))
        # diff · inv = 1 − eq   and   diff · eq = 0
        cs.enforce(diff.lc, inv.lc, _lc_add({ONE: 1}, eq_var.lc, -1, p), "is_eq/inverse")
        cs.enforce(diff.lc, eq_var.lc, {}, "is_eq/zero")
        return Boolean(eq_var)

    def enforce_equal(self, other: Operand) -> None:
        diff = self - self._lift(other)
        if diff.is_constant:
            if diff._value:
                raise SynthesisError("enforcing equality of unequal constants")
            return
        diff.cs.enforce(diff.lc, {ONE: 1}, {}, "enforce_equal")

    @staticmethod
    def select(cond: Boolean, true_value: Operand, false_value: Operand) -> FpVar:
        return cond.select(true_value, false_value)

    # bit decomposition ------------------------------------------------------
    def to_bits_le(self) -> List[Boolean]:
        """
        Canonical little-endian decomposition (value < p enforced), so
        exactly one bit string satisfies the constraints.
        """
        if self.is_constant:
            return [Boolean.constant(b) for b in self.value.bits_le()]
        cs, p = self.cs, self._p
        bits = [
            Boolean.new_witness(cs, bool((self._value >> i) & 1))
            for i in range(self.field.bit_size)
        ]
        packed: LinearCombination = {}
        for i, b in enumerate(bits):
            packed = _lc_add(packed, b.lc, pow(2, i, p), p)
        cs.enforce(packed, {ONE: 1}, self.lc, "to_bits_le/pack")
        Boolean.enforce_smaller_or_equal_than_le(bits, p - 1)
        return bits

    def __repr__(self) -> str:
        kind = "const" if self.is_constant else f"lc[{len(self.lc)}]"
        return f"FpVar({kind}, {self.value!r})"


# ── Boolean ─────────────────────────────────────────────────────────────
class Boolean:
    """A 0/1 circuit value, or a constant known at synthesis time."""

    __slots__ = ("_fp", "_const")

    TRUE: Boolean
    FALSE: Boolean

    def __init__(self, fp: Optional[FpVar] = None, const: Optional[bool] = None) -> None:
        self._fp = fp
        self._const = const

    @classmethod
    def constant(cls, value: bool) -> Boolean:
        return TRUE if value else FALSE

    @classmethod
    def new_witness(cls, cs: ConstraintSystem, value: bool) -> Boolean:
        fp = FpVar.new_witness(cs, int(bool(value)))
        # b · (1 − b) = 0
        cs.enforce(fp.lc, (1 - fp).lc, {}, "boolean")
        return cls(fp)

    # accessors --------------------------------------------------------------
    @property
    def is_constant(self) -> bool:
        return self._fp is None

    @property
    def value(self) -> bool:
        if self._fp is None:
            return bool(self._const)
        return self._fp._value == 1

    @property
    def lc(self) -> LinearCombination:
        if self._fp is None:
            return {ONE: 1} if self._const else {}
        return self._fp.lc

    def as_fpvar(self, field: Type[PrimeField]) -> FpVar:
        if self._fp is None:
            return FpVar.constant(field, int(bool(self._const)))
        return self._fp

    # logic ------------------------------------------------------------------
    def __and__(self, other: Boolean) -> Boolean:
        if self.is_constant:
            return other if self._const else FALSE
        if other.is_constant:
            return self if other._const else FALSE
        return Boolean(self._fp * other._fp)

    def __or__(self, other: Boolean) -> Boolean:
        if self.is_constant:
            return TRUE if self._const else other
        if other.is_constant:
            return TRUE if other._const else self
        a, b = self._fp, other._fp
        return Boolean(a + b - a * b)

    def __invert__(self) -> Boolean:
        if self.is_constant:
            return Boolean.constant(not self._const)
        return Boolean(1 - self._fp)

    def enforce_equal(self, other: Boolean) -> None:
        if self.is_constant and other.is_constant:
            if self._const != other._const:
                raise SynthesisError("enforcing equality of unequal constants")
            return
        field = (self._fp or other._fp).field
        self.as_fpvar(field).enforce_equal(other.as_fpvar(field))

    @staticmethod
    def kary_and(bits: Sequence[Boolean]) -> Boolean:
        return reduce(lambda acc, b: acc & b, bits, TRUE)

    @staticmethod
    def enforce_kary_nand(bits: Sequence[Boolean]) -> None:
        """At least one of *bits* is false."""
        Boolean.kary_and(bits).enforce_equal(FALSE)

    def select(self, true_value: Operand, false_value: Operand) -> FpVar:
        """cond ? t : f  as  cond · (t − f) + f."""
        if self.is_constant:
            chosen = true_value if self._const else false_value
            if isinstance(chosen, FpVar):
                return chosen
            return FpVar.constant(self._field_of(true_value, false_value), chosen)
        t = self._fp._lift(true_value)
        f = self._fp._lift(false_value)
        return self._fp * (t - f) + f

    @staticmethod
    def _field_of(*values: Operand) -> Type[PrimeField]:
        for v in values:
            if isinstance(v, FpVar):
                return v.field
            if isinstance(v, PrimeField):
                return type(v)
        raise SynthesisError("cannot infer field for a constant selection")

    # range checks -----------------------------------------------------------
    @staticmethod
    def enforce_smaller_or_equal_than_le(bits: Sequence[Boolean], bound: int) -> None:
        """
        Enforce  Σ bits[i]·2^i ≤ bound.

        Walks the bound's bits from the top, tracking whether the prefix
        of *bits* has matched every 1-bit of the bound so far; wherever the
        bound has a 0 and the prefix still matches, the bit must be 0.
        """
        bound_bits = [c == "1" for c in bin(bound)[2:]]    # big-endian
        width = len(bound_bits)
        bits = list(bits) + [FALSE] * max(0, width - len(bits))

        if len(bits) > width:
            overflow = FALSE
            for b in bits[width:]:
                overflow = overflow | b
            overflow.enforce_equal(FALSE)

        last_run = TRUE
        current_run: List[Boolean] = []
        for bound_bit, bit in zip(bound_bits, reversed(bits[:width])):
            if bound_bit:
                current_run.append(bit)
            else:
                if current_run:
                    current_run.append(last_run)
                    last_run = Boolean.kary_and(current_run)
                    current_run = []
                Boolean.enforce_kary_nand([last_run, bit])

    def __repr__(self) -> str:
        if self.is_constant:
            return f"Boolean({self._const})"
        return f"Boolean(var, {self.value})"


TRUE = Boolean(const=True)
FALSE = Boolean(const=False)
Boolean.TRUE = TRUE
Boolean.FALSE = FALSE
