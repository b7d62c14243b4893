"""
Twisted-Edwards point variables.

``AffineVar`` mirrors :class:`curve.Point` over ``FpVar`` coordinates.
Addition uses the same unified law as the native code,

    x₃ = (x₁y₂ + y₁x₂) / (1 + d·x₁x₂y₁y₂)
    y₃ = (y₁y₂ − a·x₁x₂) / (1 − d·x₁x₂y₁y₂),

costing 7 constraints when both operands are variables and fewer when
one is constant (products with constants are linear).
"""

from __future__ import annotations

from typing import Iterable, List

from .curve import CurveParameters, Point
from .r1cs import Boolean, ConstraintSystem, FpVar


class AffineVar:
    """Point on *curve* with circuit-variable coordinates."""

    __slots__ = ("curve", "x", "y")

    def __init__(self, curve: CurveParameters, x: FpVar, y: FpVar) -> None:
        self.curve = curve
        self.x = x
        self.y = y

    # constructors -----------------------------------------------------------
    @classmethod
    def new_constant(cls, curve: CurveParameters, point: Point) -> AffineVar:
        F = curve.base_field
        return cls(curve, FpVar.constant(F, point.x), FpVar.constant(F, point.y))

    @classmethod
    def identity(cls, curve: CurveParameters) -> AffineVar:
        return cls.new_constant(curve, curve.identity)

    @classmethod
    def new_witness_unchecked(cls, cs: ConstraintSystem, point: Point) -> AffineVar:
        """Allocate and enforce curve membership only."""
        _check_field(cs, point.curve)
        p = cls(point.curve, FpVar.new_witness(cs, point.x), FpVar.new_witness(cs, point.y))
        p.enforce_on_curve()
        return p

    @classmethod
    def new_witness(cls, cs: ConstraintSystem, point: Point) -> AffineVar:
        """
        Allocate a point of the prime-order subgroup.

        Allocates  Q = h⁻¹·P  (h the cofactor, inverse taken mod r) and
        returns  h·Q  computed in-circuit; anything of the form h·Q lies in
        the prime-order subgroup, and for a subgroup point h·Q = P.
        """
        curve = point.curve
        q = point * curve.cofactor_inv
        q_var = cls.new_witness_unchecked(cs, q)
        return q_var.scalar_mul_le(Boolean.constant(b) for b in _bits_le(curve.cofactor))

    # accessors --------------------------------------------------------------
    @property
    def value(self) -> Point:
        return Point(self.curve, self.x.value, self.y.value)

    def to_constraint_field(self) -> List[FpVar]:
        return [self.x, self.y]

    def enforce_on_curve(self) -> None:
        c = self.curve
        x2 = self.x.square()
        y2 = self.y.square()
        # a·x² + y² = 1 + d·x²·y²
        (x2 * c.a + y2).enforce_equal(1 + (x2 * y2) * c.d)

    # group operations -------------------------------------------------------
    def __add__(self, other: AffineVar) -> AffineVar:
        if not isinstance(other, AffineVar):
            return NotImplemented
        c = self.curve
        x1, y1, x2, y2 = self.x, self.y, other.x, other.y
        u = x1 * y2
        v = y1 * x2
        w = x1 * x2
        z = y1 * y2
        t = (w * z) * c.d
        x3 = (u + v) / (1 + t)
        y3 = (z - w * c.a) / (1 - t)
        return AffineVar(c, x3, y3)

    def double(self) -> AffineVar:
        return self + self

    def __neg__(self) -> AffineVar:
        return AffineVar(self.curve, -self.x, self.y)

    def __sub__(self, other: AffineVar) -> AffineVar:
        return self + (-other)

    @staticmethod
    def select(cond: Boolean, t: AffineVar, f: AffineVar) -> AffineVar:
        if cond.is_constant:
            return t if cond.value else f
        return AffineVar(t.curve, FpVar.select(cond, t.x, f.x), FpVar.select(cond, t.y, f.y))

    def scalar_mul_le(self, bits: Iterable[Boolean]) -> AffineVar:
        """
        Double-and-add over little-endian *bits*: every bit costs one
        conditional addition, whatever its value.
        """
        result = AffineVar.identity(self.curve)
        base = self
        bits = list(bits)
        for i, bit in enumerate(bits):
            if bit.is_constant:
                if bit.value:
                    result = result + base
            else:
                result = AffineVar.select(bit, result + base, result)
            if i + 1 < len(bits):
                base = base.double()
        return result

    # comparisons ------------------------------------------------------------
    def is_eq(self, other: AffineVar) -> Boolean:
        return self.x.is_eq(other.x) & self.y.is_eq(other.y)

    def enforce_equal(self, other: AffineVar) -> None:
        self.x.enforce_equal(other.x)
        self.y.enforce_equal(other.y)

    def __repr__(self) -> str:
        return f"AffineVar({self.curve.name}, {self.value!r})"


def _bits_le(n: int) -> List[bool]:
    return [bool((n >> i) & 1) for i in range(n.bit_length())]


def _check_field(cs: ConstraintSystem, curve: CurveParameters) -> None:
    if cs.field is not curve.base_field:
        raise ValueError(
            f"{curve.name} points need a circuit over {curve.base_field.__name__}, "
            f"got {cs.field.__name__}"
        )
