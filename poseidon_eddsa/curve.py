"""
Twisted-Edwards curve arithmetic.

A curve instance is described by immutable :class:`CurveParameters`;
points are affine :class:`Point` values over the curve's base field,

    a·x² + y² = 1 + d·x²·y²,

with identity  (0, 1)  and negation  (x, y) ↦ (−x, y).  The unified
addition law below is complete whenever *a* is a square and *d* a
non-square; for the curves shipped in :pymod:`curves` it is also exact
on the prime-order subgroup, which is all the signature scheme touches.

Encodings follow arkworks' canonical serialisation so keys and
signatures are byte-compatible with Rust implementations:

- uncompressed:  x ‖ y, each little-endian;
- compressed:    y little-endian, top bit of the last byte set when
  x is lexicographically largest (x > −x).

References
----------
- Bernstein, Birkner, Joye, Lange, Peters (2008). "Twisted Edwards
  Curves."  AFRICACRYPT 2008.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Tuple, Type, Union

from .errors import InvalidData
from .field import PrimeField


# ── curve description ───────────────────────────────────────────────────
@dataclass(frozen=True, eq=False)
class CurveParameters:
    """
    Immutable description of one twisted-Edwards curve instance.

    ``eq=False``: instances are process-wide singletons and compare by
    identity.
    """

    name: str
    base_field: Type[PrimeField]
    scalar_field: Type[PrimeField]
    a: PrimeField
    d: PrimeField
    generator_xy: Tuple[PrimeField, PrimeField]
    cofactor: int
    cofactor_inv: PrimeField = field(init=False)

    def __post_init__(self) -> None:
        inv = self.scalar_field(pow(self.cofactor, -1, self.order))
        object.__setattr__(self, "cofactor_inv", inv)
        gx, gy = self.generator_xy
        if not self.is_on_curve(gx, gy):
            raise ValueError(f"{self.name}: generator is not on the curve")

    # derived values ---------------------------------------------------------
    @property
    def order(self) -> int:
        """Prime order *r* of the main subgroup."""
        return self.scalar_field.field_modulus

    @property
    def generator(self) -> Point:
        gx, gy = self.generator_xy
        return Point(self, gx, gy)

    @property
    def identity(self) -> Point:
        return Point(self, self.base_field.zero(), self.base_field.one())

    @property
    def point_size(self) -> int:
        """Uncompressed encoding length."""
        return 2 * self.base_field.byte_size

    @property
    def compressed_point_size(self) -> int:
        return self.base_field.byte_size

    def is_on_curve(self, x: PrimeField, y: PrimeField) -> bool:
        x2 = x * x
        y2 = y * y
        return self.a * x2 + y2 == 1 + self.d * x2 * y2

    def __repr__(self) -> str:
        return f"CurveParameters({self.name})"


Scalarish = Union[int, PrimeField]


# ── Point  (affine twisted-Edwards group element) ───────────────────────
class Point:
    """
    Affine point on a twisted-Edwards curve.

    The constructor performs no validation; use :meth:`from_xy` or the
    byte decoders for untrusted input.
    """

    __slots__ = ("curve", "x", "y")

    def __init__(self, curve: CurveParameters, x: PrimeField, y: PrimeField):
        self.curve = curve
        self.x = x
        self.y = y

    # constructors -----------------------------------------------------------
    @classmethod
    def from_xy(cls, curve: CurveParameters, x: int, y: int) -> Point:
        """Checked constructor: on-curve and in the prime-order subgroup."""
        F = curve.base_field
        p = cls(curve, F(x), F(y))
        if not p.is_on_curve():
            raise InvalidData("point is not on the curve")
        if not p.is_in_prime_subgroup():
            raise InvalidData("point is not in the prime-order subgroup")
        return p

    @classmethod
    def from_bytes_uncompressed(cls, curve: CurveParameters, data: bytes) -> Point:
        size = curve.base_field.byte_size
        if len(data) != 2 * size:
            raise InvalidData(f"need {2 * size} bytes, got {len(data)}")
        x = curve.base_field.from_bytes(data[:size])
        y = curve.base_field.from_bytes(data[size:])
        return cls.from_xy(curve, x.n, y.n)

    @classmethod
    def from_bytes_compressed(cls, curve: CurveParameters, data: bytes) -> Point:
        F = curve.base_field
        if len(data) != F.byte_size:
            raise InvalidData(f"need {F.byte_size} bytes, got {len(data)}")
        raw = bytearray(data)
        greatest = bool(raw[-1] & 0x80)
        raw[-1] &= 0x7F
        y = F.from_bytes(bytes(raw))

        # x² = (1 − y²) / (a − d·y²)
        y2 = y * y
        den = curve.a - curve.d * y2
        if den.is_zero():
            raise InvalidData("no point with this y-coordinate")
        x = ((1 - y2) / den).sqrt()
        if x is None:
            raise InvalidData("no point with this y-coordinate")
        if x.lexicographically_largest() != greatest:
            x = -x
        return cls.from_xy(curve, x.n, y.n)

    # serialisation ----------------------------------------------------------
    def to_bytes_uncompressed(self) -> bytes:
        return self.x.to_bytes() + self.y.to_bytes()

    def to_bytes_compressed(self) -> bytes:
        raw = bytearray(self.y.to_bytes())
        if self.x.lexicographically_largest():
            raw[-1] |= 0x80
        return bytes(raw)

    def to_bytes(self) -> bytes:
        return self.to_bytes_compressed()

    def xy(self) -> Tuple[PrimeField, PrimeField]:
        return self.x, self.y

    # predicates -------------------------------------------------------------
    def is_identity(self) -> bool:
        return self.x.is_zero() and self.y == 1

    def is_on_curve(self) -> bool:
        return self.curve.is_on_curve(self.x, self.y)

    def is_in_prime_subgroup(self) -> bool:
        """r · P == O  (assumes P is on the curve)."""
        return self._mul_int(self.curve.order).is_identity()

    # group operations -------------------------------------------------------
    def __add__(self, o: Point) -> Point:
        if not isinstance(o, Point):
            return NotImplemented
        c = self.curve
        x1, y1, x2, y2 = self.x, self.y, o.x, o.y
        t = c.d * x1 * x2 * y1 * y2
        x3 = (x1 * y2 + y1 * x2) / (1 + t)
        y3 = (y1 * y2 - c.a * x1 * x2) / (1 - t)
        return Point(c, x3, y3)

    def double(self) -> Point:
        return self + self

    def __neg__(self) -> Point:
        return Point(self.curve, -self.x, self.y)

    def __sub__(self, o: Point) -> Point:
        return self + (-o)

    def _mul_int(self, k: int) -> Point:
        """Double-and-add with a raw integer (no reduction mod r)."""
        if k < 0:
            return (-self)._mul_int(-k)
        result = self.curve.identity
        base = self
        while k:
            if k & 1:
                result = result + base
            base = base.double()
            k >>= 1
        return result

    def scalar_mul_le(self, bits: Iterable[bool]) -> Point:
        """Multiply by a little-endian bit sequence."""
        result = self.curve.identity
        base = self
        for bit in bits:
            if bit:
                result = result + base
            base = base.double()
        return result

    def __mul__(self, s: Scalarish) -> Point:
        if isinstance(s, PrimeField):
            return self._mul_int(s.n)
        if isinstance(s, int):
            return self._mul_int(s)
        return NotImplemented

    __rmul__ = __mul__

    # comparison / hashing ---------------------------------------------------
    def __eq__(self, o: object) -> bool:
        if not isinstance(o, Point):
            return False
        return self.curve is o.curve and self.x == o.x and self.y == o.y

    def __hash__(self) -> int:
        return hash((self.curve.name, self.x.n, self.y.n))

    def __repr__(self) -> str:
        if self.is_identity():
            return "Point(O)"
        return f"Point(0x{self.x.n:064x})"[:42] + "…)"
