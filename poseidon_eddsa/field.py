"""
Prime-field elements for curve coordinates and scalars.

Arithmetic is delegated to ``py_ecc``'s ``FQ`` element; this module only
specialises it per modulus and adds what the signature scheme needs on
top: canonical little-endian encodings (the same layout arkworks uses, so
byte strings are interchangeable with Rust implementations), square
roots for point decompression, and hashing so elements can live inside
frozen dataclasses.

Each concrete field is a subclass produced by :func:`prime_field`::

    Fq = prime_field(BN254_ORDER, "Fq")
    x = Fq(5) * Fq(7)
"""

from __future__ import annotations

import secrets
from typing import Callable, Dict, Optional, Type

from py_ecc.fields.field_elements import FQ

from .errors import InvalidData


# ── square roots (Tonelli-Shanks) ───────────────────────────────────────
def sqrt_mod(n: int, p: int) -> Optional[int]:
    """
    Return some ``s`` with ``s² ≡ n (mod p)``, or ``None`` if *n* is a
    non-residue.  Which of the two roots comes back is unspecified.
    """
    n %= p
    if n == 0:
        return 0
    if pow(n, (p - 1) // 2, p) != 1:
        return None
    if p % 4 == 3:
        return pow(n, (p + 1) // 4, p)

    # p - 1 = q · 2^s  with q odd
    q, s = p - 1, 0
    while q % 2 == 0:
        q //= 2
        s += 1

    z = 2
    while pow(z, (p - 1) // 2, p) != p - 1:
        z += 1

    m, c, t, r = s, pow(z, q, p), pow(n, q, p), pow(n, (q + 1) // 2, p)
    while t != 1:
        i, t2 = 0, t
        while t2 != 1:
            t2 = t2 * t2 % p
            i += 1
        b = pow(c, 1 << (m - i - 1), p)
        m, c, t, r = i, b * b % p, t * b * b % p, r * b % p
    return r


# ── field element base ──────────────────────────────────────────────────
class PrimeField(FQ):
    """Element of  Z_p  for the subclass's ``field_modulus``."""

    field_modulus: int
    bit_size: int
    byte_size: int

    # constructors -----------------------------------------------------------
    @classmethod
    def from_le_bytes_mod_order(cls, data: bytes) -> PrimeField:
        """Hash-output safe: read little-endian, reduce modulo *p*."""
        return cls(int.from_bytes(data, "little"))

    @classmethod
    def from_bytes(cls, data: bytes) -> PrimeField:
        """Canonical decoding; rejects wrong length and values ≥ p."""
        if len(data) != cls.byte_size:
            raise InvalidData(
                f"need {cls.byte_size} bytes, got {len(data)}"
            )
        v = int.from_bytes(data, "little")
        if v >= cls.field_modulus:
            raise InvalidData("field element out of range")
        return cls(v)

    @classmethod
    def random(cls, rng: Optional[Callable[[int], bytes]] = None) -> PrimeField:
        """Uniform in [0, p-1] via rejection sampling."""
        draw = rng or secrets.token_bytes
        mask = (1 << cls.bit_size) - 1
        while True:
            c = int.from_bytes(draw(cls.byte_size), "little") & mask
            if c < cls.field_modulus:
                return cls(c)

    # serialisation ----------------------------------------------------------
    def to_bytes(self) -> bytes:
        return self.n.to_bytes(self.byte_size, "little")

    def bits_le(self) -> list:
        return [bool((self.n >> i) & 1) for i in range(self.bit_size)]

    # predicates -------------------------------------------------------------
    def is_zero(self) -> bool:
        return self.n == 0

    def lexicographically_largest(self) -> bool:
        """True when  x > −x,  i.e. x lies in the upper half of Z_p."""
        return self.n > (self.field_modulus - 1) // 2

    def sqrt(self) -> Optional[PrimeField]:
        r = sqrt_mod(self.n, self.field_modulus)
        return None if r is None else type(self)(r)

    def inv(self) -> PrimeField:
        if self.n == 0:
            raise ZeroDivisionError("cannot invert zero field element")
        return type(self)(pow(self.n, -1, self.field_modulus))

    # comparison / hashing ---------------------------------------------------
    def __int__(self) -> int:
        return self.n

    def __hash__(self) -> int:
        return hash((self.field_modulus, self.n))

    def __repr__(self) -> str:
        h = hex(self.n)
        name = type(self).__name__
        return f"{name}(0x{h[2:10]}…)" if len(h) > 14 else f"{name}({h})"


_FIELDS: Dict[int, Type[PrimeField]] = {}


def prime_field(modulus: int, name: str = "Fp") -> Type[PrimeField]:
    """
    Return the ``PrimeField`` subclass for *modulus*.

    Subclasses are memoised per modulus so two curves sharing a base
    field (Baby-JubJub and its twist) also share the element type.
    """
    cls = _FIELDS.get(modulus)
    if cls is None:
        bits = modulus.bit_length()
        cls = type(name, (PrimeField,), {
            "field_modulus": modulus,
            "bit_size": bits,
            "byte_size": (bits + 7) // 8,
        })
        _FIELDS[modulus] = cls
    return cls
